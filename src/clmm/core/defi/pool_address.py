"""
Deterministic pool identity.

A pool is identified by the CREATE2 address its deployer gives it:

    keccak256(0xff | deployer | keccak256(abi.encode(token0, token1, fee)) | init_code_hash)[12:]

No state is read or written; the same inputs always derive the same address.
"""

from __future__ import annotations

from dataclasses import dataclass

from Crypto.Hash import keccak
from eth_utils import to_canonical_address, to_checksum_address

from ..config import Config
from ..exceptions import InvalidPoolKeyError, UnauthorizedCallbackError


def keccak256(data: bytes) -> bytes:
    """Compute keccak256 hash (same as Ethereum)."""
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def address_lt(a: str, b: str) -> bool:
    """Address ordering: compares the 20-byte canonical forms."""
    return to_canonical_address(a) < to_canonical_address(b)


def same_address(a: str, b: str) -> bool:
    return to_canonical_address(a) == to_canonical_address(b)


@dataclass(frozen=True)
class PoolKey:
    """Canonical identity of a pool: token0 < token1 and a fee tier."""

    token0: str
    token1: str
    fee: int


def get_pool_key(token_a: str, token_b: str, fee: int) -> PoolKey:
    """Order the pair canonically and return its PoolKey."""
    if address_lt(token_b, token_a):
        token_a, token_b = token_b, token_a
    return PoolKey(to_checksum_address(token_a), to_checksum_address(token_b), fee)


def _encode_pool_key(key: PoolKey) -> bytes:
    # abi.encode(address, address, uint24): three left-padded 32-byte words
    return (
        to_canonical_address(key.token0).rjust(32, b"\x00")
        + to_canonical_address(key.token1).rjust(32, b"\x00")
        + key.fee.to_bytes(32, "big")
    )


def compute_address(deployer: str, key: PoolKey, init_code_hash: bytes | None = None) -> str:
    """
    Derive the pool address for a key.

    Args:
        deployer: Address of the pool deployer (factory)
        key: Canonical pool key
        init_code_hash: Pool template hash, the configured one by default

    Raises:
        InvalidPoolKeyError: If key.token0 is not below key.token1
    """
    if not address_lt(key.token0, key.token1):
        raise InvalidPoolKeyError(
            "Pool key tokens must be ordered token0 < token1",
            details={"token0": key.token0, "token1": key.token1},
        )
    init_code_hash = init_code_hash or Config.POOL_INIT_CODE_HASH

    digest = keccak256(
        b"\xff"
        + to_canonical_address(deployer)
        + keccak256(_encode_pool_key(key))
        + init_code_hash
    )
    return to_checksum_address(digest[12:])


def compute_position_key(owner: str, tick_lower: int, tick_upper: int) -> bytes:
    """Key a pool stores an owner's liquidity under: keccak256(owner | int24 | int24)."""
    return keccak256(
        to_canonical_address(owner)
        + tick_lower.to_bytes(3, "big", signed=True)
        + tick_upper.to_bytes(3, "big", signed=True)
    )


def verify_callback(
    deployer: str,
    token_a: str,
    token_b: str,
    fee: int,
    sender: str,
    init_code_hash: bytes | None = None,
) -> PoolKey:
    """
    Confirm a callback comes from the pool for (token_a, token_b, fee).

    Returns:
        The canonical pool key

    Raises:
        UnauthorizedCallbackError: If sender is not the derived pool address
    """
    key = get_pool_key(token_a, token_b, fee)
    expected = compute_address(deployer, key, init_code_hash)
    if not same_address(expected, sender):
        raise UnauthorizedCallbackError(
            "Callback sender is not the expected pool",
            expected=expected,
            actual=sender,
            details={"token0": key.token0, "token1": key.token1, "fee": fee},
        )
    return key
