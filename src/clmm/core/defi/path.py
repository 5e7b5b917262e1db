"""
Multi-hop swap path encoding.

A path is the packed concatenation token0 | fee0 | token1 | fee1 | token2 ...
with 20-byte tokens and 3-byte big-endian fees, so its length is always
20 + 23 * k for k hops. Exact-output paths are encoded from the output token
back to the input token.
"""

from __future__ import annotations

from typing import Sequence

from eth_utils import to_canonical_address, to_checksum_address

from ..exceptions import InputValidationError, PathBoundsError

ADDR_SIZE = 20
FEE_SIZE = 3
# Offset of the next token (one token + one fee)
NEXT_OFFSET = ADDR_SIZE + FEE_SIZE
# Length of a self-contained single-pool segment
POP_OFFSET = NEXT_OFFSET + ADDR_SIZE
# Shortest path that spans two pools
MULTIPLE_POOLS_MIN_LENGTH = POP_OFFSET + NEXT_OFFSET

MAX_FEE = (1 << 24) - 1


def _require_length(path: bytes, required: int, operation: str) -> None:
    if len(path) < required:
        raise PathBoundsError(
            f"{operation}: path too short ({len(path)} < {required} bytes)",
            length=len(path),
            required=required,
        )


def encode_path(tokens: Sequence[str], fees: Sequence[int]) -> bytes:
    """
    Pack tokens and fees into a path.

    Args:
        tokens: Hop tokens in path order (k + 1 entries)
        fees: Fee tier of each hop (k entries)

    Returns:
        Encoded path bytes
    """
    if len(tokens) < 2 or len(fees) != len(tokens) - 1:
        raise InputValidationError(
            "Path needs k + 1 tokens for k fees",
            details={"tokens": len(tokens), "fees": len(fees)},
        )

    out = bytearray()
    for i, token in enumerate(tokens):
        out += to_canonical_address(token)
        if i < len(fees):
            fee = fees[i]
            if not 0 <= fee <= MAX_FEE:
                raise InputValidationError(f"Fee {fee} does not fit in 24 bits")
            out += fee.to_bytes(FEE_SIZE, "big")
    return bytes(out)


def validate_path(path: bytes) -> None:
    """Reject paths that are not exactly 20 + 23 * k bytes for k >= 1."""
    _require_length(path, POP_OFFSET, "validate_path")
    if (len(path) - ADDR_SIZE) % NEXT_OFFSET:
        raise PathBoundsError(
            f"Malformed path length {len(path)}",
            length=len(path),
            required=ADDR_SIZE + NEXT_OFFSET * num_pools(path),
        )


def has_multiple_pools(path: bytes) -> bool:
    """True if the path spans two or more pools."""
    return len(path) >= MULTIPLE_POOLS_MIN_LENGTH


def num_pools(path: bytes) -> int:
    """Number of pools (hops) in the path."""
    _require_length(path, ADDR_SIZE, "num_pools")
    return (len(path) - ADDR_SIZE) // NEXT_OFFSET


def decode_first_pool(path: bytes) -> tuple[str, str, int]:
    """
    Decode the first hop.

    Returns:
        (token_a, token_b, fee) in path order
    """
    _require_length(path, POP_OFFSET, "decode_first_pool")
    token_a = to_checksum_address(path[:ADDR_SIZE])
    fee = int.from_bytes(path[ADDR_SIZE:NEXT_OFFSET], "big")
    token_b = to_checksum_address(path[NEXT_OFFSET:POP_OFFSET])
    return token_a, token_b, fee


def get_first_pool(path: bytes) -> bytes:
    """The self-contained segment describing the first hop."""
    _require_length(path, POP_OFFSET, "get_first_pool")
    return path[:POP_OFFSET]


def skip_token(path: bytes) -> bytes:
    """Drop the first token and fee; the result starts at the next hop's input."""
    _require_length(path, NEXT_OFFSET, "skip_token")
    return path[NEXT_OFFSET:]
