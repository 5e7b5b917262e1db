"""
CLMM Periphery Configuration

Values are read from environment variables (prefix CLMM_) at import time.
Every component that consumes a configured value also accepts an explicit
override, so tests and embedders never need to touch the environment.
"""

from __future__ import annotations

import logging
import os
from enum import Enum

from eth_utils import is_address, to_checksum_address

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class NetworkType(Enum):
    TESTNET = "testnet"
    MAINNET = "mainnet"


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Canonical deployer and pool template hash for CREATE2 pool derivation
DEFAULT_POOL_DEPLOYER = "0x1F98431c8aD98523631AE4a59f267346ea31F984"
DEFAULT_POOL_INIT_CODE_HASH = "0xe34f199b19b2b4f47f68442619d555527d244f78a3297ea89325f843f87b8b54"


def _get_address(env_var: str, default: str | None) -> str | None:
    """Read an address from the environment and return it checksummed."""
    value = os.getenv(env_var, "").strip()
    if not value:
        return default
    if not is_address(value):
        raise ConfigurationError(
            f"{env_var} is not a valid address: {value!r}",
            details={"env_var": env_var},
        )
    return to_checksum_address(value)


def _get_hash(env_var: str, default: str) -> bytes:
    """Read a 32-byte hex hash from the environment."""
    value = os.getenv(env_var, "").strip() or default
    hex_part = value[2:] if value.lower().startswith("0x") else value
    try:
        digest = bytes.fromhex(hex_part)
    except ValueError:
        raise ConfigurationError(f"{env_var} is not hex: {value!r}", details={"env_var": env_var})
    if len(digest) != 32:
        raise ConfigurationError(
            f"{env_var} must be 32 bytes, got {len(digest)}",
            details={"env_var": env_var},
        )
    return digest


def _get_level(env_var: str, default: str) -> str:
    level = os.getenv(env_var, default).strip().upper() or default
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f"{env_var} is not a logging level: {level!r}")
    return level


NETWORK = os.getenv("CLMM_NETWORK", "testnet")  # Default to testnet for safety

POOL_DEPLOYER = _get_address("CLMM_POOL_DEPLOYER", DEFAULT_POOL_DEPLOYER)
POOL_INIT_CODE_HASH = _get_hash("CLMM_POOL_INIT_CODE_HASH", DEFAULT_POOL_INIT_CODE_HASH)
WRAPPED_NATIVE = _get_address("CLMM_WRAPPED_NATIVE", None)

LOG_LEVEL = _get_level("CLMM_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("CLMM_LOG_FILE", "").strip() or None
LOG_JSON = os.getenv("CLMM_LOG_JSON", "1").strip() == "1"

if NETWORK.lower() not in {n.value for n in NetworkType}:
    raise ConfigurationError(f"CLMM_NETWORK must be testnet or mainnet, got {NETWORK!r}")

if NETWORK.lower() == NetworkType.MAINNET.value and WRAPPED_NATIVE is None:
    logger.warning(
        "CLMM_WRAPPED_NATIVE not set on mainnet; native-currency payments are disabled",
        extra={"event": "config.wrapped_native_missing"},
    )


class Config:
    """Resolved configuration for the running process."""

    NETWORK_TYPE = NetworkType(NETWORK.lower())
    POOL_DEPLOYER = POOL_DEPLOYER
    POOL_INIT_CODE_HASH = POOL_INIT_CODE_HASH
    WRAPPED_NATIVE = WRAPPED_NATIVE
    LOG_LEVEL = LOG_LEVEL
    LOG_FILE = LOG_FILE
    LOG_JSON = LOG_JSON
