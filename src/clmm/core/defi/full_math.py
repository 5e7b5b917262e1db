"""
Full-precision fixed-point arithmetic.

All liquidity and fee math multiplies two uint256 values before dividing.
Python integers are unbounded, so the 512-bit intermediate product never
wraps; what still has to be enforced is the EVM-width contract on inputs and
results, otherwise a value that could not exist on chain would silently
flow into the ledger.
"""

from __future__ import annotations

from ..exceptions import MathOverflowError

# Q64.96 sqrt prices and Q128.128 fee growth
Q96 = 1 << 96
Q128 = 1 << 128

MAX_UINT128 = (1 << 128) - 1
MAX_UINT160 = (1 << 160) - 1
MAX_UINT256 = (1 << 256) - 1
MIN_INT256 = -(1 << 255)
MAX_INT256 = (1 << 255) - 1


def _require_uint256(value: int, name: str) -> None:
    if value < 0 or value > MAX_UINT256:
        raise MathOverflowError(f"{name} outside uint256 range", details={name: value})


def mul_div(a: int, b: int, denominator: int) -> int:
    """
    Calculate floor(a * b / denominator) with full precision.

    Raises:
        MathOverflowError: If the denominator is zero, an operand is not a
            uint256 or the result does not fit in 256 bits
    """
    _require_uint256(a, "a")
    _require_uint256(b, "b")
    _require_uint256(denominator, "denominator")
    if denominator == 0:
        raise MathOverflowError("Division by zero")

    result = (a * b) // denominator
    if result > MAX_UINT256:
        raise MathOverflowError("mul_div result exceeds uint256", details={"result_bits": result.bit_length()})
    return result


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """Calculate ceil(a * b / denominator) with full precision."""
    result = mul_div(a, b, denominator)
    if (a * b) % denominator:
        if result == MAX_UINT256:
            raise MathOverflowError("mul_div_rounding_up result exceeds uint256")
        result += 1
    return result


def to_uint128(value: int) -> int:
    """Downcast to uint128, failing instead of truncating."""
    if value < 0 or value > MAX_UINT128:
        raise MathOverflowError("Value does not fit in uint128", details={"value": value})
    return value


def to_uint160(value: int) -> int:
    if value < 0 or value > MAX_UINT160:
        raise MathOverflowError("Value does not fit in uint160", details={"value": value})
    return value


def to_int256(value: int) -> int:
    """Cast a uint256 amount to a signed int256, failing on overflow."""
    if value < MIN_INT256 or value > MAX_INT256:
        raise MathOverflowError("Value does not fit in int256", details={"value": value})
    return value


def add_uint128(a: int, b: int) -> int:
    """Checked uint128 addition used for owed-token balances."""
    return to_uint128(a + b)


def sub_uint256_wrapping(a: int, b: int) -> int:
    """Subtract modulo 2**256, matching accumulator wrap-around semantics."""
    return (a - b) & MAX_UINT256
