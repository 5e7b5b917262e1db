"""
Liquidity <-> token amount conversion.

Given the current sqrt price and a range [sqrt_a, sqrt_b] (all Q64.96):

    L = amount0 * sqrt_a * sqrt_b / (sqrt_b - sqrt_a)    token0 side
    L = amount1 / (sqrt_b - sqrt_a)                       token1 side

Below the range a position is entirely token0, above it entirely token1,
inside it holds both. Sizing liquidity from desired amounts takes the
binding (smaller) candidate so the result never requires more of either
token than was offered. Every product goes through mul_div.
"""

from __future__ import annotations

from ..exceptions import InvalidTickRangeError
from .full_math import Q96, mul_div, to_uint128


def _sorted_range(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int) -> tuple[int, int]:
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_a_x96 == sqrt_ratio_b_x96:
        raise InvalidTickRangeError("Price range is empty")
    if sqrt_ratio_a_x96 <= 0:
        raise InvalidTickRangeError("Sqrt price must be positive")
    return sqrt_ratio_a_x96, sqrt_ratio_b_x96


def get_liquidity_for_amount0(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount0: int) -> int:
    """Liquidity received for amount0 of token0 over the whole range."""
    sqrt_a, sqrt_b = _sorted_range(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    intermediate = mul_div(sqrt_a, sqrt_b, Q96)
    return to_uint128(mul_div(amount0, intermediate, sqrt_b - sqrt_a))


def get_liquidity_for_amount1(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount1: int) -> int:
    """Liquidity received for amount1 of token1 over the whole range."""
    sqrt_a, sqrt_b = _sorted_range(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    return to_uint128(mul_div(amount1, Q96, sqrt_b - sqrt_a))


def get_liquidity_for_amounts(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int,
    amount1: int,
) -> int:
    """
    Maximum liquidity mintable from (amount0, amount1) at the current price.

    Args:
        sqrt_ratio_x96: Current pool sqrt price
        sqrt_ratio_a_x96: One range boundary
        sqrt_ratio_b_x96: The other range boundary
        amount0: Token0 offered
        amount1: Token1 offered

    Returns:
        Liquidity as uint128
    """
    sqrt_a, sqrt_b = _sorted_range(sqrt_ratio_a_x96, sqrt_ratio_b_x96)

    if sqrt_ratio_x96 <= sqrt_a:
        return get_liquidity_for_amount0(sqrt_a, sqrt_b, amount0)
    if sqrt_ratio_x96 < sqrt_b:
        liquidity0 = get_liquidity_for_amount0(sqrt_ratio_x96, sqrt_b, amount0)
        liquidity1 = get_liquidity_for_amount1(sqrt_a, sqrt_ratio_x96, amount1)
        return min(liquidity0, liquidity1)
    return get_liquidity_for_amount1(sqrt_a, sqrt_b, amount1)


def get_amount0_for_liquidity(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int) -> int:
    """Token0 represented by liquidity over the whole range (rounded down)."""
    sqrt_a, sqrt_b = _sorted_range(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    return mul_div(liquidity << 96, sqrt_b - sqrt_a, sqrt_b) // sqrt_a


def get_amount1_for_liquidity(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int) -> int:
    """Token1 represented by liquidity over the whole range (rounded down)."""
    sqrt_a, sqrt_b = _sorted_range(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    return mul_div(liquidity, sqrt_b - sqrt_a, Q96)


def get_amounts_for_liquidity(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
) -> tuple[int, int]:
    """Token amounts (amount0, amount1) represented by liquidity at the current price."""
    sqrt_a, sqrt_b = _sorted_range(sqrt_ratio_a_x96, sqrt_ratio_b_x96)

    if sqrt_ratio_x96 <= sqrt_a:
        return get_amount0_for_liquidity(sqrt_a, sqrt_b, liquidity), 0
    if sqrt_ratio_x96 < sqrt_b:
        return (
            get_amount0_for_liquidity(sqrt_ratio_x96, sqrt_b, liquidity),
            get_amount1_for_liquidity(sqrt_a, sqrt_ratio_x96, liquidity),
        )
    return 0, get_amount1_for_liquidity(sqrt_a, sqrt_b, liquidity)
