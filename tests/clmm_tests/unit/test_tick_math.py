"""
Tick <-> sqrt price conversion tests.
"""

import pytest

from clmm.core.defi.full_math import Q96
from clmm.core.defi.tick_math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    validate_ticks,
)
from clmm.core.exceptions import InvalidTickRangeError


class TestSqrtRatioAtTick:
    def test_tick_zero_is_price_one(self):
        assert get_sqrt_ratio_at_tick(0) == Q96

    def test_bounds(self):
        assert get_sqrt_ratio_at_tick(MIN_TICK) == MIN_SQRT_RATIO
        assert get_sqrt_ratio_at_tick(MAX_TICK) == MAX_SQRT_RATIO

    @pytest.mark.parametrize(
        "tick,expected",
        [
            (1, 79232123823359799118286999568),
            (-1, 79224201403219477170569942574),
            (60, 79466191966197645195421774833),
            (-60, 78990846045029531151608375686),
            (100, 79625275426524748796330556128),
            (-100, 78833030112140176575862854579),
        ],
    )
    def test_known_values(self, tick, expected):
        assert get_sqrt_ratio_at_tick(tick) == expected

    def test_monotonic(self):
        ticks = [MIN_TICK, -100000, -60, -1, 0, 1, 60, 100000, MAX_TICK]
        ratios = [get_sqrt_ratio_at_tick(t) for t in ticks]
        assert ratios == sorted(ratios)
        assert len(set(ratios)) == len(ratios)

    @pytest.mark.parametrize("tick", [MIN_TICK - 1, MAX_TICK + 1])
    def test_out_of_range(self, tick):
        with pytest.raises(InvalidTickRangeError):
            get_sqrt_ratio_at_tick(tick)


class TestTickAtSqrtRatio:
    @pytest.mark.parametrize("tick", [MIN_TICK, -887, -60, -1, 0, 1, 60, 887, MAX_TICK - 1])
    def test_inverts_exact_ratios(self, tick):
        assert get_tick_at_sqrt_ratio(get_sqrt_ratio_at_tick(tick)) == tick

    def test_between_ticks_rounds_down(self):
        assert get_tick_at_sqrt_ratio(get_sqrt_ratio_at_tick(60) - 1) == 59

    def test_max_ratio_is_exclusive(self):
        with pytest.raises(InvalidTickRangeError):
            get_tick_at_sqrt_ratio(MAX_SQRT_RATIO)
        with pytest.raises(InvalidTickRangeError):
            get_tick_at_sqrt_ratio(MIN_SQRT_RATIO - 1)


class TestValidateTicks:
    def test_valid_range(self):
        validate_ticks(-60, 60)

    @pytest.mark.parametrize("lower,upper", [(60, 60), (60, -60)])
    def test_reversed_or_empty(self, lower, upper):
        with pytest.raises(InvalidTickRangeError, match="less than"):
            validate_ticks(lower, upper)

    def test_out_of_bounds(self):
        with pytest.raises(InvalidTickRangeError, match="out of range"):
            validate_ticks(MIN_TICK - 1, 0)
