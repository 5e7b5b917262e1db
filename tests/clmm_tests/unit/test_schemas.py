"""
Call parameter validation tests.
"""

import pytest
from pydantic import ValidationError

from clmm.core.defi.full_math import MAX_INT256, MAX_UINT256
from clmm.core.defi.schemas import CollectParams, ExactInputSingleParams, ExactOutputSingleParams, MintParams
from clmm.core.defi.tick_math import MAX_TICK

from clmm_support import BOB, TOKEN_A, TOKEN_B


def test_addresses_are_checksummed():
    params = ExactInputSingleParams(
        token_in=TOKEN_A.lower(), token_out=TOKEN_B, fee=3000, recipient=BOB.lower(), amount_in=1
    )
    assert params.token_in == TOKEN_A
    assert params.recipient == BOB


def test_invalid_address_rejected():
    with pytest.raises(ValidationError, match="not an address"):
        ExactInputSingleParams(token_in="0x1234", token_out=TOKEN_B, fee=3000, recipient=BOB, amount_in=1)


def test_fee_must_fit_uint24():
    with pytest.raises(ValidationError):
        ExactInputSingleParams(token_in=TOKEN_A, token_out=TOKEN_B, fee=1 << 24, recipient=BOB, amount_in=1)


def test_swap_amount_must_fit_int256():
    with pytest.raises(ValidationError):
        ExactInputSingleParams(
            token_in=TOKEN_A, token_out=TOKEN_B, fee=3000, recipient=BOB, amount_in=MAX_INT256 + 1
        )


def test_exact_output_defaults():
    params = ExactOutputSingleParams(token_in=TOKEN_A, token_out=TOKEN_B, fee=3000, recipient=BOB, amount_out=5)
    assert params.amount_in_maximum == MAX_UINT256
    assert params.sqrt_price_limit_x96 == 0


def test_tick_bounds():
    with pytest.raises(ValidationError):
        MintParams(
            token0=TOKEN_A,
            token1=TOKEN_B,
            fee=3000,
            tick_lower=-60,
            tick_upper=MAX_TICK + 1,
            amount0_desired=1,
            amount1_desired=1,
            recipient=BOB,
        )


def test_params_are_frozen():
    params = CollectParams(token_id=1, recipient=BOB, amount0_max=1, amount1_max=1)
    with pytest.raises(ValidationError):
        params.amount0_max = 5


def test_token_id_positive():
    with pytest.raises(ValidationError):
        CollectParams(token_id=0, recipient=BOB, amount0_max=1, amount1_max=1)
