from __future__ import annotations

from typing import Annotated

from eth_utils import is_address, to_checksum_address
from pydantic import AfterValidator, BaseModel, ConfigDict, conint

from .full_math import MAX_INT256, MAX_UINT128, MAX_UINT160, MAX_UINT256
from .tick_math import MAX_TICK, MIN_TICK


def _checksum(value: str) -> str:
    if not is_address(value):
        raise ValueError(f"not an address: {value!r}")
    return to_checksum_address(value)


Address = Annotated[str, AfterValidator(_checksum)]
Uint24 = conint(ge=0, le=2**24 - 1)
Uint128 = conint(ge=0, le=MAX_UINT128)
Uint160 = conint(ge=0, le=MAX_UINT160)
Uint256 = conint(ge=0, le=MAX_UINT256)
# Swap amounts are passed to the pool as int256
SwapAmount = conint(ge=0, le=MAX_INT256)
Tick = conint(ge=MIN_TICK, le=MAX_TICK)
TokenId = conint(gt=0)


class _Params(BaseModel):
    model_config = ConfigDict(frozen=True)


class ExactInputSingleParams(_Params):
    token_in: Address
    token_out: Address
    fee: Uint24
    recipient: Address
    amount_in: SwapAmount
    amount_out_minimum: Uint256 = 0
    sqrt_price_limit_x96: Uint160 = 0


class ExactInputParams(_Params):
    path: bytes
    recipient: Address
    amount_in: SwapAmount
    amount_out_minimum: Uint256 = 0


class ExactOutputSingleParams(_Params):
    token_in: Address
    token_out: Address
    fee: Uint24
    recipient: Address
    amount_out: SwapAmount
    amount_in_maximum: Uint256 = MAX_UINT256
    sqrt_price_limit_x96: Uint160 = 0


class ExactOutputParams(_Params):
    # Encoded output token first
    path: bytes
    recipient: Address
    amount_out: SwapAmount
    amount_in_maximum: Uint256 = MAX_UINT256


class MintParams(_Params):
    token0: Address
    token1: Address
    fee: Uint24
    tick_lower: Tick
    tick_upper: Tick
    amount0_desired: Uint256
    amount1_desired: Uint256
    amount0_min: Uint256 = 0
    amount1_min: Uint256 = 0
    recipient: Address


class IncreaseLiquidityParams(_Params):
    token_id: TokenId
    amount0_desired: Uint256
    amount1_desired: Uint256
    amount0_min: Uint256 = 0
    amount1_min: Uint256 = 0


class DecreaseLiquidityParams(_Params):
    token_id: TokenId
    liquidity: Uint128
    amount0_min: Uint256 = 0
    amount1_min: Uint256 = 0


class CollectParams(_Params):
    token_id: TokenId
    recipient: Address
    amount0_max: Uint128
    amount1_max: Uint128
