"""
Concentrated-liquidity periphery.

This module provides:
- Liquidity Amounts: amount <-> liquidity conversion over price ranges
- Path: multi-hop path encoding and decoding
- Pool Address: deterministic pool location and callback validation
- Position Ledger: numbered positions with fee accrual
- Swap Router: exact-input/exact-output single and multi-hop swaps
- Quoter: simulated swaps that report amounts without settling
"""

from .liquidity_amounts import (
    get_amount0_for_liquidity,
    get_amount1_for_liquidity,
    get_amounts_for_liquidity,
    get_liquidity_for_amount0,
    get_liquidity_for_amount1,
    get_liquidity_for_amounts,
)
from .path import decode_first_pool, encode_path, get_first_pool, has_multiple_pools, num_pools, skip_token
from .payments import PaymentRequest, PaymentSettlement, PaymentSource, PeripheryPayments
from .pool_address import PoolKey, compute_address, get_pool_key, verify_callback
from .pool_service import MintCallbackReceiver, PoolService, SwapCallbackReceiver
from .position_ledger import MintCallbackData, Position, PositionLedger
from .quoter import Quoter
from .schemas import (
    CollectParams,
    DecreaseLiquidityParams,
    ExactInputParams,
    ExactInputSingleParams,
    ExactOutputParams,
    ExactOutputSingleParams,
    IncreaseLiquidityParams,
    MintParams,
)
from .swap_router import DEFAULT_AMOUNT_IN_CACHED, ExactOutputResult, SwapCallbackData, SwapRouter

__all__ = [
    # Liquidity amounts
    "get_liquidity_for_amount0",
    "get_liquidity_for_amount1",
    "get_liquidity_for_amounts",
    "get_amount0_for_liquidity",
    "get_amount1_for_liquidity",
    "get_amounts_for_liquidity",
    # Path
    "encode_path",
    "decode_first_pool",
    "get_first_pool",
    "has_multiple_pools",
    "num_pools",
    "skip_token",
    # Pool address
    "PoolKey",
    "get_pool_key",
    "compute_address",
    "verify_callback",
    # Pools
    "PoolService",
    "SwapCallbackReceiver",
    "MintCallbackReceiver",
    # Payments
    "PaymentRequest",
    "PaymentSettlement",
    "PaymentSource",
    "PeripheryPayments",
    # Position ledger
    "Position",
    "PositionLedger",
    "MintCallbackData",
    # Swap router
    "SwapRouter",
    "SwapCallbackData",
    "ExactOutputResult",
    "DEFAULT_AMOUNT_IN_CACHED",
    "Quoter",
    # Params
    "ExactInputSingleParams",
    "ExactInputParams",
    "ExactOutputSingleParams",
    "ExactOutputParams",
    "MintParams",
    "IncreaseLiquidityParams",
    "DecreaseLiquidityParams",
    "CollectParams",
]
