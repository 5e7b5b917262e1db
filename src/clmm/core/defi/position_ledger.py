"""
Position Ledger.

Wraps concentrated-liquidity positions held in pools as numbered records
owned by end users. The ledger is the on-pool owner of every position; each
record tracks the liquidity the user contributed, the fee growth snapshot it
was last settled at, and the tokens owed to it.

Lifecycle of a record:
- mint: open a new position and pay the pool from the minter
- increase_liquidity: add to an existing position (anyone may fund it)
- decrease_liquidity: remove liquidity; proceeds become owed, nothing moves
- collect: transfer owed tokens (fees plus withdrawn principal) out
- burn: delete a position that holds nothing
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Dict

from eth_utils import to_checksum_address

from ..exceptions import (
    InputValidationError,
    InsufficientLiquidityError,
    NotApprovedError,
    PositionNotClearedError,
    PositionNotFoundError,
    TooLittleReceivedError,
    ZeroAmountError,
)
from .full_math import Q128, add_uint128, mul_div, sub_uint256_wrapping, to_uint128
from .liquidity_amounts import get_amounts_for_liquidity, get_liquidity_for_amounts
from .payments import PaymentSettlement, PeripheryPayments
from .pool_address import PoolKey, compute_position_key, same_address
from .pool_service import PoolService
from .schemas import CollectParams, DecreaseLiquidityParams, IncreaseLiquidityParams, MintParams
from .tick_math import get_sqrt_ratio_at_tick, validate_ticks

logger = logging.getLogger(__name__)


@dataclass
class Position:
    """A user's claim on liquidity the ledger holds in one pool range."""

    owner: str
    pool_key: PoolKey
    tick_lower: int
    tick_upper: int
    liquidity: int = 0
    fee_growth_inside0_last_x128: int = 0
    fee_growth_inside1_last_x128: int = 0
    tokens_owed0: int = 0
    tokens_owed1: int = 0
    operator: str | None = None


@dataclass(frozen=True)
class MintCallbackData:
    pool_key: PoolKey
    payer: str


class PositionLedger(PeripheryPayments):
    """
    Ledger of liquidity positions.

    Position ids start at 1 and are never reused. Pool keys are also cached
    under small sequential ids (0 is never assigned) so callers can look a
    pool up by id.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._positions: dict[int, Position] = {}
        self.next_id = 1
        self.pool_ids: dict[str, int] = {}
        self.pool_id_to_key: dict[int, PoolKey] = {}
        self.next_pool_id = 1

    # ==================== Views ====================

    def positions(self, token_id: int) -> Position:
        """A copy of the position record."""
        return dataclasses.replace(self._get_position(token_id))

    def owner_of(self, token_id: int) -> str:
        return self._get_position(token_id).owner

    def pool_key_for_id(self, pool_id: int) -> PoolKey:
        key = self.pool_id_to_key.get(pool_id)
        if key is None:
            raise InputValidationError(f"Unknown pool id {pool_id}")
        return key

    def position_value(self, token_id: int) -> Dict[str, int]:
        """
        Principal and fees a position would yield right now.

        Principal is priced at the pool's current sqrt price. Fees are the
        owed balance plus growth recorded by the pool since the last
        settlement; growth the pool has not yet attributed to the position
        is not included.
        """
        position = self._get_position(token_id)
        pool = self.get_pool(position.pool_key)
        amount0, amount1 = get_amounts_for_liquidity(
            pool.current_price(),
            get_sqrt_ratio_at_tick(position.tick_lower),
            get_sqrt_ratio_at_tick(position.tick_upper),
            position.liquidity,
        )
        pending0, pending1 = self._pending_fees(position, pool)
        return {
            "amount0": amount0,
            "amount1": amount1,
            "fees0": position.tokens_owed0 + pending0,
            "fees1": position.tokens_owed1 + pending1,
        }

    def is_approved_or_owner(self, account: str, token_id: int) -> bool:
        position = self._get_position(token_id)
        if same_address(account, position.owner):
            return True
        return position.operator is not None and same_address(account, position.operator)

    # ==================== Approval ====================

    def approve(self, caller: str, spender: str, token_id: int) -> None:
        """Let spender decrease, collect and burn on the owner's behalf."""
        position = self._get_position(token_id)
        if not same_address(caller, position.owner):
            raise NotApprovedError("Only the owner may approve", details={"token_id": token_id})
        position.operator = to_checksum_address(spender)
        logger.info(
            "Position operator approved",
            extra={"event": "ledger.approve", "token_id": token_id, "operator": position.operator},
        )

    # ==================== Lifecycle ====================

    def mint(self, caller: str, params: MintParams, value: int = 0) -> tuple[int, int, int, int]:
        """
        Open a new position.

        Returns:
            (token_id, liquidity, amount0, amount1)
        """
        pool_key = PoolKey(params.token0, params.token1, params.fee)
        with self._top_level_call(caller, value):
            liquidity, amount0, amount1, pool = self._add_liquidity(
                caller,
                pool_key,
                params.tick_lower,
                params.tick_upper,
                params.amount0_desired,
                params.amount1_desired,
                params.amount0_min,
                params.amount1_min,
            )
            fee_growth0, fee_growth1 = pool.position_fee_growth(
                compute_position_key(self.address, params.tick_lower, params.tick_upper)
            )

            token_id = self.next_id
            self.next_id += 1
            self._cache_pool_key(pool.address, pool_key)
            self._positions[token_id] = Position(
                owner=params.recipient,
                pool_key=pool_key,
                tick_lower=params.tick_lower,
                tick_upper=params.tick_upper,
                liquidity=liquidity,
                fee_growth_inside0_last_x128=fee_growth0,
                fee_growth_inside1_last_x128=fee_growth1,
            )

        logger.info(
            "Position minted",
            extra={
                "event": "ledger.mint",
                "token_id": token_id,
                "owner": params.recipient,
                "pool": pool.address,
                "liquidity": liquidity,
                "amount0": amount0,
                "amount1": amount1,
            },
        )
        return token_id, liquidity, amount0, amount1

    def increase_liquidity(
        self, caller: str, params: IncreaseLiquidityParams, value: int = 0
    ) -> tuple[int, int, int]:
        """
        Add liquidity to an existing position, paid by caller.

        Returns:
            (liquidity_added, amount0, amount1)
        """
        with self._top_level_call(caller, value):
            position = self._get_position(params.token_id)
            liquidity, amount0, amount1, pool = self._add_liquidity(
                caller,
                position.pool_key,
                position.tick_lower,
                position.tick_upper,
                params.amount0_desired,
                params.amount1_desired,
                params.amount0_min,
                params.amount1_min,
            )
            # Settle fees on the old liquidity before it grows
            self._accrue_fees(position, pool)
            position.liquidity = to_uint128(position.liquidity + liquidity)

        logger.info(
            "Liquidity increased",
            extra={
                "event": "ledger.increase_liquidity",
                "token_id": params.token_id,
                "liquidity": liquidity,
                "amount0": amount0,
                "amount1": amount1,
            },
        )
        return liquidity, amount0, amount1

    def decrease_liquidity(self, caller: str, params: DecreaseLiquidityParams) -> tuple[int, int]:
        """
        Remove liquidity; the withdrawn amounts are added to tokens owed.

        Returns:
            (amount0, amount1) released by the pool
        """
        if params.liquidity == 0:
            raise ZeroAmountError("liquidity must be nonzero")

        with self._top_level_call(caller):
            position = self._require_approved(caller, params.token_id)
            if position.liquidity < params.liquidity:
                raise InsufficientLiquidityError(
                    "Not enough liquidity in position",
                    details={"token_id": params.token_id, "liquidity": position.liquidity, "requested": params.liquidity},
                )

            pool = self.get_pool(position.pool_key)
            amount0, amount1 = pool.burn(self.address, position.tick_lower, position.tick_upper, params.liquidity)
            if amount0 < params.amount0_min or amount1 < params.amount1_min:
                raise TooLittleReceivedError(
                    "Price slippage check",
                    details={"amount0": amount0, "amount1": amount1},
                )

            self._accrue_fees(position, pool)
            position.tokens_owed0 = add_uint128(position.tokens_owed0, amount0)
            position.tokens_owed1 = add_uint128(position.tokens_owed1, amount1)
            position.liquidity -= params.liquidity

        logger.info(
            "Liquidity decreased",
            extra={
                "event": "ledger.decrease_liquidity",
                "token_id": params.token_id,
                "liquidity": params.liquidity,
                "amount0": amount0,
                "amount1": amount1,
            },
        )
        return amount0, amount1

    def collect(self, caller: str, params: CollectParams) -> tuple[int, int]:
        """
        Transfer up to the requested owed amounts to the recipient.

        The zero-address recipient keeps the tokens in the ledger.

        Returns:
            (amount0, amount1) transferred by the pool
        """
        if params.amount0_max == 0 and params.amount1_max == 0:
            raise ZeroAmountError("Nothing requested")

        with self._top_level_call(caller):
            position = self._require_approved(caller, params.token_id)
            recipient = self._resolve_recipient(params.recipient)
            pool = self.get_pool(position.pool_key)

            if position.liquidity > 0:
                # Zero burn makes the pool bring its fee growth up to date
                pool.burn(self.address, position.tick_lower, position.tick_upper, 0)
                self._accrue_fees(position, pool)

            amount0_collect = min(params.amount0_max, position.tokens_owed0)
            amount1_collect = min(params.amount1_max, position.tokens_owed1)
            amount0, amount1 = pool.collect(
                self.address,
                recipient,
                position.tick_lower,
                position.tick_upper,
                amount0_collect,
                amount1_collect,
            )
            position.tokens_owed0 -= amount0_collect
            position.tokens_owed1 -= amount1_collect

        logger.info(
            "Fees collected",
            extra={
                "event": "ledger.collect",
                "token_id": params.token_id,
                "recipient": recipient,
                "amount0": amount0,
                "amount1": amount1,
            },
        )
        return amount0, amount1

    def burn(self, caller: str, token_id: int) -> None:
        """Delete a position with no liquidity and nothing owed."""
        with self._top_level_call(caller):
            position = self._require_approved(caller, token_id)
            if position.liquidity or position.tokens_owed0 or position.tokens_owed1:
                raise PositionNotClearedError(
                    "Not cleared",
                    details={
                        "token_id": token_id,
                        "liquidity": position.liquidity,
                        "tokens_owed0": position.tokens_owed0,
                        "tokens_owed1": position.tokens_owed1,
                    },
                )
            del self._positions[token_id]

        logger.info("Position burned", extra={"event": "ledger.burn", "token_id": token_id})

    # ==================== Callback ====================

    def mint_callback(self, sender: str, amount0_owed: int, amount1_owed: int, data: MintCallbackData) -> None:
        """Pay the pool for liquidity minted on the ledger's behalf."""
        if not isinstance(data, MintCallbackData):
            raise InputValidationError("Unexpected mint callback data")
        key = data.pool_key
        for token, owed in ((key.token0, amount0_owed), (key.token1, amount1_owed)):
            settlement = PaymentSettlement(
                token=token,
                payer=data.payer,
                amount=owed,
                token_a=key.token0,
                token_b=key.token1,
                fee=key.fee,
            )
            settlement.validate(self.deployer, sender, self.init_code_hash)
            if owed > 0:
                settlement.settle(self)

    # ==================== State ====================

    def snapshot(self) -> Dict[str, Any]:
        return {
            "positions": copy.deepcopy(self._positions),
            "next_id": self.next_id,
            "pool_ids": dict(self.pool_ids),
            "pool_id_to_key": dict(self.pool_id_to_key),
            "next_pool_id": self.next_pool_id,
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        self._positions = copy.deepcopy(snapshot["positions"])
        self.next_id = snapshot["next_id"]
        self.pool_ids = dict(snapshot["pool_ids"])
        self.pool_id_to_key = dict(snapshot["pool_id_to_key"])
        self.next_pool_id = snapshot["next_pool_id"]

    # ==================== Internals ====================

    def _get_position(self, token_id: int) -> Position:
        position = self._positions.get(token_id)
        if position is None:
            raise PositionNotFoundError(f"Invalid token ID {token_id}", details={"token_id": token_id})
        return position

    def _require_approved(self, caller: str, token_id: int) -> Position:
        position = self._get_position(token_id)
        if not self.is_approved_or_owner(caller, token_id):
            raise NotApprovedError("Not approved", details={"token_id": token_id, "caller": caller})
        return position

    def _cache_pool_key(self, pool_address: str, key: PoolKey) -> int:
        pool_id = self.pool_ids.get(pool_address)
        if pool_id is None:
            pool_id = self.next_pool_id
            self.next_pool_id += 1
            self.pool_ids[pool_address] = pool_id
            self.pool_id_to_key[pool_id] = key
        return pool_id

    def _add_liquidity(
        self,
        payer: str,
        pool_key: PoolKey,
        tick_lower: int,
        tick_upper: int,
        amount0_desired: int,
        amount1_desired: int,
        amount0_min: int,
        amount1_min: int,
    ) -> tuple[int, int, int, PoolService]:
        validate_ticks(tick_lower, tick_upper)
        pool = self.get_pool(pool_key)

        liquidity = get_liquidity_for_amounts(
            pool.current_price(),
            get_sqrt_ratio_at_tick(tick_lower),
            get_sqrt_ratio_at_tick(tick_upper),
            amount0_desired,
            amount1_desired,
        )
        if liquidity == 0:
            raise ZeroAmountError(
                "Desired amounts yield zero liquidity",
                details={"amount0_desired": amount0_desired, "amount1_desired": amount1_desired},
            )

        amount0, amount1 = pool.mint(
            self.address,
            self.address,
            tick_lower,
            tick_upper,
            liquidity,
            MintCallbackData(pool_key=pool_key, payer=payer),
        )
        if amount0 < amount0_min or amount1 < amount1_min:
            raise TooLittleReceivedError(
                "Price slippage check",
                details={"amount0": amount0, "amount1": amount1, "amount0_min": amount0_min, "amount1_min": amount1_min},
            )
        return liquidity, amount0, amount1, pool

    def _fees_since_snapshot(self, position: Position, pool: PoolService) -> tuple[int, int, int, int]:
        """Fees earned since the last settlement plus the current fee growth."""
        fee_growth0, fee_growth1 = pool.position_fee_growth(
            compute_position_key(self.address, position.tick_lower, position.tick_upper)
        )
        fees0 = mul_div(sub_uint256_wrapping(fee_growth0, position.fee_growth_inside0_last_x128), position.liquidity, Q128)
        fees1 = mul_div(sub_uint256_wrapping(fee_growth1, position.fee_growth_inside1_last_x128), position.liquidity, Q128)
        return fees0, fees1, fee_growth0, fee_growth1

    def _pending_fees(self, position: Position, pool: PoolService) -> tuple[int, int]:
        fees0, fees1, _, _ = self._fees_since_snapshot(position, pool)
        return fees0, fees1

    def _accrue_fees(self, position: Position, pool: PoolService) -> None:
        """Move fees earned since the last snapshot into tokens owed."""
        fees0, fees1, fee_growth0, fee_growth1 = self._fees_since_snapshot(position, pool)
        position.tokens_owed0 = add_uint128(position.tokens_owed0, fees0)
        position.tokens_owed1 = add_uint128(position.tokens_owed1, fees1)
        position.fee_growth_inside0_last_x128 = fee_growth0
        position.fee_growth_inside1_last_x128 = fee_growth1
