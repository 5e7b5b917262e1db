"""
Swap Router.

Routes exact-input and exact-output swaps through one or more pools and pays
each pool from its swap callback.

Exact input walks the path forward: every hop but the last delivers to the
router, which then pays the next pool out of custody.

Exact output walks the path backward from the output token. The pool of the
last hop is swapped first; inside its callback the router swaps the previous
hop with the pool as recipient, and so on until the callback of the first
hop pays the input token from the original payer. The amount paid on that
innermost hop is the total input and is written to the ExactOutputResult
carried in the callback data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..exceptions import (
    InputValidationError,
    PartialFillError,
    ReentrancyError,
    StateConsistencyError,
    TooLittleReceivedError,
    TooMuchRequestedError,
    ZeroAmountError,
)
from .full_math import MAX_UINT256, to_int256
from .path import decode_first_pool, encode_path, get_first_pool, has_multiple_pools, skip_token, validate_path
from .payments import PaymentSettlement, PeripheryPayments
from .pool_address import address_lt, get_pool_key, same_address
from .schemas import ExactInputParams, ExactInputSingleParams, ExactOutputParams, ExactOutputSingleParams
from .tick_math import MAX_SQRT_RATIO, MIN_SQRT_RATIO

logger = logging.getLogger(__name__)

# Value reported while no exact-output swap is in flight
DEFAULT_AMOUNT_IN_CACHED = MAX_UINT256


@dataclass
class ExactOutputResult:
    """Total input of an exact-output chain, set by its innermost callback."""

    amount_in: int = DEFAULT_AMOUNT_IN_CACHED

    @property
    def is_set(self) -> bool:
        return self.amount_in != DEFAULT_AMOUNT_IN_CACHED


@dataclass(frozen=True)
class SwapCallbackData:
    path: bytes
    payer: str
    # Only exact-output swaps carry a result holder
    result: ExactOutputResult | None = None


def default_price_limit(zero_for_one: bool) -> int:
    return MIN_SQRT_RATIO + 1 if zero_for_one else MAX_SQRT_RATIO - 1


class SwapRouter(PeripheryPayments):
    """Stateless router for swapping against pools."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._exact_output: ExactOutputResult | None = None

    @property
    def amount_in_cached(self) -> int:
        """Input amount of the exact-output swap in flight, or the sentinel."""
        if self._exact_output is None:
            return DEFAULT_AMOUNT_IN_CACHED
        return self._exact_output.amount_in

    # ==================== Callback ====================

    def swap_callback(self, sender: str, amount0_delta: int, amount1_delta: int, data: SwapCallbackData) -> None:
        """
        Pay the pool that just swapped.

        Args:
            sender: Address of the calling pool
            amount0_delta: Token0 owed (positive) or delivered (negative) by the pool
            amount1_delta: Token1 owed (positive) or delivered (negative) by the pool
            data: The SwapCallbackData passed to the pool
        """
        if amount0_delta <= 0 and amount1_delta <= 0:
            raise InputValidationError("Swaps entirely within zero-liquidity regions are not supported")
        if not isinstance(data, SwapCallbackData):
            raise InputValidationError("Unexpected swap callback data")

        token_a, token_b, fee = decode_first_pool(data.path)
        if amount0_delta > 0:
            is_exact_input = address_lt(token_a, token_b)
            amount_to_pay = amount0_delta
        else:
            is_exact_input = address_lt(token_b, token_a)
            amount_to_pay = amount1_delta

        # Exact input pays the first path token; exact output paths are
        # reversed so the pool is owed the second one.
        settlement = PaymentSettlement(
            token=token_a if is_exact_input else token_b,
            payer=data.payer,
            amount=amount_to_pay,
            token_a=token_a,
            token_b=token_b,
            fee=fee,
        )
        settlement.validate(self.deployer, sender, self.init_code_hash)

        if is_exact_input:
            settlement.settle(self)
            return

        if data.result is None:
            raise InputValidationError("Exact-output callback without a result holder")

        if has_multiple_pools(data.path):
            # The previous hop pays this pool directly
            self._exact_output_internal(
                amount_to_pay,
                sender,
                0,
                SwapCallbackData(path=skip_token(data.path), payer=data.payer, result=data.result),
            )
        else:
            data.result.amount_in = amount_to_pay
            settlement.settle(self)

    # ==================== Internal Swaps ====================

    def _exact_input_internal(
        self,
        amount_in: int,
        recipient: str,
        sqrt_price_limit_x96: int,
        data: SwapCallbackData,
    ) -> int:
        recipient = self._resolve_recipient(recipient)
        token_in, token_out, fee = decode_first_pool(data.path)
        zero_for_one = address_lt(token_in, token_out)

        pool = self.get_pool(get_pool_key(token_in, token_out, fee))
        amount0, amount1 = pool.swap(
            self.address,
            recipient,
            zero_for_one,
            to_int256(amount_in),
            sqrt_price_limit_x96 or default_price_limit(zero_for_one),
            data,
        )
        return -(amount1 if zero_for_one else amount0)

    def _exact_output_internal(
        self,
        amount_out: int,
        recipient: str,
        sqrt_price_limit_x96: int,
        data: SwapCallbackData,
    ) -> int:
        recipient = self._resolve_recipient(recipient)
        token_out, token_in, fee = decode_first_pool(data.path)
        zero_for_one = address_lt(token_in, token_out)

        pool = self.get_pool(get_pool_key(token_in, token_out, fee))
        amount0_delta, amount1_delta = pool.swap(
            self.address,
            recipient,
            zero_for_one,
            -to_int256(amount_out),
            sqrt_price_limit_x96 or default_price_limit(zero_for_one),
            data,
        )

        if zero_for_one:
            amount_in, amount_out_received = amount0_delta, -amount1_delta
        else:
            amount_in, amount_out_received = amount1_delta, -amount0_delta

        # A price limit may legitimately stop the swap short
        if sqrt_price_limit_x96 == 0 and amount_out_received != amount_out:
            raise PartialFillError(
                "Pool delivered less than the requested output",
                details={"requested": amount_out, "received": amount_out_received},
            )
        return amount_in

    # ==================== Exact Input ====================

    def exact_input_single(self, caller: str, params: ExactInputSingleParams, value: int = 0) -> int:
        """
        Swap amount_in of token_in for as much token_out as possible.

        Returns:
            Amount of token_out delivered to the recipient

        Raises:
            TooLittleReceivedError: If the output is below amount_out_minimum
        """
        if params.amount_in == 0:
            raise ZeroAmountError("amount_in must be nonzero")
        self._require_distinct(params.token_in, params.token_out)

        with self._top_level_call(caller, value):
            amount_out = self._exact_input_internal(
                params.amount_in,
                params.recipient,
                params.sqrt_price_limit_x96,
                SwapCallbackData(
                    path=encode_path([params.token_in, params.token_out], [params.fee]),
                    payer=caller,
                ),
            )
            if amount_out < params.amount_out_minimum:
                raise TooLittleReceivedError(
                    "Too little received",
                    details={"amount_out": amount_out, "minimum": params.amount_out_minimum},
                )

        logger.info(
            "Exact input swap",
            extra={
                "event": "router.exact_input_single",
                "caller": caller,
                "token_in": params.token_in,
                "token_out": params.token_out,
                "fee": params.fee,
                "amount_in": params.amount_in,
                "amount_out": amount_out,
            },
        )
        return amount_out

    def exact_input(self, caller: str, params: ExactInputParams, value: int = 0) -> int:
        """
        Swap amount_in along a multi-hop path for as much output as possible.

        Intermediate hops deliver to the router, which pays the next pool
        from custody.
        """
        if params.amount_in == 0:
            raise ZeroAmountError("amount_in must be nonzero")
        validate_path(params.path)

        with self._top_level_call(caller, value):
            payer = caller
            path = params.path
            amount = params.amount_in
            hops = 0
            while True:
                multiple = has_multiple_pools(path)
                amount = self._exact_input_internal(
                    amount,
                    self.address if multiple else params.recipient,
                    0,
                    SwapCallbackData(path=get_first_pool(path), payer=payer),
                )
                hops += 1
                if not multiple:
                    break
                payer = self.address
                path = skip_token(path)

            if amount < params.amount_out_minimum:
                raise TooLittleReceivedError(
                    "Too little received",
                    details={"amount_out": amount, "minimum": params.amount_out_minimum},
                )

        logger.info(
            "Exact input swap",
            extra={
                "event": "router.exact_input",
                "caller": caller,
                "hops": hops,
                "amount_in": params.amount_in,
                "amount_out": amount,
            },
        )
        return amount

    # ==================== Exact Output ====================

    def exact_output_single(self, caller: str, params: ExactOutputSingleParams, value: int = 0) -> int:
        """
        Swap as little token_in as possible for exactly amount_out of token_out.

        Returns:
            Amount of token_in paid

        Raises:
            TooMuchRequestedError: If the input exceeds amount_in_maximum
            PartialFillError: If no price limit was given and the pool
                delivered less than amount_out
        """
        if params.amount_out == 0:
            raise ZeroAmountError("amount_out must be nonzero")
        self._require_distinct(params.token_in, params.token_out)

        with self._top_level_call(caller, value), self._exact_output_scope() as result:
            amount_in = self._exact_output_internal(
                params.amount_out,
                params.recipient,
                params.sqrt_price_limit_x96,
                SwapCallbackData(
                    path=encode_path([params.token_out, params.token_in], [params.fee]),
                    payer=caller,
                    result=result,
                ),
            )
            if amount_in > params.amount_in_maximum:
                raise TooMuchRequestedError(
                    "Too much requested",
                    details={"amount_in": amount_in, "maximum": params.amount_in_maximum},
                )

        logger.info(
            "Exact output swap",
            extra={
                "event": "router.exact_output_single",
                "caller": caller,
                "token_in": params.token_in,
                "token_out": params.token_out,
                "fee": params.fee,
                "amount_in": amount_in,
                "amount_out": params.amount_out,
            },
        )
        return amount_in

    def exact_output(self, caller: str, params: ExactOutputParams, value: int = 0) -> int:
        """
        Swap along a reversed multi-hop path for exactly amount_out.

        The path starts with the output token. Returns the total input paid.
        """
        if params.amount_out == 0:
            raise ZeroAmountError("amount_out must be nonzero")
        validate_path(params.path)

        with self._top_level_call(caller, value), self._exact_output_scope() as result:
            # Nested hops set amount_in on the shared result; the outermost
            # return value is only the last hop's input.
            self._exact_output_internal(
                params.amount_out,
                params.recipient,
                0,
                SwapCallbackData(path=params.path, payer=caller, result=result),
            )
            if not result.is_set:
                raise StateConsistencyError("Exact-output chain finished without paying its input")
            amount_in = result.amount_in
            if amount_in > params.amount_in_maximum:
                raise TooMuchRequestedError(
                    "Too much requested",
                    details={"amount_in": amount_in, "maximum": params.amount_in_maximum},
                )

        logger.info(
            "Exact output swap",
            extra={
                "event": "router.exact_output",
                "caller": caller,
                "amount_in": amount_in,
                "amount_out": params.amount_out,
            },
        )
        return amount_in

    # ==================== Helpers ====================

    def _exact_output_scope(self) -> "_ExactOutputScope":
        return _ExactOutputScope(self)

    @staticmethod
    def _require_distinct(token_in: str, token_out: str) -> None:
        if same_address(token_in, token_out):
            raise InputValidationError("token_in and token_out must differ")


class _ExactOutputScope:
    """Installs a fresh ExactOutputResult and clears it on every exit path."""

    def __init__(self, router: SwapRouter) -> None:
        self.router = router

    def __enter__(self) -> ExactOutputResult:
        if self.router._exact_output is not None:
            raise ReentrancyError("Exact-output swap already in flight")
        self.router._exact_output = ExactOutputResult()
        return self.router._exact_output

    def __exit__(self, exc_type, exc, tb) -> None:
        self.router._exact_output = None
