"""
Swap quoter.

Quotes are produced by executing the real swap against the pool inside
``Chain.simulate()`` and aborting from the swap callback with the amounts the
pool reported. Nothing is paid and every state change is discarded, so a
quote can be requested at any time, including from inside another call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..exceptions import InputValidationError, PartialFillError, StateConsistencyError, ZeroAmountError
from .full_math import to_int256
from .path import decode_first_pool, encode_path, has_multiple_pools, skip_token, validate_path
from .payments import PeripheryPayments
from .pool_address import address_lt, get_pool_key, verify_callback
from .swap_router import default_price_limit

logger = logging.getLogger(__name__)


class QuoteResult(Exception):
    """Raised from the quote callback to unwind the simulated swap."""

    def __init__(self, amount: int) -> None:
        super().__init__(amount)
        self.amount = amount


@dataclass(frozen=True)
class QuoteCallbackData:
    path: bytes
    # Exact-output quotes without a price limit must fill completely
    amount_out_expected: int | None = None


class Quoter(PeripheryPayments):
    """Off-chain style quotes for single and multi-hop swaps."""

    def swap_callback(self, sender: str, amount0_delta: int, amount1_delta: int, data: QuoteCallbackData) -> None:
        if amount0_delta <= 0 and amount1_delta <= 0:
            raise InputValidationError("Swaps entirely within zero-liquidity regions are not supported")
        if not isinstance(data, QuoteCallbackData):
            raise InputValidationError("Unexpected quote callback data")

        token_a, token_b, fee = decode_first_pool(data.path)
        verify_callback(self.deployer, token_a, token_b, fee, sender, self.init_code_hash)

        if amount0_delta > 0:
            is_exact_input = address_lt(token_a, token_b)
            amount_to_pay, amount_received = amount0_delta, -amount1_delta
        else:
            is_exact_input = address_lt(token_b, token_a)
            amount_to_pay, amount_received = amount1_delta, -amount0_delta

        if is_exact_input:
            raise QuoteResult(amount_received)
        if data.amount_out_expected is not None and amount_received != data.amount_out_expected:
            raise PartialFillError(
                "Pool cannot fill the requested output",
                details={"requested": data.amount_out_expected, "received": amount_received},
            )
        raise QuoteResult(amount_to_pay)

    def _simulate_swap(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_specified: int,
        sqrt_price_limit_x96: int,
        data: QuoteCallbackData,
    ) -> int:
        zero_for_one = address_lt(token_in, token_out)
        pool = self.get_pool(get_pool_key(token_in, token_out, fee))
        try:
            with self.chain.simulate():
                pool.swap(
                    self.address,
                    self.address,
                    zero_for_one,
                    amount_specified,
                    sqrt_price_limit_x96 or default_price_limit(zero_for_one),
                    data,
                )
        except QuoteResult as result:
            return result.amount
        raise StateConsistencyError("Pool returned without invoking the swap callback")

    def quote_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
        sqrt_price_limit_x96: int = 0,
    ) -> int:
        """Output the pool would deliver for amount_in."""
        if amount_in == 0:
            raise ZeroAmountError("amount_in must be nonzero")
        return self._simulate_swap(
            token_in,
            token_out,
            fee,
            to_int256(amount_in),
            sqrt_price_limit_x96,
            QuoteCallbackData(path=encode_path([token_in, token_out], [fee])),
        )

    def quote_exact_input(self, path: bytes, amount_in: int) -> int:
        """Output of an exact-input swap along path, hop by hop."""
        validate_path(path)
        amount = amount_in
        while True:
            token_in, token_out, fee = decode_first_pool(path)
            amount = self.quote_exact_input_single(token_in, token_out, fee, amount)
            if not has_multiple_pools(path):
                break
            path = skip_token(path)
        logger.debug("Quoted exact input", extra={"event": "quoter.exact_input", "amount_in": amount_in, "amount_out": amount})
        return amount

    def quote_exact_output_single(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_out: int,
        sqrt_price_limit_x96: int = 0,
    ) -> int:
        """Input the pool would require to deliver exactly amount_out."""
        if amount_out == 0:
            raise ZeroAmountError("amount_out must be nonzero")
        return self._simulate_swap(
            token_in,
            token_out,
            fee,
            -to_int256(amount_out),
            sqrt_price_limit_x96,
            QuoteCallbackData(
                path=encode_path([token_out, token_in], [fee]),
                amount_out_expected=None if sqrt_price_limit_x96 else amount_out,
            ),
        )

    def quote_exact_output(self, path: bytes, amount_out: int) -> int:
        """Input of an exact-output swap along a reversed path (output token first)."""
        validate_path(path)
        amount = amount_out
        while True:
            token_out, token_in, fee = decode_first_pool(path)
            amount = self.quote_exact_output_single(token_in, token_out, fee, amount)
            if not has_multiple_pools(path):
                break
            path = skip_token(path)
        logger.debug("Quoted exact output", extra={"event": "quoter.exact_output", "amount_out": amount_out, "amount_in": amount})
        return amount
