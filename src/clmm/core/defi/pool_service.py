"""
Pool service interfaces.

The pool executes swaps, mints, burns and collects and keeps its own price
curve bookkeeping; the periphery only relies on the call contract below.
Callers pass their own address explicitly, and the pool calls back into the
caller's registered contract before ``swap`` and ``mint`` return, handing
back the ``data`` object it was given untouched.

Sign convention for swap deltas: positive means the pool must be paid that
amount, negative means the pool delivered it to the recipient.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PoolService(Protocol):
    """Contract of a single external pool instance."""

    address: str

    def swap(
        self,
        caller: str,
        recipient: str,
        zero_for_one: bool,
        amount_specified: int,
        sqrt_price_limit_x96: int,
        data: Any,
    ) -> tuple[int, int]:
        """Swap; positive amount_specified is exact input, negative exact output."""
        ...

    def mint(
        self,
        caller: str,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        amount: int,
        data: Any,
    ) -> tuple[int, int]:
        """Add liquidity owned by recipient; returns the amounts it was paid."""
        ...

    def burn(self, caller: str, tick_lower: int, tick_upper: int, amount: int) -> tuple[int, int]:
        """Remove caller's liquidity; the amounts become owed, nothing is transferred."""
        ...

    def collect(
        self,
        caller: str,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        amount0_requested: int,
        amount1_requested: int,
    ) -> tuple[int, int]:
        """Transfer up to the requested owed amounts to recipient."""
        ...

    def position_fee_growth(self, position_key: bytes) -> tuple[int, int]:
        """Fee growth inside the position's range as of its last update (Q128.128)."""
        ...

    def current_price(self) -> int:
        """Current sqrt price (Q64.96)."""
        ...


@runtime_checkable
class SwapCallbackReceiver(Protocol):
    def swap_callback(self, sender: str, amount0_delta: int, amount1_delta: int, data: Any) -> None:
        ...


@runtime_checkable
class MintCallbackReceiver(Protocol):
    def mint_callback(self, sender: str, amount0_owed: int, amount1_owed: int, data: Any) -> None:
        ...
