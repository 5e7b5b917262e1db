"""
Execution environment shared by tokens, pools and periphery contracts.

The Chain owns the contract registry (address -> contract), native-currency
balances and the top-level call discipline:

- One top-level call at a time. ``atomic()`` holds a reentrant lock, so a
  second thread blocks until the running call completes, while nested
  callbacks on the same thread re-enter and run in strict stack order.
- All-or-nothing. At the outermost level every registered participant is
  snapshotted before execution; if any exception escapes, every participant
  is restored and the exception is re-raised.
"""

from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Protocol, runtime_checkable

from eth_utils import to_checksum_address

from .exceptions import InsufficientBalanceError, InputValidationError

logger = logging.getLogger(__name__)


@runtime_checkable
class Snapshottable(Protocol):
    """State holder that can be captured and restored by the chain."""

    def snapshot(self) -> Dict[str, Any]:
        ...

    def restore(self, snapshot: Dict[str, Any]) -> None:
        ...


class Chain:
    """
    In-memory chain state with atomic top-level calls.
    """

    def __init__(self) -> None:
        self.contracts: dict[str, Any] = {}
        self.native_balances: dict[str, int] = {}
        self._lock = threading.RLock()
        self._depth = 0

    # ==================== Registry ====================

    def register(self, contract: Any, address: str | None = None) -> str:
        """Register a contract under its address (or the one given)."""
        address = to_checksum_address(address or contract.address)
        if address in self.contracts and self.contracts[address] is not contract:
            raise InputValidationError(f"Address {address} already registered")
        self.contracts[address] = contract
        logger.debug(
            "Contract registered",
            extra={"event": "chain.register", "address": address, "type": type(contract).__name__},
        )
        return address

    def get_contract(self, address: str) -> Any:
        """Look up a registered contract."""
        contract = self.contracts.get(to_checksum_address(address))
        if contract is None:
            raise InputValidationError(f"No contract at {address}")
        return contract

    # ==================== Native Currency ====================

    def native_balance(self, account: str) -> int:
        return self.native_balances.get(to_checksum_address(account), 0)

    def credit_native(self, account: str, amount: int) -> None:
        """Mint native currency to an account (genesis/faucet use)."""
        if amount < 0:
            raise InputValidationError("Amount cannot be negative")
        account = to_checksum_address(account)
        self.native_balances[account] = self.native_balances.get(account, 0) + amount

    def transfer_native(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise InputValidationError("Amount cannot be negative")
        if amount == 0:
            return
        sender = to_checksum_address(sender)
        recipient = to_checksum_address(recipient)
        balance = self.native_balances.get(sender, 0)
        if balance < amount:
            raise InsufficientBalanceError(
                "Insufficient native balance",
                details={"account": sender, "balance": balance, "amount": amount},
            )
        self.native_balances[sender] = balance - amount
        self.native_balances[recipient] = self.native_balances.get(recipient, 0) + amount

    # ==================== Atomic Execution ====================

    @property
    def in_call(self) -> bool:
        return self._depth > 0

    def snapshot(self) -> Dict[str, Any]:
        return {"native_balances": copy.deepcopy(self.native_balances)}

    def restore(self, snapshot: Dict[str, Any]) -> None:
        self.native_balances = copy.deepcopy(snapshot["native_balances"])

    def _participants(self) -> list[Snapshottable]:
        seen: dict[int, Snapshottable] = {id(self): self}
        for contract in self.contracts.values():
            if isinstance(contract, Snapshottable):
                seen.setdefault(id(contract), contract)
        return list(seen.values())

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """
        Run a top-level call as a single non-preemptible unit.

        Nested use on the same thread joins the enclosing call; only the
        outermost scope snapshots and, on failure, restores state.
        """
        with self._lock:
            outermost = self._depth == 0
            snapshots: list[tuple[Snapshottable, Dict[str, Any]]] = []
            if outermost:
                snapshots = [(p, p.snapshot()) for p in self._participants()]
            self._depth += 1
            try:
                yield
            except BaseException as e:
                if outermost:
                    for participant, state in snapshots:
                        participant.restore(state)
                    logger.info(
                        "Call aborted, state restored",
                        extra={
                            "event": "chain.rollback",
                            "error_type": type(e).__name__,
                            "participants": len(snapshots),
                        },
                    )
                raise
            finally:
                self._depth -= 1

    @contextmanager
    def simulate(self) -> Iterator[None]:
        """
        Run a call and always discard its effects, even when nested.

        Used for quoting: the pool executes for real and the result is
        recovered from the exception the caller raises to abort it.
        """
        with self._lock:
            snapshots = [(p, p.snapshot()) for p in self._participants()]
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
                for participant, state in snapshots:
                    participant.restore(state)
