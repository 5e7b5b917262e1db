"""
ERC20 Token Implementation.

In-memory fungible tokens the periphery settles payments in:
- Basic token operations (transfer, approve, transfer_from)
- Owner-restricted minting
- Wrapped native currency (deposit)

Security features:
- Zero address checks
- Balance and allowance underflow prevention
- uint256 amount bounds
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict

from eth_utils import to_checksum_address

from ..defi.pool_address import keccak256
from ..exceptions import InputValidationError, InsufficientBalanceError, NotApprovedError

if TYPE_CHECKING:
    from ..chain_state import Chain

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
MAX_UINT256 = 2**256 - 1


@dataclass
class ERC20Token:
    """
    ERC20 token with balances and allowances held in memory.

    Callers identify themselves explicitly: ``transfer(sender, ...)`` moves
    the sender's own tokens, ``transfer_from(spender, ...)`` spends an
    allowance granted to the spender.
    """

    name: str
    symbol: str
    decimals: int = 18
    address: str = ""
    owner: str = ""

    total_supply: int = 0
    balances: dict[str, int] = field(default_factory=dict)
    allowances: dict[str, dict[str, int]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.address:
            digest = keccak256(f"erc20:{self.name}:{self.symbol}".encode())
            self.address = "0x" + digest[-20:].hex()
        self.address = to_checksum_address(self.address)
        if self.owner:
            self.owner = to_checksum_address(self.owner)

    # ==================== Views ====================

    def balance_of(self, account: str) -> int:
        return self.balances.get(self._normalize(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get(self._normalize(owner), {}).get(self._normalize(spender), 0)

    # ==================== Transfers ====================

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move amount from sender to recipient."""
        self._validate_amount(amount)
        self._validate_address(recipient, "recipient")
        self._move(self._normalize(sender), self._normalize(recipient), amount)
        return True

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        self._validate_amount(amount)
        self._validate_address(spender, "spender")
        owner_norm = self._normalize(owner)
        self.allowances.setdefault(owner_norm, {})[self._normalize(spender)] = amount
        return True

    def transfer_from(self, spender: str, from_addr: str, to_addr: str, amount: int) -> bool:
        """Move amount from from_addr to to_addr using spender's allowance."""
        self._validate_amount(amount)
        self._validate_address(to_addr, "recipient")
        spender_norm = self._normalize(spender)
        from_norm = self._normalize(from_addr)

        current = self.allowance(from_norm, spender_norm)
        if current < amount:
            raise InsufficientBalanceError(
                f"{self.symbol}: insufficient allowance",
                details={"owner": from_norm, "spender": spender_norm, "allowance": current, "amount": amount},
            )
        self._move(from_norm, self._normalize(to_addr), amount)
        if current != MAX_UINT256:
            self.allowances[from_norm][spender_norm] = current - amount
        return True

    def mint(self, minter: str, to: str, amount: int) -> bool:
        """Create tokens; only the owner may mint when an owner is set."""
        self._validate_amount(amount)
        self._validate_address(to, "recipient")
        if self.owner and self._normalize(minter) != self.owner:
            raise NotApprovedError(f"{self.symbol}: caller is not owner")
        to_norm = self._normalize(to)
        self.balances[to_norm] = self.balances.get(to_norm, 0) + amount
        self.total_supply += amount
        return True

    def _move(self, from_addr: str, to_addr: str, amount: int) -> None:
        balance = self.balances.get(from_addr, 0)
        if balance < amount:
            raise InsufficientBalanceError(
                f"{self.symbol}: transfer amount exceeds balance",
                details={"account": from_addr, "balance": balance, "amount": amount},
            )
        self.balances[from_addr] = balance - amount
        self.balances[to_addr] = self.balances.get(to_addr, 0) + amount
        logger.debug(
            "Token transfer",
            extra={"event": "erc20.transfer", "token": self.symbol, "from": from_addr, "to": to_addr, "amount": amount},
        )

    # ==================== State ====================

    def snapshot(self) -> Dict[str, Any]:
        return {
            "total_supply": self.total_supply,
            "balances": copy.deepcopy(self.balances),
            "allowances": copy.deepcopy(self.allowances),
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        self.total_supply = snapshot["total_supply"]
        self.balances = copy.deepcopy(snapshot["balances"])
        self.allowances = copy.deepcopy(snapshot["allowances"])

    # ==================== Helpers ====================

    def _normalize(self, address: str) -> str:
        return to_checksum_address(address)

    def _validate_address(self, address: str, field_name: str) -> None:
        if not address or self._normalize(address) == ZERO_ADDRESS:
            raise InputValidationError(f"{self.symbol}: {field_name} is zero address")

    def _validate_amount(self, amount: int) -> None:
        if amount < 0:
            raise InputValidationError(f"{self.symbol}: amount cannot be negative")
        if amount > MAX_UINT256:
            raise InputValidationError(f"{self.symbol}: amount exceeds uint256")


@dataclass
class WrappedNativeToken(ERC20Token):
    """
    ERC20 wrapper around the chain's native currency.

    deposit() locks native currency in the token contract and mints the same
    amount of tokens.
    """

    chain: "Chain | None" = None

    def deposit(self, caller: str, value: int) -> None:
        if self.chain is None:
            raise InputValidationError(f"{self.symbol}: not attached to a chain")
        self.chain.transfer_native(caller, self.address, value)
        caller_norm = self._normalize(caller)
        self.balances[caller_norm] = self.balances.get(caller_norm, 0) + value
        self.total_supply += value
