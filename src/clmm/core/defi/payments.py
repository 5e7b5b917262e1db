"""
Deferred payment settlement shared by the swap router and the position ledger.

Pools are paid after they have acted: the pool calls back into the periphery
with the amount it is owed, and the periphery settles it. Each payment runs
through an explicit protocol object:

    request  -> PaymentSettlement built from the callback arguments
    validate -> the pool identity named in the callback data is re-derived and
                compared with the actual sender, which becomes the payee
    settle   -> tokens move from the source chosen by select_payment_source

Payment source is a tagged decision with three variants:

- WRAP_NATIVE: the owed token is the wrapped-native token and the contract
  holds enough native currency; wrap exactly the amount and forward it
- CUSTODY: the payer is the contract itself (funds held from a prior hop)
- PULL: transfer_from the payer, spending the allowance it granted
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator

from eth_utils import to_checksum_address

from ..config import Config, ZERO_ADDRESS
from ..exceptions import ReentrancyError, UnauthorizedCallbackError
from .pool_address import PoolKey, compute_address, same_address, verify_callback
from .pool_service import PoolService

if TYPE_CHECKING:
    from ..chain_state import Chain

logger = logging.getLogger(__name__)


class PaymentSource(Enum):
    WRAP_NATIVE = "wrap_native"
    CUSTODY = "custody"
    PULL = "pull"


@dataclass(frozen=True)
class PaymentRequest:
    """Amount of token owed by payer to recipient (the calling pool)."""

    token: str
    payer: str
    recipient: str
    amount: int


def select_payment_source(
    request: PaymentRequest,
    contract_address: str,
    wrapped_native: str | None,
    native_balance: int,
) -> PaymentSource:
    """Choose where a payment is funded from."""
    if (
        wrapped_native is not None
        and same_address(request.token, wrapped_native)
        and native_balance >= request.amount
    ):
        return PaymentSource.WRAP_NATIVE
    if same_address(request.payer, contract_address):
        return PaymentSource.CUSTODY
    return PaymentSource.PULL


@dataclass
class PaymentSettlement:
    """
    One callback's payment obligation.

    The payment request only exists once ``validate`` has confirmed the
    sender is the pool for (token_a, token_b, fee); that pool is the payee.
    """

    token: str
    payer: str
    amount: int
    token_a: str
    token_b: str
    fee: int
    pool_key: PoolKey | None = None
    request: PaymentRequest | None = None
    source: PaymentSource | None = None

    def validate(self, deployer: str, sender: str, init_code_hash: bytes | None = None) -> PoolKey:
        self.pool_key = verify_callback(
            deployer, self.token_a, self.token_b, self.fee, sender, init_code_hash
        )
        self.request = PaymentRequest(token=self.token, payer=self.payer, recipient=sender, amount=self.amount)
        return self.pool_key

    def settle(self, payments: "PeripheryPayments") -> PaymentSource:
        if self.request is None:
            raise UnauthorizedCallbackError("Payment settled before callback validation")
        self.source = payments.pay(self.request)
        return self.source


class PeripheryPayments:
    """
    Base for contracts that pay pools from their callbacks.

    Holds the contract's identity on the chain and the pool deployer used to
    locate and authenticate pools.
    """

    def __init__(
        self,
        chain: "Chain",
        address: str,
        deployer: str | None = None,
        wrapped_native: str | None = None,
        init_code_hash: bytes | None = None,
    ) -> None:
        self.chain = chain
        self.address = to_checksum_address(address)
        self.deployer = to_checksum_address(deployer or Config.POOL_DEPLOYER)
        wrapped_native = wrapped_native or Config.WRAPPED_NATIVE
        self.wrapped_native = to_checksum_address(wrapped_native) if wrapped_native else None
        self.init_code_hash = init_code_hash or Config.POOL_INIT_CODE_HASH
        self._locked = False
        chain.register(self)

    def pool_address(self, key: PoolKey) -> str:
        return compute_address(self.deployer, key, self.init_code_hash)

    def get_pool(self, key: PoolKey) -> PoolService:
        return self.chain.get_contract(self.pool_address(key))

    def pay(self, request: PaymentRequest) -> PaymentSource:
        """Settle a payment request, returning the source that funded it."""
        source = select_payment_source(
            request,
            self.address,
            self.wrapped_native,
            self.chain.native_balance(self.address),
        )
        token = self.chain.get_contract(request.token)

        if source is PaymentSource.WRAP_NATIVE:
            token.deposit(self.address, request.amount)
            token.transfer(self.address, request.recipient, request.amount)
        elif source is PaymentSource.CUSTODY:
            token.transfer(self.address, request.recipient, request.amount)
        else:
            token.transfer_from(self.address, request.payer, request.recipient, request.amount)

        logger.debug(
            "Payment settled",
            extra={
                "event": "payments.settled",
                "source": source.value,
                "token": request.token,
                "payer": request.payer,
                "recipient": request.recipient,
                "amount": request.amount,
            },
        )
        return source

    @contextmanager
    def _top_level_call(self, caller: str, value: int = 0) -> Iterator[None]:
        """
        Enter a public operation: atomic on the chain and not re-enterable.

        Payment callbacks do not go through here; they run nested inside the
        call that triggered them.
        """
        with self.chain.atomic():
            if self._locked:
                raise ReentrancyError(f"{type(self).__name__} is locked")
            self._locked = True
            try:
                self._receive_value(caller, value)
                yield
            finally:
                self._locked = False

    def _resolve_recipient(self, recipient: str) -> str:
        """The zero address stands for this contract."""
        return self.address if same_address(recipient, ZERO_ADDRESS) else recipient

    def _receive_value(self, caller: str, value: int) -> None:
        """Credit native currency attached to a call."""
        if value:
            self.chain.transfer_native(caller, self.address, value)
