"""
In-memory token tests.
"""

import pytest

from clmm.core.contracts.erc20 import MAX_UINT256, ERC20Token, WrappedNativeToken
from clmm.core.exceptions import InputValidationError, InsufficientBalanceError, NotApprovedError

from clmm_support import ALICE, BOB, ROUTER

ZERO = "0x" + "00" * 20


@pytest.fixture
def token():
    token = ERC20Token(name="Token A", symbol="TKA")
    token.mint(ALICE, ALICE, 1_000)
    return token


class TestIdentity:
    def test_address_derived_when_missing(self):
        a = ERC20Token(name="Token A", symbol="TKA")
        b = ERC20Token(name="Token A", symbol="TKA")
        c = ERC20Token(name="Token B", symbol="TKB")
        assert a.address == b.address
        assert a.address != c.address
        assert a.address.startswith("0x") and len(a.address) == 42


class TestTransfers:
    def test_transfer(self, token):
        token.transfer(ALICE, BOB, 300)
        assert token.balance_of(ALICE) == 700
        assert token.balance_of(BOB) == 300

    def test_transfer_exceeds_balance(self, token):
        with pytest.raises(InsufficientBalanceError, match="exceeds balance"):
            token.transfer(ALICE, BOB, 1_001)

    def test_transfer_to_zero_address(self, token):
        with pytest.raises(InputValidationError, match="zero address"):
            token.transfer(ALICE, ZERO, 1)

    def test_negative_amount(self, token):
        with pytest.raises(InputValidationError, match="negative"):
            token.transfer(ALICE, BOB, -1)


class TestAllowances:
    def test_transfer_from_spends_allowance(self, token):
        token.approve(ALICE, ROUTER, 500)
        token.transfer_from(ROUTER, ALICE, BOB, 200)
        assert token.allowance(ALICE, ROUTER) == 300
        assert token.balance_of(BOB) == 200

    def test_unlimited_allowance_not_decremented(self, token):
        token.approve(ALICE, ROUTER, MAX_UINT256)
        token.transfer_from(ROUTER, ALICE, BOB, 200)
        assert token.allowance(ALICE, ROUTER) == MAX_UINT256

    def test_insufficient_allowance(self, token):
        token.approve(ALICE, ROUTER, 10)
        with pytest.raises(InsufficientBalanceError, match="allowance"):
            token.transfer_from(ROUTER, ALICE, BOB, 11)


class TestMinting:
    def test_owner_restricted(self):
        token = ERC20Token(name="Owned", symbol="OWN", owner=ALICE)
        token.mint(ALICE, BOB, 5)
        assert token.total_supply == 5
        with pytest.raises(NotApprovedError):
            token.mint(BOB, BOB, 5)


class TestSnapshot:
    def test_restore(self, token):
        state = token.snapshot()
        token.transfer(ALICE, BOB, 100)
        token.approve(ALICE, ROUTER, 7)
        token.restore(state)
        assert token.balance_of(BOB) == 0
        assert token.allowance(ALICE, ROUTER) == 0


class TestWrappedNative:
    def test_deposit(self, chain):
        weth = WrappedNativeToken(name="Wrapped Ether", symbol="WETH", chain=chain)
        chain.credit_native(ALICE, 100)
        weth.deposit(ALICE, 60)
        assert weth.balance_of(ALICE) == 60
        assert chain.native_balance(ALICE) == 40
        assert weth.total_supply == 60
        assert chain.native_balance(weth.address) == 60

    def test_deposit_requires_native(self, chain):
        weth = WrappedNativeToken(name="Wrapped Ether", symbol="WETH", chain=chain)
        with pytest.raises(InsufficientBalanceError):
            weth.deposit(ALICE, 1)

    def test_detached(self):
        weth = WrappedNativeToken(name="Wrapped Ether", symbol="WETH")
        with pytest.raises(InputValidationError, match="not attached"):
            weth.deposit(ALICE, 1)
