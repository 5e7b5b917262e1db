"""
Chain registry, native currency and atomic execution tests.
"""

import threading

import pytest

from clmm.core.chain_state import Chain
from clmm.core.contracts.erc20 import ERC20Token
from clmm.core.exceptions import InputValidationError, InsufficientBalanceError

from clmm_support import ALICE, BOB, TOKEN_A


@pytest.fixture
def token(chain):
    token = ERC20Token(name="Token A", symbol="TKA", address=TOKEN_A)
    chain.register(token)
    token.mint(ALICE, ALICE, 1_000)
    return token


class TestRegistry:
    def test_lookup_is_case_insensitive(self, chain, token):
        assert chain.get_contract(TOKEN_A.lower()) is token

    def test_missing_contract(self, chain):
        with pytest.raises(InputValidationError, match="No contract"):
            chain.get_contract(BOB)

    def test_address_collision(self, chain, token):
        other = ERC20Token(name="Other", symbol="OTH", address=TOKEN_A)
        with pytest.raises(InputValidationError, match="already registered"):
            chain.register(other)

    def test_reregistering_same_contract_is_noop(self, chain, token):
        assert chain.register(token) == TOKEN_A


class TestNativeCurrency:
    def test_transfer(self, chain):
        chain.credit_native(ALICE, 100)
        chain.transfer_native(ALICE, BOB, 40)
        assert chain.native_balance(ALICE) == 60
        assert chain.native_balance(BOB) == 40

    def test_insufficient(self, chain):
        with pytest.raises(InsufficientBalanceError):
            chain.transfer_native(ALICE, BOB, 1)

    def test_negative_rejected(self, chain):
        with pytest.raises(InputValidationError):
            chain.credit_native(ALICE, -1)


class TestAtomic:
    def test_commit_on_success(self, chain, token):
        with chain.atomic():
            token.transfer(ALICE, BOB, 100)
        assert token.balance_of(BOB) == 100

    def test_rollback_on_failure(self, chain, token):
        chain.credit_native(ALICE, 50)
        with pytest.raises(InsufficientBalanceError):
            with chain.atomic():
                token.transfer(ALICE, BOB, 100)
                chain.transfer_native(ALICE, BOB, 50)
                token.transfer(ALICE, BOB, 10_000)
        assert token.balance_of(ALICE) == 1_000
        assert token.balance_of(BOB) == 0
        assert chain.native_balance(ALICE) == 50

    def test_nested_failure_rolls_back_whole_call(self, chain, token):
        with pytest.raises(RuntimeError):
            with chain.atomic():
                token.transfer(ALICE, BOB, 100)
                with chain.atomic():
                    token.transfer(ALICE, BOB, 100)
                    raise RuntimeError("inner")
        assert token.balance_of(ALICE) == 1_000

    def test_depth_tracking(self, chain):
        assert not chain.in_call
        with chain.atomic():
            assert chain.in_call
        assert not chain.in_call

    def test_serializes_threads(self, chain, token):
        """A second thread's call waits for the first to finish."""
        order = []
        entered = threading.Event()
        release = threading.Event()

        def first():
            with chain.atomic():
                entered.set()
                release.wait(timeout=5)
                order.append("first")

        def second():
            entered.wait(timeout=5)
            with chain.atomic():
                order.append("second")

        t1 = threading.Thread(target=first)
        t2 = threading.Thread(target=second)
        t1.start()
        t2.start()
        entered.wait(timeout=5)
        release.set()
        t1.join(timeout=5)
        t2.join(timeout=5)
        assert order == ["first", "second"]


class TestSimulate:
    def test_always_discards(self, chain, token):
        with chain.simulate():
            token.transfer(ALICE, BOB, 100)
            assert token.balance_of(BOB) == 100
        assert token.balance_of(BOB) == 0

    def test_discards_inside_atomic_call(self, chain, token):
        with chain.atomic():
            token.transfer(ALICE, BOB, 1)
            with chain.simulate():
                token.transfer(ALICE, BOB, 100)
        assert token.balance_of(BOB) == 1
