"""
Shared fixtures for periphery tests.
"""

from __future__ import annotations

import pytest

from clmm.core.chain_state import Chain
from clmm.core.contracts.erc20 import ERC20Token, WrappedNativeToken
from clmm.core.defi.full_math import MAX_UINT256
from clmm.core.defi.pool_address import get_pool_key
from clmm.core.defi.position_ledger import PositionLedger
from clmm.core.defi.quoter import Quoter
from clmm.core.defi.swap_router import SwapRouter

from clmm_support import (
    ALICE,
    DEPLOYER,
    FEE,
    LEDGER,
    POOL_RESERVE,
    QUOTER,
    ROUTER,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    USER_BALANCE,
    WETH,
    FixedRatePool,
)


@pytest.fixture
def chain():
    return Chain()


@pytest.fixture
def tokens(chain):
    """Three tokens ordered A < B < C, registered on the chain."""
    created = {}
    for symbol, address in (("TKA", TOKEN_A), ("TKB", TOKEN_B), ("TKC", TOKEN_C)):
        token = ERC20Token(name=f"Token {symbol}", symbol=symbol, address=address)
        chain.register(token)
        created[symbol] = token
    return created


@pytest.fixture
def weth(chain):
    token = WrappedNativeToken(name="Wrapped Ether", symbol="WETH", address=WETH, chain=chain)
    chain.register(token)
    return token


@pytest.fixture
def make_pool(chain):
    """Create a funded FixedRatePool for a token pair."""

    def _make(token_x: ERC20Token, token_y: ERC20Token, fee: int = FEE, pool_class=FixedRatePool) -> FixedRatePool:
        pool = pool_class(chain, get_pool_key(token_x.address, token_y.address, fee))
        for token in (token_x, token_y):
            if isinstance(token, WrappedNativeToken):
                chain.credit_native(pool.address, POOL_RESERVE)
                token.deposit(pool.address, POOL_RESERVE)
            else:
                token.mint(pool.address, pool.address, POOL_RESERVE)
        return pool

    return _make


@pytest.fixture
def router(chain, weth):
    return SwapRouter(chain, ROUTER, deployer=DEPLOYER, wrapped_native=weth.address)


@pytest.fixture
def ledger(chain, weth):
    return PositionLedger(chain, LEDGER, deployer=DEPLOYER, wrapped_native=weth.address)


@pytest.fixture
def quoter(chain):
    return Quoter(chain, QUOTER, deployer=DEPLOYER)


@pytest.fixture
def alice(tokens, router, ledger):
    """ALICE holds every token and has approved the router and the ledger."""
    for token in tokens.values():
        token.mint(ALICE, ALICE, USER_BALANCE)
        token.approve(ALICE, router.address, MAX_UINT256)
        token.approve(ALICE, ledger.address, MAX_UINT256)
    return ALICE
