"""
clmm - Concentrated-liquidity periphery

Client-side contracts that sit in front of concentrated-liquidity pools:

- Liquidity math: conversions between token amounts and liquidity
- Path codec: packed multi-hop swap paths
- Pool locator: deterministic pool addresses and callback authentication
- Position ledger: numbered liquidity positions with fee accounting
- Swap router: exact-input and exact-output swaps with callback payment
"""

__version__ = "0.1.0"

__all__ = []
