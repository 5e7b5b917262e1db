"""Token contracts settled by the periphery."""

from .erc20 import ERC20Token, WrappedNativeToken

__all__ = ["ERC20Token", "WrappedNativeToken"]
