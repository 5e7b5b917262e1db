"""
Exception hierarchy for the concentrated-liquidity periphery.

Every failure raised by the converter, path codec, pool locator, position
ledger or swap settlement engine is a subclass of ClmmError so callers can
catch the whole family while still dispatching on the specific category:

- InputValidationError: malformed input, rejected before any side effect
- SlippageError: a realised amount violated a caller-supplied bound
- AuthorizationError: unexpected callback sender or unapproved caller
- MathOverflowError: a value does not fit its target width
- StateConsistencyError: the requested transition is not allowed from
  the current state
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ClmmError(Exception):
    """Base exception for all periphery errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the operation can be retried
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable


class ConfigurationError(ClmmError):
    """Raised when required configuration is missing or invalid."""
    pass


# ==================== Input Validation ====================


class InputValidationError(ClmmError):
    """Raised when call input is malformed. No side effects are attempted."""
    pass


class PathBoundsError(InputValidationError):
    """Raised when a path buffer is shorter than the operation requires."""

    def __init__(self, message: str, length: int = 0, required: int = 0, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.length = length
        self.required = required


class InvalidPoolKeyError(InputValidationError):
    """Raised when a pool key is not in canonical (token0 < token1) order."""
    pass


class InvalidTickRangeError(InputValidationError):
    """Raised when a tick or sqrt price range is reversed, empty or out of bounds."""
    pass


class ZeroAmountError(InputValidationError):
    """Raised for operations that require a nonzero amount."""
    pass


# ==================== Slippage ====================


class SlippageError(ClmmError):
    """Raised after execution when a realised amount violates a caller bound."""
    pass


class TooLittleReceivedError(SlippageError):
    """Output (or withdrawn amount) fell below the caller's minimum."""
    pass


class TooMuchRequestedError(SlippageError):
    """Required input exceeded the caller's maximum."""
    pass


class PartialFillError(SlippageError):
    """An exact-output swap without a price limit delivered less than requested."""
    pass


# ==================== Authorization ====================


class AuthorizationError(ClmmError):
    """Raised when a caller is not allowed to perform the operation."""
    pass


class UnauthorizedCallbackError(AuthorizationError):
    """Raised when a payment callback does not come from the expected pool."""

    def __init__(
        self,
        message: str,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.expected = expected
        self.actual = actual


class NotApprovedError(AuthorizationError):
    """Raised when the caller neither owns nor is approved for a position."""
    pass


# ==================== Precision ====================


class MathOverflowError(ClmmError, ArithmeticError):
    """Raised when a computed value cannot be represented in its target width."""
    pass


# ==================== State Consistency ====================


class StateConsistencyError(ClmmError):
    """Raised when the current state does not allow the requested transition."""
    pass


class PositionNotFoundError(StateConsistencyError):
    """Raised when a position id does not exist."""
    pass


class PositionNotClearedError(StateConsistencyError):
    """Raised when closing a position that still holds liquidity or owed tokens."""
    pass


class InsufficientLiquidityError(StateConsistencyError):
    """Raised when decreasing more liquidity than a position holds."""
    pass


class InsufficientBalanceError(StateConsistencyError):
    """Raised when an account lacks the balance or allowance for a transfer."""
    pass


class ReentrancyError(StateConsistencyError):
    """Raised when a guarded entry point is re-entered."""
    pass
