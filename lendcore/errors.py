"""Error taxonomy for the lending core.

Every failure aborts the whole invocation: operations raise before they
commit, so a raised ``LendingError`` always means "no state change".
"""


class LendingError(Exception):
    """Base class for all lending core failures."""


class AlreadyInitialized(LendingError):
    """Raised when a component is initialized twice."""


class NotInitialized(LendingError):
    """Raised when a component is used before ``initialize``."""


class InvalidInput(LendingError, ValueError):
    """Raised for non-positive amounts and out-of-range parameters."""


class Unauthorized(LendingError):
    """Raised when the caller is not the principal the operation requires."""


class InsufficientBalance(LendingError):
    """Raised when an account (or wallet) holds less than requested."""


class InsufficientLiquidity(LendingError):
    """Raised when the pool cannot cover a withdrawal or borrow."""


class ExceedsCapacity(LendingError):
    """Raised when a borrow would exceed the LTV-based borrowing capacity."""


class UnhealthyPosition(LendingError):
    """Raised when a collateral withdrawal would leave the position undercollateralized."""


class NoOutstandingDebt(LendingError):
    """Raised when repaying or liquidating an account that owes nothing."""


class PriceNotSet(LendingError):
    """Raised when an asset has no price."""


class StalePrice(LendingError):
    """Raised when a price is older than the staleness threshold."""


class PositionHealthy(LendingError):
    """Raised when liquidating a position whose health factor is >= 1.0."""
