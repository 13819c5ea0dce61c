"""Exception types for the perpetual market engine.

Every rejected operation raises a subclass of ``PerpError``. The ``kind``
attribute is the stable name of the failure condition and is what callers
should branch on.
"""

from __future__ import annotations


class PerpError(Exception):
    """Base class for all rejected market operations."""

    kind: str = "PerpError"

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        cls.kind = cls.__name__


class ZeroAmount(PerpError):
    """A deposit, withdrawal, liquidity or margin amount of exactly zero."""


class InvalidLeverage(PerpError):
    """Leverage outside [MIN_LEVERAGE, MAX_LEVERAGE]."""


class InsufficientMargin(PerpError):
    """Withdrawing or committing more margin than is free."""


class NoOpenPosition(PerpError):
    """Closing or liquidating an account with nothing open."""


class PositionAlreadyOpen(PerpError):
    """Opening a position while another is still open for the account."""


class NotEnoughLiquidity(PerpError):
    """Withdrawing more LP shares than held."""


class Unauthorized(PerpError):
    """Non-owner calling an owner-gated operation."""


class TransferFailed(PerpError):
    """The collateral asset reported failure (False return or raised)."""


class NotLiquidatable(PerpError):
    """Liquidating a position that is above the maintenance threshold."""


class ReentrantCall(PerpError):
    """A guarded operation was entered while another guarded call is running."""


class InvalidPrice(PerpError):
    """Oracle price outside (0, MAX_PRICE]."""


class ReserveExhausted(PerpError):
    """A vAMM trade would drive a reserve to zero or below."""


class PerpInvariantError(PerpError):
    """Raised when a post-state violates one or more invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
