"""`perp`: pure-Python core of the vAMM perpetual market.

- deterministic, integer-only arithmetic (PRECISION = 1e18),
- immutable market state (frozen dataclasses),
- named error kinds and post-state invariant checks.

The stateful engine that owns balances and talks to the collateral asset lives in
`vperp.integration.perp_engine`; this package holds the math it delegates to.

Public API:
- `initial_market_state(now) -> MarketState`
- `spot_price(base, quote)`, `apply_open(base, quote, size, direction)`
- `accrue(funding_state, now, mark, oracle) -> FundingState`
- `check_all(snapshot) -> list[str]`
"""

from .errors import (
    InsufficientMargin,
    InvalidLeverage,
    InvalidPrice,
    NoOpenPosition,
    NotEnoughLiquidity,
    NotLiquidatable,
    PerpError,
    PerpInvariantError,
    PositionAlreadyOpen,
    ReentrantCall,
    ReserveExhausted,
    TransferFailed,
    Unauthorized,
    ZeroAmount,
)
from .funding import FundingState, accrue
from .invariants import check_all
from .state import initial_market_state, market_from_dict, market_to_dict
from .types import Effect, Event, LedgerSnapshot, MarketState
from .vamm import apply_open, spot_price

__all__ = [
    "initial_market_state",
    "market_from_dict",
    "market_to_dict",
    "spot_price",
    "apply_open",
    "FundingState",
    "accrue",
    "check_all",
    "Effect",
    "Event",
    "LedgerSnapshot",
    "MarketState",
    "PerpError",
    "PerpInvariantError",
    "ZeroAmount",
    "InvalidLeverage",
    "InsufficientMargin",
    "NoOpenPosition",
    "PositionAlreadyOpen",
    "NotEnoughLiquidity",
    "Unauthorized",
    "TransferFailed",
    "NotLiquidatable",
    "ReentrantCall",
    "InvalidPrice",
    "ReserveExhausted",
]
