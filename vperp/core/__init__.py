"""
Core market algorithms
"""

from .perp import (
    Effect,
    Event,
    FundingState,
    MarketState,
    PerpError,
    accrue,
    apply_open,
    check_all,
    initial_market_state,
    spot_price,
)

__all__ = [
    "Effect",
    "Event",
    "FundingState",
    "MarketState",
    "PerpError",
    "accrue",
    "apply_open",
    "check_all",
    "initial_market_state",
    "spot_price",
]
