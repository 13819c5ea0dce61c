"""Data types for the perpetual market engine.

Units/conventions:
- every price and amount is an int scaled by PRECISION (1e18),
- `cumulative_funding` is signed, everything else in `MarketState` is unsigned,
- timestamps are integer seconds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Mapping

from ...state.positions import Position
from .funding import FundingState


@unique
class Event(Enum):
    """One member per accepted engine operation."""
    MARGIN_DEPOSITED = "MarginDeposited"
    MARGIN_WITHDRAWN = "MarginWithdrawn"
    LIQUIDITY_PROVIDED = "LiquidityProvided"
    LIQUIDITY_WITHDRAWN = "LiquidityWithdrawn"
    POSITION_OPENED = "PositionOpened"
    POSITION_CLOSED = "PositionClosed"
    POSITION_LIQUIDATED = "PositionLiquidated"
    FUNDING_UPDATED = "FundingUpdated"
    ORACLE_PRICE_SET = "OraclePriceSet"


@dataclass(frozen=True)
class MarketState:
    """Scalar market state shared by every account."""

    # vAMM
    v_base_reserves: int = 0
    v_quote_reserves: int = 0

    # Oracle
    oracle_price: int = 0

    # Funding
    cumulative_funding: int = 0
    last_funding_time: int = 0

    # LP pool
    total_liquidity: int = 0

    # Negative equity discarded at close/liquidation
    bad_debt: int = 0

    def __post_init__(self) -> None:
        for name in (
            "v_base_reserves", "v_quote_reserves", "oracle_price",
            "last_funding_time", "total_liquidity", "bad_debt",
        ):
            val = getattr(self, name)
            if not isinstance(val, int) or isinstance(val, bool):
                raise TypeError(f"{name} must be int")
            if val < 0:
                raise ValueError(f"{name} must be non-negative: {val}")
        if not isinstance(self.cumulative_funding, int) or isinstance(self.cumulative_funding, bool):
            raise TypeError("cumulative_funding must be int")

    @property
    def funding(self) -> FundingState:
        return FundingState(
            cumulative_funding=self.cumulative_funding,
            last_funding_time=self.last_funding_time,
        )


@dataclass(frozen=True)
class Effect:
    """Observable record of one accepted operation."""

    event: Event
    account: str = ""
    amount: int = 0
    price: int = 0
    keeper: str = ""
    reward: int = 0
    cumulative_funding: int = 0


@dataclass(frozen=True)
class LedgerSnapshot:
    """Read-only copy of the full engine state, used by invariant checks."""

    market: MarketState
    margins: Mapping[str, int] = field(default_factory=dict)
    lp_shares: Mapping[str, int] = field(default_factory=dict)
    positions: Mapping[str, Position] = field(default_factory=dict)
