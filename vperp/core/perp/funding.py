"""
Funding index accrual.

This module is intentionally small and pure:
- The functional core decides whether an interval has elapsed and how much the
  cumulative index moves.
- The imperative shell (the engine) supplies timestamps and prices and stores
  the result.

Funding is never settled into balances here. Positions realize it lazily as the
difference between the index at entry and at close/liquidation.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .math import FUNDING_INTERVAL


@dataclass(frozen=True)
class FundingState:
    """Cumulative funding index and the time it was last advanced."""

    cumulative_funding: int = 0
    last_funding_time: int = 0

    def __post_init__(self) -> None:
        if self.last_funding_time < 0:
            raise ValueError(f"last_funding_time must be non-negative: {self.last_funding_time}")


def funding_rate(mark_price: int, oracle_price: int) -> int:
    """Signed per-interval rate: vAMM price minus oracle price.

    Positive when the synthetic price trades above the oracle.
    """
    return mark_price - oracle_price


def funding_delta(rate: int, elapsed: int) -> int:
    """Index increment for *elapsed* seconds: ``rate * elapsed / FUNDING_INTERVAL``."""
    return (rate * elapsed) // FUNDING_INTERVAL


def interval_elapsed(state: FundingState, now: int) -> bool:
    return now - state.last_funding_time >= FUNDING_INTERVAL


def accrue(state: FundingState, now: int, mark_price: int, oracle_price: int) -> FundingState:
    """Advance the funding index to *now*.

    Returns *state* unchanged when less than one interval has elapsed, so
    repeated calls inside the same window are no-ops.
    """
    if now < 0:
        raise ValueError(f"now must be non-negative: {now}")
    if not interval_elapsed(state, now):
        return state
    elapsed = now - state.last_funding_time
    delta = funding_delta(funding_rate(mark_price, oracle_price), elapsed)
    return replace(
        state,
        cumulative_funding=state.cumulative_funding + delta,
        last_funding_time=now,
    )
