"""State construction and serialization for the perpetual market.

`initial_market_state(now)` returns the state a freshly deployed engine starts from.

Round-trip property (tested): `market_from_dict(market_to_dict(s)) == s`.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from .vamm import INITIAL_BASE_RESERVES, INITIAL_QUOTE_RESERVES, spot_price
from .types import MarketState

# Auto-derived from MarketState field definitions (single source of truth).
STATE_VAR_NAMES: tuple[str, ...] = tuple(MarketState.__dataclass_fields__)


def initial_market_state(now: int = 0) -> MarketState:
    """Seeded vAMM reserves, oracle at the seed price, funding clock at *now*."""
    return MarketState(
        v_base_reserves=INITIAL_BASE_RESERVES,
        v_quote_reserves=INITIAL_QUOTE_RESERVES,
        oracle_price=spot_price(INITIAL_BASE_RESERVES, INITIAL_QUOTE_RESERVES),
        last_funding_time=now,
    )


def with_funding(state: MarketState, cumulative_funding: int, last_funding_time: int) -> MarketState:
    return replace(state, cumulative_funding=cumulative_funding, last_funding_time=last_funding_time)


def market_to_dict(state: MarketState) -> dict[str, int]:
    """Serialize a MarketState to a plain dict."""
    return {name: getattr(state, name) for name in STATE_VAR_NAMES}


def market_from_dict(d: Mapping[str, Any]) -> MarketState:
    """Deserialize a dict to a MarketState. Raises KeyError on missing fields."""
    kwargs: dict[str, int] = {}
    for name in STATE_VAR_NAMES:
        val = d[name]
        if not isinstance(val, int) or isinstance(val, bool):
            raise TypeError(f"state var {name!r} must be int, got {type(val).__name__}")
        kwargs[name] = int(val)  # normalize int subclasses
    return MarketState(**kwargs)
