"""Invariant checkers for the perpetual market.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass). The engine runs
`check_all()` on the post-state of every operation and rejects the operation on
any violation.

Solvency (margins + locked margin <= collateral held) is not checked here: PnL is
credited without a counterparty, so credited margin can exceed the collateral held.
"""

from __future__ import annotations

from typing import Callable

from .math import leverage_in_range, price_in_range
from .types import LedgerSnapshot


def inv_reserves_positive(s: LedgerSnapshot) -> bool:
    return s.market.v_base_reserves > 0 and s.market.v_quote_reserves > 0


def inv_oracle_price_in_range(s: LedgerSnapshot) -> bool:
    return price_in_range(s.market.oracle_price)


def inv_positions_open(s: LedgerSnapshot) -> bool:
    return all(p.is_open for p in s.positions.values())


def inv_leverage_bounded(s: LedgerSnapshot) -> bool:
    return all(leverage_in_range(p.leverage) for p in s.positions.values() if p.is_open)


def inv_size_multiple_of_leverage(s: LedgerSnapshot) -> bool:
    return all(p.size % p.leverage == 0 for p in s.positions.values() if p.is_open)


def inv_margins_non_negative(s: LedgerSnapshot) -> bool:
    return all(v >= 0 for v in s.margins.values())


def inv_lp_shares_match_total(s: LedgerSnapshot) -> bool:
    return sum(s.lp_shares.values()) == s.market.total_liquidity


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[LedgerSnapshot], bool]] = {
    "inv_reserves_positive": inv_reserves_positive,
    "inv_oracle_price_in_range": inv_oracle_price_in_range,
    "inv_positions_open": inv_positions_open,
    "inv_leverage_bounded": inv_leverage_bounded,
    "inv_size_multiple_of_leverage": inv_size_multiple_of_leverage,
    "inv_margins_non_negative": inv_margins_non_negative,
    "inv_lp_shares_match_total": inv_lp_shares_match_total,
}


def check_all(snapshot: LedgerSnapshot) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(snapshot)
    ]
