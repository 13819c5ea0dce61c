"""Tests for vperp/core/perp/vamm.py: spot price and open-time price impact."""

import pytest

from vperp.core.perp.errors import ReserveExhausted
from vperp.core.perp.math import PRECISION
from vperp.core.perp.vamm import (
    INITIAL_BASE_RESERVES,
    INITIAL_QUOTE_RESERVES,
    apply_open,
    spot_price,
)
from vperp.state.positions import Direction

P = PRECISION


def test_seed_price_is_1000() -> None:
    assert spot_price(INITIAL_BASE_RESERVES, INITIAL_QUOTE_RESERVES) == 1000 * P


def test_spot_price_rejects_empty_reserves() -> None:
    with pytest.raises(ValueError):
        spot_price(0, INITIAL_QUOTE_RESERVES)
    with pytest.raises(ValueError):
        spot_price(INITIAL_BASE_RESERVES, 0)


def test_long_moves_reserves() -> None:
    base, quote = apply_open(INITIAL_BASE_RESERVES, INITIAL_QUOTE_RESERVES, 500 * P, Direction.LONG)
    # 500 notional at price 1000 consumes 0.5 base
    assert base == INITIAL_BASE_RESERVES - P // 2
    assert quote == INITIAL_QUOTE_RESERVES + 500 * P
    assert spot_price(base, quote) > 1000 * P


def test_short_moves_reserves() -> None:
    base, quote = apply_open(INITIAL_BASE_RESERVES, INITIAL_QUOTE_RESERVES, 500 * P, Direction.SHORT)
    assert base == INITIAL_BASE_RESERVES + P // 2
    assert quote == INITIAL_QUOTE_RESERVES - 500 * P
    assert spot_price(base, quote) < 1000 * P


def test_impact_grows_with_size() -> None:
    small = spot_price(*apply_open(INITIAL_BASE_RESERVES, INITIAL_QUOTE_RESERVES, 100 * P, Direction.LONG))
    large = spot_price(*apply_open(INITIAL_BASE_RESERVES, INITIAL_QUOTE_RESERVES, 10_000 * P, Direction.LONG))
    assert 1000 * P < small < large


def test_non_positive_size_rejected() -> None:
    with pytest.raises(ValueError):
        apply_open(INITIAL_BASE_RESERVES, INITIAL_QUOTE_RESERVES, 0, Direction.LONG)


def test_long_exhausting_base_rejected() -> None:
    # 1_000_000 notional at price 1000 would consume the entire 1000 base
    with pytest.raises(ReserveExhausted):
        apply_open(INITIAL_BASE_RESERVES, INITIAL_QUOTE_RESERVES, 1_000_000 * P, Direction.LONG)


def test_short_exhausting_quote_rejected() -> None:
    with pytest.raises(ReserveExhausted):
        apply_open(INITIAL_BASE_RESERVES, INITIAL_QUOTE_RESERVES, 1_000_000 * P, Direction.SHORT)


def test_short_rounding_price_to_zero_rejected() -> None:
    # Leaves 1 wei of quote: reserves stay positive but the spot price floors to 0
    with pytest.raises(ReserveExhausted):
        apply_open(INITIAL_BASE_RESERVES, INITIAL_QUOTE_RESERVES, INITIAL_QUOTE_RESERVES - 1, Direction.SHORT)
