"""Tests for vperp/state: balance, LP and position tables."""

import pytest

from vperp.state.balances import BalanceTable
from vperp.state.lp import LPTable
from vperp.state.positions import CLOSED_POSITION, Direction, Position, PositionTable


def _open(size: int = 500, leverage: int = 5) -> Position:
    return Position(size=size, leverage=leverage, direction=Direction.SHORT, entry_price=10, is_open=True)


class TestBalanceTable:
    def test_missing_is_zero(self):
        assert BalanceTable().get("nobody") == 0

    def test_add_subtract(self):
        t = BalanceTable()
        t.add("a", 10)
        t.subtract("a", 4)
        assert t.get("a") == 6
        assert t.total() == 6

    def test_zero_balance_removed(self):
        t = BalanceTable({"a": 5})
        t.subtract("a", 5)
        assert t.get_all_balances() == {}

    def test_overdraw_rejected(self):
        t = BalanceTable({"a": 5})
        with pytest.raises(ValueError):
            t.subtract("a", 6)
        assert t.get("a") == 5

    def test_negative_delta_rejected(self):
        with pytest.raises(ValueError):
            BalanceTable().subtract("a", -1)

    def test_non_int_rejected(self):
        with pytest.raises(TypeError):
            BalanceTable().set("a", 1.5)  # type: ignore[arg-type]

    def test_copy_is_independent(self):
        t = BalanceTable({"a": 5})
        c = t.copy()
        c.add("a", 1)
        assert t.get("a") == 5
        assert c.get("a") == 6


class TestLPTable:
    def test_mint_burn(self):
        t = LPTable()
        t.mint("a", 300)
        t.burn("a", 100)
        assert t.get("a") == 200
        assert t.total() == 200

    def test_burn_more_than_held_rejected(self):
        t = LPTable({"a": 1})
        with pytest.raises(ValueError):
            t.burn("a", 2)

    def test_copy_is_independent(self):
        t = LPTable({"a": 5})
        c = t.copy()
        c.burn("a", 5)
        assert t.get_all_shares() == {"a": 5}
        assert c.get_all_shares() == {}


class TestPosition:
    def test_default_is_closed(self):
        assert CLOSED_POSITION.is_open is False
        assert CLOSED_POSITION.margin == 0

    def test_margin(self):
        assert _open(size=500, leverage=5).margin == 100

    def test_open_requires_fields(self):
        with pytest.raises(ValueError):
            Position(size=0, leverage=1, entry_price=1, is_open=True)

    def test_direction_type_checked(self):
        with pytest.raises(TypeError):
            Position(direction="long")  # type: ignore[arg-type]

    def test_dict_round_trip(self):
        p = Position(size=500, leverage=5, direction=Direction.SHORT, entry_price=10,
                     funding_snapshot=-3, is_open=True)
        assert Position.from_dict(p.to_dict()) == p


class TestPositionTable:
    def test_get_missing_returns_closed(self):
        assert PositionTable().get("a") is CLOSED_POSITION

    def test_put_delete(self):
        t = PositionTable()
        t.put("a", _open())
        assert t.has_open("a")
        assert len(t) == 1
        removed = t.delete("a")
        assert removed.is_open
        assert not t.has_open("a")
        assert t.delete("a") is CLOSED_POSITION

    def test_closed_position_not_storable(self):
        with pytest.raises(ValueError):
            PositionTable().put("a", Position())

    def test_locked_margin(self):
        t = PositionTable({"a": _open(500, 5), "b": _open(300, 3)})
        assert t.locked_margin() == 200
