"""
Position state for the perpetual market.

Each account holds at most one open position. A closed position is the zero
value (`Position()`), so looking up an account with nothing open is never an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Dict, Mapping

from .balances import Account


@unique
class Direction(Enum):
    LONG = "long"
    SHORT = "short"


@dataclass(frozen=True)
class Position:
    """Single leveraged exposure.

    - `size` is the notional, `margin * leverage` at open time.
    - `entry_price` is PRECISION-scaled.
    - `funding_snapshot` is the cumulative funding index at open time (signed).
    """

    size: int = 0
    leverage: int = 0
    direction: Direction = Direction.LONG
    entry_price: int = 0
    funding_snapshot: int = 0
    is_open: bool = False

    def __post_init__(self) -> None:
        for name in ("size", "leverage", "entry_price", "funding_snapshot"):
            val = getattr(self, name)
            if not isinstance(val, int) or isinstance(val, bool):
                raise TypeError(f"{name} must be an int")
        if not isinstance(self.direction, Direction):
            raise TypeError("direction must be a Direction")
        if self.size < 0:
            raise ValueError(f"size must be non-negative: {self.size}")
        if self.leverage < 0:
            raise ValueError(f"leverage must be non-negative: {self.leverage}")
        if self.entry_price < 0:
            raise ValueError(f"entry_price must be non-negative: {self.entry_price}")
        if self.is_open and (self.size == 0 or self.leverage == 0 or self.entry_price == 0):
            raise ValueError("open position requires non-zero size, leverage and entry_price")

    @property
    def margin(self) -> int:
        """Collateral committed at open (`size // leverage`, exact by construction)."""
        if not self.is_open:
            return 0
        return self.size // self.leverage

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "leverage": self.leverage,
            "direction": self.direction.value,
            "entry_price": self.entry_price,
            "funding_snapshot": self.funding_snapshot,
            "is_open": self.is_open,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Position":
        return cls(
            size=d["size"],
            leverage=d["leverage"],
            direction=Direction(d["direction"]),
            entry_price=d["entry_price"],
            funding_snapshot=d["funding_snapshot"],
            is_open=bool(d["is_open"]),
        )


CLOSED_POSITION = Position()


class PositionTable:
    """
    Mapping account -> open Position.

    Only open positions are stored; `get()` returns `CLOSED_POSITION` otherwise.
    """

    def __init__(self, positions: Mapping[Account, Position] | None = None) -> None:
        self._positions: Dict[Account, Position] = {}
        for account, position in (positions or {}).items():
            self.put(account, position)

    def get(self, account: Account) -> Position:
        return self._positions.get(account, CLOSED_POSITION)

    def has_open(self, account: Account) -> bool:
        return account in self._positions

    def put(self, account: Account, position: Position) -> None:
        if not position.is_open:
            raise ValueError("only open positions are stored; use delete() to close")
        self._positions[account] = position

    def delete(self, account: Account) -> Position:
        """Remove and return the account's position (CLOSED_POSITION if none)."""
        return self._positions.pop(account, CLOSED_POSITION)

    def locked_margin(self) -> int:
        """Collateral committed across all open positions."""
        return sum(p.margin for p in self._positions.values())

    def get_all_positions(self) -> Dict[Account, Position]:
        return dict(self._positions)

    def copy(self) -> "PositionTable":
        return PositionTable(self._positions)

    def __len__(self) -> int:
        return len(self._positions)

    def __repr__(self) -> str:
        return f"PositionTable({len(self._positions)} open)"
