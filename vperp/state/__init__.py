"""
State tables for the vperp market
"""

from .balances import BalanceTable
from .lp import LPTable
from .positions import CLOSED_POSITION, Direction, Position, PositionTable

__all__ = [
    "BalanceTable",
    "LPTable",
    "CLOSED_POSITION",
    "Direction",
    "Position",
    "PositionTable",
]
