"""Pure arithmetic for the perpetual market.

Every function is stateless and operates on plain Python ints scaled by
``PRECISION``.

Rounding is explicit: Python's ``//`` (floor toward -inf) is used for every
division, including on signed PnL and funding values.
"""

from __future__ import annotations

from ...state.positions import Direction, Position

# Fixed-point scale for prices and amounts (1e18).
PRECISION: int = 10**18

# Market constants (not governable).
MIN_LEVERAGE: int = 1
MAX_LEVERAGE: int = 10
FUNDING_INTERVAL: int = 3600  # seconds
MAINTENANCE_MARGIN_RATIO: int = 5 * 10**16  # 5% of notional
LIQUIDATION_PENALTY: int = 10**16  # 1% of remaining equity
MAX_PRICE: int = 10**36


# -- Validation helpers ------------------------------------------------------

def leverage_in_range(leverage: int) -> bool:
    return MIN_LEVERAGE <= leverage <= MAX_LEVERAGE


def price_in_range(price: int) -> bool:
    """True when *price* is a usable PRECISION-scaled price."""
    return 0 < price <= MAX_PRICE


# -- Position helpers --------------------------------------------------------

def notional(margin: int, leverage: int) -> int:
    """Position size: ``margin * leverage``."""
    return margin * leverage


def price_pnl(position: Position, price: int) -> int:
    """Signed PnL from the price move since entry.

    ``(price - entry) * size / entry`` for longs, mirrored for shorts.
    """
    if not position.is_open:
        return 0
    if position.direction is Direction.LONG:
        move = price - position.entry_price
    else:
        move = position.entry_price - price
    return (move * position.size) // position.entry_price


def funding_cost(position: Position, cumulative_funding: int) -> int:
    """Funding owed since entry: ``(index - snapshot) * size / PRECISION``.

    Positive means the position pays. The same sign applies to both directions.
    """
    if not position.is_open:
        return 0
    return ((cumulative_funding - position.funding_snapshot) * position.size) // PRECISION


def position_equity(position: Position, price: int, cumulative_funding: int) -> int:
    """Signed equity: committed margin + price PnL - funding cost."""
    if not position.is_open:
        return 0
    return position.margin + price_pnl(position, price) - funding_cost(position, cumulative_funding)


# -- Liquidation helpers -----------------------------------------------------

def maintenance_requirement(size: int) -> int:
    """Minimum equity for a position of *size*: ``size * 5%``."""
    return (size * MAINTENANCE_MARGIN_RATIO) // PRECISION


def is_liquidatable(position: Position, price: int, cumulative_funding: int) -> bool:
    """True when equity is strictly below the maintenance requirement."""
    if not position.is_open:
        return False
    equity = position_equity(position, price, cumulative_funding)
    return equity < maintenance_requirement(position.size)


def liquidation_split(equity: int) -> tuple[int, int]:
    """Split remaining equity into (keeper reward, owner remainder).

    Non-positive equity pays nobody.
    """
    if equity <= 0:
        return 0, 0
    reward = (equity * LIQUIDATION_PENALTY) // PRECISION
    return reward, equity - reward
