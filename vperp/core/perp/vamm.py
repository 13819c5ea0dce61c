"""
Virtual AMM (vAMM) used for price discovery.

The pool has no real assets behind it. Two reserves define a spot price, and
every position open nudges those reserves in the direction of the trade:

- Long of notional `size` at price `p`: base -= size / p, quote += size
- Short: base += size / p, quote -= size

Closing a position does not touch the reserves, so this is a one-shot price
impact simulator rather than an invariant-preserving constant-product pool.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic (PRECISION = 1e18), floor rounding
- Time Complexity: O(1) per open
"""

from typing import Tuple

from ...state.balances import Amount
from ...state.positions import Direction
from .errors import ReserveExhausted
from .math import PRECISION

# Seed reserves: price starts at 1_000_000 / 1_000 = 1000.
INITIAL_BASE_RESERVES: Amount = 1_000 * PRECISION
INITIAL_QUOTE_RESERVES: Amount = 1_000_000 * PRECISION


def spot_price(base_reserves: Amount, quote_reserves: Amount) -> int:
    """
    Spot price of the base asset in quote, PRECISION-scaled.

        price = quote * PRECISION / base

    Raises:
        ValueError: If a reserve is not positive
    """
    if base_reserves <= 0 or quote_reserves <= 0:
        raise ValueError(f"Reserves must be positive: ({base_reserves}, {quote_reserves})")
    return (quote_reserves * PRECISION) // base_reserves


def apply_open(
    base_reserves: Amount,
    quote_reserves: Amount,
    size: Amount,
    direction: Direction,
) -> Tuple[Amount, Amount]:
    """
    Apply the price impact of opening a position of notional *size*.

    The base amount moved is priced at the pre-trade spot price:
        delta_base = floor(size * PRECISION / price)

    Args:
        base_reserves: Current virtual base reserve
        quote_reserves: Current virtual quote reserve
        size: Position notional (quote units)
        direction: Trade direction

    Returns:
        Tuple of (new_base_reserves, new_quote_reserves)

    Raises:
        ValueError: If inputs are invalid
        ReserveExhausted: If a reserve would reach zero or below, or the
            resulting spot price would round down to zero
    """
    if size <= 0:
        raise ValueError(f"size must be positive: {size}")

    price = spot_price(base_reserves, quote_reserves)
    delta_base = (size * PRECISION) // price

    if direction is Direction.LONG:
        new_base = base_reserves - delta_base
        new_quote = quote_reserves + size
    else:
        new_base = base_reserves + delta_base
        new_quote = quote_reserves - size

    if new_base <= 0 or new_quote <= 0:
        raise ReserveExhausted(
            f"{direction.value} of size {size} exhausts reserves: ({new_base}, {new_quote})"
        )
    if spot_price(new_base, new_quote) == 0:
        raise ReserveExhausted(
            f"{direction.value} of size {size} drives the spot price to zero: ({new_base}, {new_quote})"
        )
    return new_base, new_quote
