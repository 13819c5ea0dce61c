"""
Per-account balance tracking.

Implements BalanceTable[Account] -> Amount. The engine keeps one table for free
margin; the in-memory collateral token reuses the same table for its holdings.
"""

from __future__ import annotations

from typing import Dict


# Type aliases
Account = str  # opaque account identifier (address-like string)
Amount = int  # Non-negative integer, PRECISION-scaled where it carries value


class BalanceTable:
    """
    Sparse balance table mapping account -> amount.

    Note: balances live in a plain dict. Do not rely on dict iteration order;
    callers sort keys explicitly when they need a deterministic view.
    """

    def __init__(self, balances: Dict[Account, Amount] | None = None) -> None:
        self._balances: Dict[Account, Amount] = {}
        for account, amount in (balances or {}).items():
            self.set(account, amount)

    def get(self, account: Account) -> Amount:
        """Get balance for account. Returns 0 if not found."""
        return self._balances.get(account, 0)

    def set(self, account: Account, amount: Amount) -> None:
        """
        Set balance for account.

        Args:
            account: Account identifier
            amount: Non-negative amount

        Raises:
            TypeError: If amount is not an int
            ValueError: If amount is negative
        """
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise TypeError(f"Balance must be an int: {amount!r}")
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop(account, None)
        else:
            self._balances[account] = amount

    def add(self, account: Account, delta: int) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(account)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(account, new_balance)

    def subtract(self, account: Account, delta: Amount) -> None:
        """
        Subtract a non-negative delta from balance.

        Raises:
            ValueError: If delta is negative or balance is insufficient
        """
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(account, -delta)

    def total(self) -> Amount:
        """Sum of all balances."""
        return sum(self._balances.values())

    def get_all_balances(self) -> Dict[Account, Amount]:
        """Return all non-zero balances as a new dict."""
        return dict(self._balances)

    def copy(self) -> "BalanceTable":
        return BalanceTable(self._balances)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
