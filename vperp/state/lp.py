"""
LP share tracking for the market's liquidity pool.

Shares are minted 1:1 with the deposited collateral amount. The pool is not a
counterparty to trader PnL, so shares never reprice.
"""

from __future__ import annotations

from typing import Dict

from .balances import Account, Amount


class LPTable:
    """
    Sparse LP share table mapping account -> shares.

    Notes:
    - Share balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    - The pool total (`total_liquidity`) lives in market state; the engine keeps
      it equal to `total()`.
    """

    def __init__(self, shares: Dict[Account, Amount] | None = None) -> None:
        self._shares: Dict[Account, Amount] = {}
        for account, amount in (shares or {}).items():
            self.set(account, amount)

    def get(self, account: Account) -> Amount:
        """Get LP shares for account. Returns 0 if not found."""
        return self._shares.get(account, 0)

    def set(self, account: Account, amount: Amount) -> None:
        """Set LP shares for account."""
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise TypeError(f"LP shares must be an int: {amount!r}")
        if amount < 0:
            raise ValueError(f"LP shares cannot be negative: {amount}")
        if amount == 0:
            self._shares.pop(account, None)
        else:
            self._shares[account] = amount

    def mint(self, account: Account, amount: Amount) -> None:
        """Credit newly minted shares."""
        if amount < 0:
            raise ValueError(f"Mint amount must be non-negative: {amount}")
        self.set(account, self.get(account) + amount)

    def burn(self, account: Account, amount: Amount) -> None:
        """Burn shares held by account."""
        if amount < 0:
            raise ValueError(f"Burn amount must be non-negative: {amount}")
        current = self.get(account)
        if amount > current:
            raise ValueError(f"Insufficient LP shares: {amount} > {current}")
        self.set(account, current - amount)

    def total(self) -> Amount:
        return sum(self._shares.values())

    def get_all_shares(self) -> Dict[Account, Amount]:
        """Return all LP share balances."""
        return dict(self._shares)

    def copy(self) -> "LPTable":
        return LPTable(self._shares)

    def __repr__(self) -> str:
        return f"LPTable({len(self._shares)} entries)"
