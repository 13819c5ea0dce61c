"""
Collateral asset boundary.

The engine only needs two calls from the collateral token, both bound to the
engine's own address and both signalling success with a bool:

- `transfer(to, amount)`: push tokens held by the engine to `to`
- `transfer_from(owner, to, amount)`: pull tokens from `owner` (requires allowance)

`TokenLedger` is an in-memory fungible token with balances and allowances. Call
`ledger.bind(holder)` to get a `CollateralAsset` that acts as `holder`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Protocol, Tuple, runtime_checkable

from ..state.balances import Account, Amount, BalanceTable


@runtime_checkable
class CollateralAsset(Protocol):
    """Token interface as seen from the engine's address."""

    def transfer(self, to: Account, amount: Amount) -> bool: ...

    def transfer_from(self, owner: Account, to: Account, amount: Amount) -> bool: ...


class TokenLedger:
    """
    In-memory fungible token.

    Failed transfers (insufficient balance or allowance) return False and leave
    every balance untouched.
    """

    def __init__(self) -> None:
        self._balances = BalanceTable()
        self._allowances: Dict[Tuple[Account, Account], Amount] = {}

    def balance_of(self, account: Account) -> Amount:
        return self._balances.get(account)

    def total_supply(self) -> Amount:
        return self._balances.total()

    def mint(self, account: Account, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative: {amount}")
        self._balances.add(account, amount)

    def approve(self, owner: Account, spender: Account, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"allowance must be non-negative: {amount}")
        if amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = amount

    def allowance(self, owner: Account, spender: Account) -> Amount:
        return self._allowances.get((owner, spender), 0)

    def move(self, sender: Account, to: Account, amount: Amount) -> bool:
        """Transfer *amount* from *sender* to *to*. False if sender is short."""
        if amount < 0 or self._balances.get(sender) < amount:
            return False
        self._balances.subtract(sender, amount)
        self._balances.add(to, amount)
        return True

    def spend(self, spender: Account, owner: Account, to: Account, amount: Amount) -> bool:
        """Allowance-checked transfer of *owner*'s tokens initiated by *spender*."""
        allowed = self.allowance(owner, spender)
        if amount > allowed:
            return False
        if not self.move(owner, to, amount):
            return False
        self.approve(owner, spender, allowed - amount)
        return True

    def bind(self, holder: Account) -> "BoundToken":
        return BoundToken(ledger=self, holder=holder)

    def __repr__(self) -> str:
        return f"TokenLedger({self._balances!r})"


@dataclass(frozen=True)
class BoundToken:
    """`CollateralAsset` view of a `TokenLedger` acting as `holder`."""

    ledger: TokenLedger
    holder: Account

    def transfer(self, to: Account, amount: Amount) -> bool:
        return self.ledger.move(self.holder, to, amount)

    def transfer_from(self, owner: Account, to: Account, amount: Amount) -> bool:
        return self.ledger.spend(self.holder, owner, to, amount)
