"""Shared fixtures for engine integration tests (fake clock, funded token ledger)."""

from __future__ import annotations

from dataclasses import dataclass

from vperp.core.perp.math import PRECISION
from vperp.integration import DEFAULT_ENGINE_ADDRESS, PerpEngine, PerpEngineConfig, TokenLedger

P = PRECISION
OWNER = "owner"
ALICE = "alice"
BOB = "bob"
KEEPER = "keeper"
GENESIS = 1_700_000_000


class FakeClock:
    def __init__(self, now: int = GENESIS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@dataclass
class Market:
    engine: PerpEngine
    ledger: TokenLedger
    clock: FakeClock

    def fund(self, account: str, amount: int) -> None:
        """Mint tokens and approve the engine to pull them."""
        self.ledger.mint(account, amount)
        self.ledger.approve(account, self.engine.address, self.ledger.allowance(account, self.engine.address) + amount)

    def deposit(self, account: str, amount: int) -> None:
        self.fund(account, amount)
        self.engine.deposit_margin(account, amount)


def make_market(collateral_wrapper=None) -> Market:
    ledger = TokenLedger()
    clock = FakeClock()
    collateral = ledger.bind(DEFAULT_ENGINE_ADDRESS)
    if collateral_wrapper is not None:
        collateral = collateral_wrapper(collateral)
    engine = PerpEngine(PerpEngineConfig(owner=OWNER), collateral, clock=clock)
    return Market(engine=engine, ledger=ledger, clock=clock)


