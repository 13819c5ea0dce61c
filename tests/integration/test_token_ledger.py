from __future__ import annotations

import pytest

from vperp.integration import BoundToken, CollateralAsset, TokenLedger


def test_mint_and_move() -> None:
    ledger = TokenLedger()
    ledger.mint("a", 10)
    assert ledger.move("a", "b", 4) is True
    assert ledger.balance_of("a") == 6
    assert ledger.balance_of("b") == 4
    assert ledger.total_supply() == 10


def test_move_insufficient_returns_false() -> None:
    ledger = TokenLedger()
    ledger.mint("a", 3)
    assert ledger.move("a", "b", 4) is False
    assert ledger.balance_of("a") == 3
    assert ledger.balance_of("b") == 0


def test_negative_mint_rejected() -> None:
    with pytest.raises(ValueError):
        TokenLedger().mint("a", -1)


def test_spend_consumes_allowance() -> None:
    ledger = TokenLedger()
    ledger.mint("owner", 10)
    ledger.approve("owner", "spender", 6)
    assert ledger.spend("spender", "owner", "dest", 4) is True
    assert ledger.allowance("owner", "spender") == 2
    assert ledger.balance_of("dest") == 4


def test_spend_over_allowance_returns_false() -> None:
    ledger = TokenLedger()
    ledger.mint("owner", 10)
    ledger.approve("owner", "spender", 3)
    assert ledger.spend("spender", "owner", "dest", 4) is False
    assert ledger.allowance("owner", "spender") == 3
    assert ledger.balance_of("owner") == 10


def test_spend_with_allowance_but_no_balance() -> None:
    ledger = TokenLedger()
    ledger.approve("owner", "spender", 5)
    assert ledger.spend("spender", "owner", "dest", 5) is False
    assert ledger.allowance("owner", "spender") == 5


def test_bound_token_acts_as_holder() -> None:
    ledger = TokenLedger()
    token = ledger.bind("engine")
    assert isinstance(token, BoundToken)
    assert isinstance(token, CollateralAsset)

    ledger.mint("alice", 10)
    ledger.approve("alice", "engine", 10)
    assert token.transfer_from("alice", "engine", 7) is True
    assert token.transfer("bob", 5) is True
    assert ledger.balance_of("engine") == 2
    assert ledger.balance_of("bob") == 5
    assert token.transfer("bob", 3) is False


def test_bound_token_cannot_spend_without_approval() -> None:
    ledger = TokenLedger()
    ledger.mint("alice", 10)
    assert ledger.bind("engine").transfer_from("alice", "engine", 1) is False
