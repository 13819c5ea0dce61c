"""
Perpetual market engine (imperative shell).

`PerpEngine` is the single process-owned instance that holds every table and
scalar of the market and exposes the market operations as methods. The pure
pieces it delegates to live in `vperp.core.perp`:

- `vamm`: spot price and open-time price impact,
- `funding`: cumulative funding index accrual,
- `math`: PnL, equity, maintenance and liquidation split,
- `invariants`: post-state checks run after every operation.

Execution model:
- Every public mutating call is atomic. State is snapshotted on entry and restored
  if anything raises, including a failed collateral transfer or an invariant
  violation on the post-state.
- Every public mutating call holds a binary reentrancy guard; a call that
  re-enters the engine (e.g. from a token callback) raises `ReentrantCall`.
- Position-mutating calls bring the funding index current before reading the
  vAMM price.
- `sender` is the authenticated caller of each operation; the engine trusts it.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, replace
import time
from typing import Any, Callable, Iterator, List, Optional

import structlog

from ..core.perp.errors import (
    InsufficientMargin,
    InvalidLeverage,
    InvalidPrice,
    NoOpenPosition,
    NotEnoughLiquidity,
    NotLiquidatable,
    PerpInvariantError,
    PositionAlreadyOpen,
    ReentrantCall,
    TransferFailed,
    Unauthorized,
    ZeroAmount,
)
from ..core.perp.funding import accrue
from ..core.perp.invariants import check_all
from ..core.perp.math import (
    is_liquidatable as position_is_liquidatable,
    leverage_in_range,
    liquidation_split,
    notional,
    position_equity,
    price_in_range,
)
from ..core.perp.state import initial_market_state, with_funding
from ..core.perp.types import Effect, Event, LedgerSnapshot, MarketState
from ..core.perp.vamm import apply_open, spot_price
from ..state.balances import Account, Amount, BalanceTable
from ..state.lp import LPTable
from ..state.positions import Direction, Position, PositionTable
from .collateral import CollateralAsset

logger = structlog.get_logger()

DEFAULT_ENGINE_ADDRESS = "vperp:engine"

Clock = Callable[[], int]


@dataclass(frozen=True)
class PerpEngineConfig:
    owner: Account
    # Account the engine holds collateral under (spender for `transfer_from`).
    address: Account = DEFAULT_ENGINE_ADDRESS

    def __post_init__(self) -> None:
        _require_str(self.owner, name="owner")
        _require_str(self.address, name="address")


def _require_str(value: Any, *, name: str, max_len: int = 256) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string")
    if not value:
        raise ValueError(f"{name} must be non-empty")
    if len(value) > max_len:
        raise ValueError(f"{name} too large")
    return value


def _require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    return value


def _require_amount(value: Any, *, name: str) -> int:
    """Non-negative int; zero raises `ZeroAmount`."""
    amount = _require_int(value, name=name)
    if amount < 0:
        raise ValueError(f"{name} must be non-negative: {amount}")
    if amount == 0:
        raise ZeroAmount(f"{name} must be non-zero")
    return amount


def _wall_clock() -> int:
    return int(time.time())


class PerpEngine:
    """Single-market vAMM perpetual engine.

    Args:
        config: Owner and engine address.
        collateral: Collateral asset bound to `config.address`.
        clock: Returns the current timestamp in seconds (wall clock by default).
    """

    def __init__(
        self,
        config: PerpEngineConfig,
        collateral: CollateralAsset,
        *,
        clock: Optional[Clock] = None,
    ) -> None:
        if not isinstance(collateral, CollateralAsset):
            raise TypeError("collateral must implement transfer() and transfer_from()")
        self._config = config
        self._collateral = collateral
        self._clock: Clock = clock if clock is not None else _wall_clock
        self._market: MarketState = initial_market_state(self._now())
        self._margins = BalanceTable()
        self._lp = LPTable()
        self._positions = PositionTable()
        self._entered = False
        self._events: List[Effect] = []

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------

    @property
    def owner(self) -> Account:
        return self._config.owner

    @property
    def address(self) -> Account:
        return self._config.address

    @property
    def market(self) -> MarketState:
        return self._market

    @property
    def events(self) -> tuple[Effect, ...]:
        """Every effect committed since construction or the last `drain_events()`."""
        return tuple(self._events)

    @property
    def v_base_reserves(self) -> int:
        return self._market.v_base_reserves

    @property
    def v_quote_reserves(self) -> int:
        return self._market.v_quote_reserves

    @property
    def oracle_price(self) -> int:
        return self._market.oracle_price

    @property
    def cumulative_funding(self) -> int:
        return self._market.cumulative_funding

    @property
    def last_funding_time(self) -> int:
        return self._market.last_funding_time

    @property
    def total_liquidity(self) -> int:
        return self._market.total_liquidity

    @property
    def bad_debt(self) -> int:
        return self._market.bad_debt

    def get_vamm_price(self) -> int:
        return spot_price(self._market.v_base_reserves, self._market.v_quote_reserves)

    def get_margin_balance(self, account: Account) -> Amount:
        return self._margins.get(account)

    def get_lp_shares(self, account: Account) -> Amount:
        return self._lp.get(account)

    def get_position(self, account: Account) -> Position:
        return self._positions.get(account)

    def get_margin(self, account: Account) -> Amount:
        """Margin committed to the account's open position (0 when flat)."""
        return self._positions.get(account).margin

    def get_equity(self, account: Account) -> int:
        """Signed equity of the open position at the current price and index."""
        return position_equity(
            self._positions.get(account), self.get_vamm_price(), self._market.cumulative_funding,
        )

    def is_liquidatable(self, account: Account) -> bool:
        """Pure query against current state.

        Does not accrue funding; use `check_liquidatable()` for a result against a
        current funding index.
        """
        return position_is_liquidatable(
            self._positions.get(account), self.get_vamm_price(), self._market.cumulative_funding,
        )

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            market=self._market,
            margins=self._margins.get_all_balances(),
            lp_shares=self._lp.get_all_shares(),
            positions=self._positions.get_all_positions(),
        )

    # ------------------------------------------------------------------
    # Guards and transactions
    # ------------------------------------------------------------------

    def _now(self) -> int:
        now = self._clock()
        if not isinstance(now, int) or isinstance(now, bool) or now < 0:
            raise ValueError(f"clock must return a non-negative int timestamp: {now!r}")
        return now

    def _require_owner(self, sender: Account) -> None:
        if sender != self._config.owner:
            raise Unauthorized(f"{sender!r} is not the owner")

    @contextmanager
    def _non_reentrant(self) -> Iterator[None]:
        if self._entered:
            raise ReentrantCall("engine is already executing a guarded operation")
        self._entered = True
        try:
            yield
        finally:
            self._entered = False

    @contextmanager
    def _transaction(self, action: str) -> Iterator[None]:
        saved = (self._market, self._margins.copy(), self._lp.copy(), self._positions.copy())
        n_events = len(self._events)
        try:
            yield
            violations = check_all(self.snapshot())
            if violations:
                raise PerpInvariantError(violations)
        except Exception as exc:
            self._market, self._margins, self._lp, self._positions = saved
            del self._events[n_events:]
            logger.debug(
                "Operation rejected",
                action=action,
                kind=getattr(exc, "kind", type(exc).__name__),
                error=str(exc),
            )
            raise
        for effect in self._events[n_events:]:
            logger.info(
                "Market event",
                action=action,
                market_event=effect.event.value,
                account=effect.account,
                amount=effect.amount,
                price=effect.price,
            )

    @contextmanager
    def _operation(self, action: str) -> Iterator[None]:
        with self._non_reentrant(), self._transaction(action):
            yield

    def _emit(self, effect: Effect) -> Effect:
        self._events.append(effect)
        return effect

    def drain_events(self) -> tuple[Effect, ...]:
        """Return the committed effects and clear the log.

        The log is unbounded; long-running callers should drain it periodically.
        Not callable from inside another engine operation.
        """
        with self._non_reentrant():
            drained = tuple(self._events)
            self._events.clear()
            return drained

    # ------------------------------------------------------------------
    # Collateral transfers
    # ------------------------------------------------------------------

    def _pull(self, owner: Account, amount: Amount) -> None:
        try:
            ok = self._collateral.transfer_from(owner, self.address, amount)
        except Exception as exc:
            raise TransferFailed(f"transfer_from({owner!r}, {amount}) raised: {exc}") from exc
        if not ok:
            raise TransferFailed(f"transfer_from({owner!r}, {amount}) returned {ok!r}")

    def _push(self, to: Account, amount: Amount) -> None:
        try:
            ok = self._collateral.transfer(to, amount)
        except Exception as exc:
            raise TransferFailed(f"transfer({to!r}, {amount}) raised: {exc}") from exc
        if not ok:
            raise TransferFailed(f"transfer({to!r}, {amount}) returned {ok!r}")

    # ------------------------------------------------------------------
    # Funding
    # ------------------------------------------------------------------

    def _accrue_funding(self) -> Optional[Effect]:
        before = self._market.funding
        mark = self.get_vamm_price()
        after = accrue(before, self._now(), mark, self._market.oracle_price)
        if after == before:
            return None
        self._market = with_funding(self._market, after.cumulative_funding, after.last_funding_time)
        return self._emit(Effect(
            event=Event.FUNDING_UPDATED,
            amount=after.cumulative_funding - before.cumulative_funding,
            price=mark,
            cumulative_funding=after.cumulative_funding,
        ))

    def update_funding_rate(self) -> Optional[Effect]:
        """Accrue funding if a full interval has elapsed.

        Returns the `FUNDING_UPDATED` effect, or None when the call was a no-op.
        """
        with self._operation("update_funding_rate"):
            return self._accrue_funding()

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    def set_oracle_price(self, sender: Account, price: int) -> Effect:
        with self._operation("set_oracle_price"):
            self._require_owner(sender)
            price = _require_int(price, name="price")
            if not price_in_range(price):
                raise InvalidPrice(f"oracle price out of range: {price}")
            self._market = replace(self._market, oracle_price=price)
            return self._emit(Effect(event=Event.ORACLE_PRICE_SET, account=sender, price=price))

    # ------------------------------------------------------------------
    # Collateral ledger
    # ------------------------------------------------------------------

    def deposit_margin(self, sender: Account, amount: Amount) -> Effect:
        with self._operation("deposit_margin"):
            amount = _require_amount(amount, name="amount")
            self._pull(sender, amount)
            self._margins.add(sender, amount)
            return self._emit(Effect(event=Event.MARGIN_DEPOSITED, account=sender, amount=amount))

    def withdraw_margin(self, sender: Account, amount: Amount) -> Effect:
        with self._operation("withdraw_margin"):
            amount = _require_amount(amount, name="amount")
            available = self._margins.get(sender)
            if available < amount:
                raise InsufficientMargin(f"withdraw {amount} > free margin {available}")
            self._margins.subtract(sender, amount)
            self._push(sender, amount)
            return self._emit(Effect(event=Event.MARGIN_WITHDRAWN, account=sender, amount=amount))

    def provide_liquidity(self, sender: Account, amount: Amount) -> Effect:
        with self._operation("provide_liquidity"):
            amount = _require_amount(amount, name="amount")
            self._pull(sender, amount)
            self._lp.mint(sender, amount)
            self._market = replace(self._market, total_liquidity=self._market.total_liquidity + amount)
            return self._emit(Effect(event=Event.LIQUIDITY_PROVIDED, account=sender, amount=amount))

    def withdraw_liquidity(self, sender: Account, amount: Amount) -> Effect:
        with self._operation("withdraw_liquidity"):
            amount = _require_amount(amount, name="amount")
            held = self._lp.get(sender)
            if held < amount:
                raise NotEnoughLiquidity(f"withdraw {amount} shares > held {held}")
            self._lp.burn(sender, amount)
            self._market = replace(self._market, total_liquidity=self._market.total_liquidity - amount)
            self._push(sender, amount)
            return self._emit(Effect(event=Event.LIQUIDITY_WITHDRAWN, account=sender, amount=amount))

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def open_position(
        self,
        sender: Account,
        margin: Amount,
        leverage: int,
        direction: Direction | str,
    ) -> Effect:
        """Open a leveraged position of size `margin * leverage`.

        The vAMM reserves move first, and the entry price is the price the trade
        leaves behind rather than the pre-trade quote. Closing straight away
        therefore settles exactly `margin` with no PnL from the trade's own
        price impact.
        """
        with self._operation("open_position"):
            margin = _require_amount(margin, name="margin")
            leverage = _require_int(leverage, name="leverage")
            if not leverage_in_range(leverage):
                raise InvalidLeverage(f"leverage out of range: {leverage}")
            direction = Direction(direction)
            if self._positions.has_open(sender):
                raise PositionAlreadyOpen(f"{sender!r} already has an open position")
            available = self._margins.get(sender)
            if available < margin:
                raise InsufficientMargin(f"margin {margin} > free margin {available}")

            self._accrue_funding()

            size = notional(margin, leverage)
            base, quote = apply_open(
                self._market.v_base_reserves, self._market.v_quote_reserves, size, direction,
            )
            self._market = replace(self._market, v_base_reserves=base, v_quote_reserves=quote)
            entry_price = spot_price(base, quote)

            self._positions.put(sender, Position(
                size=size,
                leverage=leverage,
                direction=direction,
                entry_price=entry_price,
                funding_snapshot=self._market.cumulative_funding,
                is_open=True,
            ))
            self._margins.subtract(sender, margin)
            return self._emit(Effect(
                event=Event.POSITION_OPENED, account=sender, amount=size, price=entry_price,
            ))

    def close_position(self, sender: Account) -> Effect:
        """Close the sender's position and credit `margin + pnl` (if positive).

        The effect's `amount` is the credited settlement; a non-positive
        settlement credits nothing and is added to `bad_debt`.
        """
        with self._operation("close_position"):
            position = self._positions.get(sender)
            if not position.is_open:
                raise NoOpenPosition(f"{sender!r} has no open position")

            self._accrue_funding()
            price = self.get_vamm_price()
            equity = position_equity(position, price, self._market.cumulative_funding)

            self._positions.delete(sender)
            settled = self._settle_equity(sender, equity)
            return self._emit(Effect(
                event=Event.POSITION_CLOSED, account=sender, amount=settled, price=price,
                cumulative_funding=self._market.cumulative_funding,
            ))

    def _settle_equity(self, account: Account, equity: int) -> Amount:
        if equity > 0:
            self._margins.add(account, equity)
            return equity
        self._market = replace(self._market, bad_debt=self._market.bad_debt - equity)
        return 0

    # ------------------------------------------------------------------
    # Liquidation
    # ------------------------------------------------------------------

    def check_liquidatable(self, account: Account) -> bool:
        """Bring funding current, then answer `is_liquidatable(account)`."""
        with self._operation("check_liquidatable"):
            self._accrue_funding()
            return self.is_liquidatable(account)

    def liquidate(self, sender: Account, account: Account) -> Effect:
        """Force-close an under-maintenance position.

        Positive remaining equity is split: `LIQUIDATION_PENALTY` of it to the
        sender as keeper reward, the rest back to the account. Negative equity
        pays nobody and is recorded as bad debt.
        """
        with self._operation("liquidate"):
            position = self._positions.get(account)
            if not position.is_open:
                raise NoOpenPosition(f"{account!r} has no open position")

            self._accrue_funding()
            price = self.get_vamm_price()
            cumulative = self._market.cumulative_funding
            if not position_is_liquidatable(position, price, cumulative):
                raise NotLiquidatable(f"{account!r} is above maintenance margin")
            equity = position_equity(position, price, cumulative)

            self._positions.delete(account)
            reward, remainder = liquidation_split(equity)
            if reward:
                self._margins.add(sender, reward)
            if remainder:
                self._margins.add(account, remainder)
            if equity < 0:
                self._market = replace(self._market, bad_debt=self._market.bad_debt - equity)

            return self._emit(Effect(
                event=Event.POSITION_LIQUIDATED,
                account=account,
                amount=remainder,
                price=price,
                keeper=sender,
                reward=reward,
                cumulative_funding=cumulative,
            ))
