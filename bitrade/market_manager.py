"""Registry of markets: creation, start/stop and routing of order requests."""

from __future__ import annotations

import logging
import threading
import time
from decimal import Decimal, InvalidOperation
from types import MappingProxyType

from bitrade.market import Market, MarketError
from bitrade.storage import MarketRecord, MarketStatus

_log = logging.getLogger(__name__)

_DEFAULT_PRECISION = 8
_DEFAULT_MIN_AMOUNT = Decimal("0.00000000")


class MarketNotFoundError(MarketError):
    """No market is registered under the requested id."""


def _now_millis() -> int:
    return int(time.time() * 1000)


def _parse_fee(value) -> Decimal:
    try:
        fee = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Failed to parse amount as Decimal: {value!r}") from None
    if not fee.is_finite():
        raise ValueError(f"Failed to parse amount as Decimal: {value!r}")
    return fee


class MarketManager:
    """Owns every market and forwards requests to the right one.

    Markets already held in storage are loaded on creation; they start out
    stopped. Used as a context manager, the manager cancels every order of
    every market on exit.
    """

    def __init__(self, persister):
        self.persister = persister
        self._lock = threading.Lock()
        self._markets: dict[str, Market] = {}
        self._load_markets_from_db()
        print(f"market_manager : Loaded {len(self._markets)} markets from database")

    @property
    def markets(self):
        """Read-only view of the registered markets by id."""
        with self._lock:
            return MappingProxyType(dict(self._markets))

    def _load_markets_from_db(self) -> None:
        try:
            records = self.persister.list_markets()
        except Exception as exc:
            _log.warning("Could not load markets from storage: %s", exc)
            return
        for record in records:
            print(
                f"Loading market: id={record.id}, base={record.base_asset}, "
                f"quote={record.quote_asset}"
            )
            market = Market(self.persister, record.id, record.base_asset, record.quote_asset)
            with self._lock:
                self._markets[record.id] = market

    def _get_market(self, market_id: str) -> Market:
        with self._lock:
            market = self._markets.get(market_id)
        if market is None:
            raise MarketNotFoundError(f"Market {market_id} not found")
        return market

    def create_market(
        self, market_id, base_asset, quote_asset, default_maker_fee, default_taker_fee
    ) -> None:
        """Register and store a market; an existing id is left untouched."""
        maker_fee = _parse_fee(default_maker_fee)
        taker_fee = _parse_fee(default_taker_fee)
        with self._lock:
            if market_id not in self._markets:
                market = Market(self.persister, market_id, base_asset, quote_asset)
                self._markets[market_id] = market
                now = _now_millis()
                self.persister.create_market(
                    MarketRecord(
                        id=market_id,
                        base_asset=base_asset,
                        quote_asset=quote_asset,
                        default_maker_fee=maker_fee,
                        default_taker_fee=taker_fee,
                        create_time=now,
                        update_time=now,
                        status=MarketStatus.ACTIVE.value,
                        min_base_amount=_DEFAULT_MIN_AMOUNT,
                        min_quote_amount=_DEFAULT_MIN_AMOUNT,
                        price_precision=_DEFAULT_PRECISION,
                        amount_precision=_DEFAULT_PRECISION,
                    )
                )
        print(f"market_manager : Created market {market_id}")

    def start_market(self, market_id) -> None:
        """Start a market; starting one that already runs is not an error."""
        market = self._get_market(market_id)
        try:
            market.start_market()
        except MarketError as exc:
            _log.debug("start_market %s: %s", market_id, exc)
        print(f"market_manager : Started market {market_id}")

    def stop_market(self, market_id) -> None:
        """Stop a market; stopping one that is not running is not an error."""
        market = self._get_market(market_id)
        try:
            market.stop_market()
        except MarketError as exc:
            _log.debug("stop_market %s: %s", market_id, exc)
        print(f"market_manager : Stopped market {market_id}")

    def add_order(self, order):
        """Add an order to its market; return the trades and the market id."""
        market = self._get_market(order.market_id)
        trades = market.add_order(order)
        return trades, market.market_id

    def cancel_order(self, market_id, order_id) -> bool:
        """Cancel an order; return whether it was resting on the book."""
        return self._get_market(market_id).cancel_order(order_id)

    def get_order_by_id(self, market_id, order_id):
        """Return a copy of an order resting in a market."""
        return self._get_market(market_id).get_order_by_id(order_id)

    def cancel_all_orders(self, market_id) -> bool:
        """Cancel every order of one market."""
        return self._get_market(market_id).cancel_all_orders()

    def cancel_all_orders_global(self) -> None:
        """Cancel every order of every market."""
        with self._lock:
            markets = list(self._markets.values())
        for market in markets:
            market.cancel_all_orders()

    def shutdown(self) -> None:
        """Cancel all orders in all markets."""
        self.cancel_all_orders_global()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        try:
            self.shutdown()
        except MarketError as exc:
            _log.debug("shutdown incomplete: %s", exc)
        else:
            _log.debug("Gracefully shutdown all markets")
        return False