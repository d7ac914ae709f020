import threading
import uuid
from decimal import Decimal

import pytest

from bitrade.market import (
    Market,
    MarketAlreadyStartedError,
    MarketError,
    MarketNotStartedError,
)
from bitrade.memory_store import InMemoryPersistence
from bitrade.storage import OrderStatus
from bitrade.trade_order import OrderSide, OrderType, TradeOrder

_clock = iter(range(1, 10**9))


def make_order(side, price, base, quote, market_id="BTC-USD"):
    now = next(_clock)
    return TradeOrder(
        id=str(uuid.uuid4()),
        market_id=market_id,
        order_type=OrderType.LIMIT,
        side=side,
        user_id="1",
        price=Decimal(price),
        base_amount=Decimal(base),
        quote_amount=Decimal(quote),
        maker_fee=Decimal(0),
        taker_fee=Decimal(0),
        create_time=now,
        remained_base=Decimal(base),
        remained_quote=Decimal(quote),
        filled_base=Decimal(0),
        filled_quote=Decimal(0),
        filled_fee=Decimal(0),
        update_time=now,
    )


@pytest.fixture
def store():
    return InMemoryPersistence()


@pytest.fixture
def market(store):
    m = Market(store, "BTC-USD", "BTC", "USD")
    m.start_market()
    return m


def test_requests_rejected_before_start(store):
    m = Market(store, "BTC-USD", "BTC", "USD")
    assert m.is_started is False
    with pytest.raises(MarketNotStartedError):
        m.add_order(make_order(OrderSide.BUY, "100", "1", "100"))
    with pytest.raises(MarketNotStartedError):
        m.cancel_all_orders()


def test_start_twice_raises(market):
    assert market.is_started is True
    with pytest.raises(MarketAlreadyStartedError):
        market.start_market()


def test_stop_when_stopped_raises(store):
    m = Market(store, "BTC-USD", "BTC", "USD")
    with pytest.raises(MarketNotStartedError):
        m.stop_market()


def test_errors_caught_by_base_class(store):
    m = Market(store, "BTC-USD", "BTC", "USD")
    with pytest.raises(MarketError):
        m.stop_market()
    m.start_market()
    with pytest.raises(MarketError):
        m.start_market()


def test_stop_then_restart(market):
    market.stop_market()
    with pytest.raises(MarketNotStartedError):
        market.get_order_by_id("x")
    market.start_market()
    order = make_order(OrderSide.BUY, "100", "1", "100")
    assert market.add_order(order) == []
    assert market.get_order_by_id(order.id).id == order.id


def test_add_and_get_order(market):
    order = make_order(OrderSide.BUY, "50000", "1", "50000")
    assert market.add_order(order) == []
    found = market.get_order_by_id(order.id)
    assert found.id == order.id
    assert found.remained_base == Decimal("1")


def test_matching_through_market(market, store):
    bid = make_order(OrderSide.BUY, "50000", "1", "50000")
    ask = make_order(OrderSide.SELL, "50000", "1", "50000")
    market.add_order(bid)
    trades = market.add_order(ask)
    assert len(trades) == 1
    assert trades[0].buyer_order_id == bid.id
    assert trades[0].seller_order_id == ask.id
    assert store.get_order(bid.id).status == OrderStatus.FILLED.value


def test_order_book_errors_propagate(market):
    with pytest.raises(ValueError):
        market.add_order(make_order(OrderSide.SELL, "10", "0", "0"))
    with pytest.raises(KeyError):
        market.get_order_by_id("missing")


def test_cancel_order(market, store):
    order = make_order(OrderSide.BUY, "50000", "1", "50000")
    market.add_order(order)
    assert market.cancel_order(order.id) is True
    assert store.get_order(order.id).status == OrderStatus.CANCELLED.value


def test_cancel_all_orders(market, store):
    market.add_order(make_order(OrderSide.BUY, "50000", "1", "50000"))
    market.add_order(make_order(OrderSide.SELL, "51000", "1", "51000"))
    assert market.cancel_all_orders() is True
    assert store.get_active_orders("BTC-USD") == []


def test_concurrent_orders_all_stored(market, store):
    orders = [make_order(OrderSide.BUY, "100", "1", "100") for _ in range(20)]
    threads = [threading.Thread(target=market.add_order, args=(o,)) for o in orders]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    active = store.get_active_orders("BTC-USD")
    assert {o.id for o in active} == {o.id for o in orders}
    for o in orders:
        assert market.get_order_by_id(o.id).id == o.id


def test_recovered_orders_available(store):
    first = Market(store, "BTC-USD", "BTC", "USD")
    first.start_market()
    order = make_order(OrderSide.SELL, "200", "2", "400")
    first.add_order(order)
    second = Market(store, "BTC-USD", "BTC", "USD")
    second.start_market()
    assert second.get_order_by_id(order.id).remained_base == Decimal("2")