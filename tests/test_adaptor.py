from decimal import Decimal

import pytest

from bitrade.adaptor import MatchedOrderAdaptor, TradeOrderAdaptor
from bitrade.storage import MatchResultRecord, OrderRecord
from bitrade.trade_order import OrderSide, OrderType


def make_order_record(status="OPEN"):
    return OrderRecord(
        id="o1",
        market_id="BTC-USD",
        user_id="1",
        order_type="limit",
        side="buy",
        price=Decimal("50000"),
        base_amount=Decimal("1"),
        quote_amount=Decimal("50000"),
        maker_fee=Decimal("0"),
        taker_fee=Decimal("0"),
        create_time=1,
        remained_base=Decimal("1"),
        remained_quote=Decimal("50000"),
        filled_base=Decimal("0"),
        filled_quote=Decimal("0"),
        filled_fee=Decimal("0"),
        update_time=1,
        status=status,
    )


def make_match(side="BUY"):
    return MatchResultRecord(
        id="m1",
        market_id="BTC-USD",
        taker_order_id="t",
        maker_order_id="m",
        price=Decimal("100"),
        base_amount=Decimal("2"),
        quote_amount=Decimal("200"),
        taker_fee=Decimal("0.002"),
        maker_fee=Decimal("0.001"),
        side=side,
        created_at=5,
    )


def test_order_round_trip_normalises_names():
    order = TradeOrderAdaptor.from_db_order(make_order_record())
    assert order.order_type is OrderType.LIMIT
    assert order.side is OrderSide.BUY
    record = TradeOrderAdaptor.to_db_order(order)
    assert record.order_type == "LIMIT"
    assert record.side == "BUY"
    assert record.status == "OPEN"
    assert record.price == Decimal("50000")


def test_from_db_order_rejects_bad_status():
    with pytest.raises(ValueError):
        TradeOrderAdaptor.from_db_order(make_order_record(status="LOST"))


def test_match_result_round_trip():
    record = make_match()
    matched = MatchedOrderAdaptor.from_db_match_result(record)
    assert matched.side is OrderSide.BUY
    assert MatchedOrderAdaptor.to_db_match_result(matched) == record


def test_match_result_side_is_parsed_case_insensitively():
    matched = MatchedOrderAdaptor.from_db_match_result(make_match(side="sell"))
    assert matched.side is OrderSide.SELL
    assert MatchedOrderAdaptor.to_db_match_result(matched).side == "SELL"


def test_match_result_rejects_bad_side():
    with pytest.raises(ValueError, match="Invalid OrderSide"):
        MatchedOrderAdaptor.from_db_match_result(make_match(side="up"))