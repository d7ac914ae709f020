from decimal import Decimal

import pytest

from bitrade.matched_trade import MarketRole, MatchedTrade, TakerSide


def make_trade(taker_side="BUY", liquidation=False):
    return MatchedTrade(
        id="t1",
        timestamp=1700,
        market_id="BTC-USD",
        price=Decimal("50000"),
        base_amount=Decimal("1"),
        quote_amount=Decimal("50000"),
        seller_user_id="s",
        seller_order_id="so",
        seller_fee=Decimal("0.001"),
        buyer_user_id="b",
        buyer_order_id="bo",
        buyer_fee=Decimal("0.002"),
        is_liquidation=liquidation,
        taker_side=taker_side,
    )


def test_market_role_parse_ignores_case():
    assert MarketRole.parse("maker") is MarketRole.MAKER
    assert MarketRole.parse("TaKeR") is MarketRole.TAKER


def test_market_role_parse_rejects_unknown():
    with pytest.raises(ValueError, match="Invalid MarketRole: broker"):
        MarketRole.parse("broker")


def test_to_record_copies_fields():
    trade = make_trade()
    record = trade.to_record()
    assert record.id == trade.id
    assert record.price == trade.price
    assert record.buyer_order_id == "bo"
    assert record.seller_order_id == "so"
    assert record.buyer_fee == trade.buyer_fee
    assert record.is_liquidation is False
    assert record.taker_side == "BUY"


def test_to_record_accepts_taker_side_enum():
    record = make_trade(taker_side=TakerSide.SELL, liquidation=True).to_record()
    assert record.taker_side == "SELL"
    assert record.is_liquidation is True