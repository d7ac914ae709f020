"""Conversions between engine objects and stored records."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from bitrade.storage import MatchResultRecord, OrderRecord
from bitrade.trade_order import OrderSide, TradeOrder


@dataclass
class MatchedOrder:
    """A taker order matched against a maker order."""

    id: str
    market_id: str
    taker_order_id: str
    maker_order_id: str
    price: Decimal
    base_amount: Decimal
    quote_amount: Decimal
    taker_fee: Decimal
    maker_fee: Decimal
    side: OrderSide
    created_at: int


class TradeOrderAdaptor:
    """Converts orders to and from their stored form."""

    @staticmethod
    def from_db_order(order: OrderRecord) -> TradeOrder:
        return TradeOrder.from_record(order)

    @staticmethod
    def to_db_order(trade_order: TradeOrder) -> OrderRecord:
        return trade_order.to_record()


class MatchedOrderAdaptor:
    """Converts matches to and from their stored form."""

    @staticmethod
    def from_db_match_result(match_result: MatchResultRecord) -> MatchedOrder:
        return MatchedOrder(
            id=match_result.id,
            market_id=match_result.market_id,
            taker_order_id=match_result.taker_order_id,
            maker_order_id=match_result.maker_order_id,
            price=match_result.price,
            base_amount=match_result.base_amount,
            quote_amount=match_result.quote_amount,
            taker_fee=match_result.taker_fee,
            maker_fee=match_result.maker_fee,
            side=OrderSide.parse(match_result.side),
            created_at=match_result.created_at,
        )

    @staticmethod
    def to_db_match_result(matched_order: MatchedOrder) -> MatchResultRecord:
        return MatchResultRecord(
            id=matched_order.id,
            market_id=matched_order.market_id,
            taker_order_id=matched_order.taker_order_id,
            maker_order_id=matched_order.maker_order_id,
            price=matched_order.price,
            base_amount=matched_order.base_amount,
            quote_amount=matched_order.quote_amount,
            taker_fee=matched_order.taker_fee,
            maker_fee=matched_order.maker_fee,
            side=matched_order.side.value,
            created_at=matched_order.created_at,
        )