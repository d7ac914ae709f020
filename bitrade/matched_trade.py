"""Trades produced by the matching engine."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from bitrade.storage import TradeRecord


class TakerSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"

    def __str__(self) -> str:
        return self.value


class MarketRole(str, Enum):
    MAKER = "MAKER"  # order was resting on the book
    TAKER = "TAKER"  # order matched on arrival

    @classmethod
    def parse(cls, value):
        """Parse a role name, ignoring case."""
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Invalid MarketRole: {value}") from None

    def __str__(self) -> str:
        return self.value


@dataclass
class MatchedTrade:
    """One fill between a buyer and a seller."""

    id: str
    timestamp: int
    market_id: str
    price: Decimal
    base_amount: Decimal
    quote_amount: Decimal
    seller_user_id: str
    seller_order_id: str
    seller_fee: Decimal
    buyer_user_id: str
    buyer_order_id: str
    buyer_fee: Decimal
    is_liquidation: bool
    taker_side: str

    def to_record(self) -> TradeRecord:
        """Stored form of the trade."""
        return TradeRecord(
            id=self.id,
            timestamp=self.timestamp,
            market_id=self.market_id,
            price=self.price,
            base_amount=self.base_amount,
            quote_amount=self.quote_amount,
            seller_user_id=self.seller_user_id,
            seller_order_id=self.seller_order_id,
            seller_fee=self.seller_fee,
            buyer_user_id=self.buyer_user_id,
            buyer_order_id=self.buyer_order_id,
            buyer_fee=self.buyer_fee,
            taker_side=str(self.taker_side),
            is_liquidation=self.is_liquidation,
        )