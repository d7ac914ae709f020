"""Orders as the matching engine sees them."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from bitrade.storage import OrderRecord, OrderStatus, TimeInForce


class OrderType(str, Enum):
    LIMIT = "LIMIT"
    MARKET = "MARKET"

    @classmethod
    def parse(cls, value):
        """Parse an order type name, ignoring case."""
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Invalid OrderType: {value}") from None

    def __str__(self) -> str:
        return self.value


class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def parse(cls, value):
        """Parse an order side name, ignoring case."""
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Invalid OrderSide: {value}") from None

    def __str__(self) -> str:
        return self.value


@dataclass(eq=False)
class TradeOrder:
    """An order with its fill state. Orders compare equal by id."""

    id: str
    market_id: str
    order_type: OrderType
    side: OrderSide
    user_id: str
    price: Decimal
    base_amount: Decimal
    quote_amount: Decimal
    maker_fee: Decimal
    taker_fee: Decimal
    create_time: int
    remained_base: Decimal
    remained_quote: Decimal
    filled_base: Decimal
    filled_quote: Decimal
    filled_fee: Decimal
    update_time: int
    client_order_id: Optional[str] = None
    post_only: Optional[bool] = None
    time_in_force: Optional[TimeInForce] = None
    expires_at: Optional[int] = None
    status: OrderStatus = OrderStatus.OPEN

    def __eq__(self, other):
        if not isinstance(other, TradeOrder):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def priority_key(self):
        """Sort key under which the best order on its side comes first.

        Bids rank by highest price, asks by lowest; ties go to the earlier order.
        """
        if self.side is OrderSide.BUY:
            return (-self.price, self.create_time)
        return (self.price, self.create_time)

    def __lt__(self, other):
        if not isinstance(other, TradeOrder):
            return NotImplemented
        if self.side is not other.side:
            raise ValueError("Cannot compare orders with different sides")
        return self.priority_key() < other.priority_key()

    @classmethod
    def from_record(cls, record: OrderRecord) -> "TradeOrder":
        """Build an order from its stored form."""
        time_in_force = (
            TimeInForce.parse(record.time_in_force)
            if record.time_in_force is not None
            else None
        )
        return cls(
            id=record.id,
            market_id=record.market_id,
            order_type=OrderType.parse(record.order_type),
            side=OrderSide.parse(record.side),
            user_id=record.user_id,
            price=record.price,
            base_amount=record.base_amount,
            quote_amount=record.quote_amount,
            maker_fee=record.maker_fee,
            taker_fee=record.taker_fee,
            create_time=record.create_time,
            remained_base=record.remained_base,
            remained_quote=record.remained_quote,
            filled_base=record.filled_base,
            filled_quote=record.filled_quote,
            filled_fee=record.filled_fee,
            update_time=record.update_time,
            client_order_id=record.client_order_id,
            post_only=record.post_only,
            time_in_force=time_in_force,
            expires_at=record.expires_at,
            status=OrderStatus.parse(record.status),
        )

    def to_record(self) -> OrderRecord:
        """Stored form of the order; the status is derived from the fill state."""
        return OrderRecord(
            id=self.id,
            market_id=self.market_id,
            user_id=self.user_id,
            order_type=self.order_type.value,
            side=self.side.value,
            price=self.price,
            base_amount=self.base_amount,
            quote_amount=self.quote_amount,
            maker_fee=self.maker_fee,
            taker_fee=self.taker_fee,
            create_time=self.create_time,
            remained_base=self.remained_base,
            remained_quote=self.remained_quote,
            filled_base=self.filled_base,
            filled_quote=self.filled_quote,
            filled_fee=self.filled_fee,
            update_time=self.update_time,
            status=determine_order_status(self).value,
            client_order_id=self.client_order_id,
            post_only=self.post_only,
            time_in_force=self.time_in_force.value if self.time_in_force else None,
            expires_at=self.expires_at,
        )


def determine_order_status(order: TradeOrder) -> OrderStatus:
    """Status implied by how much of the order has been filled."""
    if order.remained_base == 0:
        return OrderStatus.FILLED
    if order.filled_base > 0:
        return OrderStatus.PARTIALLY_FILLED
    return OrderStatus.OPEN