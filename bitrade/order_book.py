"""The order book of one market: resting orders, depth and order lifecycle."""

from __future__ import annotations

from dataclasses import replace

from bitrade import book_printer
from bitrade.matched_trade import MatchedTrade
from bitrade.matching import MatchingEngine
from bitrade.trade_order import OrderSide, OrderType, TradeOrder


class OrderBook(MatchingEngine):
    """Resting bids and asks of a market, backed by a persister.

    On creation the book reloads the market's active orders from storage:
    limit orders are matched back onto the book and market orders are
    cancelled.
    """

    def __init__(self, persister, base_asset, market_id, quote_asset):
        super().__init__(persister, base_asset, market_id, quote_asset)
        self.recover_orders_from_db()

    def recover_orders_from_db(self) -> None:
        """Rebuild the book from the active orders held in storage."""
        records = self.persister.get_active_orders(self.market_id)
        self.bid_depth.clear()
        self.ask_depth.clear()
        for record in records:
            order = TradeOrder.from_record(record)
            if order.order_type is OrderType.LIMIT:
                self.match_limit_order(order)
            else:
                self.cancel_order(order.id)
        print(f"Loaded {len(records)} orders from database")

    def add_order(self, order: TradeOrder) -> list[MatchedTrade]:
        """Check, store and match a new order; return the trades it made."""
        if order.order_type is OrderType.LIMIT and order.price <= 0:
            raise ValueError("Price must be greater than 0 for limit orders")
        if order.side is OrderSide.BUY:
            if order.quote_amount <= 0:
                raise ValueError("Quote amount must be greater than 0")
        elif order.base_amount <= 0:
            raise ValueError("Amount must be greater than 0")

        book_printer.print_order(order)
        self.persist_create_order(order)
        if order.order_type is OrderType.LIMIT:
            return self.match_limit_order(order)
        return self.match_market_order(order)

    def cancel_order(self, order_id: str) -> bool:
        """Cancel an order; return whether it was resting on the book."""
        return self._cancel(order_id)

    def get_order_by_id(self, order_id: str) -> TradeOrder:
        """Return a copy of a resting order."""
        for order in (*self.bids, *self.asks):
            if order.id == order_id:
                return replace(order)
        raise KeyError("can not find the order!")

    def cancel_all_orders(self) -> bool:
        """Cancel every order of the market and empty the book."""
        self.persister.cancel_all_orders(self.market_id)
        self.bids.clear()
        self.asks.clear()
        self.bid_depth.clear()
        self.ask_depth.clear()
        return True

    def persist_create_order(self, order: TradeOrder) -> None:
        """Store a new order."""
        self.persister.create_order(order.to_record())