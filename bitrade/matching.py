"""Price-time priority matching of orders against the resting book."""

from __future__ import annotations

import heapq
from dataclasses import fields
from decimal import ROUND_HALF_UP, Context, Decimal, localcontext

from bitrade import book_printer
from bitrade.matched_trade import MatchedTrade
from bitrade.trade_order import OrderSide, OrderType, TradeOrder

_AMOUNT_CONTEXT = Context(prec=8, rounding=ROUND_HALF_UP)


class MatchingError(RuntimeError):
    """Matching could not proceed."""


class MatchingEngine:
    """Resting bids and asks, aggregated depth and the matching rules.

    ``bids`` and ``asks`` are heaps of orders whose first element is the best
    order on that side; ``bid_depth`` and ``ask_depth`` map a price to the
    remaining amount resting there.
    """

    def __init__(self, persister, base_asset, market_id, quote_asset):
        self.persister = persister
        self.base_asset = base_asset
        self.market_id = market_id
        self.quote_asset = quote_asset
        self.bids: list[TradeOrder] = []
        self.asks: list[TradeOrder] = []
        self.bid_depth: dict[Decimal, Decimal] = {}
        self.ask_depth: dict[Decimal, Decimal] = {}
        self.market_price: Decimal | None = None

    # Depth

    def _adjust_depth(self, order: TradeOrder, delta: Decimal) -> None:
        if order.order_type is OrderType.MARKET or delta == 0:
            return
        depth = self.bid_depth if order.side is OrderSide.BUY else self.ask_depth
        total = depth.get(order.price, Decimal(0)) + delta
        if total == 0:
            depth.pop(order.price, None)
        else:
            depth[order.price] = total

    def handle_market_depth(self, order: TradeOrder) -> None:
        """Add the order's remaining amount to the depth at its price."""
        self._adjust_depth(order, order.remained_base)

    # Book helpers

    def _cancel(self, order_id: str) -> bool:
        """Cancel an order in storage and drop it from the book if it rests there."""
        self.persister.cancel_order(order_id)
        for book in (self.bids, self.asks):
            for order in book:
                if order.id == order_id:
                    book.remove(order)
                    heapq.heapify(book)
                    self._adjust_depth(order, -order.remained_base)
                    return True
        return False

    def _refresh(self, order: TradeOrder) -> None:
        record = self.persister.get_order(order.id)
        if record is None:
            raise MatchingError(f"Order {order.id} not found in storage")
        fresh = TradeOrder.from_record(record)
        for field in fields(fresh):
            setattr(order, field.name, getattr(fresh, field.name))

    # Matching

    def _match(self, order: TradeOrder, respect_price: bool) -> list[MatchedTrade]:
        is_buy = order.side is OrderSide.BUY
        opposite = self.asks if is_buy else self.bids
        trades = []
        while opposite:
            resting = heapq.heappop(opposite)
            if respect_price and (
                resting.price > order.price if is_buy else resting.price < order.price
            ):
                heapq.heappush(opposite, resting)
                break
            buyer, seller = (order, resting) if is_buy else (resting, order)
            trade_price = self.calculate_trade_price(buyer, seller, is_buy)
            trade_amount = self.calculate_trade_amount(buyer, seller, trade_price)
            trades.append(self.execute_trade(buyer, seller, trade_amount, trade_price, is_buy))
            if resting.remained_base != 0:
                heapq.heappush(opposite, resting)
            if order.remained_base == 0:
                break
        return trades

    def match_limit_order(self, order: TradeOrder) -> list[MatchedTrade]:
        """Match a limit order and rest whatever is left of it on the book."""
        book_printer.print_order(order)
        self.handle_market_depth(order)
        trades = self._match(order, respect_price=True)
        if order.remained_base != 0:
            heapq.heappush(self.bids if order.side is OrderSide.BUY else self.asks, order)
        book_printer.print_order_book(self)
        return trades

    def match_market_order(self, order: TradeOrder) -> list[MatchedTrade]:
        """Match a market order at any price; an unfilled rest is cancelled."""
        book_printer.print_order(order)
        trades = self._match(order, respect_price=False)
        if order.remained_base != 0:
            self._cancel(order.id)
        book_printer.print_order_book(self)
        return trades

    def match_fok_order(self, order: TradeOrder) -> list[MatchedTrade]:
        """Match fully or not at all; an order that cannot fill is cancelled."""
        is_buy = order.side is OrderSide.BUY
        opposite = self.asks if is_buy else self.bids
        popped = []
        fully_matched = False
        remained_base = order.remained_base
        remained_quote = order.remained_quote
        probe = TradeOrder(**{f.name: getattr(order, f.name) for f in fields(order)})

        while opposite:
            resting = heapq.heappop(opposite)
            if resting.price > order.price if is_buy else resting.price < order.price:
                heapq.heappush(opposite, resting)
                break
            popped.append(resting)
            probe.remained_base = remained_base
            probe.remained_quote = remained_quote
            buyer, seller = (probe, resting) if is_buy else (resting, probe)
            trade_price = self.calculate_trade_price(buyer, seller, is_buy)
            trade_amount = self.calculate_trade_amount(buyer, seller, trade_price)
            remained_base -= trade_amount
            remained_quote -= trade_amount * trade_price
            if remained_base == 0:
                fully_matched = True
                break

        for resting in popped:
            heapq.heappush(opposite, resting)

        if not fully_matched:
            self._cancel(order.id)
            raise MatchingError("FOK order not fully matched")
        return self.match_limit_order(order)

    def execute_trade(self, buyer, seller, base_amount, trade_price, is_buyer_taker):
        """Settle one fill in storage and bring both orders up to date."""
        if is_buyer_taker:
            buyer_fee, seller_fee = buyer.taker_fee, seller.maker_fee
        else:
            buyer_fee, seller_fee = buyer.maker_fee, seller.taker_fee

        trade_data = self.persister.execute_limit_trade(
            is_buyer_taker,
            self.market_id,
            self.base_asset,
            self.quote_asset,
            buyer.user_id,
            seller.user_id,
            buyer.id,
            seller.id,
            trade_price,
            base_amount,
            base_amount * trade_price,
            buyer_fee,
            seller_fee,
        )

        buyer_before = buyer.remained_base
        seller_before = seller.remained_base
        self._refresh(buyer)
        self._refresh(seller)
        self._adjust_depth(buyer, buyer.remained_base - buyer_before)
        self._adjust_depth(seller, seller.remained_base - seller_before)

        self.market_price = trade_price
        trade = MatchedTrade(
            id=trade_data.id,
            timestamp=trade_data.timestamp,
            market_id=trade_data.market_id,
            price=trade_data.price,
            base_amount=trade_data.base_amount,
            quote_amount=trade_data.quote_amount,
            seller_user_id=trade_data.seller_user_id,
            seller_order_id=trade_data.seller_order_id,
            seller_fee=trade_data.seller_fee,
            buyer_user_id=trade_data.buyer_user_id,
            buyer_order_id=trade_data.buyer_order_id,
            buyer_fee=trade_data.buyer_fee,
            is_liquidation=bool(trade_data.is_liquidation),
            taker_side=trade_data.taker_side,
        )
        book_printer.print_trade(trade)
        return trade

    def calculate_trade_price(self, buyer, seller, is_buyer_taker) -> Decimal:
        """Price at which a buyer and a seller trade.

        A market order takes the limit order's price, two market orders trade
        at the last price, and two limit orders at the taker's price.
        """
        buyer_market = buyer.order_type is OrderType.MARKET
        seller_market = seller.order_type is OrderType.MARKET
        if buyer_market and seller_market:
            if self.market_price is None:
                raise MatchingError("No last traded price available for Market-Market order")
            return self.market_price
        if buyer_market:
            return seller.price
        if seller_market:
            return buyer.price
        return buyer.price if is_buyer_taker else seller.price

    def calculate_trade_amount(self, buyer, seller, trade_price) -> Decimal:
        """Base amount a buyer and a seller can exchange at ``trade_price``.

        A market buyer spends its remaining quote, rounded to 8 significant
        digits; otherwise the smaller remaining base amount trades.
        """
        if buyer.order_type is OrderType.MARKET:
            if trade_price == 0:
                raise MatchingError("Trade price must not be zero for a market buy")
            with localcontext() as ctx:
                ctx.prec = 50
                affordable = buyer.remained_quote / trade_price
            return min(_AMOUNT_CONTEXT.plus(affordable), seller.remained_base)
        return min(seller.remained_base, buyer.remained_base)