"""A thread-safe in-memory implementation of the storage interface."""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from bitrade.storage import (
    MarketRecord,
    OrderRecord,
    OrderStatus,
    TradeRecord,
    WalletRecord,
)

_ACTIVE = {OrderStatus.OPEN.value, OrderStatus.PARTIALLY_FILLED.value}


def _now_millis() -> int:
    return int(time.time() * 1000)


class InMemoryPersistence:
    """Keeps markets, orders, trades and wallets in memory.

    Every read returns a copy, so callers cannot change stored state by
    mutating what they get back. Trade settlement moves balances without
    checking that the parties are funded.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._markets: dict[str, MarketRecord] = {}
        self._orders: dict[str, OrderRecord] = {}
        self._trades: list[TradeRecord] = []
        self._wallets: dict[tuple[str, str], WalletRecord] = {}

    @property
    def trades(self) -> list[TradeRecord]:
        """Every trade settled so far, oldest first."""
        with self._lock:
            return [replace(trade) for trade in self._trades]

    # Markets

    def create_market(self, market: MarketRecord) -> MarketRecord:
        with self._lock:
            if market.id in self._markets:
                raise ValueError(f"Market {market.id} already exists")
            self._markets[market.id] = replace(market)
            return replace(market)

    def list_markets(self) -> list[MarketRecord]:
        with self._lock:
            return [replace(market) for market in self._markets.values()]

    # Orders

    def create_order(self, order: OrderRecord) -> OrderRecord:
        with self._lock:
            if order.id in self._orders:
                raise ValueError(f"Order {order.id} already exists")
            self._orders[order.id] = replace(order)
            return replace(order)

    def get_order(self, order_id: str) -> Optional[OrderRecord]:
        with self._lock:
            order = self._orders.get(order_id)
            return replace(order) if order is not None else None

    def get_active_orders(self, market_id: str) -> list[OrderRecord]:
        with self._lock:
            active = [
                replace(order)
                for order in self._orders.values()
                if order.market_id == market_id and order.status in _ACTIVE
            ]
        return sorted(active, key=lambda order: order.create_time)

    def _stored_order(self, order_id: str) -> OrderRecord:
        try:
            return self._orders[order_id]
        except KeyError:
            raise KeyError(f"Order {order_id} not found") from None

    def cancel_order(self, order_id: str) -> None:
        with self._lock:
            order = self._stored_order(order_id)
            order.status = OrderStatus.CANCELLED.value
            order.update_time = _now_millis()

    def cancel_all_orders(self, market_id: str) -> None:
        with self._lock:
            now = _now_millis()
            for order in self._orders.values():
                if order.market_id == market_id and order.status in _ACTIVE:
                    order.status = OrderStatus.CANCELLED.value
                    order.update_time = now

    # Trades

    @staticmethod
    def _fill(order: OrderRecord, base: Decimal, quote: Decimal, fee: Decimal, now: int):
        order.remained_base -= base
        order.remained_quote -= quote
        order.filled_base += base
        order.filled_quote += quote
        order.filled_fee += fee
        order.update_time = now
        order.status = (
            OrderStatus.FILLED.value
            if order.remained_base <= 0
            else OrderStatus.PARTIALLY_FILLED.value
        )

    def execute_limit_trade(
        self,
        is_buyer_taker,
        market_id,
        base_asset,
        quote_asset,
        buyer_user_id,
        seller_user_id,
        buyer_order_id,
        seller_order_id,
        price,
        base_amount,
        quote_amount,
        buyer_fee,
        seller_fee,
    ) -> TradeRecord:
        """Fill both orders, move balances and record the trade.

        ``buyer_fee`` and ``seller_fee`` are rates; the buyer pays its fee in
        the base asset it receives, the seller in the quote asset.
        """
        with self._lock:
            buyer = self._stored_order(buyer_order_id)
            seller = self._stored_order(seller_order_id)
            now = _now_millis()

            buyer_fee_amount = base_amount * buyer_fee
            seller_fee_amount = quote_amount * seller_fee

            self._fill(buyer, base_amount, quote_amount, buyer_fee_amount, now)
            self._fill(seller, base_amount, quote_amount, seller_fee_amount, now)

            self._wallet(buyer_user_id, quote_asset).available -= quote_amount
            self._wallet(buyer_user_id, base_asset).available += base_amount - buyer_fee_amount
            self._wallet(seller_user_id, base_asset).available -= base_amount
            self._wallet(seller_user_id, quote_asset).available += quote_amount - seller_fee_amount
            for key in (
                (buyer_user_id, quote_asset),
                (buyer_user_id, base_asset),
                (seller_user_id, base_asset),
                (seller_user_id, quote_asset),
            ):
                self._wallets[key].update_time = now

            trade = TradeRecord(
                id=str(uuid.uuid4()),
                timestamp=now,
                market_id=market_id,
                price=price,
                base_amount=base_amount,
                quote_amount=quote_amount,
                seller_user_id=seller_user_id,
                seller_order_id=seller_order_id,
                seller_fee=seller_fee_amount,
                buyer_user_id=buyer_user_id,
                buyer_order_id=buyer_order_id,
                buyer_fee=buyer_fee_amount,
                taker_side="BUY" if is_buyer_taker else "SELL",
                is_liquidation=False,
            )
            self._trades.append(trade)
            return replace(trade)

    # Wallets

    def _wallet(self, user_id: str, asset: str) -> WalletRecord:
        key = (user_id, asset)
        wallet = self._wallets.get(key)
        if wallet is None:
            wallet = WalletRecord(user_id=user_id, asset=asset, update_time=_now_millis())
            self._wallets[key] = wallet
        return wallet

    def get_wallet(self, user_id: str, asset: str) -> Optional[WalletRecord]:
        with self._lock:
            wallet = self._wallets.get((user_id, asset))
            return replace(wallet) if wallet is not None else None

    def deposit_balance(self, user_id: str, asset: str, amount: Decimal) -> WalletRecord:
        with self._lock:
            wallet = self._wallet(user_id, asset)
            wallet.available += amount
            wallet.total_deposited += amount
            wallet.update_time = _now_millis()
            return replace(wallet)

    def withdraw_balance(self, user_id: str, asset: str, amount: Decimal) -> WalletRecord:
        with self._lock:
            wallet = self._wallets.get((user_id, asset))
            if wallet is None or wallet.available < amount:
                raise ValueError(f"Insufficient {asset} balance for user {user_id}")
            wallet.available -= amount
            wallet.total_withdrawn += amount
            wallet.update_time = _now_millis()
            return replace(wallet)

    def lock_balance(self, user_id: str, asset: str, amount: Decimal) -> WalletRecord:
        with self._lock:
            wallet = self._wallets.get((user_id, asset))
            if wallet is None or wallet.available < amount:
                raise ValueError(f"Insufficient {asset} balance to lock for user {user_id}")
            wallet.available -= amount
            wallet.locked += amount
            wallet.update_time = _now_millis()
            return replace(wallet)

    def unlock_balance(self, user_id: str, asset: str, amount: Decimal) -> WalletRecord:
        with self._lock:
            wallet = self._wallets.get((user_id, asset))
            if wallet is None or wallet.locked < amount:
                raise ValueError(f"Insufficient locked {asset} balance for user {user_id}")
            wallet.locked -= amount
            wallet.available += amount
            wallet.update_time = _now_millis()
            return replace(wallet)