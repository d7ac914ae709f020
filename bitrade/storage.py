"""Persistent record types and the storage interface the engine relies on."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Protocol, runtime_checkable


def _parse_member(enum_cls, value):
    """Return the member of ``enum_cls`` whose value matches ``value`` ignoring case."""
    wanted = str(value).upper()
    for member in enum_cls:
        if member.value.upper() == wanted:
            return member
    raise ValueError(f"Invalid {enum_cls.__name__}: {value}")


class _StrEnum(str, Enum):
    """String enum that prints as its value."""

    def __str__(self) -> str:
        return self.value


class OrderStatus(_StrEnum):
    OPEN = "OPEN"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    FILLED = "FILLED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, value):
        """Return the status named by ``value``, ignoring case."""
        return _parse_member(cls, value)


class TimeInForce(_StrEnum):
    GTC = "GTC"
    IOC = "IOC"
    FOK = "FOK"

    @classmethod
    def parse(cls, value):
        """Return the time-in-force named by ``value``, ignoring case."""
        return _parse_member(cls, value)


class MarketStatus(_StrEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"

    @classmethod
    def parse(cls, value):
        """Return the market status named by ``value``, ignoring case."""
        return _parse_member(cls, value)


@dataclass
class OrderRecord:
    """An order as stored."""

    id: str
    market_id: str
    user_id: str
    order_type: str
    side: str
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
    status: str
    client_order_id: Optional[str] = None
    post_only: Optional[bool] = None
    time_in_force: Optional[str] = None
    expires_at: Optional[int] = None


@dataclass
class TradeRecord:
    """A settled trade as stored."""

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
    taker_side: str
    is_liquidation: Optional[bool] = None


@dataclass
class WalletRecord:
    """Balances of one user in one asset."""

    user_id: str
    asset: str
    available: Decimal = Decimal(0)
    locked: Decimal = Decimal(0)
    reserved: Decimal = Decimal(0)
    total_deposited: Decimal = Decimal(0)
    total_withdrawn: Decimal = Decimal(0)
    update_time: int = 0


@dataclass
class MarketRecord:
    """A market as stored."""

    id: str
    base_asset: str
    quote_asset: str
    default_maker_fee: Decimal
    default_taker_fee: Decimal
    create_time: int
    update_time: int
    status: str
    min_base_amount: Decimal
    min_quote_amount: Decimal
    price_precision: int
    amount_precision: int


@dataclass
class MatchResultRecord:
    """A taker/maker match as stored."""

    id: str
    market_id: str
    taker_order_id: str
    maker_order_id: str
    price: Decimal
    base_amount: Decimal
    quote_amount: Decimal
    taker_fee: Decimal
    maker_fee: Decimal
    side: str
    created_at: int


@runtime_checkable
class Persistence(Protocol):
    """Storage the order books, markets and wallets read from and write to."""

    def create_market(self, market: MarketRecord) -> MarketRecord:
        """Store a new market."""

    def list_markets(self) -> list[MarketRecord]:
        """Return every stored market."""

    def create_order(self, order: OrderRecord) -> OrderRecord:
        """Store a new order."""

    def get_order(self, order_id: str) -> Optional[OrderRecord]:
        """Return the order with this id, or None."""

    def get_active_orders(self, market_id: str) -> list[OrderRecord]:
        """Return the open and partially filled orders of a market."""

    def cancel_order(self, order_id: str) -> None:
        """Mark an order cancelled."""

    def cancel_all_orders(self, market_id: str) -> None:
        """Mark every active order of a market cancelled."""

    def execute_limit_trade(
        self,
        is_buyer_taker: bool,
        market_id: str,
        base_asset: str,
        quote_asset: str,
        buyer_user_id: str,
        seller_user_id: str,
        buyer_order_id: str,
        seller_order_id: str,
        price: Decimal,
        base_amount: Decimal,
        quote_amount: Decimal,
        buyer_fee: Decimal,
        seller_fee: Decimal,
    ) -> TradeRecord:
        """Settle a trade between two orders and return the stored trade."""

    def get_wallet(self, user_id: str, asset: str) -> Optional[WalletRecord]:
        """Return a user's wallet for an asset, or None."""

    def deposit_balance(self, user_id: str, asset: str, amount: Decimal) -> WalletRecord:
        """Add to the available balance."""

    def withdraw_balance(self, user_id: str, asset: str, amount: Decimal) -> WalletRecord:
        """Take from the available balance."""

    def lock_balance(self, user_id: str, asset: str, amount: Decimal) -> WalletRecord:
        """Move an amount from available to locked."""

    def unlock_balance(self, user_id: str, asset: str, amount: Decimal) -> WalletRecord:
        """Move an amount from locked back to available."""