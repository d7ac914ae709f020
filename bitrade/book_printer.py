"""Human-readable console output of orders, trades and order books."""

from __future__ import annotations

import os
from decimal import Decimal

from bitrade.trade_order import OrderType

_STYLES = {
    "bold": "1",
    "red": "31",
    "green": "32",
    "blue": "34",
    "cyan": "36",
    "white": "37",
}


def _paint(text, *styles):
    if os.environ.get("NO_COLOR"):
        return text
    codes = ";".join(_STYLES[style] for style in styles)
    return f"\x1b[{codes}m{text}\x1b[0m"


def _num(value):
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def format_order(order):
    """One-line description of a newly arrived order."""
    return (
        f"New Order Arrived {_paint('Order id:', 'blue')} {order.id} , "
        f"{_paint('price:', 'blue')} {_num(order.price)} , "
        f"{_paint('amount:', 'blue')} {_num(order.base_amount)}, "
        f"{_paint('Type:', 'blue')} {order.order_type.value}"
    )


def format_trade(trade):
    """One-line description of a matched trade."""
    return (
        f"New Trade Matched {_paint('Trade id:', 'cyan')} {trade.id} , "
        f"{_paint('price:', 'cyan')} {_num(trade.price)} , "
        f"{_paint('base_amount:', 'cyan')} {_num(trade.base_amount)} , "
        f"{_paint('quote_amount:', 'cyan')} {_num(trade.quote_amount)}"
    )


def _format_book_line(order, color):
    price = "Market" if order.order_type is OrderType.MARKET else _num(order.price)
    return (
        f"{_paint('id:', color)} {order.id} , "
        f"{_paint('price:', color)} {price} , "
        f"{_paint('amount:', color)} {_num(order.base_amount)} , "
        f"{_paint('remain:', color)} {_num(order.remained_base)} , "
        f"{_paint(order.order_type.value, 'blue')} {_paint(order.user_id, 'blue')}"
    )


def print_order(order):
    print()
    print(format_order(order))


def print_trade(trade):
    print()
    print(format_trade(trade))


def print_bids(book):
    """Print resting bids, best first."""
    for bid in sorted(book.bids, key=lambda o: o.priority_key()):
        print(_format_book_line(bid, "green"))


def print_asks(book):
    """Print resting asks, best first."""
    for ask in sorted(book.asks, key=lambda o: o.priority_key()):
        print(_format_book_line(ask, "red"))


def print_depth(book):
    """Print the aggregated amount at each price level."""
    print("Bids Depth: ")
    for price, amount in sorted(book.bid_depth.items(), reverse=True):
        print(f"{_num(price)} {_num(amount)}")
    print("Asks Depth: ")
    for price, amount in sorted(book.ask_depth.items()):
        print(f"{_num(price)} {_num(amount)}")


def print_order_book(book):
    print()
    print(_paint("Order Book:", "bold", "white"))
    print(_paint("Bids (Buy Orders):", "green", "bold"))
    print_bids(book)
    print(_paint("Asks (Sell Orders):", "red", "bold"))
    print_asks(book)
    print(_paint("Depth:", "bold", "white"))
    print_depth(book)