# bitrade

An in-process spot-market matching engine. It keeps one order book for each
market and matches incoming orders by price and time priority. It records
trades through a storage object, tracks depth at each price level and manages
user wallets.

All prices, amounts and fees are `decimal.Decimal` values. The package needs
nothing outside the standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `bitrade.trade_order`: `TradeOrder`, `OrderType` (`LIMIT`, `MARKET`),
  `OrderSide` (`BUY`, `SELL`) and `determine_order_status`. Orders compare
  equal by id. `TradeOrder.priority_key()` ranks bids by highest price and asks
  by lowest price. At the same price, the earlier `create_time` comes first.
- `bitrade.matched_trade`: `MatchedTrade`, `TakerSide` and `MarketRole`.
- `bitrade.storage`: the record dataclasses (`OrderRecord`, `TradeRecord`,
  `WalletRecord`, `MarketRecord`, `MatchResultRecord`), the enums
  `OrderStatus`, `TimeInForce` and `MarketStatus`, and the `Persistence`
  protocol that every store implements.
- `bitrade.memory_store`: `InMemoryPersistence`, a thread-safe store held in
  memory.
- `bitrade.matching`: `MatchingEngine`, which holds the matching rules and
  depth handling, and `MatchingError`.
- `bitrade.order_book`: `OrderBook`, a `MatchingEngine` for one market.
- `bitrade.market`: `Market`, which runs one order book on its own worker
  thread. It also defines `MarketError`, `MarketNotStartedError` and
  `MarketAlreadyStartedError`.
- `bitrade.market_manager`: `MarketManager`, which creates, starts and stops
  markets and routes requests to them. It also defines `MarketNotFoundError`.
- `bitrade.wallet_service`: `WalletService` and `WalletError`.
- `bitrade.validation`: `AddOrderRequest`, `CreateMarketRequest`,
  `ValidationError` and the validation functions.
- `bitrade.adaptor`: `TradeOrderAdaptor`, `MatchedOrderAdaptor` and
  `MatchedOrder`, which convert between engine objects and stored records.
- `bitrade.book_printer`: console output of orders, trades and books.

## Quick start

```python
import time
import uuid
from decimal import Decimal

from bitrade.market_manager import MarketManager
from bitrade.memory_store import InMemoryPersistence
from bitrade.trade_order import OrderSide, OrderType, TradeOrder
from bitrade.wallet_service import WalletService


def limit_order(side, user_id, price, amount):
    price, amount = Decimal(price), Decimal(amount)
    now = int(time.time() * 1000)
    return TradeOrder(
        id=str(uuid.uuid4()),
        market_id="BTC-USD",
        order_type=OrderType.LIMIT,
        side=side,
        user_id=user_id,
        price=price,
        base_amount=amount,
        quote_amount=price * amount,
        maker_fee=Decimal("0.001"),
        taker_fee=Decimal("0.002"),
        create_time=now,
        remained_base=amount,
        remained_quote=price * amount,
        filled_base=Decimal(0),
        filled_quote=Decimal(0),
        filled_fee=Decimal(0),
        update_time=now,
    )


store = InMemoryPersistence()
wallets = WalletService(store)
wallets.deposit("USD", Decimal("100000"), "alice")
wallets.deposit("BTC", Decimal("2"), "bob")

with MarketManager(store) as manager:
    manager.create_market("BTC-USD", "BTC", "USD", "0.001", "0.002")
    manager.start_market("BTC-USD")

    trades, market_id = manager.add_order(limit_order(OrderSide.BUY, "alice", "50000", "1"))
    trades, market_id = manager.add_order(limit_order(OrderSide.SELL, "bob", "50000", "1"))
    for trade in trades:
        print(trade.price, trade.base_amount, trade.buyer_user_id, trade.seller_user_id)

print(wallets.get_balance("BTC", "alice"))
```

## How matching works

- A limit order is matched against the opposite side while prices cross.
  Whatever is left of it then rests on the book. Two limit orders trade at the
  incoming order's price.
- A market order takes the price of the resting limit order. It is matched at
  any price, and whatever is left unfilled is cancelled. When two market
  orders meet, they trade at the last traded price. If there has been no
  trade yet, a `MatchingError` is raised.
- A market buy spends its remaining quote amount. The base amount is rounded
  to 8 significant digits.
- `match_fok_order` (on `MatchingEngine` and `OrderBook`) first checks whether
  the order can be filled in full. If it can, the order is matched as a limit
  order. If it cannot, the order is cancelled and a `MatchingError` is raised.
  `OrderBook.add_order` handles only limit and market orders, so this method
  has to be called directly.
- `bid_depth` and `ask_depth` map each price to the amount still resting there.

## Markets

`Market` accepts requests only while it is started. Otherwise it raises
`MarketNotStartedError`. Every request runs in order on the market's worker
thread. A new order book reloads its active orders from storage: limit orders
go back on the book, and market orders are cancelled.

`MarketManager` loads the markets already in storage when it is created, and
these start out stopped. `create_market` ignores an id that is already
registered. `start_market` and `stop_market` do not raise when the market is
already in the requested state. An unknown market id raises
`MarketNotFoundError`. When a `with` block ends, the manager cancels every
order of every market.

## Wallets and storage

`WalletService` reads balances (`get_balance`, `get_frozen_balance`) and
changes them (`deposit`, `withdraw`, `lock_balance`, `unlock_balance`). An
amount that is not positive, or a failure in the store, raises `WalletError`.

`InMemoryPersistence` settles a trade by filling both orders and moving
balances between the two users. The buyer pays its fee rate in the base asset
and the seller pays in the quote asset. It does not check that either party
has enough funds. Withdrawing, locking and unlocking raise `ValueError` when
the balance is not enough. Every read returns a copy of the stored record.

## Validating requests

```python
from bitrade.validation import AddOrderRequest, ValidationError, validate_add_order_request

request = AddOrderRequest(
    market_id="BTC-USD", order_type="LIMIT", side="BUY", user_id="alice",
    price="50000", base_amount="1", quote_amount="50000",
    maker_fee="0.001", taker_fee="0.002",
)
try:
    validate_add_order_request(request)
except ValidationError as exc:
    print("rejected:", exc)
```

Price and base amount must be positive. A non-empty quote amount must equal
`price * base_amount` to within `0.0000001`. The market and user ids must not
be empty. `validate_create_market_request` checks that the id and both assets
are not empty and that both fees are positive.

## Console output

The order book prints every incoming order, every trade and the whole book
after each match. It writes to standard output with ANSI colours. Set the
`NO_COLOR` environment variable to turn the colours off. The functions in
`bitrade.book_printer` (`print_order_book`, `print_bids`, `print_asks`,
`print_depth`, `print_order`, `print_trade`, `format_order`, `format_trade`)
can also be called directly.

## What the package does not do

- It is a library only. It has no network server or API and no command-line
  program.
- Its only built-in storage is `InMemoryPersistence`, and nothing is kept
  after the process exits. To use a database, supply an object that
  implements the `Persistence` protocol.
- It has no way to list all of a user's wallets.