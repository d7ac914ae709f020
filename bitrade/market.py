"""A market: one order book served by its own worker thread."""

from __future__ import annotations

import queue
import threading
from concurrent.futures import Future

from bitrade.order_book import OrderBook


class MarketError(RuntimeError):
    """A market could not carry out a request."""


class MarketNotStartedError(MarketError):
    """The market is not started."""


class MarketAlreadyStartedError(MarketError):
    """The market is already started."""


class Market:
    """Serialises every operation on one order book through a worker thread.

    The order book is built, and recovered from storage, on the worker.
    Requests are accepted only while the market is started.
    """

    def __init__(self, persister, market_id, base_asset, quote_asset):
        self.persister = persister
        self.market_id = market_id
        self.base_asset = base_asset
        self.quote_asset = quote_asset
        self._started = threading.Event()
        self._state_lock = threading.Lock()
        self._tasks: queue.SimpleQueue = queue.SimpleQueue()
        self._worker = threading.Thread(
            target=self._run, name=f"market-{market_id}", daemon=True
        )
        self._worker.start()

    @property
    def is_started(self) -> bool:
        return self._started.is_set()

    def _run(self) -> None:
        book = None
        failure = None
        try:
            book = OrderBook(self.persister, self.base_asset, self.market_id, self.quote_asset)
        except Exception as exc:  # reported to every later request
            failure = exc
        while True:
            task, future = self._tasks.get()
            if not future.set_running_or_notify_cancel():
                continue
            if failure is not None:
                future.set_exception(failure)
                continue
            try:
                future.set_result(task(book))
            except Exception as exc:
                future.set_exception(exc)

    def start_market(self) -> None:
        with self._state_lock:
            if self._started.is_set():
                raise MarketAlreadyStartedError("Market is already started")
            self._started.set()
        print(f"Market {self.market_id} started")

    def stop_market(self) -> None:
        with self._state_lock:
            if not self._started.is_set():
                raise MarketNotStartedError("Market is not started")
            self._started.clear()
        print(f"Market {self.market_id} stopped")

    def _submit(self, task):
        if not self._started.is_set():
            raise MarketNotStartedError("Cannot submit task while market is stopped")
        future: Future = Future()
        self._tasks.put((task, future))
        return future.result()

    def add_order(self, order):
        """Add an order to the book and return the trades it made."""
        return self._submit(lambda book: book.add_order(order))

    def get_order_by_id(self, order_id):
        """Return a copy of a resting order."""
        return self._submit(lambda book: book.get_order_by_id(order_id))

    def cancel_order(self, order_id):
        """Cancel an order; return whether it was resting on the book."""
        return self._submit(lambda book: book.cancel_order(order_id))

    def cancel_all_orders(self):
        """Cancel every order of the market."""
        return self._submit(lambda book: book.cancel_all_orders())