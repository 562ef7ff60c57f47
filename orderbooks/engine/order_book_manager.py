"""
Multi-instrument order book manager.

Holds the list of books and routes operations to one of them by index.
It has no matching logic of its own: every mutation goes through the
book's operations, and the manager only logs their outcome.

Key features:
- Books addressed by stable index (creation order)
- Lookup of an order across all books
- Demonstration books for the interactive menu
"""

from typing import List, Optional, Tuple, Union
from uuid import UUID

from orderbooks.engine.order_book import OrderBook
from orderbooks.events.models import (
    Execution,
    FinancialInstrument,
    Order,
    limit_order,
    market_order,
)
from orderbooks.events.results import BookResult, RejectReason
from orderbooks.utils.exceptions import BookNotFoundException
from orderbooks.utils.logger import get_logger


logger = get_logger(__name__)


class OrderBookManager:
    """Manages a list of order books, one per financial instrument."""

    def __init__(self):
        self._order_books: List[OrderBook] = []

    @property
    def books(self) -> Tuple[OrderBook, ...]:
        """Books in index order (read-only view)."""
        return tuple(self._order_books)

    def __len__(self) -> int:
        return len(self._order_books)

    def create_book(self, instrument_name: str) -> int:
        """
        Create an empty (closed, never opened) book.

        Args:
            instrument_name: Name of the financial instrument

        Returns:
            Index of the new book
        """
        book = OrderBook(FinancialInstrument(instrument_name))
        self._order_books.append(book)
        index = len(self._order_books) - 1
        logger.info(
            "Created order book %d for %s", index, instrument_name,
            extra={"book_index": index, "instrument": instrument_name}
        )
        return index

    def get_order_book(self, index: int) -> OrderBook:
        """
        Get order book by index.

        Raises:
            BookNotFoundException: If no book has this index
        """
        if isinstance(index, bool) or not isinstance(index, int) \
                or not 0 <= index < len(self._order_books):
            raise BookNotFoundException(
                f"No order book with index {index}",
                details={"index": index, "book_count": len(self._order_books)}
            )
        return self._order_books[index]

    def find_book_index(self, instrument_name: str) -> int:
        """
        Get index of the first book trading the named instrument.

        Raises:
            BookNotFoundException: If no book trades it
        """
        for index, book in enumerate(self._order_books):
            if book.instrument.name == instrument_name:
                return index
        raise BookNotFoundException(
            f"No order book for instrument {instrument_name}",
            details={"instrument": instrument_name}
        )

    def open_book(self, index: int) -> BookResult:
        return self._log(index, "open", self.get_order_book(index).open())

    def close_book(self, index: int) -> BookResult:
        return self._log(index, "close", self.get_order_book(index).close())

    def submit_order(self, index: int, order: Order) -> BookResult:
        """Route order to the book at index. An order belongs to one book only."""
        book = self.get_order_book(index)
        found = self.find_order(order.order_id)
        if found is not None and found[0] != index:
            result = BookResult.rejected(
                RejectReason.DUPLICATE_ORDER,
                message=f"Order {order.order_id} is already in order book {found[0]}",
            )
        else:
            result = book.add_order(order)
        return self._log(index, "add order", result, order_id=order.order_id)

    def submit_execution(self, index: int, execution: Execution) -> BookResult:
        """Route execution to the book at index."""
        result = self.get_order_book(index).add_execution(execution)
        return self._log(index, "add execution", result, execution_id=execution.execution_id)

    def process_book(self, index: int) -> BookResult:
        """
        Process the executions of the book at index.

        Raises:
            OrderBookException: If the book is open, empty of executions
                or already processed
        """
        return self._log(index, "process", self.get_order_book(index).process_executions())

    def find_order(self, order_id: Union[UUID, str]) -> Optional[Tuple[int, OrderBook, Order]]:
        """
        Find an order across all books.

        Returns:
            (book index, book, order), or None if no book holds it
        """
        for index, book in enumerate(self._order_books):
            order = book.get_order(order_id)
            if order is not None:
                return index, book, order
        return None

    def seed_demo_books(self) -> None:
        """Create a few books in various states to play with."""
        # Open, 2 market and 2 limit orders
        a = self.create_book("A")
        self.open_book(a)
        for order in (market_order(20), market_order(15), limit_order(50, 20), limit_order(30, 10)):
            self.submit_order(a, order)

        # Open, limit orders only
        b = self.create_book("B")
        self.open_book(b)
        self.submit_order(b, limit_order(40, 10))
        self.submit_order(b, limit_order(20, 5))

        c = self.create_book("C")
        self.open_book(c)
        self.submit_order(c, market_order(40))
        self.submit_order(c, market_order(20))

        # Closed and never opened, no order
        self.create_book("D")

        # Closed with one execution: one limit order invalid, offer below
        # valid demand, so not processed yet
        e = self.create_book("E")
        self.open_book(e)
        for order in (market_order(12), market_order(15), limit_order(2, 25), limit_order(2, 15)):
            self.submit_order(e, order)
        self.close_book(e)
        self.submit_execution(e, Execution(10, 20))

        # Closed with one execution matching the valid demand: processed
        f = self.create_book("F")
        self.open_book(f)
        for order in (market_order(16), market_order(16), limit_order(10, 26)):
            self.submit_order(f, order)
        self.close_book(f)
        self.submit_execution(f, Execution(42, 20))

    def _log(self, index: int, action: str, result: BookResult, **context) -> BookResult:
        extra = {"book_index": index, "instrument": self._order_books[index].instrument.name}
        extra.update(context)
        if result.accepted:
            logger.info("Book %d: %s: %s", index, action, result.message, extra=extra)
        else:
            extra["reason"] = result.reason.value
            logger.warning("Book %d: %s rejected: %s", index, action, result.message, extra=extra)
        return result
