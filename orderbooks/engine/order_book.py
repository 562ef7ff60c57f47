"""
Single-instrument order book with proportional execution distribution.

This module implements the book for one financial instrument. A book
goes through a fixed lifecycle:

- Closed, never opened: nothing can be added usefully yet
- Open: buy orders are collected
- Closed again (for good): broker executions are collected, then
  processed, i.e. distributed among the valid orders

Key features:
- One execution price per book, fixed by the first execution
- Limit orders are valid only if their limit price covers that price
- Executions are processed automatically as soon as the offer meets
  the demand of valid orders
- Policy rejections are returned as BookResult values, never raised

The book never logs or prints; callers render the results.
"""

from decimal import Decimal
from collections import defaultdict
from typing import Dict, List, Optional, Set, Tuple, Union
from uuid import UUID

from orderbooks.engine.allocation import distribute_execution
from orderbooks.events.models import Execution, FinancialInstrument, Order
from orderbooks.events.results import BookResult, RejectReason
from orderbooks.utils.exceptions import OrderBookException


class OrderBook:
    """Order book for one financial instrument."""

    def __init__(self, instrument: FinancialInstrument):
        self.instrument = instrument
        self._orders: List[Order] = []
        self._order_ids: Set[UUID] = set()
        self._executions: List[Execution] = []
        self._is_open = False
        self._was_already_opened_once = False
        self._are_executions_processed = False
        self._undistributed_quantity = 0

    # Lifecycle

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def was_already_opened_once(self) -> bool:
        return self._was_already_opened_once

    @property
    def are_executions_processed(self) -> bool:
        return self._are_executions_processed

    @property
    def orders(self) -> Tuple[Order, ...]:
        """Orders in insertion order (read-only view)."""
        return tuple(self._orders)

    @property
    def executions(self) -> Tuple[Execution, ...]:
        """Executions in acceptance order (read-only view)."""
        return tuple(self._executions)

    @property
    def undistributed_quantity(self) -> int:
        """Units processing could not place (all valid orders satisfied)."""
        return self._undistributed_quantity

    def open(self) -> BookResult:
        """Open the book for orders. A book can only ever be opened once."""
        if self._is_open:
            return BookResult.rejected(RejectReason.BOOK_ALREADY_OPEN)
        if self._was_already_opened_once:
            return BookResult.rejected(RejectReason.BOOK_CANNOT_REOPEN)

        self._is_open = True
        self._was_already_opened_once = True
        return BookResult.ok("Order book opened")

    def close(self) -> BookResult:
        """Close the book. Orders are refused from now on, executions accepted."""
        if not self._is_open:
            return BookResult.rejected(RejectReason.BOOK_ALREADY_CLOSED)

        self._is_open = False
        return BookResult.ok("Order book closed")

    def add_order(self, order: Order) -> BookResult:
        """Append an order. Only possible while the book is open, once per order."""
        if not self._is_open:
            return BookResult.rejected(RejectReason.BOOK_CLOSED)
        if order.order_id in self._order_ids:
            return BookResult.rejected(
                RejectReason.DUPLICATE_ORDER,
                message=f"Order {order.order_id} is already in this book",
            )

        # Once the execution price is known, late limit orders are
        # checked on arrival rather than left unvalidated
        if self._executions:
            order.validate_against(self.get_execution_price())

        self._orders.append(order)
        self._order_ids.add(order.order_id)
        return BookResult.ok(f"Order {order.order_id} added")

    def add_execution(self, execution: Execution) -> BookResult:
        """
        Add an execution to a closed, unprocessed book.

        The execution is refused if it would make the total offer bigger
        than the book demand (all orders, valid or not); the result then
        tells how much is still acceptable. The first execution fixes the
        book's execution price and validates limit orders against it.
        When the total offer reaches the demand of valid orders, the
        executions are processed right away.

        Args:
            execution: Execution to add

        Returns:
            BookResult; processed is True if auto-processing fired
        """
        if self._is_open:
            return BookResult.rejected(RejectReason.BOOK_OPEN)
        if self._are_executions_processed:
            return BookResult.rejected(RejectReason.BOOK_PROCESSED)

        demand = self.get_demand()
        current_offer = self.get_total_execution_offer()
        quantity_left = demand - current_offer

        if execution.offered_quantity > quantity_left:
            return BookResult.rejected(
                RejectReason.OFFER_EXCEEDS_DEMAND,
                message=(
                    f"It is not possible to offer more than {quantity_left} "
                    f"(current demand {demand}, current total execution offer {current_offer})"
                ),
                max_acceptable_quantity=quantity_left,
            )

        if self._executions and execution.unit_price != self.get_execution_price():
            return BookResult.rejected(
                RejectReason.PRICE_MISMATCH,
                message=(
                    f"Execution price of this book is {self.get_execution_price()}, "
                    f"got {execution.unit_price}"
                ),
            )

        self._executions.append(execution)

        # Every execution shares the first one's price, so validating once is enough
        if len(self._executions) == 1:
            self._validate_limit_orders(execution.unit_price)

        if self.get_total_execution_offer() == self.get_valid_demand():
            leftover = self._distribute_executions()
            return BookResult.ok(
                f"Execution {execution.execution_id} added; offer meets valid demand, "
                "executions processed",
                processed=True,
                undistributed_quantity=leftover,
            )

        return BookResult.ok(f"Execution {execution.execution_id} added")

    def process_executions(self) -> BookResult:
        """
        Distribute every accepted execution among the valid orders.

        Raises:
            OrderBookException: If the book is open, has no execution,
                or was already processed
        """
        if self._is_open:
            raise OrderBookException(
                "Cannot process executions of an open book",
                details={"instrument": self.instrument.name}
            )
        if self._are_executions_processed:
            raise OrderBookException(
                "Executions of this book were already processed",
                details={"instrument": self.instrument.name}
            )
        if not self._executions:
            raise OrderBookException(
                "Cannot process a book without executions",
                details={"instrument": self.instrument.name}
            )

        leftover = self._distribute_executions()
        message = "Executions processed"
        if leftover:
            message += f"; {leftover} units left undistributed (valid orders fully satisfied)"
        return BookResult.ok(message, processed=True, undistributed_quantity=leftover)

    def _validate_limit_orders(self, unit_price: Decimal) -> None:
        """Mark each limit order valid iff its limit price covers unit_price."""
        for order in self._orders:
            order.validate_against(unit_price)

    def _distribute_executions(self) -> int:
        """Run the distribution once per execution, in acceptance order."""
        valid_orders = self.get_valid_orders()
        demand = self.get_demand()

        leftover = 0
        for execution in self._executions:
            leftover += distribute_execution(execution.offered_quantity, valid_orders, demand)

        self._undistributed_quantity = leftover
        self._are_executions_processed = True
        return leftover

    # Statistics

    def get_order_count(self) -> int:
        """Get total number of orders."""
        return len(self._orders)

    def get_demand(self) -> int:
        """Get requested quantity summed over all orders."""
        return sum(order.requested_quantity for order in self._orders)

    def get_biggest_order(self) -> Optional[Order]:
        """Get order with the largest requested quantity (first one on ties)."""
        biggest = None
        for order in self._orders:
            if biggest is None or order.requested_quantity > biggest.requested_quantity:
                biggest = order
        return biggest

    def get_smallest_order(self) -> Optional[Order]:
        """Get order with the smallest requested quantity (first one on ties)."""
        smallest = None
        for order in self._orders:
            if smallest is None or order.requested_quantity < smallest.requested_quantity:
                smallest = order
        return smallest

    def get_earliest_order(self) -> Optional[Order]:
        """Get order with the earliest entry date (first one on ties)."""
        earliest = None
        for order in self._orders:
            if earliest is None or order.entry_date < earliest.entry_date:
                earliest = order
        return earliest

    def get_latest_order(self) -> Optional[Order]:
        """Get order with the latest entry date (last inserted one on ties)."""
        latest = None
        for order in self._orders:
            # >= so that orders created within the same clock tick resolve
            # to the one further down the list
            if latest is None or order.entry_date >= latest.entry_date:
                latest = order
        return latest

    def get_market_orders(self) -> List[Order]:
        return [order for order in self._orders if order.is_market()]

    def get_limit_orders(self) -> List[Order]:
        return [order for order in self._orders if order.is_limit()]

    def get_demand_per_limit_price(self) -> Dict[Decimal, int]:
        """Get requested quantity of limit orders grouped by limit price."""
        demand_per_price: Dict[Decimal, int] = defaultdict(int)
        for order in self.get_limit_orders():
            demand_per_price[order.limit_price] += order.requested_quantity
        return dict(demand_per_price)

    def get_valid_orders(self) -> List[Order]:
        return [order for order in self._orders if order.is_valid]

    def get_invalid_orders(self) -> List[Order]:
        return [order for order in self._orders if not order.is_valid]

    def get_valid_order_count(self) -> int:
        return len(self.get_valid_orders())

    def get_invalid_order_count(self) -> int:
        return len(self.get_invalid_orders())

    def get_valid_demand(self) -> int:
        """Get requested quantity summed over valid orders."""
        return sum(order.requested_quantity for order in self.get_valid_orders())

    def get_invalid_demand(self) -> int:
        """Get requested quantity summed over invalid orders."""
        return sum(order.requested_quantity for order in self.get_invalid_orders())

    def get_total_execution_offer(self) -> int:
        """Get offered quantity summed over accepted executions."""
        return sum(execution.offered_quantity for execution in self._executions)

    def get_execution_price(self) -> Decimal:
        """Get the book's execution price (0 until the first execution)."""
        if not self._executions:
            return Decimal("0")
        return self._executions[0].unit_price

    def get_order(self, order_id: Union[UUID, str]) -> Optional[Order]:
        """Find an order by ID. Returns None if not in this book."""
        wanted = str(order_id).strip().lower()
        for order in self._orders:
            if str(order.order_id) == wanted:
                return order
        return None

    def get_order_execution_value(self, order: Order) -> Decimal:
        """Get what the order pays: satisfied units at the execution price, once processed."""
        if not self._are_executions_processed:
            return Decimal("0")
        return order.satisfied_quantity * self.get_execution_price()
