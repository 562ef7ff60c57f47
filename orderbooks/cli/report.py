"""Text rendering of order book statistics. Read-only over the book."""

from decimal import Decimal
from typing import List, Optional

from orderbooks.engine.order_book import OrderBook
from orderbooks.events.models import Order

RULE_WIDTH = 120
NO_RECORD = "No record found."


def format_price(price: Optional[Decimal]) -> str:
    if price is None:
        return "N/A"
    return f"{price:,.2f}"


def format_timestamp(ts) -> str:
    return ts.strftime("%Y-%m-%d %H:%M:%S.%f")


def render_header(book: OrderBook) -> List[str]:
    title = f"Statistics for order book related to financial instrument {book.instrument.name}"
    return [title, "-" * len(title)]


def render_order_row(title: str, order: Order) -> str:
    return (
        f"{title:>16} {str(order.order_id):>38} {order.requested_quantity:>10} "
        f"{order.satisfied_quantity:>10} {format_timestamp(order.entry_date):>28} "
        f"{str(order.is_valid):>6}"
    )


def render_particular_orders(book: OrderBook) -> List[str]:
    """Biggest, smallest, earliest and latest orders as a table."""
    lines = [
        "Characteristics of particular orders:",
        "-" * RULE_WIDTH,
        f"{'':>16} {'ID':>38} {'REQUESTED':>10} {'SATISFIED':>10} {'ENTRY DATE':>28} {'VALID':>6}",
        "-" * RULE_WIDTH,
    ]
    if not book.get_order_count():
        lines.append(NO_RECORD)
    else:
        lines.append(render_order_row("Biggest order:", book.get_biggest_order()))
        lines.append(render_order_row("Smallest order:", book.get_smallest_order()))
        lines.append(render_order_row("Earliest order:", book.get_earliest_order()))
        lines.append(render_order_row("Latest order:", book.get_latest_order()))
    lines.append("")
    return lines


def render_limit_breakdown(book: OrderBook) -> List[str]:
    """Demand per limit price, cheapest price first."""
    demand_per_price = book.get_demand_per_limit_price()
    lines = [
        "Limit break down: demand per limit price",
        "-" * 30,
        f"{'LIMIT PRICE':>15} {'DEMAND':>10}",
        "-" * 30,
    ]
    if not demand_per_price:
        lines.append(NO_RECORD)
    for price in sorted(demand_per_price):
        lines.append(f"{format_price(price):>15} {demand_per_price[price]:>10}")
    lines.append("")
    return lines


def render_statistics_overview(book: OrderBook) -> str:
    """Amount of orders, demand, particular orders, limit break down."""
    lines = render_header(book)
    lines.append(f"Total amount of orders: {book.get_order_count()}")
    lines.append(f"Demand: {book.get_demand()}")
    lines.append("")
    lines.extend(render_particular_orders(book))
    lines.extend(render_limit_breakdown(book))
    return "\n".join(lines)


def render_validity_statistics(book: OrderBook) -> str:
    """Valid/invalid counts and demand, particular orders, limit break down, executions."""
    lines = render_header(book)
    lines.append(f"Total amount of valid orders: {book.get_valid_order_count()}")
    lines.append(f"Total amount of invalid orders: {book.get_invalid_order_count()}")
    lines.append(f"Total demand of valid orders: {book.get_valid_demand()}")
    lines.append(f"Total demand of invalid orders: {book.get_invalid_demand()}")
    lines.append("")
    lines.extend(render_particular_orders(book))
    lines.extend(render_limit_breakdown(book))
    lines.append(f"Total execution quantity: {book.get_total_execution_offer()}")
    lines.append(f"Execution price: {format_price(book.get_execution_price())}")
    lines.append(f"Executions processed: {book.are_executions_processed}")
    if book.undistributed_quantity:
        lines.append(f"Undistributed quantity: {book.undistributed_quantity}")
    return "\n".join(lines)


def render_order_details(book: OrderBook, order: Order) -> str:
    """Validity, satisfied quantity, unit price and amount paid for one order."""
    processed = book.are_executions_processed
    unit_price = book.get_execution_price() if processed else Decimal("0")
    lines = render_header(book)
    lines.append(f"Order: {order.order_id} ({order.order_type.value})")
    lines.append(f"Valid: {order.is_valid}")
    lines.append(f"Execution quantity (=satisfied quantity): {order.satisfied_quantity}")
    lines.append(f"Order price: {format_price(unit_price)}")
    lines.append(f"Execution price: {format_price(book.get_order_execution_value(order))}")
    return "\n".join(lines)
