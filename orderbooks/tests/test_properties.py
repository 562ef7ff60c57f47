"""
Property-based tests using Hypothesis.

These tests generate random books and execution sequences to prove invariants:
- Satisfied quantity never exceeds requested quantity
- Distributed quantity equals offered quantity when valid demand covers it
- Total offer never exceeds demand
- One execution price per book
- Rejected operations never mutate the book
"""

from decimal import Decimal
from hypothesis import given, strategies as st, settings
from orderbooks.engine.order_book import OrderBook
from orderbooks.engine.allocation import distribute_execution, proportional_share
from orderbooks.events.models import Execution, FinancialInstrument, limit_order, market_order
from orderbooks.events.results import RejectReason


# Strategy: generate valid orders
@st.composite
def order_strategy(draw):
    """Generate a market or limit order with random parameters."""
    quantity = draw(st.integers(min_value=1, max_value=500))
    if draw(st.booleans()):
        return market_order(quantity)
    price = draw(st.integers(min_value=1, max_value=50))
    return limit_order(quantity, Decimal(price))


def build_closed_book(orders):
    book = OrderBook(FinancialInstrument("PROP"))
    book.open()
    for order in orders:
        book.add_order(order)
    book.close()
    return book


@given(
    st.lists(order_strategy(), min_size=1, max_size=30),
    st.integers(min_value=1, max_value=50),
    st.lists(st.integers(min_value=1, max_value=800), min_size=1, max_size=10),
)
@settings(max_examples=200)
def test_processing_invariants(orders, price, quantities):
    """Property: processing conserves units and respects requested quantities."""
    book = build_closed_book(orders)

    for quantity in quantities:
        if book.are_executions_processed:
            break
        result = book.add_execution(Execution(quantity, price))
        assert book.get_total_execution_offer() <= book.get_demand()
        if not result:
            assert result.reason == RejectReason.OFFER_EXCEEDS_DEMAND

    if book.executions and not book.are_executions_processed:
        book.process_executions()

    offered = book.get_total_execution_offer()
    satisfied = sum(o.satisfied_quantity for o in book.orders)

    for order in book.orders:
        assert 0 <= order.satisfied_quantity <= order.requested_quantity
        if not order.is_valid:
            assert order.satisfied_quantity == 0

    if book.executions:
        assert satisfied + book.undistributed_quantity == offered
        if offered <= book.get_valid_demand():
            assert satisfied == offered
            assert book.undistributed_quantity == 0


@given(st.lists(order_strategy(), min_size=1, max_size=20), st.integers(min_value=1, max_value=50))
@settings(max_examples=100)
def test_limit_validity_matches_execution_price(orders, price):
    """Property: after the first execution, validity == limit price covers execution price."""
    book = build_closed_book(orders)
    book.add_execution(Execution(1, price))

    for order in book.orders:
        if order.is_market():
            assert order.is_valid
        else:
            assert order.is_valid == (order.limit_price >= Decimal(price))


@given(st.integers(min_value=1, max_value=1000), st.lists(st.integers(min_value=1, max_value=200), min_size=1, max_size=10))
@settings(max_examples=100)
def test_over_offer_reports_exact_room(demand, offers):
    """Property: a rejected over-offer reports demand minus current offer."""
    book = build_closed_book([market_order(demand)])

    for offer in offers:
        if book.are_executions_processed:
            break
        current = book.get_total_execution_offer()
        result = book.add_execution(Execution(offer, 1))
        if result:
            assert current + offer <= demand
        else:
            assert result.max_acceptable_quantity == demand - current
            assert book.get_total_execution_offer() == current


@given(st.lists(st.integers(min_value=1, max_value=100), min_size=2, max_size=10))
@settings(max_examples=50)
def test_single_execution_price(prices):
    """Property: all accepted executions share the first one's price."""
    book = build_closed_book([market_order(10_000)])

    for price in prices:
        book.add_execution(Execution(1, price))

    assert len({e.unit_price for e in book.executions}) == 1
    assert book.get_execution_price() == Decimal(prices[0])


@given(st.lists(order_strategy(), max_size=10), st.integers(min_value=1, max_value=20))
@settings(max_examples=50)
def test_rejected_add_order_is_idempotent(orders, attempts):
    """Property: adding to a closed book never changes the order list."""
    book = build_closed_book(orders)
    before = book.orders

    for _ in range(attempts):
        assert not book.add_order(market_order(1))

    assert book.orders == before


@given(st.integers(min_value=1, max_value=10))
def test_closed_book_never_reopens(attempts):
    """Property: once opened and closed, open() always fails."""
    book = build_closed_book([])

    for _ in range(attempts):
        result = book.open()
        assert not result
        assert not book.is_open


@given(
    st.lists(st.integers(min_value=1, max_value=300), min_size=1, max_size=15),
    st.integers(min_value=0, max_value=300),
    st.data(),
)
@settings(max_examples=100)
def test_every_order_gets_at_least_its_floor_share(requests, extra_demand, data):
    """Property: each valid order receives at least floor(requested * Q / demand)."""
    orders = [market_order(q) for q in requests]
    demand = sum(requests) + extra_demand
    offered = data.draw(st.integers(min_value=1, max_value=sum(requests)))

    leftover = distribute_execution(offered, orders, demand)

    assert leftover == 0
    assert sum(o.satisfied_quantity for o in orders) == offered
    for order in orders:
        assert order.satisfied_quantity >= proportional_share(order.requested_quantity, offered, demand)
        assert order.satisfied_quantity <= order.requested_quantity
