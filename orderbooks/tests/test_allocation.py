"""
Tests for the proportional distribution algorithm.

Works directly on lists of valid orders, without a book around them.
"""

from orderbooks.engine.allocation import distribute_execution, proportional_share
from orderbooks.events.models import limit_order, market_order


def test_proportional_share_floors():
    """Test share is the floor of requested * offered / demand."""
    assert proportional_share(50, 10, 115) == 4
    assert proportional_share(30, 10, 115) == 2
    assert proportional_share(16, 40, 42) == 15


def test_proportional_share_is_exact_for_large_numbers():
    """Test no precision is lost where a float would round."""
    big = 10 ** 17 + 1
    assert proportional_share(big, big, big) == big


def test_proportional_share_zero_demand():
    """Test empty demand yields nothing."""
    assert proportional_share(10, 10, 0) == 0


def test_two_valid_orders_against_larger_demand():
    """Test 10 units over requests of 50 and 30 with a book demand of 115."""
    first = limit_order(50, 20)
    second = limit_order(30, 20)

    leftover = distribute_execution(10, [first, second], demand=115)

    # Proportional pass gives 4 and 2, the 4 remaining units alternate
    assert first.satisfied_quantity == 6
    assert second.satisfied_quantity == 4
    assert leftover == 0


def test_remainder_goes_to_earlier_orders_first():
    """Test round-robin favours insertion order."""
    orders = [market_order(1), market_order(1), market_order(1)]

    leftover = distribute_execution(2, orders, demand=3)

    assert [o.satisfied_quantity for o in orders] == [1, 1, 0]
    assert leftover == 0


def test_exact_demand_fills_everyone():
    """Test offer equal to demand satisfies every order."""
    orders = [market_order(16), market_order(16), limit_order(10, 26)]

    leftover = distribute_execution(42, orders, demand=42)

    assert all(o.is_filled() for o in orders)
    assert leftover == 0


def test_remainder_skips_filled_orders():
    """Test saturated orders are skipped in the remainder pass."""
    small = market_order(1)
    big = market_order(9)
    small.satisfied_quantity = 1

    distribute_execution(5, [small, big], demand=10)

    assert small.satisfied_quantity == 1
    assert big.satisfied_quantity == 5


def test_distribution_is_cumulative():
    """Test a second execution adds to the first one's allocation."""
    orders = [market_order(30), market_order(10)]

    distribute_execution(10, orders, demand=40)
    assert [o.satisfied_quantity for o in orders] == [8, 2]

    distribute_execution(10, orders, demand=40)
    assert [o.satisfied_quantity for o in orders] == [16, 4]

    distribute_execution(20, orders, demand=40)
    assert [o.satisfied_quantity for o in orders] == [30, 10]


def test_proportional_pass_is_clamped_to_remaining_quantity():
    """Test an order never goes over its requested quantity."""
    order = market_order(10)
    order.satisfied_quantity = 8

    leftover = distribute_execution(10, [order], demand=10)

    assert order.satisfied_quantity == 10
    assert leftover == 8


def test_leftover_when_valid_orders_are_saturated():
    """Test units beyond valid demand are returned instead of looping forever."""
    order = market_order(10)

    leftover = distribute_execution(50, [order], demand=100)

    assert order.satisfied_quantity == 10
    assert leftover == 40


def test_no_valid_orders():
    """Test nothing is placed without valid orders."""
    assert distribute_execution(7, [], demand=20) == 7
