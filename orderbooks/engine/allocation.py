"""
Proportional distribution of an execution among valid orders.

When the broker offers fewer units than the book asks for, each valid
order gets a share proportional to its requested quantity:

1. Proportional pass: floor(requested * offered / demand) per order,
   where demand is the requested total of *all* orders in the book
2. Remainder pass: the units lost to flooring are handed out one at a
   time, round-robin in insertion order, skipping satisfied orders

Allocation is cumulative: satisfied quantities from earlier executions
are kept and added to.
"""

from typing import Sequence
from orderbooks.events.models import Order


def proportional_share(requested_quantity: int, offered_quantity: int, demand: int) -> int:
    """
    Floor of requested * offered / demand.

    Integer floor division is exact, so no unit is lost or invented by
    rounding before the floor.
    """
    if demand <= 0:
        return 0
    return (requested_quantity * offered_quantity) // demand


def distribute_execution(offered_quantity: int, valid_orders: Sequence[Order], demand: int) -> int:
    """
    Distribute offered_quantity units among valid_orders.

    Args:
        offered_quantity: Units supplied by one execution
        valid_orders: Orders eligible for units, in insertion order
        demand: Requested total of every order in the book, valid or not

    Returns:
        Units that could not be placed because every valid order was
        already satisfied (0 in the normal case)
    """
    remaining = offered_quantity

    # Proportional pass
    for order in valid_orders:
        share = proportional_share(order.requested_quantity, offered_quantity, demand)
        # Never give more than the order still asks for
        share = min(share, order.remaining_quantity(), remaining)
        order.satisfied_quantity += share
        remaining -= share

    # Remainder pass
    while remaining > 0:
        progressed = False
        for order in valid_orders:
            if remaining == 0:
                break
            if order.is_filled():
                continue
            order.satisfied_quantity += 1
            remaining -= 1
            progressed = True

        if not progressed:
            break

    return remaining
