"""
Core domain models for the order books system.

This module defines the fundamental data structures: the financial
instrument a book is about, the buy orders collected in a book, and the
executions a broker offers against them.

Orders come in two variants (market and limit) sharing one dataclass.
The variant tag decides how an order reacts to the book's execution price.
"""

from enum import Enum
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from datetime import datetime
from typing import Optional, Union
from uuid import UUID, uuid4

from orderbooks.utils.exceptions import (
    InvalidOrderException,
    InvalidQuantityException,
    PriceOutOfBoundsException,
)


PriceLike = Union[Decimal, int, float, str]


class OrderType(Enum):
    """Type of order: market (price-agnostic) or limit (bounded by a price)."""
    MARKET = "MARKET"
    LIMIT = "LIMIT"


def _check_quantity(quantity: int, what: str) -> None:
    # bool is an int subclass; True is not a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityException(
            f"{what} must be a whole number of units, got {quantity!r}",
            details={"quantity": quantity}
        )
    if quantity <= 0:
        raise InvalidQuantityException(
            f"{what} must be positive, got {quantity}",
            details={"quantity": quantity}
        )


def to_price(value: PriceLike, what: str = "Price") -> Decimal:
    """
    Convert a value to a positive Decimal price.

    Floats go through str() so 20.1 stays 20.1 instead of its binary
    expansion.

    Raises:
        InvalidOrderException: If value is not a number
        PriceOutOfBoundsException: If value is not strictly positive
    """
    if isinstance(value, bool):
        raise InvalidOrderException(f"Invalid price: {value!r}", details={"value": value})
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidOrderException(
            f"Invalid price: {value!r}",
            details={"value": value, "error": str(e)}
        )
    if not price.is_finite() or price <= 0:
        raise PriceOutOfBoundsException(
            f"{what} must be positive, got {value}",
            details={"price": str(value)}
        )
    return price


@dataclass(frozen=True)
class FinancialInstrument:
    """
    A share, an option, a future... whatever a book collects orders for.

    Attributes:
        name: Display name (e.g., 'AAPL')
        instrument_id: Unique identifier, generated
    """
    name: str
    instrument_id: UUID = field(default_factory=uuid4)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidOrderException(
                "Instrument name must be a non-empty string",
                details={"name": self.name}
            )


@dataclass(eq=False)
class Order:
    """
    Represents a buy order sitting in an order book.

    Use market_order() and limit_order() to build one; both check their
    arguments. Only the owning OrderBook changes satisfied_quantity and
    limit order validity (through validate_against) after construction.

    Attributes:
        order_type: MARKET or LIMIT
        requested_quantity: Number of units asked for
        limit_price: Highest acceptable unit price (None for market orders)
        order_id: Unique identifier, generated
        entry_date: When the order was created
        satisfied_quantity: Units allotted by execution processing
    """
    order_type: OrderType
    requested_quantity: int
    limit_price: Optional[Decimal] = None
    order_id: UUID = field(default_factory=uuid4)
    entry_date: datetime = field(default_factory=datetime.now)
    satisfied_quantity: int = 0
    _price_accepted: bool = field(default=False, init=False, repr=False)

    def __post_init__(self):
        _check_quantity(self.requested_quantity, "Requested quantity")
        if self.order_type == OrderType.MARKET:
            if self.limit_price is not None:
                raise InvalidOrderException(
                    "Market orders do not carry a limit price",
                    details={"limit_price": str(self.limit_price)}
                )
        elif self.order_type == OrderType.LIMIT:
            if self.limit_price is None:
                raise InvalidOrderException("Limit orders need a limit price")
            self.limit_price = to_price(self.limit_price, "Limit price")
        else:
            raise InvalidOrderException(f"Unknown order type: {self.order_type}")

    @property
    def is_valid(self) -> bool:
        """
        Whether the order may receive units.

        Market orders are always valid. Limit orders are invalid until
        validate_against() finds their limit price covers the book's
        execution price.
        """
        if self.order_type == OrderType.MARKET:
            return True
        return self._price_accepted

    def accepts_price(self, unit_price: Decimal) -> bool:
        """Check whether this order would buy at the given unit price."""
        if self.order_type == OrderType.MARKET:
            return True
        return self.limit_price >= unit_price

    def validate_against(self, unit_price: Decimal) -> bool:
        """Record whether a limit order accepts unit_price. No-op for market orders."""
        if self.order_type == OrderType.LIMIT:
            self._price_accepted = self.accepts_price(unit_price)
        return self.is_valid

    def is_market(self) -> bool:
        return self.order_type == OrderType.MARKET

    def is_limit(self) -> bool:
        return self.order_type == OrderType.LIMIT

    def remaining_quantity(self) -> int:
        """Calculate how many units remain unsatisfied."""
        return self.requested_quantity - self.satisfied_quantity

    def is_filled(self) -> bool:
        return self.satisfied_quantity == self.requested_quantity


def market_order(quantity: int) -> Order:
    """Create a market order, valid whatever the execution price."""
    return Order(order_type=OrderType.MARKET, requested_quantity=quantity)


def limit_order(quantity: int, limit_price: PriceLike) -> Order:
    """Create a limit order, valid only if limit_price >= execution price."""
    return Order(
        order_type=OrderType.LIMIT,
        requested_quantity=quantity,
        limit_price=to_price(limit_price, "Limit price"),
    )


@dataclass(frozen=True)
class Execution:
    """
    A lot of units offered by a broker at a unit price.

    Attributes:
        offered_quantity: Number of units supplied
        unit_price: Price of one unit
        execution_id: Unique identifier, generated
    """
    offered_quantity: int
    unit_price: Decimal
    execution_id: UUID = field(default_factory=uuid4)

    def __post_init__(self):
        _check_quantity(self.offered_quantity, "Offered quantity")
        # frozen: bypass __setattr__ to store the normalised price
        object.__setattr__(self, "unit_price", to_price(self.unit_price, "Unit price"))
