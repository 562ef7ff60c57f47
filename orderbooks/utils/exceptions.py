"""
Custom exceptions for the order books system.

Only contract violations raise: building an order or execution with bad
numbers, processing a book that is not ready, addressing a book that does
not exist. Policy rejections (closed book, over-offer...) are returned as
BookResult values instead, see orderbooks.events.results.
"""


class BaseOrderBookException(Exception):
    """Base exception class for all order books exceptions."""

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidOrderException(BaseOrderBookException):
    """Raised when an order or execution is built with invalid parameters."""
    pass


class InvalidQuantityException(InvalidOrderException):
    """Raised when quantity is invalid (not a whole number, zero or negative)."""
    pass


class PriceOutOfBoundsException(InvalidOrderException):
    """Raised when a price is zero or negative."""
    pass


class OrderBookException(BaseOrderBookException):
    """Raised when a book operation is called outside its preconditions."""
    pass


class BookNotFoundException(BaseOrderBookException):
    """Raised when a book index or instrument name is not known to the manager."""
    pass
