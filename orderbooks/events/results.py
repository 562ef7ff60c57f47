"""
Outcome of an order book operation.

Book mutators never raise for policy reasons. They return a BookResult
that is truthy when the mutation was applied and carries a reason code
and a message when it was not.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class RejectReason(Enum):
    """Why a book refused an operation."""
    BOOK_ALREADY_OPEN = "BOOK_ALREADY_OPEN"
    BOOK_CANNOT_REOPEN = "BOOK_CANNOT_REOPEN"
    BOOK_ALREADY_CLOSED = "BOOK_ALREADY_CLOSED"
    BOOK_CLOSED = "BOOK_CLOSED"
    BOOK_OPEN = "BOOK_OPEN"
    BOOK_PROCESSED = "BOOK_PROCESSED"
    OFFER_EXCEEDS_DEMAND = "OFFER_EXCEEDS_DEMAND"
    PRICE_MISMATCH = "PRICE_MISMATCH"
    DUPLICATE_ORDER = "DUPLICATE_ORDER"

    def default_message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    RejectReason.BOOK_ALREADY_OPEN: "The book is already open!",
    RejectReason.BOOK_CANNOT_REOPEN: "Cannot reopen a book!",
    RejectReason.BOOK_ALREADY_CLOSED: "The book is already closed!",
    RejectReason.BOOK_CLOSED: "It is not possible to add an order on a closed book!",
    RejectReason.BOOK_OPEN: "It is not possible to add an execution on an open book!",
    RejectReason.BOOK_PROCESSED: (
        "It is not possible to add an execution when the book has already been processed!"
    ),
    RejectReason.OFFER_EXCEEDS_DEMAND: "The execution offer exceeds the book demand.",
    RejectReason.PRICE_MISMATCH: "All executions of a book must share the same unit price.",
    RejectReason.DUPLICATE_ORDER: "This order is already in an order book!",
}


@dataclass(frozen=True)
class BookResult:
    """
    Represents the result of a book operation.

    Attributes:
        accepted: True if the mutation was applied
        message: Human-readable outcome
        reason: Rejection code (None when accepted)
        max_acceptable_quantity: For OFFER_EXCEEDS_DEMAND, the largest
            quantity the book would still take
        processed: True if the operation left the book processed
            (auto-processing fired, or a manual process ran)
        undistributed_quantity: Units processing could not place because
            every valid order was already satisfied
    """
    accepted: bool
    message: str
    reason: Optional[RejectReason] = None
    max_acceptable_quantity: Optional[int] = None
    processed: bool = False
    undistributed_quantity: int = 0

    def __bool__(self) -> bool:
        return self.accepted

    @classmethod
    def ok(cls, message: str, processed: bool = False,
           undistributed_quantity: int = 0) -> "BookResult":
        return cls(
            accepted=True,
            message=message,
            processed=processed,
            undistributed_quantity=undistributed_quantity,
        )

    @classmethod
    def rejected(cls, reason: RejectReason, message: Optional[str] = None,
                 max_acceptable_quantity: Optional[int] = None) -> "BookResult":
        return cls(
            accepted=False,
            message=message or reason.default_message(),
            reason=reason,
            max_acceptable_quantity=max_acceptable_quantity,
        )
