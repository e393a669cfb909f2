"""Enumeration types for banking entities."""

from enum import Enum


class PaymentRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentRequestStatus.PENDING


class PaymentDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class PaymentRequestAction(str, Enum):
    """Actions accepted by ``PUT /payment-requests/{id}``."""

    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"


class TransactionType(str, Enum):
    TRANSFER = "transfer"
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    ADMIN_ADJUSTMENT = "admin_adjustment"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class CardSource(str, Enum):
    SERVER = "server"
    LOCAL = "local"
