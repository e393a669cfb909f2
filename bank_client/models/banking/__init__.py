"""Banking domain models."""

from bank_client.models.banking.account import Account
from bank_client.models.banking.card import (
    Card,
    CardDetails,
    CardRefreshState,
    CardResponse,
    RefreshWait,
)
from bank_client.models.banking.enums import (
    CardSource,
    PaymentDecision,
    PaymentRequestAction,
    PaymentRequestStatus,
    TransactionStatus,
    TransactionType,
)
from bank_client.models.banking.payment_request import PaymentRequest
from bank_client.models.banking.transaction import Transaction

__all__ = [
    "Account",
    "Card",
    "CardDetails",
    "CardRefreshState",
    "CardResponse",
    "CardSource",
    "PaymentDecision",
    "PaymentRequest",
    "PaymentRequestAction",
    "PaymentRequestStatus",
    "RefreshWait",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
]
