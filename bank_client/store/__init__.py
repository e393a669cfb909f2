"""Account, ledger and payment request storage."""

from bank_client.store.base import AccountStore, Ledger, PaymentRequestRepository
from bank_client.store.memory import InMemoryBank

__all__ = ["AccountStore", "InMemoryBank", "Ledger", "PaymentRequestRepository"]
