"""Transaction model for the banking domain."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from bank_client.models.banking.enums import TransactionStatus, TransactionType


@dataclass
class Transaction:
    """Ledger entry moving funds between two users."""

    transaction_id: int
    from_user_id: int
    to_user_id: int
    amount: Decimal  # signed in per-user listings: negative when sent
    transaction_type: TransactionType
    description: str
    status: TransactionStatus
    created_at: datetime

    # Display fields, filled in by listings
    from_username: str | None = None
    to_username: str | None = None

    @property
    def is_outgoing(self) -> bool:
        return self.amount < 0
