"""Account model for the banking domain."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Account:
    """Bank user account.

    One account per user: ``user_id`` identifies the user, ``account_number``
    is the 10-digit identifier other users address transfers and payment
    requests to.
    """

    user_id: int
    username: str
    email: str
    account_number: str
    balance: Decimal
    created_at: datetime
