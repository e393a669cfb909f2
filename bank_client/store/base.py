"""Interfaces of the server-side collaborators the client core depends on."""

from abc import ABC, abstractmethod
from decimal import Decimal

from bank_client.models.banking import Account, PaymentRequest, Transaction


class AccountStore(ABC):
    """Lookup of known accounts."""

    @abstractmethod
    def resolve(self, account_identifier: str) -> Account | None:
        """Return the account addressed by ``account_identifier``, if any."""

    @abstractmethod
    def get_account(self, user_id: int) -> Account | None:
        """Return the account owned by ``user_id``, if any."""


class Ledger(ABC):
    """Funds movement between accounts."""

    @abstractmethod
    def transfer(
        self,
        from_user_id: int,
        to_user_id: int,
        amount: Decimal,
        description: str = "",
    ) -> Transaction:
        """Move ``amount`` from one user to another.

        Raises
        ------
        InsufficientFundsError
            If the sender cannot cover ``amount``.
        InvalidAccountError
            If either account is unknown.
        """


class PaymentRequestRepository(ABC):
    """Storage of payment request records."""

    @abstractmethod
    def new_request_id(self) -> int:
        """Reserve the next request id."""

    @abstractmethod
    def add_request(self, request: PaymentRequest) -> None:
        """Store a new request."""

    @abstractmethod
    def get_request(self, request_id: int) -> PaymentRequest | None:
        """Return the request with ``request_id``, if any."""

    @abstractmethod
    def replace_request(self, request: PaymentRequest) -> None:
        """Overwrite the stored request with the same id."""

    @abstractmethod
    def requests_for(self, user_id: int) -> list[PaymentRequest]:
        """All requests where ``user_id`` is requester or payer."""
