"""In-memory bank with referential integrity.

Reference implementation of the server-side ledger, account lookup and
payment request storage, used by the local lifecycle and the demo.
"""

import logging
import random
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from bank_client.exceptions import (
    InsufficientFundsError,
    InvalidAccountError,
    InvalidAmountError,
    InvalidCounterpartyError,
    PaymentRequestNotFoundError,
)
from bank_client.models.banking import (
    Account,
    PaymentRequest,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from bank_client.store.base import AccountStore, Ledger, PaymentRequestRepository

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
DEFAULT_INITIAL_BALANCE = Decimal("1000.00")


@dataclass
class InMemoryBank(AccountStore, Ledger, PaymentRequestRepository):
    """In-memory store for accounts, transactions and payment requests."""

    # Primary entities
    accounts: dict[int, Account] = field(default_factory=dict)
    transactions: list[Transaction] = field(default_factory=list)
    payment_requests: dict[int, PaymentRequest] = field(default_factory=dict)

    # Lookup indexes
    _by_account_number: dict[str, int] = field(default_factory=dict)
    _by_username: dict[str, int] = field(default_factory=dict)
    _by_email: dict[str, int] = field(default_factory=dict)

    # Relationship indexes
    _user_transactions: dict[int, list[int]] = field(default_factory=dict)
    _user_requests: dict[int, list[int]] = field(default_factory=dict)

    _next_user_id: int = 1
    _next_request_id: int = 1
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    # Accounts
    def register(
        self,
        username: str,
        email: str,
        initial_balance: Decimal = DEFAULT_INITIAL_BALANCE,
        account_number: str | None = None,
        created_at: datetime | None = None,
    ) -> Account:
        """Open an account for a new user."""
        with self._lock:
            account = Account(
                user_id=self._next_user_id,
                username=username,
                email=email,
                account_number=account_number or self._generate_account_number(),
                balance=Decimal(initial_balance).quantize(CENTS),
                created_at=created_at or datetime.now(timezone.utc),
            )
            self.add_account(account)
        return account

    def add_account(self, account: Account) -> None:
        """Add an account to the store."""
        with self._lock:
            if account.user_id in self.accounts:
                raise InvalidAccountError(f"User {account.user_id} already exists")
            if account.username in self._by_username:
                raise InvalidAccountError(f"Username {account.username} already taken")
            if account.email in self._by_email:
                raise InvalidAccountError(f"Email {account.email} already registered")
            if account.account_number in self._by_account_number:
                raise InvalidAccountError(f"Account number {account.account_number} already exists")

            self.accounts[account.user_id] = account
            self._by_account_number[account.account_number] = account.user_id
            self._by_username[account.username] = account.user_id
            self._by_email[account.email] = account.user_id
            self._user_transactions[account.user_id] = []
            self._user_requests[account.user_id] = []
            self._next_user_id = max(self._next_user_id, account.user_id + 1)

        logger.debug("Account %s opened for %s", account.account_number, account.username)

    def resolve(self, account_identifier: str) -> Account | None:
        """Match an account number first, then a username."""
        key = account_identifier.strip()
        user_id = self._by_account_number.get(key)
        if user_id is None:
            user_id = self._by_username.get(key)
        return self.accounts.get(user_id) if user_id is not None else None

    def get_account(self, user_id: int) -> Account | None:
        return self.accounts.get(user_id)

    def get_by_username(self, username: str) -> Account | None:
        user_id = self._by_username.get(username)
        return self.accounts.get(user_id) if user_id is not None else None

    def get_balance(self, user_id: int) -> Decimal:
        return self._require_account(user_id).balance

    def _require_account(self, user_id: int) -> Account:
        account = self.accounts.get(user_id)
        if account is None:
            raise InvalidAccountError(f"Account for user {user_id} not found")
        return account

    def _generate_account_number(self) -> str:
        """Random unique 10-digit account number."""
        while True:
            number = f"{random.randint(0, 9_999_999_999):010d}"
            if number not in self._by_account_number:
                return number

    # Ledger
    def transfer(
        self,
        from_user_id: int,
        to_user_id: int,
        amount: Decimal,
        description: str = "",
        transaction_type: TransactionType = TransactionType.TRANSFER,
    ) -> Transaction:
        """Debit the sender and credit the recipient as one step."""
        amount = Decimal(amount)
        if not amount.is_finite() or amount <= 0:
            raise InvalidAmountError(f"Amount must be positive, got {amount}")
        amount = amount.quantize(CENTS)

        with self._lock:
            sender = self._require_account(from_user_id)
            recipient = self._require_account(to_user_id)
            if sender.user_id == recipient.user_id:
                raise InvalidCounterpartyError("Cannot transfer to yourself")
            if sender.balance < amount:
                raise InsufficientFundsError(
                    f"Insufficient balance: {sender.balance} available, {amount} required"
                )

            sender.balance -= amount
            recipient.balance += amount

            transaction = Transaction(
                transaction_id=len(self.transactions) + 1,
                from_user_id=sender.user_id,
                to_user_id=recipient.user_id,
                amount=amount,
                transaction_type=transaction_type,
                description=description,
                status=TransactionStatus.COMPLETED,
                created_at=datetime.now(timezone.utc),
                from_username=sender.username,
                to_username=recipient.username,
            )
            idx = len(self.transactions)
            self.transactions.append(transaction)
            self._user_transactions[sender.user_id].append(idx)
            self._user_transactions[recipient.user_id].append(idx)

        logger.info(
            "Transfer %d: %s -> %s amount=%s",
            transaction.transaction_id,
            sender.username,
            recipient.username,
            amount,
        )
        return transaction

    def transfer_to_account(
        self,
        from_user_id: int,
        account_identifier: str,
        amount: Decimal,
        description: str = "",
    ) -> Transaction:
        """Transfer to the account addressed by its account number."""
        recipient = self.resolve(account_identifier)
        if recipient is None:
            raise InvalidCounterpartyError(f"Recipient {account_identifier} not found")
        return self.transfer(from_user_id, recipient.user_id, amount, description)

    def list_transactions(self, user_id: int, limit: int = 50) -> list[Transaction]:
        """Newest-first transactions of a user, amounts signed from their side."""
        self._require_account(user_id)
        indices = self._user_transactions.get(user_id, [])
        result = []
        for idx in reversed(indices[-limit:] if limit > 0 else []):
            tx = self.transactions[idx]
            signed = -tx.amount if tx.from_user_id == user_id else tx.amount
            result.append(
                Transaction(
                    transaction_id=tx.transaction_id,
                    from_user_id=tx.from_user_id,
                    to_user_id=tx.to_user_id,
                    amount=signed,
                    transaction_type=tx.transaction_type,
                    description=tx.description,
                    status=tx.status,
                    created_at=tx.created_at,
                    from_username=tx.from_username,
                    to_username=tx.to_username,
                )
            )
        return result

    # Payment requests
    def new_request_id(self) -> int:
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
        return request_id

    def add_request(self, request: PaymentRequest) -> None:
        with self._lock:
            self._require_account(request.requester_id)
            self._require_account(request.payer_id)
            self.payment_requests[request.request_id] = request
            self._user_requests[request.requester_id].append(request.request_id)
            self._user_requests[request.payer_id].append(request.request_id)

    def get_request(self, request_id: int) -> PaymentRequest | None:
        return self.payment_requests.get(request_id)

    def replace_request(self, request: PaymentRequest) -> None:
        with self._lock:
            if request.request_id not in self.payment_requests:
                raise PaymentRequestNotFoundError(f"Payment request {request.request_id} not found")
            self.payment_requests[request.request_id] = request

    def requests_for(self, user_id: int) -> list[PaymentRequest]:
        request_ids = self._user_requests.get(user_id, [])
        return [self.payment_requests[rid] for rid in request_ids]

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "accounts": len(self.accounts),
            "transactions": len(self.transactions),
            "payment_requests": len(self.payment_requests),
        }
