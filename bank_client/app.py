"""Command handlers behind the banking UI.

Each handler takes a typed input, calls the API and re-fetches the state
the mutation touched, so callers never patch a stale cache.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from bank_client.api.client import BankApiClient
from bank_client.cards import CardNumberGenerator, CardRefreshStateStore
from bank_client.config import BankClientConfig
from bank_client.display import format_card_number
from bank_client.events import (
    PAYMENT_REQUEST_APPROVED,
    PAYMENT_REQUEST_CANCELLED,
    PAYMENT_REQUEST_CREATED,
    PAYMENT_REQUEST_REJECTED,
    EventPublisher,
)
from bank_client.exceptions import (
    InvalidCounterpartyError,
    InvalidPaymentRequestError,
    ServiceUnavailableError,
)
from bank_client.models.banking import (
    Account,
    CardDetails,
    CardResponse,
    CardSource,
    PaymentDecision,
    PaymentRequest,
    RefreshWait,
    Transaction,
)
from bank_client.payments import PaymentRequestListing, validate_amount

logger = logging.getLogger(__name__)


@dataclass
class TransferInput:
    """Send ``amount`` to the account number or username in ``to``."""

    to: str
    amount: Decimal
    description: str = ""

    def __post_init__(self) -> None:
        self.to = self.to.strip()
        if not self.to:
            raise InvalidCounterpartyError("A recipient is required")
        self.amount = validate_amount(self.amount)


@dataclass
class PaymentRequestInput:
    """Ask the owner of ``to`` for ``amount``."""

    to: str
    amount: Decimal
    reason: str
    message: str = ""

    def __post_init__(self) -> None:
        self.to = self.to.strip()
        if not self.to:
            raise InvalidCounterpartyError("A payer is required")
        self.amount = validate_amount(self.amount)
        self.reason = self.reason.strip()
        if not self.reason:
            raise InvalidPaymentRequestError("A reason is required")


@dataclass
class RespondInput:
    request_id: int
    decision: PaymentDecision

    def __post_init__(self) -> None:
        try:
            self.decision = PaymentDecision(self.decision)
        except ValueError:
            raise InvalidPaymentRequestError(f"Unknown decision: {self.decision!r}") from None


@dataclass
class DashboardSnapshot:
    balance: Decimal
    transactions: list[Transaction] = field(default_factory=list)
    requests: PaymentRequestListing = field(default_factory=PaymentRequestListing)


class BankingApp:
    """Orchestrates API calls for a logged-in user.

    Parameters
    ----------
    api : BankApiClient
        Client holding the active session.
    card_states : CardRefreshStateStore, optional
        Local refresh records used when the card service is unreachable.
    generator : CardNumberGenerator, optional
        Local card derivation.
    publisher : EventPublisher, optional
        Receives notifications for changes made through this app.
    transactions_limit : int
        How many recent transactions the dashboard shows.
    """

    def __init__(
        self,
        api: BankApiClient,
        card_states: CardRefreshStateStore | None = None,
        generator: CardNumberGenerator | None = None,
        publisher: EventPublisher | None = None,
        transactions_limit: int = 50,
    ) -> None:
        self.api = api
        self.generator = generator or CardNumberGenerator()
        self.card_states = card_states or CardRefreshStateStore(self.generator)
        self.publisher = publisher
        self.transactions_limit = transactions_limit

    @classmethod
    def from_config(cls, api: BankApiClient, config: BankClientConfig) -> "BankingApp":
        """App whose local card rules and event sink follow ``config``."""
        generator = CardNumberGenerator(config.card)
        return cls(
            api,
            card_states=CardRefreshStateStore(generator),
            generator=generator,
            publisher=EventPublisher.from_config(config),
        )

    @property
    def user(self) -> Account:
        return self.api.session.current.user

    # Dashboard
    def dashboard(self) -> DashboardSnapshot:
        return DashboardSnapshot(
            balance=self.api.get_balance(),
            transactions=self.api.get_transactions(self.transactions_limit),
            requests=self.api.get_payment_requests(),
        )

    def transfer(self, command: TransferInput) -> DashboardSnapshot:
        transaction = self.api.transfer(command.to, command.amount, command.description)
        logger.info("Transfer %d sent to %s", transaction.transaction_id, command.to)
        if self.publisher is not None:
            self.publisher.transfer_completed(transaction)
        return self.dashboard()

    # Payment requests
    def request_payment(self, command: PaymentRequestInput) -> PaymentRequestListing:
        request = self.api.create_payment_request(
            command.to, command.amount, command.reason, command.message
        )
        logger.info("Payment request %d sent to %s", request.request_id, command.to)
        self._publish(PAYMENT_REQUEST_CREATED, request)
        return self.api.get_payment_requests()

    def respond(self, command: RespondInput) -> DashboardSnapshot:
        if command.decision == PaymentDecision.APPROVE:
            self.api.approve_payment_request(command.request_id)
            event_type = PAYMENT_REQUEST_APPROVED
        else:
            self.api.reject_payment_request(command.request_id)
            event_type = PAYMENT_REQUEST_REJECTED
        logger.info("Payment request %d %s", command.request_id, command.decision.value)

        snapshot = self.dashboard()
        self._publish(event_type, self._find(snapshot.requests, command.request_id))
        return snapshot

    def cancel(self, request_id: int) -> PaymentRequestListing:
        self.api.cancel_payment_request(request_id)
        logger.info("Payment request %d cancelled", request_id)
        listing = self.api.get_payment_requests()
        self._publish(PAYMENT_REQUEST_CANCELLED, self._find(listing, request_id))
        return listing

    @staticmethod
    def _find(listing: PaymentRequestListing, request_id: int) -> PaymentRequest | None:
        for request in listing.incoming + listing.outgoing:
            if request.request_id == request_id:
                return request
        return None

    def _publish(self, event_type: str, request: PaymentRequest | None) -> None:
        if self.publisher is not None and request is not None:
            self.publisher.payment_request_changed(event_type, request)

    # Card
    def card_details(self, now: datetime | None = None) -> CardDetails:
        """Card from the server, or derived locally when the server is down."""
        try:
            response = self.api.get_card()
        except ServiceUnavailableError:
            logger.warning("Card service unavailable, deriving card for %s locally", self.user.username)
            return self._local_card(now)
        return self._server_card(response)

    def refresh_card(self, now: datetime | None = None) -> CardDetails:
        """Issue a new card number.

        A cooldown reported by the server propagates as is. When the server
        is unreachable the local refresh record is used instead, with the
        same once-a-day rule.
        """
        try:
            response = self.api.refresh_card()
        except ServiceUnavailableError:
            logger.warning("Card service unavailable, refreshing card for %s locally", self.user.username)
            state = self.card_states.refresh(self.user.username, now)
            details = self._local_card(now)
            self._card_refreshed(details.card_number, state.seed)
            return details

        self._card_refreshed(response.card.card_number, response.card.refresh_seed)
        return self._server_card(response)

    def _card_refreshed(self, card_number: str, refresh_seed: int) -> None:
        if self.publisher is not None:
            self.publisher.card_refreshed(self.user.username, card_number, refresh_seed)

    def _server_card(self, response: CardResponse) -> CardDetails:
        return CardDetails(
            card_number=response.card.card_number,
            formatted_number=format_card_number(response.card.card_number),
            holder_name=self.user.username.upper(),
            expiry_date=response.card.expiry_date,
            can_refresh=response.can_refresh,
            source=CardSource.SERVER,
            wait=response.wait,
        )

    def _local_card(self, now: datetime | None = None) -> CardDetails:
        now = now or datetime.now(timezone.utc)
        user = self.user
        state = self.card_states.get(user.username)
        card_number = self.generator.derive_card_number(user.account_number, state.seed)
        remaining = self.generator.time_until_next_refresh(state, now)
        return CardDetails(
            card_number=card_number,
            formatted_number=format_card_number(card_number),
            holder_name=user.username.upper(),
            expiry_date=self.generator.expiry_date(now),
            can_refresh=remaining is None,
            source=CardSource.LOCAL,
            wait=RefreshWait.from_timedelta(remaining) if remaining is not None else None,
        )
