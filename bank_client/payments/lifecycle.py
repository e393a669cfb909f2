"""Payment request state machine.

A request starts ``PENDING`` and moves exactly once to ``APPROVED``,
``REJECTED`` or ``CANCELLED``. Only the payer may approve or reject, only the
requester may cancel. Approval moves funds through the ledger before the
status changes, so a failed transfer leaves the request pending.
"""

import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from bank_client.events import (
    PAYMENT_REQUEST_APPROVED,
    PAYMENT_REQUEST_CANCELLED,
    PAYMENT_REQUEST_CREATED,
    PAYMENT_REQUEST_REJECTED,
    EventPublisher,
)
from bank_client.exceptions import (
    InvalidAccountError,
    InvalidAmountError,
    InvalidCounterpartyError,
    InvalidPaymentRequestError,
    InvalidStateError,
    NotAuthorizedError,
    PaymentRequestNotFoundError,
)
from bank_client.models.banking import (
    PaymentDecision,
    PaymentRequest,
    PaymentRequestStatus,
)
from bank_client.payments.listing import PaymentRequestListing
from bank_client.store.base import AccountStore, Ledger, PaymentRequestRepository

logger = logging.getLogger(__name__)

LOCK_STRIPES = 64

CENTS = Decimal("0.01")


def validate_amount(amount: Decimal | int | str) -> Decimal:
    """Return ``amount`` as a positive two-place Decimal.

    Raises
    ------
    InvalidAmountError
        If the value is not a number, not finite, or not positive.
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"Amount is not a number: {amount!r}") from None
    if not value.is_finite() or value <= 0:
        raise InvalidAmountError(f"Amount must be positive, got {amount}")
    value = value.quantize(CENTS)
    if value <= 0:
        raise InvalidAmountError(f"Amount rounds to zero: {amount}")
    return value


class PaymentRequestLifecycle:
    """Create, respond to, cancel and list payment requests.

    Parameters
    ----------
    accounts : AccountStore
        Resolves payer identifiers and checks the requester exists.
    ledger : Ledger
        Moves funds on approval.
    repository : PaymentRequestRepository
        Holds the request records.
    publisher : EventPublisher, optional
        Receives one event per successful transition.
    """

    def __init__(
        self,
        accounts: AccountStore,
        ledger: Ledger,
        repository: PaymentRequestRepository,
        publisher: EventPublisher | None = None,
    ) -> None:
        self.accounts = accounts
        self.ledger = ledger
        self.repository = repository
        self.publisher = publisher
        self._locks = tuple(threading.Lock() for _ in range(LOCK_STRIPES))

    def _lock_for(self, request_id: int) -> threading.Lock:
        # Requests sharing a stripe are serialized with each other
        return self._locks[request_id % len(self._locks)]

    def _require_request(self, request_id: int) -> PaymentRequest:
        request = self.repository.get_request(request_id)
        if request is None:
            raise PaymentRequestNotFoundError(f"Payment request {request_id} not found")
        return request

    def _publish(self, event_type: str, request: PaymentRequest) -> None:
        if self.publisher is not None:
            self.publisher.payment_request_changed(event_type, request)

    def create(
        self,
        requester_id: int,
        payer: str,
        amount: Decimal | int | str,
        reason: str,
        message: str = "",
    ) -> PaymentRequest:
        """Open a pending request asking ``payer`` to pay ``requester_id``.

        Parameters
        ----------
        requester_id : int
            User asking for money.
        payer : str
            Account identifier of the user asked to pay.
        amount : Decimal, int or str
            Requested amount; must be positive.
        reason : str
            Required short reason.
        message : str
            Optional free text for the payer.

        Returns
        -------
        PaymentRequest
            The stored request in ``PENDING``.
        """
        value = validate_amount(amount)
        reason = (reason or "").strip()
        if not reason:
            raise InvalidPaymentRequestError("A reason is required")

        requester = self.accounts.get_account(requester_id)
        if requester is None:
            raise InvalidAccountError(f"Account for user {requester_id} not found")
        payer_account = self.accounts.resolve(payer)
        if payer_account is None:
            raise InvalidCounterpartyError(f"Payer {payer} not found")
        if payer_account.user_id == requester.user_id:
            raise InvalidCounterpartyError("Cannot request money from yourself")

        request = PaymentRequest(
            request_id=self.repository.new_request_id(),
            requester_id=requester.user_id,
            payer_id=payer_account.user_id,
            amount=value,
            reason=reason,
            status=PaymentRequestStatus.PENDING,
            created_at=datetime.now(timezone.utc),
            message=message,
            requester_username=requester.username,
            payer_username=payer_account.username,
        )
        self.repository.add_request(request)
        logger.info(
            "Payment request %d created: %s asks %s for %s",
            request.request_id,
            requester.username,
            payer_account.username,
            value,
        )
        self._publish(PAYMENT_REQUEST_CREATED, request)
        return request

    def respond(
        self,
        request_id: int,
        acting_user_id: int,
        decision: PaymentDecision | str,
    ) -> PaymentRequest:
        """Approve or reject a pending request as its payer.

        Approval transfers the amount from payer to requester. If the
        transfer fails the ledger error propagates and the request stays
        pending.
        """
        try:
            decision = PaymentDecision(decision)
        except ValueError:
            raise InvalidPaymentRequestError(f"Unknown decision: {decision!r}") from None

        with self._lock_for(request_id):
            request = self._require_request(request_id)
            if request.payer_id != acting_user_id:
                raise NotAuthorizedError(
                    f"User {acting_user_id} is not the payer of request {request_id}"
                )
            if not request.is_pending:
                raise InvalidStateError(
                    f"Payment request {request_id} is already {request.status.value}"
                )

            transaction = None
            if decision == PaymentDecision.APPROVE:
                transaction = self.ledger.transfer(
                    request.payer_id,
                    request.requester_id,
                    request.amount,
                    f"Payment for: {request.reason}",
                )
                status = PaymentRequestStatus.APPROVED
            else:
                status = PaymentRequestStatus.REJECTED

            updated = replace(request, status=status, updated_at=datetime.now(timezone.utc))
            self.repository.replace_request(updated)

        logger.info("Payment request %d %s by user %d", request_id, status.value, acting_user_id)
        if status == PaymentRequestStatus.APPROVED:
            self._publish(PAYMENT_REQUEST_APPROVED, updated)
            if self.publisher is not None and transaction is not None:
                self.publisher.transfer_completed(transaction)
        else:
            self._publish(PAYMENT_REQUEST_REJECTED, updated)
        return updated

    def approve(self, request_id: int, acting_user_id: int) -> PaymentRequest:
        return self.respond(request_id, acting_user_id, PaymentDecision.APPROVE)

    def reject(self, request_id: int, acting_user_id: int) -> PaymentRequest:
        return self.respond(request_id, acting_user_id, PaymentDecision.REJECT)

    def cancel(self, request_id: int, acting_user_id: int) -> PaymentRequest:
        """Withdraw a pending request as its requester. No funds move."""
        with self._lock_for(request_id):
            request = self._require_request(request_id)
            if request.requester_id != acting_user_id:
                raise NotAuthorizedError(
                    f"User {acting_user_id} is not the requester of request {request_id}"
                )
            if not request.is_pending:
                raise InvalidStateError(
                    f"Payment request {request_id} is already {request.status.value}"
                )
            updated = replace(
                request,
                status=PaymentRequestStatus.CANCELLED,
                updated_at=datetime.now(timezone.utc),
            )
            self.repository.replace_request(updated)

        logger.info("Payment request %d cancelled by user %d", request_id, acting_user_id)
        self._publish(PAYMENT_REQUEST_CANCELLED, updated)
        return updated

    def list_for(self, user_id: int) -> PaymentRequestListing:
        """Incoming and outgoing requests of ``user_id``, newest first."""
        return PaymentRequestListing.build(user_id, self.repository.requests_for(user_id))
