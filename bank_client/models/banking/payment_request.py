"""Payment request model for the banking domain."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from bank_client.models.banking.enums import PaymentRequestStatus


@dataclass(frozen=True)
class PaymentRequest:
    """A request from one user (the requester) for another (the payer) to pay.

    The request is *outgoing* for the requester and *incoming* for the payer.
    Approval debits the payer and credits the requester by ``amount``.
    Instances are frozen: transitions produce a new value via
    ``dataclasses.replace``.
    """

    request_id: int
    requester_id: int  # wire: from_user_id
    payer_id: int  # wire: to_user_id
    amount: Decimal
    reason: str
    status: PaymentRequestStatus
    created_at: datetime
    message: str = ""

    # Display fields
    requester_username: str | None = None
    payer_username: str | None = None
    updated_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == PaymentRequestStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def is_incoming_for(self, user_id: int) -> bool:
        return self.payer_id == user_id

    def is_outgoing_for(self, user_id: int) -> bool:
        return self.requester_id == user_id
