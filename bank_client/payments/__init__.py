"""Payment request lifecycle."""

from bank_client.payments.lifecycle import PaymentRequestLifecycle, validate_amount
from bank_client.payments.listing import PaymentRequestListing

__all__ = ["PaymentRequestLifecycle", "PaymentRequestListing", "validate_amount"]
