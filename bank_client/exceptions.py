"""Custom exception hierarchy for bank-client."""

from datetime import timedelta

from bank_client.models.banking.card import RefreshWait


class BankClientError(Exception):
    """Base exception for all bank-client errors."""


class BusinessRuleError(BankClientError):
    """Raised when an operation violates a banking rule.

    Prior state is always left untouched when one of these is raised.
    """


class InvalidAmountError(BusinessRuleError):
    """Raised when an amount is not a positive, finite number."""


class InvalidCounterpartyError(BusinessRuleError):
    """Raised when the counterparty is unknown or is the acting user."""


class InvalidPaymentRequestError(BusinessRuleError):
    """Raised when a payment request is missing required fields."""


class NotAuthorizedError(BusinessRuleError):
    """Raised when a user acts on a request they are not a party to."""


class InvalidStateError(BusinessRuleError):
    """Raised when an entity is in an invalid state for the operation."""


class CooldownActiveError(BusinessRuleError):
    """Raised when a card refresh is attempted before the cooldown elapsed."""

    def __init__(self, remaining: timedelta, message: str | None = None) -> None:
        self.remaining = max(remaining, timedelta(0))
        if message is None:
            message = (
                f"Card can only be refreshed once per day, "
                f"try again in {self.hours}h {self.minutes}m"
            )
        super().__init__(message)

    @property
    def wait(self) -> RefreshWait:
        return RefreshWait.from_timedelta(self.remaining)

    @property
    def hours(self) -> int:
        return self.wait.hours

    @property
    def minutes(self) -> int:
        return self.wait.minutes


class InsufficientFundsError(BusinessRuleError):
    """Raised when the paying account cannot cover the amount."""


class InvalidAccountError(BusinessRuleError):
    """Raised when an account is unknown or cannot take part in the operation."""


class EntityNotFoundError(BusinessRuleError):
    """Raised when a referenced entity does not exist."""


class PaymentRequestNotFoundError(EntityNotFoundError):
    """Raised when a payment request id does not exist."""


class InfrastructureError(BankClientError):
    """Base for failures of the service itself rather than of a banking rule."""


class ServiceUnavailableError(InfrastructureError):
    """Raised when the banking API cannot be reached or fails internally."""


class ApiError(InfrastructureError):
    """Raised for API error responses that map to no banking rule."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")


class MalformedResponseError(InfrastructureError):
    """Raised when an API payload does not match its expected schema."""


class AuthenticationError(BankClientError):
    """Raised when credentials are rejected."""


class NotAuthenticatedError(AuthenticationError):
    """Raised when an operation needs a session and none is active."""


class ConfigurationError(BankClientError):
    """Raised when configuration is invalid or missing."""


class SinkError(BankClientError):
    """Raised when a sink operation fails."""
