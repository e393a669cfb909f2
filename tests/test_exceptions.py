"""Tests for custom exception hierarchy."""

from datetime import timedelta

from bank_client.exceptions import (
    ApiError,
    AuthenticationError,
    BankClientError,
    BusinessRuleError,
    ConfigurationError,
    CooldownActiveError,
    EntityNotFoundError,
    InfrastructureError,
    InsufficientFundsError,
    InvalidAccountError,
    InvalidAmountError,
    InvalidCounterpartyError,
    InvalidPaymentRequestError,
    InvalidStateError,
    MalformedResponseError,
    NotAuthenticatedError,
    NotAuthorizedError,
    PaymentRequestNotFoundError,
    ServiceUnavailableError,
    SinkError,
)
from bank_client.models.banking import RefreshWait


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_bank_client_error_is_exception(self) -> None:
        assert isinstance(BankClientError("test"), Exception)

    def test_business_rules_share_a_base(self) -> None:
        for error_cls in (
            InvalidAmountError,
            InvalidCounterpartyError,
            InvalidPaymentRequestError,
            NotAuthorizedError,
            InvalidStateError,
            InsufficientFundsError,
            InvalidAccountError,
            EntityNotFoundError,
        ):
            assert issubclass(error_cls, BusinessRuleError)
        assert issubclass(CooldownActiveError, BusinessRuleError)

    def test_payment_request_not_found_is_entity_not_found(self) -> None:
        err = PaymentRequestNotFoundError("test")
        assert isinstance(err, EntityNotFoundError)
        assert isinstance(err, BusinessRuleError)

    def test_infrastructure_branch_is_separate(self) -> None:
        for error_cls in (ServiceUnavailableError, MalformedResponseError):
            assert issubclass(error_cls, InfrastructureError)
            assert not issubclass(error_cls, BusinessRuleError)
        assert isinstance(ApiError(418, "teapot"), InfrastructureError)

    def test_not_authenticated_is_authentication_error(self) -> None:
        assert isinstance(NotAuthenticatedError("test"), AuthenticationError)

    def test_configuration_and_sink_errors(self) -> None:
        assert isinstance(ConfigurationError("test"), BankClientError)
        assert isinstance(SinkError("test"), BankClientError)

    def test_exception_message(self) -> None:
        err = InsufficientFundsError("insufficient balance")
        assert str(err) == "insufficient balance"


class TestApiError:
    """Tests for ApiError."""

    def test_message_includes_status(self) -> None:
        err = ApiError(400, "Invalid action")

        assert err.status_code == 400
        assert str(err) == "HTTP 400: Invalid action"


class TestCooldownActiveError:
    """Tests for CooldownActiveError."""

    def test_wait_breakdown(self) -> None:
        err = CooldownActiveError(timedelta(hours=5, minutes=3, seconds=40))

        assert err.hours == 5
        assert err.minutes == 3
        assert err.wait == RefreshWait(hours=5, minutes=3)
        assert "5h 3m" in str(err)

    def test_negative_remaining_is_clamped(self) -> None:
        err = CooldownActiveError(timedelta(minutes=-10))

        assert err.remaining == timedelta(0)
        assert err.wait == RefreshWait(0, 0)

    def test_custom_message(self) -> None:
        err = CooldownActiveError(timedelta(hours=1), "card can only be refreshed once per day")

        assert str(err) == "card can only be refreshed once per day"
        assert err.hours == 1
