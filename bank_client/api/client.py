"""HTTP client for the banking API."""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from bank_client.api.schemas import (
    AccountSchema,
    BalanceSchema,
    CardResponseSchema,
    ErrorSchema,
    LoginResponseSchema,
    PaymentRequestCreatedSchema,
    PaymentRequestListSchema,
    RegisterResponseSchema,
    TransactionListSchema,
    TransferResponseSchema,
)
from bank_client.config import ApiConfig
from bank_client.exceptions import (
    ApiError,
    AuthenticationError,
    BankClientError,
    CooldownActiveError,
    InfrastructureError,
    InsufficientFundsError,
    InvalidAccountError,
    InvalidCounterpartyError,
    InvalidStateError,
    MalformedResponseError,
    NotAuthenticatedError,
    ServiceUnavailableError,
)
from bank_client.models.banking import (
    Account,
    CardResponse,
    PaymentRequest,
    PaymentRequestAction,
    Transaction,
)
from bank_client.payments.listing import PaymentRequestListing
from bank_client.session import Session, SessionContext

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Server error text (lower-cased substring) -> error kind
MESSAGE_ERRORS: tuple[tuple[str, type[BankClientError]], ...] = (
    ("insufficient balance", InsufficientFundsError),
    ("payment request not found or already processed", InvalidStateError),
    ("once per day", CooldownActiveError),
    ("cannot request money from yourself", InvalidCounterpartyError),
    ("cannot transfer to yourself", InvalidCounterpartyError),
    ("recipient not found", InvalidCounterpartyError),
    ("recipient account not found", InvalidCounterpartyError),
    ("user not found", InvalidCounterpartyError),
    ("username already exists", InvalidAccountError),
)


def map_error(status_code: int, message: str) -> BankClientError:
    """Translate an HTTP error response into the exception hierarchy."""
    if status_code >= 500:
        return ServiceUnavailableError(f"HTTP {status_code}: {message}")
    if status_code == 401:
        return NotAuthenticatedError(message or "Session expired or invalid")

    lowered = message.lower()
    for needle, error_cls in MESSAGE_ERRORS:
        if needle in lowered:
            if error_cls is CooldownActiveError:
                # Remaining time is not part of the error body
                return CooldownActiveError(timedelta(0), message)
            return error_cls(message)
    return ApiError(status_code, message)


class BankApiClient:
    """Synchronous client for the banking REST API.

    Parameters
    ----------
    config : ApiConfig, optional
        Base URL and timeouts.
    session : SessionContext, optional
        Holder of the bearer token; a fresh one is created when omitted.
    transport : httpx.BaseTransport, optional
        Custom transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        config: ApiConfig | None = None,
        session: SessionContext | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config or ApiConfig()
        self.session = session or SessionContext()
        self._client = httpx.Client(
            base_url=self.config.base_url,
            timeout=httpx.Timeout(
                self.config.timeout_seconds, connect=self.config.connect_timeout_seconds
            ),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> "BankApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # Plumbing
    def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        headers = self.session.authorization_header() if authenticated else {}
        logger.debug("[API] %s %s", method, path)

        try:
            response = self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.TimeoutException as exc:
            raise ServiceUnavailableError(f"{method} {path} timed out") from exc
        except httpx.TransportError as exc:
            raise ServiceUnavailableError(f"{method} {path} failed: {exc}") from exc

        if response.is_success:
            try:
                return response.json()
            except ValueError as exc:
                raise MalformedResponseError(f"{method} {path} returned invalid JSON") from exc

        message = self._error_message(response)
        logger.debug("[API] %s %s -> %d %s", method, path, response.status_code, message)
        error = map_error(response.status_code, message)
        if isinstance(error, NotAuthenticatedError) and authenticated:
            self.session.end()
        raise error

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = ErrorSchema.model_validate(response.json())
        except (ValueError, ValidationError):
            return response.text or response.reason_phrase
        return body.error or response.reason_phrase

    @staticmethod
    def _parse(schema: type[SchemaT], payload: Any) -> SchemaT:
        try:
            return schema.model_validate(payload)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Unexpected {schema.__name__} payload: {exc.error_count()} error(s)"
            ) from exc

    # Authentication
    def register(self, username: str, email: str, password: str, confirm_password: str) -> Account:
        payload = self._request(
            "POST",
            "/register",
            json={
                "username": username,
                "email": email,
                "password": password,
                "confirmPassword": confirm_password,
            },
            authenticated=False,
        )
        account = self._parse(RegisterResponseSchema, payload).user.to_domain()
        logger.info("Registered %s with account %s", account.username, account.account_number)
        return account

    def login(self, username: str, password: str) -> Session:
        """Authenticate and keep the issued token on the client."""
        try:
            payload = self._request(
                "POST",
                "/login",
                json={"username": username, "password": password},
                authenticated=False,
            )
        except NotAuthenticatedError as exc:
            raise AuthenticationError(str(exc)) from exc

        body = self._parse(LoginResponseSchema, payload)
        if not body.success or not body.token or body.user is None:
            raise AuthenticationError(body.message or "Login failed")

        session = Session(token=body.token, user=body.user.to_domain())
        self.session.start(session)
        logger.info("Logged in as %s", session.user.username)
        return session

    def logout(self) -> None:
        session = self.session.end()
        if session is not None:
            logger.info("Logged out %s", session.user.username)

    def change_password(self, current_password: str, new_password: str, confirm_password: str) -> None:
        """Change the password. The server revokes every session on success."""
        self._request(
            "POST",
            "/change-password",
            json={
                "currentPassword": current_password,
                "newPassword": new_password,
                "confirmNewPassword": confirm_password,
            },
        )
        self.session.end()

    # Account
    def get_account(self) -> Account:
        return self._parse(AccountSchema, self._request("GET", "/account")).to_domain()

    def get_balance(self) -> Decimal:
        return self._parse(BalanceSchema, self._request("GET", "/balance")).balance

    def get_transactions(self, limit: int = 50) -> list[Transaction]:
        payload = self._request("GET", "/transactions", params={"limit": limit})
        return self._parse(TransactionListSchema, payload).to_domain()

    def transfer(self, to: str, amount: Decimal, description: str = "") -> Transaction:
        payload = self._request(
            "POST",
            "/transfer",
            json={"to": to, "amount": float(amount), "description": description},
        )
        return self._parse(TransferResponseSchema, payload).transaction.to_domain()

    # Payment requests
    def create_payment_request(
        self, to: str, amount: Decimal, reason: str, message: str = ""
    ) -> PaymentRequest:
        payload = self._request(
            "POST",
            "/payment-requests",
            json={"to": to, "amount": float(amount), "reason": reason, "message": message},
        )
        return self._parse(PaymentRequestCreatedSchema, payload).payment_request.to_domain()

    def get_payment_requests(self) -> PaymentRequestListing:
        body = self._parse(PaymentRequestListSchema, self._request("GET", "/payment-requests"))
        return PaymentRequestListing.ordered(
            incoming=[r.to_domain() for r in body.incoming or []],
            outgoing=[r.to_domain() for r in body.outgoing or []],
        )

    def handle_payment_request(self, request_id: int, action: PaymentRequestAction | str) -> str:
        """Apply ``approve``, ``reject`` or ``cancel`` and return the server message."""
        action = PaymentRequestAction(action)
        payload = self._request(
            "PUT", f"/payment-requests/{request_id}", json={"action": action.value}
        )
        return payload.get("message", "") if isinstance(payload, dict) else ""

    def approve_payment_request(self, request_id: int) -> str:
        return self.handle_payment_request(request_id, PaymentRequestAction.APPROVE)

    def reject_payment_request(self, request_id: int) -> str:
        return self.handle_payment_request(request_id, PaymentRequestAction.REJECT)

    def cancel_payment_request(self, request_id: int) -> str:
        return self.handle_payment_request(request_id, PaymentRequestAction.CANCEL)

    # Card
    def get_card(self) -> CardResponse:
        return self._parse(CardResponseSchema, self._request("GET", "/card")).to_domain()

    def refresh_card(self) -> CardResponse:
        """Ask the server for a new card number.

        Raises
        ------
        CooldownActiveError
            When the card was refreshed less than a day ago. The remaining
            time is read back from ``GET /card``; if that read fails the
            denial is raised without it.
        """
        try:
            payload = self._request("POST", "/card/refresh")
        except CooldownActiveError as exc:
            try:
                status = self.get_card()
            except InfrastructureError:
                logger.warning("Card refresh denied, remaining cooldown unavailable")
                raise exc from None
            if status.wait is None:
                raise
            remaining = timedelta(hours=status.wait.hours, minutes=status.wait.minutes)
            raise CooldownActiveError(remaining) from exc
        return self._parse(CardResponseSchema, payload).to_domain()

    # Service
    def health_check(self) -> dict[str, Any]:
        url = f"{self.config.root_url}/health"
        payload = self._request("GET", url, authenticated=False)
        if not isinstance(payload, dict):
            raise MalformedResponseError("Health check did not return an object")
        return payload
