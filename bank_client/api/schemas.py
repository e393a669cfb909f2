"""Response schemas of the banking HTTP API.

Each payload is validated here once and converted to the domain
dataclasses. Field names the server has used in more than one spelling
(``account_number`` / ``accountNumber``, ``created_at`` / ``createdAt``)
are accepted through alias choices.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from bank_client.models.banking import (
    Account,
    Card,
    CardResponse,
    PaymentRequest,
    PaymentRequestStatus,
    RefreshWait,
    Transaction,
    TransactionStatus,
    TransactionType,
)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _decimal(value: Any) -> Any:
    # JSON floats go through their repr so 50.1 stays 50.1
    if isinstance(value, float):
        return Decimal(str(value))
    return value


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AccountSchema(ApiModel):
    id: int = Field(validation_alias=AliasChoices("id", "user_id", "userId"))
    username: str
    email: str
    account_number: str = Field(validation_alias=AliasChoices("account_number", "accountNumber"))
    balance: Decimal = Decimal("0")
    created_at: datetime = Field(validation_alias=AliasChoices("created_at", "createdAt"))

    @field_validator("balance", mode="before")
    @classmethod
    def parse_balance(cls, value: Any) -> Any:
        return _decimal(value)

    def to_domain(self) -> Account:
        return Account(
            user_id=self.id,
            username=self.username,
            email=self.email,
            account_number=self.account_number,
            balance=self.balance,
            created_at=_as_utc(self.created_at),
        )


class TransactionSchema(ApiModel):
    id: int
    from_user_id: int = Field(validation_alias=AliasChoices("from_user_id", "fromUserId"))
    to_user_id: int = Field(validation_alias=AliasChoices("to_user_id", "toUserId"))
    amount: Decimal
    transaction_type: TransactionType = Field(
        validation_alias=AliasChoices("transaction_type", "transactionType", "type")
    )
    description: str | None = ""
    status: TransactionStatus = TransactionStatus.COMPLETED
    created_at: datetime = Field(validation_alias=AliasChoices("created_at", "createdAt"))
    from_username: str | None = Field(
        default=None, validation_alias=AliasChoices("from_username", "fromUsername")
    )
    to_username: str | None = Field(
        default=None, validation_alias=AliasChoices("to_username", "toUsername")
    )

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Any:
        return _decimal(value)

    def to_domain(self) -> Transaction:
        return Transaction(
            transaction_id=self.id,
            from_user_id=self.from_user_id,
            to_user_id=self.to_user_id,
            amount=self.amount,
            transaction_type=self.transaction_type,
            description=self.description or "",
            status=self.status,
            created_at=_as_utc(self.created_at),
            from_username=self.from_username or None,
            to_username=self.to_username or None,
        )


class PaymentRequestSchema(ApiModel):
    id: int
    from_user_id: int = Field(validation_alias=AliasChoices("from_user_id", "fromUserId"))
    to_user_id: int = Field(validation_alias=AliasChoices("to_user_id", "toUserId"))
    amount: Decimal
    reason: str
    message: str | None = ""
    status: PaymentRequestStatus = PaymentRequestStatus.PENDING
    created_at: datetime = Field(validation_alias=AliasChoices("created_at", "createdAt"))
    updated_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("updated_at", "updatedAt")
    )
    from_username: str | None = Field(
        default=None, validation_alias=AliasChoices("from_username", "fromUsername")
    )
    to_username: str | None = Field(
        default=None, validation_alias=AliasChoices("to_username", "toUsername")
    )

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Any:
        return _decimal(value)

    def to_domain(self) -> PaymentRequest:
        return PaymentRequest(
            request_id=self.id,
            requester_id=self.from_user_id,
            payer_id=self.to_user_id,
            amount=self.amount,
            reason=self.reason,
            status=self.status,
            created_at=_as_utc(self.created_at),
            message=self.message or "",
            requester_username=self.from_username or None,
            payer_username=self.to_username or None,
            updated_at=_as_utc(self.updated_at),
        )


class CardSchema(ApiModel):
    id: int
    user_id: int = Field(validation_alias=AliasChoices("user_id", "userId"))
    card_number: str = Field(validation_alias=AliasChoices("card_number", "cardNumber"))
    expiry_date: str = Field(validation_alias=AliasChoices("expiry_date", "expiryDate"))
    refresh_seed: int = Field(default=0, validation_alias=AliasChoices("refresh_seed", "refreshSeed"))
    last_refresh: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("last_refresh_date", "lastRefreshDate", "last_refresh"),
    )
    is_active: bool = Field(default=True, validation_alias=AliasChoices("is_active", "isActive"))
    created_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("created_at", "createdAt")
    )
    updated_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("updated_at", "updatedAt")
    )

    @field_validator("card_number")
    @classmethod
    def check_digits(cls, value: str) -> str:
        if not value.isascii() or not value.isdigit():
            raise ValueError("card number must contain only digits")
        return value

    def to_domain(self) -> Card:
        return Card(
            card_id=self.id,
            user_id=self.user_id,
            card_number=self.card_number,
            expiry_date=self.expiry_date,
            refresh_seed=self.refresh_seed,
            last_refresh=_as_utc(self.last_refresh),
            is_active=self.is_active,
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
        )


class RefreshWaitSchema(ApiModel):
    hours: int = 0
    minutes: int = 0


class CardResponseSchema(ApiModel):
    card: CardSchema
    can_refresh: bool = Field(default=False, validation_alias=AliasChoices("canRefresh", "can_refresh"))
    time_until_refresh: RefreshWaitSchema | None = Field(
        default=None, validation_alias=AliasChoices("timeUntilRefresh", "time_until_refresh")
    )

    def to_domain(self) -> CardResponse:
        wait = None
        if self.time_until_refresh is not None:
            wait = RefreshWait(self.time_until_refresh.hours, self.time_until_refresh.minutes)
        return CardResponse(card=self.card.to_domain(), can_refresh=self.can_refresh, wait=wait)


class LoginResponseSchema(ApiModel):
    success: bool = False
    message: str = ""
    token: str | None = None
    user: AccountSchema | None = None


class RegisterResponseSchema(ApiModel):
    message: str = ""
    user: AccountSchema


class BalanceSchema(ApiModel):
    balance: Decimal

    @field_validator("balance", mode="before")
    @classmethod
    def parse_balance(cls, value: Any) -> Any:
        return _decimal(value)


class TransactionListSchema(ApiModel):
    transactions: list[TransactionSchema] | None = None

    def to_domain(self) -> list[Transaction]:
        return [tx.to_domain() for tx in self.transactions or []]


class TransferResponseSchema(ApiModel):
    message: str = ""
    transaction: TransactionSchema


class PaymentRequestCreatedSchema(ApiModel):
    message: str = ""
    payment_request: PaymentRequestSchema = Field(
        validation_alias=AliasChoices("paymentRequest", "payment_request")
    )


class PaymentRequestListSchema(ApiModel):
    incoming: list[PaymentRequestSchema] | None = None
    outgoing: list[PaymentRequestSchema] | None = None


class ErrorSchema(ApiModel):
    error: str = ""
    details: str | None = None
