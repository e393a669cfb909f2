"""Text formatting for cards, accounts, amounts and timestamps."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from bank_client.models.banking import RefreshWait

CENTS = Decimal("0.01")


def format_card_number(card_number: str) -> str:
    """Group digits in fours: ``4532403222704`` -> ``4532 4032 2270 4``."""
    return " ".join(card_number[i : i + 4] for i in range(0, len(card_number), 4))


def mask_account_number(account_number: str | int | None) -> str:
    """Hide the middle of an account number, keeping the first 2 and last 4 digits."""
    if account_number is None or account_number == "":
        return "****"
    value = str(account_number)
    if len(value) <= 4:
        return value
    return value[:2] + "*" * max(0, len(value) - 6) + value[-4:]


def format_amount(amount: Decimal | int | float, currency: str = "$") -> str:
    """``Decimal("-1234.5")`` -> ``-$1,234.50``."""
    value = Decimal(str(amount)).quantize(CENTS)
    sign = "-" if value < 0 else ""
    return f"{sign}{currency}{abs(value):,.2f}"


def format_datetime(value: datetime | None) -> str:
    if value is None:
        return "Unknown Date"
    return value.strftime("%Y-%m-%d %H:%M")


def format_relative(value: datetime | None, now: datetime | None = None) -> str:
    """Human relative time for the last week, absolute date beyond that."""
    if value is None:
        return "Unknown Date"
    now = now or datetime.now(timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    seconds = int((now - value).total_seconds())
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return _plural(seconds // 60, "minute")
    if seconds < 86400:
        return _plural(seconds // 3600, "hour")
    if seconds < 7 * 86400:
        return _plural(seconds // 86400, "day")
    return format_datetime(value)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_refresh_wait(wait: RefreshWait | None) -> str:
    if wait is None:
        return "now"
    return f"{wait.hours}h {wait.minutes}m"


def status_label(status: Enum | str) -> str:
    value = status.value if isinstance(status, Enum) else status
    return value.replace("_", " ").capitalize()
