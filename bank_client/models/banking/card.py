"""Virtual debit card models."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from bank_client.models.banking.enums import CardSource


@dataclass(frozen=True)
class CardRefreshState:
    """Per-account refresh counter and the time of the last refresh."""

    seed: int = 0
    last_refresh: datetime | None = None


@dataclass(frozen=True)
class RefreshWait:
    """Remaining cooldown split into whole hours and minutes for display."""

    hours: int
    minutes: int

    @classmethod
    def from_timedelta(cls, remaining: timedelta) -> "RefreshWait":
        total = max(0, int(remaining.total_seconds()))
        return cls(hours=total // 3600, minutes=(total % 3600) // 60)


@dataclass
class Card:
    """Virtual card as issued by the server."""

    card_id: int
    user_id: int
    card_number: str
    expiry_date: str  # MM/YY
    refresh_seed: int
    last_refresh: datetime | None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class CardDetails:
    """Card as shown to the user, from the server or derived locally."""

    card_number: str
    formatted_number: str
    holder_name: str
    expiry_date: str
    can_refresh: bool
    source: CardSource
    wait: RefreshWait | None = None


@dataclass
class CardResponse:
    """Server view of the user's card and its refresh availability."""

    card: Card
    can_refresh: bool
    wait: RefreshWait | None = None
