"""Authenticated session state held by the API client."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from bank_client.exceptions import NotAuthenticatedError
from bank_client.models.banking import Account


@dataclass
class Session:
    """Bearer token and the user it was issued to."""

    token: str
    user: Account
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SessionContext:
    """Holds at most one active session.

    Created empty, filled by ``start`` after login and cleared by ``end``
    on logout or when the server rejects the token.
    """

    def __init__(self) -> None:
        self._session: Session | None = None

    def start(self, session: Session) -> None:
        self._session = session

    def end(self) -> Session | None:
        session, self._session = self._session, None
        return session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def current(self) -> Session:
        if self._session is None:
            raise NotAuthenticatedError("No active session, log in first")
        return self._session

    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.current.token}"}
