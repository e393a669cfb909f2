"""In-memory holder of per-account card refresh state."""

import logging
import threading
from datetime import datetime

from bank_client.cards.generator import CardNumberGenerator
from bank_client.exceptions import CooldownActiveError
from bank_client.models.banking import CardRefreshState

logger = logging.getLogger(__name__)


class CardRefreshStateStore:
    """Per-account ``CardRefreshState`` records with atomic refresh.

    Keys are whatever identifies the account locally (the username in the
    client, the user id on the server side).
    """

    def __init__(self, generator: CardNumberGenerator | None = None) -> None:
        self.generator = generator or CardNumberGenerator()
        self._states: dict[str, CardRefreshState] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> CardRefreshState:
        """Return the state for ``key``, creating the default on first view."""
        with self._lock:
            return self._states.setdefault(key, CardRefreshState())

    def refresh(self, key: str, now: datetime | None = None) -> CardRefreshState:
        """Check the cooldown and record the refresh as one step.

        Raises
        ------
        CooldownActiveError
            If the cooldown has not elapsed; the stored state is unchanged.
        """
        with self._lock:
            current = self._states.get(key, CardRefreshState())
            try:
                updated = self.generator.refresh_card(current, now)
            except CooldownActiveError as exc:
                logger.warning("Card refresh for %s denied, %s left", key, exc.remaining)
                raise
            self._states[key] = updated

        logger.info("Card refreshed locally for %s (seed=%d)", key, updated.seed)
        return updated

    def __contains__(self, key: str) -> bool:
        return key in self._states

    def __len__(self) -> int:
        return len(self._states)
