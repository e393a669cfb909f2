"""Deterministic virtual card number derivation and refresh policy."""

import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from bank_client.cards.luhn import luhn_check_digit
from bank_client.config import CardConfig
from bank_client.exceptions import CooldownActiveError
from bank_client.models.banking import CardRefreshState

logger = logging.getLogger(__name__)

# Linear congruential generator constants
LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280


def account_seed(account_identifier: str, fallback_seed: int = 1234) -> int:
    """Extract the numeric seed from an account identifier.

    Only ASCII digits are kept. An identifier with no digits, or whose digits
    are all zero, yields ``fallback_seed``, which carries no identity binding.
    """
    digits = "".join(c for c in account_identifier if "0" <= c <= "9")
    seed = int(digits) if digits else 0
    return seed or fallback_seed


def generate_body_digits(seed: int, length: int = 8) -> str:
    """Generate ``length`` pseudo-random digits from ``seed``."""
    state = seed
    digits = []
    for _ in range(length):
        state = (state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        digits.append(str(state * 10 // LCG_MODULUS))
    return "".join(digits).zfill(length)


class CardNumberGenerator:
    """Derive card numbers and enforce the refresh cooldown.

    The server issues the card of record with the same algorithm; this class
    is the client-side mirror used when the server is unreachable.

    Parameters
    ----------
    config : CardConfig | None
        Issuer prefix, fallback seed, body length, cooldown and expiry horizon.
    """

    def __init__(self, config: CardConfig | None = None) -> None:
        self.config = config or CardConfig()

    @property
    def cooldown(self) -> timedelta:
        return timedelta(hours=self.config.refresh_cooldown_hours)

    def derive_card_number(self, account_identifier: str, refresh_seed: int = 0) -> str:
        """Derive the card number for an account at a given refresh seed.

        Parameters
        ----------
        account_identifier : str
            Account number or any string whose digits identify the account.
        refresh_seed : int
            Number of refreshes performed so far (>= 0).

        Returns
        -------
        str
            Issuer prefix + body digits + Luhn check digit
            (13 characters with the default configuration).
        """
        if refresh_seed < 0:
            raise ValueError(f"Refresh seed must be >= 0, got {refresh_seed}")

        combined_seed = account_seed(account_identifier, self.config.fallback_seed) + refresh_seed
        payload = self.config.issuer_prefix + generate_body_digits(
            combined_seed, self.config.body_length
        )
        return payload + str(luhn_check_digit(payload))

    def expiry_date(self, now: datetime | None = None) -> str:
        """Expiry as ``MM/YY``, ``expiry_years`` after ``now``."""
        now = now or datetime.now(timezone.utc)
        return f"{now.month:02d}/{(now.year + self.config.expiry_years) % 100:02d}"

    def time_until_next_refresh(
        self,
        state: CardRefreshState,
        now: datetime | None = None,
    ) -> timedelta | None:
        """Remaining cooldown, or None when a refresh is allowed."""
        if state.last_refresh is None:
            return None
        now = now or datetime.now(timezone.utc)
        remaining = state.last_refresh + self.cooldown - now
        if remaining <= timedelta(0):
            return None
        return remaining

    def can_refresh(self, state: CardRefreshState, now: datetime | None = None) -> bool:
        return self.time_until_next_refresh(state, now) is None

    def refresh_card(
        self,
        state: CardRefreshState,
        now: datetime | None = None,
    ) -> CardRefreshState:
        """Advance the refresh seed if the cooldown has elapsed.

        Raises
        ------
        CooldownActiveError
            If the last refresh is more recent than the cooldown.
        """
        now = now or datetime.now(timezone.utc)
        remaining = self.time_until_next_refresh(state, now)
        if remaining is not None:
            raise CooldownActiveError(remaining)
        return replace(state, seed=state.seed + 1, last_refresh=now)


_default_generator = CardNumberGenerator()


def derive_card_number(account_identifier: str, refresh_seed: int = 0) -> str:
    """Derive a card number with the default configuration."""
    return _default_generator.derive_card_number(account_identifier, refresh_seed)


def expiry_date(now: datetime | None = None) -> str:
    """Expiry date with the default configuration."""
    return _default_generator.expiry_date(now)


def refresh_card(state: CardRefreshState, now: datetime | None = None) -> CardRefreshState:
    """Refresh with the default 24-hour cooldown."""
    return _default_generator.refresh_card(state, now)


def time_until_next_refresh(
    state: CardRefreshState,
    now: datetime | None = None,
) -> timedelta | None:
    return _default_generator.time_until_next_refresh(state, now)


def can_refresh(state: CardRefreshState, now: datetime | None = None) -> bool:
    return _default_generator.can_refresh(state, now)
