"""Virtual card number derivation, validation and refresh policy."""

from bank_client.cards.generator import (
    CardNumberGenerator,
    account_seed,
    can_refresh,
    derive_card_number,
    expiry_date,
    generate_body_digits,
    refresh_card,
    time_until_next_refresh,
)
from bank_client.cards.luhn import luhn_check_digit, luhn_is_valid
from bank_client.cards.refresh import CardRefreshStateStore

__all__ = [
    "CardNumberGenerator",
    "CardRefreshStateStore",
    "account_seed",
    "can_refresh",
    "derive_card_number",
    "expiry_date",
    "generate_body_digits",
    "luhn_check_digit",
    "luhn_is_valid",
    "refresh_card",
    "time_until_next_refresh",
]
