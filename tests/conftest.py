"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from bank_client.models.banking import Account
from bank_client.payments import PaymentRequestLifecycle
from bank_client.store import InMemoryBank


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def now() -> datetime:
    """Fixed reference time."""
    return datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def bank() -> InMemoryBank:
    """Bank with three funded accounts: alice, bob and carol."""
    bank = InMemoryBank()
    bank.register("alice", "alice@example.com", Decimal("100.00"), account_number="1000000001")
    bank.register("bob", "bob@example.com", Decimal("200.00"), account_number="1000000002")
    bank.register("carol", "carol@example.com", Decimal("10.00"), account_number="1000000003")
    return bank


@pytest.fixture
def alice(bank: InMemoryBank) -> Account:
    return bank.get_by_username("alice")


@pytest.fixture
def bob(bank: InMemoryBank) -> Account:
    return bank.get_by_username("bob")


@pytest.fixture
def carol(bank: InMemoryBank) -> Account:
    return bank.get_by_username("carol")


@pytest.fixture
def lifecycle(bank: InMemoryBank) -> PaymentRequestLifecycle:
    return PaymentRequestLifecycle(bank, bank, bank)
