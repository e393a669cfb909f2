"""Demo account generator."""

import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterator

from bank_client.generators.base import BaseGenerator
from bank_client.models.banking import Account

DEFAULT_INITIAL_BALANCE = Decimal("1000.00")


class AccountGenerator(BaseGenerator):
    """Generate demo bank accounts with unique usernames, emails and numbers.

    Every account starts with the same balance, as new registrations do.
    """

    def __init__(
        self,
        seed: int | None = None,
        initial_balance: Decimal = DEFAULT_INITIAL_BALANCE,
    ) -> None:
        super().__init__(seed)
        self.initial_balance = initial_balance
        self._account_numbers: set[str] = set()

    def generate(self, user_id: int) -> Account:
        """Generate a single account.

        Parameters
        ----------
        user_id : int
            Id of the account owner.

        Returns
        -------
        Account
            Generated account.
        """
        username = self.fake.unique.user_name()
        return Account(
            user_id=user_id,
            username=username,
            email=f"{username}@{self.fake.free_email_domain()}",
            account_number=self._account_number(),
            balance=self.initial_balance,
            created_at=datetime.now(timezone.utc) - timedelta(days=random.randint(0, 365)),
        )

    def generate_batch(self, count: int, start_user_id: int = 1) -> Iterator[Account]:
        for offset in range(count):
            yield self.generate(start_user_id + offset)

    def _account_number(self) -> str:
        while True:
            number = f"{random.randint(0, 9_999_999_999):010d}"
            if number not in self._account_numbers:
                self._account_numbers.add(number)
                return number
