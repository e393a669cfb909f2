#!/usr/bin/env python3
"""Run the payment request lifecycle and card refresh against an in-memory bank.

Seeds demo accounts, walks requests through approval, rejection and
cancellation, refreshes a card, and prints the resulting events.
"""

import argparse
import logging
import sys
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bank_client.cards import CardNumberGenerator, CardRefreshStateStore
from bank_client.config import BankClientConfig, CardConfig
from bank_client.display import format_amount, format_card_number, mask_account_number
from bank_client.events import EventPublisher
from bank_client.exceptions import CooldownActiveError, InsufficientFundsError
from bank_client.generators import AccountGenerator
from bank_client.logging import setup_logging
from bank_client.payments import PaymentRequestLifecycle
from bank_client.store import InMemoryBank

logger = logging.getLogger(__name__)


def seed_bank(num_accounts: int, seed: int) -> InMemoryBank:
    bank = InMemoryBank()
    for account in AccountGenerator(seed=seed).generate_batch(num_accounts):
        bank.add_account(account)
    return bank


def print_balances(bank: InMemoryBank) -> None:
    for account in bank.accounts.values():
        print(
            f"  {account.username:<20} {mask_account_number(account.account_number)}"
            f"  {format_amount(account.balance):>12}"
        )


def run_payment_requests(bank: InMemoryBank, lifecycle: PaymentRequestLifecycle) -> None:
    alice, bob, carol = list(bank.accounts.values())[:3]

    print("\n1. Request, then approve")
    request = lifecycle.create(alice.user_id, bob.account_number, Decimal("50.00"), "Dinner")
    lifecycle.approve(request.request_id, bob.user_id)
    print_balances(bank)

    print("\n2. Request, then cancel")
    request = lifecycle.create(alice.user_id, bob.account_number, Decimal("20.00"), "Taxi")
    lifecycle.cancel(request.request_id, alice.user_id)

    print("\n3. Approval without funds keeps the request pending")
    request = lifecycle.create(carol.user_id, bob.account_number, Decimal("1000000.00"), "Yacht")
    try:
        lifecycle.approve(request.request_id, bob.user_id)
    except InsufficientFundsError as e:
        print(f"  Approval failed: {e}")
    lifecycle.reject(request.request_id, bob.user_id)

    listing = lifecycle.list_for(bob.user_id)
    print(f"\n  {bob.username}: {len(listing.incoming)} incoming, {listing.pending_incoming_count} pending")


def run_card_refresh(
    bank: InMemoryBank,
    publisher: EventPublisher | None,
    card_config: CardConfig,
) -> None:
    account = next(iter(bank.accounts.values()))
    generator = CardNumberGenerator(card_config)
    states = CardRefreshStateStore(generator)
    now = datetime.now(timezone.utc)

    print("\n4. Card refresh")
    number = generator.derive_card_number(account.account_number, states.get(account.username).seed)
    print(f"  Current card:   {format_card_number(number)}")

    state = states.refresh(account.username, now)
    number = generator.derive_card_number(account.account_number, state.seed)
    print(f"  Refreshed card: {format_card_number(number)}")
    if publisher is not None:
        publisher.card_refreshed(account.username, number, state.seed)

    try:
        state = states.refresh(account.username, now + generator.cooldown / 2)
    except CooldownActiveError as e:
        print(f"  Second refresh denied: {e}")
    else:
        print(f"  Second refresh allowed (cooldown {card_config.refresh_cooldown_hours}h), seed={state.seed}")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run the banking client demo")
    parser.add_argument(
        "--accounts",
        type=int,
        default=3,
        help="Number of demo accounts, at least 3 (default: 3)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--sink",
        choices=["none", "console", "json", "kafka"],
        default="console",
        help="Where to send lifecycle events (default: console)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for the json sink (default: EVENT_OUTPUT_DIR or ./events)",
    )
    args = parser.parse_args()
    if args.accounts < 3:
        parser.error("--accounts must be at least 3")

    config = BankClientConfig.from_env()
    config.events = replace(
        config.events,
        sink=args.sink,
        output_dir=args.output_dir or config.events.output_dir,
    )
    setup_logging(config.log_level, config.log_format)

    bank = seed_bank(args.accounts, args.seed)
    logger.info("Seeded %d accounts", len(bank.accounts))
    print("Starting balances")
    print_balances(bank)

    publisher = EventPublisher.from_config(config)
    lifecycle = PaymentRequestLifecycle(bank, bank, bank, publisher=publisher)
    try:
        run_payment_requests(bank, lifecycle)
        run_card_refresh(bank, publisher, config.card)
    finally:
        if publisher is not None:
            publisher.close()

    print(f"\nSummary: {bank.summary()}")


if __name__ == "__main__":
    main()
