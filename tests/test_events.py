"""Tests for EventPublisher."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from bank_client.config import BankClientConfig, EventsConfig
from bank_client.events import (
    CARD_REFRESHED,
    PAYMENT_REQUEST_APPROVED,
    TRANSFER_COMPLETED,
    EventPublisher,
)
from bank_client.exceptions import SinkError
from bank_client.models.banking import (
    PaymentRequest,
    PaymentRequestStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from bank_client.sinks import ConsoleSink


class TestEventPublisher:
    """Tests for EventPublisher."""

    def test_publish_builds_envelope(self) -> None:
        sink = MagicMock()
        publisher = EventPublisher(sink, topic_prefix="test.banking")

        event = publisher.publish("payment_request.created", "7", {"amount": "5.00"})

        sink.send.assert_called_once_with("test.banking.payment_request", event)
        assert event.event_type == "payment_request.created"
        assert event.subject == "7"
        assert event.source == "bank-client"
        assert event.event_time.tzinfo == timezone.utc
        assert len(event.event_id) == 32
        assert event.metadata == {}

    def test_topic_for(self) -> None:
        publisher = EventPublisher(MagicMock())

        assert publisher.topic_for(CARD_REFRESHED) == "dev.banking.card"
        assert publisher.topic_for(TRANSFER_COMPLETED) == "dev.banking.transfer"

    def test_sink_error_swallowed(self, caplog: pytest.LogCaptureFixture) -> None:
        sink = MagicMock()
        sink.send.side_effect = SinkError("disk full")
        publisher = EventPublisher(sink)

        event = publisher.publish("card.refreshed", "alice", {})

        assert event.subject == "alice"
        assert "Failed to publish card.refreshed" in caplog.text

    def test_sink_error_strict(self) -> None:
        sink = MagicMock()
        sink.send.side_effect = SinkError("disk full")
        publisher = EventPublisher(sink, strict=True)

        with pytest.raises(SinkError):
            publisher.publish("card.refreshed", "alice", {})

    def test_payment_request_changed(self) -> None:
        sink = MagicMock()
        request = PaymentRequest(
            request_id=3,
            requester_id=1,
            payer_id=2,
            amount=Decimal("50.00"),
            reason="Dinner",
            status=PaymentRequestStatus.APPROVED,
            created_at=datetime(2025, 3, 10, tzinfo=timezone.utc),
        )

        event = EventPublisher(sink).payment_request_changed(PAYMENT_REQUEST_APPROVED, request)

        assert event.subject == "3"
        assert event.data["amount"] == "50.00"
        assert event.data["status"] == "approved"
        assert event.data["created_at"] == "2025-03-10T00:00:00+00:00"

    def test_transfer_completed(self) -> None:
        sink = MagicMock()
        tx = Transaction(
            transaction_id=9,
            from_user_id=2,
            to_user_id=1,
            amount=Decimal("50.00"),
            transaction_type=TransactionType.TRANSFER,
            description="Payment for: Dinner",
            status=TransactionStatus.COMPLETED,
            created_at=datetime(2025, 3, 10, tzinfo=timezone.utc),
        )

        event = EventPublisher(sink).transfer_completed(tx)

        assert event.event_type == TRANSFER_COMPLETED
        assert event.data["transaction_type"] == "transfer"

    def test_card_refreshed_hides_number(self) -> None:
        event = EventPublisher(MagicMock()).card_refreshed("alice", "4532481422283", 1)

        assert event.data == {"card_last4": "2283", "refresh_seed": 1}
        assert "4532481422283" not in str(event.data)

    def test_from_config(self) -> None:
        assert EventPublisher.from_config(BankClientConfig()) is None

        config = BankClientConfig(events=EventsConfig(sink="console", topic_prefix="qa.banking"))
        publisher = EventPublisher.from_config(config)

        assert isinstance(publisher.sink, ConsoleSink)
        assert publisher.topic_prefix == "qa.banking"

    def test_close(self) -> None:
        sink = MagicMock()

        EventPublisher(sink).close()

        sink.close.assert_called_once()
