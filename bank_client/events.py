"""Lifecycle event notifications."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from bank_client.config import BankClientConfig
from bank_client.exceptions import SinkError
from bank_client.models.banking import PaymentRequest, Transaction
from bank_client.models.base import Event
from bank_client.sinks import EventSink, create_sink
from bank_client.sinks.serialization import to_dict

logger = logging.getLogger(__name__)

PAYMENT_REQUEST_CREATED = "payment_request.created"
PAYMENT_REQUEST_APPROVED = "payment_request.approved"
PAYMENT_REQUEST_REJECTED = "payment_request.rejected"
PAYMENT_REQUEST_CANCELLED = "payment_request.cancelled"
CARD_REFRESHED = "card.refreshed"
TRANSFER_COMPLETED = "transfer.completed"


class EventPublisher:
    """Wrap domain changes in ``Event`` envelopes and send them to a sink.

    Parameters
    ----------
    sink : EventSink
        Destination of the events.
    source : str
        Value of ``Event.source``.
    topic_prefix : str
        Topic is ``<prefix>.<entity>``, e.g. ``dev.banking.payment_request``.
    strict : bool
        Re-raise sink failures. Otherwise they are logged and dropped, since
        the change being announced has already been committed.
    """

    def __init__(
        self,
        sink: EventSink,
        source: str = "bank-client",
        topic_prefix: str = "dev.banking",
        strict: bool = False,
    ) -> None:
        self.sink = sink
        self.source = source
        self.topic_prefix = topic_prefix
        self.strict = strict

    @classmethod
    def from_config(cls, config: BankClientConfig) -> "EventPublisher | None":
        sink = create_sink(config)
        if sink is None:
            return None
        return cls(sink, topic_prefix=config.events.topic_prefix)

    def topic_for(self, event_type: str) -> str:
        entity = event_type.split(".", 1)[0]
        return f"{self.topic_prefix}.{entity}"

    def publish(
        self,
        event_type: str,
        subject: str,
        data: dict[str, Any],
        metadata: dict[str, Any] | None = None,
    ) -> Event:
        """Build an event and send it."""
        event = Event(
            event_id=uuid.uuid4().hex,
            event_type=event_type,
            event_time=datetime.now(timezone.utc),
            source=self.source,
            subject=subject,
            data=data,
            metadata=metadata or {},
        )
        topic = self.topic_for(event_type)
        try:
            self.sink.send(topic, event)
        except SinkError:
            logger.exception("Failed to publish %s for %s", event_type, subject)
            if self.strict:
                raise
        else:
            logger.debug("Published %s for %s to %s", event_type, subject, topic)
        return event

    def payment_request_changed(self, event_type: str, request: PaymentRequest) -> Event:
        return self.publish(event_type, str(request.request_id), to_dict(request))

    def transfer_completed(self, transaction: Transaction) -> Event:
        return self.publish(TRANSFER_COMPLETED, str(transaction.transaction_id), to_dict(transaction))

    def card_refreshed(self, account_key: str, card_number: str, refresh_seed: int) -> Event:
        # Only the last four digits leave the process
        return self.publish(
            CARD_REFRESHED,
            account_key,
            {"card_last4": card_number[-4:], "refresh_seed": refresh_seed},
        )

    def close(self) -> None:
        self.sink.close()
