"""Kafka sink publishing events with confluent-kafka."""

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from confluent_kafka import KafkaException, Producer

from bank_client.config import KafkaConfig
from bank_client.exceptions import SinkError
from bank_client.models.base import Event
from bank_client.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


@dataclass
class ProducerStats:
    """Delivery counters, updated from the producer's delivery callback."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0
    by_topic: Counter[str] = field(default_factory=Counter)

    @property
    def pending(self) -> int:
        """Messages handed to the producer without a delivery report yet."""
        return max(0, self.sent - self.delivered - self.failed)

    @property
    def success_rate(self) -> float:
        reported = self.delivered + self.failed
        return self.delivered / reported if reported else 0.0


class KafkaSink:
    """Produce events to Kafka, keyed by subject so one entity stays on one partition.

    Parameters
    ----------
    config : KafkaConfig | str
        Producer configuration, or just the bootstrap servers.
    flush_timeout : float
        Seconds ``close`` waits for outstanding deliveries.
    """

    def __init__(self, config: KafkaConfig | str, flush_timeout: float = 30.0) -> None:
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)
        self.config = config
        self.flush_timeout = flush_timeout
        self.producer = Producer(config.to_dict())
        self.stats = ProducerStats()

    def _on_delivery(self, err: Any, msg: Any) -> None:
        if err:
            self.stats.failed += 1
            logger.error("Event delivery to %s failed: %s", msg.topic(), err)
        else:
            self.stats.delivered += 1
            logger.debug("Event delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    @staticmethod
    def _key(record: Any) -> bytes | None:
        if isinstance(record, Event):
            key = record.subject
        elif isinstance(record, dict):
            key = record.get("subject")
        else:
            key = None
        return str(key).encode("utf-8") if key is not None else None

    def send(self, topic: str, record: Any) -> None:
        headers = [("event_type", record.event_type.encode("utf-8"))] if isinstance(record, Event) else None
        try:
            self.producer.produce(
                topic=topic,
                key=self._key(record),
                value=json.dumps(to_dict(record), ensure_ascii=False, default=str).encode("utf-8"),
                headers=headers,
                on_delivery=self._on_delivery,
            )
        except (BufferError, KafkaException) as e:
            self.stats.failed += 1
            raise SinkError(f"Failed to produce to {topic}: {e}") from e

        self.stats.sent += 1
        self.stats.by_topic[topic] += 1
        # Serve delivery callbacks from earlier sends
        self.producer.poll(0)

    def close(self) -> None:
        """Wait for outstanding deliveries and log the totals."""
        remaining = self.producer.flush(self.flush_timeout)
        if remaining:
            logger.warning("%d events still undelivered after %.0fs", remaining, self.flush_timeout)
        logger.info(
            "Kafka sink closed: sent=%d delivered=%d failed=%d",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )
