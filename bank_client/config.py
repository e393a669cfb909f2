"""Configuration management for bank-client."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bank_client.exceptions import ConfigurationError

EVENT_SINKS = ("none", "console", "json", "kafka")


@dataclass
class ApiConfig:
    """Banking API connection configuration."""

    base_url: str = "http://localhost:8080/api"
    timeout_seconds: float = 30.0
    connect_timeout_seconds: float = 10.0

    @property
    def root_url(self) -> str:
        """Server root, used for endpoints outside the ``/api`` prefix."""
        base = self.base_url.rstrip("/")
        if base.endswith("/api"):
            return base[: -len("/api")]
        return base


@dataclass
class CardConfig:
    """Virtual card derivation and refresh policy."""

    issuer_prefix: str = "4532"
    fallback_seed: int = 1234
    body_length: int = 8
    refresh_cooldown_hours: int = 24
    expiry_years: int = 3


@dataclass
class KafkaConfig:
    """Kafka producer configuration."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class EventsConfig:
    """Lifecycle event notification configuration."""

    sink: str = "none"  # none, console, json, kafka
    output_dir: Path = field(default_factory=lambda: Path("events"))
    pretty: bool = False
    topic_prefix: str = "dev.banking"


@dataclass
class BankClientConfig:
    """Main configuration for bank-client."""

    api: ApiConfig = field(default_factory=ApiConfig)
    card: CardConfig = field(default_factory=CardConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    events: EventsConfig = field(default_factory=EventsConfig)
    log_level: str = "INFO"
    log_format: str = "standard"

    def validate(self) -> None:
        """Check cross-field constraints.

        Raises
        ------
        ConfigurationError
            If any value is out of range.
        """
        if self.api.timeout_seconds <= 0 or self.api.connect_timeout_seconds <= 0:
            raise ConfigurationError("API timeouts must be positive")
        if not self.api.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"Invalid API base URL: {self.api.base_url}")
        if not self.card.issuer_prefix.isdigit() or not self.card.issuer_prefix.isascii():
            raise ConfigurationError(f"Issuer prefix must be digits: {self.card.issuer_prefix!r}")
        if self.card.body_length <= 0:
            raise ConfigurationError("Card body length must be positive")
        if self.card.refresh_cooldown_hours < 0:
            raise ConfigurationError("Refresh cooldown cannot be negative")
        if self.events.sink not in EVENT_SINKS:
            raise ConfigurationError(
                f"Unknown event sink {self.events.sink!r}, expected one of {EVENT_SINKS}"
            )

    @classmethod
    def from_env(cls) -> "BankClientConfig":
        """Create config from environment variables."""
        import os

        try:
            api = ApiConfig(
                base_url=os.getenv("BANK_API_URL", "http://localhost:8080/api"),
                timeout_seconds=float(os.getenv("BANK_API_TIMEOUT", "30")),
            )

            card = CardConfig(
                refresh_cooldown_hours=int(os.getenv("CARD_COOLDOWN_HOURS", "24")),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
        )

        events = EventsConfig(
            sink=os.getenv("EVENT_SINK", "none").lower(),
            output_dir=Path(os.getenv("EVENT_OUTPUT_DIR", "events")),
            pretty=os.getenv("PRETTY_JSON", "false").lower() == "true",
            topic_prefix=os.getenv("TOPIC_PREFIX", "dev.banking"),
        )

        config = cls(
            api=api,
            card=card,
            kafka=kafka,
            events=events,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
        config.validate()
        return config
