"""Output sinks for lifecycle event notifications."""

from typing import Any, Protocol

from bank_client.config import BankClientConfig
from bank_client.exceptions import ConfigurationError
from bank_client.sinks.console import ConsoleSink
from bank_client.sinks.json_file import JsonFileSink
from bank_client.sinks.kafka import KafkaSink


class EventSink(Protocol):
    """What the event publisher needs from a sink."""

    def send(self, topic: str, record: Any) -> None: ...

    def close(self) -> None: ...


def create_sink(config: BankClientConfig) -> EventSink | None:
    """Build the sink selected by ``config.events.sink`` (None for ``"none"``)."""
    sink_name = config.events.sink
    if sink_name == "none":
        return None
    if sink_name == "console":
        return ConsoleSink(pretty=config.events.pretty)
    if sink_name == "json":
        return JsonFileSink(config.events.output_dir)
    if sink_name == "kafka":
        return KafkaSink(config.kafka)
    raise ConfigurationError(f"Unknown event sink: {sink_name!r}")


__all__ = ["ConsoleSink", "EventSink", "JsonFileSink", "KafkaSink", "create_sink"]
