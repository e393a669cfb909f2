"""Tests for event sinks."""

import io
import json
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator
from unittest.mock import MagicMock, patch

import pytest
from confluent_kafka import KafkaException

from bank_client.config import BankClientConfig, EventsConfig, KafkaConfig
from bank_client.exceptions import ConfigurationError, SinkError
from bank_client.models.base import Event
from bank_client.sinks import ConsoleSink, JsonFileSink, KafkaSink, create_sink
from bank_client.sinks.kafka import ProducerStats


def sample_event(subject: str = "3") -> Event:
    return Event(
        event_id="evt-1",
        event_type="payment_request.approved",
        event_time=datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc),
        source="bank-client",
        subject=subject,
        data={"amount": "50.00", "status": "approved"},
    )


@pytest.fixture
def mock_producer() -> Iterator[MagicMock]:
    with patch("bank_client.sinks.kafka.Producer") as producer_class:
        producer = MagicMock()
        producer.flush.return_value = 0
        producer_class.return_value = producer
        yield producer


class TestConsoleSink:
    """Tests for ConsoleSink."""

    def test_send_compact(self, capsys: pytest.CaptureFixture) -> None:
        sink = ConsoleSink()

        sink.send("dev.banking.payment_request", sample_event())
        out = capsys.readouterr().out

        assert out.startswith("[dev.banking.payment_request] {")
        assert out.count("\n") == 1
        payload = json.loads(out.split("] ", 1)[1])
        assert payload["event_type"] == "payment_request.approved"
        assert payload["event_time"] == "2025-03-10T12:00:00+00:00"

    def test_send_pretty(self) -> None:
        stream = io.StringIO()
        sink = ConsoleSink(pretty=True, stream=stream)

        sink.send("dev.banking.card", {"card_last4": "2283"})

        assert stream.getvalue() == '[dev.banking.card] {\n  "card_last4": "2283"\n}\n'

    def test_close_prints_summary(self) -> None:
        stream = io.StringIO()
        sink = ConsoleSink(stream=stream)
        sink.send("dev.banking.card", {"x": 1})
        sink.send("dev.banking.card", {"x": 2})
        sink.send("dev.banking.transfer", {"x": 3})

        sink.close()

        summary = stream.getvalue().splitlines()[-3:]
        assert summary == ["3 events published", "  dev.banking.card: 2", "  dev.banking.transfer: 1"]


class TestJsonFileSink:
    """Tests for JsonFileSink."""

    def test_creates_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            output_dir = Path(tmpdir) / "nested" / "events"

            JsonFileSink(output_dir)

            assert output_dir.is_dir()

    def test_send_appends_json_lines(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            sink = JsonFileSink(tmpdir)

            sink.send("dev.banking.payment_request", sample_event("3"))
            sink.send("dev.banking.payment_request", sample_event("4"))

            path = Path(tmpdir) / "dev_banking_payment_request.jsonl"
            assert sink.path_for("dev.banking.payment_request") == path
            lines = path.read_text(encoding="utf-8").splitlines()
            assert [json.loads(line)["subject"] for line in lines] == ["3", "4"]
            assert sink.counts["dev.banking.payment_request"] == 2

    def test_send_failure_raises_sink_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            sink = JsonFileSink(tmpdir)

            with patch("builtins.open", side_effect=PermissionError("denied")):
                with pytest.raises(SinkError):
                    sink.send("events", {"x": 1})

            assert sink.counts["events"] == 0

    def test_unwritable_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = Path(tmpdir) / "file"
            blocker.write_text("x", encoding="utf-8")

            with pytest.raises(SinkError):
                JsonFileSink(blocker / "events")

    def test_close_logs_summary(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level("INFO", logger="bank_client.sinks.json_file")
        with tempfile.TemporaryDirectory() as tmpdir:
            sink = JsonFileSink(tmpdir)
            sink.send("events", {"x": 1})

            sink.close()

        assert "Wrote 1 events to" in caplog.text


class TestProducerStats:
    """Tests for ProducerStats."""

    def test_rates(self) -> None:
        stats = ProducerStats(sent=10, delivered=8, failed=1)

        assert stats.pending == 1
        assert stats.success_rate == 8 / 9
        assert ProducerStats().success_rate == 0.0


class TestKafkaSinkMocked:
    """Tests for KafkaSink using mocks (no actual Kafka connection)."""

    def test_init_with_string(self) -> None:
        with patch("bank_client.sinks.kafka.Producer") as producer_class:
            sink = KafkaSink("kafka:9092")

        assert sink.config.bootstrap_servers == "kafka:9092"
        producer_class.assert_called_once_with(KafkaConfig(bootstrap_servers="kafka:9092").to_dict())

    def test_send_event(self, mock_producer: MagicMock) -> None:
        sink = KafkaSink(KafkaConfig())

        sink.send("dev.banking.payment_request", sample_event("42"))

        kwargs = mock_producer.produce.call_args.kwargs
        assert kwargs["topic"] == "dev.banking.payment_request"
        assert kwargs["key"] == b"42"
        assert kwargs["headers"] == [("event_type", b"payment_request.approved")]
        assert json.loads(kwargs["value"])["subject"] == "42"
        mock_producer.poll.assert_called_once_with(0)
        assert sink.stats.sent == 1
        assert sink.stats.by_topic["dev.banking.payment_request"] == 1

    def test_send_plain_record(self, mock_producer: MagicMock) -> None:
        sink = KafkaSink(KafkaConfig())

        sink.send("topic", {"x": 1})
        sink.send("topic", {"subject": 7})

        first, second = mock_producer.produce.call_args_list
        assert first.kwargs["key"] is None
        assert first.kwargs["headers"] is None
        assert second.kwargs["key"] == b"7"

    @pytest.mark.parametrize("error", [BufferError("queue full"), KafkaException("broker down")])
    def test_produce_failure(self, mock_producer: MagicMock, error: Exception) -> None:
        mock_producer.produce.side_effect = error
        sink = KafkaSink(KafkaConfig())

        with pytest.raises(SinkError):
            sink.send("topic", sample_event())

        assert sink.stats.failed == 1
        assert sink.stats.sent == 0

    def test_delivery_callback(self, mock_producer: MagicMock) -> None:
        sink = KafkaSink(KafkaConfig())
        msg = MagicMock()
        msg.topic.return_value = "topic"
        msg.partition.return_value = 0
        msg.offset.return_value = 7

        sink._on_delivery(None, msg)
        sink._on_delivery("timeout", msg)

        assert sink.stats.delivered == 1
        assert sink.stats.failed == 1

    def test_close_flushes(self, mock_producer: MagicMock, caplog: pytest.LogCaptureFixture) -> None:
        mock_producer.flush.return_value = 2
        sink = KafkaSink(KafkaConfig(), flush_timeout=5.0)

        sink.close()

        mock_producer.flush.assert_called_once_with(5.0)
        assert "2 events still undelivered" in caplog.text


class TestCreateSink:
    """Tests for create_sink."""

    def test_none(self) -> None:
        assert create_sink(BankClientConfig()) is None

    def test_console(self) -> None:
        config = BankClientConfig(events=EventsConfig(sink="console", pretty=True))

        sink = create_sink(config)

        assert isinstance(sink, ConsoleSink)
        assert sink.pretty is True

    def test_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config = BankClientConfig(events=EventsConfig(sink="json", output_dir=Path(tmpdir)))

            sink = create_sink(config)

            assert isinstance(sink, JsonFileSink)
            assert sink.output_dir == Path(tmpdir)

    def test_kafka(self, mock_producer: MagicMock) -> None:
        config = BankClientConfig(
            kafka=KafkaConfig(bootstrap_servers="kafka:9092"),
            events=EventsConfig(sink="kafka"),
        )

        sink = create_sink(config)

        assert isinstance(sink, KafkaSink)
        assert sink.config.bootstrap_servers == "kafka:9092"

    def test_unknown(self) -> None:
        with pytest.raises(ConfigurationError):
            create_sink(BankClientConfig(events=EventsConfig(sink="s3")))
