"""Tests for the demo script."""

import importlib.util
from pathlib import Path
from types import ModuleType
from unittest.mock import MagicMock, patch

import pytest

from bank_client.config import CardConfig
from bank_client.store import InMemoryBank

SCRIPT = Path(__file__).parent.parent / "scripts" / "run_demo.py"


@pytest.fixture(scope="module")
def run_demo() -> ModuleType:
    spec = importlib.util.spec_from_file_location("run_demo", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestCardRefreshStep:
    """The card step follows the configured cooldown."""

    def test_default_cooldown_denies_second_refresh(
        self, run_demo: ModuleType, capsys: pytest.CaptureFixture
    ) -> None:
        bank = run_demo.seed_bank(3, seed=42)

        run_demo.run_card_refresh(bank, None, CardConfig())

        assert "Second refresh denied" in capsys.readouterr().out

    def test_zero_cooldown_allows_second_refresh(
        self, run_demo: ModuleType, capsys: pytest.CaptureFixture
    ) -> None:
        bank = run_demo.seed_bank(3, seed=42)
        publisher = MagicMock()

        run_demo.run_card_refresh(bank, publisher, CardConfig(refresh_cooldown_hours=0))

        assert "Second refresh allowed (cooldown 0h), seed=2" in capsys.readouterr().out
        publisher.card_refreshed.assert_called_once()


class TestMain:
    """Tests for the command line entry point."""

    @patch("bank_client.sinks.kafka.Producer")
    def test_kafka_sink(self, mock_producer_class: MagicMock, run_demo: ModuleType) -> None:
        producer = MagicMock()
        producer.flush.return_value = 0
        mock_producer_class.return_value = producer

        with patch("sys.argv", ["run_demo.py", "--sink", "kafka", "--seed", "7"]):
            run_demo.main()

        topics = {call.kwargs["topic"] for call in producer.produce.call_args_list}
        assert "dev.banking.payment_request" in topics
        assert "dev.banking.card" in topics
        producer.flush.assert_called_once()

    def test_seed_bank(self, run_demo: ModuleType) -> None:
        bank = run_demo.seed_bank(4, seed=1)

        assert isinstance(bank, InMemoryBank)
        assert bank.summary()["accounts"] == 4
