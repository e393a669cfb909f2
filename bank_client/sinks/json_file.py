"""JSON Lines file sink."""

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any

from bank_client.exceptions import SinkError
from bank_client.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Append events to one JSON Lines file per topic.

    ``dev.banking.card`` is written to ``<output_dir>/dev_banking_card.jsonl``.
    """

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SinkError(f"Cannot create event directory {self.output_dir}: {e}") from e
        self.counts: Counter[str] = Counter()

    def path_for(self, topic: str) -> Path:
        return self.output_dir / f"{topic.replace('.', '_')}.jsonl"

    def send(self, topic: str, record: Any) -> None:
        line = json.dumps(to_dict(record), ensure_ascii=False, default=str)
        try:
            with open(self.path_for(topic), "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            raise SinkError(f"Failed to write {topic} event: {e}") from e
        self.counts[topic] += 1

    def close(self) -> None:
        for topic, count in sorted(self.counts.items()):
            logger.info("Wrote %d events to %s", count, self.path_for(topic))
