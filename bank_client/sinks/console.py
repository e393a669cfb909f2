"""Console sink for watching events during development."""

import json
import sys
from collections import Counter
from typing import Any, TextIO

from bank_client.sinks.serialization import to_dict


class ConsoleSink:
    """Print each event as ``[topic] <json>`` on one line, or indented.

    Parameters
    ----------
    pretty : bool
        Indent the JSON body.
    stream : TextIO | None
        Output stream, stdout when None.
    """

    def __init__(self, pretty: bool = False, stream: TextIO | None = None) -> None:
        self.pretty = pretty
        self.stream = stream
        self.counts: Counter[str] = Counter()

    def send(self, topic: str, record: Any) -> None:
        body = json.dumps(
            to_dict(record),
            indent=2 if self.pretty else None,
            ensure_ascii=False,
            default=str,
        )
        print(f"[{topic}] {body}", file=self.stream or sys.stdout)
        self.counts[topic] += 1

    def close(self) -> None:
        """Print how many events went to each topic."""
        out = self.stream or sys.stdout
        print(f"{sum(self.counts.values())} events published", file=out)
        for topic, count in sorted(self.counts.items()):
            print(f"  {topic}: {count}", file=out)
