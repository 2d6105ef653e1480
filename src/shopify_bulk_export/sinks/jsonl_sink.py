import json
from pathlib import Path
from typing import List
from shopify_bulk_export.core.models import ResultRecord
from shopify_bulk_export.sinks.base import Sink

class JsonlSink(Sink):
    """Sink that writes records to a JSONL (JSON Lines) file."""

    def write(self, path: str, records: List[ResultRecord]) -> None:
        """Write one record per line, in export order, replacing any existing file."""
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)

        with out.open("w", encoding="utf-8") as f:
            for r in records:
                f.write(json.dumps(r, ensure_ascii=False) + "\n")
