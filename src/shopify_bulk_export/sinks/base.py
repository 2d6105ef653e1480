from __future__ import annotations
from typing import List, Protocol
from shopify_bulk_export.core.models import ResultRecord

class Sink(Protocol):
    """Protocol for output sinks."""

    def write(self, path: str, records: List[ResultRecord]) -> None: ...
