from __future__ import annotations

import copy
from typing import Dict, List, Optional

from shopify_bulk_export.cache.base import compute_cache_key
from shopify_bulk_export.core.models import CacheRequest, ResultRecord


class InMemoryResultCache:
    """Process-local cache, mainly for tests and embedding."""

    enabled = True

    def __init__(self, entries: Optional[Dict[str, List[ResultRecord]]] = None):
        self.entries: Dict[str, List[ResultRecord]] = dict(entries or {})

    def key(self, request: CacheRequest) -> str:
        return compute_cache_key(request)

    def get(self, key: str) -> Optional[List[ResultRecord]]:
        records = self.entries.get(key)
        # Hand out copies so callers can't edit the stored entry
        return copy.deepcopy(records) if records is not None else None

    def put(self, key: str, records: List[ResultRecord]) -> None:
        self.entries[key] = copy.deepcopy(records)
