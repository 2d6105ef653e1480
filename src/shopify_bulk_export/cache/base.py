from __future__ import annotations

from typing import List, Optional, Protocol

from shopify_bulk_export.core.models import CacheRequest, ResultRecord
from shopify_bulk_export.utils.hashing import digest


def compute_cache_key(request: CacheRequest) -> str:
    """
    Content address of an export.

    Covers the query text, variables, store name and API version. Variables
    are serialized with sorted keys, so mapping order never changes the key.
    Resumes without a query are keyed by their operation id instead.
    """
    payload = {
        "query": request.query,
        "variables": request.variables,
        "store": {
            "name": request.store_name,
            "apiVersion": request.api_version,
        },
    }
    if request.query is None:
        payload["operationId"] = request.operation_id
    return digest(payload)


class ResultCache(Protocol):
    """Protocol for result cache backends."""

    enabled: bool

    def key(self, request: CacheRequest) -> str: ...

    def get(self, key: str) -> Optional[List[ResultRecord]]: ...

    def put(self, key: str, records: List[ResultRecord]) -> None: ...


class DisabledResultCache:
    """Cache used when caching is switched off. Never touches the filesystem."""

    enabled = False

    def key(self, request: CacheRequest) -> str:
        return compute_cache_key(request)

    def get(self, key: str) -> Optional[List[ResultRecord]]:
        return None

    def put(self, key: str, records: List[ResultRecord]) -> None:
        return None
