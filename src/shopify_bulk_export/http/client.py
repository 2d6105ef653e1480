from __future__ import annotations

from typing import Any, Dict, Iterator, Optional, Protocol

import requests

from shopify_bulk_export.core.errors import RemoteProtocolError
from shopify_bulk_export.core.models import StoreConfig
from shopify_bulk_export.http.response import GraphQLResponse
from shopify_bulk_export.utils.logging import get_logger

ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"


class HttpClient(Protocol):
    """Protocol for the two kinds of request a bulk export makes."""

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> GraphQLResponse: ...

    def stream_lines(self, url: str) -> Iterator[str]: ...


class RequestsGraphQLClient:
    """GraphQL Admin API client using the requests library.

    Nothing is retried here: a transport fault or non-2xx status propagates as
    the ``requests`` exception that describes it.
    """

    def __init__(self, store: StoreConfig, timeout_s: int = 30, session: Optional[requests.Session] = None):
        self.store = store
        self.endpoint = store.endpoint
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                ACCESS_TOKEN_HEADER: store.access_token,
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )
        self.log = get_logger("shopify_bulk_export.http")

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> GraphQLResponse:
        """POST a GraphQL document and decode the JSON body."""
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        self.log.debug("POST %s (%s chars)", self.endpoint, len(query))
        r = self.session.post(self.endpoint, json=payload, timeout=self.timeout_s)
        r.raise_for_status()

        try:
            body = r.json()
        except ValueError as e:
            raise RemoteProtocolError(
                f"GraphQL endpoint returned a non-JSON body (status={r.status_code})"
            ) from e

        if not isinstance(body, dict):
            raise RemoteProtocolError(f"GraphQL endpoint returned {type(body).__name__}, expected an object")

        return GraphQLResponse(
            status_code=r.status_code,
            data=body.get("data"),
            errors=list(body.get("errors") or []),
            headers=dict(r.headers),
        )

    def stream_lines(self, url: str) -> Iterator[str]:
        """Stream a plain GET and yield the body line by line."""
        # The signed download URL carries its own credentials
        with requests.get(url, stream=True, timeout=self.timeout_s) as r:
            r.raise_for_status()
            # Split on bytes: JSON strings may hold U+2028 and U+0085 unescaped,
            # which str.splitlines would treat as line breaks
            for line in r.iter_lines(delimiter=b"\n"):
                yield line.decode("utf-8")

    def close(self) -> None:
        self.session.close()
