from __future__ import annotations

from typing import Optional

from shopify_bulk_export.core.errors import (
    JobCreationFailed,
    MissingJobHandle,
    RemoteProtocolError,
    RemoteUserError,
)
from shopify_bulk_export.core.models import JobHandle, JobStatus
from shopify_bulk_export.http.client import HttpClient
from shopify_bulk_export.query.documents import START_BULK_QUERY
from shopify_bulk_export.utils.logging import BaseLogger, SilentLogger


class JobSubmitter:
    """Starts a bulk operation for an already formatted query."""

    def __init__(self, client: HttpClient, logger: Optional[BaseLogger] = None):
        self.client = client
        self.log = logger or SilentLogger()

    def submit(self, query: str) -> JobHandle:
        """
        Send the ``bulkOperationRunQuery`` mutation.

        Args:
            query: Final query text, with variables already inlined.

        Returns:
            The handle of the created bulk operation.

        Raises:
            RemoteUserError: Top-level GraphQL errors or mutation user errors.
            RemoteProtocolError: The mutation payload is missing.
            JobCreationFailed: The operation was created in a FAILED state.
            MissingJobHandle: The payload carried no operation id.
        """
        resp = self.client.execute(START_BULK_QUERY, {"query": query})

        if resp.errors:
            self.log.error("Received errors during bulk operation create mutation:")
            for message in resp.error_messages:
                self.log.error(message)
            raise RemoteUserError(resp.error_messages)

        payload = (resp.data or {}).get("bulkOperationRunQuery")
        if not isinstance(payload, dict):
            self.log.error(
                "Missing `data.bulkOperationRunQuery` in bulk operation create response (status=%s): %s",
                resp.status_code,
                resp.data,
            )
            raise RemoteProtocolError("Missing `data.bulkOperationRunQuery` key in response from bulk operation start mutation.")

        user_errors = payload.get("userErrors") or []
        if user_errors:
            messages = [str(e.get("message") or e) for e in user_errors]
            self.log.error("Received user errors during bulk operation create mutation:")
            for error in user_errors:
                self.log.error("%s (field=%s)", error.get("message"), error.get("field"))
            raise RemoteUserError(messages)

        operation = payload.get("bulkOperation") or {}
        status = operation.get("status")
        if status == JobStatus.FAILED.value:
            self.log.error("Bulk operation create mutation returned status %s: %s", status, operation)
            raise JobCreationFailed("Failed to create bulk operation.", status=status)

        operation_id = operation.get("id")
        if not operation_id:
            self.log.error("Bulk operation create mutation is missing an id: %s", operation)
            raise MissingJobHandle("Missing bulk operation id from the returned response.")

        handle = JobHandle(str(operation_id))
        # Logged at INFO so an interrupted export can be resumed with this id
        self.log.info("Created bulk operation %s (status=%s)", handle, status)
        return handle
