"""
Bulk operation status polling.

``classify_status`` turns one status response into exactly one outcome:

    top-level errors                      -> Fatal(RemoteUserError)
    payload missing / not a BulkOperation -> Fatal(RemoteProtocolError)
    error code set, or status FAILED      -> Fatal(JobFailed)
    COMPLETED with objectCount == 0       -> EmptyResult
    COMPLETED with objectCount > 0        -> Success
    anything else                         -> Continue

``JobPoller.wait`` drives that function until a terminal outcome. There is no
attempt limit or deadline; callers that need one must impose it around the
whole export.
"""

from __future__ import annotations

from typing import Optional, Union

from shopify_bulk_export.core.errors import JobFailed, RemoteProtocolError, RemoteUserError
from shopify_bulk_export.core.models import (
    BulkOperation,
    Continue,
    EmptyResult,
    Fatal,
    JobHandle,
    JobOutcome,
    JobStatus,
    Success,
)
from shopify_bulk_export.http.client import HttpClient
from shopify_bulk_export.http.policies import PollInterval
from shopify_bulk_export.http.response import GraphQLResponse
from shopify_bulk_export.query.documents import BULK_OPERATION_TYPENAME, BULK_STATUS_QUERY
from shopify_bulk_export.utils.logging import BaseLogger, SilentLogger


def classify_status(resp: GraphQLResponse) -> JobOutcome:
    """Classify a single bulk status response."""
    if resp.errors:
        return Fatal(RemoteUserError(resp.error_messages))

    bulk = (resp.data or {}).get("bulk")
    if not isinstance(bulk, dict):
        return Fatal(RemoteProtocolError("Missing `data.bulk` key in response from bulk operation status query."))

    typename = bulk.get("__typename")
    if typename != BULK_OPERATION_TYPENAME:
        return Fatal(
            RemoteProtocolError(
                f"Bulk operation status query returned a {typename!r} node, "
                f"expected {BULK_OPERATION_TYPENAME!r}."
            )
        )

    try:
        operation = BulkOperation.from_payload(bulk)
    except (TypeError, ValueError) as e:
        return Fatal(RemoteProtocolError(f"Malformed bulk operation payload: {e}"))

    if operation.error_code:
        return Fatal(
            JobFailed(
                f"Bulk operation failed, with an error code of {operation.error_code}",
                error_code=operation.error_code,
                status=operation.status,
            )
        )

    if operation.status == JobStatus.FAILED.value:
        return Fatal(JobFailed("Bulk operation failed without an error code.", status=operation.status))

    if operation.status == JobStatus.COMPLETED.value:
        if operation.object_count == 0:
            return EmptyResult(operation=operation)
        if not operation.url:
            return Fatal(
                RemoteProtocolError(
                    f"Bulk operation completed with {operation.object_count} objects but no download url."
                )
            )
        return Success(download_url=operation.url, object_count=operation.object_count, operation=operation)

    return Continue(operation=operation)


class JobPoller:
    """Polls one bulk operation at a fixed interval until it is terminal."""

    def __init__(self, client: HttpClient, interval: PollInterval, logger: Optional[BaseLogger] = None):
        self.client = client
        self.interval = interval
        self.log = logger or SilentLogger()
        self.ticks = 0

    def poll_once(self, handle: JobHandle) -> JobOutcome:
        """Issue one status query and classify it."""
        self.ticks += 1
        self.log.debug("Checking bulk query status of operation %s", handle)
        resp = self.client.execute(BULK_STATUS_QUERY, {"id": handle.id})
        return classify_status(resp)

    def wait(self, handle: JobHandle) -> Union[Success, EmptyResult]:
        """
        Block until the operation reaches a terminal state.

        Returns:
            ``Success`` with the download url, or ``EmptyResult``.

        Raises:
            RemoteUserError, RemoteProtocolError, JobFailed: from a ``Fatal`` outcome.
        """
        while True:
            outcome = self.poll_once(handle)

            if isinstance(outcome, Fatal):
                self.log.error("Bulk operation %s failed: %s", handle, outcome.reason)
                raise outcome.error

            if isinstance(outcome, EmptyResult):
                self.log.info("No objects exist in this export - check your input query if this was not expected.")
                return outcome

            if isinstance(outcome, Success):
                self.log.debug(
                    "Bulk operation %s completed with %s objects: %s",
                    handle,
                    outcome.object_count,
                    outcome.download_url,
                )
                return outcome

            self.log.debug(
                "Bulk query hasn't finished yet, waiting %sms. Last status: %s, with object count of %s",
                self.interval.interval_ms,
                outcome.operation.status,
                outcome.operation.object_count,
            )
            self.interval.sleep()
