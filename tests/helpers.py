"""Scripted stand-ins for the Admin API used across the test suite."""

from typing import Any, Dict, Iterable, List, Optional

from shopify_bulk_export.http.response import GraphQLResponse
from shopify_bulk_export.query.documents import BULK_STATUS_QUERY, START_BULK_QUERY

OPERATION_ID = "gid://shopify/BulkOperation/1234"
DOWNLOAD_URL = "https://storage.example.com/bulk-1234.jsonl"


def submit_response(
    operation_id: Optional[str] = OPERATION_ID,
    status: str = "CREATED",
    user_errors: Iterable[Dict[str, Any]] = (),
) -> GraphQLResponse:
    operation = {"id": operation_id, "status": status} if operation_id or status else None
    return GraphQLResponse(
        status_code=200,
        data={"bulkOperationRunQuery": {"bulkOperation": operation, "userErrors": list(user_errors)}},
    )


def status_response(
    status: str = "RUNNING",
    object_count: Any = "0",
    url: Optional[str] = None,
    error_code: Optional[str] = None,
    typename: str = "BulkOperation",
) -> GraphQLResponse:
    return GraphQLResponse(
        status_code=200,
        data={
            "bulk": {
                "__typename": typename,
                "id": OPERATION_ID,
                "status": status,
                "errorCode": error_code,
                "createdAt": "2024-07-01T00:00:00Z",
                "completedAt": None,
                "objectCount": object_count,
                "fileSize": None,
                "url": url,
                "partialDataUrl": None,
            }
        },
    )


def completed(object_count: int, url: str = DOWNLOAD_URL) -> GraphQLResponse:
    return status_response("COMPLETED", object_count=str(object_count), url=url if object_count else None)


def errors_response(*messages: str) -> GraphQLResponse:
    return GraphQLResponse(status_code=200, data=None, errors=[{"message": m} for m in messages])


class FakeClient:
    """Answers the submit mutation and status query from scripts and records every call."""

    def __init__(
        self,
        submit: Optional[GraphQLResponse] = None,
        statuses: Iterable[GraphQLResponse] = (),
        body: str = "",
        stream_error: Optional[Exception] = None,
    ):
        self.submit = submit or submit_response()
        self.statuses: List[GraphQLResponse] = list(statuses)
        self.body = body
        self.stream_error = stream_error
        self.submitted: List[Dict[str, Any]] = []
        self.polled: List[Dict[str, Any]] = []
        self.streamed: List[str] = []

    @property
    def network_calls(self) -> int:
        return len(self.submitted) + len(self.polled) + len(self.streamed)

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> GraphQLResponse:
        if query == START_BULK_QUERY:
            self.submitted.append(variables or {})
            return self.submit
        if query == BULK_STATUS_QUERY:
            self.polled.append(variables or {})
            if not self.statuses:
                raise AssertionError("status query issued after the script ran out")
            return self.statuses.pop(0)
        raise AssertionError(f"unexpected query: {query}")

    def stream_lines(self, url: str):
        self.streamed.append(url)
        if self.stream_error is not None:
            raise self.stream_error
        for line in self.body.split("\n"):
            yield line
