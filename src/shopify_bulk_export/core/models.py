from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

DEFAULT_API_VERSION = "2024-07"
DEFAULT_INTERVAL_MS = 20000
PARENT_ID_FIELD = "__parentId"

# One decoded line of the bulk result file. Nested connections come back
# flattened; children point at their parent through PARENT_ID_FIELD.
ResultRecord = Dict[str, Any]


class JobStatus(str, Enum):
    """Status values reported for a bulk operation."""

    CREATED = "CREATED"
    RUNNING = "RUNNING"
    CANCELING = "CANCELING"
    CANCELED = "CANCELED"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"
    FAILED = "FAILED"


class JobErrorCode(str, Enum):
    """Error codes reported for a failed bulk operation."""

    ACCESS_DENIED = "ACCESS_DENIED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    TIMEOUT = "TIMEOUT"


@dataclass(frozen=True)
class StoreConfig:
    """Connection details for one store."""

    name: str
    access_token: str
    api_version: str = DEFAULT_API_VERSION

    @property
    def endpoint(self) -> str:
        return f"https://{self.name}.myshopify.com/admin/api/{self.api_version}/graphql.json"


@dataclass(frozen=True)
class JobHandle:
    """Identifier of a submitted bulk operation, e.g. gid://shopify/BulkOperation/1234."""

    id: str

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True)
class BulkOperation:
    """Snapshot of a bulk operation as returned by one status query."""

    id: str
    status: str
    error_code: Optional[str] = None
    object_count: int = 0
    file_size: Optional[int] = None
    url: Optional[str] = None
    partial_data_url: Optional[str] = None
    created_at: Optional[str] = None
    completed_at: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "BulkOperation":
        # UnsignedInt64 scalars arrive as strings
        file_size = payload.get("fileSize")
        return cls(
            id=str(payload.get("id") or ""),
            status=str(payload.get("status") or ""),
            error_code=payload.get("errorCode") or None,
            object_count=int(payload.get("objectCount") or 0),
            file_size=int(file_size) if file_size not in (None, "") else None,
            url=payload.get("url") or None,
            partial_data_url=payload.get("partialDataUrl") or None,
            created_at=payload.get("createdAt"),
            completed_at=payload.get("completedAt"),
        )


@dataclass(frozen=True)
class Continue:
    """The job has not reached a terminal state yet."""

    operation: BulkOperation


@dataclass(frozen=True)
class Success:
    """The job completed and produced a downloadable result file."""

    download_url: str
    object_count: int
    operation: Optional[BulkOperation] = None


@dataclass(frozen=True)
class EmptyResult:
    """The job completed without exporting any objects."""

    operation: Optional[BulkOperation] = None


@dataclass(frozen=True)
class Fatal:
    """The job, or the response describing it, is in a failure state."""

    error: Exception

    @property
    def reason(self) -> str:
        return str(self.error)


JobOutcome = Union[Continue, Success, EmptyResult, Fatal]


@dataclass(frozen=True)
class CacheRequest:
    """The logical identity of an export, used to derive its cache key."""

    query: Optional[str]
    store_name: str
    api_version: str
    variables: Optional[Dict[str, Any]] = None
    operation_id: Optional[str] = None


@dataclass
class ExportReport:
    """Summary of one export run."""

    cache_hit: bool = False
    operation_id: Optional[str] = None
    status_checks: int = 0
    records: int = 0
    outcome: str = ""
