"""
Exception taxonomy for bulk exports.

Every failure raised out of ``run_bulk_export`` / ``resume_bulk_export`` is a
``BulkExportError`` subclass, apart from transport faults on the GraphQL
endpoint which propagate from ``requests`` unchanged. An export that finishes
with zero objects is not an error: it returns an empty list.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class BulkExportError(Exception):
    """Base class for all bulk export failures."""


class InputValidationError(BulkExportError, ValueError):
    """Required input is missing or malformed. Raised before any I/O."""


class RemoteUserError(BulkExportError):
    """The platform rejected the request with user-facing GraphQL errors."""

    def __init__(self, messages: Sequence[str]):
        self.messages: List[str] = [m for m in messages if m] or ["Unknown GraphQL error"]
        super().__init__(self.messages[0])


class RemoteProtocolError(BulkExportError):
    """A response did not have the shape this library expects.

    This usually means an API version incompatibility rather than a user error.
    """


class MissingJobHandle(RemoteProtocolError):
    """The submission payload came back without a bulk operation id."""


class JobFailed(BulkExportError):
    """The bulk operation reported a failure status or error code."""

    def __init__(self, message: str, error_code: Optional[str] = None, status: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code
        self.status = status


class JobCreationFailed(JobFailed):
    """The bulk operation was already failed when it was created."""


class StreamingError(BulkExportError):
    """Downloading or decoding the result file failed."""
