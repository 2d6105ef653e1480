from shopify_bulk_export.config_models import ExportInput, ResumeInput, StoreInput
from shopify_bulk_export.core.errors import (
    BulkExportError,
    InputValidationError,
    JobCreationFailed,
    JobFailed,
    MissingJobHandle,
    RemoteProtocolError,
    RemoteUserError,
    StreamingError,
)
from shopify_bulk_export.core.export import resume_bulk_export, run_bulk_export
from shopify_bulk_export.core.models import JobHandle, JobStatus, ResultRecord
from shopify_bulk_export.query.formatter import replace_query_variables
from shopify_bulk_export.transform.relations import attach_children, group_by_parent

__all__ = [
    "BulkExportError",
    "ExportInput",
    "InputValidationError",
    "JobCreationFailed",
    "JobFailed",
    "JobHandle",
    "JobStatus",
    "MissingJobHandle",
    "RemoteProtocolError",
    "RemoteUserError",
    "ResultRecord",
    "ResumeInput",
    "StoreInput",
    "StreamingError",
    "attach_children",
    "group_by_parent",
    "replace_query_variables",
    "resume_bulk_export",
    "run_bulk_export",
]
