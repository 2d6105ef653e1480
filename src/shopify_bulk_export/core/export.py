"""
Public entry points.

    records = run_bulk_export({
        "store": {"name": "my-store", "access_token": "shpat_..."},
        "query": "{ products { edges { node { id title } } } }",
        "logs": "info",
    })

If the process dies while waiting, pass the operation id logged at INFO
("Created bulk operation gid://shopify/BulkOperation/...") to
``resume_bulk_export`` instead of submitting the query again.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Union

from shopify_bulk_export.config_models import ExportInput, ResumeInput, parse_input
from shopify_bulk_export.core.factory import ComponentFactory
from shopify_bulk_export.core.models import CacheRequest, JobHandle, ResultRecord
from shopify_bulk_export.query.formatter import query_text


def cache_request_for(options: ExportInput) -> CacheRequest:
    """Identity of an export for the result cache."""
    operation_id = options.operation_id if isinstance(options, ResumeInput) else None
    return CacheRequest(
        query=query_text(options.query) if options.query is not None else None,
        variables=options.variables,
        store_name=options.store.name,
        api_version=options.store.api_version,
        operation_id=operation_id,
    )


def run_bulk_export(
    options: Union[ExportInput, Mapping[str, Any]],
    factory: Optional[ComponentFactory] = None,
) -> List[ResultRecord]:
    """
    Submit a bulk query and return its records once the operation has finished.

    Raises:
        InputValidationError: Before any I/O, when required options are missing.
        RemoteUserError, RemoteProtocolError, JobFailed, StreamingError: see ``core.errors``.
    """
    export_input = parse_input(ExportInput, options)
    built = (factory or ComponentFactory()).build(export_input)
    try:
        return built.engine.run(export_input.query, export_input.variables, cache_request_for(export_input))
    finally:
        built.close()


def resume_bulk_export(
    options: Union[ResumeInput, Mapping[str, Any]],
    factory: Optional[ComponentFactory] = None,
) -> List[ResultRecord]:
    """
    Like ``run_bulk_export``, but waits on an already submitted operation
    (``operation_id``) instead of creating a new one.
    """
    resume_input = parse_input(ResumeInput, options)
    built = (factory or ComponentFactory()).build(resume_input)
    try:
        return built.engine.resume(JobHandle(resume_input.operation_id), cache_request_for(resume_input))
    finally:
        built.close()
