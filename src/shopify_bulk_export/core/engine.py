from __future__ import annotations

from typing import List, Optional, Type

from pydantic import BaseModel

from shopify_bulk_export.cache.base import ResultCache
from shopify_bulk_export.core.models import (
    CacheRequest,
    EmptyResult,
    ExportReport,
    JobHandle,
    ResultRecord,
)
from shopify_bulk_export.query.formatter import QueryInput, replace_query_variables
from shopify_bulk_export.steps.download import ResultStreamer
from shopify_bulk_export.steps.poll import JobPoller
from shopify_bulk_export.steps.submit import JobSubmitter
from shopify_bulk_export.utils.logging import BaseLogger, SilentLogger


class BulkExportEngine:
    """
    Drives a bulk export end to end: cache lookup, submission, polling,
    download and cache store.
    """

    def __init__(
        self,
        cache: ResultCache,
        submitter: JobSubmitter,
        poller: JobPoller,
        streamer: ResultStreamer,
        logger: Optional[BaseLogger] = None,
        record_model: Optional[Type[BaseModel]] = None,
    ):
        """
        Initialize the engine with its collaborators.

        Args:
            cache: Result cache consulted before any network call.
            submitter: Starts the bulk operation.
            poller: Waits for the operation to finish.
            streamer: Downloads and decodes the result file.
            logger: Logger for progress breadcrumbs.
            record_model: Optional pydantic model each record is validated into.
        """
        self.cache = cache
        self.submitter = submitter
        self.poller = poller
        self.streamer = streamer
        self.log = logger or SilentLogger()
        self.record_model = record_model
        self.report = ExportReport()

    def run(self, query: QueryInput, variables: Optional[dict], cache_request: CacheRequest) -> List[ResultRecord]:
        """
        Export the results of ``query``, or return the cached results of an identical export.

        Args:
            query: Query text or parsed document.
            variables: Values inlined into the query before submission.
            cache_request: Identity of this export for the result cache.

        Returns:
            Records in file order; empty when the export matched no objects.
        """
        self.report = ExportReport()
        key = self.cache.key(cache_request)

        cached = self._cached(key)
        if cached is not None:
            return cached

        self.log.debug("Formatting bulk query input")
        formatted_query = replace_query_variables(query, variables, self.log)

        self.log.debug("Starting bulk query mutation")
        handle = self.submitter.submit(formatted_query)

        return self._complete(handle, key)

    def resume(self, handle: JobHandle, cache_request: CacheRequest) -> List[ResultRecord]:
        """
        Finish an export whose bulk operation was already submitted.

        Never submits a new operation; polling starts at ``handle`` directly.
        """
        self.report = ExportReport()
        key = self.cache.key(cache_request)

        cached = self._cached(key)
        if cached is not None:
            return cached

        self.log.info("Resuming export for bulk operation %s", handle)
        return self._complete(handle, key)

    def _cached(self, key: str) -> Optional[List[ResultRecord]]:
        cached = self.cache.get(key)
        if cached is None:
            return None

        self.log.debug("We have a cached result for key %s, returning", key)
        self.report.cache_hit = True
        self.report.outcome = "cached"
        self.report.records = len(cached)
        return self._typed(cached)

    def _complete(self, handle: JobHandle, key: str) -> List[ResultRecord]:
        self.report.operation_id = handle.id

        self.log.debug("Waiting for bulk query to finish")
        start_ticks = self.poller.ticks
        try:
            outcome = self.poller.wait(handle)
        finally:
            self.report.status_checks = self.poller.ticks - start_ticks

        if isinstance(outcome, EmptyResult):
            # Not cached: an identical export later on runs against the API again
            self.log.debug("Bulk operation %s finished with no objects, returning empty list", handle)
            self.report.outcome = "empty"
            return []

        self.log.debug("Downloading and parsing bulk query data")
        records = self.streamer.stream(outcome.download_url)

        self.log.debug("Finished downloading, adding to cache")
        self.cache.put(key, records)

        self.report.outcome = "success"
        self.report.records = len(records)
        self.log.debug("Finished, with %s nodes", len(records))
        return self._typed(records)

    def _typed(self, records: List[ResultRecord]) -> list:
        if self.record_model is None:
            return records
        return [self.record_model.model_validate(r) for r in records]
