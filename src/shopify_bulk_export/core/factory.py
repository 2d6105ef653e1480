from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from shopify_bulk_export.cache.base import DisabledResultCache, ResultCache
from shopify_bulk_export.cache.file_store import FileResultCache, resolve_cache_dir
from shopify_bulk_export.config_models import ExportInput
from shopify_bulk_export.core.engine import BulkExportEngine
from shopify_bulk_export.http.client import HttpClient, RequestsGraphQLClient
from shopify_bulk_export.http.policies import PollInterval, Sleep
from shopify_bulk_export.steps.download import ResultStreamer
from shopify_bulk_export.steps.poll import JobPoller
from shopify_bulk_export.steps.submit import JobSubmitter
from shopify_bulk_export.utils.logging import BaseLogger, build_logger


@dataclass(frozen=True)
class BuiltComponents:
    engine: BulkExportEngine
    client: HttpClient
    cache: ResultCache
    logger: BaseLogger
    owns_client: bool

    def close(self) -> None:
        """Release the HTTP session if this build created it."""
        if self.owns_client and hasattr(self.client, "close"):
            self.client.close()


class ComponentFactory:
    """
    Factory responsible for wiring one export.

    ``client``, ``cache`` and ``sleep`` can be injected, which is how tests
    run the whole pipeline without network, filesystem or real delays.
    """

    def __init__(
        self,
        http_timeout_s: int = 30,
        sleep: Sleep = time.sleep,
        client: Optional[HttpClient] = None,
        cache: Optional[ResultCache] = None,
    ):
        self.http_timeout_s = http_timeout_s
        self.sleep = sleep
        self.client = client
        self.cache = cache

    def build(self, options: ExportInput) -> BuiltComponents:
        """Build the engine and its collaborators for validated ``options``."""
        logger = build_logger(options.logs)

        logger.debug("Initiating cache")
        cache = self._cache(options, logger)

        client = self.client or self._http_client(options, logger)
        interval = PollInterval(options.interval, sleep=self.sleep)

        engine = BulkExportEngine(
            cache=cache,
            submitter=JobSubmitter(client, logger),
            poller=JobPoller(client, interval, logger),
            streamer=ResultStreamer(client, logger),
            logger=logger,
            record_model=options.record_model,
        )

        return BuiltComponents(
            engine=engine,
            client=client,
            cache=cache,
            logger=logger,
            owns_client=self.client is None,
        )

    # ---------- Builders (private) ----------

    def _cache(self, options: ExportInput, logger: BaseLogger) -> ResultCache:
        """Create the result cache selected by the ``cache`` option."""
        if self.cache is not None:
            return self.cache

        if options.cache is False:
            logger.debug("Cache is disabled")
            return DisabledResultCache()

        custom_dir = options.cache if isinstance(options.cache, str) else None
        return FileResultCache(resolve_cache_dir(custom_dir), logger)

    def _http_client(self, options: ExportInput, logger: BaseLogger) -> RequestsGraphQLClient:
        """Create the HTTP client."""
        logger.debug("Creating client with name %s", options.store.name)
        return RequestsGraphQLClient(options.store.to_config(), timeout_s=self.http_timeout_s)
