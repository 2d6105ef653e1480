from __future__ import annotations

import json
from typing import List, Optional

import requests

from shopify_bulk_export.core.errors import StreamingError
from shopify_bulk_export.core.models import ResultRecord
from shopify_bulk_export.http.client import HttpClient
from shopify_bulk_export.utils.logging import BaseLogger, SilentLogger


class ResultStreamer:
    """Downloads a JSONL result file and decodes it into records."""

    def __init__(self, client: HttpClient, logger: Optional[BaseLogger] = None):
        self.client = client
        self.log = logger or SilentLogger()

    def stream(self, download_url: str) -> List[ResultRecord]:
        """
        Stream ``download_url`` and parse one JSON object per non-blank line.

        Records keep file order. Any failure discards everything read so far.
        """
        records: List[ResultRecord] = []
        try:
            for line_no, line in enumerate(self.client.stream_lines(download_url), start=1):
                # The file ends with a trailing newline
                if not line or not line.strip():
                    continue
                try:
                    records.append(json.loads(line))
                except ValueError as e:
                    raise StreamingError(f"Invalid JSON on line {line_no} of bulk result file: {e}") from e
        except StreamingError:
            self.log.error("Failed to parse JSONL data from %s", download_url)
            raise
        except (requests.RequestException, UnicodeDecodeError) as e:
            self.log.error("Failed to download JSONL data from %s: %s", download_url, e)
            raise StreamingError(f"Failed to download bulk result file: {e}") from e

        self.log.debug("Finished downloading and parsing JSONL file (%s records)", len(records))
        return records
