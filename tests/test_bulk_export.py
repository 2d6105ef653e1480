"""
End-to-end tests for run_bulk_export / resume_bulk_export with a scripted API.
"""

import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from pydantic import BaseModel

from helpers import DOWNLOAD_URL, FakeClient, completed, status_response

from shopify_bulk_export import (
    ExportInput,
    InputValidationError,
    JobFailed,
    StreamingError,
    resume_bulk_export,
    run_bulk_export,
)
from shopify_bulk_export.cache import InMemoryResultCache
from shopify_bulk_export.core.export import cache_request_for
from shopify_bulk_export.core.factory import ComponentFactory
from shopify_bulk_export.core.models import JobErrorCode

PRODUCTS_QUERY = "{ products { edges { node { id } } } }"


def _options(**overrides):
    options = {
        "store": {"name": "shop1", "access_token": "shpat_test"},
        "query": PRODUCTS_QUERY,
        "cache": False,
    }
    options.update(overrides)
    return options


class BulkExportTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.cache_dir = os.path.join(self.tmp_dir, "export-cache")
        self.sleeps = []

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def _factory(self, client, cache=None):
        return ComponentFactory(client=client, cache=cache, sleep=self.sleeps.append)


class TestRunBulkExport(BulkExportTestCase):
    def test_runs_full_pipeline_without_cache(self):
        client = FakeClient(
            statuses=[status_response("RUNNING"), status_response("RUNNING"), completed(2)],
            body='{"id":1}\n{"id":2}\n',
        )

        records = run_bulk_export(_options(), factory=self._factory(client))

        self.assertEqual(records, [{"id": 1}, {"id": 2}])
        self.assertEqual(len(client.submitted), 1)
        self.assertEqual(len(client.polled), 3)
        self.assertEqual(client.streamed, [DOWNLOAD_URL])
        self.assertEqual(self.sleeps, [20.0, 20.0])

    def test_second_identical_run_is_served_from_cache(self):
        first = FakeClient(statuses=[status_response("RUNNING"), completed(2)], body='{"id":1}\n{"id":2}\n')
        records = run_bulk_export(_options(cache=self.cache_dir), factory=self._factory(first))

        second = FakeClient()
        cached = run_bulk_export(_options(cache=self.cache_dir), factory=self._factory(second))

        self.assertEqual(cached, records)
        self.assertEqual(cached, [{"id": 1}, {"id": 2}])
        self.assertEqual(second.network_calls, 0)

    def test_variable_order_hits_the_same_cache_entry(self):
        cache = InMemoryResultCache()
        query = "query Q ($a: String, $b: String) { products (query: $a, savedSearchId: $b) { edges { node { id } } } }"
        first = FakeClient(statuses=[completed(1)], body='{"id":7}\n')
        run_bulk_export(_options(query=query, variables={"a": "1", "b": "2"}), factory=self._factory(first, cache))

        second = FakeClient()
        records = run_bulk_export(
            _options(query=query, variables={"b": "2", "a": "1"}), factory=self._factory(second, cache)
        )

        self.assertEqual(records, [{"id": 7}])
        self.assertEqual(second.network_calls, 0)

    def test_variables_are_inlined_before_submission(self):
        client = FakeClient(statuses=[completed(0)])
        run_bulk_export(
            _options(
                query="query Q ($search: String!) { orders (query: $search) { edges { node { id } } } }",
                variables={"search": "status:open"},
            ),
            factory=self._factory(client),
        )
        submitted = client.submitted[0]["query"]
        self.assertIn('orders(query: "status:open")', submitted)
        self.assertNotIn("$search", submitted)

    def test_job_error_code_rejects(self):
        client = FakeClient(statuses=[status_response("FAILED", error_code="TIMEOUT")])
        with self.assertRaises(JobFailed) as ctx:
            run_bulk_export(_options(), factory=self._factory(client))
        self.assertIn("TIMEOUT", str(ctx.exception))
        self.assertEqual(ctx.exception.error_code, JobErrorCode.TIMEOUT)
        self.assertEqual(client.streamed, [])

    def test_empty_export_is_not_cached(self):
        first = FakeClient(statuses=[completed(0)])
        self.assertEqual(run_bulk_export(_options(cache=self.cache_dir), factory=self._factory(first)), [])
        self.assertEqual(first.streamed, [])

        second = FakeClient(statuses=[completed(0)])
        self.assertEqual(run_bulk_export(_options(cache=self.cache_dir), factory=self._factory(second)), [])
        self.assertEqual(len(second.submitted), 1)
        self.assertEqual(len(second.polled), 1)
        self.assertEqual(os.listdir(self.cache_dir), [])

    def test_streaming_failure_writes_nothing_to_cache(self):
        cache = InMemoryResultCache()
        client = FakeClient(statuses=[completed(2)], body='{"id":1}\nnot json\n')
        with self.assertRaises(StreamingError):
            run_bulk_export(_options(), factory=self._factory(client, cache))
        self.assertEqual(cache.entries, {})

    def test_disabled_cache_never_touches_the_filesystem(self):
        client = FakeClient(statuses=[completed(1)], body='{"id":1}\n')
        with patch("shopify_bulk_export.core.factory.FileResultCache") as file_cache, \
             patch("shopify_bulk_export.core.factory.resolve_cache_dir") as resolve_dir:
            run_bulk_export(_options(cache=False), factory=ComponentFactory(client=client, sleep=self.sleeps.append))
            run_bulk_export(
                _options(cache=False),
                factory=ComponentFactory(client=FakeClient(statuses=[completed(0)]), sleep=self.sleeps.append),
            )
        file_cache.assert_not_called()
        resolve_dir.assert_not_called()

    def test_records_can_be_validated_into_a_model(self):
        class Product(BaseModel):
            id: str
            title: str

        client = FakeClient(statuses=[completed(1)], body='{"id":"gid://shopify/Product/1","title":"Shirt"}\n')
        records = run_bulk_export(_options(record_model=Product), factory=self._factory(client))
        self.assertEqual(records, [Product(id="gid://shopify/Product/1", title="Shirt")])

    def test_report_describes_the_run(self):
        client = FakeClient(statuses=[status_response("RUNNING"), completed(2)], body='{"id":1}\n{"id":2}\n')
        options = ExportInput(**_options())
        built = self._factory(client).build(options)
        built.engine.run(options.query, options.variables, cache_request_for(options))

        report = built.engine.report
        self.assertEqual(report.outcome, "success")
        self.assertEqual(report.status_checks, 2)
        self.assertEqual(report.records, 2)
        self.assertFalse(report.cache_hit)


class TestInputValidation(BulkExportTestCase):
    def test_missing_required_fields_fail_before_any_io(self):
        cases = {
            "store name": _options(store={"access_token": "shpat_test"}),
            "blank store name": _options(store={"name": " ", "access_token": "shpat_test"}),
            "access token": _options(store={"name": "shop1"}),
            "query": {"store": {"name": "shop1", "access_token": "t"}, "cache": False},
            "blank query": _options(query="   "),
            "variables type": _options(variables=["not", "a", "mapping"]),
            "log level": _options(logs="verbose"),
        }
        for label, options in cases.items():
            with self.subTest(label):
                client = FakeClient()
                with patch("shopify_bulk_export.core.factory.FileResultCache") as file_cache:
                    with self.assertRaises(InputValidationError):
                        run_bulk_export(options, factory=self._factory(client))
                file_cache.assert_not_called()
                self.assertEqual(client.network_calls, 0)

    def test_non_mapping_input(self):
        with self.assertRaises(InputValidationError):
            run_bulk_export(None)

    def test_resume_requires_operation_id(self):
        with self.assertRaises(InputValidationError):
            resume_bulk_export(_options(), factory=self._factory(FakeClient()))


class TestResumeBulkExport(BulkExportTestCase):
    def test_resume_polls_the_given_handle_without_submitting(self):
        handle = "gid://shopify/BulkOperation/999"
        client = FakeClient(statuses=[completed(1)], body='{"id":9}\n')

        records = resume_bulk_export(
            {"store": {"name": "shop1", "access_token": "shpat_test"}, "operation_id": handle, "cache": False},
            factory=self._factory(client),
        )

        self.assertEqual(records, [{"id": 9}])
        self.assertEqual(client.submitted, [])
        self.assertEqual(client.polled, [{"id": handle}])

    def test_resume_with_query_fills_the_run_cache_entry(self):
        cache = InMemoryResultCache()
        client = FakeClient(statuses=[completed(1)], body='{"id":9}\n')
        resume_bulk_export(
            _options(operation_id="gid://shopify/BulkOperation/999"), factory=self._factory(client, cache)
        )

        rerun = FakeClient()
        records = run_bulk_export(_options(), factory=self._factory(rerun, cache))

        self.assertEqual(records, [{"id": 9}])
        self.assertEqual(rerun.network_calls, 0)

    def test_resume_empty_result(self):
        client = FakeClient(statuses=[status_response("RUNNING"), completed(0)])
        records = resume_bulk_export(
            _options(operation_id="gid://shopify/BulkOperation/5"), factory=self._factory(client)
        )
        self.assertEqual(records, [])
        self.assertEqual(client.submitted, [])
        self.assertEqual(self.sleeps, [20.0])


if __name__ == "__main__":
    unittest.main()
