import json
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from shopify_bulk_export import main as cli
from shopify_bulk_export.config_models import ExportJobConfig
from shopify_bulk_export.core.errors import JobFailed


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.output = self.tmp_dir / "out" / "records.jsonl"

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def _config(self, **overrides):
        fields = {
            "store": {"name": "shop1", "access_token": "t"},
            "query": "{ products { edges { node { id } } } }",
            "cache": False,
            "output": {"path": str(self.output)},
        }
        fields.update(overrides)
        return ExportJobConfig(**fields)

    @patch("shopify_bulk_export.main.run_bulk_export")
    def test_run_one_writes_jsonl(self, run_export):
        run_export.return_value = [{"id": 1}, {"id": "gid://shopify/ProductVariant/2", "__parentId": "p"}]

        count = cli.run_one(self._config(), str(self.tmp_dir / "job.yaml"))

        self.assertEqual(count, 2)
        lines = self.output.read_text(encoding="utf-8").splitlines()
        self.assertEqual([json.loads(line) for line in lines], run_export.return_value)

    @patch("shopify_bulk_export.main.run_bulk_export")
    @patch("shopify_bulk_export.main.resume_bulk_export")
    def test_run_one_resumes_when_configured(self, resume_export, run_export):
        resume_export.return_value = []

        cli.run_one(self._config(query=None, resume="gid://shopify/BulkOperation/9"), "job.yaml")

        run_export.assert_not_called()
        options = resume_export.call_args.args[0]
        self.assertEqual(options.operation_id, "gid://shopify/BulkOperation/9")
        self.assertEqual(self.output.read_text(encoding="utf-8"), "")

    def test_main_requires_a_job_path(self):
        with patch.object(sys, "argv", ["bulk-export"]):
            with self.assertRaises(SystemExit) as ctx:
                cli.main()
        self.assertEqual(ctx.exception.code, 2)

    @patch("shopify_bulk_export.main.setup_logging")
    @patch("shopify_bulk_export.main.run_one")
    def test_main_exits_non_zero_on_export_failure(self, run_one, _setup_logging):
        job = self.tmp_dir / "job.yaml"
        job.write_text("store:\n  name: s\n  access_token: t\nquery: '{ a }'\n", encoding="utf-8")
        run_one.side_effect = JobFailed("Bulk operation failed, with an error code of TIMEOUT", error_code="TIMEOUT")

        with patch.object(sys, "argv", ["bulk-export", str(job)]):
            with self.assertRaises(SystemExit) as ctx:
                cli.main()
        self.assertEqual(ctx.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
