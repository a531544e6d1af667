from __future__ import annotations

import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import mock

from portfolio_insights import cli
from portfolio_insights.errors import NotFoundError
from portfolio_insights.models import QueryResult, Reference, UserView


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch.object(cli, "setup_logging")
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_query_writes_report(self) -> None:
        result = QueryResult(view=UserView(user={"login": "octocat"}), language_totals={"C": 1})
        with tempfile.TemporaryDirectory() as tmp, mock.patch.object(cli, "run_query", return_value=result) as run:
            stdout = io.StringIO()
            with redirect_stdout(stdout):
                cli.app(["--config", str(Path(tmp) / "none.yaml"), "query", "https://github.com/octocat", "--output-dir", tmp])
            self.assertTrue((Path(tmp) / "octocat-insights.md").exists())
        self.assertEqual(run.call_args.args[0], Reference.user("octocat"))
        self.assertIn("Report generated", stdout.getvalue())

    def test_invalid_url_exits_with_usage_error(self) -> None:
        with mock.patch.object(cli, "run_query") as run, redirect_stderr(io.StringIO()) as stderr:
            with self.assertRaises(SystemExit) as ctx:
                cli.app(["query", "https://github.com/"])
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("Paste a valid GitHub profile or repo URL", stderr.getvalue())
        run.assert_not_called()

    def test_query_error_is_reported(self) -> None:
        missing = NotFoundError("Repo not found in owner's public repos")
        with mock.patch.object(cli, "run_query", side_effect=missing), redirect_stderr(io.StringIO()) as stderr:
            with self.assertRaises(SystemExit):
                cli.app(["query", "octocat/missing"])
        self.assertIn("Repo not found", stderr.getvalue())

    def test_serve_uses_overrides(self) -> None:
        fake_app = mock.MagicMock()
        with mock.patch("portfolio_insights.server.create_app", return_value=fake_app):
            cli.app(["serve", "--host", "0.0.0.0", "--port", "8080"])
        fake_app.run.assert_called_once_with(host="0.0.0.0", port=8080, debug=False)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
