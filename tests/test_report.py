from __future__ import annotations

import json
import tempfile
import unittest
from datetime import date
from pathlib import Path

from portfolio_insights.config import AppConfig
from portfolio_insights.models import CommitSeries, IssueMix, QueryResult, Reference, RepoView, UserView
from portfolio_insights.report import render_markdown, write_report


class ReportTests(unittest.TestCase):
    def setUp(self) -> None:
        self.reference = Reference.for_repo("octocat", "hello-world")
        self.result = QueryResult(
            view=RepoView(
                repo={
                    "full_name": "octocat/Hello-World",
                    "description": "My first repository",
                    "html_url": "https://github.com/octocat/Hello-World",
                    "stargazers_count": 12,
                    "pushed_at": "2024-02-03T04:05:06Z",
                }
            ),
            language_totals={"C": 75, "Shell": 25},
            commit_series=CommitSeries(points=(("2024-02-01", 3),)),
            issue_mix=IssueMix(open_issues=2, closed_prs=1),
        )

    def test_markdown_sections(self) -> None:
        text = render_markdown(self.reference, self.result, AppConfig(), date(2024, 2, 4))
        self.assertIn("# Portfolio Insights: octocat/Hello-World", text)
        self.assertIn("Generated on: 2024-02-04", text)
        self.assertIn("| Stars | 12 |", text)
        self.assertIn("| Last Push | 2024-02-03 |", text)
        self.assertIn("- C: 75.0% (75 bytes)", text)
        self.assertIn("| 2024-02-01 | 3 |", text)
        self.assertIn("- Closed PRs: 1", text)

    def test_user_markdown_without_commits(self) -> None:
        result = QueryResult(view=UserView(user={"login": "octocat"}), language_totals={})
        text = render_markdown(Reference.user("octocat"), result, AppConfig(), date(2024, 1, 1))
        self.assertIn("# Portfolio Insights: @octocat", text)
        self.assertIn("No language data.", text)
        self.assertIn("Commit history is only collected for a single repository.", text)
        self.assertIn("No issues/PRs.", text)

    def test_write_markdown_report(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = AppConfig()
            config.output.directory = Path(tmp) / "out"
            path = write_report(self.reference, self.result, config)
            self.assertEqual(path.name, "octocat-hello-world-insights.md")
            self.assertTrue(path.read_text(encoding="utf-8").startswith("# Portfolio Insights"))

    def test_write_json_report(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = AppConfig()
            config.output.directory = Path(tmp)
            config.output.format = "json"
            path = write_report(self.reference, self.result, config)
            payload = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(path.suffix, ".json")
        self.assertEqual(payload["charts"]["languages"]["labels"], ["C", "Shell"])
        self.assertEqual(payload["kpis"][0], {"label": "Stars", "value": 12})


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
