from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from portfolio_insights.config import AppConfig, load_config


class ConfigTests(unittest.TestCase):
    def test_load_default_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = load_config(Path(tmp) / "missing.yaml")
        self.assertIsInstance(config, AppConfig)
        self.assertEqual(config.github.api_root, "https://api.github.com")
        self.assertEqual(config.github.retry_attempts, 1)
        self.assertEqual(config.query.top_repos, 6)
        self.assertEqual(config.query.commit_window_days, 90)
        self.assertEqual(config.query.issues_per_page, 100)
        self.assertEqual(config.output.format, "markdown")

    def test_load_custom_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_file = Path(tmp) / "settings.yaml"
            config_file.write_text(
                """
                github:
                  api_root: https://github.example.com/api/v3/
                  token_env: GHE_TOKEN
                  timeout: 5
                query:
                  top_repos: 3
                  commit_window_days: 30
                  issues_per_page: 250
                server:
                  port: 8080
                output:
                  directory: custom_reports
                  format: json
                logging:
                  level: debug
                  format: JSON
                """,
                encoding="utf-8",
            )

            config = load_config(config_file)

        self.assertEqual(config.github.api_root, "https://github.example.com/api/v3")
        self.assertEqual(config.github.token_env, "GHE_TOKEN")
        self.assertEqual(config.github.timeout, 5.0)
        self.assertEqual(config.query.top_repos, 3)
        self.assertEqual(config.query.commit_window_days, 30)
        self.assertEqual(config.query.issues_per_page, 100)
        self.assertEqual(config.server.port, 8080)
        self.assertEqual(config.output.directory, Path("custom_reports"))
        self.assertEqual(config.output.format, "json")
        self.assertEqual(config.logging.level, "DEBUG")
        self.assertEqual(config.logging.format, "json")

    def test_empty_file_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_file = Path(tmp) / "settings.yaml"
            config_file.write_text("", encoding="utf-8")
            config = load_config(config_file)
        self.assertEqual(config, AppConfig())


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
