from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


@dataclass(slots=True)
class GitHubConfig:
    api_root: str = "https://api.github.com"
    token_env: str = "GITHUB_TOKEN"
    timeout: float = 30.0
    retry_attempts: int = 1
    user_agent: str = "portfolio-insights/0.1"


@dataclass(slots=True)
class QueryConfig:
    top_repos: int = 6
    commit_window_days: int = 90
    issues_per_page: int = 100
    max_workers: int = 6


@dataclass(slots=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 5000
    debug: bool = False


@dataclass(slots=True)
class OutputConfig:
    directory: Path = Path("reports")
    format: str = "markdown"


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    format: str = "console"


@dataclass(slots=True)
class AppConfig:
    github: GitHubConfig = field(default_factory=GitHubConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Optional[Path] = None) -> AppConfig:
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        return AppConfig()

    with config_path.open("r", encoding="utf-8") as handle:
        raw: Dict[str, Any] = yaml.safe_load(handle) or {}

    github_raw = raw.get("github", {})
    query_raw = raw.get("query", {})
    server_raw = raw.get("server", {})
    output_raw = raw.get("output", {})
    logging_raw = raw.get("logging", {})

    config = AppConfig(
        github=GitHubConfig(
            api_root=str(github_raw.get("api_root", "https://api.github.com")).rstrip("/"),
            token_env=str(github_raw.get("token_env", "GITHUB_TOKEN")),
            timeout=float(github_raw.get("timeout", 30.0)),
            retry_attempts=max(1, int(github_raw.get("retry_attempts", 1))),
            user_agent=str(github_raw.get("user_agent", "portfolio-insights/0.1")),
        ),
        query=QueryConfig(
            top_repos=int(query_raw.get("top_repos", 6)),
            commit_window_days=int(query_raw.get("commit_window_days", 90)),
            issues_per_page=min(100, int(query_raw.get("issues_per_page", 100))),
            max_workers=max(1, int(query_raw.get("max_workers", 6))),
        ),
        server=ServerConfig(
            host=str(server_raw.get("host", "127.0.0.1")),
            port=int(server_raw.get("port", 5000)),
            debug=bool(server_raw.get("debug", False)),
        ),
        output=OutputConfig(
            directory=Path(output_raw.get("directory", "reports")),
            format=str(output_raw.get("format", "markdown")),
        ),
        logging=LoggingConfig(
            level=str(logging_raw.get("level", "INFO")).upper(),
            format=str(logging_raw.get("format", "console")).lower(),
        ),
    )

    return config
