"""Flask backend: GitHub proxy endpoints plus the aggregated dashboard query."""

from __future__ import annotations

import os
from typing import Any, Callable, Optional

import structlog
from flask import Flask, jsonify, request

from . import github_api
from .config import AppConfig
from .errors import InsightsError, InvalidInputError, NotFoundError, TransportError
from .github_api import GitHubSession
from .session import ERROR, DashboardSession

log = structlog.get_logger("portfolio_insights.server")

_STATUS_BY_ERROR = (
    (InvalidInputError, 400),
    (NotFoundError, 404),
    (TransportError, 502),
)

_INDEX_PAGE = """
<!doctype html>
<html>
<head><meta charset="utf-8"><title>Portfolio Insights</title></head>
<body style="font-family: system-ui, -apple-system, Segoe UI, Roboto, sans-serif; padding: 24px;">
  <h2>Portfolio Insights API is running</h2>
  <p>Try: <code>/api/insights?url=https://github.com/octocat</code></p>
</body>
</html>
"""


def _status_for(error: Optional[Exception]) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


def create_app(config: Optional[AppConfig] = None, session: Optional[DashboardSession] = None) -> Flask:
    config = config or AppConfig()
    dashboard = session or DashboardSession.from_config(config)

    app = Flask(__name__)
    app.config["INSIGHTS"] = config

    def proxy(fetch: Callable[[GitHubSession], Any]):
        with GitHubSession.create(config.github) as github:
            return jsonify(fetch(github))

    @app.errorhandler(InsightsError)
    def handle_insights_error(error: InsightsError):
        status = _status_for(error)
        log.warning("api.error", path=request.path, status=status, error=str(error))
        return jsonify({"error": str(error)}), status

    @app.route("/", methods=["GET"])
    def home():
        return _INDEX_PAGE, 200, {"Content-Type": "text/html; charset=utf-8"}

    @app.route("/api/user/<owner>", methods=["GET"])
    def api_user(owner: str):
        return proxy(lambda github: github_api.get_user(github, owner))

    @app.route("/api/repos/<owner>", methods=["GET"])
    def api_repos(owner: str):
        return proxy(lambda github: github_api.list_user_repos(github, owner))

    @app.route("/api/repo/<owner>/<repo>/languages", methods=["GET"])
    def api_languages(owner: str, repo: str):
        return proxy(lambda github: github_api.get_repo_languages(github, owner, repo))

    @app.route("/api/repo/<owner>/<repo>/issues", methods=["GET"])
    def api_issues(owner: str, repo: str):
        state = request.args.get("state", "all")
        per_page = request.args.get("per_page", default=config.query.issues_per_page, type=int)
        return proxy(
            lambda github: github_api.list_repo_issues(github, owner, repo, state=state, per_page=per_page)
        )

    @app.route("/api/repo/<owner>/<repo>/commits", methods=["GET"])
    def api_commits(owner: str, repo: str):
        since = request.args.get("since")
        if not since:
            return jsonify({"error": "Missing 'since'."}), 400
        return proxy(lambda github: github_api.list_repo_commits(github, owner, repo, since=since))

    @app.route("/api/insights", methods=["GET", "POST"])
    def api_insights():
        state = dashboard.run(_get_url_from_request())
        if state.status == ERROR:
            return jsonify({"error": state.error}), _status_for(state.failure)
        return jsonify({"sequence": state.sequence, **(state.dashboard or {})})

    @app.route("/healthz", methods=["GET"])
    def healthz():
        return jsonify({"ok": True, "token_configured": bool(os.getenv(config.github.token_env))})

    return app


def _get_url_from_request() -> str:
    if request.method == "GET":
        return request.args.get("url") or ""
    if request.is_json:
        payload = request.get_json(silent=True) or {}
        return str(payload.get("url") or "")
    return request.form.get("url") or ""
