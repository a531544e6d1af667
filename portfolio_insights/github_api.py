from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests
import structlog
from requests import Response
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import GitHubConfig
from .errors import TransportError

log = structlog.get_logger("portfolio_insights.github")


@dataclass(slots=True)
class GitHubSession:
    http: requests.Session
    config: GitHubConfig = field(default_factory=GitHubConfig)

    @classmethod
    def create(cls, config: Optional[GitHubConfig] = None) -> "GitHubSession":
        config = config or GitHubConfig()
        session = requests.Session()
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": config.user_agent,
        }
        token = os.getenv(config.token_env)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        session.headers.update(headers)
        return cls(http=session, config=config)

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "GitHubSession":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def _error_message(response: Response) -> str:
    if response.headers.get("Content-Type", "").startswith("application/json"):
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    return response.text[:200] or response.reason or ""


def _raise_for_status(response: Response) -> None:
    try:
        response.raise_for_status()
    except requests.HTTPError as error:
        message = _error_message(response)
        raise TransportError(
            f"GitHub API request failed: {response.status_code} {message}".rstrip(),
            status_code=response.status_code,
        ) from error


def _send(session: GitHubSession, url: str, params: Optional[Dict[str, str]]) -> Response:
    retrying = Retrying(
        stop=stop_after_attempt(session.config.retry_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(requests.RequestException),
        reraise=True,
    )
    for attempt in retrying:
        with attempt:
            return session.http.get(url, params=params, timeout=session.config.timeout)
    raise AssertionError("unreachable")  # pragma: no cover


def _get_json(session: GitHubSession, path: str, params: Optional[Dict[str, str]] = None) -> Any:
    url = f"{session.config.api_root}{path}"
    log.debug("github.request", path=path, params=params)
    try:
        response = _send(session, url, params)
    except requests.RequestException as error:
        log.warning("github.transport_error", path=path, error=str(error))
        raise TransportError(f"GitHub API request failed: {error}") from error
    _raise_for_status(response)
    try:
        return response.json()
    except ValueError as error:
        raise TransportError(f"GitHub API returned invalid JSON for {path}") from error


def _as_list(body: Any) -> List[Dict[str, Any]]:
    if not isinstance(body, list):
        return []
    return [item for item in body if isinstance(item, dict)]


def get_user(session: GitHubSession, username: str) -> Dict[str, Any]:
    body = _get_json(session, f"/users/{username}")
    return body if isinstance(body, dict) else {}


def list_user_repos(session: GitHubSession, username: str, per_page: int = 100) -> List[Dict[str, Any]]:
    # Single page only; owners with more repositories are truncated.
    body = _get_json(session, f"/users/{username}/repos", params={"per_page": str(per_page)})
    return _as_list(body)


def get_repo_languages(session: GitHubSession, owner: str, repo: str) -> Dict[str, int]:
    body = _get_json(session, f"/repos/{owner}/{repo}/languages")
    if not isinstance(body, dict):
        return {}
    languages: Dict[str, int] = {}
    for language, bytes_count in body.items():
        try:
            languages[str(language)] = int(bytes_count)
        except (TypeError, ValueError):
            continue
    return languages


def list_repo_issues(
    session: GitHubSession,
    owner: str,
    repo: str,
    state: str = "all",
    per_page: int = 100,
) -> List[Dict[str, Any]]:
    params = {"state": state, "per_page": str(min(per_page, 100))}
    return _as_list(_get_json(session, f"/repos/{owner}/{repo}/issues", params=params))


def list_repo_commits(session: GitHubSession, owner: str, repo: str, since: str) -> List[Dict[str, Any]]:
    return _as_list(_get_json(session, f"/repos/{owner}/{repo}/commits", params={"since": since}))
