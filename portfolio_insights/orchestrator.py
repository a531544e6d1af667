"""Sequence the GitHub calls for one dashboard query and reduce the payloads."""

from __future__ import annotations

import datetime as dt
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence

import structlog

from . import github_api
from .config import QueryConfig
from .errors import InvalidInputError, NotFoundError
from .github_api import GitHubSession
from .metrics import commits_by_day, find_repo, issue_stats, sum_languages, top_repos_by_stars
from .models import QueryResult, Reference, RepoView, UserView

log = structlog.get_logger("portfolio_insights.orchestrator")


def _join(futures: Sequence[Future]) -> List[Any]:
    # Future.result() re-raises the worker's exception; the first failure wins.
    return [future.result() for future in futures]


def _fan_out(pool: ThreadPoolExecutor, calls: Sequence[Callable[[], Any]]) -> List[Any]:
    futures = [pool.submit(call) for call in calls]
    try:
        return _join(futures)
    except BaseException:
        for future in futures:
            future.cancel()
        raise


def commits_since(window_days: int, now: Optional[dt.datetime] = None) -> str:
    now = now or dt.datetime.now(dt.timezone.utc)
    since = now - dt.timedelta(days=window_days)
    return since.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _repo_coordinates(repo: Dict[str, Any], fallback_owner: str) -> tuple[str, str]:
    owner = (repo.get("owner") or {}).get("login") or fallback_owner
    return str(owner), str(repo.get("name", ""))


def _run_user(
    pool: ThreadPoolExecutor,
    session: GitHubSession,
    ref: Reference,
    config: QueryConfig,
) -> QueryResult:
    user, repos = _fan_out(
        pool,
        [
            lambda: github_api.get_user(session, ref.owner),
            lambda: github_api.list_user_repos(session, ref.owner),
        ],
    )
    view = UserView(user=user, repos=repos)

    top = top_repos_by_stars(repos, limit=config.top_repos)
    language_calls = [
        partial(github_api.get_repo_languages, session, *_repo_coordinates(repo, ref.owner))
        for repo in top
    ]
    language_maps = _fan_out(pool, language_calls)
    language_totals = sum_languages(language_maps)

    issue_mix = None
    if top:
        owner, name = _repo_coordinates(top[0], ref.owner)
        issues = github_api.list_repo_issues(
            session, owner, name, state="all", per_page=config.issues_per_page
        )
        issue_mix = issue_stats(issues)

    return QueryResult(view=view, language_totals=language_totals, issue_mix=issue_mix)


def _run_repo(
    pool: ThreadPoolExecutor,
    session: GitHubSession,
    ref: Reference,
    config: QueryConfig,
    now: Optional[dt.datetime],
) -> QueryResult:
    if not ref.repo:
        raise InvalidInputError()
    repos = github_api.list_user_repos(session, ref.owner)
    repo = find_repo(repos, ref.repo)
    if repo is None:
        raise NotFoundError("Repo not found in owner's public repos")

    since = commits_since(config.commit_window_days, now)
    languages, issues, commits = _fan_out(
        pool,
        [
            lambda: github_api.get_repo_languages(session, ref.owner, ref.repo),
            lambda: github_api.list_repo_issues(
                session, ref.owner, ref.repo, state="all", per_page=config.issues_per_page
            ),
            lambda: github_api.list_repo_commits(session, ref.owner, ref.repo, since=since),
        ],
    )
    return QueryResult(
        view=RepoView(repo=repo),
        language_totals=languages,
        commit_series=commits_by_day(commits),
        issue_mix=issue_stats(issues),
    )


def run_query(
    ref: Reference,
    session: GitHubSession,
    config: Optional[QueryConfig] = None,
    *,
    now: Optional[dt.datetime] = None,
) -> QueryResult:
    """Fetch everything a dashboard needs for ``ref``.

    Raises :class:`NotFoundError` when a repository is not among the owner's
    repos and :class:`TransportError` when any single call fails. Nothing is
    returned for a failed query; partial results are dropped.
    """
    config = config or QueryConfig()
    log.info("query.start", kind=ref.kind, target=ref.slug)
    with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
        if ref.kind == "user":
            result = _run_user(pool, session, ref, config)
        else:
            result = _run_repo(pool, session, ref, config, now)
    log.info("query.done", kind=ref.kind, target=ref.slug)
    return result
