"""Pure reductions over GitHub JSON payloads."""

from __future__ import annotations

import datetime as dt
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .models import CommitSeries, IssueMix, LanguageTotals


def sum_languages(language_maps: Iterable[Mapping[str, int]]) -> LanguageTotals:
    totals: LanguageTotals = {}
    for language_map in language_maps:
        for language, byte_count in language_map.items():
            totals[language] = totals.get(language, 0) + byte_count
    return totals


def parse_timestamp(value: Optional[str]) -> Optional[dt.datetime]:
    """Parse a GitHub ISO-8601 timestamp into an aware UTC datetime."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc)


def _commit_day(record: Mapping[str, Any]) -> Optional[str]:
    commit = record.get("commit") or {}
    author = commit.get("author") or {}
    timestamp = parse_timestamp(author.get("date"))
    if timestamp is None:
        return None
    return timestamp.date().isoformat()


def commits_by_day(commits: Iterable[Mapping[str, Any]]) -> CommitSeries:
    """Bucket commits by the UTC day of their author date.

    Records without a parseable author date are skipped. ISO day strings sort
    chronologically, so the series is ordered by plain string comparison.
    """
    per_day: Counter[str] = Counter()
    for record in commits:
        day = _commit_day(record)
        if day is not None:
            per_day[day] += 1
    return CommitSeries(points=tuple(sorted(per_day.items())))


def issue_stats(items: Iterable[Mapping[str, Any]]) -> IssueMix:
    """Tally issues and pull requests by open/closed state.

    The issues endpoint returns both kinds; pull requests carry a
    ``pull_request`` marker. Anything whose state is not ``"closed"`` counts
    as open, including items with no state at all.
    """
    open_issues = closed_issues = open_prs = closed_prs = 0
    for item in items:
        # Any marker object counts, even an empty one.
        is_pr = item.get("pull_request") not in (None, False, 0, "")
        closed = item.get("state") == "closed"
        if is_pr:
            if closed:
                closed_prs += 1
            else:
                open_prs += 1
        elif closed:
            closed_issues += 1
        else:
            open_issues += 1
    return IssueMix(
        open_issues=open_issues,
        closed_issues=closed_issues,
        open_prs=open_prs,
        closed_prs=closed_prs,
    )


def as_count(value: Any) -> int:
    """Numeric counter field, or 0 when GitHub sent something else."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


def top_repos_by_stars(repos: Iterable[Dict[str, Any]], limit: int = 6) -> List[Dict[str, Any]]:
    # sorted() is stable: equally starred repos keep their listing order.
    ranked = sorted(repos, key=lambda repo: as_count(repo.get("stargazers_count")), reverse=True)
    return ranked[:limit]


def find_repo(repos: Iterable[Dict[str, Any]], name: str) -> Optional[Dict[str, Any]]:
    wanted = name.lower()
    for repo in repos:
        if str(repo.get("name", "")).lower() == wanted:
            return repo
    return None
