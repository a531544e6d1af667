"""Chart-ready payloads and KPI tiles for the dashboard front end.

The dictionaries mirror the ``data`` objects expected by chart.js
(``labels`` plus a list of ``datasets``), so the browser can hand them to
Doughnut, Line and Bar charts unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .metrics import as_count, parse_timestamp
from .models import CommitSeries, IssueMix, Kpi, LanguageTotals, QueryResult, RepoView, View

PALETTE = (
    "#6366F1",
    "#10B981",
    "#F59E0B",
    "#F43F5E",
    "#06B6D4",
    "#A78BFA",
    "#22C55E",
    "#3B82F6",
    "#E11D48",
    "#14B8A6",
)
ISSUE_MIX_LABELS = ("Open Issues", "Closed Issues", "Open PRs", "Closed PRs")
ISSUE_MIX_COLORS = ("#F59E0B", "#10B981", "#3B82F6", "#EF4444")
COMMIT_LINE_COLOR = "#6366F1"
PLACEHOLDER = "—"


def color_at(index: int) -> str:
    return PALETTE[index % len(PALETTE)]


def colors_for(count: int) -> List[str]:
    return [color_at(index) for index in range(count)]


def with_alpha(hex_color: str, alpha: float) -> str:
    digits = hex_color.lstrip("#")
    red, green, blue = (int(digits[offset : offset + 2], 16) for offset in (0, 2, 4))
    return f"rgba({red}, {green}, {blue}, {alpha})"


def doughnut_data(language_totals: Optional[LanguageTotals]) -> Optional[Dict[str, Any]]:
    if language_totals is None:
        return None
    labels = list(language_totals.keys())
    background = colors_for(len(labels))
    return {
        "labels": labels,
        "datasets": [
            {
                "data": list(language_totals.values()),
                "backgroundColor": background,
                "hoverBackgroundColor": [with_alpha(color, 0.85) for color in background],
                "borderColor": "#fff",
                "borderWidth": 2,
            }
        ],
    }


def line_data(commit_series: Optional[CommitSeries], window_days: int = 90) -> Optional[Dict[str, Any]]:
    if commit_series is None:
        return None
    return {
        "labels": commit_series.labels,
        "datasets": [
            {
                "label": f"Commits ({window_days}d)",
                "data": commit_series.data,
                "tension": 0.35,
                "fill": True,
                "borderColor": COMMIT_LINE_COLOR,
                "backgroundColor": with_alpha(COMMIT_LINE_COLOR, 0.2),
                "pointRadius": 0,
                "borderWidth": 2,
            }
        ],
    }


def bar_data(issue_mix: Optional[IssueMix]) -> Optional[Dict[str, Any]]:
    if issue_mix is None:
        return None
    return {
        "labels": list(ISSUE_MIX_LABELS),
        "datasets": [
            {
                "data": issue_mix.as_list(),
                "backgroundColor": list(ISSUE_MIX_COLORS),
                "borderRadius": 8,
            }
        ],
    }


def _format_date(value: Optional[str]) -> str:
    timestamp = parse_timestamp(value)
    return timestamp.date().isoformat() if timestamp else PLACEHOLDER


def build_kpis(view: View) -> List[Kpi]:
    if isinstance(view, RepoView):
        repo = view.repo
        return [
            Kpi("Stars", as_count(repo.get("stargazers_count"))),
            Kpi("Forks", as_count(repo.get("forks_count"))),
            Kpi("Open Issues", as_count(repo.get("open_issues_count"))),
            Kpi("Last Push", _format_date(repo.get("pushed_at"))),
        ]

    repos = view.repos or []
    stars = sum(as_count(repo.get("stargazers_count")) for repo in repos)
    forks = sum(as_count(repo.get("forks_count")) for repo in repos)
    pushes = [parse_timestamp(repo.get("pushed_at")) for repo in repos]
    latest = max((pushed for pushed in pushes if pushed is not None), default=None)
    return [
        Kpi("Total Repos", len(repos)),
        Kpi("Total Stars", stars),
        Kpi("Total Forks", forks),
        Kpi("Last Activity", latest.date().isoformat() if latest else PLACEHOLDER),
    ]


def describe_view(view: View) -> Dict[str, Any]:
    """Header block shown above the charts."""
    if isinstance(view, RepoView):
        return {
            "kind": "repo",
            "title": view.repo.get("full_name") or view.repo.get("name") or "",
            "subtitle": view.repo.get("description") or PLACEHOLDER,
            "html_url": view.repo.get("html_url"),
        }
    return {
        "kind": "user",
        "title": f"@{view.user.get('login', '')}",
        "subtitle": view.user.get("bio") or PLACEHOLDER,
        "html_url": view.user.get("html_url"),
    }


def build_dashboard(result: QueryResult, window_days: int = 90) -> Dict[str, Any]:
    return {
        "view": describe_view(result.view),
        "kpis": [{"label": kpi.label, "value": kpi.value} for kpi in build_kpis(result.view)],
        "charts": {
            "languages": doughnut_data(result.language_totals),
            "commits": line_data(result.commit_series, window_days),
            "issues": bar_data(result.issue_mix),
        },
    }
