from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from .charts import build_dashboard, build_kpis, describe_view
from .config import AppConfig
from .models import CommitSeries, IssueMix, QueryResult, Reference


def write_report(reference: Reference, result: QueryResult, config: AppConfig, generated_at: Optional[date] = None) -> Path:
    output_dir = config.output.directory
    output_dir.mkdir(parents=True, exist_ok=True)
    stem = reference.slug.replace("/", "-")
    if config.output.format == "json":
        report_path = output_dir / f"{stem}-insights.json"
        payload = build_dashboard(result, config.query.commit_window_days)
        report_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    else:
        report_path = output_dir / f"{stem}-insights.md"
        report_path.write_text(
            render_markdown(reference, result, config, generated_at or date.today()), encoding="utf-8"
        )
    return report_path


def render_markdown(reference: Reference, result: QueryResult, config: AppConfig, generated_at: date) -> str:
    header = describe_view(result.view)
    lines: List[str] = []
    lines.append(f"# Portfolio Insights: {header['title']}")
    lines.append("")
    lines.append(f"Generated on: {generated_at.isoformat()}")
    if header.get("html_url"):
        lines.append(f"Link: {header['html_url']}")
    lines.append("")
    lines.append(header["subtitle"])
    lines.append("")

    lines.append("## Summary")
    lines.append("| Metric | Value |")
    lines.append("| --- | --- |")
    for kpi in build_kpis(result.view):
        lines.append(f"| {kpi.label} | {kpi.value} |")
    lines.append("")

    lines.append("## Language Breakdown")
    lines.extend(_render_languages(result.language_totals))
    lines.append("")

    lines.append(f"## Commits (Last {config.query.commit_window_days} Days)")
    lines.extend(_render_commits(result.commit_series))
    lines.append("")

    lines.append("## Issues vs Pull Requests")
    lines.extend(_render_issue_mix(result.issue_mix))
    return "\n".join(lines) + "\n"


def _render_languages(languages: Optional[Dict[str, int]], limit: int = 10) -> List[str]:
    if not languages:
        return ["No language data."]
    total = sum(languages.values())
    if not total:
        return ["No language data."]
    sorted_items = sorted(languages.items(), key=lambda item: item[1], reverse=True)[:limit]
    lines = []
    for name, count in sorted_items:
        pct = round((count / total) * 100, 1)
        lines.append(f"- {name}: {pct}% ({count:,} bytes)")
    return lines


def _render_commits(series: Optional[CommitSeries]) -> List[str]:
    if series is None:
        return ["Commit history is only collected for a single repository."]
    if not series.points:
        return ["No commits in this window."]
    lines = ["| Day | Commits |", "| --- | --- |"]
    for day, count in series.points:
        lines.append(f"| {day} | {count} |")
    return lines


def _render_issue_mix(mix: Optional[IssueMix]) -> List[str]:
    if mix is None:
        return ["No issues/PRs."]
    return [
        f"- Open issues: {mix.open_issues}",
        f"- Closed issues: {mix.closed_issues}",
        f"- Open PRs: {mix.open_prs}",
        f"- Closed PRs: {mix.closed_prs}",
    ]
