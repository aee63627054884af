"""Graph summary: counts, health buckets and ranked top issues."""

from __future__ import annotations

from typing import Iterable

from ..models import EnvironmentReport
from ..taxonomy import hint_for
from .models import GraphNode, GraphSummary, TopIssue


def count_top_issues(reports: Iterable[EnvironmentReport], max_top: int) -> list[TopIssue]:
    """Non-info finding codes ranked by occurrence; ties keep first-seen order."""
    counts: dict[str, int] = {}
    for report in reports:
        for finding in report.findings:
            if finding.severity == "info":
                continue
            counts[finding.code] = counts.get(finding.code, 0) + 1

    # dicts keep insertion order and sorted() is stable
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [TopIssue(code=code, count=count, hint=hint_for(code)) for code, count in ranked[:max_top]]


def summarize_graph(
    nodes: list[GraphNode],
    reports: list[EnvironmentReport],
    runs_passed: int = 0,
    runs_failed: int = 0,
    max_top_issues: int = 10,
) -> GraphSummary:
    """Build the summary from the final node set and the surviving reports."""
    venvs = [n for n in nodes if n.type == "venv"]
    return GraphSummary(
        env_count=len(venvs),
        base_count=sum(1 for n in nodes if n.type == "base"),
        task_count=sum(1 for n in nodes if n.type == "task"),
        healthy=sum(1 for n in venvs if n.status == "good"),
        warning=sum(1 for n in venvs if n.status == "warn"),
        broken=sum(1 for n in venvs if n.status == "bad"),
        runs_passed=runs_passed,
        runs_failed=runs_failed,
        top_issues=tuple(count_top_issues(reports, max_top_issues)),
    )
