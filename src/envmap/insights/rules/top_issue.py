"""TOP_RECURRING_ISSUE: the most frequent finding code across the fleet."""

from __future__ import annotations

from ..models import InsightContext, MapInsight


class TopIssueRule:
    """Names the single most frequent non-info finding code."""

    name = "top_recurring_issue"

    def find(self, ctx: InsightContext) -> list[MapInsight]:
        top = ctx.graph.summary.top_issues
        if not top:
            return []

        first = top[0]
        severity = "high" if first.count >= ctx.thresholds.top_issue_high_count else "medium"
        return [
            MapInsight(
                severity=severity,
                text=f"Top recurring issue: {first.code} ({first.count}). {first.hint}",
                metadata={"code": first.code, "count": first.count},
            )
        ]
