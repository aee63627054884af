"""CONTAGION: most failed runs share one root cause."""

from __future__ import annotations

from ...taxonomy import hint_for
from ...tasks import dominant_code
from ..models import InsightContext, MapInsight


class ContagionRule:
    """Flags a failure code explaining at least half of all failed runs."""

    name = "contagion"

    def find(self, ctx: InsightContext) -> list[MapInsight]:
        if not ctx.clusters:
            return []

        totals: dict[str, int] = {}
        for cluster in ctx.clusters:
            for code, count in cluster.failure_counts.items():
                totals[code] = totals.get(code, 0) + count

        total_failures = ctx.graph.summary.runs_failed
        code = dominant_code(totals)
        if code is None or total_failures <= 0:
            return []

        count = totals[code]
        if count / total_failures < ctx.thresholds.contagion_min_share:
            return []

        return [
            MapInsight(
                severity="high",
                text=(
                    f"Most failures ({count}/{total_failures}) share the same root cause: "
                    f"{code}. {hint_for(code)}"
                ),
                metadata={"code": code, "count": count, "totalFailures": total_failures},
            )
        ]
