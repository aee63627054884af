"""HIGH_ENTROPY: too many distinct problems to fix one env at a time."""

from __future__ import annotations

from ..models import InsightContext, MapInsight


class EntropyRule:
    """Recommends consolidating onto a few known-good environments."""

    name = "high_entropy"

    def find(self, ctx: InsightContext) -> list[MapInsight]:
        if len(ctx.reports) < ctx.thresholds.entropy_min_reports:
            return []

        distinct = {
            f.code for r in ctx.reports for f in r.findings if f.severity != "info"
        }
        if len(distinct) < ctx.thresholds.entropy_min_distinct_codes:
            return []

        return [
            MapInsight(
                severity="medium",
                text=(
                    f"High entropy detected: {len(distinct)} different issue types across "
                    f"{len(ctx.reports)} envs. Consider standardizing on 2-3 "
                    '"golden envs" (data, web, ml) and routing tasks into them.'
                ),
                metadata={"envs": len(ctx.reports), "uniqueIssues": len(distinct)},
            )
        ]
