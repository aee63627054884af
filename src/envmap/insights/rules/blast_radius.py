"""BLAST_RADIUS: a base interpreter whose derived envs are mostly broken.

A base qualifies once it has enough attached envs; it is flagged when at
least half of them (rounded up) are bad.
"""

from __future__ import annotations

import math

from ..models import InsightContext, MapInsight


class BlastRadiusRule:
    name = "blast_radius"

    def find(self, ctx: InsightContext) -> list[MapInsight]:
        insights: list[MapInsight] = []
        graph = ctx.graph

        for base in graph.nodes_of_type("base"):
            children = graph.children_of(base.id)
            total = len(children)
            if total < ctx.thresholds.blast_radius_min_children:
                continue

            bad = sum(1 for c in children if c.status == "bad")
            if bad < math.ceil(total / 2):
                continue

            insights.append(
                MapInsight(
                    severity="high",
                    text=(
                        f'Base interpreter "{base.label}" has a large blast radius: '
                        f"{bad}/{total} attached envs are bad. "
                        "Fix the base first, then recreate envs."
                    ),
                    metadata={"baseId": base.id, "total": total, "bad": bad},
                )
            )

        return insights
