"""FAILURE_HOTSPOT: environments that collect failing runs.

FAILED_RUN weights are summed per destination env; the worst few are
reported when their total reaches the hotspot threshold. Ties keep the
order in which each env first appeared on a failure edge.
"""

from __future__ import annotations

from ..models import InsightContext, MapInsight


class HotspotRule:
    name = "failure_hotspot"

    def find(self, ctx: InsightContext) -> list[MapInsight]:
        fail_by_env: dict[str, int] = {}
        for edge in ctx.graph.edges_of_type("FAILED_RUN"):
            fail_by_env[edge.target] = fail_by_env.get(edge.target, 0) + edge.weight

        worst = sorted(fail_by_env.items(), key=lambda item: item[1], reverse=True)
        worst = worst[: ctx.thresholds.hotspot_max_reported]

        insights: list[MapInsight] = []
        for env_id, fail_count in worst:
            if fail_count < ctx.thresholds.hotspot_min_failures:
                continue
            env = ctx.graph.node_by_id(env_id)
            if env is None:
                continue
            insights.append(
                MapInsight(
                    severity="high",
                    text=(
                        f'Failure hotspot: env "{env.label}" is associated with {fail_count} '
                        "failing runs. Consider rebuilding it or isolating it from routing."
                    ),
                    metadata={"envId": env_id, "failCount": fail_count},
                )
            )
        return insights
