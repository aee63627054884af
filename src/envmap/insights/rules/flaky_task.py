"""FLAKY_TASK: tasks that both pass and fail at a middling success rate.

Reports the first few flaky clusters in cluster order (most runs first),
naming the envs where failures concentrate.
"""

from __future__ import annotations

from ...graph.labels import env_label
from ...stats import percent
from ...tasks import get_failing_envs
from ..models import InsightContext, MapInsight


class FlakyTaskRule:
    name = "flaky_task"

    def find(self, ctx: InsightContext) -> list[MapInsight]:
        insights: list[MapInsight] = []

        for cluster in ctx.reported_flaky():
            failing = get_failing_envs(cluster, ctx.thresholds.failing_env_hint_limit)
            env_hint = ""
            if failing:
                labels = ", ".join(env_label(e.python_path) for e in failing)
                env_hint = f" Failures concentrated in: {labels}."

            insights.append(
                MapInsight(
                    severity="high",
                    text=(
                        f'Flaky task detected: "{cluster.name}" '
                        f"(success {percent(cluster.success_rate)}%, {cluster.runs} runs). "
                        f"Dominant failure: {cluster.dominant_failure or 'unknown'}.{env_hint}"
                    ),
                    metadata={
                        "taskSig": cluster.sig_id,
                        "runs": cluster.runs,
                        "successRate": cluster.success_rate,
                        "dominantFailure": cluster.dominant_failure,
                    },
                )
            )

        return insights
