"""ENV_DEPENDENT_FLAKE: always passes on one env, always fails on another."""

from __future__ import annotations

from ...graph.labels import env_label
from ...tasks import get_failing_envs, is_env_dependent_flaky
from ..models import InsightContext, MapInsight


class EnvFlakeRule:
    """Reports env-dependent flakes the flaky-task rule has not already named."""

    name = "env_dependent_flake"

    def find(self, ctx: InsightContext) -> list[MapInsight]:
        already = {c.sig_id for c in ctx.reported_flaky()}
        candidates = [
            c for c in ctx.clusters if is_env_dependent_flaky(c) and c.sig_id not in already
        ][: ctx.thresholds.env_flaky_max_reported]

        insights: list[MapInsight] = []
        for cluster in candidates:
            failing = get_failing_envs(cluster, ctx.thresholds.failing_env_hint_limit)
            labels = ", ".join(env_label(e.python_path) for e in failing)
            insights.append(
                MapInsight(
                    severity="high",
                    text=(
                        f'Env-dependent flake: "{cluster.name}" succeeds on some envs '
                        f"but fails on others. Problem envs: {labels}."
                    ),
                    metadata={
                        "taskSig": cluster.sig_id,
                        "failingEnvs": [e.python_path for e in failing],
                    },
                )
            )
        return insights
