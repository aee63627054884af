"""Task integration: task nodes and their edges to environments.

Per-run mode draws one task node per run record. Clustered mode draws one
task node per signature, with ROUTES_TASK_TO weighted by runs on each env and
FAILED_RUN weighted by failures there.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..identity import stable_id
from ..logging_config import get_logger
from ..models import RunRecord
from ..stats import percent
from ..tasks import TaskCluster, is_env_dependent_flaky, is_flaky
from ..taxonomy import RUN_FAILED, glyph_for
from .models import Capabilities, GraphEdge, GraphIssue, GraphNode, NodeHealth

if TYPE_CHECKING:
    from .builder import GraphBuilder

logger = get_logger(__name__)

FAILED_RUN_SCORE = 40


def _packages_feature(run: RunRecord) -> str:
    reqs = run.task.requirements
    if reqs is None or not reqs.packages:
        return "pkgs:none"
    return "pkgs:" + ",".join(reqs.packages[:3])


def add_run_tasks(builder: GraphBuilder, runs: list[RunRecord]) -> None:
    """One task node per run, one route edge, one failure edge on failure."""
    for run in runs:
        task_key = f"{run.task.name}|{run.task.command}|{run.at}|{run.selected.python_path}"
        task_id = stable_id("task", run.run_id or task_key)
        if builder.has_node(task_id):
            logger.debug(f"Skipping repeated run {run.run_id or task_key}")
            continue

        if run.outcome.ok:
            health = NodeHealth(status="good", score=100, issues=())
        else:
            health = NodeHealth(
                status="bad",
                score=FAILED_RUN_SCORE,
                issues=(
                    GraphIssue(
                        code=run.outcome.error_class or RUN_FAILED,
                        severity="bad",
                        message=run.outcome.stderr_snippet or "Task failed",
                    ),
                ),
            )

        builder.add_node(
            GraphNode(
                id=task_id,
                type="task",
                label=run.task.name,
                path=run.cwd,
                health=health,
                caps=Capabilities(
                    features=(_packages_feature(run),),
                    tags=run.task.requirements.tags if run.task.requirements else (),
                ),
                last_seen_at=run.at,
            )
        )

        selected = run.selected
        env_id = builder.ensure_env(
            selected.python_path,
            NodeHealth(status=selected.status or "unknown", score=selected.score),
            run.at,
        )

        builder.add_edge(
            GraphEdge(
                id=stable_id("e", f"{task_id}->{env_id}:route"),
                source=task_id,
                target=env_id,
                type="ROUTES_TASK_TO",
                label="routes",
                weight=1,
                meta={"runId": run.run_id or None, "command": run.task.command},
            )
        )

        if not run.outcome.ok:
            code = run.failure_code
            builder.add_edge(
                GraphEdge(
                    id=stable_id("e", f"{task_id}->{env_id}:fail"),
                    source=task_id,
                    target=env_id,
                    type="FAILED_RUN",
                    label=f"{glyph_for(code)} {code}",
                    weight=1,
                    meta={
                        "runId": run.run_id or None,
                        "exitCode": run.outcome.exit_code,
                        "dominantIssue": code,
                    },
                )
            )


def _cluster_status(cluster: TaskCluster) -> str:
    if cluster.fail == 0:
        return "good"
    if cluster.ok == 0:
        return "bad"
    return "warn"


def add_cluster_tasks(builder: GraphBuilder, clusters: list[TaskCluster]) -> None:
    """One task node per cluster, weighted edges per environment it ran on."""
    for cluster in clusters:
        task_id = f"task:{cluster.sig_id}"
        dominant = cluster.dominant_failure

        issues: tuple[GraphIssue, ...] = ()
        if dominant:
            issues = (
                GraphIssue(
                    code=dominant,
                    severity="warn",
                    message=f"dominant failure ({cluster.failure_counts[dominant]})",
                ),
            )

        flaky = is_flaky(cluster, builder.thresholds)
        env_flaky = is_env_dependent_flaky(cluster)
        builder.add_node(
            GraphNode(
                id=task_id,
                type="task",
                label=cluster.name,
                health=NodeHealth(
                    status=_cluster_status(cluster),
                    score=percent(cluster.success_rate),
                    issues=issues,
                ),
                caps=Capabilities(
                    features=(
                        f"runs:{cluster.runs}",
                        f"ok:{cluster.ok}",
                        f"fail:{cluster.fail}",
                        f"flaky:{'true' if flaky else 'false'}",
                        f"env-flaky:{'true' if env_flaky else 'false'}",
                    )
                ),
                last_seen_at=cluster.last_at,
            )
        )

        # clusters built elsewhere may key one env under two spellings
        per_env: dict[str, list[int]] = {}  # env id -> [runs, failures]
        for env_key, count in cluster.env_counts.items():
            python_path = cluster.env_paths.get(env_key, env_key)
            env_id = builder.ensure_env(python_path, NodeHealth(status="unknown"), cluster.last_at)
            totals = per_env.setdefault(env_id, [0, 0])
            totals[0] += count
            totals[1] += cluster.env_fail_counts.get(env_key, 0)

        for env_id, (count, fail_count) in per_env.items():
            builder.add_edge(
                GraphEdge(
                    id=stable_id("e", f"{task_id}->{env_id}:route"),
                    source=task_id,
                    target=env_id,
                    type="ROUTES_TASK_TO",
                    label=f"x{count}",
                    weight=count,
                    meta={"taskSig": cluster.sig_id},
                )
            )

            if fail_count > 0:
                code = dominant or RUN_FAILED
                builder.add_edge(
                    GraphEdge(
                        id=stable_id("e", f"{task_id}->{env_id}:fail"),
                        source=task_id,
                        target=env_id,
                        type="FAILED_RUN",
                        label=f"{glyph_for(code)} {code} x{fail_count}",
                        weight=fail_count,
                        meta={"taskSig": cluster.sig_id, "dominantIssue": code},
                    )
                )
