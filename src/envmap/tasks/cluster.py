"""Cluster task runs by signature and detect flaky tasks.

Instead of one graph node per run, a cluster aggregates every run of the same
task: run/ok/fail counts, success rate, last-seen timestamp, a failure-code
histogram, and per-environment counts.

Lifecycle: a cluster is created on the first record with its signature,
updated monotonically by ``add()``, then ``freeze()`` computes the derived
fields once every record has been folded in.

Flakiness comes in two shapes:
  - ``is_flaky``: the task both passes and fails, at a success rate that is
    neither healthy (>= 95%) nor systemically broken (<= 20%).
  - ``is_env_dependent_flaky``: the task always passes on one environment
    and always fails on another.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..identity import norm_path
from ..logging_config import get_logger
from ..models import RunRecord
from ..stats import safe_ratio
from .signature import TaskSignature, signature_for_run

logger = get_logger(__name__)


@dataclass
class TaskCluster:
    """Mutable accumulator for every run sharing one TaskSignature."""

    signature: TaskSignature
    runs: int = 0
    ok: int = 0
    fail: int = 0
    success_rate: float = 0.0  # derived, set by freeze()
    last_at: str = ""
    dominant_failure: Optional[str] = None  # derived, set by freeze()

    case_insensitive: Optional[bool] = None

    failure_counts: dict[str, int] = field(default_factory=dict)  # code -> failures
    env_counts: dict[str, int] = field(default_factory=dict)  # normalized path -> runs
    env_paths: dict[str, str] = field(default_factory=dict)  # normalized path -> first spelling
    env_ok_counts: dict[str, int] = field(default_factory=dict)
    env_fail_counts: dict[str, int] = field(default_factory=dict)

    @property
    def sig_id(self) -> str:
        return self.signature.sig_id

    @property
    def name(self) -> str:
        return self.signature.name

    def add(self, run: RunRecord) -> None:
        """Fold one run into the aggregate."""
        self.runs += 1
        # ISO-8601 strings compare chronologically
        if run.at > self.last_at:
            self.last_at = run.at

        env = norm_path(run.selected.python_path, self.case_insensitive)
        self.env_paths.setdefault(env, run.selected.python_path)
        self.env_counts[env] = self.env_counts.get(env, 0) + 1

        if run.outcome.ok:
            self.ok += 1
            self.env_ok_counts[env] = self.env_ok_counts.get(env, 0) + 1
        else:
            self.fail += 1
            self.env_fail_counts[env] = self.env_fail_counts.get(env, 0) + 1
            code = run.failure_code
            self.failure_counts[code] = self.failure_counts.get(code, 0) + 1

    def freeze(self) -> TaskCluster:
        """Compute derived fields. Call once after the last ``add()``."""
        self.success_rate = safe_ratio(self.ok, self.runs)
        self.dominant_failure = dominant_code(self.failure_counts)
        return self


def dominant_code(counts: dict[str, int]) -> Optional[str]:
    """Code with the highest count; ties go to the lexicographically smallest code.

    The tie-break is explicit so the result never depends on the order runs
    happened to arrive in.
    """
    if not counts:
        return None
    return min(counts.items(), key=lambda item: (-item[1], item[0]))[0]


def cluster_runs(
    runs: Iterable[RunRecord], case_insensitive: Optional[bool] = None
) -> list[TaskCluster]:
    """Cluster runs by task signature.

    Per-environment counts are keyed by ``norm_path``, so with
    ``case_insensitive`` two spellings of one interpreter path count as one
    environment.

    Returns:
        Frozen clusters sorted by run count descending; ties keep the order in
        which each signature was first seen.
    """
    clusters: dict[str, TaskCluster] = {}

    for run in runs:
        sig = signature_for_run(run)
        cluster = clusters.get(sig.sig_id)
        if cluster is None:
            cluster = TaskCluster(signature=sig, last_at=run.at, case_insensitive=case_insensitive)
            clusters[sig.sig_id] = cluster
        cluster.add(run)

    result = [c.freeze() for c in clusters.values()]
    # sorted() is stable, so equal run counts stay in first-seen order
    result = sorted(result, key=lambda c: c.runs, reverse=True)
    logger.debug(f"Clustered runs into {len(result)} task signatures")
    return result


def is_flaky(cluster: TaskCluster, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS) -> bool:
    """Both passes and fails, with a success rate strictly inside the flaky band."""
    if cluster.ok == 0 or cluster.fail == 0:
        return False
    return (
        thresholds.flaky_min_success_rate
        < cluster.success_rate
        < thresholds.flaky_max_success_rate
    )


def is_env_dependent_flaky(cluster: TaskCluster) -> bool:
    """Always passes on some environment and always fails on a different one.

    Environments with mixed results count toward neither side.
    """
    if len(cluster.env_counts) < 2:
        return False

    has_success_env = False
    has_fail_env = False
    for env in cluster.env_counts:
        ok = cluster.env_ok_counts.get(env, 0)
        fail = cluster.env_fail_counts.get(env, 0)
        if ok > 0 and fail == 0:
            has_success_env = True
        if fail > 0 and ok == 0:
            has_fail_env = True

    return has_success_env and has_fail_env


@dataclass(frozen=True)
class FailingEnv:
    python_path: str
    fail_count: int
    total_count: int
    fail_rate: float


def get_failing_envs(cluster: TaskCluster, limit: int = 3) -> list[FailingEnv]:
    """Environments where this task fails most, by absolute failure count."""
    failing = []
    for env, fail_count in cluster.env_fail_counts.items():
        total = cluster.env_counts.get(env, fail_count)
        failing.append(
            FailingEnv(
                python_path=cluster.env_paths.get(env, env),
                fail_count=fail_count,
                total_count=total,
                fail_rate=safe_ratio(fail_count, total),
            )
        )
    failing.sort(key=lambda e: e.fail_count, reverse=True)
    return failing[:limit]


@dataclass(frozen=True)
class ClusterSummary:
    total_tasks: int = 0
    total_runs: int = 0
    total_ok: int = 0
    total_fail: int = 0
    overall_success_rate: float = 0.0
    flaky_count: int = 0
    env_dependent_flaky_count: int = 0


def summarize_clusters(
    clusters: list[TaskCluster], thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
) -> ClusterSummary:
    """Fleet-wide totals across clusters."""
    total_runs = sum(c.runs for c in clusters)
    total_ok = sum(c.ok for c in clusters)
    return ClusterSummary(
        total_tasks=len(clusters),
        total_runs=total_runs,
        total_ok=total_ok,
        total_fail=sum(c.fail for c in clusters),
        overall_success_rate=safe_ratio(total_ok, total_runs),
        flaky_count=sum(1 for c in clusters if is_flaky(c, thresholds)),
        env_dependent_flaky_count=sum(1 for c in clusters if is_env_dependent_flaky(c)),
    )
