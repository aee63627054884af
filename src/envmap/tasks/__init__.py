"""Task signatures, run clustering and flakiness detection."""

from .cluster import (
    ClusterSummary,
    FailingEnv,
    TaskCluster,
    cluster_runs,
    dominant_code,
    get_failing_envs,
    is_env_dependent_flaky,
    is_flaky,
    summarize_clusters,
)
from .signature import TaskSignature, normalize_command, requirements_key, signature_for_run

__all__ = [
    "ClusterSummary",
    "FailingEnv",
    "TaskCluster",
    "TaskSignature",
    "cluster_runs",
    "dominant_code",
    "get_failing_envs",
    "is_env_dependent_flaky",
    "is_flaky",
    "normalize_command",
    "requirements_key",
    "signature_for_run",
    "summarize_clusters",
]
