"""Insight models: the ranked findings produced from a built map."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..graph.models import EnvGraph
from ..models import EnvironmentReport
from ..tasks import TaskCluster, is_flaky

InsightSeverity = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class MapInsight:
    """One human-readable diagnostic. Pure output, no identity."""

    severity: InsightSeverity
    text: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"severity": self.severity, "text": self.text, "metadata": dict(self.metadata)}


@dataclass
class InsightContext:
    """Everything a rule may read. Rules never modify it."""

    graph: EnvGraph
    reports: list[EnvironmentReport]
    clusters: list[TaskCluster] = field(default_factory=list)
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS

    def reported_flaky(self) -> list[TaskCluster]:
        """Flaky clusters the flaky-task rule reports, in cluster order."""
        flaky = [c for c in self.clusters if is_flaky(c, self.thresholds)]
        return flaky[: self.thresholds.flaky_max_reported]
