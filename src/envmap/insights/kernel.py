"""InsightKernel: runs the ordered rule list over a built map."""

from __future__ import annotations

import time
from typing import Iterable, Optional

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..graph.models import EnvGraph
from ..logging_config import get_logger
from ..models import EnvironmentReport
from ..tasks import TaskCluster
from .models import InsightContext, MapInsight
from .protocols import InsightRule
from .rules import get_default_rules

logger = get_logger(__name__)

FALLBACK_TEXT = (
    "No major systemic risks detected. Keep env count small and prefer reproducible installs."
)


def fallback_insight() -> MapInsight:
    return MapInsight(severity="low", text=FALLBACK_TEXT)


class InsightKernel:
    """Evaluates rules in order and concatenates their insights.

    A rule that raises is logged and skipped; the remaining rules still run.
    When no rule fires, a single low-severity fallback insight is returned.
    """

    def __init__(
        self,
        rules: Optional[list[InsightRule]] = None,
        thresholds: Optional[ThresholdConfig] = None,
    ):
        self.rules = rules if rules is not None else get_default_rules()
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def run(
        self,
        graph: EnvGraph,
        reports: Iterable[EnvironmentReport],
        clusters: Iterable[TaskCluster] = (),
    ) -> list[MapInsight]:
        ctx = InsightContext(
            graph=graph,
            reports=list(reports),
            clusters=list(clusters),
            thresholds=self.thresholds,
        )

        insights: list[MapInsight] = []
        for rule in self.rules:
            started = time.perf_counter()
            try:
                found = rule.find(ctx)
            except Exception as e:
                logger.warning(f"Insight rule {rule.name} failed: {e}")
                continue
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.debug(f"Rule {rule.name}: {len(found)} insight(s) in {elapsed_ms:.1f}ms")
            insights.extend(found)

        if not insights:
            insights.append(fallback_insight())
        return insights


def synthesize_insights(
    graph: EnvGraph,
    reports: Iterable[EnvironmentReport],
    clusters: Iterable[TaskCluster] = (),
    thresholds: Optional[ThresholdConfig] = None,
) -> list[MapInsight]:
    """Run the default rules over a map."""
    return InsightKernel(thresholds=thresholds).run(graph, reports, clusters)
