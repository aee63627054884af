"""Public entry point: reports and runs in, map result out.

    reports + runs
        -> cluster runs (when runs exist and task mode is not none)
        -> build graph
        -> synthesize insights
        -> render Mermaid (when the output format asks for it)

Everything in the result is a pure function of the inputs except the
graph's ``generated_at`` stamp.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from .config import DEFAULT_OPTIONS, DEFAULT_THRESHOLDS, MapOptions, ThresholdConfig
from .formatters.mermaid_formatter import render_mermaid
from .graph import EnvGraph, HostInfo, build_graph
from .graph.filters import filter_reports
from .insights import MapInsight, synthesize_insights
from .logging_config import get_logger
from .models import EnvironmentReport, RunRecord
from .tasks import TaskCluster, cluster_runs

logger = get_logger(__name__)


@dataclass
class MapResult:
    graph: EnvGraph
    mermaid: Optional[str] = None
    insights: list[MapInsight] = field(default_factory=list)
    clusters: list[TaskCluster] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"graph": self.graph.to_dict()}
        if self.mermaid is not None:
            data["mermaid"] = self.mermaid
        data["insights"] = [i.to_dict() for i in self.insights]
        return data


def render_map(
    reports: Iterable[EnvironmentReport],
    runs: Iterable[RunRecord] = (),
    options: Optional[MapOptions] = None,
    thresholds: Optional[ThresholdConfig] = None,
    generated_at: Optional[str] = None,
    host: Optional[HostInfo] = None,
) -> MapResult:
    """Build the map, its insights and (optionally) its Mermaid text.

    Args:
        reports: Probe reports, one per interpreter path
        runs: Run history in any order
        options: Map options (defaults when omitted)
        thresholds: Insight thresholds (defaults when omitted)
        generated_at: Fixed timestamp to stamp on the graph; the current UTC
            time when omitted
        host: Host descriptor; the current machine when omitted

    Returns:
        MapResult with graph, mermaid (None for json-only output) and insights
    """
    options = options or DEFAULT_OPTIONS
    thresholds = thresholds or DEFAULT_THRESHOLDS
    reports = list(reports)
    runs = list(runs)

    # Clusters feed the flaky, contagion and hotspot rules in every task mode;
    # the builder draws them as nodes only in clustered mode.
    clusters: list[TaskCluster] = []
    if runs and options.task_mode != "none":
        clusters = cluster_runs(runs, options.case_insensitive_paths)

    graph = build_graph(
        reports,
        runs,
        options=options,
        clusters=clusters,
        thresholds=thresholds,
        generated_at=generated_at,
        host=host,
    )

    included = filter_reports(reports, options.report_filter, options.case_insensitive_paths)
    insights = synthesize_insights(graph, included, clusters, thresholds=thresholds)

    mermaid = None
    if options.wants_mermaid:
        mermaid = render_mermaid(
            graph,
            include_base_subgraphs=options.include_base_subgraphs,
            include_hot_edge_labels=options.include_hot_edge_labels,
        )

    logger.debug(f"Map rendered: {len(graph.nodes)} nodes, {len(insights)} insight(s)")
    return MapResult(graph=graph, mermaid=mermaid, insights=insights, clusters=clusters)
