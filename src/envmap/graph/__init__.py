"""Environment map: graph models, construction, rollup and summary."""

from .builder import GraphBuilder, build_graph, utc_now_iso
from .filters import filter_reports, should_include_report
from .labels import base_key, base_label, env_label
from .models import (
    EDGE_TYPES,
    GRAPH_SCHEMA_VERSION,
    NODE_TYPES,
    Capabilities,
    EnvGraph,
    Fingerprints,
    GraphEdge,
    GraphIssue,
    GraphNode,
    GraphSummary,
    HostInfo,
    NodeHealth,
    PythonInfo,
    TopIssue,
)
from .rollup import rollup_base_health, worst_status
from .summary import count_top_issues, summarize_graph

__all__ = [
    "EDGE_TYPES",
    "GRAPH_SCHEMA_VERSION",
    "NODE_TYPES",
    "Capabilities",
    "EnvGraph",
    "Fingerprints",
    "GraphBuilder",
    "GraphEdge",
    "GraphIssue",
    "GraphNode",
    "GraphSummary",
    "HostInfo",
    "NodeHealth",
    "PythonInfo",
    "TopIssue",
    "base_key",
    "base_label",
    "build_graph",
    "count_top_issues",
    "env_label",
    "filter_reports",
    "rollup_base_health",
    "should_include_report",
    "summarize_graph",
    "utc_now_iso",
    "worst_status",
]
