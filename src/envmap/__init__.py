"""envmap: health and dependency map for fleets of Python environments.

Turns per-interpreter health reports and task run history into a stable
base -> environment -> task graph, rolls health up to base interpreters,
clusters task runs to find flaky tasks and failure hotspots, and renders the
result as JSON, Mermaid text and ranked insights.
"""

__version__ = "0.1.0"

from .api import MapResult, render_map
from .config import (
    DEFAULT_OPTIONS,
    DEFAULT_THRESHOLDS,
    MapConfig,
    MapOptions,
    ReportFilter,
    ThresholdConfig,
    load_config,
)
from .exceptions import (
    ConfigurationError,
    EnvMapError,
    InputError,
    InvalidConfigError,
    MalformedInputError,
)
from .graph import EnvGraph, GraphEdge, GraphNode, GraphSummary, build_graph
from .ingest import load_reports, read_run_log
from .insights import InsightKernel, MapInsight, synthesize_insights
from .models import EnvironmentReport, RunRecord
from .tasks import TaskCluster, TaskSignature, cluster_runs

__all__ = [
    "__version__",
    "DEFAULT_OPTIONS",
    "DEFAULT_THRESHOLDS",
    "ConfigurationError",
    "EnvGraph",
    "EnvMapError",
    "EnvironmentReport",
    "GraphEdge",
    "GraphNode",
    "GraphSummary",
    "InputError",
    "InsightKernel",
    "InvalidConfigError",
    "MalformedInputError",
    "MapConfig",
    "MapInsight",
    "MapOptions",
    "MapResult",
    "ReportFilter",
    "RunRecord",
    "TaskCluster",
    "TaskSignature",
    "ThresholdConfig",
    "build_graph",
    "cluster_runs",
    "load_config",
    "load_reports",
    "read_run_log",
    "render_map",
    "synthesize_insights",
]
