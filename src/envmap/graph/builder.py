"""Environment map construction from probe reports and run history.

Build order:
  1. Filter reports.
  2. One venv node per surviving report, one lazily created base node per
     distinct base key, one USES_BASE edge per environment.
  3. Roll base health up from the finished environment set.
  4. Integrate task runs (per-run or clustered).
  5. Summarize.

Ids come from ``stable_id`` over normalized keys only, so two builds over the
same inputs produce the same node and edge ids in the same order.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from ..config import DEFAULT_OPTIONS, DEFAULT_THRESHOLDS, MapOptions, ThresholdConfig
from ..identity import fingerprint, norm_path, stable_id
from ..logging_config import get_logger
from ..models import EnvironmentReport, RunRecord
from ..tasks import TaskCluster, cluster_runs
from ..taxonomy import PYTHONPATH_INJECTED, SSL_BROKEN, USER_SITE_LEAK
from .filters import filter_reports
from .labels import base_key, base_label, env_label
from .models import (
    Capabilities,
    EnvGraph,
    Fingerprints,
    GraphEdge,
    GraphIssue,
    GraphNode,
    HostInfo,
    NodeHealth,
    PythonInfo,
)
from .rollup import rollup_base_health
from .summary import summarize_graph
from .tasks import add_cluster_tasks, add_run_tasks

logger = get_logger(__name__)

DEFAULT_IMPL = "CPython"


def utc_now_iso() -> str:
    """Wall-clock UTC timestamp, millisecond precision, ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _env_features(report: EnvironmentReport) -> tuple[str, ...]:
    return (
        "ssl:broken" if report.has_code(SSL_BROKEN) else "ssl:ok",
        "usersite:leak" if report.has_code(USER_SITE_LEAK) else "usersite:clean",
        "pythonpath:set" if report.has_code(PYTHONPATH_INJECTED) else "pythonpath:clean",
    )


class GraphBuilder:
    """Accumulates nodes and edges for one map.

    Nodes and edges are append-only; the only mutation after creation is the
    base health rollup pass.
    """

    def __init__(
        self,
        options: MapOptions = DEFAULT_OPTIONS,
        thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
    ):
        self.options = options
        self.thresholds = thresholds
        self.nodes: list[GraphNode] = []
        self.edges: list[GraphEdge] = []
        self.runs_passed = 0
        self.runs_failed = 0

        self._index: dict[str, GraphNode] = {}
        self._base_ids: dict[str, str] = {}  # normalized base key -> node id
        self._env_ids: dict[str, str] = {}  # normalized python path -> node id

    # ── Primitives ─────────────────────────────────────────────────

    def norm(self, path: Optional[str]) -> str:
        return norm_path(path, self.options.case_insensitive_paths)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._index

    def add_node(self, node: GraphNode) -> GraphNode:
        self.nodes.append(node)
        self._index[node.id] = node
        return node

    def add_edge(self, edge: GraphEdge) -> GraphEdge:
        self.edges.append(edge)
        return edge

    # ── Environments and bases ─────────────────────────────────────

    def add_environment(self, report: EnvironmentReport) -> Optional[str]:
        """Create the venv node, its base and the USES_BASE edge.

        Returns:
            The environment node id, or None when the path was already mapped
            (the first report for a path wins).
        """
        py_path = self.norm(report.python_path)
        if py_path in self._env_ids:
            logger.debug(f"Duplicate report for {report.python_path}, keeping the first")
            return None

        env_id = stable_id("env", py_path)
        self._env_ids[py_path] = env_id

        facts = report.facts
        version = facts.python_version if facts else None
        arch = facts.arch if facts else None
        dominant = report.dominant_issue()

        self.add_node(
            GraphNode(
                id=env_id,
                type="venv",
                label=env_label(report.python_path),
                path=report.python_path,
                python=PythonInfo(version=version, impl=DEFAULT_IMPL, arch=arch),
                health=NodeHealth(
                    status=report.status,
                    score=report.score,
                    issues=tuple(
                        GraphIssue(code=f.code, severity=f.severity, message=f.message)
                        for f in report.findings
                    ),
                ),
                caps=Capabilities(features=_env_features(report)),
                fingerprints=Fingerprints(
                    env=fingerprint(f"{py_path}|{version or ''}|{dominant or ''}")
                ),
                last_seen_at=report.ran_at,
            )
        )

        base_id = self._get_or_create_base(base_key(report), version, arch)
        self.add_edge(
            GraphEdge(
                id=stable_id("e", f"{base_id}->{env_id}"),
                source=base_id,
                target=env_id,
                type="USES_BASE",
                weight=1,
                meta={"dominantIssue": dominant},
            )
        )
        return env_id

    def _get_or_create_base(self, key: str, version: Optional[str], arch: Optional[str]) -> str:
        key_norm = self.norm(key)
        base_id = self._base_ids.get(key_norm)
        if base_id is not None:
            return base_id

        base_id = stable_id("base", key_norm)
        self._base_ids[key_norm] = base_id
        self.add_node(
            GraphNode(
                id=base_id,
                type="base",
                label=base_label(key, version, arch),
                path=key,
                python=PythonInfo(version=version, impl=DEFAULT_IMPL, arch=arch),
                health=NodeHealth(status="unknown"),
                fingerprints=Fingerprints(python=fingerprint(key_norm)),
            )
        )
        return base_id

    def ensure_env(self, python_path: str, health: NodeHealth, last_seen_at: Optional[str]) -> str:
        """Id of the env node for a path, synthesizing a minimal node when no
        surviving report covers it, so task edges always resolve."""
        py_path = self.norm(python_path)
        env_id = self._env_ids.get(py_path) or stable_id("env", py_path)
        if not self.has_node(env_id):
            logger.debug(f"Synthesizing env node for unreported path {python_path}")
            self.add_node(
                GraphNode(
                    id=env_id,
                    type="venv",
                    label=env_label(python_path),
                    path=python_path,
                    health=health,
                    last_seen_at=last_seen_at,
                )
            )
            self._env_ids[py_path] = env_id
        return env_id

    # ── Whole build ────────────────────────────────────────────────

    def build(
        self,
        reports: Iterable[EnvironmentReport],
        runs: Iterable[RunRecord] = (),
        clusters: Optional[list[TaskCluster]] = None,
        generated_at: Optional[str] = None,
        host: Optional[HostInfo] = None,
    ) -> EnvGraph:
        included = filter_reports(
            reports, self.options.report_filter, self.options.case_insensitive_paths
        )
        for report in included:
            self.add_environment(report)

        rollup_base_health(self.nodes, self.edges)

        runs = list(runs)
        if runs and self.options.task_mode != "none":
            for run in runs:
                if run.outcome.ok:
                    self.runs_passed += 1
                else:
                    self.runs_failed += 1

            if self.options.task_mode == "clustered":
                if clusters is None:
                    clusters = cluster_runs(runs, self.options.case_insensitive_paths)
                add_cluster_tasks(self, clusters)
            else:
                add_run_tasks(self, runs)

        summary = summarize_graph(
            self.nodes,
            included,
            runs_passed=self.runs_passed,
            runs_failed=self.runs_failed,
            max_top_issues=self.options.max_top_issues,
        )
        logger.debug(
            f"Built graph: {len(self.nodes)} nodes, {len(self.edges)} edges "
            f"from {len(included)} reports and {len(runs)} runs"
        )
        return EnvGraph(
            nodes=self.nodes,
            edges=self.edges,
            summary=summary,
            generated_at=generated_at or utc_now_iso(),
            host=host or HostInfo.current(),
        )


def build_graph(
    reports: Iterable[EnvironmentReport],
    runs: Iterable[RunRecord] = (),
    options: Optional[MapOptions] = None,
    clusters: Optional[list[TaskCluster]] = None,
    thresholds: Optional[ThresholdConfig] = None,
    generated_at: Optional[str] = None,
    host: Optional[HostInfo] = None,
) -> EnvGraph:
    """Build the environment map.

    Args:
        reports: Probe reports, one per interpreter path
        runs: Run records in any order
        options: Filter, task mode and summary options
        clusters: Pre-computed clusters for clustered mode (computed from
            ``runs`` when omitted)
        thresholds: Flakiness thresholds for task node features
        generated_at: Timestamp to stamp on the graph (now, when omitted)
        host: Host descriptor (the current machine, when omitted)

    Returns:
        The finished EnvGraph. Never raises on missing optional fields.
    """
    builder = GraphBuilder(options or DEFAULT_OPTIONS, thresholds or DEFAULT_THRESHOLDS)
    return builder.build(reports, runs, clusters, generated_at=generated_at, host=host)
