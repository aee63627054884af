"""Graph wire models: the versioned map other tooling consumes.

Three-tier node hierarchy:
  base   base interpreter install, shared by derived environments
  venv   one interpreter path (a derived environment, or a bare install)
  task   one run (per-run mode) or one task signature (clustered mode)

Every ``to_dict()`` emits the camelCase wire names dashboards and viewers
read, and omits absent optional fields rather than writing nulls.
"""

from __future__ import annotations

import platform
import socket
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

GRAPH_SCHEMA_VERSION = "1.0"

NodeType = Literal["base", "venv", "task", "artifact"]
EdgeType = Literal[
    "USES_BASE",
    "CREATED_FROM",
    "ROUTES_TASK_TO",
    "FAILED_RUN",
    "SHARES_WHEELHOUSE",
    "SHADOWS_PATH",
]
HealthStatus = Literal["good", "warn", "bad", "unknown"]

NODE_TYPES = ("base", "venv", "task", "artifact")
EDGE_TYPES = (
    "USES_BASE",
    "CREATED_FROM",
    "ROUTES_TASK_TO",
    "FAILED_RUN",
    "SHARES_WHEELHOUSE",
    "SHADOWS_PATH",
)


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class GraphIssue:
    code: str
    severity: str  # info | warn | bad
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "severity": self.severity, "message": self.message}


@dataclass(frozen=True)
class NodeHealth:
    """Health snapshot: status, optional score, optional issue list."""

    status: HealthStatus = "unknown"
    score: Optional[float] = None
    issues: Optional[tuple[GraphIssue, ...]] = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "status": self.status,
                "score": self.score,
                "issues": [i.to_dict() for i in self.issues] if self.issues is not None else None,
            }
        )


@dataclass(frozen=True)
class PythonInfo:
    version: Optional[str] = None  # major.minor
    impl: Optional[str] = None
    arch: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"version": self.version, "impl": self.impl, "arch": self.arch})


@dataclass(frozen=True)
class Capabilities:
    features: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"features": list(self.features), "tags": list(self.tags)}


@dataclass(frozen=True)
class Fingerprints:
    env: Optional[str] = None
    python: Optional[str] = None
    packages: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"env": self.env, "python": self.python, "packages": self.packages})


@dataclass
class GraphNode:
    """One node. Only base-node ``health`` and ``last_seen_at`` change after
    creation, in the rollup pass."""

    id: str
    type: NodeType
    label: str
    path: Optional[str] = None
    python: Optional[PythonInfo] = None
    health: Optional[NodeHealth] = None
    caps: Optional[Capabilities] = None
    fingerprints: Optional[Fingerprints] = None
    last_seen_at: Optional[str] = None

    @property
    def status(self) -> HealthStatus:
        return self.health.status if self.health else "unknown"

    @property
    def score(self) -> Optional[float]:
        return self.health.score if self.health else None

    @property
    def features(self) -> tuple[str, ...]:
        return self.caps.features if self.caps else ()

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "id": self.id,
                "type": self.type,
                "label": self.label,
                "path": self.path,
                "python": self.python.to_dict() if self.python else None,
                "health": self.health.to_dict() if self.health else None,
                "caps": self.caps.to_dict() if self.caps else None,
                "fingerprints": self.fingerprints.to_dict() if self.fingerprints else None,
                "lastSeenAt": self.last_seen_at,
            }
        )


@dataclass(frozen=True)
class GraphEdge:
    """Directed edge. ``weight`` is an aggregated run count in clustered mode."""

    id: str
    source: str
    target: str
    type: EdgeType
    label: Optional[str] = None
    weight: int = 1
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "id": self.id,
                "from": self.source,
                "to": self.target,
                "type": self.type,
                "label": self.label,
                "weight": self.weight,
                "meta": _compact(self.meta) if self.meta else None,
            }
        )


@dataclass(frozen=True)
class TopIssue:
    code: str
    count: int
    hint: str

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "count": self.count, "hint": self.hint}


@dataclass(frozen=True)
class GraphSummary:
    env_count: int = 0
    base_count: int = 0
    task_count: int = 0
    healthy: int = 0
    warning: int = 0
    broken: int = 0
    runs_passed: int = 0
    runs_failed: int = 0
    top_issues: tuple[TopIssue, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "envCount": self.env_count,
            "baseCount": self.base_count,
            "taskCount": self.task_count,
            "healthy": self.healthy,
            "warning": self.warning,
            "broken": self.broken,
            "runsPassed": self.runs_passed,
            "runsFailed": self.runs_failed,
            "topIssues": [t.to_dict() for t in self.top_issues],
        }


@dataclass(frozen=True)
class HostInfo:
    os: str
    arch: str
    hostname: str

    @classmethod
    def current(cls) -> HostInfo:
        """Describe the machine building the map."""
        return cls(
            os=platform.system().lower(),
            arch=platform.machine().lower(),
            hostname=socket.gethostname(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"os": self.os, "arch": self.arch, "hostname": self.hostname}


@dataclass
class EnvGraph:
    """The built map: nodes, edges and summary, plus generation metadata.

    ``generated_at`` is the only field that differs between two builds over
    the same inputs.
    """

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
    summary: GraphSummary = field(default_factory=GraphSummary)
    generated_at: str = ""
    host: Optional[HostInfo] = None

    def nodes_of_type(self, node_type: NodeType) -> list[GraphNode]:
        return [n for n in self.nodes if n.type == node_type]

    def edges_of_type(self, edge_type: EdgeType) -> list[GraphEdge]:
        return [e for e in self.edges if e.type == edge_type]

    def node_by_id(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def children_of(self, base_id: str) -> list[GraphNode]:
        """Environment nodes attached to a base through USES_BASE, in edge order."""
        child_ids = [e.target for e in self.edges if e.type == "USES_BASE" and e.source == base_id]
        index = {n.id: n for n in self.nodes}
        return [index[c] for c in child_ids if c in index]

    def to_dict(self) -> dict[str, Any]:
        host = self.host or HostInfo.current()
        return {
            "version": GRAPH_SCHEMA_VERSION,
            "generatedAt": self.generated_at,
            "host": host.to_dict(),
            "summary": self.summary.to_dict(),
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }
