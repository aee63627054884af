"""Mermaid diagram text for a built map.

A plain serialization of the graph: it adds no information and drops none
of the node or edge order. Sections are emitted in a fixed order:

    graph TD
    node declarations
    USES_BASE edges
    subgraph blocks (one per base, when enabled)
    ROUTES_TASK_TO / FAILED_RUN edges
    classDef lines
    legend node

Raw node ids contain ':' so every node is re-keyed with ``diagram_id``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..graph.models import EnvGraph, GraphNode
from ..identity import diagram_id
from ..taxonomy import glyph_for
from .base import BaseFormatter

if TYPE_CHECKING:
    from ..api import MapResult

CLASS_DEFS = (
    "  classDef good fill:#eaffea,stroke:#2b8a3e,stroke-width:1px;",
    "  classDef warn fill:#fff4d6,stroke:#b7791f,stroke-width:1px;",
    "  classDef bad fill:#ffe3e3,stroke:#c92a2a,stroke-width:1px;",
    "  classDef unknown fill:#f1f3f5,stroke:#868e96,stroke-width:1px;",
    "  classDef base fill:#e7f5ff,stroke:#1c7ed6,stroke-width:1px;",
    "  classDef task fill:#f8f0fc,stroke:#862e9c,stroke-width:1px;",
)

LEGEND = (
    '  legend["Legend<br/>green=good • yellow=warn • red=bad • purple=task'
    '<br/>edge label = dominant failure"]:::unknown'
)

_STATUS_CLASSES = ("good", "warn", "bad")


def escape_label(text: str) -> str:
    """Escape the quote and pipe characters Mermaid reserves in labels."""
    return text.replace('"', '\\"').replace("|", "\\|")


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def node_label(node: GraphNode) -> str:
    """Node label plus a second line of version, score and first features."""
    details = []
    if node.python and node.python.version:
        details.append(f"py{node.python.version}")
    if node.score is not None:
        details.append(f"score {_format_number(node.score)}")
    if node.features:
        details.append(",".join(node.features[:3]))

    lines = [node.label]
    if details:
        lines.append(" • ".join(details))
    return "<br/>".join(line for line in lines if line)


def node_class(node: GraphNode) -> str:
    if node.type in ("base", "task"):
        return node.type
    return node.status if node.status in _STATUS_CLASSES else "unknown"


def render_mermaid(
    graph: EnvGraph,
    include_base_subgraphs: bool = True,
    include_hot_edge_labels: bool = True,
) -> str:
    """Serialize the graph as a Mermaid flowchart."""
    ids = {n.id: diagram_id(n.id) for n in graph.nodes}
    index = {n.id: n for n in graph.nodes}

    lines = ["graph TD"]

    for node in graph.nodes:
        lines.append(f'  {ids[node.id]}["{escape_label(node_label(node))}"]:::{node_class(node)}')

    uses_base = graph.edges_of_type("USES_BASE")
    for edge in uses_base:
        label = "USES_BASE"
        dominant: Optional[str] = edge.meta.get("dominantIssue")
        if include_hot_edge_labels and dominant:
            label = f"{glyph_for(dominant)} {dominant}"
        lines.append(f"  {ids[edge.source]} -->|{escape_label(label)}| {ids[edge.target]}")

    if include_base_subgraphs:
        for base in graph.nodes_of_type("base"):
            attached = [
                index[e.target]
                for e in uses_base
                if e.source == base.id and e.target in index and index[e.target].type == "venv"
            ]
            if not attached:
                continue
            lines.append(f'  subgraph {ids[base.id]}_cluster["{escape_label(base.label)}"]')
            for env in attached:
                lines.append(f"    {ids[env.id]}")
            lines.append("  end")

    for edge in graph.edges:
        if edge.type not in ("ROUTES_TASK_TO", "FAILED_RUN"):
            continue
        source = ids.get(edge.source)
        target = ids.get(edge.target)
        if source is None or target is None:
            continue
        arrow = " -.->|" if edge.type == "FAILED_RUN" else " -->|"
        lines.append(f"  {source}{arrow}{escape_label(edge.label or edge.type)}| {target}")

    lines.append("")
    lines.extend(CLASS_DEFS)
    lines.append("")
    lines.append(LEGEND)

    return "\n".join(lines)


class MermaidFormatter(BaseFormatter):
    """Render the map as Mermaid text on stdout."""

    def __init__(self, include_base_subgraphs: bool = True, include_hot_edge_labels: bool = True):
        self.include_base_subgraphs = include_base_subgraphs
        self.include_hot_edge_labels = include_hot_edge_labels

    def render(self, result: MapResult) -> None:
        print(self.format(result))

    def format(self, result: MapResult) -> str:
        if result.mermaid is not None:
            return result.mermaid
        return render_mermaid(
            result.graph,
            include_base_subgraphs=self.include_base_subgraphs,
            include_hot_edge_labels=self.include_hot_edge_labels,
        )
