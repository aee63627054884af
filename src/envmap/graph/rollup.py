"""Second pass: base health rolled up from attached environments.

Runs after every environment node exists, over the finished node and edge
lists, so a base never reports a partial aggregate.

  status  worst case among status-bearing children (bad > warn > good);
          no status-bearing child leaves the base "unknown"
  score   lower median of child scores, resistant to one broken env
"""

from __future__ import annotations

from ..stats import lower_median
from .models import GraphEdge, GraphNode, NodeHealth

_SEVERITY_ORDER = ("bad", "warn", "good")


def worst_status(statuses: list[str]) -> str:
    for status in _SEVERITY_ORDER:
        if status in statuses:
            return status
    return "unknown"


def rollup_base_health(nodes: list[GraphNode], edges: list[GraphEdge]) -> None:
    """Replace each base node's health with the aggregate of its children."""
    index = {n.id: n for n in nodes}
    children: dict[str, list[GraphNode]] = {}
    for edge in edges:
        if edge.type != "USES_BASE":
            continue
        child = index.get(edge.target)
        if child is not None:
            children.setdefault(edge.source, []).append(child)

    for base in nodes:
        if base.type != "base":
            continue
        kids = children.get(base.id, [])
        if not kids:
            continue

        scores = [k.score for k in kids if k.score is not None]
        base.health = NodeHealth(
            status=worst_status([k.status for k in kids]),
            score=lower_median(scores),
        )

        seen = [k.last_seen_at for k in kids if k.last_seen_at]
        # ISO-8601 strings compare chronologically
        base.last_seen_at = max(seen) if seen else None
