"""JSON output for map results, graphs and insights."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Iterable

from ..graph.models import EnvGraph
from ..insights.models import MapInsight
from .base import BaseFormatter

if TYPE_CHECKING:
    from ..api import MapResult


def dump_json(data: Any) -> str:
    """Indented JSON that keeps glyphs as UTF-8 rather than escapes."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def graph_json(graph: EnvGraph) -> str:
    return dump_json(graph.to_dict())


def insights_json(insights: Iterable[MapInsight]) -> str:
    return dump_json([i.to_dict() for i in insights])


class JsonFormatter(BaseFormatter):
    """Render the combined result (graph, mermaid, insights) as JSON."""

    def render(self, result: MapResult) -> None:
        print(self.format(result))

    def format(self, result: MapResult) -> str:
        return dump_json(result.to_dict())
