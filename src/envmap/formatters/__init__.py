"""Output formatters for envmap: JSON, Mermaid and the rich terminal summary."""

from typing import Any

from .base import BaseFormatter
from .json_formatter import JsonFormatter, dump_json, graph_json, insights_json
from .mermaid_formatter import MermaidFormatter, escape_label, render_mermaid
from .rich_formatter import RichFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "json": JsonFormatter,
    "mermaid": MermaidFormatter,
    "rich": RichFormatter,
}


def get_formatter(name: str, **kwargs: Any) -> BaseFormatter:
    """Formatter instance by name.

    Args:
        name: One of "json", "mermaid", "rich"
        **kwargs: Passed to the formatter's constructor (``console`` for
            rich, the subgraph / hot-label toggles for mermaid)

    Raises:
        ValueError: If name is not recognized
    """
    cls = FORMATTERS.get(name)
    if cls is None:
        raise ValueError(f"Unknown formatter: {name!r}. Choose from: {', '.join(sorted(FORMATTERS))}")
    return cls(**kwargs)


__all__ = [
    "FORMATTERS",
    "BaseFormatter",
    "JsonFormatter",
    "MermaidFormatter",
    "RichFormatter",
    "dump_json",
    "escape_label",
    "get_formatter",
    "graph_json",
    "insights_json",
    "render_mermaid",
]
