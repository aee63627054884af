"""Shared CLI helpers."""

from pathlib import Path
from typing import List, Optional

from rich.console import Console

from ..config import MapConfig, load_config

# stdout carries the diagram text, so human-facing output goes to stderr
console = Console(stderr=True)


def resolve_config(
    config: Optional[Path] = None,
    out: Optional[Path] = None,
    min_score: Optional[float] = None,
    codes: Optional[List[str]] = None,
    under: Optional[str] = None,
    task_mode: Optional[str] = None,
    output_format: Optional[str] = None,
    max_top_issues: Optional[int] = None,
    no_subgraphs: bool = False,
    no_hot_edges: bool = False,
    no_tasks: bool = False,
    verbose: bool = False,
) -> MapConfig:
    """Build the map configuration from CLI options.

    Flags left at their defaults are not passed on, so config files and
    ENVMAP_* variables still apply.
    """
    overrides = {}
    if out is not None:
        overrides["out_dir"] = str(out)
    if min_score is not None:
        overrides["min_score"] = min_score
    if codes:
        overrides["codes"] = tuple(codes)
    if under is not None:
        overrides["paths_under"] = under
    if task_mode is not None:
        overrides["task_mode"] = task_mode
    if output_format is not None:
        overrides["output_format"] = output_format
    if max_top_issues is not None:
        overrides["max_top_issues"] = max_top_issues
    if no_subgraphs:
        overrides["include_base_subgraphs"] = False
    if no_hot_edges:
        overrides["include_hot_edge_labels"] = False
    if no_tasks:
        overrides["include_tasks"] = False
    if verbose:
        overrides["verbose"] = True
    return load_config(config_file=config, **overrides)
