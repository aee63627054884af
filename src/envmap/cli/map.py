"""Map command: build the environment map from probe reports and run history."""

from pathlib import Path
from typing import List, Optional

import click
import typer
from rich.markup import escape

from ..api import MapResult, render_map
from ..exceptions import EnvMapError
from ..formatters import get_formatter
from ..formatters.json_formatter import graph_json, insights_json
from ..ingest import load_reports, read_run_log
from ..logging_config import setup_logging
from . import app
from ._common import console, resolve_config

GRAPH_FILE = "venv-map.json"
MERMAID_FILE = "venv-map.mmd"
INSIGHTS_FILE = "insights.json"
DEFAULT_RUN_LOG = "runs.jsonl"


def _write_outputs(out_dir: Path, result: MapResult) -> list[Path]:
    """Write graph, diagram and insights files; return the paths written."""
    out_dir.mkdir(parents=True, exist_ok=True)

    written = []
    graph_path = out_dir / GRAPH_FILE
    graph_path.write_text(graph_json(result.graph), encoding="utf-8")
    written.append(graph_path)

    if result.mermaid is not None:
        mermaid_path = out_dir / MERMAID_FILE
        mermaid_path.write_text(result.mermaid, encoding="utf-8")
        written.append(mermaid_path)

    insights_path = out_dir / INSIGHTS_FILE
    insights_path.write_text(insights_json(result.insights), encoding="utf-8")
    written.append(insights_path)

    return written


@app.command("map")
def map_command(
    reports: Path = typer.Option(
        ...,
        "--reports",
        "-r",
        help="JSON array of environment health reports",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    runlog: Optional[Path] = typer.Option(
        None,
        "--runlog",
        help="JSONL run log (default: <out>/runs.jsonl)",
    ),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "-o",
        help="Output directory (default: .envmap)",
    ),
    min_score: Optional[float] = typer.Option(
        None,
        "--min-score",
        help="Drop environments scoring below this",
    ),
    code: Optional[List[str]] = typer.Option(
        None,
        "--code",
        help="Keep only environments with this finding code (repeatable)",
    ),
    under: Optional[str] = typer.Option(
        None,
        "--under",
        help="Keep only interpreter paths under this prefix",
    ),
    task_mode: Optional[str] = typer.Option(
        None,
        "--task-mode",
        help="Task nodes: none | runs | clustered",
        click_type=click.Choice(["none", "runs", "per-run", "clustered"], case_sensitive=False),
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--format",
        help="Outputs to produce: json | mermaid | both",
        click_type=click.Choice(["json", "mermaid", "both"], case_sensitive=False),
    ),
    max_top_issues: Optional[int] = typer.Option(
        None,
        "--max-top-issues",
        help="Length of the top-issues list",
        min=0,
    ),
    no_subgraphs: bool = typer.Option(
        False,
        "--no-subgraphs",
        help="Do not group environments under their base in the diagram",
    ),
    no_hot_edges: bool = typer.Option(
        False,
        "--no-hot-edges",
        help="Do not label base edges with the dominant issue",
    ),
    no_tasks: bool = typer.Option(
        False,
        "--no-tasks",
        help="Ignore the run log",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print the full result as JSON instead of the diagram and summary",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show progress and debug logging",
    ),
):
    """
    Build the environment map, its insights and its Mermaid diagram.

    Writes venv-map.json, venv-map.mmd and insights.json to the output
    directory, prints the diagram to stdout and a summary to stderr.

    [bold cyan]Examples:[/bold cyan]

      envmap map --reports reports.json

      envmap map -r reports.json --runlog runs.jsonl --task-mode runs

      envmap map -r reports.json --min-score 50 --code SSL_BROKEN --json
    """
    logger = setup_logging("verbose" if verbose else "normal")

    try:
        cfg = resolve_config(
            config=config,
            out=out,
            min_score=min_score,
            codes=code,
            under=under,
            task_mode=task_mode.lower() if task_mode else None,
            output_format=output_format.lower() if output_format else None,
            max_top_issues=max_top_issues,
            no_subgraphs=no_subgraphs,
            no_hot_edges=no_hot_edges,
            no_tasks=no_tasks,
            verbose=verbose,
        )
        logger = setup_logging(cfg.verbosity)

        report_list = load_reports(reports)
        logger.info(f"Loaded {len(report_list)} environment reports from {reports}")

        runs = []
        if cfg.include_tasks:
            runlog_path = runlog or Path(cfg.out_dir) / DEFAULT_RUN_LOG
            runs = read_run_log(runlog_path, max_lines=cfg.run_log_max_lines)
            if runs:
                logger.info(f"Loaded {len(runs)} task runs from {runlog_path}")

        result = render_map(report_list, runs, options=cfg.options, thresholds=cfg.thresholds)
        written = _write_outputs(Path(cfg.out_dir), result)

        if json_output:
            typer.echo(get_formatter("json").format(result))
            return

        if result.mermaid is not None:
            typer.echo(result.mermaid)

        get_formatter("rich", console=console).render(result)
        console.print("\n[bold]Wrote:[/bold]")
        for path in written:
            console.print(f"  {path}")

    except typer.Exit:
        raise

    except EnvMapError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        if e.hint:
            console.print(f"[dim]{escape(e.hint)}[/dim]")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(130)

    except Exception as e:
        logger.exception("Unexpected error while building the map")
        console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)
