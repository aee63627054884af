"""Rich terminal summary of a map: counts, top issues, insights."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .base import BaseFormatter

if TYPE_CHECKING:
    from ..api import MapResult

_SEVERITY_STYLES = {
    "high": "[red bold]high[/red bold]",
    "medium": "[yellow]medium[/yellow]",
    "low": "[green]low[/green]",
}


def _severity_label(severity: str) -> str:
    return _SEVERITY_STYLES.get(severity, severity)


class RichFormatter(BaseFormatter):
    """Summary panel, top-issue table and insight list on stderr."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)

    def render(self, result: MapResult) -> None:
        self._print_summary(result)
        self._print_top_issues(result)
        self._print_insights(result)

    def format(self, result: MapResult) -> str:
        # Rich output goes directly to console; return empty string
        self.render(result)
        return ""

    def _print_summary(self, result: MapResult) -> None:
        s = result.graph.summary
        body = (
            f"[bold]{s.env_count}[/bold] envs on [bold]{s.base_count}[/bold] base interpreter(s), "
            f"[bold]{s.task_count}[/bold] task(s)\n"
            f"[green]{s.healthy} healthy[/green]  "
            f"[yellow]{s.warning} warning[/yellow]  "
            f"[red]{s.broken} broken[/red]"
        )
        if s.runs_passed or s.runs_failed:
            body += f"\nRuns: [green]{s.runs_passed} passed[/green], [red]{s.runs_failed} failed[/red]"
        self.console.print(Panel(body, title="[bold cyan]Environment Map[/bold cyan]", expand=False))

    def _print_top_issues(self, result: MapResult) -> None:
        top = result.graph.summary.top_issues
        if not top:
            return
        table = Table(title="Top issues", show_lines=False)
        table.add_column("Code", style="bold")
        table.add_column("Count", justify="right")
        table.add_column("Hint")
        for issue in top:
            table.add_row(escape(issue.code), str(issue.count), escape(issue.hint))
        self.console.print(table)

    def _print_insights(self, result: MapResult) -> None:
        self.console.print("[bold]Insights:[/bold]")
        for insight in result.insights:
            self.console.print(f"  {_severity_label(insight.severity)}  {escape(insight.text)}")
