"""Console rendering helpers for the safe-upload CLI."""
from __future__ import annotations

from typing import Any, Dict

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import RunResult, RunStatus

console = Console()
err_console = Console(stderr=True)

_STATUS_STYLES = {
    RunStatus.SUCCESS: "bold green",
    RunStatus.PARTIAL: "bold yellow",
    RunStatus.FAILED: "bold red",
}


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]safe-upload[/bold green]",
        subtitle="[dim]safe_uploader CLI[/dim]",
        border_style="blue",
    )
    console.print(panel)


def build_result_table(result: RunResult) -> Table:
    """Table listing the produced paths, then the errors of a run."""
    style = _STATUS_STYLES[result.status]
    table = Table(title=f"[{style}]{result.status.value.upper()}[/{style}]", show_lines=False)
    table.add_column("Kind", style="bold cyan")
    table.add_column("Value", overflow="fold")

    for index, path in enumerate(result.uploaded_file_paths):
        kind = "file" if path == result.uploaded_file_path else f"thumb {index}"
        table.add_row(kind, path)
    if result.real_url:
        table.add_row("url", result.real_url)
    for failure in result.failures:
        table.add_row(f"[red]{type(failure).__name__}[/red]", str(failure))
    return table


def render_run_result(result: RunResult) -> None:
    """Render the outcome of a run."""
    target = console if result.success else err_console
    target.print(build_result_table(result))
