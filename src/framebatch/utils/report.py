"""Console rendering of run configuration, per-item outcomes and summaries."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from framebatch.core.contracts import BatchResult, ItemFailure, ItemSuccess, UploadOutcome
from .time_utils import format_duration


def render_outcome(console: Console, outcome: ItemSuccess | ItemFailure, verbose: bool = False) -> None:
    """Print one line for a settled item."""
    name = escape(outcome.display_name)
    if isinstance(outcome, ItemFailure):
        console.print(f"  [red]✖ {name}[/red]: {escape(outcome.error)}")
        if verbose and outcome.detail:
            console.print(outcome.detail, style="dim", markup=False, highlight=False)
        return

    if outcome.cached:
        console.print(
            f"  [yellow]⏭ {name}[/yellow] "
            f"[dim](cached, {outcome.frame_count} frames)[/dim]"
        )
        return

    line = (
        f"  [green]✔ {name}[/green] "
        f"[dim]{outcome.frame_count} frames in {outcome.elapsed_seconds:.1f}s"
    )
    if outcome.duration_seconds is not None:
        line += f", video {format_duration(outcome.duration_seconds)}"
    console.print(line + "[/dim]")


def summary_line(result: BatchResult) -> str:
    totals = result.totals
    return (
        f"Done: {totals.success_count} extracted, {totals.cached_count} cached, "
        f"{totals.fail_count} failed, {totals.total_frames} frames "
        f"in {result.elapsed_seconds:.1f}s"
    )


def render_summary(console: Console, result: BatchResult) -> None:
    style = "red" if result.totals.fail_count else "green"
    console.print()
    console.print(summary_line(result), style=f"bold {style}")


def render_upload_summary(console: Console, outcome: UploadOutcome, deleting: bool = False) -> None:
    table = Table(title="Upload")
    table.add_column("Uploaded", style="green", justify="right")
    table.add_column("Failed", style="red", justify="right")
    if deleting:
        table.add_column("Deleted locally", style="yellow", justify="right")
        table.add_row(str(outcome.uploaded), str(outcome.failed), str(outcome.deleted_local))
    else:
        table.add_row(str(outcome.uploaded), str(outcome.failed))
    console.print(table)


def render_config(console: Console, settings: dict[str, object], dry_run: bool = False) -> None:
    """Print a panel of configuration values; ``None`` values are omitted."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan")
    table.add_column()
    for key, value in settings.items():
        if value is None:
            continue
        table.add_row(key, str(value))
    if dry_run:
        table.add_row("[yellow]Mode[/yellow]", "[yellow]DRY RUN[/yellow]")
    console.print(Panel(table, title="Configuration", expand=False))


def render_listing(console: Console, title: str, entries: list[str]) -> None:
    console.print(f"[blue]{title}[/blue]")
    for i, entry in enumerate(entries, 1):
        console.print(f"  {i}. {entry}", markup=False, highlight=False)
