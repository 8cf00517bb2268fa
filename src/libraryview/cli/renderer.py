"""Renderers for CLI output.

Turns controller state into Rich tables and panels: library cards, item
detail, identify candidates and batch refresh outcomes. Missing posters are
shown as a placeholder, never as a URL that cannot resolve.
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from libraryview.api.images import PLACEHOLDER, ImageSize, backdrop_url, poster_url
from libraryview.core.refresh import BatchRefreshOutcome
from libraryview.models.library import MediaItemWithMetadata, SearchResult
from libraryview.settings import DEFAULT_IMAGE_BASE_URL


def render_library(
    items: list[MediaItemWithMetadata],
    total: int,
    console: Console | None = None,
    title: str = "Library",
) -> None:
    """Render one card (table row) per item plus a total line."""
    console = console or Console()

    table = Table(title=title)
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Type")
    table.add_column("Year", justify="right")
    table.add_column("Rating", justify="right")
    table.add_column("Size", justify="right")

    for item in items:
        rating = (
            f"{item.metadata.vote_average:.1f}"
            if item.metadata and item.metadata.vote_average is not None
            else "-"
        )
        table.add_row(
            str(item.id),
            escape(item.title),
            item.media_type.value,
            str(item.year) if item.year else "-",
            rating,
            item.file_size_display,
            # Unidentified items are dimmed so they stand out for identify.
            style=None if item.is_identified else "dim",
        )

    console.print(table)
    console.print(f"Showing {len(items)} of {total}")


def render_item_detail(
    item: MediaItemWithMetadata,
    console: Console | None = None,
    image_base_url: str = DEFAULT_IMAGE_BASE_URL,
) -> None:
    """Render the detail panel for one item."""
    console = console or Console()
    meta = item.metadata

    lines = [
        f"[bold]Type:[/bold] {item.media_type.value}",
        f"[bold]File:[/bold] {escape(item.file_path)} ({item.file_size_display})",
        f"[bold]Added:[/bold] {item.added_at}",
    ]
    if meta is None:
        lines.append("[yellow]Not identified yet.[/yellow]")
    else:
        if meta.year:
            lines.append(f"[bold]Year:[/bold] {meta.year}")
        if meta.runtime_display:
            lines.append(f"[bold]Runtime:[/bold] {meta.runtime_display}")
        if meta.genre_list:
            lines.append(f"[bold]Genres:[/bold] {escape(', '.join(meta.genre_list))}")
        if meta.vote_average is not None:
            lines.append(
                f"[bold]Rating:[/bold] {meta.vote_average:.1f} ({meta.vote_count or 0} votes)"
            )
        ids = [
            f"{name}={value}"
            for name, value in (
                ("tmdb", meta.tmdb_id),
                ("tvdb", meta.tvdb_id),
                ("imdb", meta.imdb_id),
            )
            if value
        ]
        if ids:
            lines.append(f"[bold]IDs:[/bold] {' '.join(ids)}")
        if meta.overview:
            lines.append("")
            lines.append(escape(meta.overview))

    poster = poster_url(item, ImageSize.DETAIL, image_base_url) or PLACEHOLDER
    backdrop = backdrop_url(item, image_base_url) or PLACEHOLDER
    lines.append("")
    lines.append(f"[bold]Poster:[/bold] {escape(poster)}")
    lines.append(f"[bold]Backdrop:[/bold] {escape(backdrop)}")

    console.print(Panel("\n".join(lines), title=f"#{item.id} {escape(item.title)}"))


def render_candidates(candidates: list[SearchResult], console: Console | None = None) -> None:
    """Render identify candidates numbered from 1, or the empty notice."""
    console = console or Console()
    if not candidates:
        console.print("No candidates found.", style="yellow")
        return

    table = Table(title="Candidates")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Year", justify="right")
    table.add_column("Type")
    table.add_column("Provider")
    table.add_column("Provider ID")
    for index, candidate in enumerate(candidates, start=1):
        table.add_row(
            str(index),
            escape(candidate.title),
            str(candidate.year) if candidate.year else "-",
            candidate.media_type,
            candidate.provider,
            candidate.id,
        )
    console.print(table)


def render_batch_outcome(outcome: BatchRefreshOutcome, console: Console | None = None) -> None:
    """Render the per-id result of a batch refresh."""
    console = console or Console()

    table = Table(title="Batch refresh")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Result")
    table.add_column("Error")
    for item_id in outcome.requested:
        error = outcome.error_for(item_id)
        if error is None:
            table.add_row(str(item_id), "refreshed", "", style="green")
        else:
            table.add_row(str(item_id), "failed", escape(error), style="red")
    console.print(table)

    console.print(f"Refreshed: {len(outcome.succeeded)} | Failed: {len(outcome.failed)}")
    if outcome.violations:
        console.print(
            f"Server response was inconsistent for: {', '.join(map(str, outcome.violations))}",
            style="red bold",
        )
