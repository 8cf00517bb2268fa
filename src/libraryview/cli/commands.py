"""CLI commands for libraryview.

A terminal front end over the controllers: list a library view, show an
item, refresh metadata and run the identify workflow.
- Uses Typer for declarative CLI structure and option parsing.
- All output is routed through a Rich Console (see console.py).
- One HttpTransport is built per invocation and injected into every
  controller the command uses.
"""

import asyncio
import json
import os
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.traceback import install as install_traceback

from libraryview.__about__ import __version__
from libraryview.api.library import LibraryApi
from libraryview.api.transport import HttpTransport
from libraryview.cli.console import ENV_DISABLE_RICH, make_console
from libraryview.cli.renderer import (
    render_batch_outcome,
    render_candidates,
    render_item_detail,
    render_library,
)
from libraryview.core.coordinator import Attempt
from libraryview.core.detail_controller import ItemDetailController
from libraryview.core.identify import IdentificationWorkflow
from libraryview.core.list_controller import LibraryListController, QueryState
from libraryview.core.refresh import BatchRefreshOutcome, MetadataRefreshService
from libraryview.models.library import LibraryKind, SearchResult, SortKey, SortOrder
from libraryview.settings import Settings
from libraryview.utils.config import CONFIG_FILE, get_server_url, set_server_url
from libraryview.utils.debug import setup_logger

install_traceback(show_locals=False)

app = typer.Typer(
    name="libraryview",
    help="Browse a media library server, refresh and re-identify items.",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Show or change persistent settings.")
app.add_typer(config_app, name="config")


class ExitCode(int, Enum):
    """Exit codes for CLI commands."""

    SUCCESS = 0
    ERROR = 1


@dataclass
class CliState:
    """Per-invocation settings shared by all commands."""

    settings: Settings


@asynccontextmanager
async def open_api(settings: Settings) -> AsyncIterator[LibraryApi]:
    """Build the shared transport for one command and close it afterwards."""
    async with HttpTransport.from_settings(settings) as transport:
        yield LibraryApi(transport)


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj.settings if isinstance(ctx.obj, CliState) else Settings()


def _report_candidates(console: Console) -> Callable[[Attempt[list[SearchResult]]], None]:
    """Listener printing the size of each applied candidate search."""

    def listener(attempt: Attempt[list[SearchResult]]) -> None:
        if attempt.ok:
            found = len(attempt.value or [])
            console.print(f"Found {found} candidates for item {attempt.key}.", style="dim")

    return listener


def _report_batch(console: Console) -> Callable[[Attempt[BatchRefreshOutcome]], None]:
    """Listener printing when a batch refresh response has been reconciled."""

    def listener(attempt: Attempt[BatchRefreshOutcome]) -> None:
        if attempt.ok and attempt.value is not None:
            console.print(
                f"Batch refresh answered for {len(attempt.value.requested)} items.",
                style="dim",
            )

    return listener


SERVER = Annotated[
    Optional[str],
    typer.Option("--server", "-s", help="Library server URL (overrides config and env)."),
]


@app.callback()
def callback(
    ctx: typer.Context,
    server: SERVER = None,
    debug: Annotated[
        bool, typer.Option("--debug", help="Enable debug logging.")
    ] = False,
    no_rich: Annotated[
        bool,
        typer.Option(
            "--no-rich",
            help="Disable coloured output. Also set by LIBRARYVIEW_NO_RICH.",
        ),
    ] = False,
) -> None:
    """Global options."""
    if no_rich:
        os.environ[ENV_DISABLE_RICH] = "1"
    setup_logger(debug=True if debug else None)
    base = Settings()
    ctx.obj = CliState(
        settings=base.model_copy(
            update={"server_url": get_server_url(base.server_url, cli_value=server)}
        )
    )


@app.command("list")
def list_command(
    ctx: typer.Context,
    kind: Annotated[
        LibraryKind, typer.Option("--kind", "-k", help="Which listing to show.")
    ] = LibraryKind.ALL,
    search: Annotated[str, typer.Option("--search", "-q", help="Title filter.")] = "",
    sort: Annotated[SortKey, typer.Option("--sort", help="Sort field.")] = SortKey.ADDED,
    order: Annotated[SortOrder, typer.Option("--order", help="Sort order.")] = SortOrder.DESC,
    page: Annotated[Optional[int], typer.Option("--page", min=1)] = None,
    limit: Annotated[Optional[int], typer.Option("--limit", min=1)] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print items as JSON.")] = False,
) -> None:
    """List library items."""
    settings = _settings(ctx)
    state = QueryState(search=search, sort=sort, order=order, page=page, limit=limit)

    async def run() -> LibraryListController:
        async with open_api(settings) as api:
            controller = LibraryListController(api, kind, state)
            await controller.load()
            return controller

    controller = asyncio.run(run())
    console = make_console()
    if controller.error is not None:
        console.print(f"Error: {controller.error}", style="red bold")
        raise typer.Exit(ExitCode.ERROR)
    if as_json:
        payload = {
            "items": [item.model_dump(mode="json") for item in controller.items],
            "total": controller.total,
        }
        typer.echo(json.dumps(payload, indent=2))
        return
    if controller.is_empty:
        console.print("No items match.", style="yellow")
        return
    render_library(
        controller.items, controller.total, console, title=f"Library: {kind.value}"
    )


@app.command()
def show(
    ctx: typer.Context,
    item_id: Annotated[int, typer.Argument(help="Media item id.")],
) -> None:
    """Show one item with its metadata."""
    settings = _settings(ctx)

    async def run() -> ItemDetailController:
        async with open_api(settings) as api:
            detail = ItemDetailController(api)
            await detail.mount(item_id)
            return detail

    detail = asyncio.run(run())
    console = make_console()
    if detail.error is not None or detail.item is None:
        console.print(f"Error: {detail.error}", style="red bold")
        raise typer.Exit(ExitCode.ERROR)
    render_item_detail(detail.item, console, settings.image_base_url)


@app.command()
def refresh(
    ctx: typer.Context,
    item_ids: Annotated[list[int], typer.Argument(help="One or more media item ids.")],
) -> None:
    """Refresh metadata for one item, or several as a batch."""
    settings = _settings(ctx)
    console = make_console()

    async def run() -> Attempt[Any]:
        async with open_api(settings) as api:
            service = MetadataRefreshService(api)
            service.batch.subscribe(_report_batch(console))
            if len(item_ids) == 1:
                return await service.refresh_one(item_ids[0])
            return await service.refresh_batch(item_ids)

    attempt = asyncio.run(run())
    if not attempt.ok:
        console.print(f"Error: {attempt.error}", style="red bold")
        raise typer.Exit(ExitCode.ERROR)
    if len(item_ids) == 1:
        console.print(f"Item {item_ids[0]}: {attempt.value}", style="green")
        return
    outcome = attempt.value
    render_batch_outcome(outcome, console)
    if not outcome.all_succeeded:
        raise typer.Exit(ExitCode.ERROR)


@app.command()
def identify(
    ctx: typer.Context,
    item_id: Annotated[int, typer.Argument(help="Media item id.")],
    pick: Annotated[
        Optional[int],
        typer.Option("--pick", "-p", min=1, help="Apply the N-th candidate (1-based)."),
    ] = None,
) -> None:
    """Search provider candidates for an item and optionally apply one."""
    settings = _settings(ctx)
    console = make_console()

    async def run() -> tuple[IdentificationWorkflow, ItemDetailController]:
        async with open_api(settings) as api:
            detail = ItemDetailController(api)

            async def reload_detail(_: int) -> None:
                await detail.reload()

            workflow = IdentificationWorkflow(api, on_applied=reload_detail)
            workflow.search.subscribe(_report_candidates(console))
            await detail.mount(item_id)
            await workflow.open(item_id)
            if pick is None or workflow.error is not None:
                return workflow, detail
            render_candidates(workflow.candidates, console)
            if pick > len(workflow.candidates):
                console.print(
                    f"There are only {len(workflow.candidates)} candidates.",
                    style="red bold",
                )
                workflow.cancel()
                return workflow, detail
            await workflow.select(workflow.candidates[pick - 1])
            return workflow, detail

    workflow, detail = asyncio.run(run())
    if workflow.error is not None:
        console.print(f"Error: {workflow.error}", style="red bold")
        raise typer.Exit(ExitCode.ERROR)
    if pick is None:
        render_candidates(workflow.candidates, console)
        return
    if workflow.status_message is None:
        raise typer.Exit(ExitCode.ERROR)
    console.print(workflow.status_message, style="green")
    if detail.item is not None:
        render_item_detail(detail.item, console, settings.image_base_url)


@config_app.command("set-server")
def config_set_server(url: Annotated[str, typer.Argument(help="Server base URL.")]) -> None:
    """Persist the library server URL."""
    set_server_url(url)
    make_console().print(f"Server URL saved to {CONFIG_FILE}")


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective settings."""
    settings = _settings(ctx)
    console = make_console()
    console.print(f"server_url: {settings.server_url}")
    console.print(f"request_timeout: {settings.request_timeout}")
    console.print(f"image_base_url: {settings.image_base_url}")


@app.command()
def version() -> None:
    """Show the version of libraryview."""
    make_console().print(f"libraryview version: [bold]{__version__}[/bold]")


if __name__ == "__main__":
    app()
