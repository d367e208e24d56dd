from __future__ import annotations

import asyncio
import signal
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from github_connections.analysis.differ import diff as diff_snapshots
from github_connections.analysis.graph_builder import build_connection_graph, export_graphml
from github_connections.analysis.mutuals import find_mutual_pairs
from github_connections.config import Settings, get_settings
from github_connections.errors import GitHubError, MalformedInput, RateLimited, Unauthorized
from github_connections.github.client import GitHubClient
from github_connections.logging import configure_logging, get_console, get_logger
from github_connections.models.result import ConnectionResult
from github_connections.rendering import (
    SortColumn,
    diff_table,
    render_connections,
    render_failures,
    render_mutuals,
)
from github_connections.resolver import ConnectionResolver
from github_connections.storage.run_recorder import ProgressCallback
from github_connections.storage.snapshot_store import build_snapshot, load_snapshot, save_snapshot
from github_connections.usernames import parse_usernames, unique_usernames

app = typer.Typer(add_completion=False)
console = Console()
LOGGER = get_logger(__name__)


def progress_bar() -> Progress:
    return Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=get_console(),
        transient=True,
    )


def load_settings(**overrides: object) -> Settings:
    try:
        settings = get_settings()
    except Exception as exc:  # noqa: BLE001
        typer.secho(f"Failed to load settings: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)
    updates = {key: value for key, value in overrides.items() if value is not None}
    return settings.model_copy(update=updates) if updates else settings


def resolve_token(token: Optional[str], settings: Settings) -> str:
    value = (token or "").strip() or settings.token_value()
    if not value:
        typer.secho(
            "Please provide a GitHub Personal Access Token (--token or GITHUB_TOKEN).",
            err=True,
            fg=typer.colors.RED,
        )
        raise typer.Exit(code=1)
    return value


def read_usernames(source: Optional[Path], extra: List[str]) -> List[str]:
    raw: List[str] = []
    if source is not None:
        if str(source) == "-":
            text = typer.get_text_stream("stdin").read()
        else:
            try:
                text = source.expanduser().read_text(encoding="utf-8")
            except OSError as exc:
                typer.secho(f"Could not read {source}: {exc}", err=True, fg=typer.colors.RED)
                raise typer.Exit(code=1)
        raw.extend(parse_usernames(text))
    raw.extend(extra)
    return unique_usernames(raw)


async def run_analysis(
    usernames: List[str],
    token: str,
    settings: Settings,
    on_progress: Optional[ProgressCallback] = None,
) -> ConnectionResult:
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
        handles_sigint = True
    except (NotImplementedError, RuntimeError):
        LOGGER.debug("Ctrl-C cancellation is not available on this platform")
        handles_sigint = False

    try:
        async with GitHubClient(settings=settings) as client:
            resolver = ConnectionResolver(client, settings=settings)
            return await resolver.resolve(usernames, token, on_progress, cancel_event=cancel_event)
    finally:
        if handles_sigint:
            loop.remove_signal_handler(signal.SIGINT)


@app.command()
def check_token(
    token: Optional[str] = typer.Option(None, "--token", help="GitHub Personal Access Token (defaults to GITHUB_TOKEN).", show_default=False),
) -> None:
    """Verify that a token can authenticate against the GitHub API."""
    configure_logging()
    settings = load_settings()
    value = resolve_token(token, settings)

    async def probe() -> str:
        async with GitHubClient(settings=settings) as client:
            return await client.validate_token(value)

    try:
        login = asyncio.run(probe())
    except GitHubError as exc:
        typer.secho(f"Failed to validate token: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.secho(f"Token is valid for {login}", fg=typer.colors.GREEN)


@app.command()
def analyze(
    usernames_file: Optional[Path] = typer.Argument(None, help="File with one GitHub username per line, or '-' for stdin."),
    users: List[str] = typer.Option([], "--user", "-u", help="Additional username; may be repeated."),
    token: Optional[str] = typer.Option(None, "--token", help="GitHub Personal Access Token (defaults to GITHUB_TOKEN).", show_default=False),
    snapshot: Optional[Path] = typer.Option(None, help="Write a snapshot JSON of the results to this path."),
    graphml: Optional[Path] = typer.Option(None, help="Export the connection graph as GraphML."),
    sort_by: SortColumn = typer.Option(SortColumn.NAME, "--sort-by", help="Column used to order the table."),
    descending: bool = typer.Option(False, "--descending/--ascending", help="Sort order of the table."),
    batch_size: Optional[int] = typer.Option(None, min=1, max=100, help="Profiles requested per GitHub call."),
    concurrency: Optional[int] = typer.Option(None, min=1, help="Following lists fetched in parallel."),
) -> None:
    """Find which of the given users follow each other."""
    configure_logging()
    settings = load_settings(batch_size=batch_size, max_concurrency=concurrency)

    usernames = read_usernames(usernames_file, users)
    if len(usernames) < 2:
        typer.secho("Please enter at least two GitHub usernames.", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)
    value = resolve_token(token, settings)

    with progress_bar() as progress:
        task_id = progress.add_task("Analyzing connections...", total=1.0)

        def on_progress(fraction: float) -> None:
            progress.update(task_id, completed=fraction)

        try:
            result = asyncio.run(run_analysis(usernames, value, settings, on_progress))
        except Unauthorized as exc:
            typer.secho(f"Failed to validate token: {exc}", err=True, fg=typer.colors.RED)
            raise typer.Exit(code=1)
        except GitHubError as exc:
            message = f"Error: {exc}"
            if isinstance(exc, RateLimited):
                message += " Please try again later."
            typer.secho(message, err=True, fg=typer.colors.RED)
            raise typer.Exit(code=1)

    result_snapshot = build_snapshot(result)
    render_connections(console, result_snapshot, sort_by=sort_by, descending=descending)
    render_failures(console, result)
    if result.profiles:
        render_mutuals(console, find_mutual_pairs(result))

    if snapshot is not None:
        save_snapshot(result_snapshot, snapshot)
        typer.secho(f"Snapshot saved to {snapshot}", fg=typer.colors.BLUE)

    if graphml is not None:
        graph = build_connection_graph(result)
        export_graphml(graph, graphml)
        typer.secho(
            f"Graph exported with {graph.number_of_nodes()} nodes and {graph.number_of_edges()} edges to {graphml}",
            fg=typer.colors.GREEN,
        )


@app.command()
def diff(
    earlier: Path = typer.Argument(..., help="Snapshot taken first."),
    later: Path = typer.Argument(..., help="Snapshot taken later."),
) -> None:
    """Show how connection counts changed between two snapshots."""
    configure_logging()
    try:
        entries = diff_snapshots(load_snapshot(earlier), load_snapshot(later))
    except (MalformedInput, OSError) as exc:
        typer.secho(f"Error: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if not entries:
        typer.secho("The later snapshot has no rows.", fg=typer.colors.BLUE)
        return
    console.print(diff_table(entries))


def main() -> None:
    app(prog_name="github-connections")


if __name__ == "__main__":
    main()
