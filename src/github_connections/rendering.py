from __future__ import annotations

from enum import Enum
from typing import List, Sequence

from rich.console import Console
from rich.table import Table

from github_connections.models.result import ConnectionResult
from github_connections.models.snapshot import DiffEntry, Snapshot, SnapshotRow

COLUMNS = ("Name", "Following", "Count", "Total Followers", "Total Following")


class SortColumn(str, Enum):
    NAME = "name"
    FOLLOWING = "following"
    COUNT = "count"
    FOLLOWERS = "followers"
    TOTAL_FOLLOWING = "total-following"


def sort_rows(rows: Sequence[SnapshotRow], column: SortColumn, *, descending: bool = False) -> List[SnapshotRow]:
    keys = {
        SortColumn.NAME: lambda row: row.name.casefold(),
        SortColumn.FOLLOWING: lambda row: (row.following or "").casefold(),
        SortColumn.COUNT: lambda row: row.count,
        SortColumn.FOLLOWERS: lambda row: row.total_followers or 0,
        SortColumn.TOTAL_FOLLOWING: lambda row: row.total_following or 0,
    }
    return sorted(rows, key=keys[column], reverse=descending)


def connections_table(
    snapshot: Snapshot,
    *,
    sort_by: SortColumn = SortColumn.NAME,
    descending: bool = False,
) -> Table:
    table = Table(title="GitHub connections", show_lines=False)
    for column in COLUMNS:
        justify = "left" if column in ("Name", "Following") else "right"
        table.add_column(column, justify=justify, overflow="fold")

    for row in sort_rows(snapshot.rows, sort_by, descending=descending):
        exported = row.to_export()
        table.add_row(*(exported[column] for column in COLUMNS))
    return table


def render_connections(
    console: Console,
    snapshot: Snapshot,
    *,
    sort_by: SortColumn = SortColumn.NAME,
    descending: bool = False,
) -> None:
    if not snapshot.rows:
        console.print("No valid connections found.", style="yellow")
        return
    console.print(connections_table(snapshot, sort_by=sort_by, descending=descending))


def render_failures(console: Console, result: ConnectionResult) -> None:
    if not result.failed:
        return
    console.print("Failed to fetch information for the following usernames:", style="bold red")
    for username, reason in result.failed.items():
        console.print(f"  - {username} ({reason.value})")


def render_mutuals(console: Console, pairs: Sequence[tuple]) -> None:
    if not pairs:
        console.print("No mutual follows in this set.", style="blue")
        return
    console.print(f"Found {len(pairs)} mutual follows:", style="green")
    for first, second in pairs:
        console.print(f"  {first} <-> {second}")


def diff_table(entries: Sequence[DiffEntry]) -> Table:
    table = Table(title="Connection growth")
    table.add_column("Name")
    table.add_column("Before", justify="right")
    table.add_column("After", justify="right")
    table.add_column("Change", justify="right")
    for entry in entries:
        style = "green" if entry.delta > 0 else "red" if entry.delta < 0 else None
        table.add_row(entry.name, str(entry.before), str(entry.after), f"{entry.delta:+d}", style=style)
    return table


__all__ = [
    "SortColumn",
    "connections_table",
    "diff_table",
    "render_connections",
    "render_failures",
    "render_mutuals",
    "sort_rows",
]
