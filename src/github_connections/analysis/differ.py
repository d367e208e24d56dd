from __future__ import annotations

from typing import Any, Dict, List

from github_connections.models.snapshot import DiffEntry
from github_connections.storage.snapshot_store import parse_snapshot


def diff(earlier: Any, later: Any) -> List[DiffEntry]:
    """Compare connection counts of two snapshots, matched by row name.

    Results follow ``later``'s rows, biggest growth first; rows with equal
    growth keep their order in ``later``. A name missing from ``earlier``
    counts as zero before.
    """
    before_snapshot = parse_snapshot(earlier)
    after_snapshot = parse_snapshot(later)

    before: Dict[str, int] = {}
    for row in before_snapshot.rows:
        before.setdefault(row.name, row.count)

    entries = [
        DiffEntry(
            name=row.name,
            before=before.get(row.name, 0),
            after=row.count,
            delta=row.count - before.get(row.name, 0),
        )
        for row in after_snapshot.rows
    ]
    return sorted(entries, key=lambda entry: entry.delta, reverse=True)


__all__ = ["diff"]
