from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from github_connections.errors import MalformedInput
from github_connections.logging import get_logger
from github_connections.models.result import ConnectionResult
from github_connections.models.snapshot import Snapshot, SnapshotRow

LOGGER = get_logger(__name__)


def build_snapshot(result: ConnectionResult, timestamp: Optional[datetime] = None) -> Snapshot:
    """Capture a result as the rows of the exported connections table."""
    moment = timestamp or datetime.now(timezone.utc)
    rows = []
    for username, profile in result.profiles.items():
        following = result.edges.get(username, ())
        rows.append(
            SnapshotRow(
                name=profile.display_name,
                following=", ".join(target.display_name for target in following) or "None",
                count=len(following),
                total_followers=profile.follower_count,
                total_following=profile.following_count,
            )
        )
    rows.sort(key=lambda row: row.name.casefold())
    return Snapshot(timestamp=moment.isoformat().replace("+00:00", "Z"), rows=rows)


def parse_snapshot(payload: Any) -> Snapshot:
    if isinstance(payload, Snapshot):
        return payload
    if not isinstance(payload, Mapping):
        raise MalformedInput("snapshot must be a JSON object")
    try:
        return Snapshot.model_validate(dict(payload))
    except ValidationError as exc:
        raise MalformedInput(f"snapshot is not well-formed: {exc.error_count()} problem(s)\n{exc}") from exc


def save_snapshot(snapshot: Snapshot, path: Path) -> None:
    path = path.expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fp:
        json.dump(snapshot.to_export(), fp, indent=2, ensure_ascii=False)
    LOGGER.info("Snapshot with %d rows written to %s", len(snapshot.rows), path)


def load_snapshot(path: Path) -> Snapshot:
    path = path.expanduser()
    try:
        with path.open("r", encoding="utf-8") as fp:
            payload = json.load(fp)
    except UnicodeDecodeError as exc:
        raise MalformedInput(f"{path} is not UTF-8 text: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise MalformedInput(f"{path} is not valid JSON: {exc}") from exc
    return parse_snapshot(payload)


__all__ = ["build_snapshot", "load_snapshot", "parse_snapshot", "save_snapshot"]
