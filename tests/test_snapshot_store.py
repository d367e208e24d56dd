from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from github_connections.analysis.differ import diff
from github_connections.errors import MalformedInput
from github_connections.models.profile import UserProfile
from github_connections.models.result import ConnectionResult, FailureReason
from github_connections.storage.snapshot_store import build_snapshot, load_snapshot, save_snapshot


def profile(login: str, name: str, followers: int = 0, following: int = 0) -> UserProfile:
    return UserProfile(login=login, display_name=name, follower_count=followers, following_count=following)


@pytest.fixture()
def result() -> ConnectionResult:
    alice = profile("alice", "Alice", 120, 30)
    bob = profile("bob", "bob", 7, 2)
    carol = profile("carol", "Carol", 3, 1)
    return ConnectionResult(
        profiles={"carol": carol, "alice": alice, "bob": bob},
        edges={"alice": [bob, carol], "bob": [], "carol": [alice]},
        failed={"ghost": FailureReason.NOT_FOUND},
    )


def test_build_snapshot_matches_export_format(result: ConnectionResult) -> None:
    moment = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    exported = build_snapshot(result, moment).to_export()

    assert exported["timestamp"] == "2026-01-02T03:04:05Z"
    assert exported["data"] == [
        {"Name": "Alice", "Following": "bob, Carol", "Count": "2", "Total Followers": "120", "Total Following": "30"},
        {"Name": "bob", "Following": "None", "Count": "0", "Total Followers": "7", "Total Following": "2"},
        {"Name": "Carol", "Following": "Alice", "Count": "1", "Total Followers": "3", "Total Following": "1"},
    ]


def test_saved_snapshot_loads_back_and_diffs(tmp_path, result: ConnectionResult) -> None:
    path = tmp_path / "snapshots" / "now.json"
    save_snapshot(build_snapshot(result), path)

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert set(payload) == {"timestamp", "data"}

    loaded = load_snapshot(path)
    assert [row.name for row in loaded.rows] == ["Alice", "bob", "Carol"]
    assert loaded.rows[0].following_names == ["bob", "Carol"]
    assert loaded.rows[1].following_names == []
    assert all(entry.delta == 0 for entry in diff(loaded, loaded))


def test_load_snapshot_rejects_invalid_json(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(MalformedInput):
        load_snapshot(path)


def test_empty_result_gives_empty_rows() -> None:
    assert build_snapshot(ConnectionResult()).rows == []


def test_load_snapshot_rejects_non_utf8_bytes(tmp_path) -> None:
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"timestamp": "t", "data": [{"Name": "\xff\xfe", "Count": "1"}]}')

    with pytest.raises(MalformedInput, match="UTF-8"):
        load_snapshot(path)


def test_result_edges_are_immutable(result: ConnectionResult) -> None:
    assert isinstance(result.edges["alice"], tuple)
    assert result.following_logins("alice") == ["bob", "carol"]
    with pytest.raises(AttributeError):
        result.edges["alice"].append(profile("dave", "Dave"))
