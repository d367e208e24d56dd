from github_connections.models.profile import FollowingEntry, UserProfile
from github_connections.models.result import ConnectionResult, FailureReason
from github_connections.models.snapshot import DiffEntry, Snapshot, SnapshotRow

__all__ = [
    "ConnectionResult",
    "DiffEntry",
    "FailureReason",
    "FollowingEntry",
    "Snapshot",
    "SnapshotRow",
    "UserProfile",
]
