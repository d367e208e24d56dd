from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from github_connections.logging import get_logger
from github_connections.models.profile import UserProfile
from github_connections.models.result import ConnectionResult, FailureReason

LOGGER = get_logger(__name__)

ProgressCallback = Callable[[float], None]


@dataclass
class RunRecorder:
    """Accumulates one resolve run and is the only place progress is reported from."""

    total: int
    on_progress: Optional[ProgressCallback] = None
    profiles: Dict[str, UserProfile] = field(default_factory=dict)
    targets: Dict[str, List[str]] = field(default_factory=dict)
    failed: Dict[str, FailureReason] = field(default_factory=dict)
    completed: int = 0

    def record_success(self, username: str, profile: UserProfile, targets: List[str]) -> None:
        self.profiles[username] = profile
        self.targets[username] = targets
        self._advance()

    def record_failure(self, username: str, reason: FailureReason) -> None:
        self.profiles.pop(username, None)
        self.targets.pop(username, None)
        self.failed[username] = reason
        self._advance()

    def _advance(self) -> None:
        self.completed += 1
        if self.on_progress is not None and self.total:
            self.on_progress(self.completed / self.total)

    def build_result(self, order: Iterable[str]) -> ConnectionResult:
        """Freeze the run in input order, keeping only edges whose target resolved."""
        profiles: Dict[str, UserProfile] = {}
        edges: Dict[str, Tuple[UserProfile, ...]] = {}
        failed: Dict[str, FailureReason] = {}
        for username in order:
            if username in self.failed:
                failed[username] = self.failed[username]
                continue
            if username not in self.profiles:
                continue
            profiles[username] = self.profiles[username]
            logins = self.targets.get(username, [])
            edges[username] = tuple(self.profiles[login] for login in logins if login in self.profiles)
            dropped = len(logins) - len(edges[username])
            if dropped:
                LOGGER.debug("Dropped %d edges from %s to unresolved users", dropped, username)
        return ConnectionResult(profiles=profiles, edges=edges, failed=failed)


__all__ = ["RunRecorder", "ProgressCallback"]
