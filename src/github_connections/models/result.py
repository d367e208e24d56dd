from __future__ import annotations

from enum import Enum
from typing import Dict, List, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field

from github_connections.models.profile import UserProfile


class FailureReason(str, Enum):
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    TRANSPORT_ERROR = "transport_error"
    CANCELLED = "cancelled"


class ConnectionResult(BaseModel):
    """Who-follows-whom within one analyzed set of usernames.

    ``profiles`` and ``edges`` share the same keys: every resolved username,
    including those that follow nobody in the set. ``failed`` holds the
    usernames that could not be resolved, with the reason.
    """

    model_config = ConfigDict(frozen=True)

    profiles: Dict[str, UserProfile] = Field(default_factory=dict)
    edges: Dict[str, Tuple[UserProfile, ...]] = Field(default_factory=dict)
    failed: Dict[str, FailureReason] = Field(default_factory=dict)

    @property
    def failed_usernames(self) -> Set[str]:
        return set(self.failed)

    def following_logins(self, username: str) -> List[str]:
        return [target.login for target in self.edges.get(username, ())]

    def edge_count(self) -> int:
        return sum(len(targets) for targets in self.edges.values())


__all__ = ["ConnectionResult", "FailureReason"]
