from __future__ import annotations

from typing import AsyncIterator, Dict, Protocol, Sequence

from github_connections.models.profile import FollowingEntry, UserProfile


class GitHubClientProtocol(Protocol):
    """Operations the resolver needs from a GitHub transport.

    Every method may raise one of the ``GitHubError`` subclasses.
    """

    max_batch_size: int

    async def validate_token(self, token: str) -> str:
        """Return the login the token belongs to."""
        ...

    async def fetch_profiles(self, usernames: Sequence[str], token: str) -> Dict[str, UserProfile]:
        """Map each resolvable username to its profile; unknown users are left out."""
        ...

    def fetch_following(self, username: str, token: str) -> AsyncIterator[FollowingEntry]:
        """Yield every account ``username`` follows, across all pages."""
        ...


__all__ = ["GitHubClientProtocol"]
