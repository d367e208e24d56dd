"""Shared fixtures: an in-memory stand-in for the GitHub client."""
from __future__ import annotations

import asyncio
from typing import AsyncIterator, Dict, List, Optional, Sequence, Union

import pytest

from github_connections.config import Settings
from github_connections.errors import GitHubError, Unauthorized
from github_connections.models.profile import FollowingEntry, UserProfile

VALID_TOKEN = "test-token"

FollowingSpec = Union[List[str], Exception]


class FakeGitHubClient:
    """Serves canned profiles and following lists and records every call."""

    def __init__(
        self,
        following: Dict[str, FollowingSpec],
        *,
        max_batch_size: int = 25,
        profile_errors: Optional[Dict[str, GitHubError]] = None,
        delays: Optional[Dict[str, float]] = None,
        default_delay: float = 0.0,
    ) -> None:
        self.following = following
        self.max_batch_size = max_batch_size
        self.profile_errors = profile_errors or {}
        self.delays = delays or {}
        self.default_delay = default_delay
        self.validated_tokens: List[str] = []
        self.profile_calls: List[List[str]] = []
        self.following_calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __aenter__(self) -> "FakeGitHubClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    async def validate_token(self, token: str) -> str:
        self.validated_tokens.append(token)
        if token != VALID_TOKEN:
            raise Unauthorized("Invalid token or insufficient permissions")
        return "tester"

    async def fetch_profiles(self, usernames: Sequence[str], token: str) -> Dict[str, UserProfile]:
        self.profile_calls.append(list(usernames))
        for username in usernames:
            if username in self.profile_errors:
                raise self.profile_errors[username]
        return {
            username: UserProfile(
                login=username,
                display_name=username.title(),
                follower_count=10 * (index + 1),
                following_count=len(self.following[username]) if isinstance(self.following[username], list) else 0,
            )
            for index, username in enumerate(usernames)
            if username in self.following
        }

    async def fetch_following(self, username: str, token: str) -> AsyncIterator[FollowingEntry]:
        self.following_calls.append(username)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(username, self.default_delay)
            if delay:
                await asyncio.sleep(delay)
            spec = self.following[username]
            if isinstance(spec, Exception):
                raise spec
            for login in spec:
                yield FollowingEntry(login=login, display_name=login.title())
        finally:
            self.in_flight -= 1


@pytest.fixture()
def settings() -> Settings:
    return Settings(github_token=None, batch_size=25, max_concurrency=4, request_timeout_seconds=5.0)

