from __future__ import annotations

from typing import Optional

from github_connections.models.result import FailureReason


class GitHubError(Exception):
    """Base class for failures reported by the GitHub client."""

    reason: FailureReason = FailureReason.TRANSPORT_ERROR

    def __init__(self, message: str, *, username: Optional[str] = None) -> None:
        super().__init__(message)
        self.username = username


class Unauthorized(GitHubError):
    reason = FailureReason.UNAUTHORIZED


class NotFound(GitHubError):
    reason = FailureReason.NOT_FOUND


class RateLimited(GitHubError):
    reason = FailureReason.RATE_LIMITED

    def __init__(
        self,
        message: str,
        *,
        username: Optional[str] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(message, username=username)
        self.retry_after = retry_after


class TransportError(GitHubError):
    reason = FailureReason.TRANSPORT_ERROR


class MalformedInput(ValueError):
    """A snapshot did not match the export format."""


__all__ = [
    "GitHubError",
    "Unauthorized",
    "NotFound",
    "RateLimited",
    "TransportError",
    "MalformedInput",
]
