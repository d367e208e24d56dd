from __future__ import annotations

import time
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Sequence

import httpx

from github_connections.config import Settings, get_settings
from github_connections.errors import (
    GitHubError,
    NotFound,
    RateLimited,
    TransportError,
    Unauthorized,
)
from github_connections.github.queries import (
    FOLLOWING_QUERY,
    build_profiles_query,
    following_variables,
    profile_alias,
)
from github_connections.logging import get_logger
from github_connections.models.profile import FollowingEntry, UserProfile

LOGGER = get_logger(__name__)

GRAPHQL_ERROR_TYPES = {
    "NOT_FOUND": NotFound,
    "RATE_LIMITED": RateLimited,
    "UNAUTHORIZED": Unauthorized,
    "FORBIDDEN": Unauthorized,
}


def chunked(values: Sequence[str], size: int) -> Iterable[Sequence[str]]:
    for start in range(0, len(values), size):
        yield values[start : start + size]


def _retry_after(response: httpx.Response) -> Optional[float]:
    retry_after = response.headers.get("retry-after")
    if retry_after:
        try:
            return float(retry_after)
        except ValueError:
            return None
    reset = response.headers.get("x-ratelimit-reset")
    if reset:
        try:
            return max(float(reset) - time.time(), 0.0)
        except ValueError:
            return None
    return None


def _is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code == 429:
        return True
    if response.status_code != 403:
        return False
    return response.headers.get("x-ratelimit-remaining") == "0" or "retry-after" in response.headers


def raise_for_status(response: httpx.Response, *, username: Optional[str] = None) -> None:
    """Translate an unsuccessful GitHub response into a ``GitHubError``."""
    if response.is_success:
        return

    status = response.status_code
    if _is_rate_limited(response):
        raise RateLimited(
            f"GitHub rate limit reached (HTTP {status})",
            username=username,
            retry_after=_retry_after(response),
        )
    if status in (401, 403):
        raise Unauthorized("Invalid token or insufficient permissions", username=username)
    if status == 404:
        raise NotFound(f"GitHub resource not found: {response.request.url.path}", username=username)
    raise TransportError(f"GitHub API error: HTTP {status}", username=username)


def _graphql_error(errors: List[Dict[str, Any]], *, username: Optional[str] = None) -> GitHubError:
    first = errors[0]
    error_cls = GRAPHQL_ERROR_TYPES.get(first.get("type", ""), TransportError)
    message = first.get("message") or "GitHub GraphQL error"
    return error_cls(message, username=username)


def _profile_from_node(node: Dict[str, Any]) -> UserProfile:
    login = node["login"]
    return UserProfile(
        login=login,
        display_name=node.get("name") or login,
        follower_count=(node.get("followers") or {}).get("totalCount", 0),
        following_count=(node.get("following") or {}).get("totalCount", 0),
    )


class GitHubClient:
    """Async GitHub GraphQL client covering profile and following lookups.

    Tokens are supplied per call and only ever placed in request headers.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.max_batch_size = self.settings.batch_size
        self.page_size = self.settings.page_size
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.request_timeout_seconds)
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": self.settings.user_agent,
        }

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        url: str,
        token: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        username: Optional[str] = None,
    ) -> Dict[str, Any]:
        try:
            response = await self._get_client().request(
                method,
                url,
                headers=self._headers(token),
                json=json_body,
            )
        except httpx.TimeoutException as exc:
            raise TransportError(f"GitHub request timed out: {exc}", username=username) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"GitHub request failed: {exc}", username=username) from exc

        raise_for_status(response, username=username)
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError("GitHub returned a non-JSON body", username=username) from exc
        if not isinstance(payload, dict):
            raise TransportError("GitHub returned an unexpected payload", username=username)
        return payload

    async def _graphql(
        self,
        query: str,
        variables: Dict[str, Any],
        token: str,
        *,
        username: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self._send(
            "POST",
            self.settings.github_graphql_url,
            token,
            json_body={"query": query, "variables": variables},
            username=username,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def validate_token(self, token: str) -> str:
        """Probe ``GET /user`` and return the authenticated login."""
        payload = await self._send("GET", f"{self.settings.github_api_url}/user", token)
        login = payload.get("login")
        if not login:
            raise TransportError("GitHub did not report a login for the token")
        LOGGER.debug("Token belongs to %s", login)
        return login

    async def fetch_profiles(self, usernames: Sequence[str], token: str) -> Dict[str, UserProfile]:
        profiles: Dict[str, UserProfile] = {}
        for batch in chunked(list(usernames), self.max_batch_size):
            query, variables = build_profiles_query(batch)
            payload = await self._graphql(query, variables, token)

            errors = [error for error in payload.get("errors") or [] if error.get("type") != "NOT_FOUND"]
            if errors:
                raise _graphql_error(errors)

            data = payload.get("data") or {}
            for index, username in enumerate(batch):
                node = data.get(profile_alias(index))
                if not node:
                    LOGGER.debug("No GitHub user for %s", username)
                    continue
                try:
                    profiles[username] = _profile_from_node(node)
                except (KeyError, TypeError, ValueError) as exc:
                    raise TransportError(f"Malformed profile for {username}: {exc}", username=username) from exc
        return profiles

    async def fetch_following(self, username: str, token: str) -> AsyncIterator[FollowingEntry]:
        cursor: Optional[str] = None
        page = 0
        while True:
            payload = await self._graphql(
                FOLLOWING_QUERY,
                following_variables(username, self.page_size, cursor),
                token,
                username=username,
            )
            if payload.get("errors"):
                raise _graphql_error(payload["errors"], username=username)

            user = (payload.get("data") or {}).get("user")
            if user is None:
                raise NotFound(f"GitHub user {username} not found", username=username)

            try:
                following = user["following"]
                nodes = following.get("nodes") or []
                page_info = following["pageInfo"]
            except (KeyError, TypeError) as exc:
                raise TransportError(f"Malformed following page for {username}", username=username) from exc

            page += 1
            LOGGER.debug("Following page %d for %s: %d entries", page, username, len(nodes))
            for node in nodes:
                if not node or not node.get("login"):
                    continue
                yield FollowingEntry(login=node["login"], display_name=node.get("name") or node["login"])

            if not page_info.get("hasNextPage"):
                break
            next_cursor = page_info.get("endCursor")
            if not next_cursor or next_cursor == cursor:
                raise TransportError(
                    f"Following pagination for {username} did not advance past page {page}",
                    username=username,
                )
            cursor = next_cursor


__all__ = ["GitHubClient", "chunked", "raise_for_status"]
