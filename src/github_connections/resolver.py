from __future__ import annotations

import asyncio
from typing import AsyncIterator, Awaitable, Iterable, List, Optional, Sequence, Set, TypeVar

from github_connections.config import Settings, get_settings
from github_connections.errors import GitHubError, TransportError
from github_connections.github.base import GitHubClientProtocol
from github_connections.logging import get_logger
from github_connections.models.profile import FollowingEntry, UserProfile
from github_connections.models.result import ConnectionResult, FailureReason
from github_connections.storage.run_recorder import ProgressCallback, RunRecorder
from github_connections.usernames import normalize, unique_usernames

LOGGER = get_logger(__name__)

T = TypeVar("T")


class ConnectionResolver:
    """Resolves which members of a username set follow which other members.

    Profiles are fetched a batch at a time; each resolved member's complete
    following list is then fetched and filtered down to the set. A failure
    only ever costs the username it belongs to, except for the token probe
    that runs before any batch work.
    """

    def __init__(
        self,
        client: GitHubClientProtocol,
        *,
        settings: Optional[Settings] = None,
        batch_size: Optional[int] = None,
        max_concurrency: Optional[int] = None,
        call_timeout: Optional[float] = None,
    ) -> None:
        self.client = client
        self.settings = settings or get_settings()
        self.batch_size = batch_size or getattr(client, "max_batch_size", None) or self.settings.batch_size
        self.max_concurrency = max_concurrency or self.settings.max_concurrency
        self.call_timeout = call_timeout or self.settings.request_timeout_seconds

    async def resolve(
        self,
        usernames: Iterable[str],
        token: str,
        on_progress: Optional[ProgressCallback] = None,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ConnectionResult:
        members = unique_usernames(usernames)
        if not members:
            return ConnectionResult()

        await self._call(self.client.validate_token(token))

        member_set = set(members)
        recorder = RunRecorder(total=len(members), on_progress=on_progress)
        semaphore = asyncio.Semaphore(self.max_concurrency)
        batches = [members[start : start + self.batch_size] for start in range(0, len(members), self.batch_size)]
        LOGGER.info("Resolving %d users in %d batches", len(members), len(batches))

        for index, batch in enumerate(batches, start=1):
            if _cancelled(cancel_event):
                LOGGER.info("Cancelled before batch %d; %d users not attempted", index, len(batch))
                for username in batch:
                    recorder.record_failure(username, FailureReason.CANCELLED)
                continue

            try:
                profiles = await self._call(self.client.fetch_profiles(batch, token))
            except GitHubError as exc:
                LOGGER.warning("Profile lookup failed for batch %d: %s", index, exc)
                for username in batch:
                    recorder.record_failure(username, exc.reason)
                continue
            except Exception as exc:  # noqa: BLE001
                LOGGER.error("Unexpected error in profile lookup for batch %d: %s", index, exc)
                for username in batch:
                    recorder.record_failure(username, FailureReason.TRANSPORT_ERROR)
                continue

            resolved = []
            for username in batch:
                profile = profiles.get(username)
                if profile is None:
                    LOGGER.warning("GitHub user %s could not be resolved", username)
                    recorder.record_failure(username, FailureReason.NOT_FOUND)
                else:
                    resolved.append((username, profile))

            await asyncio.gather(
                *(
                    self._resolve_member(username, profile, token, member_set, recorder, semaphore, cancel_event)
                    for username, profile in resolved
                )
            )
            LOGGER.debug("Batch %d/%d done (%d/%d users)", index, len(batches), recorder.completed, recorder.total)

        result = recorder.build_result(members)
        LOGGER.info(
            "Resolved %d users with %d connections; %d failed",
            len(result.profiles),
            result.edge_count(),
            len(result.failed),
        )
        return result

    async def _resolve_member(
        self,
        username: str,
        profile: UserProfile,
        token: str,
        member_set: Set[str],
        recorder: RunRecorder,
        semaphore: asyncio.Semaphore,
        cancel_event: Optional[asyncio.Event],
    ) -> None:
        async with semaphore:
            if _cancelled(cancel_event):
                recorder.record_failure(username, FailureReason.CANCELLED)
                return
            try:
                following = await self._collect_following(username, token)
            except GitHubError as exc:
                LOGGER.warning("Following lookup failed for %s: %s", username, exc)
                recorder.record_failure(username, exc.reason)
                return
            except Exception as exc:  # noqa: BLE001
                LOGGER.error("Unexpected error while resolving %s: %s", username, exc)
                recorder.record_failure(username, FailureReason.TRANSPORT_ERROR)
                return

        recorder.record_success(username, profile, filter_following(username, following, member_set))

    async def _collect_following(self, username: str, token: str) -> List[FollowingEntry]:
        entries: List[FollowingEntry] = []
        iterator = self.client.fetch_following(username, token).__aiter__()
        try:
            while True:
                entry = await self._call(_next_entry(iterator))
                if entry is None:
                    break
                entries.append(entry)
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()
        return entries

    async def _call(self, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.call_timeout)
        except asyncio.TimeoutError as exc:
            raise TransportError(f"GitHub call exceeded {self.call_timeout}s") from exc


def filter_following(username: str, following: Sequence[FollowingEntry], member_set: Set[str]) -> List[str]:
    """Keep the logins ``username`` follows inside the set, in order, without itself."""
    targets: List[str] = []
    for entry in following:
        login = normalize(entry.login)
        if login == username or login not in member_set or login in targets:
            continue
        targets.append(login)
    return targets


async def _next_entry(iterator: AsyncIterator[FollowingEntry]) -> Optional[FollowingEntry]:
    try:
        return await iterator.__anext__()
    except StopAsyncIteration:
        return None


def _cancelled(cancel_event: Optional[asyncio.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()


__all__ = ["ConnectionResolver", "filter_following"]
