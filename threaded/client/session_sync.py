"""
Fork-on-first-write session synchronization.

A reader of a shared session does not hold its owner token. The first
mutation they attempt forks the session (or reuses a fork this client
already made), switches the visible session to the fork, remaps thread
and message ids, and then sends the mutation to the fork.

State machine:

    OWNER            created here; writes go straight through
    NOT_OWNER        shared link; the next write forks
    FORK_IN_FLIGHT   a fork request is outstanding; other writes wait on it
    OWNER_OF_FORK    writes go to the fork

Dependencies: asyncio, threaded.client.api_client, threaded.client.ownership
System role: Client-side reconciliation of writes with session ownership
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, TypeVar

from threaded.client.api_client import ApiError, ThreadedApiClient
from threaded.client.ownership import OwnershipRecord, OwnershipStore
from threaded.models.message import AddMessageResponse, UpdateMessageResponse
from threaded.models.thread import CreateThreadResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SyncState(str, Enum):
    OWNER = "owner"
    NOT_OWNER = "not_owner"
    FORK_IN_FLIGHT = "fork_in_flight"
    OWNER_OF_FORK = "owner_of_fork"


class SyncEvent(str, Enum):
    FORK_REQUESTED = "fork_requested"
    FORK_SUCCEEDED = "fork_succeeded"
    FORK_FAILED = "fork_failed"
    EXISTING_FORK_FOUND = "existing_fork_found"
    OWNERSHIP_REVOKED = "ownership_revoked"


_TRANSITIONS: dict[tuple[SyncState, SyncEvent], SyncState] = {
    (SyncState.NOT_OWNER, SyncEvent.FORK_REQUESTED): SyncState.FORK_IN_FLIGHT,
    (SyncState.NOT_OWNER, SyncEvent.EXISTING_FORK_FOUND): SyncState.OWNER_OF_FORK,
    (SyncState.FORK_IN_FLIGHT, SyncEvent.FORK_SUCCEEDED): SyncState.OWNER_OF_FORK,
    (SyncState.FORK_IN_FLIGHT, SyncEvent.FORK_FAILED): SyncState.NOT_OWNER,
    (SyncState.OWNER, SyncEvent.OWNERSHIP_REVOKED): SyncState.NOT_OWNER,
    (SyncState.OWNER_OF_FORK, SyncEvent.OWNERSHIP_REVOKED): SyncState.NOT_OWNER,
}

_WRITABLE = (SyncState.OWNER, SyncState.OWNER_OF_FORK)


class SessionSyncError(Exception):
    """A synchronized write failed. `message` is safe to show to the user."""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.message = message
        self.status = status
        super().__init__(message)


def next_state(state: SyncState, event: SyncEvent) -> SyncState:
    """
    Transition function of the synchronization state machine.

    Raises:
        SessionSyncError: If `event` is not valid in `state`
    """
    try:
        return _TRANSITIONS[(state, event)]
    except KeyError:
        raise SessionSyncError(f"Invalid sync transition: {event.value} in {state.value}")


class SessionSynchronizer:
    """
    Routes mutations of one visible session to a session this client owns.

    Args:
        client: API client
        store: Ownership records
        session_id: Session currently shown
        on_session_change: Called with the new id when the visible session changes
        on_ids_remapped: Called with (thread_id_map, message_id_map) after a fork
    """

    def __init__(
        self,
        client: ThreadedApiClient,
        store: OwnershipStore,
        session_id: str,
        on_session_change: Callable[[str], None] | None = None,
        on_ids_remapped: Callable[[dict[str, str], dict[str, str]], None] | None = None,
    ) -> None:
        self.client = client
        self.store = store
        self.session_id = session_id
        self.on_session_change = on_session_change
        self.on_ids_remapped = on_ids_remapped

        self.state = SyncState.OWNER if store.is_owner(session_id) else SyncState.NOT_OWNER
        self._thread_id_map: dict[str, str] = {}
        self._message_id_map: dict[str, str] = {}
        self._fork_lock = asyncio.Lock()
        self._thread_locks: dict[str, asyncio.Lock] = {}

    @classmethod
    async def create(
        cls,
        client: ThreadedApiClient,
        store: OwnershipStore,
        markdown_content: str,
        **callbacks: Any,
    ) -> "SessionSynchronizer":
        """Create a session on the server and return a synchronizer that owns it."""
        try:
            result = await client.create_session(markdown_content)
        except ApiError as e:
            raise SessionSyncError(e.message or "Failed to create session", e.status) from e
        store.set(result.session_id, OwnershipRecord(owner_token=result.owner_token))
        return cls(client, store, result.session_id, **callbacks)

    @property
    def is_owner(self) -> bool:
        return self.state in _WRITABLE

    def _transition(self, event: SyncEvent) -> None:
        previous = self.state
        self.state = next_state(self.state, event)
        logger.debug(
            "Session sync transition",
            extra={
                "session_id": self.session_id,
                "event": event.value,
                "from_state": previous.value,
                "to_state": self.state.value,
            },
        )

    def resolve_thread_id(self, thread_id: str) -> str:
        """Thread id in the session that writes currently go to."""
        return self._thread_id_map.get(thread_id, thread_id)

    def resolve_message_id(self, message_id: str) -> str:
        return self._message_id_map.get(message_id, message_id)

    def _thread_lock(self, thread_id: str) -> asyncio.Lock:
        lock = self._thread_locks.get(thread_id)
        if lock is None:
            lock = self._thread_locks[thread_id] = asyncio.Lock()
        return lock

    def _owner_token(self) -> str:
        record = self.store.get(self.session_id)
        if record is None:
            raise SessionSyncError("Ownership record missing for session")
        return record.owner_token

    def _adopt(self, session_id: str, record: OwnershipRecord, event: SyncEvent) -> None:
        self.session_id = session_id
        self._thread_id_map = dict(record.thread_id_map)
        self._message_id_map = dict(record.message_id_map)
        self._transition(event)

        if self.on_session_change:
            self.on_session_change(session_id)
        if self.on_ids_remapped and (self._thread_id_map or self._message_id_map):
            self.on_ids_remapped(dict(self._thread_id_map), dict(self._message_id_map))

    async def ensure_writable(self) -> tuple[str, str]:
        """
        Make sure writes have an owned target, forking if necessary.

        Concurrent callers share one fork: whoever takes the lock first
        forks, the rest find the state already switched.

        Returns:
            tuple[str, str]: (session id to write to, its owner token)

        Raises:
            SessionSyncError: If the fork request fails
        """
        if self.is_owner:
            return self.session_id, self._owner_token()

        async with self._fork_lock:
            if self.is_owner:
                return self.session_id, self._owner_token()

            original_id = self.session_id
            existing = self.store.find_fork(original_id)
            if existing is not None:
                record = self.store.get(existing)
                logger.info(
                    "Reusing existing fork",
                    extra={"original_id": original_id, "session_id": existing},
                )
                self._adopt(existing, record, SyncEvent.EXISTING_FORK_FOUND)
                return self.session_id, record.owner_token

            self._transition(SyncEvent.FORK_REQUESTED)
            try:
                result = await self.client.fork_session(original_id)
            except ApiError as e:
                self._transition(SyncEvent.FORK_FAILED)
                raise SessionSyncError(e.message or "Failed to fork session", e.status) from e
            except Exception as e:
                self._transition(SyncEvent.FORK_FAILED)
                raise SessionSyncError("Failed to fork session") from e
            except BaseException:
                # Cancelled mid-fork; the next write starts over.
                self._transition(SyncEvent.FORK_FAILED)
                raise

            record = OwnershipRecord(
                owner_token=result.owner_token,
                forked_from=original_id,
                thread_id_map=result.thread_id_map,
                message_id_map=result.message_id_map,
            )
            self.store.set(result.session_id, record)
            logger.info(
                "Forked shared session",
                extra={"original_id": original_id, "session_id": result.session_id},
            )
            self._adopt(result.session_id, record, SyncEvent.FORK_SUCCEEDED)
            return self.session_id, record.owner_token

    async def _call(self, request: Awaitable[T], fallback: str) -> T:
        try:
            return await request
        except ApiError as e:
            raise SessionSyncError(e.message or fallback, e.status) from e

    async def add_thread(
        self,
        context: str,
        snippet: str,
        thread_type: str = "discussion",
    ) -> CreateThreadResponse:
        session_id, token = await self.ensure_writable()
        return await self._call(
            self.client.add_thread(session_id, token, context, snippet, thread_type),
            "Failed to add thread",
        )

    async def delete_thread(self, thread_id: str) -> None:
        session_id, token = await self.ensure_writable()
        thread_id = self.resolve_thread_id(thread_id)
        async with self._thread_lock(thread_id):
            await self._call(
                self.client.delete_thread(session_id, token, thread_id),
                "Failed to delete thread",
            )

    async def add_message(
        self,
        thread_id: str,
        role: str,
        text: str,
        parts: list[dict[str, Any]] | None = None,
    ) -> AddMessageResponse:
        """
        Append a message, forking first if this client does not own the session.

        `thread_id` may be an id from before the fork; it is remapped.
        """
        session_id, token = await self.ensure_writable()
        thread_id = self.resolve_thread_id(thread_id)
        async with self._thread_lock(thread_id):
            return await self._call(
                self.client.add_message(session_id, token, thread_id, role, text, parts),
                "Failed to add message",
            )

    async def update_message(self, thread_id: str, message_id: str, text: str) -> UpdateMessageResponse:
        session_id, token = await self.ensure_writable()
        thread_id = self.resolve_thread_id(thread_id)
        message_id = self.resolve_message_id(message_id)
        async with self._thread_lock(thread_id):
            return await self._call(
                self.client.update_message(session_id, token, thread_id, message_id, text),
                "Failed to update message",
            )

    async def truncate_thread(self, thread_id: str, after_message_id: str) -> None:
        session_id, token = await self.ensure_writable()
        thread_id = self.resolve_thread_id(thread_id)
        after_message_id = self.resolve_message_id(after_message_id)
        async with self._thread_lock(thread_id):
            await self._call(
                self.client.truncate_thread(session_id, token, thread_id, after_message_id),
                "Failed to truncate thread",
            )

    async def delete_session(self) -> None:
        """
        Delete the visible session. Only possible for sessions this client owns.

        Raises:
            SessionSyncError: If not the owner, or the request fails
        """
        if not self.is_owner:
            raise SessionSyncError("Only the owner can delete this session", 403)

        await self._call(
            self.client.delete_session(self.session_id, self._owner_token()),
            "Failed to delete session",
        )
        self.store.remove(self.session_id)
        self._transition(SyncEvent.OWNERSHIP_REVOKED)
