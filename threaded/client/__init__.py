"""
Reading client.

Exports:
  - ThreadedApiClient, ApiError: HTTP access with bounded retries
  - OwnershipStore and implementations: Local owner-token records
  - SessionSynchronizer, SessionSyncError: Fork-on-first-write
  - SessionHistory, extract_title: Recently opened sessions
"""

from threaded.client.api_client import ApiError, ThreadedApiClient
from threaded.client.history import HistoryEntry, SessionHistory, extract_title
from threaded.client.ownership import (
    InMemoryOwnershipStore,
    JsonFileOwnershipStore,
    OwnershipRecord,
    OwnershipStore,
)
from threaded.client.reconcile import (
    LocalMessage,
    LocalThread,
    apply_thread_id_map,
    confirm_message,
    threads_from_session,
)
from threaded.client.session_sync import (
    SessionSynchronizer,
    SessionSyncError,
    SyncEvent,
    SyncState,
    next_state,
)

__all__ = [
    "ApiError",
    "ThreadedApiClient",
    "HistoryEntry",
    "SessionHistory",
    "extract_title",
    "InMemoryOwnershipStore",
    "JsonFileOwnershipStore",
    "OwnershipRecord",
    "OwnershipStore",
    "LocalMessage",
    "LocalThread",
    "apply_thread_id_map",
    "confirm_message",
    "threads_from_session",
    "SessionSynchronizer",
    "SessionSyncError",
    "SyncEvent",
    "SyncState",
    "next_state",
]
