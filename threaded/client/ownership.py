"""
Client-side ownership records.

Owner tokens never leave the client except in the X-Owner-Token header.
A record exists for every session this client created or forked; a
fork's record remembers the session it was forked from, so a second
write to the same shared session reuses the fork instead of creating
another.

Dependencies: pydantic, threaded.configs, threaded.models.common
System role: Local store of session credentials
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import Field, ValidationError

from threaded.configs.client import ClientSettings
from threaded.models.common import CamelModel

logger = logging.getLogger(__name__)


class OwnershipRecord(CamelModel):
    """Credentials for one owned session."""

    owner_token: str
    forked_from: str | None = None
    thread_id_map: dict[str, str] = Field(default_factory=dict)
    message_id_map: dict[str, str] = Field(default_factory=dict)


class OwnershipStore(ABC):
    """Map of session id to OwnershipRecord."""

    @abstractmethod
    def get(self, session_id: str) -> OwnershipRecord | None:
        """Record for a session, None if not owned."""

    @abstractmethod
    def set(self, session_id: str, record: OwnershipRecord) -> None:
        """Insert or replace the record for a session."""

    @abstractmethod
    def remove(self, session_id: str) -> None:
        """Forget a session. Missing ids are ignored."""

    @abstractmethod
    def items(self) -> list[tuple[str, OwnershipRecord]]:
        """All records."""

    def is_owner(self, session_id: str) -> bool:
        return self.get(session_id) is not None

    def find_fork(self, original_id: str) -> str | None:
        """Id of an existing fork of `original_id`, if this client made one."""
        for session_id, record in self.items():
            if record.forked_from == original_id:
                return session_id
        return None


class InMemoryOwnershipStore(OwnershipStore):
    """Process-local store."""

    def __init__(self) -> None:
        self._records: dict[str, OwnershipRecord] = {}

    def get(self, session_id: str) -> OwnershipRecord | None:
        return self._records.get(session_id)

    def set(self, session_id: str, record: OwnershipRecord) -> None:
        self._records[session_id] = record

    def remove(self, session_id: str) -> None:
        self._records.pop(session_id, None)

    def items(self) -> list[tuple[str, OwnershipRecord]]:
        return list(self._records.items())


class JsonFileOwnershipStore(OwnershipStore):
    """
    Store persisted as a JSON object in a file.

    The file is re-read on every access and replaced atomically on write.
    An unreadable file is treated as empty.

    Args:
        path: File location; `~` is expanded and parent directories are created
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    @classmethod
    def from_settings(cls, settings: ClientSettings | None = None) -> "JsonFileOwnershipStore":
        """Store at THREADED_CLIENT_OWNERSHIP_FILE."""
        settings = settings or ClientSettings()
        return cls(settings.ownership_file)

    def _load(self) -> dict[str, OwnershipRecord]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return {
                session_id: OwnershipRecord.model_validate(value)
                for session_id, value in raw.items()
            }
        except (OSError, ValueError, AttributeError, ValidationError) as e:
            logger.warning(
                "Ignoring unreadable ownership file",
                extra={"path": str(self.path), "error": str(e)},
            )
            return {}

    def _save(self, records: dict[str, OwnershipRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            session_id: record.model_dump(by_alias=True)
            for session_id, record in records.items()
        }
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def get(self, session_id: str) -> OwnershipRecord | None:
        return self._load().get(session_id)

    def set(self, session_id: str, record: OwnershipRecord) -> None:
        records = self._load()
        records[session_id] = record
        self._save(records)

    def remove(self, session_id: str) -> None:
        records = self._load()
        if records.pop(session_id, None) is not None:
            self._save(records)

    def items(self) -> list[tuple[str, OwnershipRecord]]:
        return list(self._load().items())
