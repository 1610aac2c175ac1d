"""
Recently opened sessions.

Most-recent first, one entry per session, at most 50 entries.

Dependencies: pydantic, threaded.configs, threaded.models.common
System role: Client-local session history
"""

import json
import logging
import re
from pathlib import Path

from pydantic import ValidationError

from threaded.configs.client import ClientSettings
from threaded.models.common import CamelModel

logger = logging.getLogger(__name__)

MAX_HISTORY = 50
TITLE_MAX_LENGTH = 60

_HEADING_PREFIX = re.compile(r"^#+\s*")


class HistoryEntry(CamelModel):
    id: str
    title: str
    summary: str | None = None
    last_modified: int


def extract_title(document: str) -> str:
    """
    Title for a document: its first line without leading '#'.

    Longer than 60 characters is cut to 57 plus '...'; empty becomes 'Untitled'.
    """
    stripped = document.strip()
    first_line = stripped.split("\n")[0] if stripped else ""
    cleaned = _HEADING_PREFIX.sub("", first_line).strip()
    if len(cleaned) > TITLE_MAX_LENGTH:
        return cleaned[: TITLE_MAX_LENGTH - 3] + "..."
    return cleaned or "Untitled"


class SessionHistory:
    """
    Session history, kept in memory or in a JSON file.

    Args:
        path: JSON file location, or None for an in-memory history
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path).expanduser() if path is not None else None
        self._entries: list[HistoryEntry] = []

    @classmethod
    def from_settings(cls, settings: ClientSettings | None = None) -> "SessionHistory":
        settings = settings or ClientSettings()
        return cls(settings.history_file)

    def entries(self) -> list[HistoryEntry]:
        if self.path is None:
            return list(self._entries)
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return [HistoryEntry.model_validate(item) for item in raw]
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.warning(
                "Ignoring unreadable history file",
                extra={"path": str(self.path), "error": str(e)},
            )
            return []

    def _save(self, entries: list[HistoryEntry]) -> None:
        if self.path is None:
            self._entries = list(entries)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [entry.model_dump(by_alias=True) for entry in entries]
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def add(self, entry: HistoryEntry) -> None:
        """Put `entry` first, replacing any older entry for the same session."""
        entries = [e for e in self.entries() if e.id != entry.id]
        entries.insert(0, entry)
        self._save(entries[:MAX_HISTORY])

    def remove(self, session_id: str) -> None:
        self._save([e for e in self.entries() if e.id != session_id])

    def update(self, session_id: str, **changes) -> None:
        """Update fields of an entry in place; its position does not change."""
        entries = self.entries()
        for index, entry in enumerate(entries):
            if entry.id == session_id:
                entries[index] = entry.model_copy(update=changes)
                self._save(entries)
                return
