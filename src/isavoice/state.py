"""Key-value state stores for voice preferences and greeting flags.

Two scopes are used:
- persistent: survives restarts (voice-enabled flag, last greeting date)
- session: lives as long as one session/tab (pages greeted this session)

Both are plain get/set/delete stores so tests run on MemoryStateStore.
"""

import json
import logging
import os
import tempfile
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

VOICE_ENABLED_KEY = "isa_voice_enabled"
LAST_GREETING_KEY = "isa_last_greeting_date"
TAB_GREETED_KEY = "isa_tab_greeted"


class StateStore(Protocol):
    """String key-value store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStateStore:
    """In-memory store; one instance per session."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class JsonFileStateStore:
    """Persistent store backed by a JSON object on disk.

    Writes go through a temporary file and os.replace so a crash never
    leaves a half-written file behind.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed state file {self.path}")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)


class VoicePreferences:
    """Global voice-enabled flag, consulted before any automatic speech."""

    def __init__(self, store: StateStore) -> None:
        self.store = store

    def is_voice_enabled(self) -> bool:
        """Return the flag. Voice is enabled when it was never set."""
        stored = self.store.get(VOICE_ENABLED_KEY)
        return stored is None or stored == "true"

    def set_voice_enabled(self, enabled: bool) -> None:
        self.store.set(VOICE_ENABLED_KEY, "true" if enabled else "false")


class GreetingState:
    """Date-scoped and session-scoped greeting flags.

    Args:
        persistent: Store that outlives the session (daily flag)
        session: Store scoped to the current session/tab (page flags)
        clock: Returns the current local time
    """

    def __init__(
        self,
        persistent: StateStore,
        session: StateStore,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.persistent = persistent
        self.session = session
        self.clock = clock

    def is_first_access_today(self) -> bool:
        return self.persistent.get(LAST_GREETING_KEY) != self.clock().date().isoformat()

    def mark_greeted_today(self) -> None:
        self.persistent.set(LAST_GREETING_KEY, self.clock().date().isoformat())

    def _greeted_pages(self) -> list[str]:
        raw = self.session.get(TAB_GREETED_KEY)
        if not raw:
            return []
        try:
            pages = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Resetting malformed greeted-pages state")
            return []
        return [str(p) for p in pages] if isinstance(pages, list) else []

    def was_page_greeted(self, page: str) -> bool:
        return page in self._greeted_pages()

    def mark_page_greeted(self, page: str) -> None:
        pages = self._greeted_pages()
        if page not in pages:
            pages.append(page)
            self.session.set(TAB_GREETED_KEY, json.dumps(pages))
