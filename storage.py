"""
storage.py
==========
Key-value persistence for scripts, sessions, rules, and case history.

The engine only needs ``put`` / ``get`` keyed by (kind, id). Two stores are
provided:

  MemoryStore    — a dict; state lives as long as the process.
  JsonFileStore  — one JSON file per key under a data directory.

GameStorage layers typed helpers over either store. Its write helpers raise
on failure; deciding whether a failed write matters is the caller's job (the
game engine treats persistence as best-effort).
"""

from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

from models import CaseScript, GameRules, GameSession

logger = logging.getLogger("murder_mystery.storage")

# Storage kinds.
SCRIPT  = "script"
SESSION = "session"
RULES   = "rules"
HISTORY = "history"
META    = "meta"

_SESSIONS_LIST   = "sessions"
_CURRENT_SESSION = "current_session"


class KeyValueStore(Protocol):
    """Persistence contract consumed by the engine."""

    def put(self, kind: str, key: str, blob: Any) -> None: ...

    def get(self, kind: str, key: str) -> Optional[Any]: ...

    def delete(self, kind: str, key: str) -> None: ...

    def ids(self, kind: str) -> List[str]: ...


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class MemoryStore:
    """Dict-backed store. Blobs are round-tripped through JSON on write."""

    def __init__(self) -> None:
        self._data: Dict[Tuple[str, str], str] = {}
        self._lock = threading.Lock()

    def put(self, kind: str, key: str, blob: Any) -> None:
        encoded = json.dumps(blob)
        with self._lock:
            self._data[(kind, key)] = encoded

    def get(self, kind: str, key: str) -> Optional[Any]:
        with self._lock:
            encoded = self._data.get((kind, key))
        return None if encoded is None else json.loads(encoded)

    def delete(self, kind: str, key: str) -> None:
        with self._lock:
            self._data.pop((kind, key), None)

    def ids(self, kind: str) -> List[str]:
        with self._lock:
            return [k for (knd, k) in self._data if knd == kind]


_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class JsonFileStore:
    """
    Directory-backed store: ``<root>/<kind>/<key>.json``.

    Writes go to a temporary sibling first and are then renamed into place, so
    a crash mid-write never leaves a truncated blob behind.
    """

    def __init__(self, root: str | Path) -> None:
        self.root  = Path(root)
        self._lock = threading.Lock()

    def _path(self, kind: str, key: str) -> Path:
        return self.root / _SAFE_KEY.sub("_", kind) / f"{_SAFE_KEY.sub('_', key)}.json"

    def put(self, kind: str, key: str, blob: Any) -> None:
        path = self._path(kind, key)
        tmp  = path.with_suffix(".json.tmp")
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(blob, indent=2), encoding="utf-8")
            tmp.replace(path)

    def get(self, kind: str, key: str) -> Optional[Any]:
        path = self._path(kind, key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def delete(self, kind: str, key: str) -> None:
        with self._lock:
            self._path(kind, key).unlink(missing_ok=True)

    def ids(self, kind: str) -> List[str]:
        folder = self.root / _SAFE_KEY.sub("_", kind)
        if not folder.is_dir():
            return []
        return sorted(p.stem for p in folder.glob("*.json"))


# ---------------------------------------------------------------------------
# Typed helpers
# ---------------------------------------------------------------------------

class GameStorage:
    """
    Typed persistence helpers for the engine and the CLI.

    Reads are forgiving: a missing or corrupt blob yields None (logged), since
    the in-memory state stays authoritative for a running game.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    # --- scripts ---

    def save_script(self, script: CaseScript) -> None:
        self.store.put(SCRIPT, script.id, script.model_dump(mode="json", by_alias=True))

    def get_script(self, script_id: str) -> Optional[CaseScript]:
        try:
            blob = self.store.get(SCRIPT, script_id)
            return None if blob is None else CaseScript.model_validate(blob)
        except ValueError:
            logger.error("Stored script %s is unreadable.", script_id, exc_info=True)
            return None

    # --- sessions ---

    def save_session(self, session: GameSession) -> None:
        self.store.put(SESSION, session.id, session.model_dump(mode="json", by_alias=True))
        sessions = self.sessions_list()
        if session.id not in sessions:
            sessions.append(session.id)
            self.store.put(META, _SESSIONS_LIST, sessions)
        self.set_current_session(session.id)

    def get_session(self, session_id: str) -> Optional[GameSession]:
        try:
            blob = self.store.get(SESSION, session_id)
            return None if blob is None else GameSession.model_validate(blob)
        except ValueError:
            logger.error("Stored session %s is unreadable.", session_id, exc_info=True)
            return None

    def sessions_list(self) -> List[str]:
        try:
            return list(self.store.get(META, _SESSIONS_LIST) or [])
        except ValueError:
            logger.error("Stored sessions list is unreadable; rebuilding from session ids.", exc_info=True)
            return self.store.ids(SESSION)

    def all_sessions(self) -> List[GameSession]:
        """Every readable stored session, newest first."""
        sessions = [s for s in (self.get_session(sid) for sid in self.sessions_list()) if s]
        return sorted(sessions, key=lambda s: s.started_at, reverse=True)

    def delete_session(self, session_id: str) -> None:
        self.store.delete(SESSION, session_id)
        self.store.delete(RULES, session_id)
        self.store.put(
            META, _SESSIONS_LIST, [sid for sid in self.sessions_list() if sid != session_id]
        )
        if self.current_session_id() == session_id:
            self.store.delete(META, _CURRENT_SESSION)

    def current_session_id(self) -> Optional[str]:
        try:
            return self.store.get(META, _CURRENT_SESSION)
        except ValueError:
            logger.error("Stored current session id is unreadable.", exc_info=True)
            return None

    def set_current_session(self, session_id: str) -> None:
        self.store.put(META, _CURRENT_SESSION, session_id)

    # --- rules ---

    def save_rules(self, session_id: str, rules: GameRules) -> None:
        self.store.put(RULES, session_id, rules.to_dict())

    def get_rules(self, session_id: str) -> Optional[GameRules]:
        try:
            blob = self.store.get(RULES, session_id)
            return None if blob is None else GameRules.from_dict(blob)
        except (KeyError, TypeError, ValueError):
            logger.error("Stored rules for %s are unreadable.", session_id, exc_info=True)
            return None

    # --- maintenance ---

    def clear_all(self) -> None:
        for kind in (SCRIPT, SESSION, RULES, HISTORY, META):
            for key in self.store.ids(kind):
                self.store.delete(kind, key)
