"""
File-backed dedup store: fingerprint -> last alert time (Unix seconds).

The snapshot is a pretty-printed JSON object, e.g.

    {
      "3f1c...e9": 1760700000
    }

Every accepted alert updates the in-memory map and rewrites the snapshot
inside one lock, so sibling site workers never race on either.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
import threading
from collections.abc import Iterator
from typing import Any

from . import logging_bridge
from .utils import now_ts

DEFAULT_WINDOW_SECONDS = 72 * 3600


class HistoryStore:
    """Thread-safe dedup store with a rolling suppression window."""

    def __init__(
        self,
        path: str | None,
        entries: dict[str, Any] | None = None,
        *,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
    ):
        self.path = path
        self.window_seconds = int(window_seconds)
        self._entries: dict[str, Any] = dict(entries or {})
        self._lock = threading.Lock()

    # ---- constructors ----
    @classmethod
    def load(cls, path: str, *, window_seconds: int = DEFAULT_WINDOW_SECONDS) -> HistoryStore:
        """
        Load a snapshot from `path`. Missing or malformed files yield an empty store.
        Keys that don't look like fingerprints are kept as-is and written back on save.
        """
        entries: dict[str, Any] = {}
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            data = {}
        except (OSError, ValueError) as e:
            logging_bridge.error({
                "component": "devops_watch.history",
                "op": "load",
                "path": path,
                "error": repr(e),
            })
            data = {}

        if isinstance(data, dict):
            entries = data
        else:
            logging_bridge.error({
                "component": "devops_watch.history",
                "op": "load",
                "path": path,
                "error": f"expected a JSON object, got {type(data).__name__}",
            })
        return cls(path, entries, window_seconds=window_seconds)

    # ---- public API ----
    def should_emit(self, fp: str, now: int | None = None) -> bool:
        """
        True iff `fp` is unseen or its last alert is at least one window old.
        On True, records `now` and persists before returning.
        """
        with self._lock:
            ts = now_ts() if now is None else int(now)
            last = as_timestamp(self._entries.get(fp))
            if last is not None and ts - last < self.window_seconds:
                return False
            self._entries[fp] = ts
            self._flush_locked()
            return True

    def get(self, fp: str) -> int | None:
        with self._lock:
            return as_timestamp(self._entries.get(fp))

    def entries(self) -> dict[str, Any]:
        """Snapshot copy of every stored entry (including unrecognized ones)."""
        with self._lock:
            return dict(self._entries)

    def save(self) -> bool:
        with self._lock:
            return self._flush_locked()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, fp: object) -> bool:
        with self._lock:
            return fp in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries())

    # ---- internals ----
    def _flush_locked(self) -> bool:
        """Write the snapshot atomically. Caller must hold the lock. Never raises on I/O."""
        if not self.path:
            return True
        tmp_path = None
        try:
            d = os.path.dirname(os.path.abspath(self.path)) or "."
            os.makedirs(d, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".history-", suffix=".json", dir=d)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._entries, f, indent=2, sort_keys=True)
                f.write("\n")
            os.replace(tmp_path, self.path)
            return True
        except OSError as e:
            if tmp_path:
                with contextlib.suppress(OSError):
                    os.remove(tmp_path)
            logging_bridge.error({
                "component": "devops_watch.history",
                "op": "save",
                "path": self.path,
                "entries": len(self._entries),
                "error": repr(e),
            })
            return False


def as_timestamp(v: Any) -> int | None:
    """Stored value as integer Unix seconds, or None when it is not a usable timestamp."""
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return int(v)
    return None
