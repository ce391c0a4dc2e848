"""RepoCache: the set of known repository paths between discovery cycles."""

from __future__ import annotations

import threading
from collections.abc import Iterable


class RepoCache:
    """Thread-safe, case-insensitive set of repository paths.

    Discovery replaces the whole set, the watcher only adds.  Readers take a
    snapshot and work on that copy, never on the live set.
    """

    def __init__(self, paths: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._paths: dict[str, str] = {}
        self.replace(paths)

    def snapshot(self) -> list[str]:
        """Return a sorted copy of the current paths."""
        with self._lock:
            return sorted(self._paths.values(), key=str.casefold)

    def replace(self, paths: Iterable[str]) -> None:
        """Swap in the result of a full discovery."""
        fresh: dict[str, str] = {}
        for path in paths:
            fresh.setdefault(str(path).casefold(), str(path))
        with self._lock:
            self._paths = fresh

    def add(self, path: str) -> bool:
        """Add a path; return False if an equal path (ignoring case) is already known."""
        key = str(path).casefold()
        with self._lock:
            if key in self._paths:
                return False
            self._paths[key] = str(path)
            return True

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        with self._lock:
            return path.casefold() in self._paths

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)
