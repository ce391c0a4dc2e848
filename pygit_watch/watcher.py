"""Filesystem watcher that picks up newly created repositories between discoveries."""

from __future__ import annotations

import logging
import queue
from collections.abc import Iterable
from pathlib import Path

from watchdog.events import (
    DirCreatedEvent,
    DirMovedEvent,
    FileCreatedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from pygit_watch.cache import RepoCache
from pygit_watch.ignore import matches
from pygit_watch.scanner import MARKER_DIR

logger = logging.getLogger(__name__)


def _to_path(src_path: bytes | str) -> Path:
    """Convert watchdog src_path to Path, handling bytes case."""
    if isinstance(src_path, bytes):
        return Path(src_path.decode())
    return Path(src_path)


class MarkerEventHandler(FileSystemEventHandler):
    """Forwards the parent of every new marker directory to a queue."""

    def __init__(self, pending: queue.Queue):
        self.pending = pending

    def on_created(self, event: DirCreatedEvent | FileCreatedEvent) -> None:
        if event.is_directory:
            self._offer(_to_path(event.src_path))

    def on_moved(self, event: DirMovedEvent | FileMovedEvent) -> None:
        if event.is_directory:
            self._offer(_to_path(event.dest_path))

    def _offer(self, path: Path) -> None:
        if path.name == MARKER_DIR and path.parent != path:
            self.pending.put(str(path.parent))


class LiveRepoWatcher:
    """One recursive watch per root; events are queued, never applied from the observer thread.

    The scheduler calls :meth:`apply_pending` once per cycle, which re-checks
    each queued path against the current ignore patterns and adds it to the
    cache.  The watcher never removes paths; stale entries are dropped by the
    next full discovery.
    """

    def __init__(self, observer_factory=Observer):
        self._observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self._pending: queue.Queue[str] = queue.Queue()
        self.handler = MarkerEventHandler(self._pending)
        self.watched_roots: list[str] = []

    def subscribe(self, roots: Iterable[str]) -> list[str]:
        """Drop existing watches and watch each usable root. Returns the roots now watched."""
        self.stop()
        observer = self._observer_factory()
        observer.daemon = True
        observer.start()
        watched = []
        for root in roots:
            if not root or not root.strip() or not Path(root).is_dir():
                continue
            try:
                observer.schedule(self.handler, root, recursive=True)
                watched.append(root)
            except Exception as e:
                logger.warning("Cannot watch %s: %s", root, e)
        self._observer = observer
        self.watched_roots = watched
        logger.debug("Watching %d of the configured roots", len(watched))
        return watched

    def stop(self) -> None:
        """Stop the observer thread, if any."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        self.watched_roots = []

    def enqueue(self, repo_path: str) -> None:
        """Queue a candidate repository path as if a watch event had reported it."""
        self._pending.put(str(repo_path))

    def apply_pending(self, cache: RepoCache, ignore_patterns: list[str]) -> list[str]:
        """Drain queued paths into the cache. Returns the paths actually added."""
        added = []
        while True:
            try:
                repo_path = self._pending.get_nowait()
            except queue.Empty:
                break
            if matches(repo_path, ignore_patterns):
                logger.debug("Ignoring new repository %s", repo_path)
                continue
            if cache.add(repo_path):
                logger.info("New repository detected: %s", repo_path)
                added.append(repo_path)
        return added
