"""ScanScheduler: runs scan cycles on a timer or on request."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from pathlib import Path

from pygit_watch.aggregator import SUMMARY_LIMIT, StateAggregator
from pygit_watch.cache import RepoCache
from pygit_watch.checker import StatusChecker
from pygit_watch.config import load_config
from pygit_watch.models import ScanOutcome, Severity, WatchConfig
from pygit_watch.protocols import Publisher
from pygit_watch.scanner import RepositoryScanner
from pygit_watch.watcher import LiveRepoWatcher

logger = logging.getLogger(__name__)


class ScanScheduler:
    """Coordinates discovery, watching, status checks and publishing.

    Timer ticks and manual requests run the same cycle.  Cycles never overlap:
    a request that arrives while one is running waits for it and then runs.
    """

    def __init__(
        self,
        publisher: Publisher,
        config_loader: Callable[[], WatchConfig] = load_config,
        cache: RepoCache | None = None,
        scanner: RepositoryScanner | None = None,
        watcher: LiveRepoWatcher | None = None,
        checker_factory: Callable[[WatchConfig], StatusChecker] | None = None,
        aggregator: StateAggregator | None = None,
        opener: Callable[[str], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Create a scheduler; every collaborator can be replaced for testing."""
        self.publisher = publisher
        self.config_loader = config_loader
        self.cache = cache if cache is not None else RepoCache()
        self.scanner = scanner or RepositoryScanner()
        self.watcher = watcher or LiveRepoWatcher()
        self.checker_factory = checker_factory or (lambda cfg: StatusChecker(max_workers=cfg.max_workers))
        self.aggregator = aggregator or StateAggregator()
        self.opener = opener
        self.clock = clock

        self.config: WatchConfig | None = None
        self.last_discovery: float | None = None
        self.last_outcome: ScanOutcome | None = None
        self._cycle_lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None
        self._wake: asyncio.Event | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stopping = False

    async def rescan(self) -> ScanOutcome:
        """Run one full cycle and publish its outcome. Never raises."""
        loop = asyncio.get_running_loop()
        if self._cycle_lock is None or self._lock_loop is not loop:
            self._cycle_lock = asyncio.Lock()
            self._lock_loop = loop
        async with self._cycle_lock:
            started = self.clock()
            try:
                outcome = await self._cycle()
            except Exception as e:
                logger.exception("Scan cycle failed")
                outcome = ScanOutcome(Severity.GLOBAL_ERROR, f"pygit-watch error: {e}"[:SUMMARY_LIMIT])
            logger.debug("Cycle finished in %.2fs: %s", self.clock() - started, outcome.severity.name)
            self.last_outcome = outcome
            self._publish(outcome)
            return outcome

    async def _cycle(self) -> ScanOutcome:
        config = self.config_loader()
        self.config = config

        if self._discovery_due(config):
            found = await asyncio.to_thread(self.scanner.discover, config.roots, config.ignore_patterns)
            self.cache.replace(found)
            await asyncio.to_thread(self.watcher.subscribe, config.roots)
            self.last_discovery = self.clock()
            logger.info("Discovery found %d repositories", len(found))

        self.watcher.apply_pending(self.cache, config.ignore_patterns)

        snapshot = self.cache.snapshot()
        checker = self.checker_factory(config)
        statuses = await asyncio.to_thread(checker.check_all, snapshot)
        return self.aggregator.build_outcome(statuses)

    def _discovery_due(self, config: WatchConfig) -> bool:
        if self.last_discovery is None:
            return True
        return self.clock() - self.last_discovery >= config.discovery_interval

    def _publish(self, outcome: ScanOutcome) -> None:
        try:
            self.publisher.publish(outcome)
        except Exception:
            logger.exception("Publishing the scan outcome failed")

    def force_discovery(self) -> None:
        """Make the next cycle run a full discovery."""
        self.last_discovery = None

    def request_rescan(self) -> None:
        """Ask the run loop for an immediate cycle. Safe to call from any thread."""
        if self._loop is None or self._wake is None:
            return
        self._loop.call_soon_threadsafe(self._wake.set)

    def stop(self) -> None:
        """Ask the run loop to exit after the current cycle."""
        self._stopping = True
        self.request_rescan()

    async def run(self) -> None:
        """Scan immediately, then on every poll interval or request until stopped."""
        self._loop = asyncio.get_running_loop()
        self._wake = asyncio.Event()
        self._stopping = False
        try:
            while not self._stopping:
                await self.rescan()
                if self._stopping:
                    break
                interval = self.config.poll_interval if self.config else WatchConfig().poll_interval
                try:
                    await asyncio.wait_for(self._wake.wait(), timeout=interval)
                except asyncio.TimeoutError:
                    pass
                self._wake.clear()
        finally:
            await asyncio.to_thread(self.watcher.stop)
            self._loop = None

    def open_repository(self, path: str) -> bool:
        """Forward an "open repository" request to the opener. Returns True if forwarded."""
        if not Path(path).is_dir():
            logger.warning("Cannot open %s: not a directory", path)
            return False
        if self.opener is None:
            logger.info("No opener configured for %s", path)
            return False
        self.opener(path)
        return True
