"""Repository scanner: finds git repositories under the configured roots."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from pygit_watch.ignore import can_prune, matches

MARKER_DIR = '.git'

logger = logging.getLogger(__name__)


class RepositoryScanner:
    """Responsible for finding git repositories"""

    def discover(self, roots: Iterable[str], ignore_patterns: list[str]) -> set[str]:
        """Walk every root and return the repository paths, de-duplicated case-insensitively."""
        roots = list(roots)
        found: dict[str, str] = {}
        for root in roots:
            if not root or not root.strip():
                continue
            if not Path(root).is_dir():
                logger.warning("Skipping root %s: not a directory", root)
                continue
            try:
                for repo_path in self.find_repositories(Path(root), ignore_patterns):
                    found.setdefault(str(repo_path).casefold(), str(repo_path))
            except OSError as e:
                logger.warning("Discovery under %s stopped early: %s", root, e)
        logger.debug("Discovered %d repositories under %d roots", len(found), len(roots))
        return set(found.values())

    def find_repositories(self, search_dir: Path, ignore_patterns: list[str] = None) -> Iterator[Path]:
        """Yield every directory under search_dir that holds a marker directory.

        Nested repositories are reported too.  Unreadable subtrees are logged
        and skipped; symlinked directories are not followed.
        """
        patterns = ignore_patterns or []
        for dirpath, dirnames, _filenames in os.walk(search_dir, onerror=self._on_walk_error,
                                                      followlinks=False):
            current = Path(dirpath)

            if can_prune(dirpath, patterns):
                dirnames.clear()
                continue

            if MARKER_DIR in dirnames:
                # Never descend into git metadata
                dirnames.remove(MARKER_DIR)
                if (current / MARKER_DIR).is_dir() and not matches(dirpath, patterns):
                    yield current

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.warning("Cannot read %s: %s", error.filename, error.strerror or error)
