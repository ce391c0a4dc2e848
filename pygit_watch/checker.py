"""StatusChecker: queries many repositories concurrently."""

from __future__ import annotations

import concurrent.futures
import logging
from collections.abc import Callable
from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError
from tqdm import tqdm

from pygit_watch.models import RepoState, RepoStatus
from pygit_watch.protocols import GitRepository
from pygit_watch.repository import GitPythonRepository

BRANCH_AB_PREFIX = '# branch.ab'

logger = logging.getLogger(__name__)


def parse_branch_ab(output: str) -> tuple[int, int] | None:
    """Return (ahead, behind) from porcelain v2 branch headers, or None without upstream.

    Only the first ``# branch.ab +A -B`` line counts.  Counters that are not
    integers raise ValueError.
    """
    for line in output.splitlines():
        line = line.strip()
        if not line.startswith(BRANCH_AB_PREFIX):
            continue
        parts = line.split()
        # ['#', 'branch.ab', '+A', '-B']
        if len(parts) < 4:
            return 0, 0
        ahead = int(parts[2].lstrip('+'))
        behind = int(parts[3].lstrip('-'))
        if ahead < 0 or behind < 0:
            raise ValueError(f"Negative ahead/behind counter: {line!r}")
        return ahead, behind
    return None


def classify(has_modifications: bool, ahead_behind: tuple[int, int] | None) -> RepoState:
    """Map the raw signals onto a single state; dirty wins, then missing upstream."""
    if has_modifications:
        return RepoState.DIRTY
    if ahead_behind is None:
        return RepoState.NO_UPSTREAM
    ahead, behind = ahead_behind
    if ahead > 0 and behind > 0:
        return RepoState.DIVERGED
    if ahead > 0:
        return RepoState.AHEAD_ONLY
    if behind > 0:
        return RepoState.BEHIND_ONLY
    return RepoState.CLEAN


def check_repository(repo: GitRepository) -> RepoStatus:
    """Query one repository: short status first, tracking info only when clean."""
    path = str(repo.path)

    status = repo.short_status()
    if not status.success:
        logger.debug("%s query failed in %s: %s", status.operation.name, path, status.error)
    elif status.output.strip():
        return RepoStatus(path, RepoState.DIRTY)

    tracking = repo.tracking_status()
    if not tracking.success:
        logger.warning("%s query failed in %s: %s", tracking.operation.name, path, tracking.error)
        return RepoStatus(path, RepoState.ERROR)

    ahead_behind = parse_branch_ab(tracking.output)
    state = classify(False, ahead_behind)
    if state in (RepoState.AHEAD_ONLY, RepoState.BEHIND_ONLY, RepoState.DIVERGED):
        ahead, behind = ahead_behind
        return RepoStatus(path, state, ahead, behind)
    return RepoStatus(path, state)


class StatusChecker:
    """Fans out one status query per repository over a bounded thread pool"""

    def __init__(
        self,
        max_workers: int | None = None,
        repository_factory: Callable[[Path], GitRepository] = GitPythonRepository,
        show_progress: bool = False,
    ):
        """Create a checker. ``max_workers`` bounds the number of concurrent git processes."""
        self.max_workers = max_workers
        self.repository_factory = repository_factory
        self.show_progress = show_progress

    def check_all(self, paths: list[str]) -> list[RepoStatus]:
        """Return one status per input path, in completion order."""
        if not paths:
            return []

        results: list[RepoStatus] = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(self.check_one, path): path for path in paths}

            with tqdm(total=len(paths), desc="Checking", unit="repo",
                      disable=not self.show_progress) as pbar:
                for future in concurrent.futures.as_completed(futures):
                    path = futures[future]
                    try:
                        results.append(future.result())
                    except Exception as e:
                        logger.warning("Unexpected error checking %s: %s", path, e)
                        results.append(RepoStatus(path, RepoState.ERROR))
                    finally:
                        pbar.set_postfix_str(Path(path).name, refresh=False)
                        pbar.update(1)

        return results

    def check_one(self, path: str) -> RepoStatus:
        """Open, query and close a single repository. Every failure becomes ERROR."""
        repo = None
        try:
            repo = self.repository_factory(Path(path))
            result = check_repository(repo)
        except (InvalidGitRepositoryError, NoSuchPathError):
            logger.warning("Not a valid git repository: %s", path)
            return RepoStatus(path, RepoState.ERROR)
        except Exception as e:
            logger.warning("Error checking %s: %s", path, e)
            return RepoStatus(path, RepoState.ERROR)
        finally:
            if repo is not None:
                repo.close()

        # Keep the caller's spelling of the path as the identity
        result = RepoStatus(path, result.state, result.ahead, result.behind)
        logger.debug("%s: %s", path, result.state.name)
        return result
