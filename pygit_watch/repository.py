"""Concrete GitPython-based repository implementation."""

from __future__ import annotations

from pathlib import Path

from git import GitCommandError, Repo

from pygit_watch.models import OperationResult, OperationType


class GitPythonRepository:
    """Concrete implementation using GitPython"""

    def __init__(self, repo_path: Path):
        """Open a git repository at the given path."""
        self._path = Path(repo_path)
        self._repo = Repo(repo_path)

    def close(self) -> None:
        """Release underlying git resources."""
        self._repo.close()

    @property
    def path(self) -> Path:
        """Absolute path to the repository root."""
        return self._path

    def short_status(self) -> OperationResult:
        """Run ``git status --porcelain``; any output means staged, unstaged or untracked changes."""
        try:
            output = self._repo.git.status('--porcelain')
            return OperationResult(True, OperationType.STATUS, output)
        except GitCommandError as e:
            return OperationResult(False, OperationType.STATUS, error=e)

    def tracking_status(self) -> OperationResult:
        """Run ``git status --porcelain=2 --branch`` for the branch header lines."""
        try:
            output = self._repo.git.status('--porcelain=2', '--branch')
            return OperationResult(True, OperationType.TRACKING, output)
        except GitCommandError as e:
            return OperationResult(False, OperationType.TRACKING, error=e)
