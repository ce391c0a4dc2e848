"""Integration tests using real git repositories.

Creates bare repos (acting as remotes) and local clones to test
discovery, status checks and aggregation end-to-end.
"""

import asyncio
import json
import subprocess
import sys
import time
from pathlib import Path

import pytest

from pygit_watch import (
    ALL_CLEAN_MESSAGE,
    GitPythonRepository,
    JsonPublisher,
    LiveRepoWatcher,
    RepoCache,
    RepoState,
    RepositoryScanner,
    ScanScheduler,
    Severity,
    StatusChecker,
    WatchConfig,
    main,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _git(cwd: Path, *args: str) -> str:
    """Run a git command and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _commit_file(repo: Path, filename: str, content: str, message: str) -> str:
    """Create/overwrite a file and commit it. Returns the commit hash."""
    filepath = repo / filename
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text(content)
    _git(repo, "add", filename)
    _git(repo, "commit", "-m", message)
    return _git(repo, "rev-parse", "HEAD")


def _init_local(path: Path) -> Path:
    """Create a repository with one commit and no remote."""
    path.mkdir(parents=True)
    _git(path, "init", "-b", "main")
    _git(path, "config", "user.email", "test@test.com")
    _git(path, "config", "user.name", "Test")
    _commit_file(path, "init.txt", "initial", "Initial commit")
    return path


def _make_repo_pair(root: Path, name: str, remotes_dir: Path) -> tuple[Path, Path]:
    """Create a bare remote + local clone with upstream tracking.

    Returns (remote_path, local_path).
    """
    remote = remotes_dir / f"{name}.git"
    remote.mkdir(parents=True)
    _git(remote, "init", "--bare", "-b", "main")

    local = root / name
    _git(root, "clone", str(remote), name)
    _git(local, "config", "user.email", "test@test.com")
    _git(local, "config", "user.name", "Test")
    _git(local, "checkout", "-b", "main")
    _commit_file(local, "init.txt", "initial", "Initial commit")
    _git(local, "push", "-u", "origin", "main")
    return remote, local


def _push_from_other_clone(tmp_path: Path, remote: Path, name: str) -> None:
    """Advance the remote by one commit from a throwaway clone."""
    other = tmp_path / name
    _git(tmp_path, "clone", str(remote), name)
    _git(other, "config", "user.email", "test@test.com")
    _git(other, "config", "user.name", "Test")
    _commit_file(other, f"{name}.txt", "remote change", "Remote commit")
    _git(other, "push", "origin", "main")


def _run_cycle(root: Path, **config_overrides):
    config = WatchConfig(roots=[str(root)], **config_overrides)
    scheduler = ScanScheduler(JsonPublisher(stream=_Sink()), config_loader=lambda: config)
    try:
        return asyncio.run(scheduler.rescan())
    finally:
        scheduler.watcher.stop()


class _Sink:
    def write(self, _text):
        pass

    def flush(self):
        pass


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def root(tmp_path: Path) -> Path:
    """The watched root directory."""
    r = tmp_path / "r"
    r.mkdir()
    return r


@pytest.fixture
def remotes(tmp_path: Path) -> Path:
    """Bare remotes live outside the watched root."""
    d = tmp_path / "remotes"
    d.mkdir()
    return d


# ---------------------------------------------------------------------------
# Tests: single repository states
# ---------------------------------------------------------------------------

class TestRepositoryStates:
    def _check(self, path: Path):
        return StatusChecker().check_all([str(path)])[0]

    def test_clean(self, root, remotes):
        _, local = _make_repo_pair(root, "clean", remotes)
        status = self._check(local)
        assert (status.state, status.ahead, status.behind) == (RepoState.CLEAN, 0, 0)

    def test_modified_file_is_dirty(self, root, remotes):
        _, local = _make_repo_pair(root, "mod", remotes)
        (local / "init.txt").write_text("changed")
        assert self._check(local).state is RepoState.DIRTY

    def test_untracked_file_is_dirty(self, root, remotes):
        _, local = _make_repo_pair(root, "untracked", remotes)
        (local / "new.txt").write_text("new")
        assert self._check(local).state is RepoState.DIRTY

    def test_staged_file_is_dirty(self, root, remotes):
        _, local = _make_repo_pair(root, "staged", remotes)
        (local / "staged.txt").write_text("s")
        _git(local, "add", "staged.txt")
        assert self._check(local).state is RepoState.DIRTY

    def test_ahead(self, root, remotes):
        _, local = _make_repo_pair(root, "ahead", remotes)
        _commit_file(local, "a.txt", "1", "one")
        _commit_file(local, "b.txt", "2", "two")
        status = self._check(local)
        assert (status.state, status.ahead, status.behind) == (RepoState.AHEAD_ONLY, 2, 0)

    def test_behind(self, tmp_path, root, remotes):
        remote, local = _make_repo_pair(root, "behind", remotes)
        _push_from_other_clone(tmp_path, remote, "pusher")
        _git(local, "fetch")
        status = self._check(local)
        assert (status.state, status.ahead, status.behind) == (RepoState.BEHIND_ONLY, 0, 1)

    def test_diverged(self, tmp_path, root, remotes):
        remote, local = _make_repo_pair(root, "div", remotes)
        _push_from_other_clone(tmp_path, remote, "pusher")
        _commit_file(local, "local.txt", "mine", "Local commit")
        _git(local, "fetch")
        status = self._check(local)
        assert (status.state, status.ahead, status.behind) == (RepoState.DIVERGED, 1, 1)

    def test_dirty_wins_over_ahead(self, root, remotes):
        _, local = _make_repo_pair(root, "both", remotes)
        _commit_file(local, "a.txt", "1", "one")
        (local / "scratch.txt").write_text("wip")
        assert self._check(local).state is RepoState.DIRTY

    def test_no_upstream(self, root):
        local = _init_local(root / "lonely")
        status = self._check(local)
        assert (status.state, status.ahead, status.behind) == (RepoState.NO_UPSTREAM, 0, 0)

    def test_empty_repository_has_no_upstream(self, root):
        empty = root / "empty"
        empty.mkdir()
        _git(empty, "init")
        assert self._check(empty).state is RepoState.NO_UPSTREAM

    def test_fake_marker_is_error(self, root):
        (root / "fake" / ".git").mkdir(parents=True)
        assert self._check(root / "fake").state is RepoState.ERROR

    def test_missing_directory_is_error(self, root):
        assert self._check(root / "vanished").state is RepoState.ERROR


class TestGitPythonRepository:
    def test_queries(self, root, remotes):
        _, local = _make_repo_pair(root, "q", remotes)
        repo = GitPythonRepository(local)
        try:
            assert repo.path == local
            assert repo.short_status().success
            assert repo.short_status().output == ""
            tracking = repo.tracking_status()
            assert tracking.success
            assert "# branch.ab +0 -0" in tracking.output
        finally:
            repo.close()


# ---------------------------------------------------------------------------
# Tests: full cycles
# ---------------------------------------------------------------------------

class TestEndToEnd:
    def test_mixed_root(self, root, remotes):
        """a: modified, b: two commits ahead, c: no upstream."""
        _, a = _make_repo_pair(root, "a", remotes)
        (a / "init.txt").write_text("modified")
        _, b = _make_repo_pair(root, "b", remotes)
        _commit_file(b, "1.txt", "1", "one")
        _commit_file(b, "2.txt", "2", "two")
        _init_local(root / "c")

        outcome = _run_cycle(root)

        states = {Path(s.path).name: (s.state, s.ahead, s.behind) for s in outcome.statuses}
        assert states == {
            "a": (RepoState.DIRTY, 0, 0),
            "b": (RepoState.AHEAD_ONLY, 2, 0),
            "c": (RepoState.NO_UPSTREAM, 0, 0),
        }
        assert outcome.severity is Severity.RED
        assert outcome.summary.startswith("Dirty: 1.")
        assert "a" in outcome.summary.splitlines()[1]
        assert [str(r) for r in outcome.rows] == [
            f"[DIRTY] {a}",
            f"[AHEAD +2] {b}",
            f"[NO-UPSTREAM] {root / 'c'}",
        ]

    def test_single_clean_repo_is_green(self, root, remotes):
        _make_repo_pair(root, "only", remotes)
        outcome = _run_cycle(root)
        assert outcome.severity is Severity.GREEN
        assert outcome.summary == ALL_CLEAN_MESSAGE

    def test_ignored_repo_not_checked(self, root, remotes):
        _, dirty = _make_repo_pair(root, "vendor-lib", remotes)
        (dirty / "x.txt").write_text("x")
        _make_repo_pair(root, "app", remotes)

        outcome = _run_cycle(root, ignore_patterns=["*vendor-lib"])

        assert [Path(s.path).name for s in outcome.statuses] == ["app"]
        assert outcome.severity is Severity.GREEN

    def test_new_repository_seen_before_next_discovery(self, root, remotes):
        _make_repo_pair(root, "first", remotes)
        config = WatchConfig(roots=[str(root)], discovery_interval_minutes=60)
        scheduler = ScanScheduler(JsonPublisher(stream=_Sink()), config_loader=lambda: config)
        try:
            first = asyncio.run(scheduler.rescan())
            assert len(first.statuses) == 1

            # Stands in for the watch event so the test does not depend on timing
            _init_local(root / "second")
            scheduler.watcher.enqueue(str(root / "second"))
            second = asyncio.run(scheduler.rescan())
        finally:
            scheduler.watcher.stop()

        assert {Path(s.path).name for s in second.statuses} == {"first", "second"}
        assert second.severity is Severity.YELLOW

    def test_failing_repo_does_not_affect_others(self, root, remotes):
        _make_repo_pair(root, "good", remotes)
        (root / "broken" / ".git").mkdir(parents=True)

        outcome = _run_cycle(root)

        states = {Path(s.path).name: s.state for s in outcome.statuses}
        assert states == {"good": RepoState.CLEAN, "broken": RepoState.ERROR}
        assert outcome.severity is Severity.GREEN
        assert [str(r) for r in outcome.rows] == [str(root / "broken")]


class TestDiscoveryAndCache:
    def test_discovered_repos_fill_cache(self, root, remotes):
        _make_repo_pair(root, "one", remotes)
        _init_local(root / "nested" / "two")
        cache = RepoCache()
        cache.replace(RepositoryScanner().discover([str(root)], []))
        assert cache.snapshot() == [str(root / "nested" / "two"), str(root / "one")]

    def test_real_watcher_adds_new_clone(self, root, remotes):
        watcher = LiveRepoWatcher()
        cache = RepoCache()
        try:
            watcher.subscribe([str(root)])
            _init_local(root / "late")
            deadline = time.monotonic() + 5
            while time.monotonic() < deadline and str(root / "late") not in cache:
                watcher.apply_pending(cache, [])
                time.sleep(0.05)
        finally:
            watcher.stop()
        assert str(root / "late") in cache


class TestCli:
    def test_once_json(self, root, remotes, tmp_path, monkeypatch, capsys):
        _, local = _make_repo_pair(root, "proj", remotes)
        _commit_file(local, "x.txt", "x", "unpushed")
        config_file = tmp_path / "watch.toml"
        config_file.write_text(f'roots = [{json.dumps(str(root))}]\n')
        monkeypatch.setattr(sys, "argv", ["pygit-watch", "--once", "--json", "--config", str(config_file)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        data = json.loads(capsys.readouterr().out)
        assert data['severity'] == 'YELLOW'
        assert data['rows'] == [{'path': str(local), 'tag': 'AHEAD +1'}]

    def test_once_exit_code_red(self, root, remotes, tmp_path, monkeypatch, capsys):
        _, local = _make_repo_pair(root, "proj", remotes)
        (local / "wip.txt").write_text("wip")
        config_file = tmp_path / "watch.toml"
        config_file.write_text(f'roots = [{json.dumps(str(root))}]\n')
        monkeypatch.setattr(sys, "argv", ["pygit-watch", "--once", "--config", str(config_file)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "RED" in out
        assert f"[DIRTY] {local}" in out
