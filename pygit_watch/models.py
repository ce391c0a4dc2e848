"""Domain models: enums, dataclasses, and configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from pathlib import PurePath
from typing import Any


class RepoState(Enum):
    """Synchronization state of one repository for one cycle"""
    CLEAN = auto()
    DIRTY = auto()
    AHEAD_ONLY = auto()
    BEHIND_ONLY = auto()
    DIVERGED = auto()
    NO_UPSTREAM = auto()
    ERROR = auto()


class Severity(Enum):
    """Overall signal handed to the presentation layer"""
    GREEN = auto()
    YELLOW = auto()
    RED = auto()
    GLOBAL_ERROR = auto()


class OperationType(Enum):
    """Git queries issued against a repository"""
    STATUS = auto()
    TRACKING = auto()


@dataclass(frozen=True)
class OperationResult:
    """Result of a single git query"""
    success: bool
    operation: OperationType
    output: str = ""
    error: Exception | None = None


@dataclass(frozen=True, eq=False)
class RepoStatus:
    """Status of one repository.

    ``ahead`` and ``behind`` only carry meaning for AHEAD_ONLY, BEHIND_ONLY
    and DIVERGED; they are zero for every other state.  Identity is the
    path, compared case-insensitively.
    """
    path: str
    state: RepoState
    ahead: int = 0
    behind: int = 0

    @property
    def key(self) -> str:
        return self.path.casefold()

    @property
    def name(self) -> str:
        """Final path segment, used as the short display name."""
        return PurePath(self.path).name or self.path

    @property
    def display_tag(self) -> str | None:
        """Short tag for the repository list, or None for CLEAN/ERROR."""
        if self.state is RepoState.DIRTY:
            return "DIRTY"
        if self.state is RepoState.AHEAD_ONLY:
            return f"AHEAD +{self.ahead}"
        if self.state is RepoState.BEHIND_ONLY:
            return f"BEHIND -{self.behind}"
        if self.state is RepoState.DIVERGED:
            return f"DIV +{self.ahead}/-{self.behind}"
        if self.state is RepoState.NO_UPSTREAM:
            return "NO-UPSTREAM"
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RepoStatus):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)


@dataclass(frozen=True)
class ListRow:
    """One entry of the non-clean repository list"""
    path: str
    display_tag: str | None = None


@dataclass
class ScanOutcome:
    """Everything one scan cycle publishes"""
    severity: Severity
    summary: str
    rows: list[ListRow] = field(default_factory=list)
    statuses: list[RepoStatus] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_global_error(self) -> bool:
        return self.severity is Severity.GLOBAL_ERROR

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON output."""
        return {
            'severity': self.severity.name,
            'summary': self.summary,
            'rows': [{'path': r.path, 'tag': r.display_tag} for r in self.rows],
            'repositories': [
                {
                    'path': s.path,
                    'state': s.state.name,
                    'ahead': s.ahead,
                    'behind': s.behind,
                }
                for s in self.statuses
            ],
            'timestamp': self.timestamp.isoformat(),
        }


MIN_POLL_INTERVAL = 5


@dataclass(frozen=True)
class WatchConfig:
    """Configuration for the watch loop"""
    roots: list[str] = field(default_factory=list)
    ignore_patterns: list[str] = field(default_factory=list)
    poll_interval_seconds: int = 60
    discovery_interval_minutes: int = 60
    max_workers: int = field(default_factory=lambda: min(os.cpu_count() or 4, 8))

    @property
    def poll_interval(self) -> int:
        """Poll interval with the minimum enforced."""
        return max(MIN_POLL_INTERVAL, self.poll_interval_seconds)

    @property
    def discovery_interval(self) -> float:
        """Discovery interval in seconds."""
        return self.discovery_interval_minutes * 60.0

    def with_updates(self, **kwargs) -> WatchConfig:
        """Return a new WatchConfig with the given fields replaced."""
        current = {f.name: getattr(self, f.name) for f in self.__dataclass_fields__.values()}
        current.update(kwargs)
        return WatchConfig(**current)
