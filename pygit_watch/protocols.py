"""Protocols and abstract interfaces for dependency injection."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from pygit_watch.models import OperationResult, ScanOutcome, Severity


class GitRepository(Protocol):
    """Protocol for the two read-only git queries"""

    def short_status(self) -> OperationResult: ...
    def tracking_status(self) -> OperationResult: ...
    def close(self) -> None: ...

    @property
    def path(self) -> Path: ...


class OutputHandler(Protocol):
    """Protocol for handling output"""

    def info(self, message: str, indent: int = 0) -> None: ...
    def success(self, message: str, indent: int = 0) -> None: ...
    def warning(self, message: str, indent: int = 0) -> None: ...
    def error(self, message: str, indent: int = 0) -> None: ...
    def severity(self, level: Severity, message: str) -> None: ...
    def section(self, title: str) -> None: ...
    def debug(self, message: str) -> None: ...


class Publisher(Protocol):
    """Receives the outcome of every scan cycle (the presentation layer)"""

    def publish(self, outcome: ScanOutcome) -> None: ...
