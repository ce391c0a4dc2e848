"""
pygit-watch: Git Repository Sync Watcher

Keeps track of every git repository under a set of root directories and
reduces their sync state to one severity signal plus a per-repository list.
"""

from colorama import init as colorama_init

colorama_init(autoreset=True)

__version__ = "1.0.0"

# Re-export public API so `from pygit_watch import X` keeps working.
from pygit_watch.aggregator import ALL_CLEAN_MESSAGE, SUMMARY_LIMIT, StateAggregator  # noqa: E402
from pygit_watch.cache import RepoCache  # noqa: E402
from pygit_watch.checker import StatusChecker, check_repository, classify, parse_branch_ab  # noqa: E402
from pygit_watch.cli import main  # noqa: E402
from pygit_watch.config import (  # noqa: E402
    ConfigError,
    create_argument_parser,
    default_config,
    load_config,
    load_config_file,
)
from pygit_watch.ignore import matches  # noqa: E402
from pygit_watch.models import (  # noqa: E402
    ListRow,
    OperationResult,
    OperationType,
    RepoState,
    RepoStatus,
    ScanOutcome,
    Severity,
    WatchConfig,
)
from pygit_watch.output import SECTION_WIDTH, ConsoleOutputHandler, NullOutputHandler  # noqa: E402
from pygit_watch.protocols import GitRepository, OutputHandler, Publisher  # noqa: E402
from pygit_watch.reporter import JsonPublisher, ReportPublisher, format_row  # noqa: E402
from pygit_watch.repository import GitPythonRepository  # noqa: E402
from pygit_watch.scanner import MARKER_DIR, RepositoryScanner  # noqa: E402
from pygit_watch.scheduler import ScanScheduler  # noqa: E402
from pygit_watch.watcher import LiveRepoWatcher, MarkerEventHandler  # noqa: E402

__all__ = [
    "__version__",
    # Models
    "ListRow",
    "OperationResult",
    "OperationType",
    "RepoState",
    "RepoStatus",
    "ScanOutcome",
    "Severity",
    "WatchConfig",
    # Protocols
    "GitRepository",
    "OutputHandler",
    "Publisher",
    # Implementations
    "GitPythonRepository",
    "ConsoleOutputHandler",
    "NullOutputHandler",
    "JsonPublisher",
    "ReportPublisher",
    "SECTION_WIDTH",
    "format_row",
    # Services
    "LiveRepoWatcher",
    "MarkerEventHandler",
    "RepoCache",
    "RepositoryScanner",
    "ScanScheduler",
    "StateAggregator",
    "StatusChecker",
    "ALL_CLEAN_MESSAGE",
    "MARKER_DIR",
    "SUMMARY_LIMIT",
    "check_repository",
    "classify",
    "matches",
    "parse_branch_ab",
    # Config / CLI
    "ConfigError",
    "create_argument_parser",
    "default_config",
    "load_config",
    "load_config_file",
    "main",
]
