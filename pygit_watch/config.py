"""Configuration: argument parser, defaults and config file loader."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any

from pygit_watch.models import MIN_POLL_INTERVAL, WatchConfig

try:
    import tomllib
except ModuleNotFoundError:
    try:
        import tomli as tomllib  # type: ignore[no-redef]
    except ImportError:
        tomllib = None  # type: ignore[assignment]

CONFIG_FILENAME = '.pygit-watch.toml'

# TOML key -> WatchConfig field; camelCase spellings come from older JSON configs
KEY_ALIASES = {
    'roots': 'roots',
    'ignore_patterns': 'ignore_patterns',
    'ignorePatterns': 'ignore_patterns',
    'poll_interval_seconds': 'poll_interval_seconds',
    'intervalSeconds': 'poll_interval_seconds',
    'discovery_interval_minutes': 'discovery_interval_minutes',
    'repoDiscoveryMinutes': 'discovery_interval_minutes',
    'max_workers': 'max_workers',
}

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """A configuration value has the wrong type or range."""


def create_argument_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with all pygit-watch flags."""
    # Lazy import to avoid circular dependency with __init__.py
    from pygit_watch import __version__

    parser = argparse.ArgumentParser(
        description="Watch git repositories under a set of roots and report their sync state",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                # Watch the configured roots
  %(prog)s --once                         # Single scan, exit 1 if anything needs attention
  %(prog)s --once --json                  # Single scan as JSON
  %(prog)s --config ~/watch.toml          # Use another config file
        """
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--config', type=str, default=None,
                       help=f'Path to config file (default: ~/{CONFIG_FILENAME})')
    parser.add_argument('--once', action='store_true',
                       help='Run a single scan cycle and exit')
    parser.add_argument('--json', dest='json_output', action='store_true',
                       help='Output results as JSON (suppresses normal output)')
    parser.add_argument('--max-workers', type=int, default=None,
                       help='Max concurrent git queries (default: min(cpu_count, 8))')
    parser.add_argument('--interval', type=int, default=None,
                       help=f'Poll interval in seconds, minimum {MIN_POLL_INTERVAL} (default: from config)')
    parser.add_argument('--verbose', action='store_true',
                       help='Verbose output')

    return parser


def default_config_path() -> Path:
    """Location of the config file when --config is not given."""
    return Path.home() / CONFIG_FILENAME


def default_config() -> WatchConfig:
    """Plausible roots that exist on this machine plus baseline ignore patterns."""
    home = Path.home()
    candidates = [home / 'source', home / 'Documents', Path.cwd()]
    roots: list[str] = []
    seen: set[str] = set()
    for candidate in candidates:
        if candidate.is_dir() and str(candidate).casefold() not in seen:
            seen.add(str(candidate).casefold())
            roots.append(str(candidate))

    sep = os.sep
    return WatchConfig(
        roots=roots,
        ignore_patterns=[
            f"*{sep}.git{sep}modules*",
            "node_modules",
            f"*{sep}bin{sep}*",
            f"*{sep}obj{sep}*",
        ],
        poll_interval_seconds=60,
        discovery_interval_minutes=60,
    )


def load_config_file(config_path: Path) -> dict[str, Any]:
    """Read a TOML config file.

    Returns empty dict if not found, unreadable, or tomllib is unavailable.
    """
    if not config_path.is_file():
        return {}
    if tomllib is None:
        logger.warning("Found %s but tomllib/tomli not available (Python 3.11+ or pip install tomli). Ignoring.",
                       config_path)
        return {}
    try:
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to parse %s: %s", config_path, e)
        return {}


def config_from_mapping(data: dict[str, Any], base: WatchConfig) -> WatchConfig:
    """Overlay recognised keys from ``data`` onto ``base``. Raises ConfigError on bad values."""
    updates: dict[str, Any] = {}
    for key, value in data.items():
        name = KEY_ALIASES.get(key)
        if name is None:
            continue
        if name in ('roots', 'ignore_patterns'):
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"'{key}' must be a list of strings")
            updates[name] = list(value)
        else:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"'{key}' must be an integer")
            updates[name] = value

    if 'poll_interval_seconds' in updates:
        updates['poll_interval_seconds'] = max(MIN_POLL_INTERVAL, updates['poll_interval_seconds'])
    if updates.get('max_workers', 1) < 1:
        raise ConfigError("'max_workers' must be at least 1")
    if not updates.get('roots', True):
        # An empty root list would watch nothing
        del updates['roots']

    return base.with_updates(**updates)


def load_config(config_path: Path | None = None) -> WatchConfig:
    """Load the config file, falling back to defaults for anything missing or invalid."""
    path = config_path or default_config_path()
    defaults = default_config()
    data = load_config_file(path)
    if not data:
        return defaults
    try:
        return config_from_mapping(data, defaults)
    except ConfigError as e:
        logger.warning("Invalid config %s: %s. Using defaults.", path, e)
        return defaults
