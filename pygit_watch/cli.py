"""CLI entry point: main() function."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from pathlib import Path

from pygit_watch.checker import StatusChecker
from pygit_watch.config import create_argument_parser, default_config_path, load_config
from pygit_watch.models import Severity, WatchConfig
from pygit_watch.output import ConsoleOutputHandler, NullOutputHandler
from pygit_watch.reporter import JsonPublisher, ReportPublisher
from pygit_watch.scheduler import ScanScheduler


def main():
    """Main entry point"""
    parser = create_argument_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config_path = Path(args.config).expanduser() if args.config else None

    def effective_config() -> WatchConfig:
        # Reloaded every cycle; CLI flags win over the file for this run
        config = load_config(config_path)
        overrides = {}
        if args.max_workers is not None:
            overrides['max_workers'] = max(1, args.max_workers)
        if args.interval is not None:
            overrides['poll_interval_seconds'] = args.interval
        return config.with_updates(**overrides) if overrides else config

    output = NullOutputHandler() if args.json_output else ConsoleOutputHandler(verbose=args.verbose)
    publisher = JsonPublisher() if args.json_output else ReportPublisher(output)
    show_progress = args.once and not args.json_output
    output.debug(f"Using config file {config_path or default_config_path()}")

    scheduler = ScanScheduler(
        publisher,
        config_loader=effective_config,
        checker_factory=lambda cfg: StatusChecker(max_workers=cfg.max_workers, show_progress=show_progress),
    )

    try:
        if args.once:
            try:
                outcome = asyncio.run(scheduler.rescan())
            finally:
                scheduler.watcher.stop()
            sys.exit(1 if outcome.severity in (Severity.RED, Severity.GLOBAL_ERROR) else 0)

        asyncio.run(_watch(scheduler, output))
    except KeyboardInterrupt:
        if not args.json_output:
            output.warning("\n\nInterrupted by user")
        sys.exit(130)


async def _watch(scheduler: ScanScheduler, output) -> None:
    """Run the scheduler until interrupted.

    Where the platform has them, SIGUSR1 requests an immediate rescan and
    SIGHUP a rescan with full discovery.
    """
    loop = asyncio.get_running_loop()
    if hasattr(signal, 'SIGUSR1') and hasattr(signal, 'SIGHUP'):
        loop.add_signal_handler(signal.SIGUSR1, scheduler.request_rescan)
        loop.add_signal_handler(signal.SIGHUP, _rediscover, scheduler)
        output.info("Watching repositories (SIGUSR1 rescans, SIGHUP rediscovers, Ctrl+C quits)")
    else:
        output.info("Watching repositories (Ctrl+C to quit)")
    await scheduler.run()


def _rediscover(scheduler: ScanScheduler) -> None:
    scheduler.force_discovery()
    scheduler.request_rescan()
