"""Publishers: hand each scan outcome to the console or to JSON."""

from __future__ import annotations

import json
import sys
from typing import TextIO

from pygit_watch.models import ListRow, ScanOutcome
from pygit_watch.output import SECTION_WIDTH
from pygit_watch.protocols import OutputHandler


def format_row(row: ListRow) -> str:
    """``[TAG] path``, or the bare path when the row has no tag."""
    return f"[{row.display_tag}] {row.path}" if row.display_tag else row.path


class ReportPublisher:
    """Renders each outcome as a short colored report"""

    def __init__(self, output: OutputHandler):
        """Create a publisher that writes to the given output handler."""
        self.output = output
        self.last: ScanOutcome | None = None

    def publish(self, outcome: ScanOutcome) -> None:
        """Print the severity line, the summary and the non-clean repository list."""
        self.last = outcome
        self.output.section(f"Scan at {outcome.timestamp:%H:%M:%S}")

        first, *rest = outcome.summary.splitlines() or [""]
        self.output.severity(outcome.severity, first)
        for line in rest:
            self.output.info(line, indent=1)

        if outcome.is_global_error:
            return

        self.output.info("")
        self.output.info(f"Repositories checked: {len(outcome.statuses)}")
        if not outcome.rows:
            self.output.success("Nothing needs attention")
            return

        self.output.info("-" * SECTION_WIDTH)
        for row in outcome.rows:
            if row.display_tag is None:
                self.output.error(format_row(row), indent=1)
            elif row.display_tag == "DIRTY" or row.display_tag.startswith(("BEHIND", "DIV")):
                self.output.warning(format_row(row), indent=1)
            else:
                self.output.info(format_row(row), indent=1)


class JsonPublisher:
    """Writes each outcome as one JSON document"""

    def __init__(self, stream: TextIO | None = None, indent: int | None = 2):
        """Write to ``stream``, or to stdout at publish time when None."""
        self.stream = stream
        self.indent = indent
        self.last: ScanOutcome | None = None

    def publish(self, outcome: ScanOutcome) -> None:
        """Write the outcome as JSON, one document per cycle."""
        self.last = outcome
        stream = self.stream or sys.stdout
        stream.write(json.dumps(outcome.to_dict(), indent=self.indent) + "\n")
        stream.flush()
