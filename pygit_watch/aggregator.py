"""StateAggregator: folds per-repository statuses into one signal and a short summary."""

from __future__ import annotations

from pygit_watch.models import ListRow, RepoState, RepoStatus, ScanOutcome, Severity

ALL_CLEAN_MESSAGE = "All repos clean"
SUMMARY_LIMIT = 120
MAX_EXAMPLES = 3

RED_STATES = frozenset({RepoState.DIRTY, RepoState.BEHIND_ONLY, RepoState.DIVERGED})
YELLOW_STATES = frozenset({RepoState.AHEAD_ONLY, RepoState.NO_UPSTREAM})


def sort_statuses(statuses: list[RepoStatus]) -> list[RepoStatus]:
    """Order by path, case-insensitively."""
    return sorted(statuses, key=lambda s: (s.key, s.path))


class StateAggregator:
    """Reduces a status list to (severity, summary) and the list rows"""

    def aggregate(self, statuses: list[RepoStatus]) -> tuple[Severity, str]:
        """Return the overall severity and a summary of at most SUMMARY_LIMIT characters.

        ERROR statuses never raise the severity on their own.
        """
        return self.severity(statuses), self.summary(statuses)

    def severity(self, statuses: list[RepoStatus]) -> Severity:
        states = {s.state for s in statuses}
        if states & RED_STATES:
            return Severity.RED
        if states & YELLOW_STATES:
            return Severity.YELLOW
        return Severity.GREEN

    def summary(self, statuses: list[RepoStatus]) -> str:
        dirty = self._count(statuses, RepoState.DIRTY)
        ahead = self._count(statuses, RepoState.AHEAD_ONLY)
        behind = self._count(statuses, RepoState.BEHIND_ONLY, RepoState.DIVERGED)
        no_upstream = self._count(statuses, RepoState.NO_UPSTREAM)

        if dirty == ahead == behind == no_upstream == 0:
            return ALL_CLEAN_MESSAGE

        clauses = []
        if dirty:
            clauses.append(f"Dirty: {dirty}.")
        if ahead:
            clauses.append(f"Unpushed: {ahead}.")
        if behind:
            clauses.append(f"Behind: {behind}.")
        if no_upstream:
            clauses.append(f"No Upstream: {no_upstream}.")

        examples = [
            f"• {s.name}"
            for s in sort_statuses(statuses)
            if s.state not in (RepoState.CLEAN, RepoState.NO_UPSTREAM)
        ][:MAX_EXAMPLES]

        text = "\n".join([" ".join(clauses), *examples])
        return text[:SUMMARY_LIMIT]

    def build_rows(self, statuses: list[RepoStatus]) -> list[ListRow]:
        """One row per non-clean repository, in path order."""
        return [
            ListRow(s.path, s.display_tag)
            for s in sort_statuses(statuses)
            if s.state is not RepoState.CLEAN
        ]

    def build_outcome(self, statuses: list[RepoStatus]) -> ScanOutcome:
        """Sort the statuses and assemble everything a cycle publishes."""
        ordered = sort_statuses(statuses)
        severity, summary = self.aggregate(ordered)
        return ScanOutcome(severity, summary, self.build_rows(ordered), ordered)

    @staticmethod
    def _count(statuses: list[RepoStatus], *states: RepoState) -> int:
        return sum(1 for s in statuses if s.state in states)
