"""Ignore patterns: a lightweight textual path filter.

Only a single leading and/or trailing ``*`` is understood:

    ``foo``    path contains "foo"
    ``*foo*``  path contains "foo"
    ``*foo``   path ends with "foo"
    ``foo*``   path starts with "foo"

All comparisons are case-insensitive.
"""

from __future__ import annotations

from collections.abc import Iterable

WILDCARD = '*'


def _match_one(path: str, pattern: str) -> bool:
    core = pattern.strip(WILDCARD).casefold()
    if WILDCARD not in pattern:
        return core in path
    leading = pattern.startswith(WILDCARD)
    trailing = pattern.endswith(WILDCARD)
    if leading and trailing:
        return core in path
    if leading:
        return path.endswith(core)
    if trailing:
        return path.startswith(core)
    # A '*' in the middle has no special meaning
    return False


def matches(path: str, patterns: Iterable[str]) -> bool:
    """Return True on the first pattern that matches ``path``."""
    folded = str(path).casefold()
    for pattern in patterns:
        if not pattern or not pattern.strip():
            continue
        if _match_one(folded, pattern):
            return True
    return False


def can_prune(path: str, patterns: Iterable[str]) -> bool:
    """Return True if every path beneath ``path`` is ignored as well.

    Substring and prefix patterns that match a directory also match all of
    its descendants, so a walk may skip the whole subtree.  Suffix patterns
    give no such guarantee.
    """
    return matches(path, [p for p in patterns if p and not _is_suffix_only(p.strip())])


def _is_suffix_only(pattern: str) -> bool:
    return pattern.startswith(WILDCARD) and not pattern.endswith(WILDCARD)
