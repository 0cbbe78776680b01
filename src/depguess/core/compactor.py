"""
Compact visited import paths into repository-level roots.

Many repositories expose several importable subpackages (host/org/repo/a,
host/org/repo/b). A manifest only needs the owning repository once, so each path
is truncated to its canonical root: the first three segments when it has four or
more, otherwise the path itself.

The three-segment rule assumes a host/organization/repository layout. Packages
hosted at other depths are compacted at the wrong level; this is a known
approximation of real version-control root detection and is kept as is.
"""

from __future__ import annotations

from collections.abc import Iterable

SEPARATOR = "/"
CANONICAL_SEGMENTS = 3


def canonical_root(import_path: str, sep: str = SEPARATOR) -> str:
    """Truncate import_path to its first three segments when it has four or more."""
    parts = import_path.split(sep, CANONICAL_SEGMENTS)
    if len(parts) <= CANONICAL_SEGMENTS:
        return import_path
    return sep.join(parts[:CANONICAL_SEGMENTS])


def _ancestors(path: str, sep: str) -> list[str]:
    """Strict path-prefixes of path, shortest first."""
    parts = path.split(sep)
    return [sep.join(parts[:i]) for i in range(1, len(parts))]


def is_path_prefix(prefix: str, path: str, sep: str = SEPARATOR) -> bool:
    """True if prefix is a strict segment-wise prefix of path (a/b of a/b/c, not of a/bc)."""
    return path.startswith(prefix + sep)


def compact(paths: Iterable[str], sep: str = SEPARATOR) -> set[str]:
    """
    Reduce paths to a deduplicated, prefix-free set of canonical roots.

    A root that lies under another root in the result (golang.org/x/net under
    golang.org/x) is folded into it.
    """
    roots = {canonical_root(p, sep) for p in paths}
    return {r for r in roots if not any(is_path_prefix(other, r, sep) for other in roots)}


def group_subpackages(paths: Iterable[str], sep: str = SEPARATOR) -> dict[str, list[str]]:
    """
    Map each compacted root to the sorted subpackages folded into it.

    Subpackages are given relative to their root; a root that was itself visited
    contributes no entry.
    """
    paths = list(paths)
    roots = compact(paths, sep)
    groups: dict[str, set[str]] = {r: set() for r in roots}
    for path in paths:
        owner = next(c for c in _ancestors(path, sep) + [path] if c in roots)
        if owner != path:
            groups[owner].add(path[len(owner) + len(sep):])
    return {root: sorted(subs) for root, subs in groups.items()}
