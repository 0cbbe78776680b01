"""Walk the import graph depth-first from a root directory."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from depguess.core.resolver import ImportProvider, PackageDescriptor, resolve

logger = logging.getLogger(__name__)


class VisitedSet:
    """Every non-base-distribution package reached from one root, keyed by import path."""

    def __init__(self, root: str | None = None) -> None:
        self.root = root
        self._packages: dict[str, PackageDescriptor] = {}
        # requested name (./sub) -> resolved import path (_/abs/proj/sub)
        self._aliases: dict[str, str] = {}

    def add(self, package: PackageDescriptor) -> None:
        if package.is_base_distribution:
            raise ValueError(f"base distribution package {package.import_path!r} cannot be visited")
        self._packages[package.import_path] = package

    def alias(self, name: str, import_path: str) -> None:
        """Record that the import name resolved to import_path."""
        if name != import_path:
            self._aliases[name] = import_path

    def canonical(self, name: str) -> str:
        """The resolved import path for a requested name."""
        return self._aliases.get(name, name)

    def get(self, import_path: str) -> PackageDescriptor | None:
        return self._packages.get(self.canonical(import_path))

    def __contains__(self, import_path: object) -> bool:
        return import_path in self._packages

    def __iter__(self) -> Iterator[str]:
        return iter(self._packages)

    def __len__(self) -> int:
        return len(self._packages)

    def paths(self) -> set[str]:
        return set(self._packages)

    def closure(self) -> set[str]:
        """The transitive closure: every visited path except the root's own."""
        return {p for p in self._packages if p != self.root}

    def edges(self) -> set[tuple[str, str]]:
        """(importer, imported) pairs between visited packages, by resolved import path."""
        return {
            (path, self.canonical(imp))
            for path, pkg in self._packages.items()
            for imp in pkg.imports
            if self.canonical(imp) in self._packages
        }


def walk(root_dir: Path, provider: ImportProvider) -> VisitedSet:
    """
    Collect every non-base-distribution package reachable from root_dir.

    The root directory is resolved as "." relative to itself and every import is
    resolved relative to root_dir. A package is marked visited before its imports
    are queued, so cyclic graphs terminate. Any ResolutionError aborts the walk.
    """
    root_dir = Path(root_dir)
    visited = VisitedSet()
    # Requested names already handled; relative names may differ from resolved paths.
    seen: set[str] = set()
    stack: list[str] = ["."]

    while stack:
        name = stack.pop()
        if name in seen or name in visited:
            continue
        seen.add(name)
        logger.debug("Resolving %s", name)
        package = resolve(name, root_dir, provider)
        if visited.root is None:
            visited.root = package.import_path
        if package.is_base_distribution:
            continue
        visited.alias(name, package.import_path)
        if package.import_path in visited:
            continue
        visited.add(package)
        for imp in reversed(package.imports):
            if imp not in visited and imp not in seen:
                stack.append(imp)

    return visited
