"""Public API: use depguess from Python or from other tools."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from depguess.core.builder import DependencyRecord, build_dependency_list
from depguess.core.compactor import canonical_root, compact, group_subpackages
from depguess.core.errors import EnvironmentLookupError
from depguess.core.finder import SourceLayout
from depguess.core.resolver import (
    GoSourceProvider,
    ImportProvider,
    PackageDescriptor,
    resolve,
)
from depguess.core.tree import ImportNode, build_import_tree
from depguess.core.walker import VisitedSet, walk

logger = logging.getLogger(__name__)


@dataclass
class Discovery:
    """Everything one discovery run produced, from the walked graph to the final list."""

    root_dir: Path
    visited: VisitedSet
    roots: set[str] = field(default_factory=set)
    dependencies: list[DependencyRecord] = field(default_factory=list)

    @property
    def root_import_path(self) -> str | None:
        return self.visited.root

    @property
    def root_canonical_path(self) -> str | None:
        if self.visited.root is None:
            return None
        return canonical_root(self.visited.root)

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output."""
        return {
            "root_dir": str(self.root_dir),
            "root": self.root_import_path,
            "packages": sorted(self.visited.closure()),
            "dependencies": [d.to_dict() for d in self.dependencies],
        }


def working_directory(path: str | Path | None = None) -> Path:
    """
    Resolve the directory discovery starts from (the current directory if None).

    Raises EnvironmentLookupError if it cannot be determined or is not a directory.
    """
    try:
        directory = Path.cwd() if path is None else Path(path).expanduser().resolve()
    except OSError as e:
        raise EnvironmentLookupError(f"cannot determine working directory: {e}") from e
    if not directory.is_dir():
        raise EnvironmentLookupError(f"not a directory: {directory}")
    return directory


def _provider(provider: ImportProvider | None, layout: SourceLayout | None) -> ImportProvider:
    if provider is not None:
        return provider
    return GoSourceProvider(layout)


def discover(
    root_dir: str | Path | None = None,
    *,
    provider: ImportProvider | None = None,
    layout: SourceLayout | None = None,
) -> Discovery:
    """
    Discover and compact the external dependencies of the package in root_dir.

    Args:
        root_dir: Project directory; None means the current directory.
        provider: Capability answering package questions. Defaults to a
            GoSourceProvider over layout (or GOPATH/GOROOT from the environment).
        layout: Source layout for the default provider.

    Returns:
        Discovery holding the visited packages, compacted roots and the sorted
        dependency list (without the project's own root).

    Raises:
        EnvironmentLookupError: root_dir cannot be determined.
        ResolutionError: any reachable import cannot be resolved; nothing partial
            is returned.
    """
    directory = working_directory(root_dir)
    visited = walk(directory, _provider(provider, layout))
    paths = visited.paths()
    roots = compact(paths)
    result = Discovery(root_dir=directory, visited=visited, roots=roots)
    result.dependencies = build_dependency_list(
        roots,
        result.root_canonical_path,
        subpackages=group_subpackages(paths),
    )
    for dep in result.dependencies:
        logger.info("Found reference to %s", dep.name)
    return result


def guess_deps(
    root_dir: str | Path | None = None,
    *,
    provider: ImportProvider | None = None,
    layout: SourceLayout | None = None,
) -> list[DependencyRecord]:
    """Return the sorted dependency records for the package in root_dir."""
    return discover(root_dir, provider=provider, layout=layout).dependencies


def resolve_package(
    import_path: str,
    working_dir: str | Path | None = None,
    *,
    provider: ImportProvider | None = None,
    layout: SourceLayout | None = None,
) -> PackageDescriptor:
    """Resolve a single import path relative to working_dir (current directory if None)."""
    return resolve(import_path, working_directory(working_dir), _provider(provider, layout))


def build_tree(
    root_dir: str | Path | None = None,
    *,
    max_depth: int | None = None,
    include_base: bool = False,
    provider: ImportProvider | None = None,
    layout: SourceLayout | None = None,
) -> ImportNode | None:
    """
    Walk root_dir and return its import tree.

    Args:
        root_dir: Project directory; None means the current directory.
        max_depth: Optional maximum depth; None = unlimited.
        include_base: Whether to list base-distribution imports as leaves.
        provider: Capability answering package questions.
        layout: Source layout for the default provider.
    """
    directory = working_directory(root_dir)
    visited = walk(directory, _provider(provider, layout))
    return build_import_tree(visited, max_depth=max_depth, include_base=include_base)
