"""Resolve one import path into a package descriptor."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from depguess.core.errors import ImportParseError, ResolutionError
from depguess.core.finder import SourceLayout
from depguess.core.parser import parse_package_dir


@dataclass
class PackageDescriptor:
    """One resolved package: where it lives and what it imports."""

    import_path: str
    directory: Path | None
    imports: list[str] = field(default_factory=list)
    is_base_distribution: bool = False

    def __post_init__(self) -> None:
        self.imports = list(dict.fromkeys(self.imports))

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output."""
        return {
            "import_path": self.import_path,
            "directory": str(self.directory) if self.directory is not None else None,
            "imports": list(self.imports),
            "is_base_distribution": self.is_base_distribution,
        }


class ImportProvider(Protocol):
    """Capability supplied by the hosting toolchain to answer package questions."""

    def locate(self, import_path: str, working_dir: Path) -> tuple[str, Path | None]:
        """Return (resolved import path, directory or None); raise ResolutionError if unknown."""
        ...

    def is_base_distribution(self, import_path: str, directory: Path | None) -> bool:
        """True if the package ships with the toolchain itself."""
        ...

    def immediate_imports(self, import_path: str, directory: Path | None) -> list[str]:
        """Import paths declared directly by the package."""
        ...


def _is_local_import(import_path: str) -> bool:
    return (
        import_path in (".", "..")
        or import_path.startswith(("./", "../"))
        or Path(import_path).is_absolute()
    )


def _looks_standard(import_path: str) -> bool:
    """Standard library paths have no dot in their first element (fmt, net/http)."""
    first = import_path.split("/", 1)[0]
    return "." not in first


class GoSourceProvider:
    """ImportProvider over GOROOT/GOPATH source trees on disk."""

    def __init__(self, layout: SourceLayout | None = None) -> None:
        self.layout = layout if layout is not None else SourceLayout.from_env()

    def locate(self, import_path: str, working_dir: Path) -> tuple[str, Path | None]:
        if _is_local_import(import_path):
            directory = (Path(working_dir) / import_path).resolve()
            if not directory.is_dir():
                raise ResolutionError(import_path, f"no such directory {directory}")
            return self.layout.import_path_for_dir(directory), directory
        if import_path == "C":
            return import_path, None
        directory = self.layout.find_package_dir(import_path)
        if directory is not None:
            return import_path, directory
        # Without a known GOROOT the standard library cannot be located on disk.
        if self.layout.goroot is None and _looks_standard(import_path):
            return import_path, None
        searched = self.layout.search_roots()
        if not searched:
            raise ResolutionError(import_path, "no GOROOT or GOPATH configured")
        where = ", ".join(str(p) for p in searched)
        raise ResolutionError(import_path, f"cannot find package in any of: {where}")

    def is_base_distribution(self, import_path: str, directory: Path | None) -> bool:
        if import_path == "C":
            return True
        if directory is None:
            return self.layout.goroot is None and _looks_standard(import_path)
        return self.layout.in_goroot(directory)

    def immediate_imports(self, import_path: str, directory: Path | None) -> list[str]:
        if directory is None:
            return []
        _name, imports = parse_package_dir(directory)
        return imports


class StaticImportProvider:
    """
    ImportProvider over an in-memory import graph.

    graph maps each known import path to its immediate imports; base lists paths that
    belong to the base distribution. The root directory (".") resolves to root.
    """

    def __init__(
        self,
        graph: Mapping[str, Sequence[str]],
        *,
        base: Iterable[str] = (),
        root: str = ".",
    ) -> None:
        self.graph = {path: list(imports) for path, imports in graph.items()}
        self.base = frozenset(base)
        self.root = root

    def locate(self, import_path: str, working_dir: Path) -> tuple[str, Path | None]:
        if import_path == ".":
            import_path = self.root
        if import_path in self.graph or import_path in self.base:
            return import_path, None
        raise ResolutionError(import_path, "not in import graph")

    def is_base_distribution(self, import_path: str, directory: Path | None) -> bool:
        return import_path in self.base

    def immediate_imports(self, import_path: str, directory: Path | None) -> list[str]:
        return list(self.graph.get(import_path, ()))


def resolve(import_path: str, working_dir: Path, provider: ImportProvider) -> PackageDescriptor:
    """
    Resolve import_path relative to working_dir into a PackageDescriptor.

    Base-distribution packages are returned without their imports: they are never
    expanded. Lookup, read and parse failures raise ResolutionError.
    """
    try:
        resolved, directory = provider.locate(import_path, Path(working_dir))
        if provider.is_base_distribution(resolved, directory):
            return PackageDescriptor(resolved, directory, is_base_distribution=True)
        imports = provider.immediate_imports(resolved, directory)
    except (OSError, ImportParseError) as e:
        raise ResolutionError(import_path, str(e)) from e
    return PackageDescriptor(resolved, directory, imports)
