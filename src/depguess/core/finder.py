"""Locate Go packages on disk from GOROOT and GOPATH source trees."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from depguess.core.parser import is_buildable_go_file

# Directories never searched when listing packages under a source root.
_SKIP_DIRS = ("testdata", "vendor")


def _env_paths(env_var: str, environ: Mapping[str, str] | None = None) -> list[Path]:
    """Split an environment variable by os.pathsep and return existing Paths."""
    env = os.environ if environ is None else environ
    value = env.get(env_var, "")
    if not value:
        return []
    return [Path(p).resolve() for p in value.split(os.pathsep) if p.strip() and Path(p).exists()]


def _default_gopath() -> list[Path]:
    """Go's default GOPATH is $HOME/go when the variable is unset."""
    try:
        candidate = Path.home() / "go"
    except RuntimeError:
        return []
    return [candidate.resolve()] if candidate.is_dir() else []


def _relative_to(path: Path, base: Path) -> Path | None:
    try:
        return path.relative_to(base)
    except ValueError:
        return None


@dataclass
class SourceLayout:
    """Where Go sources live: the toolchain root and the workspace roots."""

    gopath: list[Path] = field(default_factory=list)
    goroot: Path | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SourceLayout:
        """
        Build a layout from GOPATH and GOROOT.

        GOPATH may list several workspaces separated by os.pathsep; entries that do
        not exist are dropped. An unset or empty GOPATH falls back to ~/go when present.
        """
        env = os.environ if environ is None else environ
        if env.get("GOPATH"):
            gopath = _env_paths("GOPATH", env)
        else:
            gopath = _default_gopath()
        goroot_paths = _env_paths("GOROOT", env)
        return cls(gopath=gopath, goroot=goroot_paths[0] if goroot_paths else None)

    @property
    def goroot_src(self) -> Path | None:
        return self.goroot / "src" if self.goroot is not None else None

    @property
    def gopath_srcs(self) -> list[Path]:
        return [p / "src" for p in self.gopath]

    def search_roots(self) -> list[Path]:
        """Source roots in lookup order: GOROOT first, then each GOPATH entry."""
        roots = [self.goroot_src] if self.goroot_src is not None else []
        return roots + self.gopath_srcs

    def find_package_dir(self, import_path: str) -> Path | None:
        """Return the first <root>/src/<import_path> directory that exists, or None."""
        for src in self.search_roots():
            candidate = src.joinpath(*import_path.split("/"))
            if candidate.is_dir():
                return candidate
        return None

    def in_goroot(self, directory: Path) -> bool:
        """True if directory sits inside GOROOT/src."""
        if self.goroot_src is None:
            return False
        return _relative_to(directory.resolve(), self.goroot_src.resolve()) is not None

    def import_path_for_dir(self, directory: Path) -> str:
        """
        Import path of a directory.

        Relative to the src dir of the GOROOT or GOPATH entry that contains it;
        directories outside all of them get Go's local form "_" + absolute path.
        """
        resolved = directory.resolve()
        for src in self.search_roots():
            rel = _relative_to(resolved, src.resolve())
            if rel is not None and rel.parts:
                return rel.as_posix()
        return "_" + resolved.as_posix()


def _has_go_sources(directory: Path) -> bool:
    try:
        return any(is_buildable_go_file(p.name) for p in directory.iterdir() if p.is_file())
    except PermissionError:
        return False


def list_source_packages(root: Path) -> list[Path]:
    """
    List every directory under root (root included) that holds buildable Go files.

    Hidden directories, testdata and vendor trees are skipped. Returns sorted paths.
    """
    root = Path(root).resolve()
    packages: list[Path] = []
    if not root.is_dir():
        return packages
    for dirpath, dirnames, _files in os.walk(root):
        dirnames[:] = [
            d for d in dirnames if not d.startswith((".", "_")) and d not in _SKIP_DIRS
        ]
        current = Path(dirpath)
        if _has_go_sources(current):
            packages.append(current)
    return sorted(packages)
