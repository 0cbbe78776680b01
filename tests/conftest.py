"""Shared fixtures: fake GOROOT/GOPATH trees on disk."""

from __future__ import annotations

from pathlib import Path

import pytest

from depguess.core.finder import SourceLayout
from depguess.core.resolver import GoSourceProvider


class GoTree:
    """A throwaway GOROOT and GOPATH with helpers to write packages into them."""

    def __init__(self, base: Path) -> None:
        self.goroot = (base / "goroot").resolve()
        self.gopath = (base / "gopath").resolve()
        (self.goroot / "src").mkdir(parents=True)
        (self.gopath / "src").mkdir(parents=True)
        self.layout = SourceLayout(gopath=[self.gopath], goroot=self.goroot)

    @property
    def provider(self) -> GoSourceProvider:
        return GoSourceProvider(self.layout)

    def std(self, import_path: str, *imports: str) -> Path:
        return self._write(self.goroot / "src", import_path, imports)

    def package(self, import_path: str, *imports: str) -> Path:
        return self._write(self.gopath / "src", import_path, imports)

    @staticmethod
    def _write(src: Path, import_path: str, imports: tuple[str, ...]) -> Path:
        directory = src.joinpath(*import_path.split("/"))
        directory.mkdir(parents=True, exist_ok=True)
        name = import_path.rsplit("/", 1)[-1].replace("-", "_").replace(".", "_")
        body = f"package {name}\n"
        if imports:
            body += "\nimport (\n" + "".join(f'\t"{imp}"\n' for imp in imports) + ")\n"
        body += "\nfunc init() {}\n"
        (directory / f"{name}.go").write_text(body)
        return directory


@pytest.fixture
def go_tree(tmp_path: Path) -> GoTree:
    return GoTree(tmp_path)
