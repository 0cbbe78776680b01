"""Tests for depguess.core.walker module."""

from __future__ import annotations

from pathlib import Path

import pytest

from depguess.core.errors import ResolutionError
from depguess.core.resolver import PackageDescriptor, StaticImportProvider
from depguess.core.walker import VisitedSet, walk

ROOT = Path("/project")


class CountingProvider(StaticImportProvider):
    """Records how often each package was located."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.located: list[str] = []

    def locate(self, import_path, working_dir):
        self.located.append(import_path)
        return super().locate(import_path, working_dir)


class TestVisitedSet:
    """Tests for VisitedSet."""

    def test_add_and_lookup(self) -> None:
        visited = VisitedSet(root="a")
        pkg = PackageDescriptor("a", None, ["b"])
        visited.add(pkg)
        assert "a" in visited
        assert "b" not in visited
        assert visited.get("a") is pkg
        assert len(visited) == 1
        assert list(visited) == ["a"]

    def test_rejects_base_distribution(self) -> None:
        visited = VisitedSet()
        with pytest.raises(ValueError, match="base distribution"):
            visited.add(PackageDescriptor("fmt", None, is_base_distribution=True))
        assert len(visited) == 0

    def test_closure_excludes_root(self) -> None:
        visited = VisitedSet(root="a")
        visited.add(PackageDescriptor("a", None, ["b"]))
        visited.add(PackageDescriptor("b", None))
        assert visited.paths() == {"a", "b"}
        assert visited.closure() == {"b"}

    def test_edges_only_between_visited(self) -> None:
        visited = VisitedSet(root="a")
        visited.add(PackageDescriptor("a", None, ["b", "fmt"]))
        visited.add(PackageDescriptor("b", None, ["a"]))
        assert visited.edges() == {("a", "b"), ("b", "a")}

    def test_aliases_translate_requested_names(self) -> None:
        visited = VisitedSet(root="_/proj")
        visited.add(PackageDescriptor("_/proj", None, ["./sub"]))
        sub = PackageDescriptor("_/proj/sub", None)
        visited.add(sub)
        visited.alias("./sub", "_/proj/sub")
        assert visited.canonical("./sub") == "_/proj/sub"
        assert visited.get("./sub") is sub
        assert "./sub" not in visited
        assert visited.edges() == {("_/proj", "_/proj/sub")}


class TestWalk:
    """Tests for walk."""

    def test_transitive_closure(self) -> None:
        provider = StaticImportProvider(
            {
                "h/o/self": ["h/o/a", "fmt"],
                "h/o/a": ["h/o/b/x", "h/o/c"],
                "h/o/b/x": ["h/o/c", "os"],
                "h/o/c": [],
                "h/o/unreached": [],
            },
            base=["fmt", "os"],
            root="h/o/self",
        )
        visited = walk(ROOT, provider)
        assert visited.root == "h/o/self"
        assert visited.closure() == {"h/o/a", "h/o/b/x", "h/o/c"}

    def test_base_distribution_is_never_visited_or_expanded(self) -> None:
        # "fmt" claims to import a path that cannot be resolved; it must not be followed
        provider = CountingProvider(
            {"self": ["fmt"], "fmt": ["does/not/exist"]},
            base=["fmt"],
            root="self",
        )
        visited = walk(ROOT, provider)
        assert "fmt" not in visited
        assert "does/not/exist" not in provider.located

    def test_each_package_resolved_once(self) -> None:
        provider = CountingProvider(
            {"self": ["a", "b", "fmt"], "a": ["c", "fmt"], "b": ["c", "fmt"], "c": ["fmt"]},
            base=["fmt"],
            root="self",
        )
        walk(ROOT, provider)
        assert sorted(provider.located) == [".", "a", "b", "c", "fmt"]

    def test_cycle_terminates(self) -> None:
        provider = StaticImportProvider(
            {"self": ["a"], "a": ["b"], "b": ["c"], "c": ["a", "self"]},
            root="self",
        )
        visited = walk(ROOT, provider)
        assert visited.paths() == {"self", "a", "b", "c"}

    def test_self_import_terminates(self) -> None:
        provider = StaticImportProvider({"self": ["self"]}, root="self")
        assert walk(ROOT, provider).closure() == set()

    def test_no_external_imports(self) -> None:
        provider = StaticImportProvider({"self": ["fmt", "os"]}, base=["fmt", "os"], root="self")
        visited = walk(ROOT, provider)
        assert visited.paths() == {"self"}
        assert visited.closure() == set()

    def test_base_root(self) -> None:
        provider = StaticImportProvider({}, base=["fmt"], root="fmt")
        visited = walk(ROOT, provider)
        assert visited.root == "fmt"
        assert len(visited) == 0

    def test_failure_aborts_walk(self) -> None:
        provider = StaticImportProvider(
            {"self": ["a"], "a": ["b"], "b": ["missing/pkg"]},
            root="self",
        )
        with pytest.raises(ResolutionError) as exc:
            walk(ROOT, provider)
        assert exc.value.import_path == "missing/pkg"

    def test_unresolvable_root(self) -> None:
        with pytest.raises(ResolutionError):
            walk(ROOT, StaticImportProvider({"a": []}, root="absent"))

    def test_deep_chain_does_not_recurse(self) -> None:
        depth = 5000
        graph = {f"p{i}": [f"p{i + 1}"] for i in range(depth)}
        graph[f"p{depth}"] = []
        visited = walk(ROOT, StaticImportProvider(graph, root="p0"))
        assert len(visited) == depth + 1

    def test_working_dir_is_threaded(self, tmp_path: Path) -> None:
        seen_dirs: set[Path] = set()

        class Recording(StaticImportProvider):
            def locate(self, import_path, working_dir):
                seen_dirs.add(working_dir)
                return super().locate(import_path, working_dir)

        walk(tmp_path, Recording({"self": ["a"], "a": []}, root="self"))
        assert seen_dirs == {tmp_path}

    def test_walk_on_disk(self, go_tree) -> None:
        go_tree.std("fmt")
        go_tree.std("net/http", "fmt")
        root = go_tree.package("github.com/me/app", "fmt", "net/http", "github.com/lib/pq")
        go_tree.package("github.com/lib/pq", "github.com/lib/pq/oid")
        go_tree.package("github.com/lib/pq/oid", "fmt")
        visited = walk(root, go_tree.provider)
        assert visited.root == "github.com/me/app"
        assert visited.closure() == {"github.com/lib/pq", "github.com/lib/pq/oid"}
        assert visited.get("github.com/lib/pq").directory == go_tree.gopath / "src" / "github.com" / "lib" / "pq"
