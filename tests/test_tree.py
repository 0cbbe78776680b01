"""Tests for depguess.core.tree module."""

from __future__ import annotations

from pathlib import Path

from depguess.core.resolver import StaticImportProvider
from depguess.core.tree import CYCLE, SEEN, ImportNode, build_import_tree
from depguess.core.walker import VisitedSet, walk


def _walk(graph: dict[str, list[str]], base: tuple[str, ...] = ()) -> VisitedSet:
    return walk(Path("/project"), StaticImportProvider(graph, base=base, root="self"))


class TestImportNode:
    """Tests for ImportNode dataclass."""

    def test_basic_creation(self) -> None:
        node = ImportNode(import_path="a.com/b/c")
        assert node.directory == ""
        assert node.is_base_distribution is False
        assert node.note == ""
        assert node.children == []

    def test_to_dict_with_children(self) -> None:
        child = ImportNode(import_path="x.com/y/z", note=SEEN)
        parent = ImportNode(import_path="a.com/b/c", directory="/src/a", children=[child])
        d = parent.to_dict()
        assert d == {
            "import_path": "a.com/b/c",
            "directory": "/src/a",
            "is_base_distribution": False,
            "children": [
                {
                    "import_path": "x.com/y/z",
                    "directory": "",
                    "is_base_distribution": False,
                    "children": [],
                    "note": SEEN,
                }
            ],
        }


class TestBuildImportTree:
    """Tests for build_import_tree."""

    def test_empty_visited_set(self) -> None:
        assert build_import_tree(VisitedSet()) is None

    def test_base_root(self) -> None:
        visited = walk(Path("/p"), StaticImportProvider({}, base=["fmt"], root="fmt"))
        tree = build_import_tree(visited)
        assert tree == ImportNode(import_path="fmt", is_base_distribution=True)

    def test_simple_tree(self) -> None:
        tree = build_import_tree(_walk({"self": ["a", "fmt"], "a": ["b"], "b": []}, ("fmt",)))
        assert tree is not None
        assert tree.import_path == "self"
        assert [c.import_path for c in tree.children] == ["a"]
        assert [c.import_path for c in tree.children[0].children] == ["b"]

    def test_include_base(self) -> None:
        visited = _walk({"self": ["a", "fmt"], "a": []}, ("fmt",))
        tree = build_import_tree(visited, include_base=True)
        assert tree is not None
        assert [(c.import_path, c.is_base_distribution) for c in tree.children] == [
            ("a", False),
            ("fmt", True),
        ]

    def test_cycle_marker(self) -> None:
        tree = build_import_tree(_walk({"self": ["a"], "a": ["b"], "b": ["a"]}))
        assert tree is not None
        b = tree.children[0].children[0]
        assert b.import_path == "b"
        assert b.children == [ImportNode(import_path="a", note=CYCLE)]

    def test_shared_package_expanded_once(self) -> None:
        tree = build_import_tree(_walk({"self": ["a", "b"], "a": ["c"], "b": ["c"], "c": ["d"], "d": []}))
        assert tree is not None
        a, b = tree.children
        assert a.children[0].import_path == "c"
        assert a.children[0].children[0].import_path == "d"
        assert b.children == [ImportNode(import_path="c", note=SEEN)]

    def test_max_depth(self) -> None:
        tree = build_import_tree(_walk({"self": ["a"], "a": ["b"], "b": []}), max_depth=1)
        assert tree is not None
        assert tree.children[0].import_path == "a"
        assert tree.children[0].children == []

    def test_max_depth_zero(self) -> None:
        tree = build_import_tree(_walk({"self": ["a"], "a": []}), max_depth=0)
        assert tree is not None
        assert tree.children == []
