"""Tests for TUI utility functions (non-interactive parts)."""

from __future__ import annotations

from depguess.core.builder import DependencyRecord
from depguess.core.tree import SEEN, ImportNode
from depguess.tui.app import (
    _count_nodes,
    _format_dependency,
    _format_node,
    _node_label,
    _node_stats,
)


def _chain(depth: int) -> ImportNode:
    root = ImportNode(import_path="level0")
    current = root
    for i in range(1, depth + 1):
        child = ImportNode(import_path=f"level{i}")
        current.children = [child]
        current = child
    return root


class TestCountNodes:
    """Tests for _count_nodes helper."""

    def test_single_node(self) -> None:
        assert _count_nodes(ImportNode(import_path="root")) == 1

    def test_nested(self) -> None:
        node = ImportNode(
            import_path="root",
            children=[
                ImportNode(import_path="a", children=[ImportNode(import_path="b")]),
                ImportNode(import_path="c"),
            ],
        )
        assert _count_nodes(node) == 4

    def test_deep_tree(self) -> None:
        assert _count_nodes(_chain(4)) == 5


class TestNodeStats:
    """Tests for _node_stats helper."""

    def test_leaf_node(self) -> None:
        assert _node_stats(ImportNode(import_path="leaf")) == (0, 0, 0)

    def test_multiple_children(self) -> None:
        node = ImportNode(
            import_path="root",
            children=[ImportNode(import_path="a"), ImportNode(import_path="b")],
        )
        assert _node_stats(node) == (2, 2, 1)

    def test_deep_tree(self) -> None:
        assert _node_stats(_chain(3)) == (1, 3, 3)


class TestFormatting:
    """Tests for label and details formatting."""

    def test_node_label_with_note(self) -> None:
        label = _node_label(ImportNode(import_path="a.com/b/c", note=SEEN))
        assert "a.com/b/c" in label
        assert SEEN in label

    def test_format_node(self) -> None:
        node = ImportNode(
            import_path="github.com/o/r/sub/pkg",
            directory="/gopath/src/github.com/o/r/sub/pkg",
            children=[ImportNode(import_path="x.com/y/z")],
        )
        text = _format_node(node)
        assert "github.com/o/r/sub/pkg" in text
        assert "  github.com/o/r\n" in text
        assert "/gopath/src/github.com/o/r/sub/pkg" in text

    def test_format_node_without_directory(self) -> None:
        assert "(n/a)" in _format_node(ImportNode(import_path="a"))

    def test_format_dependency(self) -> None:
        text = _format_dependency(DependencyRecord(name="github.com/lib/pq", subpackages=("oid",)))
        assert "github.com/lib/pq" in text
        assert "  oid" in text

    def test_format_dependency_without_subpackages(self) -> None:
        assert "root package only" in _format_dependency(DependencyRecord(name="a.com/b/c"))
