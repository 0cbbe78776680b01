"""Present a walked import graph as a tree."""

from __future__ import annotations

from dataclasses import dataclass, field

from depguess.core.resolver import PackageDescriptor
from depguess.core.walker import VisitedSet

CYCLE = "(cycle)"
SEEN = "(seen)"


@dataclass
class ImportNode:
    """A node in the import tree: one package and the packages it imports."""

    import_path: str
    directory: str = ""
    is_base_distribution: bool = False
    # CYCLE for a back edge, SEEN for a package already expanded elsewhere in the tree
    note: str = ""
    children: list[ImportNode] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize node to a JSON-friendly dict."""
        d = {
            "import_path": self.import_path,
            "directory": self.directory,
            "is_base_distribution": self.is_base_distribution,
            "children": [c.to_dict() for c in self.children],
        }
        if self.note:
            d["note"] = self.note
        return d


def build_import_tree(
    visited: VisitedSet,
    *,
    max_depth: int | None = None,
    include_base: bool = False,
) -> ImportNode | None:
    """
    Build the import tree rooted at the walked root package.

    Each package is expanded once; later occurrences are leaves marked SEEN and
    imports of an ancestor are leaves marked CYCLE. Base-distribution imports are
    only listed when include_base is True.

    Returns None if nothing was walked.
    """
    if visited.root is None:
        return None
    root = visited.get(visited.root)
    if root is None:
        return ImportNode(import_path=visited.root, is_base_distribution=True)
    return _build_node(
        root,
        visited,
        max_depth=max_depth,
        include_base=include_base,
        depth=0,
        ancestors=frozenset(),
        expanded=set(),
    )


def _build_node(
    package: PackageDescriptor,
    visited: VisitedSet,
    *,
    max_depth: int | None,
    include_base: bool,
    depth: int,
    ancestors: frozenset[str],
    expanded: set[str],
) -> ImportNode:
    path = package.import_path
    expanded.add(path)
    node = ImportNode(import_path=path, directory=str(package.directory or ""))
    if max_depth is not None and depth >= max_depth:
        return node

    ancestors = ancestors | {path}
    for imp in package.imports:
        child = visited.get(imp)
        if child is None:
            if include_base:
                node.children.append(ImportNode(import_path=imp, is_base_distribution=True))
            continue
        child_path = child.import_path
        if child_path in ancestors:
            node.children.append(ImportNode(import_path=child_path, note=CYCLE))
        elif child_path in expanded:
            node.children.append(
                ImportNode(import_path=child_path, directory=str(child.directory or ""), note=SEEN)
            )
        else:
            node.children.append(
                _build_node(
                    child,
                    visited,
                    max_depth=max_depth,
                    include_base=include_base,
                    depth=depth + 1,
                    ancestors=ancestors,
                    expanded=expanded,
                )
            )
    return node
