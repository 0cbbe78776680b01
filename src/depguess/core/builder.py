"""Turn compacted roots into the ordered dependency list handed to the manifest writer."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True)
class DependencyRecord:
    """One dependency to declare: a canonical root and what was folded into it."""

    name: str
    display_name: str | None = None
    subpackages: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output; optional fields only when set."""
        d: dict = {"name": self.name}
        if self.display_name:
            d["display_name"] = self.display_name
        if self.subpackages:
            d["subpackages"] = list(self.subpackages)
        return d


def build_dependency_list(
    roots: Iterable[str],
    root_canonical_path: str | None,
    *,
    subpackages: Mapping[str, Sequence[str]] | None = None,
) -> list[DependencyRecord]:
    """
    Build DependencyRecords sorted by name, without the project's own root.

    subpackages optionally maps a root to the subpackages compacted into it.
    """
    subs = subpackages or {}
    return [
        DependencyRecord(name=root, subpackages=tuple(sorted(subs.get(root, ()))))
        for root in sorted(set(roots))
        if root != root_canonical_path
    ]
