"""Render dependency records as a glide.yaml-style manifest."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import yaml

from depguess.core.builder import DependencyRecord

MANIFEST_HEADER = "# Detected project's dependencies.\n"


def manifest_dict(
    records: Sequence[DependencyRecord],
    package: str | None = None,
    *,
    include_subpackages: bool = True,
) -> dict:
    """Build the manifest document: optional package name plus the import list."""
    doc: dict = {}
    if package:
        doc["package"] = package
    imports = []
    for record in records:
        entry: dict = {"package": record.name}
        if include_subpackages and record.subpackages:
            entry["subpackages"] = list(record.subpackages)
        imports.append(entry)
    doc["import"] = imports
    return doc


def dump_manifest(
    records: Sequence[DependencyRecord],
    package: str | None = None,
    *,
    include_subpackages: bool = True,
) -> str:
    """Render the manifest as YAML, keeping record order."""
    doc = manifest_dict(records, package, include_subpackages=include_subpackages)
    return MANIFEST_HEADER + yaml.safe_dump(doc, sort_keys=False, default_flow_style=False)


def write_manifest(
    path: Path,
    records: Sequence[DependencyRecord],
    package: str | None = None,
    *,
    include_subpackages: bool = True,
) -> None:
    Path(path).write_text(
        dump_manifest(records, package, include_subpackages=include_subpackages),
        encoding="utf-8",
    )
