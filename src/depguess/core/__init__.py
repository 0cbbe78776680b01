"""Core library: import resolution, graph walking, compaction, dependency lists."""

from depguess.core.builder import DependencyRecord, build_dependency_list
from depguess.core.compactor import canonical_root, compact, group_subpackages
from depguess.core.errors import (
    DepGuessError,
    EnvironmentLookupError,
    ImportParseError,
    ResolutionError,
)
from depguess.core.finder import SourceLayout, list_source_packages
from depguess.core.parser import parse_go_file, parse_package_dir
from depguess.core.resolver import (
    GoSourceProvider,
    ImportProvider,
    PackageDescriptor,
    StaticImportProvider,
    resolve,
)
from depguess.core.tree import ImportNode, build_import_tree
from depguess.core.walker import VisitedSet, walk

__all__ = [
    "DependencyRecord",
    "build_dependency_list",
    "canonical_root",
    "compact",
    "group_subpackages",
    "DepGuessError",
    "EnvironmentLookupError",
    "ImportParseError",
    "ResolutionError",
    "SourceLayout",
    "list_source_packages",
    "parse_go_file",
    "parse_package_dir",
    "GoSourceProvider",
    "ImportProvider",
    "PackageDescriptor",
    "StaticImportProvider",
    "resolve",
    "ImportNode",
    "build_import_tree",
    "VisitedSet",
    "walk",
]
