"""depguess: discover a Go source tree's external dependencies (library, TUI, CLI)."""

from importlib.metadata import version, PackageNotFoundError

from depguess.api import (
    build_tree,
    discover,
    guess_deps,
    resolve_package,
    Discovery,
)
from depguess.core.builder import DependencyRecord
from depguess.core.errors import DepGuessError, EnvironmentLookupError, ResolutionError

__all__ = [
    "build_tree",
    "discover",
    "guess_deps",
    "resolve_package",
    "Discovery",
    "DependencyRecord",
    "DepGuessError",
    "EnvironmentLookupError",
    "ResolutionError",
    "__version__",
]

try:
    __version__ = version("depguess")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed as package
