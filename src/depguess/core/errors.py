"""Exceptions raised while discovering dependencies."""

from __future__ import annotations


class DepGuessError(Exception):
    """Base class for every error raised by depguess."""


class ResolutionError(DepGuessError):
    """An import path could not be located, read, or parsed."""

    def __init__(self, import_path: str, reason: str) -> None:
        super().__init__(f"cannot resolve {import_path!r}: {reason}")
        self.import_path = import_path
        self.reason = reason


class EnvironmentLookupError(DepGuessError):
    """The working or root directory could not be determined."""


class ImportParseError(ValueError):
    """A Go source file has a malformed package clause or import section."""

    def __init__(self, path: object, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message
