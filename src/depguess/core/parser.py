"""Read the package clause and import declarations of Go source files."""

from __future__ import annotations

import ast
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator

from depguess.core.errors import ImportParseError

_TOKEN_RE = re.compile(
    r"""
    (?P<space>[ \t\r\n\f]+)
    | (?P<comment>//[^\n]*|/\*.*?\*/)
    | (?P<string>"(?:[^"\\\n]|\\.)*"|`[^`]*`)
    | (?P<ident>[^\W\d]\w*)
    | (?P<punct>[().;])
    """,
    re.VERBOSE | re.DOTALL,
)

# //go:build ignore and the older // +build ignore both exclude a file from the build.
_CONSTRAINT_RE = re.compile(r"^//\s*(?P<kind>go:build|\+build)\s+(?P<expr>.*)$")
_EXPR_TOKEN_RE = re.compile(r"\s*(\|\||&&|!|\(|\)|[\w.]+)")

_EOF = ("eof", "")

Token = tuple[str, str]


@dataclass
class GoFileImports:
    """Package clause and imports of a single Go source file."""

    package: str
    imports: list[str] = field(default_factory=list)
    ignored: bool = False


def _tokens(source: str) -> Iterator[Token]:
    pos = 0
    end = len(source)
    while pos < end:
        m = _TOKEN_RE.match(source, pos)
        if m is None:
            yield ("other", source[pos])
            pos += 1
            continue
        pos = m.end()
        kind = m.lastgroup or "other"
        if kind != "space":
            yield (kind, m.group())


def _unquote(literal: str, path: object) -> str:
    if literal.startswith("`"):
        return literal[1:-1]
    try:
        return ast.literal_eval(literal)
    except (SyntaxError, ValueError) as e:
        raise ImportParseError(path, f"invalid import path literal {literal}") from e


def _tag_value(tag: str) -> bool | None:
    # "ignore" is never set; any other tag holds on some platform, so it is unknown.
    return False if tag == "ignore" else None


def _not(value: bool | None) -> bool | None:
    return None if value is None else not value


def _and(a: bool | None, b: bool | None) -> bool | None:
    if a is False or b is False:
        return False
    if a is None or b is None:
        return None
    return True


def _or(a: bool | None, b: bool | None) -> bool | None:
    if a is True or b is True:
        return True
    if a is None or b is None:
        return None
    return False


class _BuildExpr:
    """Evaluate a //go:build expression; None means it depends on the platform."""

    def __init__(self, expr: str) -> None:
        self.tokens = _EXPR_TOKEN_RE.findall(expr)
        self.pos = 0

    def _peek(self) -> str:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else ""

    def _take(self) -> str:
        tok = self._peek()
        self.pos += 1
        return tok

    def evaluate(self) -> bool | None:
        value = self._or_expr()
        if self.pos != len(self.tokens):
            raise ValueError(f"unexpected {self._peek()!r}")
        return value

    def _or_expr(self) -> bool | None:
        value = self._and_expr()
        while self._peek() == "||":
            self._take()
            value = _or(value, self._and_expr())
        return value

    def _and_expr(self) -> bool | None:
        value = self._unary()
        while self._peek() == "&&":
            self._take()
            value = _and(value, self._unary())
        return value

    def _unary(self) -> bool | None:
        tok = self._take()
        if tok == "!":
            return _not(self._unary())
        if tok == "(":
            value = self._or_expr()
            if self._take() != ")":
                raise ValueError("unbalanced parentheses")
            return value
        if tok in ("", "||", "&&", ")"):
            raise ValueError(f"unexpected {tok or 'end of expression'!r}")
        return _tag_value(tok)


def _plus_build_value(expr: str) -> bool | None:
    """A // +build line: space-separated options are ORed, comma-separated terms ANDed."""
    value: bool | None = False
    for option in expr.split():
        term_value: bool | None = True
        for term in option.split(","):
            if term.startswith("!"):
                term_value = _and(term_value, _not(_tag_value(term[1:])))
            else:
                term_value = _and(term_value, _tag_value(term))
        value = _or(value, term_value)
    return value


def _is_ignore_constraint(comment: str) -> bool:
    """True if a build constraint in comment can never be satisfied."""
    for line in comment.splitlines():
        m = _CONSTRAINT_RE.match(line.strip())
        if not m:
            continue
        if m.group("kind") == "go:build":
            try:
                value = _BuildExpr(m.group("expr")).evaluate()
            except ValueError:
                continue
        else:
            value = _plus_build_value(m.group("expr"))
        if value is False:
            return True
    return False


def _read_spec(first: Token, take: Callable[[], Token], path: object) -> str:
    """Read one import spec: an optional name ("." "_" or identifier) then the path."""
    tok = first
    if tok[0] == "ident" or tok == ("punct", "."):
        tok = take()
    if tok[0] != "string":
        raise ImportParseError(path, f"expected import path, found {tok[1] or 'end of file'!r}")
    value = _unquote(tok[1], path)
    if not value:
        raise ImportParseError(path, "empty import path")
    return value


def parse_go_source(source: str, path: object = "<source>") -> GoFileImports:
    """
    Parse the header of a Go source file.

    Reads the build constraints and package clause, then every import declaration
    up to the first other top-level declaration. Raises ImportParseError when the
    package clause is missing or an import declaration is malformed.
    """
    # A leading byte order mark is accepted by the Go toolchain.
    tokens = _tokens(source.removeprefix("\ufeff"))
    ignored = False

    tok = next(tokens, _EOF)
    while tok[0] == "comment":
        ignored = ignored or _is_ignore_constraint(tok[1])
        tok = next(tokens, _EOF)
    if tok != ("ident", "package"):
        raise ImportParseError(path, "missing package clause")
    name_tok = next((t for t in tokens if t[0] != "comment"), _EOF)
    if name_tok[0] != "ident":
        raise ImportParseError(path, "missing package name")

    significant = (t for t in tokens if t[0] != "comment")

    def take() -> Token:
        return next(significant, _EOF)

    imports: list[str] = []
    while True:
        tok = take()
        if tok == ("punct", ";"):
            continue
        if tok != ("ident", "import"):
            break
        tok = take()
        if tok != ("punct", "("):
            imports.append(_read_spec(tok, take, path))
            continue
        while True:
            tok = take()
            if tok == ("punct", ";"):
                continue
            if tok == ("punct", ")"):
                break
            if tok == _EOF:
                raise ImportParseError(path, "unterminated import group")
            imports.append(_read_spec(tok, take, path))

    return GoFileImports(package=name_tok[1], imports=imports, ignored=ignored)


def parse_go_file(path: Path) -> GoFileImports:
    """Parse a Go source file on disk. OSError propagates to the caller."""
    try:
        source = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ImportParseError(path, "source is not valid UTF-8") from e
    return parse_go_source(source, path)


def is_buildable_go_file(name: str) -> bool:
    """True for .go files the Go tool would compile (tests and _/. prefixed files excluded)."""
    if not name.endswith(".go") or name.endswith("_test.go"):
        return False
    return not name.startswith(("_", "."))


def parse_package_dir(directory: Path) -> tuple[str, list[str]]:
    """
    Merge the imports of all buildable Go files in one directory.

    Returns (package name, ordered unique imports). A directory without buildable
    files yields ("", []). Files marked ignore or declaring package documentation
    are skipped; files declaring different package names raise ImportParseError.
    """
    package = ""
    package_file = ""
    imports: list[str] = []
    for file in sorted(directory.iterdir()):
        if not is_buildable_go_file(file.name) or not file.is_file():
            continue
        info = parse_go_file(file)
        if info.ignored or info.package == "documentation":
            continue
        if package and info.package != package:
            raise ImportParseError(
                directory,
                f"found packages {package} ({package_file}) and {info.package} ({file.name})",
            )
        package = info.package
        package_file = file.name
        imports.extend(info.imports)
    return package, list(dict.fromkeys(imports))
