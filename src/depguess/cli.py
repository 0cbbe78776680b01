"""Command-line interface for depguess: guess a manifest, inspect imports, draw graphs."""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from pathlib import Path

from depguess import __version__
from depguess.api import build_tree, discover, resolve_package
from depguess.core.compactor import canonical_root
from depguess.core.errors import DepGuessError
from depguess.core.finder import SourceLayout
from depguess.core.tree import ImportNode
from depguess.manifest import dump_manifest, write_manifest

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s: %(message)s"


def _configure_logging(verbose: int = 0, quiet: bool = False) -> None:
    """Log to stderr: WARNING by default, -v INFO, -vv DEBUG, -q errors only."""
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def _layout_from_args(args: argparse.Namespace) -> SourceLayout:
    """GOPATH/GOROOT from the environment, overridden by --gopath/--goroot."""
    layout = SourceLayout.from_env()
    gopath = getattr(args, "gopath", None)
    if gopath:
        layout.gopath = [Path(p).expanduser().resolve() for p in gopath]
    goroot = getattr(args, "goroot", None)
    if goroot:
        layout.goroot = Path(goroot).expanduser().resolve()
    return layout


def _manifest_package(root: str | None) -> str | None:
    """Local directories ("_/abs/path") have no import path worth declaring."""
    if not root or root.startswith("_"):
        return None
    return root


def _print_tree_text(
    node: ImportNode,
    prefix: str = "",
    is_last: bool = True,
    is_root: bool = True,
) -> None:
    """Print an import tree as indented text."""
    marker = "" if is_root else ("└── " if is_last else "├── ")
    if node.note:
        suffix = f" [{node.note}]"
    elif node.is_base_distribution:
        suffix = " [base]"
    else:
        suffix = ""
    print(f"{prefix}{marker}{node.import_path}{suffix}")

    child_prefix = "" if is_root else prefix + ("    " if is_last else "│   ")
    for i, child in enumerate(node.children):
        _print_tree_text(child, child_prefix, i == len(node.children) - 1, False)


def cmd_guess(args: argparse.Namespace) -> int:
    """Print (or write) a manifest listing the project's dependencies."""
    result = discover(args.directory, layout=_layout_from_args(args))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    package = _manifest_package(result.root_import_path)
    include_subpackages = not args.no_subpackages
    if args.output:
        write_manifest(
            Path(args.output),
            result.dependencies,
            package,
            include_subpackages=include_subpackages,
        )
        print(f"Manifest written to: {args.output}", file=sys.stderr)
    else:
        print(dump_manifest(result.dependencies, package, include_subpackages=include_subpackages), end="")
    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    """Resolve one import path and show what it imports."""
    pkg = resolve_package(args.import_path, args.directory, layout=_layout_from_args(args))

    if args.json:
        print(json.dumps(pkg.to_dict(), indent=2))
        return 0

    print(pkg.import_path)
    print(f"  Directory: {pkg.directory or '(n/a)'}")
    print(f"  Base distribution: {'yes' if pkg.is_base_distribution else 'no'}")
    print(f"  Canonical root: {canonical_root(pkg.import_path)}")
    if pkg.imports:
        print(f"  Imports ({len(pkg.imports)}):")
        for imp in pkg.imports:
            print(f"    - {imp}")
    return 0


def cmd_tree(args: argparse.Namespace) -> int:
    """Show the import tree of a project."""
    tree = build_tree(
        args.directory,
        max_depth=args.depth,
        include_base=args.std,
        layout=_layout_from_args(args),
    )

    if tree is None:
        print("Nothing to show.", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(tree.to_dict(), indent=2))
    else:
        _print_tree_text(tree)
    return 0


def _compact_edges(edges: set[tuple[str, str]]) -> set[tuple[str, str]]:
    """Collapse edges onto canonical roots, dropping edges inside one repository."""
    out: set[tuple[str, str]] = set()
    for parent, child in edges:
        a, b = canonical_root(parent), canonical_root(child)
        if a != b:
            out.add((a, b))
    return out


def _generate_dot(
    edges: set[tuple[str, str]],
    root: str | None = None,
    title: str | None = None,
) -> str:
    """Generate DOT (Graphviz) format from import edges."""
    lines = [
        "digraph imports {",
        "    rankdir=LR;",
        '    node [shape=box, style=rounded, fontname="sans-serif"];',
    ]
    if title:
        lines.insert(1, f'    label="{title}";')
        lines.insert(2, "    labelloc=t;")

    if root:
        lines.append(f'    "{root}" [style="rounded,filled", fillcolor=lightblue];')

    for parent, child in sorted(edges):
        lines.append(f'    "{parent}" -> "{child}";')

    lines.append("}")
    return "\n".join(lines)


def _mermaid_id(name: str) -> str:
    """Convert an import path to a unique Mermaid node ID (non-alphanumerics become _hex_)."""
    return re.sub(r"[^A-Za-z0-9]", lambda m: f"_{ord(m.group()):x}_", name)


def _generate_mermaid(
    edges: set[tuple[str, str]],
    root: str | None = None,
    title: str | None = None,
) -> str:
    """Generate Mermaid format from import edges."""
    lines = ["graph LR"]
    if title:
        lines[0] = f"---\ntitle: {title}\n---\ngraph LR"

    if root:
        lines.append(f'    {_mermaid_id(root)}["{root}"]')
        lines.append(f"    style {_mermaid_id(root)} fill:#lightblue")

    for parent, child in sorted(edges):
        lines.append(
            f'    {_mermaid_id(parent)}["{parent}"] --> {_mermaid_id(child)}["{child}"]'
        )

    return "\n".join(lines)


def cmd_graph(args: argparse.Namespace) -> int:
    """Generate an import graph in DOT or Mermaid format."""
    result = discover(args.directory, layout=_layout_from_args(args))
    root = result.root_import_path
    edges = result.visited.edges()
    if args.compact:
        edges = _compact_edges(edges)
        root = result.root_canonical_path

    title = None if args.no_title else f"{root} imports"

    if args.format == "mermaid":
        output = _generate_mermaid(edges, root=root, title=title)
    else:  # dot
        output = _generate_dot(edges, root=root, title=title)

    if args.output:
        Path(args.output).write_text(output + "\n")
        print(f"Graph written to: {args.output}", file=sys.stderr)
    else:
        print(output)
    return 0


def cmd_tui(args: argparse.Namespace) -> int:
    """Launch the interactive TUI."""
    from depguess.tui.app import DepGuessApp

    app = DepGuessApp(
        root_dir=getattr(args, "directory", None),
        layout=_layout_from_args(args),
    )
    app.run()
    return 0


def _add_layout_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--gopath",
        action="append",
        metavar="PATH",
        help="GOPATH workspace to search (can be repeated; default: $GOPATH)",
    )
    parser.add_argument(
        "--goroot",
        metavar="PATH",
        help="Go toolchain root holding the standard library (default: $GOROOT)",
    )


def _add_directory_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Project directory (default: current directory)",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the depguess CLI."""
    parser = argparse.ArgumentParser(
        prog="depguess",
        description="Discover the external dependencies of a Go source tree.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="More log output on stderr (-v info, -vv debug)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # depguess guess
    guess_parser = subparsers.add_parser(
        "guess",
        help="Print a manifest of the project's dependencies",
        description=(
            "Walk the project's imports and print the repositories it depends on "
            "as a glide.yaml-style import list."
        ),
    )
    _add_directory_arg(guess_parser)
    guess_parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Write the manifest to FILE (default: stdout)",
    )
    guess_parser.add_argument(
        "--no-subpackages",
        action="store_true",
        help="Don't list the subpackages folded into each dependency",
    )
    guess_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    _add_layout_args(guess_parser)
    guess_parser.set_defaults(func=cmd_guess)

    # depguess resolve
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve a single import path",
        description="Locate one import path and list its immediate imports.",
    )
    resolve_parser.add_argument(
        "import_path",
        help="Import path to resolve (e.g. github.com/org/repo/pkg or ./sub)",
    )
    resolve_parser.add_argument(
        "-C",
        "--directory",
        default=None,
        help="Working directory for relative import paths (default: current directory)",
    )
    resolve_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    _add_layout_args(resolve_parser)
    resolve_parser.set_defaults(func=cmd_resolve)

    # depguess tree
    tree_parser = subparsers.add_parser(
        "tree",
        help="Show the import tree of a project",
        description="Walk the project's imports and display them as a tree.",
    )
    _add_directory_arg(tree_parser)
    tree_parser.add_argument(
        "-d",
        "--depth",
        type=int,
        default=None,
        help="Maximum tree depth (default: unlimited)",
    )
    tree_parser.add_argument(
        "--std",
        action="store_true",
        help="Also list standard library imports",
    )
    tree_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    _add_layout_args(tree_parser)
    tree_parser.set_defaults(func=cmd_tree)

    # depguess graph
    graph_parser = subparsers.add_parser(
        "graph",
        help="Generate an import graph (DOT/Mermaid format)",
        description="Generate a visual graph of the imports between the project's packages.",
    )
    _add_directory_arg(graph_parser)
    graph_parser.add_argument(
        "-f",
        "--format",
        choices=["dot", "mermaid"],
        default="dot",
        help="Output format: dot (Graphviz) or mermaid (default: dot)",
    )
    graph_parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Output file (default: stdout)",
    )
    graph_parser.add_argument(
        "--compact",
        action="store_true",
        help="Collapse packages onto their repository roots",
    )
    graph_parser.add_argument(
        "--no-title",
        action="store_true",
        help="Don't include a title in the graph",
    )
    _add_layout_args(graph_parser)
    graph_parser.set_defaults(func=cmd_graph)

    # depguess tui (default if no command)
    tui_parser = subparsers.add_parser(
        "tui",
        help="Launch the interactive terminal UI",
        description="Start the interactive TUI for browsing a project's imports and dependencies.",
    )
    _add_directory_arg(tui_parser)
    _add_layout_args(tui_parser)
    tui_parser.set_defaults(func=cmd_tui)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    # Default to TUI if no command specified
    if args.command is None:
        return cmd_tui(argparse.Namespace(directory=None, gopath=None, goroot=None))

    try:
        return args.func(args)
    except DepGuessError as e:
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
