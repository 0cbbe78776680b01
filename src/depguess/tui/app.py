"""Textual TUI for browsing a project's imports and discovered dependencies."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, LoadingIndicator, Static, Tree
from textual.widgets.tree import TreeNode
from textual.worker import Worker, WorkerState

from depguess.api import Discovery, discover, working_directory
from depguess.core.builder import DependencyRecord
from depguess.core.compactor import canonical_root
from depguess.core.finder import SourceLayout, list_source_packages
from depguess.core.tree import ImportNode, build_import_tree

WELCOME_BANNER = "[bold cyan]d e p g u e s s[/bold cyan]"

WELCOME_DESC = """[dim]Walk a Go source tree's imports and find the repositories it depends on.
Browse the import tree, the compacted dependency list, and each package's details.[/]"""

# Limits to avoid huge trees
MAX_TREE_DEPTH = 8
MAX_TREE_NODES = 500
EXPAND_DEPTH_DEFAULT = 2

COLOR_HEADER = "bold magenta"
COLOR_DEP = "bold green"
COLOR_PKG = "white"
COLOR_MARK = "yellow"
COLOR_STATS = "cyan"
COLOR_PATH = "dim"


def _count_nodes(node: Any) -> int:
    """Count nodes in an import tree."""
    return 1 + sum(_count_nodes(c) for c in getattr(node, "children", []))


def _node_stats(node: Any) -> tuple[int, int, int]:
    """Return (direct_imports, total_descendants, max_depth) for a node."""
    children = getattr(node, "children", []) or []
    total = 0
    max_d = 0
    for c in children:
        _direct, sub_total, sub_depth = _node_stats(c)
        total += 1 + sub_total
        max_d = max(max_d, 1 + sub_depth)
    return len(children), total, max_d


def _node_label(node: ImportNode) -> str:
    if node.note:
        return f"[{COLOR_PKG}]{node.import_path}[/] [{COLOR_MARK}]{node.note}[/]"
    return f"[{COLOR_PKG}]{node.import_path}[/]"


def _populate_textual_tree(
    tn: TreeNode,
    node: ImportNode,
    *,
    depth: int = 0,
    max_depth: int = MAX_TREE_DEPTH,
    max_nodes: int = MAX_TREE_NODES,
    node_count: list[int] | None = None,
) -> None:
    """Recursively add ImportNode children; cap depth and total nodes."""
    if node_count is None:
        node_count = [0]
    for child in node.children:
        if node_count[0] >= max_nodes:
            tn.add_leaf(f"[dim]… truncated ({max_nodes} nodes max)[/]")
            return
        if depth >= max_depth:
            tn.add_leaf(f"[dim]{child.import_path} …[/]")
            continue
        node_count[0] += 1
        child_tn = tn.add(_node_label(child), expand=False)
        child_tn.data = child
        _populate_textual_tree(
            child_tn,
            child,
            depth=depth + 1,
            max_depth=max_depth,
            max_nodes=max_nodes,
            node_count=node_count,
        )


def _expand_to_depth(tn: TreeNode, depth: int, current: int = 0) -> None:
    """Expand tree nodes up to given depth (0 = root only)."""
    if current >= depth:
        return
    tn.expand()
    for child in tn.children:
        _expand_to_depth(child, depth, current + 1)


def _format_dependency(record: DependencyRecord) -> str:
    lines = [
        f"[{COLOR_HEADER}]Dependency[/]",
        f"  [{COLOR_DEP}]{record.name}[/]",
        "",
        f"[{COLOR_HEADER}]Subpackages[/]",
    ]
    if record.subpackages:
        lines.extend(f"  {sub}" for sub in record.subpackages)
    else:
        lines.append("  [dim](root package only)[/]")
    return "\n".join(lines)


def _format_node(node: ImportNode) -> str:
    direct, total_desc, max_depth = _node_stats(node)
    directory = node.directory or "(n/a)"
    lines = [
        f"[{COLOR_HEADER}]Package[/]",
        f"  [{COLOR_PKG}]{node.import_path}[/]"
        + (f"  [{COLOR_MARK}]{node.note}[/]" if node.note else ""),
        "",
        f"[{COLOR_HEADER}]Canonical root[/]",
        f"  {canonical_root(node.import_path)}",
        "",
        f"[{COLOR_HEADER}]Stats[/]",
        f"  Direct imports:        [{COLOR_STATS}]{direct}[/]",
        f"  Total descendants:     [{COLOR_STATS}]{total_desc}[/] [dim](shown in tree)[/]",
        f"  Max depth from here:   [{COLOR_STATS}]{max_depth}[/] [dim]levels[/]",
        "",
        f"[{COLOR_HEADER}]Directory[/]",
        f"  [{COLOR_PATH}]{directory}[/]",
    ]
    return "\n".join(lines)


class SearchScreen(ModalScreen[str | None]):
    """Modal to search for packages in the tree. Keyboard-only."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=True),
    ]

    DEFAULT_CSS = """
    SearchScreen {
        align: center middle;
        padding: 2 4;
    }
    SearchScreen #search_title {
        text-align: center;
        padding-bottom: 1;
    }
    SearchScreen #search_input {
        width: 60;
        margin: 1 0;
    }
    """

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(
                "[bold cyan]Search[/]\n\nType an import path or part of one.",
                id="search_title",
                markup=True,
            )
            yield Input(placeholder="github.com/org/repo...", id="search_input")
            yield Static(
                "[dim]Enter[/] = Search  ·  [dim]Escape[/] = Cancel  ·  "
                "then [bold]n[/bold]/[bold]N[/bold] = next/previous match",
                markup=True,
            )

    def on_mount(self) -> None:
        self.query_one("#search_input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        value = event.value.strip()
        self.dismiss(value or None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class OpenDirectoryScreen(ModalScreen[Path | None]):
    """Modal to switch to another project directory."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=True),
    ]

    DEFAULT_CSS = """
    OpenDirectoryScreen {
        align: center middle;
        padding: 2 4;
    }
    OpenDirectoryScreen #open_title {
        text-align: center;
        padding-bottom: 1;
    }
    OpenDirectoryScreen #open_input {
        width: 60;
        margin: 1 0;
    }
    """

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(
                "[bold cyan]Open project[/]\n\nType the directory of a Go package.",
                id="open_title",
                markup=True,
            )
            yield Input(placeholder="/path/to/project", id="open_input")
            yield Static("[dim]Enter[/] = Open  ·  [dim]Escape[/] = Cancel", markup=True)

    def on_mount(self) -> None:
        self.query_one("#open_input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        value = event.value.strip()
        if not value:
            self.dismiss(None)
            return
        p = Path(value).expanduser().resolve()
        if not p.is_dir():
            self.notify(f"Not a directory: {p}", severity="warning", timeout=3)
            return
        self.dismiss(p)

    def action_cancel(self) -> None:
        self.dismiss(None)


class DepGuessApp(App[None]):
    """Terminal UI to explore a project's imports and dependencies."""

    TITLE = "depguess"
    BINDINGS = [
        Binding("enter", "start_main", "Start", show=False),
        Binding("o", "open_directory", "Open"),
        Binding("/", "search", "Search"),
        Binding("n", "next_match", "Next match", show=False),
        Binding("N", "prev_match", "Prev match", show=False),
        Binding("d", "toggle_details", "Details"),
        Binding("r", "refresh", "Refresh"),
        Binding("e", "expand_all", "Expand all"),
        Binding("c", "collapse_all", "Collapse"),
        Binding("q", "quit", "Quit"),
    ]

    DEFAULT_CSS = """
    #welcome_container {
        align: center middle;
        width: 100%;
        height: 100%;
    }
    #welcome_banner, #welcome_desc, #welcome_hint {
        text-align: center;
        width: 100%;
        padding: 1 4;
    }
    #welcome_loading {
        height: auto;
        display: none;
    }
    #welcome_loading.loading {
        display: block;
    }
    #main_container {
        display: none;
    }
    #details {
        padding: 1 2;
        border: solid $primary;
        height: auto;
        min-height: 8;
    }
    """

    def __init__(
        self,
        root_dir: str | Path | None = None,
        layout: SourceLayout | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._root_dir = root_dir
        self._layout = layout
        self._main_started = False
        self._discovery: Discovery | None = None
        self._import_tree: ImportNode | None = None
        self._packages: list[str] = []
        self._error: str | None = None
        self._loading = False
        self._search_matches: list[TreeNode] = []
        self._search_index = 0
        self._details_visible = True

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        with Container(id="welcome_container"):
            yield Static(WELCOME_BANNER, id="welcome_banner", markup=True)
            yield Static(WELCOME_DESC, id="welcome_desc", markup=True)
            yield Static(
                "[cyan]Enter[/] to explore  ·  [dim]q[/] to quit",
                id="welcome_hint",
                markup=True,
            )
            with Container(id="welcome_loading"):
                yield LoadingIndicator()
        with Container(id="main_container"):
            yield Tree("Project", id="dep_tree")
            yield Static("", id="details")
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = "Dependency Explorer"
        self._start_discovery()

    def on_key(self, event: Any) -> None:
        """Enter on the welcome screen opens the main view."""
        if not self._main_started and event.key == "enter":
            event.prevent_default()
            event.stop()
            self.action_start_main()

    def _start_discovery(self) -> None:
        """Walk the project in a background thread."""
        if self._loading:
            return
        self._loading = True
        self._error = None
        self.query_one("#welcome_loading").add_class("loading")
        self.run_worker(self._discover_worker, thread=True, exclusive=True, exit_on_error=False)

    def _discover_worker(self) -> tuple[Discovery, ImportNode | None, list[str]]:
        layout = self._layout if self._layout is not None else SourceLayout.from_env()
        result = discover(self._root_dir, layout=layout)
        packages = [layout.import_path_for_dir(d) for d in list_source_packages(result.root_dir)]
        return result, build_import_tree(result.visited), packages

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.state == WorkerState.SUCCESS:
            self._discovery, self._import_tree, self._packages = event.worker.result
            self._loading = False
        elif event.state == WorkerState.ERROR:
            self._loading = False
            self._error = str(event.worker.error)
        else:
            return
        self.query_one("#welcome_loading").remove_class("loading")
        hint = self.query_one("#welcome_hint", Static)
        if self._error:
            hint.update(f"[red]Error: {self._error}[/]  ·  [dim]q[/] to quit")
        elif self._discovery is not None:
            count = len(self._discovery.dependencies)
            hint.update(
                f"[green]✓[/] {count} dependencies found  ·  [cyan]Enter[/] to explore  ·  [dim]q[/] to quit"
            )
        if self._main_started:
            self._load_main_view()

    def action_start_main(self) -> None:
        """Transition from welcome screen to main view."""
        if self._main_started:
            return
        self._main_started = True
        self.query_one("#welcome_container").styles.display = "none"
        self.query_one("#main_container").styles.display = "block"
        self._load_main_view()

    def _clear_tree(self, tree: Tree) -> None:
        tree.clear()
        self._search_matches = []
        self._search_index = 0

    def _load_main_view(self) -> None:
        tree = self.query_one("#dep_tree", Tree)
        self._clear_tree(tree)
        if self._loading:
            tree.root.label = f"[{COLOR_HEADER}]Walking imports...[/]"
            self._set_details("[dim]Resolving packages in background...[/]")
            return
        if self._error or self._discovery is None:
            tree.root.label = f"[{COLOR_HEADER}]No project loaded[/]"
            self._set_details(f"[red]Error: {self._error}[/]\n\n[dim]o[/] = Open another directory")
            return

        result = self._discovery
        tree.root.label = f"[{COLOR_HEADER}]{result.root_import_path}[/]"
        deps_node = tree.root.add(
            f"[{COLOR_DEP}]Dependencies ({len(result.dependencies)})[/]",
            expand=True,
        )
        for record in result.dependencies:
            dep_tn = deps_node.add(f"[{COLOR_DEP}]{record.name}[/]", expand=False)
            dep_tn.data = record
            for sub in record.subpackages:
                dep_tn.add_leaf(f"[dim]{sub}[/]")
        if not result.dependencies:
            deps_node.add_leaf("[dim]No external dependencies[/]")

        packages_node = tree.root.add(
            f"[{COLOR_HEADER}]Packages ({len(self._packages)})[/]",
            expand=False,
        )
        for path in self._packages:
            packages_node.add_leaf(f"[{COLOR_PKG}]{path}[/]")

        imports_label = "Imports"
        if self._import_tree is not None:
            imports_label += f" ({_count_nodes(self._import_tree) - 1})"
        imports_node = tree.root.add(f"[{COLOR_HEADER}]{imports_label}[/]", expand=True)
        if self._import_tree is not None:
            imports_node.data = self._import_tree
            _populate_textual_tree(imports_node, self._import_tree)
            _expand_to_depth(imports_node, EXPAND_DEPTH_DEFAULT)
        tree.root.expand()

        self._set_details(
            f"[{COLOR_HEADER}]Project[/]\n"
            f"  {result.root_dir}\n\n"
            f"Packages walked: [{COLOR_STATS}]{len(result.visited)}[/]  ·  "
            f"Dependencies: [{COLOR_STATS}]{len(result.dependencies)}[/]\n\n"
            "[dim]↑/↓[/] move  ·  [dim]Enter[/] select  ·  [dim]o[/] open  ·  [dim]/[/] search"
        )
        tree.focus()

    def _set_details(self, text: str) -> None:
        self.query_one("#details", Static).update(text)

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        data = event.node.data
        if isinstance(data, ImportNode):
            self._set_details(_format_node(data))
        elif isinstance(data, DependencyRecord):
            self._set_details(_format_dependency(data))

    def action_refresh(self) -> None:
        self._discovery = None
        self._import_tree = None
        self._packages = []
        self._start_discovery()
        if self._main_started:
            self._load_main_view()

    def action_open_directory(self) -> None:
        self.push_screen(OpenDirectoryScreen(), self._on_open_done)

    def _on_open_done(self, path: Path | None) -> None:
        if path is None:
            return
        self._root_dir = path
        self.notify(f"Opened: {path}", severity="information", timeout=2)
        self.action_refresh()

    def action_expand_all(self) -> None:
        self.query_one("#dep_tree", Tree).root.expand_all()

    def action_collapse_all(self) -> None:
        tree = self.query_one("#dep_tree", Tree)
        tree.root.collapse_all()
        tree.root.expand()

    def action_search(self) -> None:
        if not self._main_started:
            return
        self.push_screen(SearchScreen(), self._on_search_done)

    def _on_search_done(self, query: str | None) -> None:
        if not query:
            return
        self._search_matches = []
        self._collect_matches(self.query_one("#dep_tree", Tree).root, query.lower())
        if not self._search_matches:
            self.notify(f"No matches for '{query}'", severity="warning", timeout=2)
            return
        self._goto_match(0)

    def _collect_matches(self, node: TreeNode, query: str) -> None:
        data = node.data
        name = getattr(data, "import_path", None) or getattr(data, "name", None) or ""
        if query in str(node.label).lower() or query in name.lower():
            self._search_matches.append(node)
        for child in node.children:
            self._collect_matches(child, query)

    def _goto_match(self, index: int) -> None:
        if not self._search_matches:
            return
        self._search_index = index % len(self._search_matches)
        match_node = self._search_matches[self._search_index]
        parent = match_node.parent
        while parent is not None:
            parent.expand()
            parent = parent.parent
        tree = self.query_one("#dep_tree", Tree)
        tree.select_node(match_node)
        tree.scroll_to_node(match_node)
        self.notify(
            f"Match {self._search_index + 1}/{len(self._search_matches)}",
            severity="information",
            timeout=2,
        )

    def action_next_match(self) -> None:
        if not self._search_matches:
            self.notify("No active search. Press / to search.", severity="information", timeout=2)
            return
        self._goto_match(self._search_index + 1)

    def action_prev_match(self) -> None:
        if not self._search_matches:
            self.notify("No active search. Press / to search.", severity="information", timeout=2)
            return
        self._goto_match(self._search_index - 1)

    def action_toggle_details(self) -> None:
        self._details_visible = not self._details_visible
        details = self.query_one("#details", Static)
        details.styles.display = "block" if self._details_visible else "none"


def main() -> None:
    """Entry point for the depguess TUI."""
    root = working_directory(sys.argv[1].strip()) if len(sys.argv) > 1 else None
    DepGuessApp(root_dir=root).run()


if __name__ == "__main__":
    main()
