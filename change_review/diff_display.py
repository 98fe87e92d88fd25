"""
Diff display — render pending changes as unified diffs and review them
hunk by hunk.

Includes a Textual-based interactive viewer that lets the user stage each
hunk before anything is written to disk.
"""

from __future__ import annotations

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Footer, Static

from .editing.change_store import FileDiff, PendingChangeStore
from .editing.errors import ReviewError
from .editing.hunk_builder import Hunk

_PREFIX = {"add": "+", "delete": "-", "context": " "}


def render_hunk(hunk: Hunk) -> list[str]:
    lines = [hunk.header]
    for change in hunk.changes:
        lines.append(f"{_PREFIX[change.type]}{change.content}")
        if not change.eol:
            lines.append("\\ No newline at end of file")
    return lines


def render_unified(diff: FileDiff) -> str:
    """Unified diff text for *diff* (empty string when nothing changed)."""
    if not diff.hunks:
        return ""
    lines = [f"--- a/{diff.path}", f"+++ b/{diff.path}"]
    for hunk in diff.hunks:
        lines.extend(render_hunk(hunk))
    return "\n".join(lines)


def format_colored_diff(diff_text: str) -> str:
    """Add ANSI colors to a unified diff string.

    Green for additions (+), red for deletions (-), cyan for @@ hunks.
    """
    lines = diff_text.splitlines()
    colored: list[str] = []
    for line in lines:
        if line.startswith("+++") or line.startswith("---"):
            colored.append(f"\033[1m{line}\033[0m")  # bold
        elif line.startswith("@@"):
            colored.append(f"\033[36m{line}\033[0m")  # cyan
        elif line.startswith("+"):
            colored.append(f"\033[32m{line}\033[0m")  # green
        elif line.startswith("-"):
            colored.append(f"\033[31m{line}\033[0m")  # red
        else:
            colored.append(line)
    return "\n".join(colored)


def _format_rich_diff(lines: list[str]) -> str:
    """Convert unified diff lines to Rich markup for Textual display."""
    markup_lines: list[str] = []
    for line in lines:
        # Escape Rich markup characters in the line content
        escaped = line.replace("[", "\\[")
        if line.startswith("@@"):
            markup_lines.append(f"[cyan]{escaped}[/cyan]")
        elif line.startswith("+"):
            markup_lines.append(f"[green]{escaped}[/green]")
        elif line.startswith("-"):
            markup_lines.append(f"[red]{escaped}[/red]")
        else:
            markup_lines.append(escaped)
    return "\n".join(markup_lines)


def _hunk_badge(hunk: Hunk) -> str:
    if hunk.accepted:
        return "[bold green]✔ accepted[/bold green]"
    if hunk.rejected:
        return "[bold red]✕ rejected[/bold red]"
    return "[dim]undecided[/dim]"


# ══════════════════════════════════════════════════════════════════
#  Interactive hunk review — Textual TUI
# ══════════════════════════════════════════════════════════════════

class HunkReviewApp(App):
    """Step through every hunk of every open change and stage it.

    Staging goes straight to the store; the caller decides what to do
    with each file once the app exits (``decisions`` maps path to
    ``"accept"``, ``"reject"`` or ``None`` for files left open).
    """

    CSS = """
    Screen {
        background: $surface;
    }
    #title-bar {
        dock: top;
        height: 3;
        background: #1a1a2e;
        color: #e94560;
        text-align: center;
        padding: 1;
        text-style: bold;
    }
    #hunk-scroll {
        height: 1fr;
        margin: 1 2;
        border: round #444;
        padding: 1;
    }
    #status {
        dock: bottom;
        height: 1;
        text-align: center;
        color: #888;
    }
    """

    BINDINGS = [
        Binding("a", "accept_hunk", "Accept hunk"),
        Binding("r", "reject_hunk", "Reject hunk"),
        Binding("n", "next", "Next"),
        Binding("p", "previous", "Previous"),
        Binding("A", "accept_file", "Accept file"),
        Binding("R", "reject_file", "Reject file"),
        Binding("q", "quit_review", "Done"),
    ]

    def __init__(self, store: PendingChangeStore, paths: list[str]) -> None:
        super().__init__()
        self._store = store
        self._paths = [p for p in paths if store.get_diff(p).hunks]
        self._cursor: list[tuple[str, int]] = [
            (p, i) for p in self._paths
            for i in range(len(store.get_diff(p).hunks))
        ]
        self._pos = 0
        self.decisions: dict[str, str | None] = {p: None for p in self._paths}

    def compose(self) -> ComposeResult:
        yield Static(
            f" ━━  Change Review — {len(self._paths)} file(s), "
            f"{len(self._cursor)} hunk(s)  ━━ ",
            id="title-bar",
        )
        with VerticalScroll(id="hunk-scroll"):
            yield Static("", id="hunk-view")
        yield Static("", id="status")
        yield Footer()

    def on_mount(self) -> None:
        self._refresh()

    def _current(self) -> tuple[str, int] | None:
        if not self._cursor:
            return None
        return self._cursor[self._pos]

    def _refresh(self, message: str = "") -> None:
        view = self.query_one("#hunk-view", Static)
        status = self.query_one("#status", Static)
        current = self._current()
        if current is None:
            view.update("Nothing to review.")
            status.update("Press q to finish")
            return
        path, index = current
        diff = self._store.get_diff(path)
        hunk = diff.hunks[index]
        view.update(
            f"[bold yellow]{path}[/bold yellow]  "
            f"hunk {index + 1}/{len(diff.hunks)}  {_hunk_badge(hunk)}\n\n"
            + _format_rich_diff(render_hunk(hunk))
        )
        text = f"{self._pos + 1}/{len(self._cursor)}  file status: {diff.status}"
        if message:
            text += f"  —  {message}"
        status.update(text)

    def _stage(self, accept: bool) -> None:
        current = self._current()
        if current is None:
            return
        path, index = current
        try:
            if accept:
                self._store.accept_hunk(path, index)
            else:
                self._store.reject_hunk(path, index)
        except ReviewError as exc:
            self._refresh(str(exc))
            return
        self.action_next()

    def action_accept_hunk(self) -> None:
        self._stage(accept=True)

    def action_reject_hunk(self) -> None:
        self._stage(accept=False)

    def action_next(self) -> None:
        if self._cursor and self._pos < len(self._cursor) - 1:
            self._pos += 1
        self._refresh()

    def action_previous(self) -> None:
        if self._pos > 0:
            self._pos -= 1
        self._refresh()

    def _decide_file(self, decision: str) -> None:
        current = self._current()
        if current is None:
            return
        path = current[0]
        self.decisions[path] = decision
        # Jump to the first hunk of the next file
        for pos in range(self._pos, len(self._cursor)):
            if self._cursor[pos][0] != path:
                self._pos = pos
                break
        self._refresh(f"{path} marked for {decision}")

    def action_accept_file(self) -> None:
        self._decide_file("accept")

    def action_reject_file(self) -> None:
        self._decide_file("reject")

    def action_quit_review(self) -> None:
        self.exit()


def review_interactively(store: PendingChangeStore,
                         paths: list[str]) -> dict[str, str | None]:
    """Run :class:`HunkReviewApp` and return the per-file decisions.

    A file whose hunks were all staged but that was not explicitly
    accepted or rejected is accepted (rejected hunks keep their original
    text).
    """
    app = HunkReviewApp(store, paths)
    app.run()
    decisions = dict(app.decisions)
    for path, decision in decisions.items():
        if decision is None and all(h.decided for h in store.get_diff(path).hunks):
            decisions[path] = "accept"
    return decisions
