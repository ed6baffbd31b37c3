"""
Diff display — compute and show colored unified diffs before writing files.

Includes a Textual-based interactive diff viewer that pauses the write so the
user can review changes and approve, reject, or answer with feedback before
anything is written to disk.
"""

from __future__ import annotations

import difflib

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Button, Footer, Input, Static

from .cli_display import log
from .writer import ApprovalDecision


def compute_diff(filepath: str, old_content: str, new_content: str) -> str | None:
    """Return unified diff string, or None if content is unchanged."""
    if old_content == new_content:
        return None

    old_lines = old_content.splitlines(keepends=True)
    new_lines = new_content.splitlines(keepends=True)

    diff = difflib.unified_diff(
        old_lines, new_lines,
        fromfile=f"a/{filepath}",
        tofile=f"b/{filepath}",
        lineterm="",
    )
    diff_text = "\n".join(line.rstrip("\n") for line in diff)
    return diff_text if diff_text.strip() else None


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


def _format_rich_diff(diff_text: str) -> str:
    """Convert unified diff text to Rich markup for Textual display."""
    lines = diff_text.splitlines()
    markup_lines: list[str] = []
    for line in lines:
        # Escape Rich markup characters in the line content
        escaped = line.replace("[", "\\[")
        if line.startswith("+++") or line.startswith("---"):
            markup_lines.append(f"[bold white]{escaped}[/bold white]")
        elif line.startswith("@@"):
            markup_lines.append(f"[cyan]{escaped}[/cyan]")
        elif line.startswith("+"):
            markup_lines.append(f"[green]{escaped}[/green]")
        elif line.startswith("-"):
            markup_lines.append(f"[red]{escaped}[/red]")
        else:
            markup_lines.append(escaped)
    return "\n".join(markup_lines)


# ══════════════════════════════════════════════════════════════════
#  Interactive Diff Approval
# ══════════════════════════════════════════════════════════════════

def prompt_diff_approval(filepath: str, old_content: str, new_content: str,
                         ui: str = "console") -> ApprovalDecision:
    """Show the pending change and wait for the user's decision.

    *ui* is ``"textual"`` for the full-screen viewer, ``"console"`` for a
    plain prompt, or ``"auto"`` to approve without asking (the diff is
    logged instead).
    """
    diff_text = compute_diff(filepath, old_content, new_content)
    is_new = old_content == ""

    if ui == "auto":
        if diff_text:
            log.info(f"[auto] Diff for {filepath}:\n{diff_text}")
        return ApprovalDecision("approve")

    if ui == "textual":
        app = DiffApprovalApp(filepath, diff_text, is_new, new_content)
        app.run()
        return app.decision

    return _console_diff_approval(filepath, diff_text, is_new, new_content)


class DiffApprovalApp(App):
    """Interactive diff viewer with approve / reject / feedback."""

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
    #diff-scroll {
        height: 1fr;
        margin: 1 2;
        border: round #444;
        padding: 1;
    }
    #feedback {
        dock: bottom;
        margin: 0 2;
    }
    #action-buttons {
        dock: bottom;
        height: 3;
        align: center middle;
        padding: 0 2;
    }
    #action-buttons Button {
        margin: 0 2;
        min-width: 20;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "approve", "Approve"),
        Binding("escape", "reject", "Reject"),
    ]

    def __init__(self, filepath: str, diff_text: str | None,
                 is_new: bool, new_content: str) -> None:
        super().__init__()
        self._filepath = filepath
        self._diff_text = diff_text
        self._is_new = is_new
        self._new_content = new_content
        self.decision = ApprovalDecision("reject")

    def compose(self) -> ComposeResult:
        label = "New file" if self._is_new else "Diff Review"
        yield Static(f" ━━  {label} — {self._filepath}  ━━ ", id="title-bar")
        with VerticalScroll(id="diff-scroll"):
            if self._is_new:
                line_count = len(self._new_content.splitlines())
                yield Static(f"  [green]+ {self._filepath}[/green]  "
                             f"({line_count} lines)")
            elif self._diff_text:
                yield Static(_format_rich_diff(self._diff_text))
            else:
                yield Static("  (no changes)")
        yield Input(placeholder="Type feedback and press Enter to reject "
                                "with a message", id="feedback")
        with Horizontal(id="action-buttons"):
            yield Button("✔ Approve", id="approve-btn", variant="success")
            yield Button("✕ Reject", id="reject-btn", variant="error")
        yield Footer()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "approve-btn":
            self.action_approve()
        elif event.button.id == "reject-btn":
            self.action_reject()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        text = event.value.strip()
        if text:
            self.decision = ApprovalDecision("feedback", text)
            self.exit()

    def action_approve(self) -> None:
        self.decision = ApprovalDecision("approve")
        self.exit()

    def action_reject(self) -> None:
        self.decision = ApprovalDecision("reject")
        self.exit()


def _console_diff_approval(filepath: str, diff_text: str | None,
                           is_new: bool, new_content: str) -> ApprovalDecision:
    """Console-based diff approval."""
    print("\n" + "=" * 60)
    print(f"  DIFF REVIEW — {filepath}")
    print("=" * 60)

    if is_new:
        print(f"\n  New file ({len(new_content.splitlines())} lines)")
    elif diff_text:
        print(format_colored_diff(diff_text))
    else:
        print("\n  (no changes)")

    print("\n" + "=" * 60)
    print("  [A]pprove  |  [R]eject  |  or type feedback")
    print()

    while True:
        try:
            choice = input("  Your choice: ").strip()
        except (EOFError, KeyboardInterrupt):
            return ApprovalDecision("reject")
        if choice.lower() in ("a", "approve"):
            return ApprovalDecision("approve")
        elif choice.lower() in ("r", "reject"):
            return ApprovalDecision("reject")
        elif choice:
            return ApprovalDecision("feedback", choice)
        else:
            print("  Invalid choice. Use A, R, or type feedback.")
