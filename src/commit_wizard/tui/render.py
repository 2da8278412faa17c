"""Drawing of the interface with rich.

:func:`render` builds a fresh :class:`rich.layout.Layout` from the current
:class:`AppState` on every frame. Normal mode shows the groups list on the
left and the commit message above the file list on the right. The editor,
diff viewer and help screen take over the main area while they are open;
the status popup sits between the main area and the shortcut bar.
"""

from __future__ import annotations

from typing import List, Tuple

from rich.layout import Layout
from rich.panel import Panel as RichPanel
from rich.text import Text

from commit_wizard.grouping.group_model import ChangedFile
from commit_wizard.tui.state import AppState, Overlay, Panel


FOOTER_HEIGHT = 3
MAX_POPUP_HEIGHT = 8
ACTIVE_BORDER = "cyan"
INACTIVE_BORDER = "bright_black"
POPUP_TITLE = " Status (↑↓ scroll, Enter/Esc close) "

EDITOR_HELP = [
    ("Ctrl+S", "save the message and close the editor"),
    ("Ctrl+C / Esc", "discard changes and close the editor"),
    ("F1", "toggle this help"),
    ("Arrows", "move the cursor"),
    ("Home / End", "start / end of line (also Ctrl+A / Ctrl+E)"),
    ("PgUp / PgDn", "move ten lines"),
    ("Backspace / Del", "delete before / under the cursor"),
    ("Ctrl+K / Ctrl+U", "delete to end / start of line"),
    ("Enter", "new line"),
    ("", ""),
    ("", "The first line is the header; the description is taken from the"),
    ("", "text after its last ': '. Every further non-empty line becomes"),
    ("", "one bullet of the body."),
]


def status_icon(changed: ChangedFile) -> Tuple[str, str]:
    """Return the icon and color used for a file in the Files panel."""
    if changed.is_new():
        return "+", "green"
    if changed.is_deleted():
        return "-", "red"
    if changed.is_modified():
        return "~", "yellow"
    if changed.is_renamed():
        return "→", "blue"
    return "•", "white"


def _border(state: AppState, panel: Panel) -> str:
    return ACTIVE_BORDER if state.active_panel is panel else INACTIVE_BORDER


def _window(lines: List[Text], offset: int, height: int) -> Text:
    visible = lines[offset:offset + max(1, height)]
    return Text("\n").join(visible)


def _render_groups(state: AppState, height: int) -> RichPanel:
    lines: List[Text] = []
    for idx, group in enumerate(state.groups):
        marker = "✓ " if group.committed else "  "
        line = Text(marker, style="green" if group.committed else "")
        line.append(group.header(), style="dim" if group.committed else "")
        if idx == state.selected_index:
            line.stylize("reverse")
        lines.append(line)
    if not lines:
        lines.append(Text("No commit groups", style="dim"))

    inner = max(1, height - 2)
    offset = max(0, state.selected_index - inner + 1)
    title = f" Groups ({state.committed_count()}/{len(state.groups)} committed) "
    return RichPanel(_window(lines, offset, inner), title=title, border_style=_border(state, Panel.GROUPS))


def _render_message(state: AppState, height: int) -> RichPanel:
    group = state.selected_group()
    if group is None:
        body = Text("")
    else:
        message_lines = group.full_message().splitlines()
        lines = [Text(message_lines[0], style="bold")] if message_lines else []
        lines.extend(Text(line) for line in message_lines[1:])
        body = _window(lines, state.commit_message_scroll_offset, max(1, height - 2))
    title = " Commit Message "
    if group is not None and group.committed:
        title = " Commit Message (committed) "
    return RichPanel(body, title=title, border_style=_border(state, Panel.COMMIT_MESSAGE))


def _render_files(state: AppState, height: int) -> RichPanel:
    group = state.selected_group()
    files = group.files if group is not None else []
    lines: List[Text] = []
    for idx, changed in enumerate(files):
        icon, color = status_icon(changed)
        line = Text(f"{icon} ", style=color)
        if changed.orig_path:
            line.append(f"{changed.orig_path} → {changed.path}")
        else:
            line.append(changed.path)
        if state.active_panel is Panel.FILES and idx == state.selected_file_index:
            line.stylize("reverse")
        lines.append(line)
    if not lines:
        lines.append(Text("No files", style="dim"))

    inner = max(1, height - 2)
    offset = max(0, state.selected_file_index - inner + 1)
    return RichPanel(
        _window(lines, offset, inner),
        title=f" Files ({len(files)}) ",
        border_style=_border(state, Panel.FILES),
    )


def _diff_line(line: str) -> Text:
    if line.startswith(("+++", "---", "diff ", "index ")):
        return Text(line, style="bold")
    if line.startswith("+"):
        return Text(line, style="green")
    if line.startswith("-"):
        return Text(line, style="red")
    if line.startswith("@@"):
        return Text(line, style="cyan")
    return Text(line)


def _render_diff(state: AppState, height: int) -> RichPanel:
    lines = [_diff_line(line) for line in state.diff_content.splitlines()]
    title = f" Diff: {state.diff_file_path} (↑↓ scroll, Esc close) "
    return RichPanel(
        _window(lines, state.diff_scroll_offset, max(1, height - 2)),
        title=title,
        border_style=ACTIVE_BORDER,
    )


def _render_editor(state: AppState, height: int) -> RichPanel:
    editor = state.editor
    raw_lines = editor.text.split("\n")
    row, col = editor.cursor_row, editor.cursor_col
    lines: List[Text] = []
    for idx, raw in enumerate(raw_lines):
        line = Text(raw)
        if idx == row:
            # Pad so the cursor is visible at the end of a line.
            line = Text(raw + " ")
            line.stylize("reverse", col, col + 1)
        lines.append(line)

    inner = max(1, height - 2)
    offset = max(0, row - inner + 1)
    return RichPanel(
        _window(lines, offset, inner),
        title=" Edit Commit Message (Ctrl+S save, Ctrl+C cancel, F1 help) ",
        border_style="yellow",
    )


def _render_help(height: int) -> RichPanel:
    text = Text()
    for idx, (key, label) in enumerate(EDITOR_HELP):
        if idx:
            text.append("\n")
        text.append(f"{key:<18}", style="bold")
        text.append(label)
    return RichPanel(text, title=" Editor Help (Esc/F1 close) ", border_style="magenta", height=height)


def _render_popup(state: AppState, height: int) -> RichPanel:
    lines = [Text(line) for line in state.status_message.splitlines()]
    style = "yellow"
    if state.status_message.startswith("✗"):
        style = "red"
    elif state.status_message.startswith("✓"):
        style = "green"
    return RichPanel(
        _window(lines, state.popup_scroll_offset, max(1, height - 2)),
        title=POPUP_TITLE,
        border_style=style,
    )


def _render_footer(state: AppState, ai_enabled: bool) -> RichPanel:
    if state.overlay is Overlay.EDITOR:
        keys = [("Ctrl+S", "Save"), ("Ctrl+C/Esc", "Cancel"), ("F1", "Help")]
    elif state.overlay is Overlay.HELP:
        keys = [("Esc/F1", "Close help")]
    elif state.overlay is Overlay.DIFF:
        keys = [("↑↓", "Scroll"), ("Esc", "Close")]
    elif state.overlay is Overlay.POPUP:
        keys = [("↑↓", "Scroll"), ("Enter/Esc", "Close")]
    else:
        keys = [("Tab", "Panel"), ("↑↓/jk", "Move"), ("e", "Edit"), ("d", "Diff")]
        if ai_enabled:
            keys.append(("a", "AI"))
        keys.extend([("c", "Commit"), ("C", "Commit all"), ("q", "Quit")])

    shortcuts = Text()
    for key, label in keys:
        shortcuts.append(f" [{key}] ", style="bold")
        shortcuts.append(f"{label} ", style="dim")
    return RichPanel(shortcuts, style="dim")


def render(state: AppState, height: int, ai_enabled: bool = False) -> Layout:
    """Build the layout for one frame of a terminal ``height`` rows high."""
    layout = Layout()
    popup_height = 0
    if state.overlay is Overlay.POPUP:
        popup_height = min(MAX_POPUP_HEIGHT, len(state.status_message.splitlines()) + 2)
    main_height = max(3, height - FOOTER_HEIGHT - popup_height)

    regions = [Layout(name="main", ratio=1)]
    if popup_height:
        regions.append(Layout(name="popup", size=popup_height))
    regions.append(Layout(name="footer", size=FOOTER_HEIGHT))
    layout.split_column(*regions)

    if state.overlay is Overlay.HELP:
        layout["main"].update(_render_help(main_height))
    elif state.overlay is Overlay.DIFF:
        layout["main"].update(_render_diff(state, main_height))
    elif state.overlay is Overlay.EDITOR:
        layout["main"].update(_render_editor(state, main_height))
    else:
        message_height = main_height // 2
        files_height = main_height - message_height
        layout["main"].split_row(
            Layout(name="groups", ratio=2),
            Layout(name="right", ratio=3),
        )
        layout["right"].split_column(
            Layout(name="message", size=message_height),
            Layout(name="files", size=files_height),
        )
        layout["groups"].update(_render_groups(state, main_height))
        layout["message"].update(_render_message(state, message_height))
        layout["files"].update(_render_files(state, files_height))

    if popup_height:
        layout["popup"].update(_render_popup(state, popup_height))
    layout["footer"].update(_render_footer(state, ai_enabled))
    return layout
