"""
Interactive long-form arithmetic worksheet.
Type sums like 12+7 and press Enter, then fill in the result right to left.
"""

import logging
from pathlib import Path

import readchar, sys
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ascii_render import AsciiRenderer
from worksheet import Worksheet
from worksheet_editor import WorksheetEditor
from worksheet_io import parse_worksheet
from worksheet_types import CellMark, EditorConfig, ResultKind

# readchar key codes -> logical key names understood by WorksheetEditor
KEY_NAMES = {
    readchar.key.ENTER: "Enter",
    readchar.key.CR: "Enter",
    readchar.key.BACKSPACE: "Backspace",
    readchar.key.CTRL_H: "Backspace",
    readchar.key.LEFT: "ArrowLeft",
    readchar.key.RIGHT: "ArrowRight",
    readchar.key.UP: "ArrowUp",
    readchar.key.DOWN: "ArrowDown",
}


class InteractiveDemo:
    """Terminal front end for the worksheet editor."""

    def __init__(self, config: EditorConfig = EditorConfig(), path: Path | None = None) -> None:
        self.config = config
        self.path = path
        self.worksheet = Worksheet(config.rows, config.cols)
        self.renderer = AsciiRenderer(self.worksheet, config.cell_width)
        self.editor = WorksheetEditor(self.worksheet, self.renderer, config)
        self.console = Console()
        self.status_message = "Ready"

        if path is not None and path.exists():
            if self.editor.open_text(path.read_text(encoding="utf-8")):
                self.status_message = f"Opened {path}"
            else:
                self.status_message = f"✗ {path} is not a valid worksheet"
        self.editor.init()

    def describe_cursor(self) -> Text:
        """Status lines about the cell under the cursor."""
        status = Text()
        row, col = self.editor.row, self.editor.col
        status.append("Cursor: ", style="bold")
        status.append(f"[{row}, {col}]\n")

        manager = self.editor.manager
        entry = manager.active_entry
        status.append("Entry: ", style="bold")
        if entry is None:
            status.append("none\n")
        else:
            kind = "partial product" if entry.range.kind == ResultKind.PARTIAL else "result"
            status.append(
                f"{kind} on row {entry.range.row}, "
                f"cols {entry.range.start_col}-{entry.range.end_col}\n"
            )

        mark = self.worksheet.get_mark(row, col)
        if CellMark.LOCKED in mark:
            status.append("Locked - Backspace deletes the whole operation\n", style="green")
        elif CellMark.WRONG in mark:
            status.append("Not quite - try again\n", style="red")
        return status

    def generate_display(self) -> Panel:
        """Generate the current display with worksheet and status."""
        status = Text()
        status.append(Text.from_ansi(self.renderer.render()))
        status.append("\n\n")
        status.append(self.describe_cursor())
        status.append("\n")
        status.append("Keys:\n", style="bold cyan")
        status.append("  0-9 + - * x : /  - Type\n")
        status.append("  Enter             - Lay out the expression\n")
        status.append("  Backspace         - Erase / delete locked operation\n")
        status.append("  Arrows            - Move\n")
        status.append("  C - Clear   S - Save   Q - Quit\n\n")

        status.append("─" * 40 + "\n", style="dim")
        status.append("Status: ", style="bold")
        status.append(self.status_message)

        width = self.config.cols * self.config.cell_width + 6
        return Panel(status, title="Long-form Worksheet", border_style="green", width=max(width, 60))

    def save(self) -> None:
        if self.path is None:
            self.status_message = "✗ No file given on the command line"
            return
        self.path.write_text(self.editor.save_text(), encoding="utf-8")
        self.status_message = f"✓ Saved {self.path}"

    def run(self) -> None:
        """Run the interactive worksheet."""
        with Live(self.generate_display(), console=self.console, refresh_per_second=4) as live:
            try:
                while True:
                    live.update(self.generate_display())

                    key = readchar.readkey()

                    if key.lower() == "q":
                        self.status_message = "Quitting..."
                        live.update(self.generate_display())
                        break
                    elif key.lower() == "c":
                        self.editor.clear()
                        self.status_message = "Worksheet cleared"
                    elif key.lower() == "s":
                        self.save()
                    elif self.editor.handle_key(KEY_NAMES.get(key, key)):
                        self.status_message = "Ready"
                    else:
                        self.status_message = f"Unknown key: {repr(key)}"

            except KeyboardInterrupt:
                self.status_message = "Interrupted by user"
                live.update(self.generate_display())


SAMPLES = dict(
    sums="12+7|||123-45|||12*34|||84:4",
    carry="  95+17|||  250-125",
)


def main(path: Path | None = None) -> None:
    """Run the interactive worksheet, optionally backed by a JSON file."""
    demo = InteractiveDemo(path=path)
    demo.run()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "sublime":
        # Running from IDE - lay out the samples once and print them
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

        config = EditorConfig()
        sample = SAMPLES[sys.argv[2] if len(sys.argv) > 2 else "sums"]
        worksheet = parse_worksheet(sample, cols=config.cols, rows=config.rows)
        renderer = AsciiRenderer(worksheet, config.cell_width)
        editor = WorksheetEditor(worksheet, renderer, config)
        for r in range(worksheet.rows):
            for c in range(worksheet.cols):
                if worksheet.get_cell(r, c) in ("+", "-", "*", ":"):
                    editor.manager.begin_operation(worksheet.get_cell(r, c), r, c)
                    editor.manager.format_active_operation()
        print(renderer.render())
    else:
        main(Path(sys.argv[1]) if len(sys.argv) > 1 else None)
