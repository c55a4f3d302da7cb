"""
Renderer notifications and terminal rendering for worksheets.

Provides:
1. WorksheetRenderer - the notification sink the engine talks to (every callback is a no-op)
2. AsciiRenderer - records decorations and renders the worksheet as coloured text
"""

from __future__ import annotations

import logging
from typing import Callable

import simple_chalk as chalk  # type: ignore[import-untyped]

from worksheet import Worksheet
from worksheet_types import BoxRange, CellMark, Position

__all__ = ["WorksheetRenderer", "AsciiRenderer", "render_worksheet"]

logger = logging.getLogger(__name__)


class WorksheetRenderer:
    """Notification sink for worksheet display updates. Subclasses override what they need."""

    def update_cell(self, row: int, col: int) -> None:
        pass

    def update_cursor(self, row: int, col: int) -> None:
        pass

    def add_underline(self, row: int, start_col: int, end_col: int) -> None:
        pass

    def remove_underline(self, row: int, start_col: int, end_col: int) -> None:
        pass

    def highlight_box(
        self, top_row: int, bottom_row: int, start_col: int, end_col: int, box: BoxRange | None = None
    ) -> None:
        pass

    def clear_highlight(self) -> None:
        pass

    def render_all(self) -> None:
        pass


# =============================================================================
# Terminal Rendering
# =============================================================================


def _compose(styles: list[Callable[[str], str]]) -> Callable[[str], str]:
    def apply(s: str) -> str:
        for style in styles:
            s = style(s)
        return s

    return apply


def render_worksheet(
    worksheet: Worksheet,
    cell_width: int = 3,
    cursor: Position | None = None,
    underlines: set[Position] | None = None,
    highlight: BoxRange | None = None,
    colorize: bool = True,
    title: str = "worksheet",
) -> str:
    """
    Render a worksheet as a bordered character grid.

    Args:
        worksheet: The worksheet to render
        cell_width: Characters per cell (default 3)
        cursor: Optional cursor position, shown inverted
        underlines: Cells that carry an underline
        highlight: Optional locked box to highlight as a unit
        colorize: Emit ANSI styles; False gives plain text
        title: Title shown in the top border

    Returns:
        Rendered string, one line per worksheet row plus top and bottom borders
    """
    underlines = underlines or set()
    grid_width = worksheet.cols * cell_width + 2

    label = f" {title} "
    if len(label) <= grid_width - 2:
        title_start = (grid_width - len(label)) // 2
        top = (
            "┌"
            + "─" * (title_start - 1)
            + label
            + "─" * (grid_width - title_start - len(label) - 1)
            + "┐"
        )
    else:
        top = "┌" + "─" * (grid_width - 2) + "┐"

    lines: list[str] = [top]

    for r in range(worksheet.rows):
        parts = ["│"]
        for c in range(worksheet.cols):
            char = worksheet.get_cell(r, c) or " "
            content = char if cell_width == 1 else char.center(cell_width)

            if colorize:
                styles: list[Callable[[str], str]] = []
                mark = worksheet.get_mark(r, c)
                if CellMark.LOCKED in mark:
                    styles.append(chalk.green.bold)
                elif CellMark.CORRECT in mark:
                    styles.append(chalk.green)
                elif CellMark.WRONG in mark:
                    styles.append(chalk.red)
                if Position(r, c) in underlines:
                    styles.append(chalk.underline)

                if cursor is not None and cursor == Position(r, c):
                    styles.append(chalk.bgWhite.black)
                elif highlight is not None and highlight.contains(r, c):
                    styles.append(chalk.bgYellow.black)

                content = _compose(styles)(content)

            parts.append(content)
        parts.append("│")
        lines.append("".join(parts))

    lines.append("└" + "─" * (grid_width - 2) + "┘")
    return "\n".join(lines)


class AsciiRenderer(WorksheetRenderer):
    """
    Renderer that remembers cursor, underline and highlight state.

    Cell contents and marks are read from the worksheet at render time, so
    update_cell only needs to note that something changed.
    """

    def __init__(self, worksheet: Worksheet, cell_width: int = 3) -> None:
        self.worksheet = worksheet
        self.cell_width = cell_width
        self.cursor: Position | None = None
        self.underlines: set[Position] = set()
        self.highlight: BoxRange | None = None
        self.dirty = True

    def update_cell(self, row: int, col: int) -> None:
        self.dirty = True

    def update_cursor(self, row: int, col: int) -> None:
        self.cursor = Position(row, col)
        self.dirty = True

    def add_underline(self, row: int, start_col: int, end_col: int) -> None:
        for c in range(start_col, end_col + 1):
            self.underlines.add(Position(row, c))
        self.dirty = True

    def remove_underline(self, row: int, start_col: int, end_col: int) -> None:
        for c in range(start_col, end_col + 1):
            self.underlines.discard(Position(row, c))
        self.dirty = True

    def highlight_box(
        self, top_row: int, bottom_row: int, start_col: int, end_col: int, box: BoxRange | None = None
    ) -> None:
        """Highlight a box. Without box, every row from top_row to bottom_row is covered."""
        if box is None:
            box = BoxRange(top_row, top_row, bottom_row, start_col, end_col)
        self.highlight = box
        self.dirty = True

    def clear_highlight(self) -> None:
        self.highlight = None
        self.dirty = True

    def render_all(self) -> None:
        self.dirty = True

    def is_underlined(self, row: int, col: int) -> bool:
        return Position(row, col) in self.underlines

    def render(self, colorize: bool = True) -> str:
        self.dirty = False
        return render_worksheet(
            self.worksheet,
            self.cell_width,
            cursor=self.cursor,
            underlines=self.underlines,
            highlight=self.highlight,
            colorize=colorize,
        )
