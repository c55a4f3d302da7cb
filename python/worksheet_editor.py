"""
Keyboard-level editing of a worksheet.

Takes logical key names ("7", "+", "Enter", "Backspace", "ArrowLeft", ...),
keeps the cursor, and hands operators, digits and deletions to the
OperationManager before falling back to plain typing.
"""

from __future__ import annotations

import logging

from ascii_render import WorksheetRenderer
from operand_parser import ADD_SYMBOLS, DIV_SYMBOLS, MUL_SYMBOLS, SUB_SYMBOLS
from operation_manager import OperationManager
from worksheet import Worksheet
from worksheet_io import export_to_text, import_from_text
from worksheet_types import EditorConfig, Position

__all__ = ["OPERATOR_KEYS", "WorksheetEditor"]

logger = logging.getLogger(__name__)

OPERATOR_KEYS = ADD_SYMBOLS | SUB_SYMBOLS | MUL_SYMBOLS | DIV_SYMBOLS


class WorksheetEditor:
    """Cursor, key handling and plain typing around the operation engine."""

    def __init__(
        self,
        worksheet: Worksheet | None = None,
        renderer: WorksheetRenderer | None = None,
        config: EditorConfig = EditorConfig(),
    ) -> None:
        self.config = config
        self.worksheet = worksheet if worksheet is not None else Worksheet(config.rows, config.cols)
        self.renderer = renderer if renderer is not None else WorksheetRenderer()
        self.manager = OperationManager(self.worksheet, self.renderer)
        self.row = 0
        self.col = 0

    @property
    def cursor(self) -> Position:
        return Position(self.row, self.col)

    def init(self) -> None:
        self.set_cursor(0, 0)

    def set_cursor(self, row: int, col: int) -> None:
        """Move the cursor (clamped to the worksheet) and let the engine react."""
        row = min(max(row, 0), self.worksheet.rows - 1)
        col = min(max(col, 0), self.worksheet.cols - 1)
        self.row, self.col = row, col
        self.renderer.update_cursor(row, col)
        self.manager.update_cursor_context(row, col)
        if self.manager.active_entry is None:
            self.manager.try_resume_at(row, col)

    def handle_key(self, key: str) -> bool:
        """
        Handle one logical key.

        Returns:
            True if the key means something to the editor, False otherwise
        """
        if len(key) == 1 and "0" <= key <= "9":
            self.write_digit(key)
            return True
        if key in OPERATOR_KEYS:
            self.write_operator(key)
            return True

        match key:
            case "Enter":
                self.enter()
            case "Backspace":
                self.erase()
            case "ArrowLeft":
                self.set_cursor(self.row, self.col - 1)
            case "ArrowRight":
                self.set_cursor(self.row, self.col + 1)
            case "ArrowUp":
                self.set_cursor(self.row - 1, self.col)
            case "ArrowDown":
                self.set_cursor(self.row + 1, self.col)
            case _:
                return False
        return True

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def write_digit(self, digit: str) -> None:
        # Division work areas take digits before anything else
        jump = self.manager.handle_division_digit(digit, self.row, self.col)
        if jump is not None:
            self.set_cursor(jump.row, jump.col)
            return

        if self.manager.handle_result_digit(digit):
            entry = self.manager.active_entry
            if entry is not None:
                self.set_cursor(entry.range.row, entry.cursor_col)
            return

        if self.worksheet.is_locked(self.row, self.col):
            logger.debug("digit rejected on locked cell (%d, %d)", self.row, self.col)
            return

        self._put(self.row, self.col, digit)
        self.next_cell()

    def write_operator(self, symbol: str) -> None:
        if self.worksheet.is_locked(self.row, self.col):
            return
        self._put(self.row, self.col, symbol)
        self.manager.begin_operation(symbol, self.row, self.col)
        self.next_cell()

    def enter(self) -> None:
        layout = self.manager.format_active_operation()
        if layout is not None and layout.cursor is not None:
            self.set_cursor(layout.cursor.row, layout.cursor.col)
        else:
            self.set_cursor(self.row + 1, 0)

    def erase(self) -> None:
        """Backspace: result correction, then whole-box deletion, then plain erase."""
        if self.manager.handle_result_backspace():
            entry = self.manager.active_entry
            if entry is not None:
                self.set_cursor(entry.range.row, entry.cursor_col)
            return

        box = self.manager.get_locked_box_at(self.row, self.col)
        if box is not None:
            self.manager.remove_box_range(box)
            self.set_cursor(self.row, self.col)
            return

        if self.worksheet.get_cell(self.row, self.col):
            if not self.worksheet.is_locked(self.row, self.col):
                self._put(self.row, self.col, "")
            return

        # Move back one cell (wrapping to the previous row) and clear there
        if self.col > 0:
            row, col = self.row, self.col - 1
        elif self.row > 0:
            row, col = self.row - 1, self.worksheet.cols - 1
        else:
            return
        if not self.worksheet.is_locked(row, col):
            self._put(row, col, "")
        self.set_cursor(row, col)

    def next_cell(self) -> None:
        """Advance right, wrapping to the next row; stay on the last row at the end."""
        row, col = self.row, self.col + 1
        if col >= self.worksheet.cols:
            col = 0
            if row < self.worksheet.rows - 1:
                row += 1
        self.set_cursor(row, col)

    # -------------------------------------------------------------------------
    # Whole-worksheet actions
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        """Empty the worksheet and forget every operation."""
        self._drop_decorations(self.worksheet.rows, self.worksheet.cols)
        self.worksheet.clear_all()
        self.manager.reset()
        self.renderer.render_all()
        self.init()

    def save_text(self) -> str:
        return export_to_text(self.worksheet)

    def open_text(self, text: str) -> bool:
        """Replace the worksheet with saved JSON. False (and no change) if the text is invalid."""
        old_rows, old_cols = self.worksheet.rows, self.worksheet.cols
        if not import_from_text(text, self.worksheet):
            return False
        self._drop_decorations(old_rows, old_cols)
        self.manager.reset()
        self.renderer.render_all()
        self.init()
        return True

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _put(self, row: int, col: int, char: str) -> None:
        self.worksheet.set_cell(row, col, char)
        self.renderer.update_cell(row, col)

    def _drop_decorations(self, rows: int, cols: int) -> None:
        for r in range(rows):
            self.renderer.remove_underline(r, 0, cols - 1)
        self.renderer.clear_highlight()
