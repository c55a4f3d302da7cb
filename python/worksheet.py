"""
The character grid a worksheet is typed into.
"""

from __future__ import annotations

from worksheet_types import CellMark

__all__ = ["Worksheet"]


class Worksheet:
    """
    Fixed-size grid of single-character cells.

    Every cell holds one character or "" (empty) plus a CellMark recording
    correctness and lock state. Out-of-bounds reads return "" and out-of-bounds
    writes are ignored, so callers can lay out near the edges without checking.
    """

    def __init__(self, rows: int = 30, cols: int = 24) -> None:
        if rows <= 0 or cols <= 0:
            raise ValueError(
                f"Invalid worksheet size: {rows}x{cols}\n"
                f"  Rows and columns must both be positive"
            )
        self.rows = rows
        self.cols = cols
        self._chars: list[list[str]] = [["" for _ in range(cols)] for _ in range(rows)]
        self._marks: list[list[CellMark]] = [
            [CellMark.NONE for _ in range(cols)] for _ in range(rows)
        ]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get_cell(self, row: int, col: int) -> str:
        if not self.in_bounds(row, col):
            return ""
        return self._chars[row][col]

    def set_cell(self, row: int, col: int, char: str = "") -> None:
        if len(char) > 1:
            raise ValueError(
                f"Invalid cell value: '{char}'\n"
                f"  Position: row {row}, column {col}\n"
                f"  A cell holds a single character or '' for empty"
            )
        if not self.in_bounds(row, col):
            return
        self._chars[row][col] = char

    def get_mark(self, row: int, col: int) -> CellMark:
        if not self.in_bounds(row, col):
            return CellMark.NONE
        return self._marks[row][col]

    def set_mark(self, row: int, col: int, mark: CellMark) -> None:
        if self.in_bounds(row, col):
            self._marks[row][col] = mark

    def is_locked(self, row: int, col: int) -> bool:
        return CellMark.LOCKED in self.get_mark(row, col)

    def row_text(self, row: int, start: int = 0, end: int | None = None) -> str:
        """Cells start..end (inclusive) of a row, with empty cells as spaces."""
        if end is None:
            end = self.cols - 1
        return "".join(self.get_cell(row, c) or " " for c in range(start, end + 1))

    def row_has_content(self, row: int, start: int, end: int) -> bool:
        return any(self.get_cell(row, c) for c in range(start, end + 1))

    def resize(self, rows: int, cols: int) -> None:
        """Replace the grid with an empty one of a new size."""
        fresh = Worksheet(rows, cols)
        self.rows, self.cols = fresh.rows, fresh.cols
        self._chars = fresh._chars
        self._marks = fresh._marks

    def clear_all(self) -> None:
        for r in range(self.rows):
            for c in range(self.cols):
                self._chars[r][c] = ""
                self._marks[r][c] = CellMark.NONE

    def lines(self) -> list[str]:
        """All rows as text, trailing blanks stripped."""
        return [self.row_text(r).rstrip() for r in range(self.rows)]
