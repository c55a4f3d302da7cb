"""
Shared type definitions for the long-form worksheet engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, Flag, auto


class ResultKind(Enum):
    """How a result row reacts to a wrong answer."""

    PLAIN = "plain"  # Addition / subtraction result
    PARTIAL = "partial"  # Multiplication partial product, never flagged wrong
    FINAL = "final"  # Multiplication final product


class DivisionPhase(Enum):
    """Where the next long-division digit is expected."""

    QUOTIENT = "quotient"
    REMAINDER = "remainder"
    BROUGHT_DOWN = "brought_down"


class CellMark(Flag):
    """Per-cell correctness metadata."""

    NONE = 0
    CORRECT = auto()
    WRONG = auto()
    LOCKED = auto()


@dataclass(frozen=True)
class EditorConfig:
    """Worksheet dimensions and terminal display settings."""

    rows: int = 30
    cols: int = 24
    cell_width: int = 3  # Characters per cell in the terminal view


# =============================================================================
# Positions and Operands
# =============================================================================


@dataclass(frozen=True)
class Position:
    """A cell position on the worksheet."""

    row: int
    col: int


@dataclass(frozen=True)
class Operand:
    """A run of digits on one row, with its inclusive column span."""

    digits: str
    start: int
    end: int

    @property
    def value(self) -> int:
        return int(self.digits)

    @property
    def width(self) -> int:
        return len(self.digits)


@dataclass(frozen=True)
class ParsedOperands:
    """Both operands found around an operator anchor."""

    row: int
    anchor: int
    a: Operand
    b: Operand


@dataclass(frozen=True)
class ActiveOperation:
    """An operator typed at the cursor, waiting for Enter."""

    symbol: str
    row: int
    anchor_col: int


# =============================================================================
# Result Entry
# =============================================================================


@dataclass(frozen=True)
class BoxRange:
    """
    The full rectangular unit of one formatted operation.

    The box covers top_row plus every row from operator_row to result_row.
    operator_row is the first laid-out row below the typed row: the operand/operator
    row for addition and subtraction, the first partial row for multiplication.
    Rows skipped over by collision avoidance are not part of the box.
    """

    top_row: int
    operator_row: int
    result_row: int
    start_col: int
    end_col: int
    underline2_row: int | None = None  # Multiplication only
    underline2_start: int | None = None  # Multiplication only

    @property
    def rows(self) -> tuple[int, ...]:
        block = tuple(range(self.operator_row, self.result_row + 1))
        if self.top_row in block:
            return block
        return (self.top_row,) + block

    def contains(self, row: int, col: int) -> bool:
        return row in self.rows and self.start_col <= col <= self.end_col


@dataclass
class ResultRange:
    """A declared span where the user types an answer."""

    row: int
    start_col: int
    end_col: int
    correct_digits: str
    correct_start_col: int
    kind: ResultKind = ResultKind.PLAIN
    check_start_col: int | None = None
    check_end_col: int | None = None
    entry_col: int | None = None
    box: BoxRange | None = None
    locked: bool = False

    @property
    def check_start(self) -> int:
        return self.start_col if self.check_start_col is None else self.check_start_col

    @property
    def check_end(self) -> int:
        return self.end_col if self.check_end_col is None else self.check_end_col

    def contains(self, row: int, col: int) -> bool:
        return row == self.row and self.start_col <= col <= self.end_col

    def same_span(self, other: ResultRange) -> bool:
        return (
            self.row == other.row
            and self.start_col == other.start_col
            and self.end_col == other.end_col
        )


@dataclass
class ActiveEntry:
    """The result range currently being filled in, plus its entry column."""

    range: ResultRange
    cursor_col: int


# =============================================================================
# Division
# =============================================================================


@dataclass
class DivisionJumpState:
    """Progress through the quotient / remainder / brought-down cycle of one division."""

    dividend_row: int
    dividend_start_col: int
    quotient_start_col: int
    work_start_row: int
    work_end_row: int
    work_start_col: int
    work_end_col: int
    current_step: int = 0
    phase: DivisionPhase = DivisionPhase.QUOTIENT

    def in_work_area(self, row: int, col: int) -> bool:
        return (
            self.work_start_row <= row <= self.work_end_row
            and self.work_start_col <= col <= self.work_end_col
        )


# =============================================================================
# Layout
# =============================================================================


@dataclass(frozen=True)
class LayoutResult:
    """What a strategy produced when formatting an operation."""

    result_range: ResultRange | None = None
    extra_ranges: tuple[ResultRange, ...] = ()
    box: BoxRange | None = None
    cursor: Position | None = None
