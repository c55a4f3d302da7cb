"""
Long-form layout strategies for addition, subtraction and multiplication.

Each strategy parses the operands around the operator anchor, picks a free
place below the typed row (collision avoidance), rewrites the expression in
vertical form and declares the result ranges the user has to fill in.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Iterable

from ascii_render import WorksheetRenderer
from operand_parser import ADD_SYMBOLS, MUL_SYMBOLS, SUB_SYMBOLS, parse_around
from worksheet import Worksheet
from worksheet_types import (
    ActiveOperation,
    BoxRange,
    LayoutResult,
    Position,
    ResultKind,
    ResultRange,
)

if TYPE_CHECKING:
    from operation_manager import OperationManager

__all__ = [
    "LAYOUT_SHIFT_ROWS",
    "AdditionOperation",
    "MultiplicationOperation",
    "SubtractionOperation",
    "intersects_locked",
    "plan_layout_shift",
]

logger = logging.getLogger(__name__)

LAYOUT_SHIFT_ROWS = 3


# =============================================================================
# Collision Avoidance
# =============================================================================


def intersects_locked(
    boxes: Iterable[BoxRange], row: int, start_col: int, end_col: int
) -> bool:
    """Check whether a row span overlaps any of the given boxes."""
    return any(
        row in box.rows and not (end_col < box.start_col or start_col > box.end_col)
        for box in boxes
    )


def plan_layout_shift(
    worksheet: Worksheet,
    typed_row: int,
    row_offsets: Iterable[int],
    start_col: int,
    end_col: int,
    locked_boxes: Iterable[BoxRange] = (),
) -> int | None:
    """
    Find how far a layout must be pushed down to land on free rows.

    The layout needs the rows typed_row + offset (+ shift). The shift grows in
    steps of LAYOUT_SHIFT_ROWS until none of those rows holds a character or
    overlaps a locked box within start_col..end_col.

    Args:
        worksheet: The worksheet being laid out on
        typed_row: Row the expression was typed on
        row_offsets: Offsets below typed_row that the layout writes to
        start_col: Leftmost column the layout occupies
        end_col: Rightmost column the layout occupies
        locked_boxes: Boxes of results that are already locked

    Returns:
        The shift in rows, or None if no placement fits inside the worksheet
    """
    offsets = sorted(row_offsets)
    boxes = list(locked_boxes)
    start_col = max(0, start_col)
    end_col = min(worksheet.cols - 1, end_col)

    shift = 0
    while typed_row + offsets[-1] + shift < worksheet.rows:
        rows = [typed_row + offset + shift for offset in offsets]
        blocked = any(
            worksheet.row_has_content(r, start_col, end_col)
            or intersects_locked(boxes, r, start_col, end_col)
            for r in rows
        )
        if not blocked:
            return shift
        shift += LAYOUT_SHIFT_ROWS
    return None


def _write(worksheet: Worksheet, renderer: WorksheetRenderer, row: int, col: int, char: str) -> None:
    if worksheet.in_bounds(row, col):
        worksheet.set_cell(row, col, char)
        renderer.update_cell(row, col)


def _clear_span(
    worksheet: Worksheet, renderer: WorksheetRenderer, row: int, start_col: int, end_col: int
) -> None:
    for c in range(start_col, end_col + 1):
        _write(worksheet, renderer, row, c, "")


# =============================================================================
# Addition / Subtraction
# =============================================================================


class StackedOperation:
    """
    Two operands stacked on their ones column, one result row underneath.

    Layout for 123-45 typed on row r (after collision avoidance):

        r      123
        r+1   - 45     (underlined)
        r+2   ___      result entry
    """

    name = "stacked"
    glyph = "?"
    symbols: frozenset[str] = frozenset()
    compute: Callable[[int, int], int | None]

    def format(
        self,
        worksheet: Worksheet,
        renderer: WorksheetRenderer,
        active: ActiveOperation,
        manager: OperationManager | None = None,
    ) -> LayoutResult | None:
        typed_row = active.row
        parsed = parse_around(worksheet, typed_row, active.anchor_col, self.symbols)
        if parsed is None:
            logger.debug("%s at (%d, %d): no operands", self.name, typed_row, active.anchor_col)
            return None
        a, b = parsed.a, parsed.b

        answer = self.compute(a.value, b.value)
        if answer is None:
            logger.debug("%s %s%s%s: degenerate", self.name, a.digits, self.glyph, b.digits)
            return None
        correct = str(answer)

        # Everything aligns on the ones column of A
        ones = a.end
        b_write_start = ones - (b.width - 1)
        bigger_start = b_write_start if b.width > a.width else a.start
        op_col = max(0, bigger_start - 1)
        max_width = max(a.width, b.width)
        underline_start = ones - (max_width - 1)
        result_start = ones - (max(max_width, len(correct)) - 1)
        if b_write_start < 0 or result_start < 0:
            logger.debug("%s %s: no room left of column %d", self.name, correct, ones)
            return None

        span_start = min(underline_start, op_col, result_start)
        locked = manager.locked_boxes() if manager is not None else ()
        shift = plan_layout_shift(worksheet, typed_row, (1, 2), span_start, ones, locked)
        if shift is None:
            logger.debug("%s at row %d: no free rows below", self.name, typed_row)
            return None

        operator_row = typed_row + 1 + shift
        result_row = typed_row + 2 + shift

        # A stays where it was typed; the operator and B move down
        _write(worksheet, renderer, typed_row, active.anchor_col, "")
        _clear_span(worksheet, renderer, typed_row, b.start, b.end)

        _clear_span(worksheet, renderer, operator_row, span_start, ones)
        _write(worksheet, renderer, operator_row, op_col, self.glyph)
        for i, digit in enumerate(b.digits):
            _write(worksheet, renderer, operator_row, b_write_start + i, digit)

        renderer.remove_underline(operator_row, underline_start, ones)
        renderer.add_underline(operator_row, underline_start, ones)

        box = BoxRange(typed_row, operator_row, result_row, span_start, ones)
        correct_start = ones - (len(correct) - 1)
        result_range = ResultRange(
            row=result_row,
            start_col=result_start,
            end_col=ones,
            correct_digits=correct,
            correct_start_col=correct_start,
            kind=ResultKind.PLAIN,
            check_start_col=correct_start,
            check_end_col=ones,
            entry_col=ones,
            box=box,
        )
        logger.info(
            "%s %s%s%s laid out at rows %d-%d (shift %d)",
            self.name, a.digits, self.glyph, b.digits, typed_row, result_row, shift,
        )
        return LayoutResult(result_range=result_range, box=box, cursor=Position(result_row, ones))


class AdditionOperation(StackedOperation):
    name = "addition"
    glyph = "+"
    symbols = ADD_SYMBOLS

    @staticmethod
    def compute(a: int, b: int) -> int | None:
        return a + b


class SubtractionOperation(StackedOperation):
    name = "subtraction"
    glyph = "-"
    symbols = SUB_SYMBOLS

    @staticmethod
    def compute(a: int, b: int) -> int | None:
        # Negative results are not supported
        if a < b:
            return None
        return a - b


# =============================================================================
# Multiplication
# =============================================================================


class MultiplicationOperation:
    """
    Keeps "A·B" on the typed row and adds one partial product row per digit of B.

    Layout for 12*34 typed on row r:

        r      12·34    (underlined)
        r+1    ____     partial 12*4
        r+2    ____     partial 12*3 followed by one 0 (underlined)
        r+3    ____     final product
    """

    name = "multiplication"
    symbols = MUL_SYMBOLS

    def format(
        self,
        worksheet: Worksheet,
        renderer: WorksheetRenderer,
        active: ActiveOperation,
        manager: OperationManager | None = None,
    ) -> LayoutResult | None:
        typed_row = active.row
        parsed = parse_around(worksheet, typed_row, active.anchor_col, self.symbols)
        if parsed is None:
            logger.debug("multiplication at (%d, %d): no operands", typed_row, active.anchor_col)
            return None
        a, b = parsed.a, parsed.b

        box_start = max(0, a.start - 1)
        box_end = b.end

        # Shift-and-add decomposition, units digit of B first
        partials = [
            str(a.value * int(digit)) + "0" * position
            for position, digit in enumerate(reversed(b.digits))
        ]
        correct_final = str(a.value * b.value)

        # Partial rows, the final row and one spare row below it
        needed_below = len(partials) + 2
        locked = manager.locked_boxes() if manager is not None else ()
        shift = plan_layout_shift(
            worksheet, typed_row, range(1, needed_below + 1), box_start, box_end, locked
        )
        if shift is None:
            logger.debug("multiplication at row %d: no free rows below", typed_row)
            return None

        first_partial_row = typed_row + 1 + shift
        last_partial_row = first_partial_row + len(partials) - 1
        final_row = last_partial_row + 1

        _write(worksheet, renderer, typed_row, active.anchor_col, "·")
        renderer.remove_underline(typed_row, a.start, box_end)
        renderer.add_underline(typed_row, a.start, box_end)

        # Underline 2 reaches one cell further left than the widest answer
        starts_needed = [box_end - (len(p) - 1) for p in partials]
        starts_needed.append(box_end - (len(correct_final) - 1))
        underline2_start = max(box_start, min(starts_needed) - 1)

        box = BoxRange(
            typed_row,
            first_partial_row,
            final_row,
            box_start,
            box_end,
            underline2_row=last_partial_row,
            underline2_start=underline2_start,
        )

        ranges: list[ResultRange] = []
        for i, partial in enumerate(partials):
            row = first_partial_row + i
            _clear_span(worksheet, renderer, row, box_start, box_end)
            correct_start = box_end - (len(partial) - 1)
            ranges.append(
                ResultRange(
                    row=row,
                    start_col=box_start,
                    end_col=box_end,
                    correct_digits=partial,
                    correct_start_col=correct_start,
                    kind=ResultKind.PARTIAL,
                    check_start_col=correct_start,
                    check_end_col=box_end,
                    entry_col=box_end,
                    box=box,
                )
            )

        renderer.remove_underline(last_partial_row, underline2_start, box_end)
        renderer.add_underline(last_partial_row, underline2_start, box_end)

        _clear_span(worksheet, renderer, final_row, box_start, box_end)
        final_start = box_end - (len(correct_final) - 1)
        final_range = ResultRange(
            row=final_row,
            start_col=box_start,
            end_col=box_end,
            correct_digits=correct_final,
            correct_start_col=final_start,
            kind=ResultKind.FINAL,
            check_start_col=final_start,
            check_end_col=box_end,
            entry_col=box_end,
            box=box,
        )

        logger.info(
            "multiplication %s·%s laid out at rows %d-%d (shift %d, %d partials)",
            a.digits, b.digits, typed_row, final_row, shift, len(partials),
        )
        return LayoutResult(
            result_range=ranges[0],
            extra_ranges=tuple(ranges[1:]) + (final_range,),
            box=box,
            cursor=Position(first_partial_row, box_end),
        )
