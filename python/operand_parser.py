"""
Operand scanning around an operator anchor.
"""

from __future__ import annotations

from worksheet import Worksheet
from worksheet_types import Operand, ParsedOperands

__all__ = [
    "ADD_SYMBOLS",
    "SUB_SYMBOLS",
    "MUL_SYMBOLS",
    "DIV_SYMBOLS",
    "parse_around",
]

ADD_SYMBOLS = frozenset("+")
SUB_SYMBOLS = frozenset("-")
MUL_SYMBOLS = frozenset("*xX×·")
DIV_SYMBOLS = frozenset("/:")


def _is_digit(char: str) -> bool:
    return len(char) == 1 and "0" <= char <= "9"


def parse_around(
    worksheet: Worksheet, row: int, anchor: int, symbols: frozenset[str]
) -> ParsedOperands | None:
    """
    Find the digit runs immediately left and right of an operator.

    Scans left from anchor-1 and right from anchor+1 while cells hold ASCII digits.

    Args:
        worksheet: The worksheet to read from
        row: Row holding the expression
        anchor: Column of the operator glyph
        symbols: Operator glyphs accepted at the anchor

    Returns:
        ParsedOperands, or None if the anchor is out of bounds, holds a different
        symbol, or either side has no digits
    """
    if not worksheet.in_bounds(row, anchor):
        return None
    if worksheet.get_cell(row, anchor) not in symbols:
        return None

    a_start = anchor
    while a_start - 1 >= 0 and _is_digit(worksheet.get_cell(row, a_start - 1)):
        a_start -= 1
    a_end = anchor - 1

    b_end = anchor
    while b_end + 1 < worksheet.cols and _is_digit(worksheet.get_cell(row, b_end + 1)):
        b_end += 1
    b_start = anchor + 1

    if a_start > a_end or b_start > b_end:
        return None

    a = Operand(worksheet.row_text(row, a_start, a_end), a_start, a_end)
    b = Operand(worksheet.row_text(row, b_start, b_end), b_start, b_end)
    return ParsedOperands(row, anchor, a, b)
