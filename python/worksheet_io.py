"""
Text formats for worksheets.

Provides two formats:
1. JSON export/import, the saved-file format of the worksheet program
2. Concise format with one character per cell, for tests and demos
"""

from __future__ import annotations

import json
import logging

from worksheet import Worksheet

__all__ = ["FORMAT_VERSION", "export_to_text", "import_from_text", "parse_worksheet"]

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def export_to_text(worksheet: Worksheet) -> str:
    """
    Serialize the worksheet's characters as JSON.

    Only characters are saved; correctness marks and result ranges belong to
    the editing session.
    """
    payload = {
        "rows": worksheet.rows,
        "cols": worksheet.cols,
        "grid": [
            [{"char": worksheet.get_cell(r, c)} for c in range(worksheet.cols)]
            for r in range(worksheet.rows)
        ],
        "version": FORMAT_VERSION,
    }
    return json.dumps(payload)


def import_from_text(text: str, worksheet: Worksheet) -> bool:
    """
    Load JSON produced by export_to_text into an existing worksheet.

    The worksheet is resized to the saved dimensions. Missing or malformed
    cells load as empty.

    Returns:
        True on success; False if the text is not a valid worksheet, in which
        case the worksheet is left untouched
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("import failed: not JSON (%s)", e)
        return False

    if not isinstance(data, dict) or not isinstance(data.get("grid"), list):
        logger.warning("import failed: no grid in document")
        return False

    rows, cols = data.get("rows"), data.get("cols")
    # JSON true/false load as bool, which is an int subclass
    sizes_valid = all(isinstance(n, int) and not isinstance(n, bool) and n > 0 for n in (rows, cols))
    if not sizes_valid:
        logger.warning("import failed: invalid size %r x %r", rows, cols)
        return False

    grid = data["grid"]
    chars: list[list[str]] = []
    for r in range(rows):
        source_row = grid[r] if r < len(grid) and isinstance(grid[r], list) else []
        row_chars: list[str] = []
        for c in range(cols):
            cell = source_row[c] if c < len(source_row) else None
            char = cell.get("char") if isinstance(cell, dict) else ""
            row_chars.append(char if isinstance(char, str) and len(char) == 1 else "")
        chars.append(row_chars)

    worksheet.resize(rows, cols)
    for r, row_chars in enumerate(chars):
        for c, char in enumerate(row_chars):
            worksheet.set_cell(r, c, char)
    logger.info("imported %dx%d worksheet", rows, cols)
    return True


def parse_worksheet(definition: str, cols: int | None = None, rows: int | None = None) -> Worksheet:
    """
    Build a worksheet from a concise text definition.

    Format:
    - Rows separated by | or by newlines (a leading/trailing blank line is ignored)
    - Each character is one cell
    - Underscore (_) or space: Empty cell
    - Any other single character: that character
    - Rows are padded with empty cells to the widest row (or to cols)
    - Extra empty rows are added up to rows

    Example:
        parse_worksheet("12+7|____", cols=6)

        Creates a 2x6 worksheet with "12+7" on row 0 and an empty row 1.

    Args:
        definition: The worksheet text
        cols: Minimum number of columns
        rows: Minimum number of rows

    Returns:
        The parsed Worksheet

    Raises:
        ValueError: If the definition has no rows, or is wider/taller than
            the requested size
    """
    text = definition.strip("\n")
    row_strings = text.replace("\n", "|").split("|") if text else []
    if not row_strings and rows is None:
        raise ValueError("Empty worksheet definition\n  Expected at least one row")

    width = max((len(row) for row in row_strings), default=0)
    if cols is not None:
        if width > cols:
            too_wide = [(i, len(row)) for i, row in enumerate(row_strings) if len(row) > cols]
            error_msg = (
                f"Worksheet definition wider than {cols} columns\n"
                f"  Rows too wide:\n"
            )
            for row_idx, actual in too_wide:
                error_msg += f"    Row {row_idx}: {actual} columns - \"{row_strings[row_idx]}\"\n"
            raise ValueError(error_msg.rstrip("\n"))
        width = cols

    height = len(row_strings)
    if rows is not None:
        if height > rows:
            raise ValueError(
                f"Worksheet definition taller than {rows} rows\n"
                f"  Definition has {height} rows"
            )
        height = rows

    worksheet = Worksheet(max(height, 1), max(width, 1))
    for r, row_str in enumerate(row_strings):
        for c, char in enumerate(row_str):
            if char not in ("_", " "):
                worksheet.set_cell(r, c, char)
    return worksheet
