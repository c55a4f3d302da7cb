"""Tests for keyboard-level editing."""

import pytest

from ascii_render import AsciiRenderer
from worksheet import Worksheet
from worksheet_editor import WorksheetEditor
from worksheet_types import CellMark, EditorConfig, Position


@pytest.fixture
def editor() -> WorksheetEditor:
    """A fresh 6x8 editor with the cursor at the origin."""
    ws = Worksheet(6, 8)
    ed = WorksheetEditor(ws, AsciiRenderer(ws))
    ed.init()
    return ed


def press(editor: WorksheetEditor, *keys: str) -> None:
    for key in keys:
        assert editor.handle_key(key), f"key {key!r} not handled"


def type_text(editor: WorksheetEditor, text: str) -> None:
    press(editor, *text)


class TestConstruction:
    """Tests for building an editor."""

    def test_defaults(self) -> None:
        """Without arguments the editor owns a 30x24 worksheet."""
        ed = WorksheetEditor()
        assert (ed.worksheet.rows, ed.worksheet.cols) == (30, 24)
        assert ed.cursor == Position(0, 0)

    def test_config_sets_size(self) -> None:
        """EditorConfig decides the size of a worksheet the editor creates."""
        ed = WorksheetEditor(config=EditorConfig(rows=5, cols=7))
        assert (ed.worksheet.rows, ed.worksheet.cols) == (5, 7)


class TestPlainTyping:
    """Tests for typing, erasing and moving without operations."""

    def test_digits_advance(self, editor) -> None:
        """Each digit is written and the cursor moves right."""
        type_text(editor, "34")
        assert editor.worksheet.lines()[0] == "34"
        assert editor.cursor == Position(0, 2)

    def test_wraps_to_next_row(self) -> None:
        """Typing past the last column continues on the next row."""
        ws = Worksheet(3, 4)
        ed = WorksheetEditor(ws)
        type_text(ed, "1234")
        assert ed.cursor == Position(1, 0)

    def test_stays_on_last_row(self) -> None:
        """At the very end the cursor wraps to column 0 of the last row."""
        ed = WorksheetEditor(Worksheet(2, 2))
        type_text(ed, "1234")
        assert ed.cursor == Position(1, 0)

    def test_backspace_erases_previous(self, editor) -> None:
        """Backspace on an empty cell moves back and erases there."""
        type_text(editor, "34")
        press(editor, "Backspace")
        assert editor.worksheet.lines()[0] == "3"
        assert editor.cursor == Position(0, 1)

        press(editor, "Backspace")
        assert editor.worksheet.lines()[0] == ""
        assert editor.cursor == Position(0, 0)

        press(editor, "Backspace")
        assert editor.cursor == Position(0, 0)

    def test_backspace_erases_in_place(self, editor) -> None:
        """Backspace on a filled cell erases it without moving."""
        type_text(editor, "34")
        editor.set_cursor(0, 0)
        press(editor, "Backspace")
        assert editor.worksheet.row_text(0, 0, 1) == " 4"
        assert editor.cursor == Position(0, 0)

    def test_backspace_wraps_to_previous_row(self, editor) -> None:
        """Backspace at column 0 continues at the end of the row above."""
        editor.worksheet.set_cell(0, 7, "9")
        editor.set_cursor(1, 0)
        press(editor, "Backspace")
        assert editor.worksheet.get_cell(0, 7) == ""
        assert editor.cursor == Position(0, 7)

    def test_arrows_clamp(self, editor) -> None:
        """Arrow keys never leave the worksheet."""
        press(editor, "ArrowUp", "ArrowLeft")
        assert editor.cursor == Position(0, 0)

        press(editor, "ArrowRight", "ArrowDown")
        assert editor.cursor == Position(1, 1)

        editor.set_cursor(99, 99)
        assert editor.cursor == Position(5, 7)
        press(editor, "ArrowDown", "ArrowRight")
        assert editor.cursor == Position(5, 7)

    def test_enter_without_operation(self, editor) -> None:
        """Enter with nothing pending goes to the start of the next row."""
        type_text(editor, "12")
        press(editor, "Enter")
        assert editor.cursor == Position(1, 0)

    def test_enter_with_bad_expression(self, editor) -> None:
        """A lone operator stays on the sheet and Enter moves on."""
        press(editor, "+", "Enter")
        assert editor.worksheet.get_cell(0, 0) == "+"
        assert editor.cursor == Position(1, 0)
        assert editor.manager.active_operation is None

    def test_unknown_keys(self, editor) -> None:
        """Keys the editor does not know are reported as unhandled."""
        assert not editor.handle_key("q")
        assert not editor.handle_key("Tab")
        assert not editor.handle_key("")
        assert editor.worksheet.lines()[0] == ""


class TestOperations:
    """Tests for laying out and solving operations from the keyboard."""

    def test_addition_scenario(self, editor) -> None:
        """Type 12+7, press Enter, fill in 19 right to left."""
        type_text(editor, "12+7")
        press(editor, "Enter")

        ws = editor.worksheet
        assert ws.lines()[:3] == ["12", "+7", ""]
        assert editor.cursor == Position(2, 1)
        assert editor.manager.active_entry is not None

        press(editor, "9")
        assert editor.cursor == Position(2, 0)
        press(editor, "1")
        assert ws.lines()[2] == "19"
        assert editor.manager.active_entry is None
        assert ws.get_mark(2, 0) == CellMark.CORRECT | CellMark.LOCKED

    def test_locked_cells_reject_typing(self, editor) -> None:
        """Digits and operators typed on a locked cell change nothing."""
        type_text(editor, "12+7")
        press(editor, "Enter", "9", "1")

        editor.set_cursor(2, 0)
        press(editor, "5", "+")
        assert editor.worksheet.lines()[2] == "19"
        assert editor.cursor == Position(2, 0)

    def test_backspace_deletes_locked_box(self, editor) -> None:
        """Backspace inside a locked box removes the whole operation."""
        type_text(editor, "12+7")
        press(editor, "Enter", "9", "1")

        editor.set_cursor(1, 1)
        assert editor.renderer.highlight is not None

        press(editor, "Backspace")
        assert editor.worksheet.lines()[:3] == ["", "", ""]
        assert not editor.renderer.is_underlined(1, 0)
        assert editor.renderer.highlight is None
        assert editor.manager.result_ranges == []
        assert editor.cursor == Position(1, 1)

    def test_wrong_answer_backspace(self, editor) -> None:
        """Backspace during entry takes back the last digit."""
        type_text(editor, "12+7")
        press(editor, "Enter", "8", "1")
        assert editor.worksheet.get_mark(2, 0) == CellMark.WRONG

        press(editor, "Backspace", "Backspace")
        assert editor.worksheet.lines()[2] == ""
        assert editor.cursor == Position(2, 1)

        press(editor, "9", "1")
        assert editor.worksheet.get_mark(2, 1) == CellMark.CORRECT | CellMark.LOCKED

    def test_leave_and_resume_entry(self, editor) -> None:
        """Moving off a result cancels entry; moving back resumes it."""
        type_text(editor, "12+7")
        press(editor, "Enter", "ArrowUp")
        assert editor.manager.active_entry is None

        press(editor, "ArrowDown")
        assert editor.manager.active_entry is not None
        assert editor.manager.active_entry.cursor_col == 1

    def test_new_sum_over_abandoned_result(self, editor) -> None:
        """A sum laid out over an unfinished result locks into a box Backspace can delete."""
        type_text(editor, "12+7")
        press(editor, "Enter", "ArrowDown", "ArrowDown")
        assert editor.manager.active_entry is None

        for r in (0, 1):
            for c in range(4):
                editor.worksheet.set_cell(r, c, "")
        editor.set_cursor(0, 0)
        type_text(editor, "34+5")
        press(editor, "Enter", "9", "3")

        ranges = editor.manager.result_ranges
        assert [(r.row, r.correct_digits, r.locked) for r in ranges] == [(2, "39", True)]
        assert editor.manager.get_locked_box_at(2, 0) is not None

        press(editor, "Backspace")
        assert editor.worksheet.lines()[:3] == ["", "", ""]

    def test_multiplication_walkthrough(self) -> None:
        """Both partial products and the final product can be filled in."""
        ws = Worksheet(8, 8)
        ed = WorksheetEditor(ws, AsciiRenderer(ws))
        ed.init()
        type_text(ed, "12x34")
        press(ed, "Enter")
        assert ed.cursor == Position(1, 4)

        press(ed, "8", "4")
        press(ed, "ArrowDown", "ArrowRight")
        assert ed.cursor == Position(2, 4)
        press(ed, "0", "6", "3")
        press(ed, "ArrowDown", "ArrowRight", "ArrowRight")
        press(ed, "8", "0", "4")

        assert ws.lines()[:4] == ["12·34", "   48", "  360", "  408"]
        assert all(r.locked for r in ed.manager.result_ranges)

    def test_division_walkthrough(self, editor) -> None:
        """Digits typed after "=" are routed through the division jumps."""
        type_text(editor, "84:4")
        press(editor, "Enter")
        assert editor.cursor == Position(0, 5)

        press(editor, "2")
        assert editor.cursor == Position(1, 0)
        press(editor, "8")
        assert editor.cursor == Position(1, 1)
        press(editor, "0")
        assert editor.cursor == Position(0, 6)
        press(editor, "1")
        assert editor.cursor == Position(2, 0)

        assert editor.worksheet.lines()[:2] == ["84:4=21", "80"]


class TestWholeWorksheet:
    """Tests for clear, save and open."""

    def test_clear(self, editor) -> None:
        """Clear empties the grid and forgets operations and decorations."""
        type_text(editor, "12+7")
        press(editor, "Enter")
        editor.clear()

        assert editor.worksheet.lines() == [""] * 6
        assert editor.manager.result_ranges == []
        assert editor.manager.active_entry is None
        assert editor.renderer.underlines == set()
        assert editor.cursor == Position(0, 0)

    def test_save_and_open(self, editor) -> None:
        """Saved text restores the characters but not the operations."""
        type_text(editor, "12+7")
        press(editor, "Enter")
        text = editor.save_text()

        editor.clear()
        assert editor.open_text(text)
        assert editor.worksheet.lines()[:2] == ["12", "+7"]
        assert editor.manager.result_ranges == []
        assert editor.cursor == Position(0, 0)

    def test_open_resizes(self, editor) -> None:
        """Opening a saved worksheet of another size resizes the grid."""
        other = WorksheetEditor(Worksheet(3, 5))
        type_text(other, "42")

        assert editor.open_text(other.save_text())
        assert (editor.worksheet.rows, editor.worksheet.cols) == (3, 5)
        assert editor.worksheet.lines() == ["42", "", ""]

    def test_open_invalid(self, editor) -> None:
        """Invalid text is rejected and the worksheet is unchanged."""
        type_text(editor, "5")
        assert not editor.open_text("not a worksheet")
        assert editor.worksheet.lines()[0] == "5"
