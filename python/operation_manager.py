"""
Operation registry and result-entry state machine.

The OperationManager is the single place the editor asks about operations:
which operation is pending, which result ranges exist (locked or not), which
one is being filled in, and which divisions are in progress.
"""

from __future__ import annotations

import logging
from typing import Protocol

from ascii_render import WorksheetRenderer
from division import DivisionOperation, find_division_state, next_jump
from operations import AdditionOperation, MultiplicationOperation, SubtractionOperation
from worksheet import Worksheet
from worksheet_types import (
    ActiveEntry,
    ActiveOperation,
    BoxRange,
    CellMark,
    DivisionJumpState,
    LayoutResult,
    Position,
    ResultKind,
    ResultRange,
)

__all__ = ["OperationManager", "OperationStrategy", "build_expected", "default_strategies"]

logger = logging.getLogger(__name__)


class OperationStrategy(Protocol):
    """Anything that can lay out an operation typed at an anchor."""

    symbols: frozenset[str]

    def format(
        self,
        worksheet: Worksheet,
        renderer: WorksheetRenderer,
        active: ActiveOperation,
        manager: OperationManager | None = None,
    ) -> LayoutResult | None: ...


def default_strategies() -> dict[str, OperationStrategy]:
    """Map every accepted operator symbol to its strategy. Aliases share one instance."""
    strategies: dict[str, OperationStrategy] = {}
    for strategy in (
        AdditionOperation(),
        SubtractionOperation(),
        MultiplicationOperation(),
        DivisionOperation(),
    ):
        for symbol in strategy.symbols:
            strategies[symbol] = strategy
    return strategies


def build_expected(correct_digits: str, check_start: int, check_end: int) -> str:
    """Right-align the correct digits to check_end, blank-padded to the zone width."""
    width = check_end - check_start + 1
    return correct_digits.rjust(width, " ")


class OperationManager:
    """
    Coordinates operations typed on a worksheet.

    States of result entry:
    - Idle: active_entry is None
    - Entering: active_entry holds the range being filled and its entry column

    Digits fill right-to-left. Once the check zone is complete it is compared
    against the correct digits; a match locks the zone, a mismatch marks it
    wrong (partial products are only cleared).
    """

    def __init__(self, worksheet: Worksheet, renderer: WorksheetRenderer | None = None) -> None:
        self.worksheet = worksheet
        self.renderer = renderer if renderer is not None else WorksheetRenderer()
        self.strategies = default_strategies()
        self.active_operation: ActiveOperation | None = None
        self.active_entry: ActiveEntry | None = None
        self.result_ranges: list[ResultRange] = []
        self.division_states: dict[Position, DivisionJumpState] = {}

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def begin_operation(self, symbol: str, row: int, col: int) -> None:
        self.active_entry = None
        self.active_operation = ActiveOperation(symbol, row, col)

    def format_active_operation(self) -> LayoutResult | None:
        """
        Format the pending operation and start result entry on its first range.

        The pending operation is consumed whether or not formatting succeeds.

        Returns:
            The LayoutResult, or None if there was nothing to format or the
            expression could not be laid out
        """
        active = self.active_operation
        self.active_operation = None
        if active is None:
            return None

        strategy = self.strategies.get(active.symbol)
        if strategy is None:
            logger.debug("no strategy for %r", active.symbol)
            return None

        result = strategy.format(self.worksheet, self.renderer, active, self)
        if result is None:
            return None

        if result.result_range is not None:
            new_ranges = [result.result_range, *result.extra_ranges]
            self._drop_unlocked_overlapping(new_ranges)
            first = self.add_result_range(result.result_range)
            for extra in result.extra_ranges:
                self.add_result_range(extra)
            if not first.locked:
                self.begin_result_entry(first)
        return result

    def register_division(self, key: Position, state: DivisionJumpState) -> None:
        self.division_states[key] = state

    def handle_division_digit(self, digit: str, row: int, col: int) -> Position | None:
        """
        Route a digit through the division work area claiming (row, col), if any.

        Returns:
            The jump target after writing the digit at (row, col), or None if no
            division claims the position (nothing is written)
        """
        state = find_division_state(self.division_states, row, col)
        if state is None or self.worksheet.is_locked(row, col):
            return None

        self.worksheet.set_cell(row, col, digit)
        self.renderer.update_cell(row, col)
        return next_jump(state, row, col)

    # -------------------------------------------------------------------------
    # Result ranges
    # -------------------------------------------------------------------------

    def add_result_range(self, result_range: ResultRange) -> ResultRange:
        """
        Register a range, replacing an unlocked range with the same span.

        Returns:
            The registered instance: the existing range if a locked one already
            covers the span, otherwise result_range
        """
        for i, existing in enumerate(self.result_ranges):
            if existing.same_span(result_range):
                if existing.locked:
                    return existing
                self.result_ranges[i] = result_range
                return result_range
        self.result_ranges.append(result_range)
        return result_range

    def locked_boxes(self) -> list[BoxRange]:
        boxes: list[BoxRange] = []
        for r in self.result_ranges:
            if r.locked and r.box is not None and r.box not in boxes:
                boxes.append(r.box)
        return boxes

    def begin_result_entry(self, result_range: ResultRange, col: int | None = None) -> None:
        start = col if col is not None else result_range.entry_col
        if start is None:
            start = result_range.end_col
        self.active_entry = ActiveEntry(result_range, start)
        logger.debug(
            "entering result on row %d cols %d-%d",
            result_range.row, result_range.start_col, result_range.end_col,
        )

    def try_resume_at(self, row: int, col: int) -> bool:
        """Resume entry in an unlocked range under the cursor. True if an entry is active afterwards."""
        if self.active_entry is not None:
            return True
        for r in self.result_ranges:
            if not r.locked and r.contains(row, col):
                self.begin_result_entry(r, col)
                return True
        return False

    def update_cursor_context(self, row: int, col: int) -> None:
        entry = self.active_entry
        if entry is not None:
            if entry.range.contains(row, col):
                entry.cursor_col = col
            else:
                logger.debug("cursor left result row %d, entry cancelled", entry.range.row)
                self.active_entry = None

        box = self.get_locked_box_at(row, col)
        if box is None:
            self.renderer.clear_highlight()
        else:
            self.renderer.highlight_box(
                box.top_row, box.result_row, box.start_col, box.end_col, box=box
            )

    def handle_result_digit(self, digit: str) -> bool:
        """
        Type a digit into the active result range.

        Returns:
            True if the digit was consumed, False if there is no active entry or
            the entry column lies outside the range
        """
        entry = self.active_entry
        if entry is None:
            return False
        rng = entry.range
        col = entry.cursor_col
        if col < rng.start_col or col > rng.end_col or self.worksheet.is_locked(rng.row, col):
            return False

        self._clear_marks(rng, rng.start_col, rng.end_col)
        self.worksheet.set_cell(rng.row, col, digit)
        self.renderer.update_cell(rng.row, col)
        entry.cursor_col = max(rng.start_col, col - 1)

        if self._zone_filled(rng):
            typed = self.worksheet.row_text(rng.row, rng.check_start, rng.check_end)
            expected = build_expected(rng.correct_digits, rng.check_start, rng.check_end)
            if typed == expected:
                self._mark_zone(rng, CellMark.CORRECT | CellMark.LOCKED)
                rng.locked = True
                self.active_entry = None
                logger.info("result %s locked on row %d", rng.correct_digits, rng.row)
            elif rng.kind == ResultKind.PARTIAL:
                self._clear_marks(rng, rng.check_start, rng.check_end)
            else:
                self._mark_zone(rng, CellMark.WRONG)
                logger.debug("result on row %d wrong: %r", rng.row, typed)
        return True

    def handle_result_backspace(self) -> bool:
        entry = self.active_entry
        if entry is None:
            return False
        rng = entry.range
        col = entry.cursor_col
        if not self.worksheet.is_locked(rng.row, col):
            self.worksheet.set_cell(rng.row, col, "")
            self.renderer.update_cell(rng.row, col)
        self._clear_marks(rng, rng.check_start, rng.check_end)
        entry.cursor_col = min(rng.end_col, col + 1)
        return True

    # -------------------------------------------------------------------------
    # Locked boxes
    # -------------------------------------------------------------------------

    def is_locked_cell(self, row: int, col: int) -> bool:
        return self.worksheet.is_locked(row, col)

    def get_locked_box_at(self, row: int, col: int) -> BoxRange | None:
        for r in self.result_ranges:
            if r.locked and r.box is not None and r.box.contains(row, col):
                return r.box
        return None

    def remove_box_range(self, box: BoxRange) -> None:
        """Clear a whole formatted operation and forget its result ranges."""
        for row in box.rows:
            for col in range(box.start_col, box.end_col + 1):
                if not self.worksheet.in_bounds(row, col):
                    continue
                self.worksheet.set_cell(row, col, "")
                self.worksheet.set_mark(row, col, CellMark.NONE)
                self.renderer.update_cell(row, col)
            self.renderer.remove_underline(row, box.start_col, box.end_col)
        self.renderer.clear_highlight()

        self.result_ranges = [r for r in self.result_ranges if r.box != box]
        if self.active_entry is not None and self.active_entry.range.box == box:
            self.active_entry = None
        logger.info(
            "removed box rows %d-%d cols %d-%d",
            box.top_row, box.result_row, box.start_col, box.end_col,
        )

    def reset(self) -> None:
        self.active_operation = None
        self.active_entry = None
        self.result_ranges = []
        self.division_states = {}

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _drop_unlocked_overlapping(self, new_ranges: list[ResultRange]) -> None:
        # Abandoned entries a new layout was placed over
        def overlaps(old: ResultRange) -> bool:
            return any(
                old.row == new.row
                and not (old.end_col < new.start_col or old.start_col > new.end_col)
                for new in new_ranges
            )

        kept = [r for r in self.result_ranges if r.locked or not overlaps(r)]
        if len(kept) == len(self.result_ranges):
            return
        logger.debug("dropped %d abandoned result range(s)", len(self.result_ranges) - len(kept))
        self.result_ranges = kept
        entry = self.active_entry
        if entry is not None and not entry.range.locked and overlaps(entry.range):
            self.active_entry = None

    def _zone_filled(self, rng: ResultRange) -> bool:
        return all(
            self.worksheet.get_cell(rng.row, c) for c in range(rng.check_start, rng.check_end + 1)
        )

    def _mark_zone(self, rng: ResultRange, mark: CellMark) -> None:
        for c in range(rng.check_start, rng.check_end + 1):
            self.worksheet.set_mark(rng.row, c, mark)
            self.renderer.update_cell(rng.row, c)

    def _clear_marks(self, rng: ResultRange, start_col: int, end_col: int) -> None:
        for c in range(start_col, end_col + 1):
            mark = self.worksheet.get_mark(rng.row, c)
            if mark & (CellMark.CORRECT | CellMark.WRONG) and CellMark.LOCKED not in mark:
                self.worksheet.set_mark(rng.row, c, CellMark.NONE)
                self.renderer.update_cell(rng.row, c)
