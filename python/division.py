"""
Long division: the "A:B=" layout and the cursor jumps that guide the work.

Division declares no result range. Instead, each division remembers a
DivisionJumpState and every digit typed inside its work area is routed
through the quotient -> remainder -> brought-down cycle:

    84:4=2_        quotient digit typed after "=" ...
    8_             ... jumps down to the next work row, under the dividend
    04             remainder digit, then one cell right for the brought-down digit,
                   then back up to the next quotient column
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ascii_render import WorksheetRenderer
from operand_parser import DIV_SYMBOLS, parse_around
from worksheet import Worksheet
from worksheet_types import (
    ActiveOperation,
    DivisionJumpState,
    DivisionPhase,
    LayoutResult,
    Position,
)

if TYPE_CHECKING:
    from operation_manager import OperationManager

__all__ = ["DivisionOperation", "find_division_state", "next_jump"]

logger = logging.getLogger(__name__)


def find_division_state(
    states: dict[Position, DivisionJumpState], row: int, col: int
) -> DivisionJumpState | None:
    """
    Find the division whose work area claims a digit typed at (row, col).

    A state claims the position when it lies inside its work area and fits the
    current phase: quotient digits go on the dividend row at or right of the
    first quotient column, remainder and brought-down digits anywhere below the
    dividend row. States are tried in creation order.
    """
    for state in states.values():
        if not state.in_work_area(row, col):
            continue

        if (
            state.phase == DivisionPhase.QUOTIENT
            and row == state.dividend_row
            and col >= state.quotient_start_col
        ):
            return state

        if (
            state.phase in (DivisionPhase.REMAINDER, DivisionPhase.BROUGHT_DOWN)
            and row > state.dividend_row
        ):
            return state

    return None


def next_jump(state: DivisionJumpState, row: int, col: int) -> Position:
    """Advance the state past a digit typed at (row, col) and return where the cursor goes next."""
    match state.phase:
        case DivisionPhase.QUOTIENT:
            state.current_step += 1
            state.phase = DivisionPhase.REMAINDER
            target = Position(state.dividend_row + state.current_step, state.dividend_start_col)
        case DivisionPhase.REMAINDER:
            state.phase = DivisionPhase.BROUGHT_DOWN
            target = Position(row, col + 1)
        case DivisionPhase.BROUGHT_DOWN:
            state.phase = DivisionPhase.QUOTIENT
            target = Position(state.dividend_row, state.quotient_start_col + state.current_step)
        case _:
            raise ValueError(f"Unknown division phase: {state.phase}")

    logger.debug(
        "division jump from (%d, %d) to (%d, %d), now %s step %d",
        row, col, target.row, target.col, state.phase.value, state.current_step,
    )
    return target


class DivisionOperation:
    """Formats "A:B" (or "A/B") into "A:B=" and starts the jump cycle."""

    name = "division"
    symbols = DIV_SYMBOLS

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
            logger.debug("division at (%d, %d): no operands", typed_row, active.anchor_col)
            return None
        a, b = parsed.a, parsed.b

        if b.value == 0:
            logger.debug("division %s:%s: zero divisor", a.digits, b.digits)
            return None

        equals_col = b.end + 1
        if not worksheet.get_cell(typed_row, equals_col):
            worksheet.set_cell(typed_row, equals_col, "=")
            renderer.update_cell(typed_row, equals_col)

        # Square working envelope as wide (and tall) as "A:B="
        work_size = a.width + 1 + b.width + 1
        state = DivisionJumpState(
            dividend_row=typed_row,
            dividend_start_col=a.start,
            quotient_start_col=equals_col + 1,
            work_start_row=typed_row,
            work_end_row=typed_row + work_size,
            work_start_col=a.start,
            work_end_col=equals_col + work_size,
        )
        if manager is not None:
            manager.register_division(Position(typed_row, active.anchor_col), state)

        logger.info("division %s:%s started at row %d", a.digits, b.digits, typed_row)
        return LayoutResult(cursor=Position(typed_row, equals_col + 1))
