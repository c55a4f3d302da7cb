"""Tests for the division layout and its cursor jump cycle."""

from ascii_render import AsciiRenderer
from division import find_division_state, next_jump
from operation_manager import OperationManager
from worksheet_io import parse_worksheet
from worksheet_types import DivisionJumpState, DivisionPhase, Position


def make_state(**overrides) -> DivisionJumpState:
    """A state for "84:4=" typed at row 0, column 0."""
    fields = dict(
        dividend_row=0,
        dividend_start_col=0,
        quotient_start_col=5,
        work_start_row=0,
        work_end_row=5,
        work_start_col=0,
        work_end_col=9,
    )
    fields.update(overrides)
    return DivisionJumpState(**fields)


class TestNextJump:
    """Tests for the quotient -> remainder -> brought-down cycle."""

    def test_full_cycle(self) -> None:
        """Two rounds of the cycle visit the expected cells."""
        state = make_state()

        assert next_jump(state, 0, 5) == Position(1, 0)
        assert (state.phase, state.current_step) == (DivisionPhase.REMAINDER, 1)

        assert next_jump(state, 1, 0) == Position(1, 1)
        assert state.phase == DivisionPhase.BROUGHT_DOWN

        assert next_jump(state, 1, 1) == Position(0, 6)
        assert state.phase == DivisionPhase.QUOTIENT

        assert next_jump(state, 0, 6) == Position(2, 0)
        assert state.current_step == 2

    def test_brought_down_follows_typed_column(self) -> None:
        """The brought-down digit goes right of wherever the remainder was typed."""
        state = make_state(phase=DivisionPhase.REMAINDER, current_step=1)
        assert next_jump(state, 1, 3) == Position(1, 4)


class TestFindDivisionState:
    """Tests for which division claims a typed digit."""

    def test_quotient_phase_claims_dividend_row_only(self) -> None:
        """In the quotient phase only cells right of "=" on the dividend row are claimed."""
        state = make_state()
        states = {Position(0, 2): state}

        assert find_division_state(states, 0, 5) is state
        assert find_division_state(states, 0, 9) is state
        assert find_division_state(states, 0, 3) is None
        assert find_division_state(states, 1, 0) is None

    def test_remainder_phases_claim_rows_below(self) -> None:
        """Remainder and brought-down digits are claimed anywhere below the dividend row."""
        states = {Position(0, 2): make_state(phase=DivisionPhase.REMAINDER)}
        assert find_division_state(states, 3, 4) is not None
        assert find_division_state(states, 0, 6) is None

        states = {Position(0, 2): make_state(phase=DivisionPhase.BROUGHT_DOWN)}
        assert find_division_state(states, 1, 1) is not None

    def test_outside_work_area(self) -> None:
        """Cells outside the square work area are never claimed."""
        states = {Position(0, 2): make_state(phase=DivisionPhase.REMAINDER)}
        assert find_division_state(states, 6, 0) is None
        assert find_division_state(states, 2, 10) is None

    def test_first_matching_state_wins(self) -> None:
        """Overlapping work areas are tried in creation order."""
        first = make_state(phase=DivisionPhase.REMAINDER)
        second = make_state(phase=DivisionPhase.REMAINDER)
        states = {Position(0, 2): first, Position(0, 7): second}
        assert find_division_state(states, 2, 2) is first


class TestDivisionOperation:
    """Tests for formatting A:B and routing digits through the manager."""

    def test_format_84_by_4(self) -> None:
        """An equals sign is appended and the cursor goes to the first quotient cell."""
        ws = parse_worksheet("84:4", rows=8, cols=12)
        manager = OperationManager(ws, AsciiRenderer(ws))
        manager.begin_operation(":", 0, 2)
        layout = manager.format_active_operation()

        assert layout is not None
        assert ws.lines()[0] == "84:4="
        assert layout.cursor == Position(0, 5)
        assert layout.result_range is None
        assert manager.result_ranges == []
        assert manager.active_entry is None

        state = manager.division_states[Position(0, 2)]
        assert (state.work_start_row, state.work_end_row) == (0, 5)
        assert (state.work_start_col, state.work_end_col) == (0, 9)
        assert state.quotient_start_col == 5

    def test_slash_shares_strategy(self) -> None:
        """Both division glyphs map to the same strategy instance."""
        manager = OperationManager(parse_worksheet("1/1"))
        assert manager.strategies["/"] is manager.strategies[":"]

    def test_digits_follow_jumps(self) -> None:
        """Typing the working for 84:4 walks through the jump cycle."""
        ws = parse_worksheet("84/4", rows=8, cols=12)
        manager = OperationManager(ws, AsciiRenderer(ws))
        manager.begin_operation("/", 0, 2)
        manager.format_active_operation()

        assert manager.handle_division_digit("2", 0, 5) == Position(1, 0)
        assert manager.handle_division_digit("8", 1, 0) == Position(1, 1)
        assert manager.handle_division_digit("0", 1, 1) == Position(0, 6)
        assert manager.handle_division_digit("1", 0, 6) == Position(2, 0)

        assert ws.lines()[:3] == ["84/4=21", "80", ""]

    def test_unclaimed_digit_writes_nothing(self) -> None:
        """A digit outside every work area is left to the caller."""
        ws = parse_worksheet("84:4", rows=8, cols=12)
        manager = OperationManager(ws, AsciiRenderer(ws))
        manager.begin_operation(":", 0, 2)
        manager.format_active_operation()

        assert manager.handle_division_digit("7", 7, 11) is None
        assert ws.get_cell(7, 11) == ""

    def test_zero_divisor_aborts(self) -> None:
        """Dividing by zero lays out nothing."""
        ws = parse_worksheet("8:0", rows=4, cols=8)
        manager = OperationManager(ws)
        manager.begin_operation(":", 0, 1)

        assert manager.format_active_operation() is None
        assert ws.lines()[0] == "8:0"
        assert manager.division_states == {}

    def test_occupied_equals_cell_kept(self) -> None:
        """A character already right of the divisor is not overwritten."""
        ws = parse_worksheet("8:2x", rows=4, cols=10)
        manager = OperationManager(ws)
        manager.begin_operation(":", 0, 1)
        layout = manager.format_active_operation()

        assert layout is not None
        assert ws.lines()[0] == "8:2x"
        assert layout.cursor == Position(0, 4)
