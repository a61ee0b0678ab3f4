"""Row selection state machine: click, range click and drag-to-select.

Selection never touches record content. The state is an immutable value;
every gesture returns a new ``SelectionState``::

    state = SelectionState()
    state = click(state, 2)                       # selects row 2, anchor=2
    state = click(state, 5, range_modifier=True)  # selects rows 2..5
    state = drag_start(state, 8)                  # dragging, target=True
    state = drag_enter(state, 9)                  # selects row 9
    state = drag_end(state)
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from loan_recon.exceptions import ContractViolation

# Set of 0-based row indices
SelectionSet = frozenset

PRIMARY_BUTTON = 0


@dataclass(frozen=True)
class DragSession:
    """Active drag: the row it started on and the state it paints."""

    anchor: int
    target_state: bool


@dataclass(frozen=True)
class SelectionState:
    """Selected rows, range anchor and drag session (``None`` when idle)."""

    selected: frozenset[int] = frozenset()
    anchor: int | None = None
    drag: DragSession | None = None

    @property
    def dragging(self) -> bool:
        return self.drag is not None

    def is_selected(self, row: int) -> bool:
        return row in self.selected


def _set_row(selected: frozenset[int], row: int, state: bool) -> frozenset[int]:
    return selected | {row} if state else selected - {row}


def click(state: SelectionState, row: int, range_modifier: bool = False) -> SelectionState:
    """Toggle ``row``; with the range modifier, paint anchor..row with its new state."""
    target = not state.is_selected(row)

    if range_modifier and state.anchor is not None:
        start, end = sorted((state.anchor, row))
        span = frozenset(range(start, end + 1))
        selected = state.selected | span if target else state.selected - span
        return replace(state, selected=selected)

    return replace(state, selected=_set_row(state.selected, row, target), anchor=row)


def drag_start(state: SelectionState, row: int, button: int = PRIMARY_BUTTON) -> SelectionState:
    """Begin a drag session on ``row``; only the primary button starts one."""
    if button != PRIMARY_BUTTON:
        return state
    target = not state.is_selected(row)
    return SelectionState(
        selected=_set_row(state.selected, row, target),
        anchor=row,
        drag=DragSession(anchor=row, target_state=target),
    )


def drag_enter(state: SelectionState, row: int) -> SelectionState:
    """Paint the session's target state on ``row``; no-op when idle."""
    if state.drag is None:
        return state
    target = state.drag.target_state
    if state.is_selected(row) == target:
        return state
    return replace(state, selected=_set_row(state.selected, row, target), anchor=row)


def drag_end(state: SelectionState) -> SelectionState:
    """Terminate the drag session without changing the selection."""
    if state.drag is None:
        return state
    return replace(state, drag=None)


def toggle_all(state: SelectionState, row_count: int, selected: bool | None = None) -> SelectionState:
    """Select or deselect every row (header checkbox).

    With ``selected=None`` the rows are all selected unless they already are.
    """
    if selected is None:
        selected = len(state.selected) < row_count
    rows = frozenset(range(row_count)) if selected else frozenset()
    return replace(state, selected=rows)


def clear(state: SelectionState) -> SelectionState:
    return replace(state, selected=frozenset())


class SelectionController:
    """Hold the selection of a grid with a known row count.

    Parameters
    ----------
    row_count : int
        Number of rows in the grid; gestures outside ``[0, row_count)``
        raise ``ContractViolation``.
    """

    def __init__(self, row_count: int = 0) -> None:
        self.row_count = row_count
        self.state = SelectionState()

    @property
    def selection(self) -> SelectionSet:
        return self.state.selected

    def resize(self, row_count: int) -> None:
        """Adopt a new grid size, dropping the current selection."""
        self.row_count = row_count
        self.state = SelectionState()

    def click(self, row: int, range_modifier: bool = False) -> SelectionSet:
        self._check(row)
        self.state = click(self.state, row, range_modifier)
        return self.selection

    def drag_start(self, row: int, button: int = PRIMARY_BUTTON) -> SelectionSet:
        self._check(row)
        self.state = drag_start(self.state, row, button)
        return self.selection

    def drag_enter(self, row: int) -> SelectionSet:
        self._check(row)
        self.state = drag_enter(self.state, row)
        return self.selection

    def drag_end(self) -> SelectionSet:
        self.state = drag_end(self.state)
        return self.selection

    def toggle_all(self, selected: bool | None = None) -> SelectionSet:
        self.state = toggle_all(self.state, self.row_count, selected)
        return self.selection

    def clear(self) -> SelectionSet:
        self.state = clear(self.state)
        return self.selection

    def _check(self, row: int) -> None:
        if isinstance(row, bool) or not isinstance(row, int) or not 0 <= row < self.row_count:
            raise ContractViolation(f"Row {row!r} out of range [0, {self.row_count})")
