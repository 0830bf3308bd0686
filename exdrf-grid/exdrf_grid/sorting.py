"""Single column, tri-state sorting."""

import logging
import numbers
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, List, Optional, Sequence, Tuple

from attrs import frozen

from exdrf_grid.column import ColumnModel, GridColumn
from exdrf_grid.constants import SortDirection
from exdrf_grid.row import GridRow

logger = logging.getLogger(__name__)
VERBOSE = 10

# Rank of each kind of value; values of different kinds never compare
# directly, the rank decides.
RANK_NONE = 0
RANK_NUMBER = 1
RANK_DATE = 2
RANK_TEXT = 3
RANK_OTHER = 4

_CYCLE = {
    SortDirection.NONE: SortDirection.ASCENDING,
    SortDirection.ASCENDING: SortDirection.DESCENDING,
    SortDirection.DESCENDING: SortDirection.NONE,
}


@frozen
class SortState:
    """The active sort.

    Attributes:
        column_id: The column that is sorted or None.
        direction: The direction; `none` whenever column_id is None.
    """

    column_id: Optional[str] = None
    direction: SortDirection = SortDirection.NONE

    @property
    def active(self) -> bool:
        return (
            self.column_id is not None
            and self.direction != SortDirection.NONE
        )

    def direction_of(self, column_id: str) -> SortDirection:
        """The sort indicator of a column."""
        if self.column_id == column_id:
            return self.direction
        return SortDirection.NONE


def next_sort_state(state: SortState, column: GridColumn) -> SortState:
    """Compute the sort state after a click on the header of a column.

    The active column cycles none -> ascending -> descending -> none. A
    click on another column makes it the active one, sorted ascending.

    Args:
        state: The current state.
        column: The column whose header was clicked.

    Returns:
        The new state; the same state for columns that are not sortable.
    """
    if not column.sortable:
        logger.log(VERBOSE, "Column %s is not sortable", column.id)
        return state

    if state.column_id != column.id:
        return SortState(column_id=column.id, direction=SortDirection.ASCENDING)

    direction = _CYCLE[state.direction]
    if direction == SortDirection.NONE:
        return SortState()
    return SortState(column_id=column.id, direction=direction)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _is_nan(value: Any) -> bool:
    if isinstance(value, Decimal):
        return value.is_nan()
    return value != value


def sort_key(value: Any) -> Tuple[int, Any, Any]:
    """The default total-order key of a cell value.

    None sorts lowest, then numbers, then dates, then strings, then
    anything else by its text.

    Args:
        value: The value of the cell.

    Returns:
        A tuple that can be compared with the key of any other value.
    """
    if value is None:
        return (RANK_NONE, 0, 0)
    if isinstance(value, (numbers.Real, Decimal)):
        if _is_nan(value):
            # NaN has no order; keep it right after None.
            return (RANK_NUMBER, float("-inf"), 0)
        return (RANK_NUMBER, value, 0)
    if isinstance(value, datetime):
        return (RANK_DATE, _naive_utc(value), 0)
    if isinstance(value, date):
        return (RANK_DATE, datetime.combine(value, time.min), 0)
    if isinstance(value, str):
        return (RANK_TEXT, value.casefold(), value)
    return (RANK_OTHER, str(value), 0)


@frozen
class SortEngine:
    """Orders rows by the active sort column."""

    def apply(
        self,
        rows: Sequence[GridRow],
        columns: ColumnModel,
        state: SortState,
    ) -> List[GridRow]:
        """Sort the rows.

        The sort is stable in both directions: rows with equal keys keep
        their relative order.

        Args:
            rows: The rows to sort.
            columns: The column model, used to read the cell values.
            state: The active sort.

        Returns:
            A new list; the input order when nothing is sorted.
        """
        if not state.active:
            return list(rows)

        column = columns.get(state.column_id)  # type: ignore[arg-type]
        if column is None:
            logger.warning("Sort by unknown column %s", state.column_id)
            return list(rows)

        keyed = [(sort_key(column.value_of(row.data)), row) for row in rows]
        if state.direction == SortDirection.DESCENDING:
            # reverse=True keeps equal keys in input order.
            keyed.sort(key=lambda item: item[0], reverse=True)
        else:
            keyed.sort(key=lambda item: item[0])

        logger.log(
            VERBOSE,
            "Sorted %d rows by %s %s",
            len(keyed),
            column.id,
            state.direction,
        )
        return [row for _, row in keyed]
