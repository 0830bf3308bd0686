"""Per-column row filtering and debounced filter input.

A filter value is either a text, matched as a case-insensitive substring of
the cell value, or a set of accepted values, matched by membership. Filters
of different columns are AND-ed together; the accepted values of one column
are OR-ed.
"""

import itertools
import logging
from collections.abc import Iterable
from contextlib import nullcontext
from functools import partial
from typing import (
    Any,
    Callable,
    ContextManager,
    Dict,
    FrozenSet,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from attrs import define, field, frozen
from pyrsistent import pmap
from pyrsistent.typing import PMap

from exdrf_grid.column import ColumnModel, GridColumn
from exdrf_grid.constants import DEFAULT_FILTER_DEBOUNCE
from exdrf_grid.row import GridRow
from exdrf_grid.timers import Scheduler

logger = logging.getLogger(__name__)
VERBOSE = 10

FilterValue = Union[str, FrozenSet[Any]]


def normalize_filter_value(value: Any) -> Optional[FilterValue]:
    """Convert a user supplied filter value to its canonical form.

    Args:
        value: A text, an iterable of accepted values or a single value.

    Returns:
        The text, a frozenset of accepted values or None when the value
        does not filter anything (None, empty text, empty collection).
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value if value else None
    if isinstance(value, Iterable):
        accepted = frozenset(value)
        return accepted if accepted else None
    return frozenset([value])


@frozen
class FilterState:
    """The active filter of each column.

    Attributes:
        values: Map of column id to its filter value. Columns that are not
            present are not filtered.
    """

    values: PMap[str, FilterValue] = field(factory=pmap)

    def __bool__(self) -> bool:
        return len(self.values) > 0

    def __len__(self) -> int:
        return len(self.values)

    def get(self, column_id: str) -> Optional[FilterValue]:
        """Get the filter of a column or None."""
        return self.values.get(column_id)

    def set(self, column_id: str, value: Any) -> "FilterState":
        """Create a new state with the filter of a column replaced.

        Args:
            column_id: The column to change.
            value: The new filter value; empty values remove the filter.

        Returns:
            The new state.
        """
        normalized = normalize_filter_value(value)
        if normalized is None:
            if column_id not in self.values:
                return self
            return FilterState(values=self.values.discard(column_id))
        return FilterState(values=self.values.set(column_id, normalized))

    def clear(self) -> "FilterState":
        """Create a state without any filter."""
        return FilterState()

    @classmethod
    def from_mapping(cls, mapping: Dict[str, Any]) -> "FilterState":
        """Build a state from a plain mapping of column id to value."""
        state = cls()
        for column_id, value in mapping.items():
            state = state.set(column_id, value)
        return state


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


@define
class FilterEngine:
    """Applies the filter state to a sequence of rows."""

    def matches(self, value: Any, flt: FilterValue) -> bool:
        """Check a single cell value against a filter value.

        Missing values behave as empty text.

        Args:
            value: The value of the cell.
            flt: The normalized filter value.

        Returns:
            True if the value passes the filter.
        """
        if isinstance(flt, str):
            return flt.casefold() in _as_text(value).casefold()

        if value is None:
            value = ""
        try:
            if value in flt:
                return True
        except TypeError:
            # Unhashable values can only be compared one by one.
            if any(value == item for item in flt):
                return True
        return _as_text(value) in flt

    def active_filters(
        self, columns: ColumnModel, state: FilterState
    ) -> List[Tuple[GridColumn, FilterValue]]:
        """The filters that apply to known, filterable columns."""
        result = []
        for column_id, value in state.values.items():
            column = columns.get(column_id)
            if column is None:
                logger.warning("Filter given for unknown column %s", column_id)
                continue
            if not column.filterable:
                logger.log(VERBOSE, "Column %s is not filterable", column_id)
                continue
            result.append((column, value))
        return result

    def apply(
        self,
        rows: Sequence[GridRow],
        columns: ColumnModel,
        state: FilterState,
    ) -> List[GridRow]:
        """Keep the rows that pass every active filter.

        Args:
            rows: The rows to filter.
            columns: The column model, used to read the cell values.
            state: The filter of each column.

        Returns:
            The rows that passed, in their original order.
        """
        active = self.active_filters(columns, state)
        if not active:
            return list(rows)

        result = [
            row
            for row in rows
            if all(
                self.matches(column.value_of(row.data), flt)
                for column, flt in active
            )
        ]
        logger.log(
            VERBOSE,
            "Filtered %d rows down to %d using %d filters",
            len(rows),
            len(result),
            len(active),
        )
        return result

    def available_values(
        self, rows: Sequence[GridRow], column: GridColumn
    ) -> List[Any]:
        """The distinct values of a column, used to populate a selector.

        This should be computed on the unfiltered rows so that the choices
        do not shrink while the user filters.

        Args:
            rows: The rows to inspect.
            column: The column to project the rows through.

        Returns:
            The distinct values, in first-seen order, without None.
        """
        result: List[Any] = []
        seen = set()
        for row in rows:
            value = column.value_of(row.data)
            if value is None:
                continue
            try:
                if value in seen:
                    continue
                seen.add(value)
            except TypeError:
                if value in result:
                    continue
            result.append(value)
        return result


@define
class FilterDebouncer:
    """Defers filter commits until the user stops typing.

    Each keystroke is recorded right away and the commit of the text is
    scheduled `delay` seconds later. A new keystroke for the same column
    replaces the scheduled commit, so only the last text of a burst is
    committed.

    Attributes:
        scheduler: Runs the delayed commits.
        on_commit: Receives the column id and the final text.
        delay: The quiet period, in seconds.
        guard: A context manager entered around keystrokes and commits;
            the host can pass its lock here.
    """

    scheduler: Scheduler
    on_commit: Callable[[str, str], None]
    delay: float = field(default=DEFAULT_FILTER_DEBOUNCE)
    guard: ContextManager = field(factory=nullcontext)
    _pending: Dict[str, str] = field(factory=dict, init=False)
    _tokens: Dict[str, int] = field(factory=dict, init=False)
    _counter: Iterator[int] = field(factory=itertools.count, init=False)

    @staticmethod
    def timer_key(column_id: str) -> Tuple[str, str]:
        return ("filter", column_id)

    @property
    def pending(self) -> Dict[str, str]:
        """Texts typed but not committed yet, by column id."""
        return dict(self._pending)

    def pending_text(self, column_id: str) -> Optional[str]:
        """The uncommitted text of a column or None."""
        return self._pending.get(column_id)

    def keystroke(self, column_id: str, text: str) -> None:
        """Record the current text of a filter input.

        Args:
            column_id: The column whose input changed.
            text: The complete text of the input.
        """
        with self.guard:
            token = next(self._counter)
            self._pending[column_id] = text
            self._tokens[column_id] = token
            self.scheduler.schedule(
                self.timer_key(column_id),
                self.delay,
                partial(self._commit, column_id, token),
            )

    def _commit(self, column_id: str, token: Optional[int] = None) -> None:
        with self.guard:
            # A timer that fired before a newer keystroke is stale.
            if token is not None and self._tokens.get(column_id) != token:
                logger.log(VERBOSE, "Stale filter commit for %s", column_id)
                return
            self._tokens.pop(column_id, None)
            text = self._pending.pop(column_id, None)
            if text is None:
                return
            logger.log(VERBOSE, "Committing filter %s=%r", column_id, text)
            self.on_commit(column_id, text)

    def flush(self) -> None:
        """Commit every pending text now."""
        with self.guard:
            for column_id in list(self._pending):
                self.scheduler.cancel(self.timer_key(column_id))
                self._commit(column_id)

    def cancel(self, column_id: str) -> bool:
        """Drop the pending text of a column.

        Returns:
            True if there was a pending text.
        """
        with self.guard:
            self.scheduler.cancel(self.timer_key(column_id))
            self._tokens.pop(column_id, None)
            return self._pending.pop(column_id, None) is not None

    def cancel_all(self) -> None:
        """Drop every pending text, as when the grid goes away."""
        with self.guard:
            for column_id in self._pending:
                self.scheduler.cancel(self.timer_key(column_id))
            self._pending.clear()
            self._tokens.clear()
