"""A grid that owns its interaction state.

`DataGrid` is the host side of the engine: it receives the events of the
presentation layer (clicks, drags, keystrokes, scrolling), turns them into
state changes, fires the notifications and hands out the render model of
the current state.
"""

import logging
import threading
from typing import (
    Any,
    Dict,
    Hashable,
    Iterable,
    List,
    Optional,
    Sequence,
    Union,
)

from attrs import define, field

from exdrf_grid.column import ColumnModel, GridColumn
from exdrf_grid.composer import ViewComposer
from exdrf_grid.filtering import FilterDebouncer
from exdrf_grid.options import GridOptions, make_options
from exdrf_grid.pagination import PaginationState
from exdrf_grid.render_model import RenderModel
from exdrf_grid.resize import ResizeController
from exdrf_grid.row import GridRow
from exdrf_grid.selection import SelectionController
from exdrf_grid.sorting import SortState, next_sort_state
from exdrf_grid.state import GridState
from exdrf_grid.timers import Scheduler, ThreadingScheduler
from exdrf_grid.virtualization import VirtualizationState

logger = logging.getLogger(__name__)
VERBOSE = 10


@define
class DataGrid:
    """A table view with its state.

    All state changes go through this object and are serialised by a
    re-entrant lock, including the debounced filter commits that arrive on
    the scheduler's thread.

    Attributes:
        columns: The column model.
        options: The options of the grid.
        scheduler: Runs the debounced filter commits; a threading based
            scheduler is used when not provided.
        composer: Computes the render model.
        resize: The resize interaction.
        selection: The selection interaction.
        debouncer: The debounced filter input.

    Private Attributes:
        _rows: The rows of the grid.
        _state: The interaction state.
        _model: The render model of the current state, if computed.
        _options_cache: Filter choices by column id for the current rows.
        _lock: Serialises state changes.
        _closed: Set by close(); events are ignored afterwards.
    """

    columns: ColumnModel
    options: GridOptions = field(factory=GridOptions)
    scheduler: Optional[Scheduler] = field(default=None)

    composer: ViewComposer = field(init=False)
    resize: ResizeController = field(init=False)
    selection: SelectionController = field(init=False)
    debouncer: FilterDebouncer = field(init=False)

    _rows: List[GridRow] = field(factory=list, init=False)
    _state: GridState = field(init=False)
    _model: Optional[RenderModel] = field(default=None, init=False)
    _options_cache: Dict[str, Any] = field(factory=dict, init=False)
    _lock: threading.RLock = field(factory=threading.RLock, init=False)
    _closed: bool = field(default=False, init=False)

    def __attrs_post_init__(self):
        opts = self.options
        if self.scheduler is None:
            self.scheduler = ThreadingScheduler()

        self.columns.apply_visibility(opts.column_visibility)
        self.columns.on_visibility_change = self._visibility_changed

        self._state = GridState(
            pagination=PaginationState(page_size=opts.page_size),
            virtual=VirtualizationState(
                estimated_row_height=opts.estimated_row_height
            ),
        )
        self.resize = ResizeController(
            columns=self.columns,
            mode=opts.column_resize_mode,
            on_column_resize=self._column_resized,
        )
        self.selection = SelectionController(
            enabled=opts.row_selection,
            on_select_row=opts.on_select_row,
        )
        self.debouncer = FilterDebouncer(
            scheduler=self.scheduler,
            on_commit=self._commit_filter,
            delay=opts.filter_debounce,
            guard=self._lock,
        )
        self.composer = ViewComposer(
            columns=self.columns, options=opts, resize=self.resize
        )

    @classmethod
    def create(
        cls,
        columns: Union[ColumnModel, Sequence[GridColumn]],
        records: Iterable[Any] = (),
        scheduler: Optional[Scheduler] = None,
        **options: Any,
    ) -> "DataGrid":
        """Build a grid and load its rows in one go.

        Args:
            columns: A column model or the columns to build one from.
            records: The caller records.
            scheduler: Runs the debounced filter commits.
            **options: Grid options by name or alias.

        Returns:
            The grid.
        """
        if not isinstance(columns, ColumnModel):
            columns = ColumnModel(list(columns))
        grid = cls(
            columns=columns,
            options=make_options(options),
            scheduler=scheduler,
        )
        grid.set_rows(records)
        return grid

    @property
    def state(self) -> GridState:
        return self._state

    @property
    def rows(self) -> List[GridRow]:
        return list(self._rows)

    def _invalidate(self) -> None:
        self._model = None

    def _set_state(self, state: GridState) -> None:
        if state != self._state:
            self._state = state
            self._invalidate()

    def _accepts_events(self) -> bool:
        if self._closed:
            logger.debug("Event ignored; the grid is closed")
            return False
        return True

    def set_rows(self, records: Iterable[Any]) -> None:
        """Replace the rows of the grid.

        Args:
            records: The caller records.
        """
        with self._lock:
            self._rows = self.composer.make_rows(records)
            self._options_cache = {}
            logger.debug("Grid has %d rows", len(self._rows))
            self._invalidate()

    def set_state(self, state: GridState) -> None:
        """Replace the whole interaction state."""
        with self._lock:
            self._set_state(state)

    # Filtering.

    def _filterable_column(self, column_id: str) -> Optional[GridColumn]:
        if not self.options.enable_column_filtering:
            logger.log(VERBOSE, "Filtering is not enabled")
            return None
        column = self.columns.get(column_id)
        if column is None:
            logger.warning("Filter event for unknown column %s", column_id)
            return None
        if not column.filterable:
            return None
        return column

    def type_filter(self, column_id: str, text: str) -> None:
        """A keystroke changed the text of a filter control.

        The text shows right away; the rows are filtered once the user
        stopped typing for the debounce interval.

        Args:
            column_id: The column of the control.
            text: The whole text of the control.
        """
        with self._lock:
            if not self._accepts_events():
                return
            if self._filterable_column(column_id) is None:
                return
            self.debouncer.keystroke(column_id, text)
            self._invalidate()

    def _commit_filter(self, column_id: str, text: str) -> None:
        with self._lock:
            if self._closed:
                return
            self._set_state(
                self._state.with_filters(
                    self._state.filters.set(column_id, text)
                )
            )

    def set_filter(self, column_id: str, value: Any) -> None:
        """Apply a filter right away, as from a selection control.

        Args:
            column_id: The column to filter.
            value: A text, a set of accepted values or None to remove the
                filter of the column.
        """
        with self._lock:
            if not self._accepts_events():
                return
            if self._filterable_column(column_id) is None:
                return
            self.debouncer.cancel(column_id)
            self._set_state(
                self._state.with_filters(
                    self._state.filters.set(column_id, value)
                )
            )

    def flush_filters(self) -> None:
        """Apply the typed filter texts without waiting."""
        self.debouncer.flush()

    def filter_options(self, column_id: str) -> List[Any]:
        """The distinct values of a column over all rows."""
        with self._lock:
            column = self.columns[column_id]
            return list(
                self.composer.filter_options(
                    self._rows, column, self._options_cache
                )
            )

    # Sorting.

    def click_header(self, column_id: str) -> SortState:
        """A header was clicked.

        Args:
            column_id: The column of the header.

        Returns:
            The sort state after the click.
        """
        with self._lock:
            if not self._accepts_events():
                return self._state.sort
            if not self.options.enable_sorting:
                return self._state.sort
            column = self.columns.get(column_id)
            if column is None:
                logger.warning("Click on unknown header %s", column_id)
                return self._state.sort

            sort = next_sort_state(self._state.sort, column)
            if sort != self._state.sort:
                self._set_state(self._state.with_sort(sort))
                if self.options.on_sort is not None:
                    self.options.on_sort(
                        column_id, sort.direction_of(column_id)
                    )
            return sort

    # Pagination.

    def _page_changed(self, pagination: PaginationState) -> None:
        previous = self._state.pagination
        self._set_state(self._state.with_pagination(pagination))
        if (
            pagination.page_index != previous.page_index
            and self.options.on_page_change is not None
        ):
            self.options.on_page_change(pagination.page_index)

    def go_to_page(self, page_index: int) -> int:
        """Show a page.

        Args:
            page_index: The 0-based page; clamped to the existing pages.

        Returns:
            The index of the page that is shown.
        """
        with self._lock:
            if not self._accepts_events():
                return self._state.pagination.page_index
            if not self.options.enable_pagination:
                logger.warning("Pagination is not enabled")
                return self._state.pagination.page_index
            total = self.render().total_count
            self._page_changed(self._state.pagination.go_to(page_index, total))
            return self._state.pagination.page_index

    def next_page(self) -> int:
        return self.go_to_page(self._state.pagination.page_index + 1)

    def previous_page(self) -> int:
        return self.go_to_page(self._state.pagination.page_index - 1)

    def set_page_size(self, page_size: int) -> None:
        """Change the page size; the first page is shown afterwards."""
        with self._lock:
            if not self._accepts_events():
                return
            self._page_changed(self._state.pagination.with_page_size(page_size))

    # Virtualization.

    def scroll(
        self, scroll_offset: float, viewport_height: Optional[float] = None
    ) -> None:
        """The body was scrolled or the viewport changed size.

        Args:
            scroll_offset: The new scroll position.
            viewport_height: The new height of the viewport; unchanged when
                not provided.
        """
        with self._lock:
            if not self._accepts_events():
                return
            current = self._state.virtual
            self._set_state(
                self._state.with_virtual(
                    VirtualizationState(
                        scroll_offset=scroll_offset,
                        viewport_height=(
                            current.viewport_height
                            if viewport_height is None
                            else viewport_height
                        ),
                        estimated_row_height=current.estimated_row_height,
                    )
                )
            )

    # Resizing.

    def _column_resized(self, column_id: str, width: float) -> None:
        self._invalidate()
        if self.options.on_column_resize is not None:
            self.options.on_column_resize(column_id, width)

    def resize_start(self, column_id: str, x: float) -> bool:
        with self._lock:
            if not self._accepts_events():
                return False
            started = self.resize.pointer_down(column_id, x)
            if started:
                self._invalidate()
            return started

    def resize_move(self, x: float) -> Optional[float]:
        with self._lock:
            if not self._accepts_events():
                return None
            width = self.resize.pointer_move(x)
            if width is not None:
                self._invalidate()
            return width

    def resize_end(self, x: Optional[float] = None) -> Optional[float]:
        with self._lock:
            if not self._accepts_events():
                return None
            self._invalidate()
            return self.resize.pointer_up(x)

    def resize_cancel(self) -> None:
        with self._lock:
            if not self._accepts_events():
                return
            self._invalidate()
            self.resize.cancel()

    # Selection.

    def click_row(self, row_key: Hashable) -> bool:
        """A row was clicked.

        Args:
            row_key: The key of the row.

        Returns:
            Whether the row is selected after the click.
        """
        with self._lock:
            if not self._accepts_events():
                return row_key in self._state.selection
            self._set_state(
                self._state.with_selection(
                    self.selection.click_row(self._state.selection, row_key)
                )
            )
            return row_key in self._state.selection

    def clear_selection(self) -> None:
        with self._lock:
            if not self._accepts_events():
                return
            self._set_state(
                self._state.with_selection(
                    self.selection.clear(self._state.selection)
                )
            )

    # Visibility.

    def _visibility_changed(self, mapping) -> None:
        self._invalidate()
        if self.options.column_visibility_change is not None:
            self.options.column_visibility_change(mapping)

    def toggle_column_visibility(self, column_id: str) -> bool:
        """Show a hidden column or hide a visible one.

        Returns:
            The new visibility of the column.
        """
        with self._lock:
            return self.columns.toggle_visibility(column_id)

    def set_column_visible(self, column_id: str, visible: bool) -> bool:
        with self._lock:
            return self.columns.set_visible(column_id, visible)

    # Output.

    def render(self) -> RenderModel:
        """The render model of the current state.

        The model is cached until the state changes. A page index that no
        longer exists (the rows shrank) is clamped and stored back.
        """
        with self._lock:
            if self._model is not None:
                return self._model

            model = self.composer.compose(
                self._rows,
                self._state,
                self.debouncer.pending,
                self._options_cache,
            )
            summary = model.pagination
            if (
                summary is not None
                and summary.page_index != self._state.pagination.page_index
            ):
                self._page_changed(
                    PaginationState(
                        page_index=summary.page_index,
                        page_size=summary.page_size,
                    )
                )
            self._model = model
            return model

    def close(self) -> None:
        """Release the grid: pending filter commits and drags are dropped."""
        with self._lock:
            self.debouncer.cancel_all()
            self.resize.cancel()
            self._closed = True
            logger.debug("Grid closed")
