"""Composition of the engine stages into a render model.

The stages always run in the same order:

    filter -> sort -> paginate -> virtualize

Each stage can be turned off by the options. Sorting after pagination would
only sort the rows of one page, so the order is part of the contract.
"""

import logging
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
)

from attrs import define, field
from pyrsistent import pvector

from exdrf_grid.column import ColumnModel, GridColumn
from exdrf_grid.constants import (
    TABLE_CLASS_STICKY_HEADER,
    TABLE_CLASS_VIRTUAL,
    SortDirection,
)
from exdrf_grid.filtering import FilterEngine
from exdrf_grid.options import GridOptions
from exdrf_grid.pagination import PageSummary, PaginationEngine
from exdrf_grid.render_model import (
    CellModel,
    HeaderDescriptor,
    RenderModel,
    RowModel,
    VirtualPadding,
)
from exdrf_grid.resize import ResizeController
from exdrf_grid.row import GridRow, make_rows
from exdrf_grid.sorting import SortEngine, SortState
from exdrf_grid.state import GridState
from exdrf_grid.style import StyleResolver
from exdrf_grid.virtualization import VirtualizationEngine

logger = logging.getLogger(__name__)
VERBOSE = 10


@define
class ViewComposer:
    """Computes the render model for a set of rows and a grid state.

    Attributes:
        columns: The column model.
        options: The options of the grid.
        resize: The resize controller, consulted for handles and for the
            width being dragged.
        style: Resolves styles and classes; built from the options when
            not provided.
        filter_engine: The filtering stage.
        sort_engine: The sorting stage.
        pagination_engine: The pagination stage.
        virtualization_engine: The virtualization stage; built from the
            options when not provided.
    """

    columns: ColumnModel
    options: GridOptions = field(factory=GridOptions)
    resize: Optional[ResizeController] = field(default=None)
    style: Optional[StyleResolver] = field(default=None)
    filter_engine: FilterEngine = field(factory=FilterEngine)
    sort_engine: SortEngine = field(factory=SortEngine)
    pagination_engine: PaginationEngine = field(factory=PaginationEngine)
    virtualization_engine: Optional[VirtualizationEngine] = field(default=None)

    def __attrs_post_init__(self):
        if self.style is None:
            self.style = StyleResolver(self.options.style_provider())
        if self.virtualization_engine is None:
            self.virtualization_engine = VirtualizationEngine(
                overscan=self.options.overscan,
                threshold=self.options.virtual_threshold,
            )

    def make_rows(self, records: Iterable[Any]) -> List[GridRow]:
        """Wrap caller records using the configured row key."""
        return make_rows(records, self.options.row_key)

    def compose(
        self,
        rows: Sequence[GridRow],
        state: GridState,
        filter_inputs: Optional[Mapping[str, str]] = None,
        options_cache: Optional[Dict[str, Any]] = None,
    ) -> RenderModel:
        """Run the pipeline and describe the result.

        Args:
            rows: The raw rows.
            state: The interaction state.
            filter_inputs: Texts of filter controls that were typed but not
                committed yet, by column id.
            options_cache: Filter choices by column id, computed for these
                rows; filled in for the columns that are missing.

        Returns:
            The render model.
        """
        opts = self.options
        assert self.virtualization_engine is not None

        if opts.enable_column_filtering:
            filtered = self.filter_engine.apply(
                rows, self.columns, state.filters
            )
        else:
            filtered = list(rows)

        if opts.enable_sorting:
            ordered = self.sort_engine.apply(filtered, self.columns, state.sort)
        else:
            ordered = filtered

        summary: Optional[PageSummary] = None
        offset = 0
        if opts.enable_pagination:
            page = self.pagination_engine.apply(ordered, state.pagination)
            page_rows = page.rows
            summary = page.summary
            offset = page.state.page_index * page.state.page_size
        else:
            page_rows = ordered

        window = self.virtualization_engine.apply(
            page_rows, state.virtual, enabled=opts.enable_virtual
        )
        virtual = None
        if window.active:
            virtual = VirtualPadding(
                top_padding=window.top_padding,
                bottom_padding=window.bottom_padding,
                first_index=window.first_index,
                last_index=window.last_index,
            )

        visible = self.columns.visible_columns
        headers = self.make_headers(
            rows, visible, state, filter_inputs or {}, options_cache
        )

        empty_message = None
        if opts.empty_message is not None and not filtered:
            empty_message = opts.empty_message
            row_models = pvector()
        else:
            start = offset + window.first_index
            row_models = pvector(
                self.make_row(row, start + i, visible, state)
                for i, row in enumerate(window.rows)
            )

        table_classes = []
        if opts.enable_virtual:
            table_classes.append(TABLE_CLASS_VIRTUAL)
        if opts.sticky_header:
            table_classes.append(TABLE_CLASS_STICKY_HEADER)

        logger.log(
            VERBOSE,
            "Composed %d of %d rows (%d after filters), %d headers",
            len(row_models),
            len(rows),
            len(filtered),
            len(headers),
        )
        return RenderModel(
            headers=headers,
            rows=row_models,
            total_count=len(filtered),
            row_count=len(rows),
            sort=state.sort if opts.enable_sorting else SortState(),
            pagination=summary,
            virtual=virtual,
            empty_message=empty_message,
            caption=opts.caption,
            table_classes=pvector(table_classes),
        )

    def make_headers(
        self,
        rows: Sequence[GridRow],
        visible: Sequence[GridColumn],
        state: GridState,
        filter_inputs: Mapping[str, str],
        options_cache: Optional[Dict[str, Any]] = None,
    ):
        """Describe the headers of the visible columns."""
        opts = self.options
        assert self.style is not None
        result = []
        for position, column in enumerate(visible):
            resolved = self.style.resolve_header(column)
            sortable = opts.enable_sorting and column.sortable
            filterable = opts.enable_column_filtering and column.filterable

            filter_value = None
            filter_input = ""
            filter_options: Any = pvector()
            if filterable:
                filter_value = state.filters.get(column.id)
                if column.id in filter_inputs:
                    filter_input = filter_inputs[column.id]
                elif isinstance(filter_value, str):
                    filter_input = filter_value
                filter_options = self.filter_options(
                    rows, column, options_cache
                )

            resizable = False
            staged_width = None
            if self.resize is not None:
                resizable = self.resize.has_handle(column)
                staged_width = self.resize.staged_width(column.id)
            elif opts.column_resize_mode is not None:
                resizable = column.resizable

            result.append(
                HeaderDescriptor(
                    column_id=column.id,
                    title=column.title,
                    position=position,
                    width=column.width,
                    sortable=sortable,
                    sort_direction=(
                        state.sort.direction_of(column.id)
                        if opts.enable_sorting
                        else SortDirection.NONE
                    ),
                    resizable=resizable,
                    staged_width=staged_width,
                    filterable=filterable,
                    filter_value=filter_value,
                    filter_input=filter_input,
                    filter_options=filter_options,
                    style=resolved.style,
                    class_list=resolved.class_list,
                )
            )
        return pvector(result)

    def filter_options(
        self,
        rows: Sequence[GridRow],
        column: GridColumn,
        options_cache: Optional[Dict[str, Any]] = None,
    ):
        """The choices of the filter control of a column."""
        if options_cache is not None and column.id in options_cache:
            return options_cache[column.id]
        values = pvector(self.filter_engine.available_values(rows, column))
        if options_cache is not None:
            options_cache[column.id] = values
        return values

    def make_row(
        self,
        row: GridRow,
        position: int,
        visible: Sequence[GridColumn],
        state: GridState,
    ) -> RowModel:
        """Describe a materialised row and its cells."""
        assert self.style is not None
        resolved = self.style.resolve_row(row)
        cells = []
        for column in visible:
            cell_style = self.style.resolve_cell(row, column)
            cells.append(
                CellModel(
                    column_id=column.id,
                    value=column.value_of(row.data),
                    style=cell_style.style,
                    class_list=cell_style.class_list,
                )
            )
        return RowModel(
            key=row.key,
            index=row.index,
            position=position,
            data=row.data,
            selected=row.key in state.selection,
            cells=pvector(cells),
            style=resolved.style,
            class_list=resolved.class_list,
        )
