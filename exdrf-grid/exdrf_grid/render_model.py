"""The immutable description of what a grid displays.

The presentation layer turns a `RenderModel` into markup; nothing in here
knows how that is done.
"""

from typing import Any, Hashable, Optional

from attrs import field, frozen
from pyrsistent import pmap, pvector
from pyrsistent.typing import PMap, PVector

from exdrf_grid.constants import SortDirection
from exdrf_grid.filtering import FilterValue
from exdrf_grid.pagination import PageSummary
from exdrf_grid.sorting import SortState


@frozen
class HeaderDescriptor:
    """A visible column header.

    Attributes:
        column_id: The id of the column.
        title: The label of the header.
        position: The index of the header among the visible headers.
        width: The width of the column.
        sortable: Clicking the header cycles the sort.
        sort_direction: The sort indicator.
        resizable: The header shows a resize handle.
        staged_width: The width being dragged, while a drag is in progress.
        filterable: The header shows a filter control.
        filter_value: The committed filter of the column.
        filter_input: The text of the filter control, including keystrokes
            that were not committed yet.
        filter_options: The choices for the filter control.
        style: Style properties.
        class_list: Class names.
    """

    column_id: str
    title: str
    position: int
    width: float
    sortable: bool = False
    sort_direction: SortDirection = SortDirection.NONE
    resizable: bool = False
    staged_width: Optional[float] = None
    filterable: bool = False
    filter_value: Optional[FilterValue] = None
    filter_input: str = ""
    filter_options: PVector[Any] = field(factory=pvector)
    style: PMap[str, Any] = field(factory=pmap)
    class_list: PVector[str] = field(factory=pvector)


@frozen
class CellModel:
    """A cell of a visible column.

    Attributes:
        column_id: The id of the column.
        value: The value read by the accessor of the column.
        style: Style properties.
        class_list: Class names.
    """

    column_id: str
    value: Any
    style: PMap[str, Any] = field(factory=pmap)
    class_list: PVector[str] = field(factory=pvector)


@frozen
class RowModel:
    """A materialised row.

    Attributes:
        key: The identity of the row.
        index: The position of the row in the raw row set.
        position: The position of the row among the filtered, sorted rows.
        data: The caller's record.
        selected: Whether the row is selected.
        cells: One cell per visible column, in column order.
        style: Style properties.
        class_list: Class names.
    """

    key: Hashable
    index: int
    position: int
    data: Any
    selected: bool = False
    cells: PVector[CellModel] = field(factory=pvector)
    style: PMap[str, Any] = field(factory=pmap)
    class_list: PVector[str] = field(factory=pvector)

    def cell(self, column_id: str) -> Optional[CellModel]:
        for cell in self.cells:
            if cell.column_id == column_id:
                return cell
        return None


@frozen
class VirtualPadding:
    """The space that stands in for the rows outside the virtual window.

    Attributes:
        top_padding: Size of the rows before the window.
        bottom_padding: Size of the rows after the window.
        first_index: Index of the first materialised row in the page.
        last_index: Index after the last materialised row in the page.
    """

    top_padding: float
    bottom_padding: float
    first_index: int
    last_index: int


@frozen
class RenderModel:
    """Everything the presentation layer needs for one frame.

    Attributes:
        headers: The visible headers, in column order.
        rows: The rows to materialise, in display order. Empty when the
            empty message is shown.
        total_count: The number of rows that passed the filters.
        row_count: The number of rows in the raw row set.
        sort: The active sort.
        pagination: The pagination summary; None when pagination is off.
        virtual: The virtual paddings; None when no virtual window was
            applied.
        empty_message: The fallback content, present only when it is
            configured and no row passed the filters.
        caption: The caption, untouched.
        table_classes: Classes for the table element.
    """

    headers: PVector[HeaderDescriptor] = field(factory=pvector)
    rows: PVector[RowModel] = field(factory=pvector)
    total_count: int = 0
    row_count: int = 0
    sort: SortState = field(factory=SortState)
    pagination: Optional[PageSummary] = None
    virtual: Optional[VirtualPadding] = None
    empty_message: Optional[str] = None
    caption: Any = None
    table_classes: PVector[str] = field(factory=pvector)

    @property
    def header_ids(self):
        return [h.column_id for h in self.headers]

    def header(self, column_id: str) -> Optional[HeaderDescriptor]:
        for header in self.headers:
            if header.column_id == column_id:
                return header
        return None

    @property
    def selected_keys(self):
        return [r.key for r in self.rows if r.selected]
