from typing import Hashable

from attrs import evolve, field, frozen

from exdrf_grid.filtering import FilterState
from exdrf_grid.pagination import PaginationState
from exdrf_grid.selection import (
    SelectionController,
    SelectionState,
    empty_selection,
)
from exdrf_grid.sorting import SortState
from exdrf_grid.virtualization import VirtualizationState


@frozen
class GridState:
    """Every interaction state of a grid.

    Each member is replaced on its own; the render model is a function of
    this bundle, the rows and the columns.

    Attributes:
        filters: The filter of each column.
        sort: The active sort.
        pagination: The page that is shown.
        virtual: The scroll position.
        selection: The keys of the selected rows.
    """

    filters: FilterState = field(factory=FilterState)
    sort: SortState = field(factory=SortState)
    pagination: PaginationState = field(factory=PaginationState)
    virtual: VirtualizationState = field(factory=VirtualizationState)
    selection: SelectionState = field(factory=empty_selection)

    def with_filters(self, filters: FilterState) -> "GridState":
        return evolve(self, filters=filters)

    def with_sort(self, sort: SortState) -> "GridState":
        return evolve(self, sort=sort)

    def with_pagination(self, pagination: PaginationState) -> "GridState":
        return evolve(self, pagination=pagination)

    def with_virtual(self, virtual: VirtualizationState) -> "GridState":
        return evolve(self, virtual=virtual)

    def with_selection(self, selection: SelectionState) -> "GridState":
        return evolve(self, selection=selection)

    def toggle_row(self, row_key: Hashable) -> "GridState":
        return self.with_selection(
            SelectionController.toggle(self.selection, row_key)
        )
