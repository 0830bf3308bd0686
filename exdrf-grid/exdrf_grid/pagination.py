import logging
import math
from typing import List, Sequence

from attrs import evolve, field, frozen

from exdrf_grid.constants import DEFAULT_PAGE_SIZE
from exdrf_grid.row import GridRow

logger = logging.getLogger(__name__)
VERBOSE = 10


def _clamp_page_size(value: int) -> int:
    if value < 1:
        logger.warning("Invalid page size %r; using 1", value)
        return 1
    return int(value)


def _clamp_page_index(value: int) -> int:
    if value < 0:
        logger.warning("Invalid page index %r; using 0", value)
        return 0
    return int(value)


def page_count_for(total: int, page_size: int) -> int:
    """The number of pages needed for `total` rows; at least 1."""
    return max(1, math.ceil(total / max(1, page_size)))


@frozen
class PaginationState:
    """The page that is shown.

    Attributes:
        page_index: The 0-based index of the page.
        page_size: The number of rows on a page.
    """

    page_index: int = field(default=0, converter=_clamp_page_index)
    page_size: int = field(
        default=DEFAULT_PAGE_SIZE, converter=_clamp_page_size
    )

    def with_page_size(self, page_size: int) -> "PaginationState":
        """Change the page size; the first page is shown afterwards."""
        return PaginationState(page_index=0, page_size=page_size)

    def go_to(self, page_index: int, total: int) -> "PaginationState":
        """Show a page, clamped to the pages that exist for `total` rows."""
        last = page_count_for(total, self.page_size) - 1
        return evolve(self, page_index=min(max(0, page_index), last))

    def next_page(self, total: int) -> "PaginationState":
        return self.go_to(self.page_index + 1, total)

    def previous_page(self, total: int) -> "PaginationState":
        return self.go_to(self.page_index - 1, total)


@frozen
class PageSummary:
    """What the pagination control displays, as in "11 - 20 of 25".

    Attributes:
        first_index: 1-based index of the first row on the page; 0 when
            there are no rows.
        last_index: 1-based index of the last row on the page; 0 when
            there are no rows.
        total_count: The number of rows over all pages.
        page_count: The number of pages; at least 1.
        page_index: The 0-based index of the page that is shown.
        page_size: The number of rows on a page.
    """

    first_index: int
    last_index: int
    total_count: int
    page_count: int
    page_index: int
    page_size: int

    @property
    def label(self) -> str:
        return f"{self.first_index} - {self.last_index} of {self.total_count}"

    @property
    def has_previous(self) -> bool:
        return self.page_index > 0

    @property
    def has_next(self) -> bool:
        return self.page_index < self.page_count - 1


@frozen
class PageResult:
    """The outcome of paginating a sequence of rows.

    Attributes:
        rows: The rows of the current page.
        summary: The summary of the page.
        state: The state that was used; the page index is clamped to the
            last page when the rows no longer reach the requested page.
    """

    rows: List[GridRow]
    summary: PageSummary
    state: PaginationState


@frozen
class PaginationEngine:
    """Slices rows into fixed-size pages."""

    def apply(
        self, rows: Sequence[GridRow], state: PaginationState
    ) -> PageResult:
        """Get the rows of the current page.

        Args:
            rows: All the rows, already filtered and sorted.
            state: The requested page.

        Returns:
            The page rows, the summary and the effective state.
        """
        total = len(rows)
        page_count = page_count_for(total, state.page_size)
        if state.page_index >= page_count:
            logger.debug(
                "Page %d is past the last page %d; clamping",
                state.page_index,
                page_count - 1,
            )
            state = evolve(state, page_index=page_count - 1)

        start = state.page_index * state.page_size
        end = min(start + state.page_size, total)
        page_rows = list(rows[start:end])
        summary = PageSummary(
            first_index=start + 1 if page_rows else 0,
            last_index=end if page_rows else 0,
            total_count=total,
            page_count=page_count,
            page_index=state.page_index,
            page_size=state.page_size,
        )
        logger.log(VERBOSE, "Page %s", summary.label)
        return PageResult(rows=page_rows, summary=summary, state=state)
