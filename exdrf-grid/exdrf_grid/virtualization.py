"""Row windowing for long tables.

Only the rows that intersect the viewport (plus a few overscan rows) are
materialised; two paddings stand in for the rows above and below the window
so that the scrollable height stays the same.
"""

import logging
import math
from typing import List, Sequence

from attrs import field, frozen

from exdrf_grid.constants import (
    DEFAULT_OVERSCAN,
    DEFAULT_ROW_HEIGHT,
    DEFAULT_VIRTUAL_THRESHOLD,
)
from exdrf_grid.row import GridRow

logger = logging.getLogger(__name__)
VERBOSE = 10


def _non_negative(value: float) -> float:
    if value < 0:
        logger.warning("Negative size %r; using 0", value)
        return 0
    return value


def _positive_height(value: float) -> float:
    if value <= 0:
        logger.warning("Invalid row height %r; using 1", value)
        return 1
    return value


@frozen
class VirtualizationState:
    """The scroll position of the table body.

    Attributes:
        scroll_offset: How far the body is scrolled, in size units.
        viewport_height: The visible height of the body.
        estimated_row_height: The height assumed for every row.
    """

    scroll_offset: float = field(default=0, converter=_non_negative)
    viewport_height: float = field(default=0, converter=_non_negative)
    estimated_row_height: float = field(
        default=DEFAULT_ROW_HEIGHT, converter=_positive_height
    )

    @property
    def row_height(self) -> float:
        return self.estimated_row_height


@frozen
class VirtualWindow:
    """The rows to materialise and the paddings around them.

    Attributes:
        rows: The rows inside the window.
        first_index: Index of the first materialised row.
        last_index: Index after the last materialised row.
        total_count: The number of rows the window was computed for.
        top_padding: Size that stands in for the rows before the window.
        bottom_padding: Size that stands in for the rows after the window.
        active: False when every row is materialised.
    """

    rows: List[GridRow]
    first_index: int
    last_index: int
    total_count: int
    top_padding: float = 0
    bottom_padding: float = 0
    active: bool = False


@frozen
class VirtualizationEngine:
    """Computes the visible window of rows.

    Attributes:
        overscan: Rows materialised beyond the viewport.
        threshold: Row counts below this are not virtualised.
    """

    overscan: int = field(default=DEFAULT_OVERSCAN, converter=int)
    threshold: int = field(default=DEFAULT_VIRTUAL_THRESHOLD, converter=int)

    def visible_count(self, state: VirtualizationState) -> int:
        """The number of rows that fill the viewport, plus overscan."""
        return math.ceil(state.viewport_height / state.row_height) + max(
            0, self.overscan
        )

    def full_window(self, rows: Sequence[GridRow]) -> VirtualWindow:
        """A window that materialises every row."""
        return VirtualWindow(
            rows=list(rows),
            first_index=0,
            last_index=len(rows),
            total_count=len(rows),
        )

    def apply(
        self,
        rows: Sequence[GridRow],
        state: VirtualizationState,
        enabled: bool = True,
    ) -> VirtualWindow:
        """Compute the window for the current scroll position.

        Args:
            rows: The rows that reached this stage of the pipeline.
            state: The scroll position.
            enabled: When False every row is materialised.

        Returns:
            The window.
        """
        total = len(rows)
        if not enabled or total < self.threshold:
            return self.full_window(rows)

        height = state.row_height
        first = min(int(state.scroll_offset // height), total)
        last = min(first + self.visible_count(state), total)
        window = VirtualWindow(
            rows=list(rows[first:last]),
            first_index=first,
            last_index=last,
            total_count=total,
            top_padding=first * height,
            bottom_padding=(total - last) * height,
            active=True,
        )
        logger.log(
            VERBOSE,
            "Virtual window %d:%d of %d (padding %s/%s)",
            first,
            last,
            total,
            window.top_padding,
            window.bottom_padding,
        )
        return window
