"""Column resizing by dragging the handle of a header.

The interaction is a small state machine:

    Idle --pointer_down--> Dragging --pointer_up/cancel--> Idle

While dragging, the new width is `start_width + (x - start_x)`, never less
than the minimum width of the column. In `onChange` mode the width reaches
the column model on every move; in `onEnd` mode it is staged and applied when
the pointer is released. Cancelling (lost pointer capture) restores the
width the column had when the drag started.
"""

import logging
from typing import Callable, Optional, Union

from attrs import define, evolve, field, frozen

from exdrf_grid.column import ColumnModel, GridColumn
from exdrf_grid.constants import ResizeMode

logger = logging.getLogger(__name__)
VERBOSE = 10

ColumnResizeCallback = Callable[[str, float], None]


@frozen
class Idle:
    """No resize in progress."""


@frozen
class Dragging:
    """A resize handle is being dragged.

    Attributes:
        column_id: The column that is resized.
        start_x: The pointer position when the drag started.
        start_width: The width of the column when the drag started.
        current_width: The width computed from the last pointer position.
    """

    column_id: str
    start_x: float
    start_width: float
    current_width: float


ResizeState = Union[Idle, Dragging]
IDLE = Idle()


def _to_mode(value: Optional[Union[str, ResizeMode]]) -> Optional[ResizeMode]:
    return None if value is None else ResizeMode(value)


@define
class ResizeController:
    """Translates pointer events on resize handles into column widths.

    Attributes:
        columns: The column model that receives the widths.
        mode: When widths are applied; None disables resizing.
        on_column_resize: Called with the column id and the width each time
            a width is applied to the column model.
        state: The current state of the interaction.
    """

    columns: ColumnModel
    mode: Optional[ResizeMode] = field(default=None, converter=_to_mode)
    on_column_resize: Optional[ColumnResizeCallback] = field(default=None)
    state: ResizeState = field(default=IDLE, init=False)

    @property
    def enabled(self) -> bool:
        return self.mode is not None

    @property
    def dragging(self) -> bool:
        return isinstance(self.state, Dragging)

    def has_handle(self, column: GridColumn) -> bool:
        """Tell if the header of a column shows a resize handle."""
        return self.enabled and column.resizable

    def staged_width(self, column_id: str) -> Optional[float]:
        """The width being dragged for a column, if any."""
        if isinstance(self.state, Dragging) and (
            self.state.column_id == column_id
        ):
            return self.state.current_width
        return None

    def _apply(self, column_id: str, width: float) -> Optional[float]:
        column = self.columns.get(column_id)
        if column is None:
            return None
        previous = column.width
        applied = self.columns.set_width(column_id, width)
        if applied is not None and applied != previous:
            logger.log(VERBOSE, "Column %s width=%s", column_id, applied)
            if self.on_column_resize is not None:
                self.on_column_resize(column_id, applied)
        return applied

    def pointer_down(self, column_id: str, x: float) -> bool:
        """Start dragging the handle of a column.

        Args:
            column_id: The column whose handle was pressed.
            x: The horizontal position of the pointer.

        Returns:
            True if a drag started.
        """
        if isinstance(self.state, Dragging):
            logger.warning(
                "Resize of %s requested while %s is being resized",
                column_id,
                self.state.column_id,
            )
            return False

        column = self.columns.get(column_id)
        if column is None:
            logger.warning("Cannot resize unknown column %s", column_id)
            return False
        if not self.has_handle(column):
            logger.log(VERBOSE, "Column %s has no resize handle", column_id)
            return False

        self.state = Dragging(
            column_id=column_id,
            start_x=x,
            start_width=column.width,
            current_width=column.width,
        )
        return True

    def pointer_move(self, x: float) -> Optional[float]:
        """Follow the pointer while dragging.

        Args:
            x: The horizontal position of the pointer.

        Returns:
            The width computed for the pointer position or None when idle.
        """
        if not isinstance(self.state, Dragging):
            return None

        drag = self.state
        column = self.columns.get(drag.column_id)
        min_width = column.min_width if column is not None else 0
        width = max(min_width, drag.start_width + (x - drag.start_x))
        self.state = evolve(drag, current_width=width)
        if self.mode == ResizeMode.ON_CHANGE:
            self._apply(drag.column_id, width)
        return width

    def pointer_up(self, x: Optional[float] = None) -> Optional[float]:
        """Release the handle and commit the width.

        Args:
            x: The final position of the pointer, if the release happened
                somewhere other than the last move.

        Returns:
            The committed width or None when idle.
        """
        if not isinstance(self.state, Dragging):
            return None

        if x is not None:
            self.pointer_move(x)
        drag = self.state
        assert isinstance(drag, Dragging)
        self.state = IDLE
        if self.mode == ResizeMode.ON_END:
            return self._apply(drag.column_id, drag.current_width)
        column = self.columns.get(drag.column_id)
        return column.width if column is not None else None

    def cancel(self) -> None:
        """Abort the drag and restore the width from before the drag."""
        if not isinstance(self.state, Dragging):
            return

        drag = self.state
        self.state = IDLE
        logger.debug("Resize of %s cancelled", drag.column_id)
        if self.mode == ResizeMode.ON_CHANGE:
            self._apply(drag.column_id, drag.start_width)
