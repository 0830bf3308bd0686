import logging
from typing import Callable, Hashable, Optional

from attrs import define, field
from pyrsistent import pset
from pyrsistent.typing import PSet

logger = logging.getLogger(__name__)

SelectionState = PSet[Hashable]
SelectRowCallback = Callable[[Hashable, bool], None]


def empty_selection() -> SelectionState:
    return pset()


@define
class SelectionController:
    """Maintains the set of selected row keys.

    The selection is keyed by row identity, so a row stays selected while
    it is filtered or paged out of view.

    Attributes:
        enabled: Whether clicking a row changes the selection.
        on_select_row: Called with the row key and its new state after a
            click changed the selection.
    """

    enabled: bool = field(default=False)
    on_select_row: Optional[SelectRowCallback] = field(default=None)

    @staticmethod
    def toggle(state: SelectionState, row_key: Hashable) -> SelectionState:
        """Add the key if missing, remove it otherwise."""
        if row_key in state:
            return state.remove(row_key)
        return state.add(row_key)

    @staticmethod
    def is_selected(state: SelectionState, row_key: Hashable) -> bool:
        return row_key in state

    @staticmethod
    def clear(state: SelectionState) -> SelectionState:
        return empty_selection()

    def click_row(
        self, state: SelectionState, row_key: Hashable
    ) -> SelectionState:
        """Handle a click on a row.

        Args:
            state: The current selection.
            row_key: The key of the clicked row.

        Returns:
            The new selection; the same one when selection is disabled.
        """
        if not self.enabled:
            return state

        new_state = self.toggle(state, row_key)
        selected = row_key in new_state
        logger.debug("Row %r selected=%s", row_key, selected)
        if self.on_select_row is not None:
            self.on_select_row(row_key, selected)
        return new_state
