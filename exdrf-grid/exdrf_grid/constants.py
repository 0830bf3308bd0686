# Defaults shared by the engine components.
from enum import StrEnum

DEFAULT_COLUMN_WIDTH = 100
DEFAULT_MIN_COLUMN_WIDTH = 20
DEFAULT_PAGE_SIZE = 10
DEFAULT_ROW_HEIGHT = 48
DEFAULT_OVERSCAN = 5
DEFAULT_VIRTUAL_THRESHOLD = 50
DEFAULT_FILTER_DEBOUNCE = 0.5

# Classes added to the table by the composer.
TABLE_CLASS_VIRTUAL = "virtual"
TABLE_CLASS_STICKY_HEADER = "sticky-header"


class SortDirection(StrEnum):
    """The direction of the single active sort column.

    The values double as the `aria-sort` values of the header.

    Attributes:
        NONE: The rows are shown in their original order.
        ASCENDING: Smallest value first.
        DESCENDING: Largest value first.
    """

    NONE = "none"
    ASCENDING = "ascending"
    DESCENDING = "descending"


class ResizeMode(StrEnum):
    """When a dragged column width reaches the column model.

    Attributes:
        ON_CHANGE: Every pointer move is applied (live resize).
        ON_END: The width is staged and applied on pointer release.
    """

    ON_CHANGE = "onChange"
    ON_END = "onEnd"
