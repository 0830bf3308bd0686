"""Column definitions and the ordered column model."""

import logging
from collections.abc import Mapping
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Optional,
    Union,
)

from attrs import define, field

from exdrf_grid.constants import (
    DEFAULT_COLUMN_WIDTH,
    DEFAULT_MIN_COLUMN_WIDTH,
)
from exdrf_grid.errors import DuplicateColumnError, GridConfigError

logger = logging.getLogger(__name__)

AccessorType = Union[str, Callable[[Any], Any]]
VisibilityCallback = Callable[[Dict[str, bool]], None]


def lookup_key(data: Any, key: str) -> Any:
    """Read a value by key from a mapping, or by attribute from an object."""
    if isinstance(data, Mapping):
        return data.get(key)
    return getattr(data, key, None)


@define
class GridColumn:
    """A column of the grid.

    Attributes:
        id: The unique identifier of the column.
        accessor: Either a callable that receives the row data and returns
            the value of the cell or a string key. String keys are looked up
            in mappings and as attributes of other objects. When not
            provided the id is used as the key.
        title: The label of the header; defaults to the id.
        visible: Whether the column takes part in the headers and cells.
        width: The current width of the column in size units.
        min_width: Resizing never goes below this width.
        resizable: Whether the column exposes a resize handle.
        filterable: Whether the user can filter rows by this column.
        sortable: Whether clicking the header cycles the sort.
    """

    id: str
    accessor: Optional[AccessorType] = field(default=None)
    title: str = field(default="")
    visible: bool = field(default=True)
    width: float = field(default=DEFAULT_COLUMN_WIDTH)
    min_width: float = field(default=DEFAULT_MIN_COLUMN_WIDTH)
    resizable: bool = field(default=True)
    filterable: bool = field(default=True)
    sortable: bool = field(default=True)

    def __attrs_post_init__(self):
        if not self.id:
            raise GridConfigError("A column needs a non-empty id")
        if not self.title:
            self.title = self.id
        if self.accessor is None:
            self.accessor = self.id

    def value_of(self, data: Any) -> Any:
        """Get the value of this column for a row.

        A failing accessor is treated as a missing value.

        Args:
            data: The caller's record.

        Returns:
            The value or None.
        """
        try:
            if isinstance(self.accessor, str):
                return lookup_key(data, self.accessor)
            return self.accessor(data)  # type: ignore[misc]
        except Exception:
            logger.debug(
                "Accessor of column %s failed", self.id, exc_info=True
            )
            return None


@define
class ColumnModel:
    """The ordered set of columns.

    Columns can be accessed with `model[key]` where key is either the
    position of the column or its id. Changing the visibility or the width
    of a column never changes its identity or its position.

    Attributes:
        columns: The columns in display order.
        on_visibility_change: Called with the full visibility mapping each
            time the visibility of a column changes through `set_visible`
            or `toggle_visibility`.
    """

    columns: List[GridColumn] = field(factory=list)
    on_visibility_change: Optional[VisibilityCallback] = field(
        default=None, kw_only=True
    )

    def __attrs_post_init__(self):
        seen = set()
        for column in self.columns:
            if column.id in seen:
                raise DuplicateColumnError(column.id)
            seen.add(column.id)

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self) -> Iterator[GridColumn]:
        return iter(self.columns)

    def __contains__(self, column_id: object) -> bool:
        return self.get(column_id) is not None  # type: ignore[arg-type]

    def __getitem__(self, key: Union[int, str]) -> GridColumn:
        if isinstance(key, int):
            return self.columns[key]

        column = self.get(key)
        if column is None:
            raise KeyError(
                f"No column found for key: {key}; valid ids are: "
                f"{self.ids}"
            )
        return column

    @property
    def ids(self) -> List[str]:
        """The ids of all columns, in order."""
        return [c.id for c in self.columns]

    @property
    def visible_columns(self) -> List[GridColumn]:
        """The columns that take part in headers and cells, in order."""
        return [c for c in self.columns if c.visible]

    @property
    def visibility(self) -> Dict[str, bool]:
        """Map of column id to its visibility."""
        return {c.id: c.visible for c in self.columns}

    @property
    def widths(self) -> Dict[str, float]:
        """Map of column id to its width."""
        return {c.id: c.width for c in self.columns}

    def get(self, column_id: str) -> Optional[GridColumn]:
        """Find a column by id.

        Args:
            column_id: The id to look for.

        Returns:
            The column or None if there is no such column.
        """
        for column in self.columns:
            if column.id == column_id:
                return column
        return None

    def add_column(self, column: GridColumn) -> None:
        """Append a column at the end.

        Args:
            column: The column to add.
        """
        if self.get(column.id) is not None:
            raise DuplicateColumnError(column.id)
        self.columns.append(column)

    def apply_visibility(self, mapping: Mapping) -> None:
        """Set the initial visibility without notification.

        Columns that are not present in the mapping keep their visibility.

        Args:
            mapping: Column id to visibility.
        """
        for column_id, visible in mapping.items():
            column = self.get(column_id)
            if column is None:
                logger.warning(
                    "Visibility given for unknown column %s", column_id
                )
                continue
            column.visible = bool(visible)

    def set_visible(self, column_id: str, visible: bool) -> bool:
        """Change the visibility of a column.

        Args:
            column_id: The column to change.
            visible: The new visibility.

        Returns:
            True if the visibility changed.
        """
        column = self.get(column_id)
        if column is None:
            logger.warning("Cannot change visibility of %s", column_id)
            return False
        if column.visible == bool(visible):
            return False
        column.visible = bool(visible)
        logger.debug("Column %s visible=%s", column_id, column.visible)
        if self.on_visibility_change is not None:
            self.on_visibility_change(self.visibility)
        return True

    def toggle_visibility(self, column_id: str) -> bool:
        """Flip the visibility of a column.

        Args:
            column_id: The column to change.

        Returns:
            The new visibility of the column.
        """
        column = self.get(column_id)
        if column is None:
            logger.warning("Cannot toggle visibility of %s", column_id)
            return False
        self.set_visible(column_id, not column.visible)
        return column.visible

    def set_width(self, column_id: str, width: float) -> Optional[float]:
        """Change the width of a single column.

        The width is never smaller than the minimum width of the column and
        no other column is affected.

        Args:
            column_id: The column to change.
            width: The requested width.

        Returns:
            The width that was applied or None for an unknown column.
        """
        column = self.get(column_id)
        if column is None:
            logger.warning("Cannot resize unknown column %s", column_id)
            return None
        column.width = max(column.min_width, width)
        return column.width
