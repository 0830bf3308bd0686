"""The configuration surface of the grid.

Options can be given with their snake_case names or with the camelCase
aliases used by the presentation layer (`enableSorting`, `pageSize`, ...).
Numeric options that are out of range are clamped to a safe value instead of
failing, so a bad configuration never prevents the table from showing.
"""

import logging
import os
from typing import Any, Callable, Dict, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from exdrf_grid.constants import (
    DEFAULT_FILTER_DEBOUNCE,
    DEFAULT_OVERSCAN,
    DEFAULT_PAGE_SIZE,
    DEFAULT_ROW_HEIGHT,
    DEFAULT_VIRTUAL_THRESHOLD,
    ResizeMode,
)
from exdrf_grid.errors import GridConfigError
from exdrf_grid.style import CallbackStyleProvider

logger = logging.getLogger(__name__)

OptCallable = Optional[Callable[..., Any]]


def _clamp(name: str, value: Any, minimum: Union[int, float]) -> Any:
    if isinstance(value, (int, float)) and value < minimum:
        logger.warning("Invalid %s %r; using %r", name, value, minimum)
        return minimum
    return value


class GridOptions(BaseModel):
    """Options of a grid.

    Attributes:
        enable_column_filtering: Show filter controls and filter the rows.
        enable_sorting: Clicking a header cycles the sort of its column.
        enable_pagination: Show the rows one page at a time.
        page_size: The number of rows on a page.
        enable_virtual: Only materialise the rows near the viewport.
        virtual_threshold: Fewer rows than this are never virtualised.
        estimated_row_height: The height assumed for every row.
        overscan: Rows materialised beyond the viewport.
        column_resize_mode: `onChange` or `onEnd`; None hides the resize
            handles.
        row_selection: Clicking a row toggles its selection.
        column_visibility: Initial visibility by column id.
        empty_message: Shown instead of the body when no row passes the
            filters.
        sticky_header: Keep the header visible while scrolling.
        filter_debounce: Seconds of quiet before typed filter text is
            applied.
        caption: Passed to the presentation layer untouched.
        row_key: `(data, index) -> key` computes the identity of a row.
        cell_style: `(data, column) -> style mapping`.
        row_style: `(data) -> style mapping`.
        header_style: `(column) -> style mapping`.
        cell_class: `(data, column) -> class name(s)`.
        row_class: `(data) -> class name(s)`.
        header_class: `(column) -> class name(s)`.
        on_select_row: `(row_key, selected)` after a click on a row.
        column_visibility_change: `(mapping)` after a visibility change.
        on_sort: `(column_id, direction)` after a header click.
        on_page_change: `(page_index)` after the page changed.
        on_column_resize: `(column_id, width)` after a width was applied.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="forbid",
    )

    enable_column_filtering: bool = False
    enable_sorting: bool = False
    enable_pagination: bool = False
    page_size: int = DEFAULT_PAGE_SIZE
    enable_virtual: bool = False
    virtual_threshold: int = DEFAULT_VIRTUAL_THRESHOLD
    estimated_row_height: float = DEFAULT_ROW_HEIGHT
    overscan: int = DEFAULT_OVERSCAN
    column_resize_mode: Optional[ResizeMode] = None
    row_selection: bool = False
    column_visibility: Dict[str, bool] = Field(default_factory=dict)
    empty_message: Optional[str] = None
    sticky_header: bool = False
    filter_debounce: float = DEFAULT_FILTER_DEBOUNCE
    caption: Any = None

    row_key: OptCallable = None
    cell_style: OptCallable = None
    row_style: OptCallable = None
    header_style: OptCallable = None
    cell_class: OptCallable = None
    row_class: OptCallable = None
    header_class: OptCallable = None

    on_select_row: OptCallable = None
    column_visibility_change: OptCallable = None
    on_sort: OptCallable = None
    on_page_change: OptCallable = None
    on_column_resize: OptCallable = None

    @field_validator("page_size", "estimated_row_height", mode="before")
    @classmethod
    def validate_positive(cls, v, info):
        """Sizes below 1 become 1."""
        return _clamp(info.field_name, v, 1)

    @field_validator(
        "overscan", "virtual_threshold", "filter_debounce", mode="before"
    )
    @classmethod
    def validate_non_negative(cls, v, info):
        """Negative counts and delays become 0."""
        return _clamp(info.field_name, v, 0)

    def style_provider(self) -> CallbackStyleProvider:
        """Create the style provider from the style and class callables."""
        return CallbackStyleProvider(
            row_style_fn=self.row_style,
            cell_style_fn=self.cell_style,
            header_style_fn=self.header_style,
            row_class_fn=self.row_class,
            cell_class_fn=self.cell_class,
            header_class_fn=self.header_class,
        )


def field_names(values: Dict[str, Any]) -> Dict[str, Any]:
    """Key the options by field name, whether given by name or by alias."""
    by_alias = {
        info.alias: name
        for name, info in GridOptions.model_fields.items()
        if info.alias
    }
    return {by_alias.get(key, key): value for key, value in values.items()}


def make_options(
    data: Optional[Dict[str, Any]] = None, **kwargs
) -> GridOptions:
    """Validate options given as a mapping and/or keyword arguments.

    Args:
        data: Options by name or alias.
        **kwargs: More options; these take precedence over `data`.

    Returns:
        The validated options.

    Raises:
        GridConfigError: The options are not valid.
    """
    merged = field_names(data or {})
    merged.update(field_names(kwargs))
    try:
        return GridOptions.model_validate(merged)
    except ValidationError as exc:
        raise GridConfigError(f"Invalid grid options: {exc}") from exc


def load_options(
    path: Union[str, "os.PathLike[str]"], **kwargs
) -> GridOptions:
    """Read the options from a YAML file.

    Args:
        path: The file to read.
        **kwargs: Options that override the ones in the file; callables
            can only be given this way.

    Returns:
        The validated options.

    Raises:
        GridConfigError: The file does not contain a mapping or the
            options are not valid.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise GridConfigError(
            f"Options file {path} should contain a mapping, "
            f"not {type(data).__name__}"
        )
    logger.debug("Loaded %d options from %s", len(data), path)
    return make_options(data, **kwargs)
