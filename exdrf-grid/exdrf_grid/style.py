"""Caller supplied styles and classes for headers, rows and cells."""

import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, Union

from attrs import define, field, frozen
from pyrsistent import pmap, pvector
from pyrsistent.typing import PMap, PVector

from exdrf_grid.column import GridColumn
from exdrf_grid.row import GridRow

logger = logging.getLogger(__name__)

StyleMap = Mapping[str, Any]
ClassList = Union[str, Iterable[str], None]


class StyleProvider(Protocol):
    """Protocol for objects that decide how headers, rows and cells look.

    Row and cell methods receive the caller's record, not the engine row.
    """

    def row_style(self, data: Any) -> Optional[StyleMap]: ...

    def cell_style(
        self, data: Any, column: GridColumn
    ) -> Optional[StyleMap]: ...

    def header_style(self, column: GridColumn) -> Optional[StyleMap]: ...

    def row_class(self, data: Any) -> ClassList: ...

    def cell_class(self, data: Any, column: GridColumn) -> ClassList: ...

    def header_class(self, column: GridColumn) -> ClassList: ...


class NullStyleProvider:
    """A provider that contributes nothing."""

    def row_style(self, data: Any) -> Optional[StyleMap]:
        return None

    def cell_style(self, data: Any, column: GridColumn) -> Optional[StyleMap]:
        return None

    def header_style(self, column: GridColumn) -> Optional[StyleMap]:
        return None

    def row_class(self, data: Any) -> ClassList:
        return None

    def cell_class(self, data: Any, column: GridColumn) -> ClassList:
        return None

    def header_class(self, column: GridColumn) -> ClassList:
        return None


@define
class CallbackStyleProvider:
    """A provider built from loose callables; missing ones contribute nothing.

    Attributes:
        row_style_fn: `(data) -> style mapping`.
        cell_style_fn: `(data, column) -> style mapping`.
        header_style_fn: `(column) -> style mapping`.
        row_class_fn: `(data) -> class name(s)`.
        cell_class_fn: `(data, column) -> class name(s)`.
        header_class_fn: `(column) -> class name(s)`.
    """

    row_style_fn: Optional[Callable[[Any], Optional[StyleMap]]] = None
    cell_style_fn: Optional[Callable[[Any, GridColumn], Optional[StyleMap]]] = (
        None
    )
    header_style_fn: Optional[Callable[[GridColumn], Optional[StyleMap]]] = (
        None
    )
    row_class_fn: Optional[Callable[[Any], ClassList]] = None
    cell_class_fn: Optional[Callable[[Any, GridColumn], ClassList]] = None
    header_class_fn: Optional[Callable[[GridColumn], ClassList]] = None

    def row_style(self, data: Any) -> Optional[StyleMap]:
        return self.row_style_fn(data) if self.row_style_fn else None

    def cell_style(self, data: Any, column: GridColumn) -> Optional[StyleMap]:
        return self.cell_style_fn(data, column) if self.cell_style_fn else None

    def header_style(self, column: GridColumn) -> Optional[StyleMap]:
        return self.header_style_fn(column) if self.header_style_fn else None

    def row_class(self, data: Any) -> ClassList:
        return self.row_class_fn(data) if self.row_class_fn else None

    def cell_class(self, data: Any, column: GridColumn) -> ClassList:
        return self.cell_class_fn(data, column) if self.cell_class_fn else None

    def header_class(self, column: GridColumn) -> ClassList:
        return self.header_class_fn(column) if self.header_class_fn else None


def normalize_classes(value: ClassList) -> PVector[str]:
    """Turn a class contribution into a list of distinct class names.

    Args:
        value: None, a space separated string or an iterable of names.

    Returns:
        The names, in first-seen order.
    """
    if not value:
        return pvector()
    if isinstance(value, str):
        parts: Iterable[str] = value.split()
    else:
        parts = (p for item in value for p in str(item).split())
    result = []
    for part in parts:
        if part not in result:
            result.append(part)
    return pvector(result)


@frozen
class ResolvedStyle:
    """The style and classes of one header, row or cell.

    Attributes:
        style: Style property name to value.
        class_list: Class names.
    """

    style: PMap[str, Any] = field(factory=pmap)
    class_list: PVector[str] = field(factory=pvector)


EMPTY_STYLE = ResolvedStyle()


@define
class StyleResolver:
    """Asks the style provider about every header, row and cell.

    Attributes:
        provider: The source of styles and classes.
    """

    provider: StyleProvider = field(factory=NullStyleProvider)

    @staticmethod
    def _make(style: Optional[StyleMap], classes: ClassList) -> ResolvedStyle:
        if not style and not classes:
            return EMPTY_STYLE
        return ResolvedStyle(
            style=pmap(style or {}), class_list=normalize_classes(classes)
        )

    def resolve_header(self, column: GridColumn) -> ResolvedStyle:
        return self._make(
            self.provider.header_style(column),
            self.provider.header_class(column),
        )

    def resolve_row(self, row: GridRow) -> ResolvedStyle:
        return self._make(
            self.provider.row_style(row.data),
            self.provider.row_class(row.data),
        )

    def resolve_cell(self, row: GridRow, column: GridColumn) -> ResolvedStyle:
        return self._make(
            self.provider.cell_style(row.data, column),
            self.provider.cell_class(row.data, column),
        )
