from pyrsistent import pvector

from exdrf_grid.column import GridColumn
from exdrf_grid.row import GridRow
from exdrf_grid.style import (
    EMPTY_STYLE,
    CallbackStyleProvider,
    NullStyleProvider,
    StyleResolver,
    normalize_classes,
)


def test_normalize_classes():
    assert normalize_classes(None) == pvector()
    assert normalize_classes("") == pvector()
    assert normalize_classes("a b  a") == pvector(["a", "b"])
    assert normalize_classes(["x", "y z", "x"]) == pvector(["x", "y", "z"])


class TestStyleResolver:
    row = GridRow(key=1, index=0, data={"weight": 12, "name": "box"})
    column = GridColumn(id="weight")

    def test_null_provider(self):
        resolver = StyleResolver(NullStyleProvider())
        assert resolver.resolve_header(self.column) is EMPTY_STYLE
        assert resolver.resolve_row(self.row) is EMPTY_STYLE
        assert resolver.resolve_cell(self.row, self.column) is EMPTY_STYLE

    def test_default_provider(self):
        assert StyleResolver().resolve_row(self.row) is EMPTY_STYLE

    def test_callbacks_receive_record(self):
        seen = []

        def cell_class(data, column):
            seen.append((data, column.id))
            return "heavy" if data[column.id] > 10 else None

        resolver = StyleResolver(
            CallbackStyleProvider(
                row_style_fn=lambda data: {"color": "red"},
                cell_class_fn=cell_class,
                header_class_fn=lambda column: ["hdr", f"hdr-{column.id}"],
            )
        )
        cell = resolver.resolve_cell(self.row, self.column)
        assert list(cell.class_list) == ["heavy"]
        assert dict(cell.style) == {}
        assert seen == [(self.row.data, "weight")]

        row = resolver.resolve_row(self.row)
        assert dict(row.style) == {"color": "red"}
        assert list(row.class_list) == []

        header = resolver.resolve_header(self.column)
        assert list(header.class_list) == ["hdr", "hdr-weight"]

    def test_style_is_copied(self):
        style = {"width": "10px"}
        resolver = StyleResolver(
            CallbackStyleProvider(header_style_fn=lambda column: style)
        )
        resolved = resolver.resolve_header(self.column)
        style["width"] = "20px"
        assert resolved.style["width"] == "10px"
