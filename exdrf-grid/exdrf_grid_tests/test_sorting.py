from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from exdrf_grid.column import ColumnModel, GridColumn
from exdrf_grid.constants import SortDirection
from exdrf_grid.row import make_rows
from exdrf_grid.sorting import (
    SortEngine,
    SortState,
    next_sort_state,
    sort_key,
)


def values_of(rows, key):
    return [r.data.get(key) for r in rows]


class TestNextSortState:
    def test_cycle(self):
        column = GridColumn(id="a")
        state = SortState()
        seen = []
        for _ in range(6):
            state = next_sort_state(state, column)
            seen.append(state.direction)
        assert seen == [
            SortDirection.ASCENDING,
            SortDirection.DESCENDING,
            SortDirection.NONE,
        ] * 2

    def test_none_clears_column(self):
        column = GridColumn(id="a")
        state = SortState(column_id="a", direction=SortDirection.DESCENDING)
        assert next_sort_state(state, column) == SortState()

    def test_other_column_starts_ascending(self):
        state = SortState(column_id="a", direction=SortDirection.DESCENDING)
        result = next_sort_state(state, GridColumn(id="b"))
        assert result == SortState(
            column_id="b", direction=SortDirection.ASCENDING
        )

    def test_not_sortable(self):
        state = SortState(column_id="a", direction=SortDirection.ASCENDING)
        column = GridColumn(id="b", sortable=False)
        assert next_sort_state(state, column) is state

    def test_direction_of(self):
        state = SortState(column_id="a", direction=SortDirection.ASCENDING)
        assert state.active
        assert state.direction_of("a") == SortDirection.ASCENDING
        assert state.direction_of("b") == SortDirection.NONE
        assert not SortState().active


class TestSortKey:
    def test_none_is_lowest(self):
        values = ["b", 3, None, date(2024, 1, 1)]
        ordered = sorted(values, key=sort_key)
        assert ordered == [None, 3, date(2024, 1, 1), "b"]

    def test_text_ignores_case(self):
        assert sorted(["b", "A", "a", "C"], key=sort_key) == [
            "A",
            "a",
            "b",
            "C",
        ]

    def test_dates_and_datetimes(self):
        day = date(2024, 3, 1)
        later = datetime(2024, 3, 1, 10, 0)
        aware = datetime(2024, 2, 29, 23, 0, tzinfo=timezone.utc)
        assert sorted([later, day, aware], key=sort_key) == [aware, day, later]

    def test_nan(self):
        ordered = sorted([1.0, float("nan"), None, -5], key=sort_key)
        assert ordered[0] is None
        assert ordered[1] != ordered[1]
        assert ordered[2:] == [-5, 1.0]

    def test_decimals_are_numbers(self):
        values = [Decimal("100"), Decimal("9"), Decimal("10")]
        assert sorted(values, key=sort_key) == [
            Decimal("9"),
            Decimal("10"),
            Decimal("100"),
        ]

    def test_mixed_numbers(self):
        values = [Decimal("2.5"), 3, None, 1.5, Decimal("NaN"), -1]
        ordered = sorted(values, key=sort_key)
        assert ordered[0] is None
        assert ordered[1].is_nan()
        assert ordered[2:] == [-1, 1.5, Decimal("2.5"), 3]

    def test_other_values(self):
        assert sort_key((1, 2))[0] > sort_key("zzz")[0]


class TestSortEngine:
    @pytest.fixture
    def model(self):
        return ColumnModel(
            [GridColumn(id="n"), GridColumn(id="tag"), GridColumn(id="x")]
        )

    @pytest.fixture
    def data(self):
        return make_rows(
            [
                {"n": 2, "tag": "first"},
                {"n": 1, "tag": "second"},
                {"n": None, "tag": "third"},
                {"n": 2, "tag": "fourth"},
                {"n": 1, "tag": "fifth"},
            ]
        )

    def test_inactive_keeps_order(self, data, model):
        assert SortEngine().apply(data, model, SortState()) == data

    def test_ascending_is_stable(self, data, model):
        state = SortState(column_id="n", direction=SortDirection.ASCENDING)
        result = SortEngine().apply(data, model, state)
        assert values_of(result, "tag") == [
            "third",
            "second",
            "fifth",
            "first",
            "fourth",
        ]

    def test_descending_is_stable(self, data, model):
        state = SortState(column_id="n", direction=SortDirection.DESCENDING)
        result = SortEngine().apply(data, model, state)
        assert values_of(result, "tag") == [
            "first",
            "fourth",
            "second",
            "fifth",
            "third",
        ]

    def test_does_not_change_input(self, data, model):
        before = list(data)
        state = SortState(column_id="n", direction=SortDirection.ASCENDING)
        SortEngine().apply(data, model, state)
        assert data == before

    def test_missing_values(self, data, model):
        state = SortState(column_id="x", direction=SortDirection.ASCENDING)
        assert SortEngine().apply(data, model, state) == data

    def test_unknown_column(self, data, model):
        state = SortState(column_id="nope", direction=SortDirection.ASCENDING)
        assert SortEngine().apply(data, model, state) == data

    def test_decimal_column(self):
        model = ColumnModel([GridColumn(id="price")])
        data = make_rows([{"price": Decimal(v)} for v in ("9", "10", "100")])
        state = SortState(
            column_id="price", direction=SortDirection.DESCENDING
        )
        result = SortEngine().apply(data, model, state)
        assert values_of(result, "price") == [
            Decimal("100"),
            Decimal("10"),
            Decimal("9"),
        ]

    def test_cargo_dates(self, rows, columns):
        state = SortState(
            column_id="arrival", direction=SortDirection.ASCENDING
        )
        result = SortEngine().apply(rows, columns, state)
        arrivals = values_of(result, "arrival")
        assert arrivals == sorted(arrivals)
        assert arrivals[0] >= date(2024, 1, 1)
        assert arrivals[-1] <= date(2024, 1, 1) + timedelta(days=29)
