from unittest.mock import MagicMock

from exdrf_grid.column import ColumnModel, GridColumn
from exdrf_grid.filtering import (
    FilterDebouncer,
    FilterEngine,
    FilterState,
    normalize_filter_value,
)
from exdrf_grid.row import make_rows


def ids_of(rows):
    return [r.data["id"] for r in rows]


class TestNormalize:
    def test_empty_values(self):
        assert normalize_filter_value(None) is None
        assert normalize_filter_value("") is None
        assert normalize_filter_value([]) is None

    def test_text(self):
        assert normalize_filter_value("ab") == "ab"

    def test_collections(self):
        assert normalize_filter_value(["a", "b", "a"]) == frozenset({"a", "b"})
        assert normalize_filter_value(5) == frozenset({5})


class TestFilterState:
    def test_set_and_remove(self):
        state = FilterState().set("a", "x")
        assert state.get("a") == "x"
        assert len(state) == 1
        assert not state.set("a", "")
        assert state.set("b", None) is state

    def test_immutable(self):
        state = FilterState()
        state.set("a", "x")
        assert not state

    def test_from_mapping(self):
        state = FilterState.from_mapping({"a": "x", "b": ["1", "2"], "c": ""})
        assert dict(state.values) == {"a": "x", "b": frozenset({"1", "2"})}


class TestFilterEngine:
    def test_no_filter_is_identity(self, rows, columns):
        assert FilterEngine().apply(rows, columns, FilterState()) == rows

    def test_empty_rows(self, columns):
        state = FilterState().set("destination", "oslo")
        assert FilterEngine().apply([], columns, state) == []

    def test_text_is_case_insensitive(self, rows, columns):
        state = FilterState().set("destination", "OSL")
        result = FilterEngine().apply(rows, columns, state)
        assert ids_of(result) == [1, 6, 11, 16, 21]

    def test_set_is_or(self, rows, columns):
        state = FilterState().set("destination", {"Oslo", "Bergen"})
        result = FilterEngine().apply(rows, columns, state)
        assert ids_of(result) == [1, 5, 6, 10, 11, 15, 16, 20, 21, 25]

    def test_columns_are_and(self, rows, columns):
        state = (
            FilterState()
            .set("destination", "oslo")
            .set("cargoId", "C-01")
        )
        result = FilterEngine().apply(rows, columns, state)
        assert ids_of(result) == [11, 16]

    def test_every_row_passes_every_filter(self, rows, columns):
        engine = FilterEngine()
        state = FilterState().set("destination", "er").set("weight", {1, 2, 3})
        result = engine.apply(rows, columns, state)
        assert len(result) <= len(rows)
        for row in result:
            assert "er" in row.data["destination"].lower()
            assert row.data["weight"] in {1, 2, 3}

    def test_unknown_and_locked_columns_are_ignored(self, rows):
        columns = ColumnModel(
            [
                GridColumn(id="id"),
                GridColumn(id="destination", filterable=False),
            ]
        )
        state = FilterState().set("destination", "oslo").set("nope", "x")
        assert FilterEngine().apply(rows, columns, state) == rows

    def test_missing_value_is_empty_text(self):
        columns = ColumnModel([GridColumn(id="name")])
        rows = make_rows([{"name": "abc"}, {}, {"name": None}])
        engine = FilterEngine()
        by_text = engine.apply(rows, columns, FilterState().set("name", "a"))
        assert len(by_text) == 1
        by_empty = engine.apply(rows, columns, FilterState().set("name", {""}))
        assert [r.index for r in by_empty] == [1, 2]

    def test_set_matches_text_of_value(self):
        engine = FilterEngine()
        assert engine.matches(3, frozenset({"3"}))
        assert engine.matches(3, frozenset({3}))
        assert not engine.matches(4, frozenset({"3"}))

    def test_unhashable_value(self):
        engine = FilterEngine()
        assert engine.matches([1], frozenset({"[1]"}))
        assert not engine.matches([2], frozenset({"[1]"}))

    def test_available_values(self, rows, columns):
        engine = FilterEngine()
        values = engine.available_values(rows, columns["destination"])
        assert values == [
            "Oslo",
            "Stavanger",
            "Trondheim",
            "Hammerfest",
            "Bergen",
        ]

    def test_available_values_skip_missing(self):
        column = GridColumn(id="v")
        rows = make_rows([{"v": 1}, {}, {"v": 1}, {"v": [2]}, {"v": [2]}])
        assert FilterEngine().available_values(rows, column) == [1, [2]]


class TestFilterDebouncer:
    def make(self, scheduler, delay=0.5):
        on_commit = MagicMock()
        return (
            FilterDebouncer(
                scheduler=scheduler, on_commit=on_commit, delay=delay
            ),
            on_commit,
        )

    def test_only_last_keystroke_commits(self, scheduler):
        debouncer, on_commit = self.make(scheduler)
        for text in ("o", "os", "osl"):
            debouncer.keystroke("destination", text)
            scheduler.advance(0.2)
        on_commit.assert_not_called()
        assert debouncer.pending_text("destination") == "osl"

        scheduler.advance(0.5)
        on_commit.assert_called_once_with("destination", "osl")
        assert debouncer.pending == {}

    def test_columns_are_independent(self, scheduler):
        debouncer, on_commit = self.make(scheduler)
        debouncer.keystroke("a", "1")
        debouncer.keystroke("b", "2")
        scheduler.advance(1)
        assert on_commit.call_count == 2

    def test_flush(self, scheduler):
        debouncer, on_commit = self.make(scheduler)
        debouncer.keystroke("a", "x")
        debouncer.flush()
        on_commit.assert_called_once_with("a", "x")
        scheduler.advance(1)
        assert on_commit.call_count == 1

    def test_cancel(self, scheduler):
        debouncer, on_commit = self.make(scheduler)
        debouncer.keystroke("a", "x")
        assert debouncer.cancel("a") is True
        assert debouncer.cancel("a") is False
        scheduler.advance(1)
        on_commit.assert_not_called()

    def test_cancel_all(self, scheduler):
        debouncer, on_commit = self.make(scheduler)
        debouncer.keystroke("a", "x")
        debouncer.keystroke("b", "y")
        debouncer.cancel_all()
        scheduler.advance(1)
        on_commit.assert_not_called()
        assert debouncer.pending == {}

    def test_stale_timer_does_not_commit(self):
        scheduler = MagicMock()
        debouncer, on_commit = self.make(scheduler)
        debouncer.keystroke("a", "x")
        first = scheduler.schedule.call_args.args[2]
        debouncer.keystroke("a", "xy")
        latest = scheduler.schedule.call_args.args[2]

        # The first timer fires late, after the second keystroke.
        first()
        on_commit.assert_not_called()
        assert debouncer.pending_text("a") == "xy"

        latest()
        on_commit.assert_called_once_with("a", "xy")

    def test_cancelled_timer_does_not_commit(self):
        scheduler = MagicMock()
        debouncer, on_commit = self.make(scheduler)
        debouncer.keystroke("a", "x")
        fire = scheduler.schedule.call_args.args[2]
        debouncer.cancel("a")
        debouncer.keystroke("a", "y")
        fire()
        on_commit.assert_not_called()

    def test_custom_delay(self, scheduler):
        debouncer, on_commit = self.make(scheduler, delay=2)
        debouncer.keystroke("a", "x")
        scheduler.advance(1.5)
        on_commit.assert_not_called()
        scheduler.advance(1)
        on_commit.assert_called_once_with("a", "x")
