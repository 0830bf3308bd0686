from datetime import date, timedelta
from unittest.mock import MagicMock

from pytest import fixture

from exdrf_grid.column import ColumnModel, GridColumn
from exdrf_grid.row import make_rows
from exdrf_grid.timers import ManualScheduler

DESTINATIONS = ["Bergen", "Oslo", "Stavanger", "Trondheim", "Hammerfest"]


def make_cargo(count: int):
    """Cargo records; ids start at 1."""
    return [
        {
            "id": i,
            "cargoId": f"C-{i:03d}",
            "destination": DESTINATIONS[i % len(DESTINATIONS)],
            "weight": (i * 37) % 11,
            "arrival": date(2024, 1, 1) + timedelta(days=(i * 7) % 30),
        }
        for i in range(1, count + 1)
    ]


@fixture
def records():
    """Fixture with 25 cargo records."""
    return make_cargo(25)


@fixture
def rows(records):
    return make_rows(records)


@fixture
def columns():
    """Fixture with the column model of the cargo records."""
    return ColumnModel(
        [
            GridColumn(id="id", title="Id"),
            GridColumn(id="cargoId", title="Cargo"),
            GridColumn(id="destination", title="Destination"),
            GridColumn(id="weight", title="Weight"),
            GridColumn(id="arrival", title="Arrival", resizable=False),
        ]
    )


@fixture
def scheduler():
    return ManualScheduler()


@fixture
def spy():
    return MagicMock()
