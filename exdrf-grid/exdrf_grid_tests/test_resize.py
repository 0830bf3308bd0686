from unittest.mock import MagicMock, call

import pytest

from exdrf_grid.column import ColumnModel, GridColumn
from exdrf_grid.constants import ResizeMode
from exdrf_grid.resize import IDLE, Dragging, ResizeController


@pytest.fixture
def model():
    return ColumnModel(
        [
            GridColumn(id="a", width=100, min_width=20),
            GridColumn(id="b", width=80, resizable=False),
        ]
    )


def make(model, mode):
    spy = MagicMock()
    return ResizeController(model, mode=mode, on_column_resize=spy), spy


class TestResizeController:
    def test_disabled(self, model):
        ctrl, spy = make(model, None)
        assert not ctrl.enabled
        assert not ctrl.has_handle(model["a"])
        assert ctrl.pointer_down("a", 0) is False
        assert ctrl.state is IDLE

    def test_mode_from_text(self, model):
        ctrl, _ = make(model, "onEnd")
        assert ctrl.mode == ResizeMode.ON_END

    def test_on_change(self, model):
        ctrl, spy = make(model, ResizeMode.ON_CHANGE)
        assert ctrl.pointer_down("a", 100)
        assert ctrl.dragging
        assert ctrl.pointer_move(130) == 130
        assert model["a"].width == 130
        assert ctrl.pointer_move(150) == 150
        assert model["a"].width == 150
        assert ctrl.pointer_up() == 150
        assert ctrl.state is IDLE
        assert spy.call_args_list == [call("a", 130), call("a", 150)]

    def test_on_end(self, model):
        ctrl, spy = make(model, ResizeMode.ON_END)
        ctrl.pointer_down("a", 100)
        ctrl.pointer_move(130)
        ctrl.pointer_move(150)
        assert model["a"].width == 100
        assert ctrl.staged_width("a") == 150
        assert ctrl.staged_width("b") is None
        spy.assert_not_called()

        assert ctrl.pointer_up() == 150
        assert model["a"].width == 150
        spy.assert_called_once_with("a", 150)
        assert ctrl.staged_width("a") is None

    def test_release_position(self, model):
        ctrl, spy = make(model, ResizeMode.ON_END)
        ctrl.pointer_down("a", 100)
        assert ctrl.pointer_up(x=90) == 90
        spy.assert_called_once_with("a", 90)

    def test_min_width(self, model):
        ctrl, _ = make(model, ResizeMode.ON_CHANGE)
        ctrl.pointer_down("a", 200)
        assert ctrl.pointer_move(0) == 20
        assert model["a"].width == 20

    def test_cancel_restores(self, model):
        ctrl, spy = make(model, ResizeMode.ON_CHANGE)
        ctrl.pointer_down("a", 100)
        ctrl.pointer_move(160)
        ctrl.cancel()
        assert ctrl.state is IDLE
        assert model["a"].width == 100
        assert spy.call_args_list[-1] == call("a", 100)

    def test_cancel_on_end_discards(self, model):
        ctrl, spy = make(model, ResizeMode.ON_END)
        ctrl.pointer_down("a", 100)
        ctrl.pointer_move(160)
        ctrl.cancel()
        assert model["a"].width == 100
        spy.assert_not_called()

    def test_not_resizable(self, model):
        ctrl, _ = make(model, ResizeMode.ON_CHANGE)
        assert not ctrl.has_handle(model["b"])
        assert ctrl.pointer_down("b", 0) is False
        assert ctrl.pointer_down("nope", 0) is False

    def test_single_drag(self, model):
        model.add_column(GridColumn(id="c"))
        ctrl, _ = make(model, ResizeMode.ON_CHANGE)
        assert ctrl.pointer_down("a", 0)
        assert ctrl.pointer_down("c", 0) is False
        assert isinstance(ctrl.state, Dragging)
        assert ctrl.state.column_id == "a"

    def test_idle_events(self, model):
        ctrl, spy = make(model, ResizeMode.ON_CHANGE)
        assert ctrl.pointer_move(10) is None
        assert ctrl.pointer_up() is None
        ctrl.cancel()
        spy.assert_not_called()

    def test_no_change_no_notification(self, model):
        ctrl, spy = make(model, ResizeMode.ON_END)
        ctrl.pointer_down("a", 100)
        ctrl.pointer_up(100)
        spy.assert_not_called()
