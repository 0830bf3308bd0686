from exdrf_grid import api


def test_public_names():
    grid = api.DataGrid.create(
        [api.GridColumn(id="name")],
        [{"name": "b"}, {"name": "a"}],
        scheduler=api.ManualScheduler(),
        enableSorting=True,
    )
    grid.click_header("name")
    model = grid.render()
    assert isinstance(model, api.RenderModel)
    assert [r.data["name"] for r in model.rows] == ["a", "b"]
    assert model.sort.direction == api.SortDirection.ASCENDING
