import csv
import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import click
import yaml
from dotenv import load_dotenv

from exdrf_grid.column import ColumnModel, GridColumn
from exdrf_grid.constants import SortDirection
from exdrf_grid.errors import GridConfigError
from exdrf_grid.grid import DataGrid
from exdrf_grid.options import GridOptions, load_options, make_options
from exdrf_grid.render_model import RenderModel
from exdrf_grid.timers import ManualScheduler

logger = logging.getLogger(__name__)

OPTIONS_ENV = "EXDRF_GRID_OPTIONS"
MAX_CELL_WIDTH = 40
SORT_MARKS = {
    SortDirection.NONE: "",
    SortDirection.ASCENDING: " ^",
    SortDirection.DESCENDING: " v",
}


def create_context_obj(debug: bool):
    """Sets up the logging and prepares the context for the CLI.

    Args:
        debug: If True, sets the logging level to DEBUG.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="[%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.debug("Debug mode is on")
    return {"debug": debug}


def read_records(path: str) -> List[Dict[str, Any]]:
    """Read a list of records from a CSV, JSON or YAML file."""
    ext = os.path.splitext(path)[1].lower()
    with open(path, "r", encoding="utf-8", newline="") as f:
        if ext == ".csv":
            data: Any = list(csv.DictReader(f))
        elif ext == ".json":
            data = json.load(f)
        elif ext in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            raise click.ClickException(f"Unsupported data file: {path}")

    if data is None:
        return []
    if not isinstance(data, list) or not all(
        isinstance(item, dict) for item in data
    ):
        raise click.ClickException(f"{path} should contain a list of records")
    return [{str(k): v for k, v in item.items()} for item in data]


def columns_for(records: List[Dict[str, Any]]) -> ColumnModel:
    """Create one column for each key found in the records."""
    ids: List[str] = []
    for record in records:
        for key in record:
            if str(key) not in ids:
                ids.append(str(key))
    return ColumnModel([GridColumn(id=i) for i in ids])


def parse_filters(values: Tuple[str, ...]) -> Dict[str, str]:
    result = {}
    for value in values:
        column_id, sep, text = value.partition("=")
        if not sep or not column_id:
            raise click.BadParameter(
                f"expected COLUMN=TEXT, got {value!r}", param_hint="--filter"
            )
        result[column_id] = text
    return result


def _text(value: Any) -> str:
    text = "" if value is None else str(value)
    if len(text) > MAX_CELL_WIDTH:
        text = text[: MAX_CELL_WIDTH - 3] + "..."
    return text


def format_table(model: RenderModel) -> str:
    """Lay out a render model as a plain text table."""
    titles = [
        _text(h.title) + SORT_MARKS[h.sort_direction] for h in model.headers
    ]
    body = [[_text(c.value) for c in row.cells] for row in model.rows]
    widths = [len(t) for t in titles]
    for cells in body:
        for i, text in enumerate(cells):
            widths[i] = max(widths[i], len(text))

    def line(cells: List[str]) -> str:
        return " | ".join(c.ljust(w) for c, w in zip(cells, widths)).rstrip()

    lines = []
    if model.caption:
        lines.append(str(model.caption))
    lines.append(line(titles))
    lines.append("-+-".join("-" * w for w in widths))
    if model.empty_message is not None:
        lines.append(model.empty_message)
    for cells in body:
        lines.append(line(cells))
    if model.pagination is not None:
        p = model.pagination
        lines.append(
            f"{p.label} (page {p.page_index + 1} of {p.page_count})"
        )
    return "\n".join(lines)


@click.group()
@click.option("--debug/--no-debug", default=False)
@click.pass_context
def cli(context: click.Context, debug: bool):
    load_dotenv()
    context.obj = create_context_obj(debug)


@cli.command()
@click.argument("data", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--options",
    "options_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help=f"YAML file with grid options; defaults to ${OPTIONS_ENV}.",
)
@click.option("--filter", "filters", multiple=True, help="COLUMN=TEXT")
@click.option("--sort", "sort_by", default=None, help="Column to sort by.")
@click.option("--desc", is_flag=True, default=False, help="Sort descending.")
@click.option("--page", type=int, default=None, help="1-based page number.")
@click.option("--page-size", type=int, default=None)
@click.option("--hide", multiple=True, help="Column to hide.")
@click.option("--empty-message", default=None)
def show(
    data: str,
    options_file: Optional[str],
    filters: Tuple[str, ...],
    sort_by: Optional[str],
    desc: bool,
    page: Optional[int],
    page_size: Optional[int],
    hide: Tuple[str, ...],
    empty_message: Optional[str],
):
    """Print the rows of a CSV, JSON or YAML file as a table."""
    records = read_records(data)
    columns = columns_for(records)
    filter_map = parse_filters(filters)

    overrides: Dict[str, Any] = {}
    if filter_map:
        overrides["enable_column_filtering"] = True
    if sort_by:
        overrides["enable_sorting"] = True
    if page is not None or page_size is not None:
        overrides["enable_pagination"] = True
    if page_size is not None:
        overrides["page_size"] = page_size
    if empty_message is not None:
        overrides["empty_message"] = empty_message

    options_file = options_file or os.environ.get(OPTIONS_ENV) or None
    try:
        if options_file:
            options: GridOptions = load_options(options_file, **overrides)
        else:
            options = make_options(overrides)
    except GridConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    grid = DataGrid(
        columns=columns, options=options, scheduler=ManualScheduler()
    )
    grid.set_rows(records)
    for column_id in hide:
        grid.set_column_visible(column_id, False)
    for column_id, text in filter_map.items():
        grid.set_filter(column_id, text)
    if sort_by:
        if sort_by not in columns:
            raise click.BadParameter(
                f"unknown column {sort_by!r}", param_hint="--sort"
            )
        grid.click_header(sort_by)
        if desc:
            grid.click_header(sort_by)
    if page is not None:
        grid.go_to_page(page - 1)

    click.echo(format_table(grid.render()))
    grid.close()


if __name__ == "__main__":
    cli()
