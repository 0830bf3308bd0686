from exdrf_grid.column import ColumnModel, GridColumn  # noqa: F401
from exdrf_grid.composer import ViewComposer  # noqa: F401
from exdrf_grid.constants import ResizeMode, SortDirection  # noqa: F401
from exdrf_grid.errors import (  # noqa: F401
    DuplicateColumnError,
    GridConfigError,
)
from exdrf_grid.filtering import (  # noqa: F401
    FilterDebouncer,
    FilterEngine,
    FilterState,
)
from exdrf_grid.grid import DataGrid  # noqa: F401
from exdrf_grid.options import (  # noqa: F401
    GridOptions,
    load_options,
    make_options,
)
from exdrf_grid.pagination import (  # noqa: F401
    PageSummary,
    PaginationEngine,
    PaginationState,
)
from exdrf_grid.render_model import (  # noqa: F401
    CellModel,
    HeaderDescriptor,
    RenderModel,
    RowModel,
    VirtualPadding,
)
from exdrf_grid.resize import Dragging, Idle, ResizeController  # noqa: F401
from exdrf_grid.row import GridRow, make_rows  # noqa: F401
from exdrf_grid.selection import SelectionController  # noqa: F401
from exdrf_grid.sorting import (  # noqa: F401
    SortEngine,
    SortState,
    next_sort_state,
)
from exdrf_grid.state import GridState  # noqa: F401
from exdrf_grid.style import (  # noqa: F401
    CallbackStyleProvider,
    NullStyleProvider,
    StyleProvider,
    StyleResolver,
)
from exdrf_grid.timers import (  # noqa: F401
    AsyncioScheduler,
    ManualScheduler,
    Scheduler,
    ThreadingScheduler,
)
from exdrf_grid.virtualization import (  # noqa: F401
    VirtualizationEngine,
    VirtualizationState,
    VirtualWindow,
)
