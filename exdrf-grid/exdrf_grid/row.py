import logging
from typing import Any, Callable, Hashable, Iterable, List, Optional

from attrs import frozen

logger = logging.getLogger(__name__)

RowKeyType = Callable[[Any, int], Hashable]


@frozen
class GridRow:
    """A caller record together with its identity.

    Attributes:
        key: The stable identity of the row, used for selection.
        index: The position of the record in the raw row set.
        data: The caller's record. The engine never changes it.
    """

    key: Hashable
    index: int
    data: Any


def make_rows(
    records: Iterable[Any], row_key: Optional[RowKeyType] = None
) -> List[GridRow]:
    """Wrap caller records into rows.

    Args:
        records: The raw records.
        row_key: Computes the identity of a record from the record and its
            index. The index is used when not provided.

    Returns:
        The rows, in the order of the records.
    """
    result = []
    seen = set()
    for i, data in enumerate(records):
        key = i if row_key is None else row_key(data, i)
        if key in seen:
            logger.warning("Duplicate row key %r at index %d", key, i)
        seen.add(key)
        result.append(GridRow(key=key, index=i, data=data))
    return result
