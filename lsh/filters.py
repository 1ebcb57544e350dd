"""
Filter stages (``where``, ``sort-by``).

A filter takes the live table of the previous stage plus its own argument
tokens, consumes that table, and returns a new one with the same headers.
Bad arguments raise ``FilterError``; the executor then aborts the pipeline.
"""

import logging
import operator
from typing import Callable, List

from .errors import FilterError
from .registry import Registry
from .structured import DataValue, Table, ValueType, extract_size_bytes, parse_size

logger = logging.getLogger(__name__)

Filter = Callable[[Table, List[str]], Table]

OPERATORS = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
}

WHERE_USAGE = (
    "Usage: ... | where FIELD OPERATOR VALUE\n"
    "  e.g.: ls | where size > 10kb"
)
SORT_USAGE = (
    "Usage: ... | sort-by FIELD [asc|desc]\n"
    "  e.g.: ps | sort-by memory desc"
)


def _field_index(table: Table, field: str, name: str) -> int:
    idx = table.column_index(field)
    if idx is None:
        raise FilterError(
            f"{name}: unknown field '{field}'\nAvailable fields: " + ", ".join(table.headers)
        )
    return idx


def _number(text: str, kind: ValueType):
    try:
        return int(text) if kind is ValueType.INT else float(text)
    except ValueError:
        raise FilterError(f"where: '{text}' is not a number", usage=WHERE_USAGE)


def build_predicate(table: Table, field: str, op: str, value: str) -> Callable[[DataValue], bool]:
    """Return a test for one cell of column ``field``.

    SIZE cells compare by bytes; STRING cells of a column named ``size``
    are read as formatted sizes; other strings compare case-insensitively;
    INT and FLOAT compare numerically.
    """
    cmp = OPERATORS[op]
    is_size_field = field.lower() == "size"
    wanted_bytes = parse_size(value)
    wanted_text = value.lower()

    def test(cell: DataValue) -> bool:
        if cell.kind is ValueType.SIZE or (is_size_field and cell.kind is ValueType.STRING):
            if wanted_bytes is None:
                raise FilterError(f"where: '{value}' is not a size", usage=WHERE_USAGE)
            have = cell.nbytes if cell.kind is ValueType.SIZE else extract_size_bytes(cell.value)
            return cmp(have, wanted_bytes)
        if cell.kind is ValueType.STRING:
            return cmp(str(cell.value).lower(), wanted_text)
        return cmp(cell.value, _number(value, cell.kind))

    return test


def filter_where(table: Table, args: List[str]) -> Table:
    """Keep the rows whose FIELD satisfies ``OPERATOR VALUE``."""
    if not args:
        raise FilterError("where: missing arguments", usage=WHERE_USAGE)
    if len(args) < 3 or args[1] not in OPERATORS:
        raise FilterError("where: invalid filter condition", usage=WHERE_USAGE)
    field, op, value = args[0], args[1], " ".join(args[2:])
    idx = _field_index(table, field, "where")
    test = build_predicate(table, field, op, value)

    result = table.derive()
    try:
        for row in table.consume():
            if test(row[idx]):
                result.add(row)
    except FilterError:
        result.release()
        raise
    logger.debug("where %s %s %s kept %d rows", field, op, value, len(result))
    return result


def filter_sort_by(table: Table, args: List[str]) -> Table:
    """Order rows by FIELD, ascending unless ``desc`` is given."""
    if not args or len(args) > 2:
        raise FilterError("sort-by: expected a field name", usage=SORT_USAGE)
    direction = args[1].lower() if len(args) == 2 else "asc"
    if direction not in ("asc", "desc"):
        raise FilterError(f"sort-by: unknown direction '{args[1]}'", usage=SORT_USAGE)
    idx = _field_index(table, args[0], "sort-by")

    result = table.derive()
    rows = sorted(table.consume(), key=lambda r: r[idx].sort_key(), reverse=direction == "desc")
    for row in rows:
        result.add(row)
    return result


def default_filters() -> Registry[Filter]:
    return Registry("filter", {
        "where": filter_where,
        "sort-by": filter_sort_by,
    })
