"""
Structured data exchanged between pipeline stages.

A structured producer (``ls``, ``ps``) builds a ``Table``; each filter stage
consumes the previous table and returns a fresh one; the executor renders the
last table and releases it. Values are typed ``DataValue`` objects so filters
compare sizes and numbers by magnitude rather than by their display text.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from colorama import Fore, Style

from .errors import TableShapeError, TableStateError

UNIT_MULTIPLIERS = {
    "B": 1,
    "KB": 1024,
    "MB": 1024 ** 2,
    "GB": 1024 ** 3,
    "TB": 1024 ** 4,
}

# single-letter and lowercase spellings accepted on the command line
_UNIT_ALIASES = {
    "": "B", "B": "B",
    "K": "KB", "KB": "KB",
    "M": "MB", "MB": "MB",
    "G": "GB", "GB": "GB",
    "T": "TB", "TB": "TB",
}

_SIZE_RE = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))\s*([A-Za-z]*)\s*$")


class ValueType(Enum):
    STRING = auto()
    INT = auto()
    FLOAT = auto()
    SIZE = auto()


class RowTag(Enum):
    """Semantic classification of a row, used only when rendering."""

    PLAIN = auto()
    DIRECTORY = auto()
    FILE = auto()
    USER_PROCESS = auto()
    SYSTEM_PROCESS = auto()


@dataclass(frozen=True)
class DataValue:
    """A single typed cell.

    ``value`` holds the payload for every kind; SIZE additionally carries
    ``unit`` so that ``nbytes`` is available without re-parsing text.
    """

    kind: ValueType
    value: Union[str, int, float]
    unit: str = ""

    @classmethod
    def string(cls, text: str) -> "DataValue":
        return cls(ValueType.STRING, str(text))

    @classmethod
    def integer(cls, number: int) -> "DataValue":
        return cls(ValueType.INT, int(number))

    @classmethod
    def floating(cls, number: float) -> "DataValue":
        return cls(ValueType.FLOAT, float(number))

    @classmethod
    def size(cls, magnitude: float, unit: str = "B") -> "DataValue":
        unit = unit.upper()
        if unit not in UNIT_MULTIPLIERS:
            raise ValueError(f"unknown size unit: {unit}")
        return cls(ValueType.SIZE, float(magnitude), unit)

    @classmethod
    def from_bytes(cls, nbytes: int) -> "DataValue":
        """Build a SIZE value in the largest unit that keeps the magnitude >= 1."""
        if nbytes < 1024:
            return cls.size(nbytes, "B")
        if nbytes < 1024 ** 2:
            return cls.size(nbytes / 1024, "KB")
        if nbytes < 1024 ** 3:
            return cls.size(nbytes / 1024 ** 2, "MB")
        return cls.size(nbytes / 1024 ** 3, "GB")

    @property
    def nbytes(self) -> int:
        if self.kind is not ValueType.SIZE:
            raise TypeError(f"{self.kind.name} value has no byte size")
        return int(self.value * UNIT_MULTIPLIERS[self.unit])

    def display(self) -> str:
        """Text shown in a rendered table."""
        if self.kind is ValueType.SIZE:
            if self.unit == "B":
                return f"{int(self.value)} B"
            return f"{self.value:.1f} {self.unit}"
        if self.kind is ValueType.FLOAT:
            return f"{self.value:.2f}"
        return str(self.value)

    def sort_key(self) -> Tuple[int, Union[str, int, float]]:
        if self.kind is ValueType.SIZE:
            return (0, self.nbytes)
        if self.kind in (ValueType.INT, ValueType.FLOAT):
            return (0, self.value)
        return (1, str(self.value).lower())


@dataclass(frozen=True)
class Row:
    values: Tuple[DataValue, ...]
    tag: RowTag = RowTag.PLAIN

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> DataValue:
        return self.values[index]


class Table:
    """Ordered headers plus ordered rows, each row as wide as the headers.

    A table owns its rows until it is consumed (its rows move to whoever
    called ``consume``) or released. Either way it is dead afterwards and any
    further access raises ``TableStateError``.
    """

    LIVE = "live"
    CONSUMED = "consumed"
    RELEASED = "released"

    def __init__(self, headers: Sequence[str]):
        if not headers:
            raise TableShapeError("a table needs at least one header")
        self._headers: Tuple[str, ...] = tuple(str(h) for h in headers)
        self._rows: List[Row] = []
        self._state = Table.LIVE

    def __repr__(self) -> str:
        return f"Table(headers={list(self._headers)!r}, rows={len(self._rows)}, state={self._state})"

    def __len__(self) -> int:
        self._check_live()
        return len(self._rows)

    def __iter__(self):
        self._check_live()
        return iter(list(self._rows))

    def _check_live(self) -> None:
        if self._state != Table.LIVE:
            raise TableStateError(f"table already {self._state}")

    @property
    def headers(self) -> Tuple[str, ...]:
        return self._headers

    @property
    def rows(self) -> Tuple[Row, ...]:
        self._check_live()
        return tuple(self._rows)

    @property
    def state(self) -> str:
        return self._state

    @property
    def is_live(self) -> bool:
        return self._state == Table.LIVE

    def add_row(self, values: Iterable[DataValue], tag: RowTag = RowTag.PLAIN) -> Row:
        """Append a row built from ``values``; the value count must match the headers."""
        row = values if isinstance(values, Row) else Row(tuple(values), tag)
        return self.add(row)

    def add(self, row: Row) -> Row:
        self._check_live()
        if len(row) != len(self._headers):
            raise TableShapeError(
                f"row has {len(row)} values but table has {len(self._headers)} headers"
            )
        for v in row.values:
            if not isinstance(v, DataValue):
                raise TableShapeError(f"row value {v!r} is not a DataValue")
        self._rows.append(row)
        return row

    def column_index(self, name: str) -> Optional[int]:
        """Return the index of header ``name`` (case-insensitive) or None."""
        wanted = name.lower()
        for i, h in enumerate(self._headers):
            if h.lower() == wanted:
                return i
        return None

    def derive(self) -> "Table":
        """Return a new empty table with the same headers."""
        return Table(self._headers)

    def consume(self) -> List[Row]:
        """Move every row out of this table and mark it consumed."""
        self._check_live()
        rows, self._rows = self._rows, []
        self._state = Table.CONSUMED
        return rows

    def release(self) -> None:
        """Drop all rows. Releasing a dead table is a no-op."""
        self._rows = []
        if self._state == Table.LIVE:
            self._state = Table.RELEASED


# ---------- Size parsing ----------
def parse_size(size_str: str) -> Optional[int]:
    """Parse a human-readable size (``10kb``, ``2.5 MB``, ``512``) into bytes.

    Units are case-insensitive; ``k/m/g/t`` work as well as ``kb/mb/gb/tb``.
    A bare number is bytes. Returns None when the text is not a size.
    """
    if not size_str:
        return None
    m = _SIZE_RE.match(size_str)
    if not m:
        return None
    number, unit = m.groups()
    canonical = _UNIT_ALIASES.get(unit.upper())
    if canonical is None:
        return None
    return int(float(number) * UNIT_MULTIPLIERS[canonical])


def extract_size_bytes(size_str: str) -> int:
    """Bytes in a formatted size string such as ``10.5 KB``; 0 when unparsable."""
    parsed = parse_size(size_str or "")
    return parsed if parsed is not None else 0


# ---------- Rendering ----------
ROW_COLOURS = {
    RowTag.PLAIN: "",
    RowTag.FILE: "",
    RowTag.DIRECTORY: Fore.CYAN,
    RowTag.USER_PROCESS: Fore.GREEN,
    RowTag.SYSTEM_PROCESS: Fore.LIGHTBLACK_EX,
}


def render_table(table: Table, colour: bool = True) -> str:
    """Render a table with ``+---+`` borders.

    Rows are coloured by their ``RowTag`` when ``colour`` is set. A table
    without rows renders as ``(empty table)``.
    """
    rows = table.rows
    if not rows:
        return "(empty table)"
    cells = [[v.display() for v in row.values] for row in rows]
    widths = [len(h) for h in table.headers]
    for r in cells:
        for i, text in enumerate(r):
            widths[i] = max(widths[i], len(text))
    # two spaces of padding on each side
    widths = [w + 4 for w in widths]

    border = "+" + "+".join("-" * w for w in widths) + "+"

    def line(texts: List[str], col: str = "") -> str:
        parts = []
        for i, text in enumerate(texts):
            padded = text.ljust(widths[i] - 2)
            if col:
                padded = f"{col}{padded}{Style.RESET_ALL}"
            parts.append(f" {padded} |")
        return "|" + "".join(parts)

    out = [border, line(list(table.headers)), border]
    for row, texts in zip(rows, cells):
        out.append(line(texts, ROW_COLOURS.get(row.tag, "") if colour else ""))
    out.append(border)
    return "\n".join(out)
