import sys
import os

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from lsh.errors import TableShapeError, TableStateError
from lsh.structured import (
    DataValue, RowTag, Table, ValueType, extract_size_bytes, parse_size, render_table,
)


def make_table():
    t = Table(["Name", "Size"])
    t.add_row([DataValue.string("a.txt"), DataValue.from_bytes(500 * 1024)], RowTag.FILE)
    t.add_row([DataValue.string("docs"), DataValue.string("-")], RowTag.DIRECTORY)
    return t


def test_from_bytes_picks_unit():
    assert DataValue.from_bytes(512).display() == "512 B"
    assert DataValue.from_bytes(2048).display() == "2.0 KB"
    assert DataValue.from_bytes(2 * 1024 * 1024).display() == "2.0 MB"
    assert DataValue.from_bytes(3 * 1024 ** 3).unit == "GB"


def test_size_nbytes_without_reparsing():
    v = DataValue.size(1.5, "kb")
    assert v.kind is ValueType.SIZE
    assert v.unit == "KB"
    assert v.nbytes == 1536


def test_nbytes_only_for_sizes():
    with pytest.raises(TypeError):
        DataValue.integer(3).nbytes


def test_unknown_unit_rejected():
    with pytest.raises(ValueError):
        DataValue.size(1, "PB")


def test_values_are_immutable():
    v = DataValue.string("x")
    with pytest.raises(AttributeError):
        v.value = "y"


def test_row_width_enforced():
    t = Table(["A", "B"])
    with pytest.raises(TableShapeError):
        t.add_row([DataValue.string("only one")])
    with pytest.raises(TableShapeError):
        t.add_row([DataValue.string("x"), "not a value"])
    assert len(t) == 0


def test_table_needs_headers():
    with pytest.raises(TableShapeError):
        Table([])


def test_column_index_case_insensitive():
    t = make_table()
    assert t.column_index("size") == 1
    assert t.column_index("NAME") == 0
    assert t.column_index("missing") is None


def test_consume_moves_rows_and_kills_table():
    t = make_table()
    rows = t.consume()
    assert len(rows) == 2
    assert t.state == Table.CONSUMED
    with pytest.raises(TableStateError):
        t.rows
    with pytest.raises(TableStateError):
        t.add_row([DataValue.string("x"), DataValue.string("y")])


def test_release_is_idempotent():
    t = make_table()
    t.release()
    t.release()
    assert t.state == Table.RELEASED
    assert not t.is_live
    with pytest.raises(TableStateError):
        len(t)


def test_derive_keeps_headers():
    t = make_table()
    d = t.derive()
    assert d.headers == t.headers
    assert len(d) == 0


@pytest.mark.parametrize("text,expected", [
    ("10kb", 10 * 1024),
    ("10KB", 10 * 1024),
    ("1MB", 1024 ** 2),
    ("2.5 MB", int(2.5 * 1024 ** 2)),
    ("1g", 1024 ** 3),
    ("512", 512),
    ("7b", 7),
])
def test_parse_size(text, expected):
    assert parse_size(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "10 parsecs", "-"])
def test_parse_size_rejects(text):
    assert parse_size(text) is None


def test_extract_size_bytes():
    assert extract_size_bytes("10.5 KB") == int(10.5 * 1024)
    assert extract_size_bytes("-") == 0
    assert extract_size_bytes(None) == 0


def test_sort_key_orders_numbers_before_text():
    assert DataValue.from_bytes(10).sort_key() < DataValue.size(1, "KB").sort_key()
    assert DataValue.integer(99).sort_key() < DataValue.string("-").sort_key()


def test_render_table_borders_and_rows():
    out = render_table(make_table(), colour=False)
    lines = out.splitlines()
    assert lines[0].startswith("+") and lines[0].endswith("+")
    assert "Name" in lines[1] and "Size" in lines[1]
    assert lines[0] == lines[2] == lines[-1]
    assert any("a.txt" in ln and "500.0 KB" in ln for ln in lines)
    # header line and border have the same width
    assert len(lines[1]) == len(lines[0])


def test_render_table_colours_by_tag():
    out = render_table(make_table(), colour=True)
    assert "\x1b[" in out


def test_render_empty_table():
    assert render_table(Table(["Name"])) == "(empty table)"
