import sys
import os

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from lsh.errors import FilterError
from lsh.filters import WHERE_USAGE, default_filters, filter_sort_by, filter_where
from lsh.structured import DataValue, RowTag, Table


def listing():
    t = Table(["Name", "Size", "Type"])
    t.add_row([DataValue.string("small.bin"), DataValue.from_bytes(500 * 1024), DataValue.string("File")], RowTag.FILE)
    t.add_row([DataValue.string("big.bin"), DataValue.from_bytes(2 * 1024 * 1024), DataValue.string("File")], RowTag.FILE)
    t.add_row([DataValue.string("src"), DataValue.string("-"), DataValue.string("Directory")], RowTag.DIRECTORY)
    return t


def processes():
    t = Table(["PID", "Name", "Memory", "Threads"])
    for pid, name, mem, threads in [(1, "init", 8, 1), (42, "Python", 120, 4), (7, "bash", 3, 1)]:
        t.add_row([
            DataValue.integer(pid), DataValue.string(name),
            DataValue.from_bytes(mem * 1024 * 1024), DataValue.integer(threads),
        ])
    return t


def names(table):
    return [row[1].value if table.headers[0] == "PID" else row[0].value for row in table.rows]


def test_where_size_compares_bytes():
    out = filter_where(listing(), ["Size", ">", "1MB"])
    assert names(out) == ["big.bin"]


def test_where_field_is_case_insensitive_and_units_flexible():
    out = filter_where(listing(), ["size", "<=", "600k"])
    # the directory's "-" counts as zero bytes
    assert names(out) == ["small.bin", "src"]


def test_where_string_equality_ignores_case():
    out = filter_where(listing(), ["type", "==", "directory"])
    assert names(out) == ["src"]


def test_where_not_equal():
    out = filter_where(listing(), ["type", "!=", "file"])
    assert names(out) == ["src"]


def test_where_integer_column():
    out = filter_where(processes(), ["threads", ">", "1"])
    assert names(out) == ["Python"]


def test_where_memory_column():
    out = filter_where(processes(), ["memory", ">=", "8mb"])
    assert names(out) == ["init", "Python"]


def test_where_consumes_input_and_keeps_row_width():
    src = listing()
    out = filter_where(src, ["size", ">", "0"])
    assert not src.is_live
    assert out.is_live
    for row in out.rows:
        assert len(row) == len(out.headers)
    assert out.headers == src.headers


@pytest.mark.parametrize("args", [[], ["size"], ["size", ">"], ["size", "=~", "1"]])
def test_where_bad_arguments(args):
    with pytest.raises(FilterError) as exc:
        filter_where(listing(), args)
    assert exc.value.usage == WHERE_USAGE


def test_where_unknown_field_lists_available():
    with pytest.raises(FilterError) as exc:
        filter_where(listing(), ["colour", "==", "red"])
    assert "Name, Size, Type" in str(exc.value)


def test_where_non_numeric_value():
    with pytest.raises(FilterError):
        filter_where(processes(), ["pid", ">", "many"])


def test_where_bad_size_value():
    with pytest.raises(FilterError):
        filter_where(listing(), ["size", ">", "huge"])


def test_sort_by_size_desc():
    out = names(filter_sort_by(listing(), ["size", "desc"]))
    assert out.index("big.bin") < out.index("small.bin")


def test_sort_by_defaults_to_ascending():
    out = filter_sort_by(processes(), ["PID"])
    assert [row[0].value for row in out.rows] == [1, 7, 42]


def test_sort_by_bad_direction():
    with pytest.raises(FilterError):
        filter_sort_by(listing(), ["size", "sideways"])


def test_default_filters_are_read_only():
    reg = default_filters()
    assert reg.names() == ["sort-by", "where"]
    assert "grep" not in reg
    with pytest.raises(TypeError):
        reg._handlers["grep"] = filter_where
