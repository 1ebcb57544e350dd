import sys
import os

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from lsh.registry import Registry


def noop(*args):
    return True


def test_lookup_is_exact():
    reg = Registry("builtin", {"cd": noop, "ls": noop})
    assert reg.get("cd") is noop
    assert reg.get("CD") is None
    assert "ls" in reg and "dir" not in reg
    assert reg.names() == ["cd", "ls"]
    assert len(reg) == 2


def test_source_dict_changes_do_not_leak_in():
    handlers = {"cd": noop}
    reg = Registry("builtin", handlers)
    handlers["rm"] = noop
    assert "rm" not in reg


def test_only_lookup_surface_is_public():
    reg = Registry("filter", {"where": noop})
    public = {n for n in dir(reg) if not n.startswith("_")}
    assert public == {"get", "kind", "names"}


@pytest.mark.parametrize("name", ["", "two words", "tab\tname"])
def test_bad_names_rejected(name):
    with pytest.raises(ValueError):
        Registry("builtin", {name: noop})


def test_handlers_must_be_callable():
    with pytest.raises(TypeError):
        Registry("builtin", {"cd": "not callable"})
