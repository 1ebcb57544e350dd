import sys
import os
import io
import traceback

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from lsh.aliases import AliasTable
from lsh.executor import Executor


def test_smoke_builtins_do_not_raise(tmp_path, monkeypatch):
    """Call each builtin with just its name and fail if any raises.

    Usage and error messages are fine; only uncaught exceptions count.
    """
    monkeypatch.chdir(tmp_path)
    ex = Executor(aliases=AliasTable(path=str(tmp_path / "aliases")),
                  stdout=io.StringIO(), stderr=io.StringIO())
    failures = []
    for name in ex.builtins.names():
        try:
            status = ex.builtins.get(name)(ex, [name])
        except Exception:
            failures.append((name, traceback.format_exc()))
            continue
        assert status is (name != "exit"), name

    if failures:
        msgs = [f"{n}:\n{tb}" for n, tb in failures]
        pytest.fail(f"{len(failures)} builtins raised exceptions:\n\n" + "\n\n".join(msgs))
