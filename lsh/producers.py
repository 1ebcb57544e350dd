"""
Structured producers.

A producer enumerates OS-level entities and returns them as a ``Table``
instead of printing. Only producers may start a pipeline. A producer that
cannot enumerate raises ``ProducerError`` and nothing is printed.
"""

import logging
import os
import time
from typing import Callable, List

import psutil

from .errors import ProducerError
from .registry import Registry
from .structured import DataValue, RowTag, Table

logger = logging.getLogger(__name__)

Producer = Callable[[List[str]], Table]

LISTING_HEADERS = ["Name", "Size", "Type", "Last Modified"]
PROCESS_HEADERS = ["PID", "Name", "Memory", "Threads"]

SYSTEM_PROCESSES = frozenset({
    "svchost.exe", "csrss.exe", "smss.exe", "wininit.exe",
    "services.exe", "lsass.exe", "winlogon.exe",
    "spoolsv.exe", "dwm.exe", "taskhost.exe", "taskhostw.exe",
    "conhost.exe", "system", "registry", "dllhost.exe",
    "msdtc.exe", "sqlservr.exe", "w3wp.exe", "inetinfo.exe",
    # unix daemons
    "systemd", "kthreadd", "init", "launchd", "kernel_task",
    "dbus-daemon", "udevd", "systemd-udevd", "systemd-journald",
})

# system processes smaller than this are left out of the listing
SYSTEM_PROCESS_MIN_MEMORY = 5 * 1024 * 1024


def _fmt_time(epoch: float) -> str:
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(epoch))


def listing_target(args: List[str]) -> str:
    """First non-option argument after the command name, or the cwd."""
    for a in args[1:]:
        if not a.startswith("-"):
            return a
    return os.getcwd()


def dir_structured(args: List[str]) -> Table:
    """Directory listing as a table.

    Usage: ls|dir [-flags] [path]. Options are accepted and ignored; every
    entry except ``.`` and ``..`` is listed in name order.
    """
    path = listing_target(args)
    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda e: e.name.lower())
    except OSError as e:
        raise ProducerError(f"failed to list directory contents: {e}", command=args[0] if args else None)

    table = Table(LISTING_HEADERS)
    for entry in entries:
        try:
            st = entry.stat(follow_symlinks=True)
            is_dir = entry.is_dir(follow_symlinks=True)
        except OSError:
            # dangling symlink, or the entry vanished since the scan
            try:
                st = entry.stat(follow_symlinks=False)
            except OSError as e:
                logger.debug("skipping %s: %s", entry.name, e)
                continue
            is_dir = False
        if is_dir:
            size = DataValue.string("-")
            kind, tag = "Directory", RowTag.DIRECTORY
        else:
            size = DataValue.from_bytes(st.st_size)
            kind, tag = "File", RowTag.FILE
        table.add_row(
            [DataValue.string(entry.name), size, DataValue.string(kind), DataValue.string(_fmt_time(st.st_mtime))],
            tag,
        )
    logger.debug("listed %d entries in %s", len(table), path)
    return table


def ps_structured(args: List[str]) -> Table:
    """Running processes as a table.

    System processes (by well-known name) appear only when they use more than
    5 MB. Processes that exit or deny access mid-scan are skipped.
    """
    table = Table(PROCESS_HEADERS)
    try:
        procs = psutil.process_iter(["pid", "name", "memory_info", "num_threads"])
        for proc in procs:
            try:
                info = proc.info
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
            name = info.get("name") or ""
            mem = info.get("memory_info")
            rss = mem.rss if mem is not None else 0
            is_system = name.lower() in SYSTEM_PROCESSES
            if is_system and rss <= SYSTEM_PROCESS_MIN_MEMORY:
                continue
            table.add_row(
                [
                    DataValue.integer(info["pid"]),
                    DataValue.string(name),
                    DataValue.from_bytes(rss),
                    DataValue.integer(info.get("num_threads") or 0),
                ],
                RowTag.SYSTEM_PROCESS if is_system else RowTag.USER_PROCESS,
            )
    except psutil.Error as e:
        table.release()
        raise ProducerError(f"failed to create process snapshot: {e}", command=args[0] if args else None)
    logger.debug("listed %d processes", len(table))
    return table


def default_producers() -> Registry[Producer]:
    return Registry("producer", {
        "ls": dir_structured,
        "dir": dir_structured,
        "ps": ps_structured,
    })
