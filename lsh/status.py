"""
Status overlay coordination.

A background timer thread may repaint a status region at the bottom of the
console. Before another program takes over the terminal the shell must tell
that painter to stand down, and it must tell it to resume afterwards on every
exit path. ``StatusOverlay.suspended()`` is the scoped form of that protocol.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

logger = logging.getLogger(__name__)


class StatusOverlay:
    """Hide/show switch shared between the main thread and a status painter.

    ``hide`` and ``show`` nest: the overlay is visible again only once every
    ``hide`` has been matched by a ``show``. ``on_hide`` runs when the
    overlay goes from visible to hidden (clear the status line) and
    ``on_show`` when it becomes visible again (repaint it). The painter
    thread should check ``is_hidden`` before every repaint.
    """

    def __init__(self, on_hide: Optional[Callable[[], None]] = None,
                 on_show: Optional[Callable[[], None]] = None, enabled: bool = True):
        self._lock = threading.Lock()
        self._depth = 0
        self.enabled = enabled
        self.on_hide = on_hide
        self.on_show = on_show

    @property
    def is_hidden(self) -> bool:
        with self._lock:
            return self._depth > 0

    @property
    def depth(self) -> int:
        with self._lock:
            return self._depth

    def hide(self) -> None:
        with self._lock:
            self._depth += 1
            first = self._depth == 1
        if first and self.enabled and self.on_hide:
            self.on_hide()

    def show(self) -> None:
        with self._lock:
            if self._depth == 0:
                logger.debug("status overlay shown while not hidden")
                return
            self._depth -= 1
            last = self._depth == 0
        if last and self.enabled and self.on_show:
            self.on_show()

    @contextmanager
    def suspended(self) -> Iterator["StatusOverlay"]:
        """Hide the overlay for the duration of the block, whatever happens in it."""
        self.hide()
        try:
            yield self
        finally:
            self.show()
