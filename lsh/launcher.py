"""
External program launcher.

Runs a non-builtin command as a child process and blocks until it exits.
The status overlay is suspended for the whole launch, including any
auto-correction retry, and resumed on every way out.
"""

import logging
import subprocess
from typing import Callable, List, Optional

from .errors import LaunchError
from .status import StatusOverlay

logger = logging.getLogger(__name__)

# Called with the original tokens after a "not found" failure; returns the
# corrected command's status or None when nothing was run.
CorrectionHook = Callable[[List[str]], Optional[bool]]


class Launcher:
    """Start external programs on behalf of the executor."""

    def __init__(self, overlay: Optional[StatusOverlay] = None, runner: Callable = subprocess.run):
        self.overlay = overlay or StatusOverlay(enabled=False)
        self.runner = runner
        self.last_returncode: Optional[int] = None

    def launch(self, args: List[str], correct: Optional[CorrectionHook] = None) -> bool:
        """Run ``args`` and wait for it.

        On a "not found" failure ``correct`` gets one chance to run a
        corrected command. If it does not, ``LaunchError`` is raised with a
        single ``failed to execute`` message. Returns the shell's
        continue/terminate status.
        """
        if not args:
            return True
        command_line = " ".join(args)
        with self.overlay.suspended():
            try:
                logger.debug("launching %r", command_line)
                completed = self.runner(args)
            except FileNotFoundError as e:
                if correct is not None:
                    status = correct(args)
                    if status is not None:
                        return status
                raise LaunchError(f"failed to execute {args[0]}", command=command_line, cause=e)
            except OSError as e:
                raise LaunchError(
                    f"failed to execute {args[0]}: {e.strerror or e}", command=command_line, cause=e
                )
            self.last_returncode = getattr(completed, "returncode", None)
            logger.debug("%r exited with %s", command_line, self.last_returncode)
        return True
