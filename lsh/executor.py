"""
Command execution engine.

``Executor.run_line`` takes one raw input line and threads it through the
pipe splitter, then either the pipeline state machine (``execute_piped``) or
the single-command path (``execute``: alias -> builtin -> external program).

Everything the engine needs (builtin, producer and filter registries, the
alias table, the launcher) lives on the executor instance; nothing is kept in
module-level state.
"""

import logging
import sys
from typing import Callable, List, Optional, Sequence, TextIO, Tuple

from colorama import Fore, Style

from .aliases import MAX_ALIAS_DEPTH, AliasTable
from .autocorrect import COMMON_COMMANDS, attempt_command_correction
from .builtins import default_builtins
from .errors import AliasCycleError, FilterError, PipelineError, ProducerError, ShellError
from .filters import default_filters
from .launcher import Launcher
from .producers import default_producers
from .registry import Registry
from .structured import Table, render_table
from .tokenizer import join_commands, split_commands, split_line

logger = logging.getLogger(__name__)


class Executor:
    """Dispatches command lines.

    ``execute`` and ``execute_piped`` return the shell's status: True to keep
    reading input, False to leave the loop (only the ``exit`` builtin does
    that). They raise ``ShellError`` subclasses on failure; ``run_line``
    turns those into a printed message.
    """

    def __init__(self,
                 builtins: Optional[Registry] = None,
                 producers: Optional[Registry] = None,
                 filters: Optional[Registry] = None,
                 aliases: Optional[AliasTable] = None,
                 launcher: Optional[Launcher] = None,
                 stdout: Optional[TextIO] = None,
                 stderr: Optional[TextIO] = None,
                 ask: Callable[[str], str] = input,
                 autocorrect: bool = True,
                 common_commands: Optional[Sequence[str]] = None,
                 colour: bool = True):
        self.builtins = builtins if builtins is not None else default_builtins()
        self.producers = producers if producers is not None else default_producers()
        self.filters = filters if filters is not None else default_filters()
        self.aliases = aliases if aliases is not None else AliasTable()
        self.launcher = launcher or Launcher()
        self._stdout = stdout
        self._stderr = stderr
        self.ask = ask
        self.autocorrect = autocorrect
        self.common_commands: List[str] = list(COMMON_COMMANDS if common_commands is None else common_commands)
        self.colour = colour

    # ---------- output ----------
    @property
    def stdout(self) -> TextIO:
        return self._stdout or sys.stdout

    @property
    def stderr(self) -> TextIO:
        return self._stderr or sys.stderr

    def echo(self, text: str, color: str = "") -> None:
        """Write a line of normal output."""
        if color and self.colour:
            text = "\n".join(f"{color}{ln}{Style.RESET_ALL}" for ln in str(text).splitlines() or [""])
        print(text, file=self.stdout)

    def report_error(self, message: object) -> None:
        """Write ``lsh: <message>`` to the diagnostic stream."""
        text = f"lsh: {message}"
        usage = getattr(message, "usage", None)
        if usage:
            text += "\n" + usage
        if self.colour:
            text = f"{Fore.RED}{text}{Style.RESET_ALL}"
        print(text, file=self.stderr)

    def print_table(self, table: Table) -> None:
        print("\n" + render_table(table, colour=self.colour) + "\n", file=self.stdout)

    # ---------- entry point ----------
    def run_line(self, line: str) -> bool:
        """Execute one input line; never raises for engine failures."""
        try:
            stages = split_commands(line)
            if len(stages) > 1:
                logger.debug("pipeline: %s", join_commands(stages))
                return self.execute_piped(stages)
            return self.execute(stages[0])
        except ShellError as e:
            logger.debug("command failed: %s", e)
            self.report_error(e)
            return True
        except MemoryError:
            self.report_error("allocation error")
            return True
        except OSError as e:
            logger.debug("os error: %s", e)
            self.report_error(e)
            return True

    # ---------- single command ----------
    def execute(self, args: List[str], allow_correction: bool = True,
                _chain: Tuple[str, ...] = ()) -> bool:
        """Run one non-piped command: alias, then builtin, then external program."""
        if not args:
            return True

        name = args[0]
        expansion = self.aliases.resolve(name)
        if expansion is not None:
            chain = _chain + (name,)
            if name in _chain or len(chain) > MAX_ALIAS_DEPTH:
                raise AliasCycleError(chain)
            expanded = split_line(" ".join([expansion] + list(args[1:])))
            logger.debug("alias %s -> %s", name, expanded)
            return self.execute(expanded, allow_correction, chain)

        handler = self.builtins.get(name)
        if handler is not None:
            logger.debug("builtin %s %s", name, args[1:])
            return bool(handler(self, args))

        correct = None
        if allow_correction and self.autocorrect:
            def correct(original: List[str]) -> Optional[bool]:
                return attempt_command_correction(self, original)
        return self.launcher.launch(list(args), correct=correct)

    # ---------- pipelines ----------
    def execute_piped(self, stages: Sequence[List[str]]) -> bool:
        """Run a producer followed by filter stages and print the final table.

        Stage 0 must be a structured producer; later stages must be filters.
        Only one table is live at a time and it is released before returning,
        whether the pipeline finished or not.
        """
        table: Optional[Table] = None
        try:
            for i, args in enumerate(stages):
                if not args:
                    continue
                if i == 0:
                    table = self._start(args)
                    continue
                if table is None:
                    raise PipelineError("no data to pipe")
                table = self._transform(table, args)
            if table is not None:
                self.print_table(table)
        finally:
            if table is not None:
                table.release()
        return True

    def _start(self, args: List[str]) -> Table:
        producer = self.producers.get(args[0])
        if producer is None:
            raise PipelineError(f"command '{args[0]}' does not support piping")
        try:
            table = producer(args)
        except ProducerError as e:
            raise ProducerError(f"error generating structured output for '{args[0]}': {e}", command=args[0])
        if table is None:
            raise ProducerError(f"error generating structured output for '{args[0]}'", command=args[0])
        logger.debug("stage %s produced %d rows", args[0], len(table))
        return table

    def _transform(self, table: Table, args: List[str]) -> Table:
        fn = self.filters.get(args[0])
        if fn is None:
            raise PipelineError(f"filter '{args[0]}' not supported")
        try:
            result = fn(table, list(args[1:]))
        finally:
            # no-op when the filter already consumed it
            table.release()
        if result is None:
            raise FilterError(f"filter '{args[0]}' failed")
        logger.debug("stage %s left %d rows", args[0], len(result))
        return result
