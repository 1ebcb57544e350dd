"""
Exceptions raised by the lsh execution engine.

Every failure inside the engine is a subclass of ``ShellError``. Components
raise; ``Executor.run_line`` catches, prints ``lsh: <message>`` and returns to
the prompt, so none of these ever terminates the shell.

- ShellError: base class
  - ParseError: malformed or missing input line
  - AliasCycleError: an alias chain revisits one of its own names
  - ProducerError: a structured producer could not enumerate its entities
  - FilterError: a filter stage rejected its arguments or input
  - PipelineError: a pipeline could not be started or continued
  - LaunchError: an external program could not be started
  - TableShapeError: a row does not match the table's header count
  - TableStateError: a table was used after being consumed or released
  - ConfigError: invalid configuration value
"""

from typing import Optional, Sequence


class ShellError(Exception):
    """Base exception for lsh."""

    pass


class ParseError(ShellError):
    """Raised when a command line cannot be split."""

    pass


class AliasCycleError(ShellError):
    """Raised when alias expansion re-enters an alias already on the chain."""

    def __init__(self, chain: Sequence[str], message: Optional[str] = None):
        self.chain = tuple(chain)
        super().__init__(message or "alias cycle: " + " -> ".join(self.chain))


class ProducerError(ShellError):
    """Raised when a structured producer fails to build its table."""

    def __init__(self, message: str, command: Optional[str] = None):
        self.command = command
        super().__init__(message)


class FilterError(ShellError):
    """Raised when a filter stage cannot transform its input table."""

    def __init__(self, message: str, usage: Optional[str] = None):
        self.usage = usage
        super().__init__(message)


class PipelineError(ShellError):
    """Raised when a pipeline stage cannot be resolved."""

    pass


class LaunchError(ShellError):
    """Raised when an external program cannot be started."""

    def __init__(self, message: str, command: Optional[str] = None, cause: Optional[BaseException] = None):
        self.command = command
        self.cause = cause
        super().__init__(message)


class TableShapeError(ShellError):
    """Raised when a row's value count differs from the header count."""

    pass


class TableStateError(ShellError):
    """Raised when a consumed or released table is touched again."""

    pass


class ConfigError(ShellError):
    """Raised for invalid configuration values."""

    pass
