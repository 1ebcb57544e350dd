"""lsh: an interactive shell whose builtins can pipe typed tables into filters."""

from .errors import ShellError
from .executor import Executor
from .structured import DataValue, Row, RowTag, Table, ValueType

__version__ = "0.1.0"

__all__ = ["DataValue", "Executor", "Row", "RowTag", "ShellError", "Table", "ValueType"]
