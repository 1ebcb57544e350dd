"""
Line splitting for lsh.

``split_line`` turns one command string into argument tokens.
``split_commands`` first cuts a raw line on unescaped ``|`` characters and
tokenizes every segment on its own, giving one token list per pipeline stage.
"""

import re
from typing import List, Optional, Sequence

from .errors import ParseError

# space, tab, carriage return, newline and bell
TOKEN_DELIMITERS = " \t\r\n\a"
PIPE = "|"
ESCAPE = "\\"

_DELIM_RE = re.compile("[" + re.escape(TOKEN_DELIMITERS) + "]+")


def split_line(line: Optional[str]) -> List[str]:
    """Split a line into tokens.

    Runs of delimiters collapse, so no empty token is ever produced. An empty
    or all-whitespace line yields an empty list.
    """
    if line is None:
        raise ParseError("no input line")
    return [tok for tok in _DELIM_RE.split(line) if tok]


def split_segments(line: str) -> List[str]:
    """Cut ``line`` on every unescaped pipe character.

    ``\\|`` is kept as a literal ``|`` inside its segment; any other backslash
    is left untouched.
    """
    segments: List[str] = []
    current: List[str] = []
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == ESCAPE and i + 1 < len(line) and line[i + 1] == PIPE:
            current.append(PIPE)
            i += 2
            continue
        if ch == PIPE:
            segments.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    segments.append("".join(current))
    return segments


def split_commands(line: Optional[str]) -> List[List[str]]:
    """Split a raw line into pipeline stages.

    A line without any pipe gives a single stage equal to ``split_line(line)``.
    An empty line gives ``[[]]``, which the executor treats as a no-op.
    Segments that are empty (``a || b``) stay in place as empty stages.
    """
    if line is None:
        raise ParseError("no input line")
    return [split_line(segment) for segment in split_segments(line)]


def join_commands(stages: Sequence[Sequence[str]]) -> str:
    """Rebuild a command string from pipeline stages, joined with `` | ``."""
    return " | ".join(" ".join(tok.replace(PIPE, ESCAPE + PIPE) for tok in stage) for stage in stages if stage)
