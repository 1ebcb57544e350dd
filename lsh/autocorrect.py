"""
Command auto-correction.

When an external program cannot be found, the launcher asks this module for
a close spelling among builtins, aliases and a few well-known programs, and
offers to run it instead.
"""

import logging
from typing import TYPE_CHECKING, Iterable, List, Optional

from .tokenizer import split_line

if TYPE_CHECKING:
    from .executor import Executor

logger = logging.getLogger(__name__)

# Highest edit distance still offered as a suggestion.
DISTANCE_THRESHOLD = 3

COMMON_COMMANDS = [
    "git", "npm", "python", "python3", "pip", "gcc", "make",
    "curl", "wget", "ssh", "code", "vim", "notepad",
]


def levenshtein_distance(s1: str, s2: str) -> int:
    """Edit distance between two strings (insert, delete, substitute)."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1
    previous = list(range(len(s2) + 1))
    for i, a in enumerate(s1, start=1):
        current = [i]
        for j, b in enumerate(s2, start=1):
            cost = 0 if a == b else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def _closest(word: str, candidates: Iterable[str]) -> Optional[str]:
    best, best_distance = None, DISTANCE_THRESHOLD + 1
    for cand in candidates:
        if abs(len(cand) - len(word)) > DISTANCE_THRESHOLD:
            continue
        d = levenshtein_distance(word, cand)
        if d < best_distance:
            best, best_distance = cand, d
    return best


def find_command_suggestion(mistyped: str, builtins: Iterable[str], aliases: Iterable[str],
                            common: Optional[Iterable[str]] = None) -> Optional[str]:
    """Return the best replacement for ``mistyped`` or None.

    Builtins and aliases are searched first; well-known external commands are
    only considered when neither yields a match. The mistyped name itself is
    never suggested.
    """
    builtin_names = [b for b in builtins if b != mistyped]
    alias_names = [a for a in aliases if a != mistyped]
    best_builtin = _closest(mistyped, builtin_names)
    best_alias = _closest(mistyped, alias_names)
    if best_alias and (
        best_builtin is None
        or levenshtein_distance(mistyped, best_alias) < levenshtein_distance(mistyped, best_builtin)
    ):
        return best_alias
    if best_builtin:
        return best_builtin
    return _closest(mistyped, [c for c in (COMMON_COMMANDS if common is None else common) if c != mistyped])


def attempt_command_correction(executor: "Executor", args: List[str]) -> Optional[bool]:
    """Offer a corrected command and run it if the user accepts.

    Returns the corrected command's continue/terminate status, or None when
    there was no suggestion or the user declined. The corrected line goes
    through the single-command path with correction disabled, so a line gets
    at most one correction attempt.
    """
    if not args:
        return None
    suggestion = find_command_suggestion(
        args[0],
        executor.builtins.names(),
        executor.aliases.names(),
        executor.common_commands,
    )
    if suggestion is None:
        logger.debug("no correction for %r", args[0])
        return None
    suggested_cmd = " ".join([suggestion] + list(args[1:]))
    try:
        answer = executor.ask(f"Command not found: '{args[0]}'. Did you mean '{suggested_cmd}'? (y/n): ")
    except EOFError:
        return None
    if not answer or answer.strip()[:1].lower() != "y":
        return None
    logger.debug("running corrected command %r", suggested_cmd)
    return executor.execute(split_line(suggested_cmd), allow_correction=False)
