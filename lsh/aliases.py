"""
Alias table.

Aliases map a command name to a replacement command string, e.g.
``ll -> ls -la``. The table is loaded before the loop starts from a plain
text file of ``name=command`` lines and, optionally, from the ``aliases``
mapping in the YAML config. The executor only ever calls ``resolve``; the
``alias``/``unalias`` builtins edit the table and save it back.
"""

import logging
import os
from collections import OrderedDict
from typing import Dict, List, Mapping, Optional, Tuple

from .errors import ConfigError

logger = logging.getLogger(__name__)

ALIAS_FILE_HEADER = "# LSH aliases file\n# Format: alias_name=command with arguments\n\n"

# Longest alias chain followed before giving up.
MAX_ALIAS_DEPTH = 16


def parse_alias_definition(text: str) -> Tuple[str, str]:
    """Split ``name=command`` into its two halves.

    The name is stripped; the command keeps its text after the first ``=``.
    """
    if "=" not in text:
        raise ConfigError(f"invalid alias definition: {text!r} (expected name=command)")
    name, command = text.split("=", 1)
    name = name.strip()
    if not name or any(ch.isspace() for ch in name):
        raise ConfigError(f"invalid alias name: {name!r}")
    return name, command.strip()


class AliasTable:
    """Ordered, unique name -> expansion mapping."""

    def __init__(self, entries: Optional[Mapping[str, str]] = None, path: Optional[str] = None):
        self._entries: "OrderedDict[str, str]" = OrderedDict()
        self.path = path
        for name, command in (entries or {}).items():
            self.add(name, command)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(self, name: str) -> Optional[str]:
        """Return the expansion for ``name`` or None when it is not an alias."""
        return self._entries.get(name)

    def add(self, name: str, command: str) -> None:
        """Define or redefine an alias."""
        name = str(name).strip()
        if not name or any(ch.isspace() for ch in name):
            raise ConfigError(f"invalid alias name: {name!r}")
        self._entries[name] = str(command).strip()

    def remove(self, name: str) -> bool:
        """Remove an alias; returns False when it was not defined."""
        return self._entries.pop(name, None) is not None

    def names(self) -> List[str]:
        return list(self._entries)

    def items(self) -> List[Tuple[str, str]]:
        return list(self._entries.items())

    def as_dict(self) -> Dict[str, str]:
        return dict(self._entries)

    # ---------- persistence ----------
    def load(self, path: Optional[str] = None) -> int:
        """Merge aliases from a ``name=command`` file.

        Missing files are not an error. Blank lines and ``#`` comments are
        skipped; malformed lines are logged and skipped. Returns the number of
        aliases read.
        """
        path = path or self.path
        if not path or not os.path.exists(path):
            return 0
        count = 0
        with open(path, "r", encoding="utf-8") as f:
            for lineno, ln in enumerate(f, start=1):
                ln = ln.rstrip("\n")
                if not ln.strip() or ln.lstrip().startswith("#"):
                    continue
                try:
                    name, command = parse_alias_definition(ln)
                except ConfigError:
                    logger.warning("invalid alias format in %s line %d", path, lineno)
                    continue
                self._entries[name] = command
                count += 1
        logger.debug("loaded %d aliases from %s", count, path)
        return count

    def save(self, path: Optional[str] = None) -> None:
        """Write every alias to ``path`` (or the table's own path)."""
        path = path or self.path
        if not path:
            return
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(ALIAS_FILE_HEADER)
            for name, command in self._entries.items():
                f.write(f"{name}={command}\n")
