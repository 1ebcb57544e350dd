#!/usr/bin/env python3
"""
LSH - interactive command shell with structured pipelines.

Type a command and hit enter. Builtins run in-process; anything else is
started as an external program, with a "did you mean" retry when the program
cannot be found. ``ls``/``dir`` and ``ps`` produce tables that can be piped
into filters::

    ls | where size > 1mb | sort-by size desc
    ps | where memory >= 100mb

The readline history is kept in ``~/.lsh_history`` when readline is
available. Aliases come from ``~/.lsh_aliases`` and the ``aliases`` section
of ``~/.lsh.yaml``.
"""

import argparse
import atexit
import logging
import os
import sys
from cmd import Cmd
from typing import List, Optional

from colorama import Fore, Style, init as colorama_init

# optional module
try:
    import readline  # noqa: F401
except ImportError:
    readline = None

from .aliases import AliasTable
from .config import ShellConfig, load_config
from .errors import ConfigError
from .executor import Executor
from .launcher import Launcher
from .log import set_logger
from .status import StatusOverlay

logger = logging.getLogger(__name__)


def c(text: object, color: str = Fore.CYAN) -> str:
    """Colourise text for terminal display."""
    lines = str(text).splitlines() or [""]
    return "\n".join(f"{color}{ln}{Style.RESET_ALL}" for ln in lines)


def build_aliases(config: ShellConfig) -> AliasTable:
    """Alias file first, then the config's inline aliases on top."""
    table = AliasTable(path=config.expanded(config.aliases_file))
    try:
        table.load()
    except OSError as e:
        logger.warning("could not read aliases: %s", e)
    for name, command in config.aliases.items():
        try:
            table.add(name, command)
        except ConfigError as e:
            logger.warning("%s", e)
    return table


def create_executor(config: ShellConfig, overlay: Optional[StatusOverlay] = None) -> Executor:
    overlay = overlay or StatusOverlay(enabled=config.status_bar)
    return Executor(
        aliases=build_aliases(config),
        launcher=Launcher(overlay),
        autocorrect=config.autocorrect,
        common_commands=config.common_commands,
    )


class LShell(Cmd):
    intro = c("Welcome to lsh! Type 'help' for builtins, 'exit' to leave.", Fore.MAGENTA)

    def __init__(self, executor: Executor, config: Optional[ShellConfig] = None):
        super().__init__()
        self.executor = executor
        self.config = config or ShellConfig()
        self.prompt = self.build_prompt()
        self._history_file = self.config.expanded(self.config.history_file)
        if readline:
            self._setup_readline()

    def _setup_readline(self) -> None:
        """Persistent history plus TAB completion."""
        hist = self._history_file
        if hist:
            try:
                readline.read_history_file(hist)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("could not read history %s: %s", hist, e)
            atexit.register(self._save_history)
        # libedit (macOS) uses a different binding syntax
        doc = getattr(readline, "__doc__", "") or ""
        if "libedit" in doc:
            readline.parse_and_bind("bind ^I rl_complete")
        else:
            readline.parse_and_bind("tab: complete")

    def _save_history(self) -> None:
        try:
            readline.write_history_file(self._history_file)
        except OSError as e:
            logger.warning("could not save history: %s", e)

    def build_prompt(self) -> str:
        try:
            cwd = os.path.basename(os.getcwd()) or os.getcwd()
        except OSError:
            cwd = "unknown_path"
        template = self.config.prompt
        head, sep, tail = template.partition("{cwd}")
        if not sep:
            return f"{Fore.GREEN}{template}{Style.RESET_ALL}"
        return f"{head}{Fore.MAGENTA}{cwd}{Style.RESET_ALL}{Fore.YELLOW}{tail}{Style.RESET_ALL}"

    # ---- core overrides
    def onecmd(self, line: str) -> bool:
        """Hand the whole line to the executor; a True return ends the loop."""
        if line == "EOF":
            return self.do_EOF(line)
        return not self.executor.run_line(line)

    def postcmd(self, stop: bool, line: str) -> bool:
        self.prompt = self.build_prompt()
        return stop

    def do_EOF(self, arg) -> bool:
        print()
        return True

    def completenames(self, text, *ignored):
        ex = self.executor
        names = set(ex.builtins.names()) | set(ex.aliases.names()) | set(ex.filters.names())
        return sorted(n for n in names if n.startswith(text))

    def cmdloop(self, intro=None):
        """Run the loop; Ctrl-C cancels the current line instead of quitting."""
        while True:
            try:
                super().cmdloop(intro)
                return
            except KeyboardInterrupt:
                print("^C")
                intro = ""


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="lsh", description="Interactive shell with structured pipelines.")
    parser.add_argument("--config", help="path to a YAML config file (default: ~/.lsh.yaml)")
    parser.add_argument("--debug", action="store_true", help="log debug messages to stderr")
    parser.add_argument("-c", dest="command", metavar="LINE", help="run one command line and exit")
    return parser.parse_args(argv)


# ---------- main ----------
def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    colorama_init()
    config = ShellConfig()
    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(c(f"lsh: {e} (using defaults)", Fore.RED), file=sys.stderr)
    set_logger(config.log_level, config.log_file, debug=args.debug)

    executor = create_executor(config)
    if args.command is not None:
        executor.run_line(args.command)
        return 0
    LShell(executor, config).cmdloop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
