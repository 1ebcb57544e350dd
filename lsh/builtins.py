"""
Builtin commands.

Every handler takes the running executor and the full token list (command
name included) and returns the shell status: True to keep going, False to
leave the loop. Only ``exit`` returns False. Problems are reported through
``sh.report_error`` and the shell carries on.
"""

import os
from typing import TYPE_CHECKING, Callable, List

from colorama import Fore

from .aliases import parse_alias_definition
from .errors import ConfigError, ProducerError
from .registry import Registry

if TYPE_CHECKING:
    from .executor import Executor

Handler = Callable[["Executor", List[str]], bool]


def h_cd(sh: "Executor", args: List[str]) -> bool:
    """Change the working directory. Usage: cd <path>"""
    if len(args) < 2:
        sh.report_error('expected argument to "cd"')
        return True
    try:
        os.chdir(os.path.expanduser(args[1]))
    except OSError as e:
        sh.report_error(f"cd: {args[1]}: {e.strerror or e}")
    return True


def h_exit(sh: "Executor", args: List[str]) -> bool:
    """Leave the shell."""
    return False


def h_pwd(sh: "Executor", args: List[str]) -> bool:
    """Print the working directory."""
    try:
        sh.echo(os.getcwd())
    except OSError as e:
        sh.report_error(f"pwd: {e}")
    return True


def h_clear(sh: "Executor", args: List[str]) -> bool:
    """Clear the screen."""
    print("\033c", end="", file=sh.stdout)
    return True


def _show_structured(sh: "Executor", args: List[str]) -> bool:
    """Run the producer registered under ``args[0]`` and print its table."""
    producer = sh.producers.get(args[0])
    if producer is None:
        sh.report_error(f"{args[0]}: no structured output available")
        return True
    try:
        table = producer(args)
    except ProducerError as e:
        sh.report_error(e)
        return True
    try:
        sh.print_table(table)
    finally:
        table.release()
    return True


def h_dir(sh: "Executor", args: List[str]) -> bool:
    """List a directory as a table. Usage: ls|dir [path]

    Columns are Name, Size, Type and Last Modified. Pipe into ``where`` or
    ``sort-by`` to filter, e.g. ``ls | where size > 10kb``.
    """
    return _show_structured(sh, args)


def h_ps(sh: "Executor", args: List[str]) -> bool:
    """List running processes as a table (PID, Name, Memory, Threads)."""
    return _show_structured(sh, args)


def h_help(sh: "Executor", args: List[str]) -> bool:
    """List builtins, structured producers, filters and aliases."""
    lines = [
        "LSH",
        "Type program names and arguments, and hit enter.",
        "The following are built in:",
    ]
    lines += [f"  {name}" for name in sh.builtins.names()]
    lines.append("Commands that can start a pipeline: " + ", ".join(sh.producers.names()))
    lines.append("Filters: " + ", ".join(sh.filters.names()))
    if len(sh.aliases):
        lines.append("Aliases: " + ", ".join(sh.aliases.names()))
    lines.append("Use the man command for information on other programs.")
    sh.echo("\n".join(lines), Fore.YELLOW)
    return True


# ---------- alias builtins ----------
def h_alias(sh: "Executor", args: List[str]) -> bool:
    """Show or define aliases.

    ``alias`` lists every alias, ``alias name=command`` defines one (and saves
    the alias file), ``alias name`` shows a single alias.
    """
    if len(args) < 2:
        if not len(sh.aliases):
            sh.echo("No aliases defined\nUse 'alias name=command' to create an alias")
            return True
        sh.echo("Current aliases:\n" + "\n".join(f"  {n}={c}" for n, c in sh.aliases.items()))
        return True

    definition = " ".join(args[1:])
    if "=" in definition:
        try:
            name, command = parse_alias_definition(definition)
            sh.aliases.add(name, command)
            sh.aliases.save()
        except (ConfigError, OSError) as e:
            sh.report_error(f"alias: {e}")
            return True
        sh.echo(f"Alias added: {name}={command}", Fore.GREEN)
        return True

    command = sh.aliases.resolve(args[1])
    if command is None:
        sh.echo(f"Alias '{args[1]}' not found")
    else:
        sh.echo(f"{args[1]}={command}")
    return True


def h_unalias(sh: "Executor", args: List[str]) -> bool:
    """Remove an alias. Usage: unalias <name>"""
    if len(args) < 2:
        sh.report_error('expected argument to "unalias"')
        return True
    if not sh.aliases.remove(args[1]):
        sh.echo(f"Alias '{args[1]}' not found")
        return True
    try:
        sh.aliases.save()
    except OSError as e:
        sh.report_error(f"unalias: {e} (alias removed for this session only)")
        return True
    sh.echo(f"Alias '{args[1]}' removed", Fore.GREEN)
    return True


def h_aliases(sh: "Executor", args: List[str]) -> bool:
    """Print every alias, names aligned."""
    items = sh.aliases.items()
    if not items:
        sh.echo("No aliases defined")
        return True
    width = max(len(n) for n, _ in items) + 2
    sh.echo("Current aliases:\n\n" + "\n".join(f"  {n:<{width}} = {c}" for n, c in items) + "\n")
    return True


BUILTINS = {
    "cd": h_cd,
    "help": h_help,
    "exit": h_exit,
    "ls": h_dir,
    "dir": h_dir,
    "ps": h_ps,
    "clear": h_clear,
    "cls": h_clear,
    "pwd": h_pwd,
    "alias": h_alias,
    "unalias": h_unalias,
    "aliases": h_aliases,
}


def default_builtins() -> Registry[Handler]:
    return Registry("builtin", BUILTINS)
