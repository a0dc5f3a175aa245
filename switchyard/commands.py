"""
Switchyard command layer: the command capability contract and its built-in variants.

What this module provides
- Command: abstract capability every subcommand implements:
  • identity and help: name, args, short_help, long_help, hidden
  • register(flags): bind command-private flags into the FlagSet of the current dispatch
  • run(context, args): execute; failures are signalled by raising

- Factories and built-ins:
  • command(...): wrap a plain callable `fn(context, args)` into a Command, directly or as
    a decorator.
  • VersionCommand: the synthesized `version` command; prints build metadata it receives
    explicitly through BuildInfo.

Quick start
    from switchyard import command, Flag

    @command(flags=[Flag("-f", "--force", descr="overwrite existing files")])
    def sync(context, args):
        \"\"\"Copy the tree to the mirror.\"\"\"
        if context.flags["force"]:
            ...

Design notes
- Commands are looked up by exact, case-sensitive name. The engine never inspects the
  concrete type of a command; it only calls the members listed above.
"""
import inspect
import platform
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import NamedTuple

from rich.console import Console
from rich.text import Text

from .flags import Option
from .utils import Unset, coalesce


class Command(ABC):
    """
    Capability contract for a subcommand.

    Only `name` and `run` are required. The remaining members have neutral defaults:
    no argument usage, no help, visible, and no private flags.
    """

    @property
    @abstractmethod
    def name(self):
        """Unique lookup key of the command."""

    @property
    def args(self):
        """Argument usage shown after the command name, e.g. "<src> <dst>"."""
        return ""

    @property
    def short_help(self):
        return ""

    @property
    def long_help(self):
        return self.short_help

    @property
    def hidden(self):
        return False

    def register(self, flags, /):
        """Bind the command's private flags into `flags` (a FlagSet)."""

    @abstractmethod
    def run(self, context, args, /):
        """Execute with the dispatch context and the residual arguments."""

    def __repr__(self):
        return f"<{type(self).__name__} {self.name!r}>"


class FunctionCommand(Command):
    """
    Command backed by a callable `callback(context, args)`.

    Defaults
    - name: callback.__name__ with underscores turned into dashes.
    - long help: the callback's docstring; short help: its first line.
    - flags: Option/Flag specs registered on every dispatch that selects this command.
    """

    def __init__(self, callback, /, name=Unset, args=Unset, short=Unset, descr=Unset, hidden=False, flags=()):
        if not callable(callback):
            raise TypeError("command callback must be callable")
        name = coalesce(name, getattr(callback, "__name__", "").replace("_", "-"))
        if not isinstance(name, str) or not name or name.startswith("-") or any(c.isspace() for c in name):
            raise ValueError(f"command name {name!r} is not valid")
        for value, label in ((args, "args"), (short, "short"), (descr, "descr")):
            if not isinstance(value, str | Unset):
                raise TypeError(f"command {label!r} must be a string")
        flags = tuple(flags)
        if not all(isinstance(flag, Option) for flag in flags):
            raise TypeError("command 'flags' must be Option or Flag specs")
        self._callback = callback
        self._name = name
        self._args = coalesce(args, "")
        self._long = coalesce(descr, inspect.getdoc(callback) or "")
        self._short = coalesce(short, self._long.partition("\n")[0])
        self._hidden = bool(hidden)
        self._flags = flags

    @property
    def name(self):
        return self._name

    @property
    def args(self):
        return self._args

    @property
    def short_help(self):
        return self._short

    @property
    def long_help(self):
        return self._long

    @property
    def hidden(self):
        return self._hidden

    def register(self, flags, /):
        for flag in self._flags:
            flags.add(flag)

    def run(self, context, args, /):
        return self._callback(context, args)


def command(source=Unset, /, **options):
    """
    Create a Command from a callable, or return a decorator that does.

    Forms
    - command(fn, name=..., ...) -> Command
    - @command / @command(name=..., flags=[...]) -> decorator producing a Command

    Options
    - name, args, short, descr, hidden, flags (see FunctionCommand).
    """
    if source is Unset:
        def wrapper(source, /):
            return FunctionCommand(source, **options)

        return wrapper
    return FunctionCommand(source, **options)


class BuildInfo(NamedTuple):
    """
    Build metadata handed to the version command at construction time.
    """
    name: str
    version: str = ""
    commit: str = ""


class VersionCommand(Command):
    """
    Built-in `version` command.

    Prints a fixed-format banner to the primary (stdout) console:

        <name>:
         version     : <version>
         git hash    : <commit>
         python      : <python version>
         platform    : <system>/<machine>

    Empty metadata is shown as <none>. Styling follows the program's `colorful` switch
    and the host's __styles__ overrides.
    """

    help = "Show the version information."

    def __init__(self, info, /, console=Unset, *, colorful=False):
        if not isinstance(info, BuildInfo):
            raise TypeError("VersionCommand info must be a BuildInfo")
        self._info = info
        self._console = console
        self._colorful = bool(colorful)

    @property
    def info(self):
        return self._info

    @property
    def name(self):
        return "version"

    @property
    def short_help(self):
        return self.help

    def run(self, context, args, /):
        # Resolve the console late so a redirected sys.stdout is honoured.
        console = coalesce(self._console, Console(highlight=False))
        styles = defaultdict(str, {
            "program-name": "bold #FF4D94",  # Magenta-pink brand pop
            "version-label": "bold #FFFFFF",
            "version-value": "#00E6FF",  # Cyan values
        } | getattr(__import__("__main__"), "__styles__", {}))

        def text(fragment, style):
            return Text(fragment, styles[style] if self._colorful else "")

        rows = (
            ("version", self._info.version),
            ("git hash", self._info.commit),
            ("python", platform.python_version()),
            ("platform", f"{platform.system().lower()}/{platform.machine().lower()}"),
        )
        banner = Text.assemble(text(self._info.name, "program-name"), ":")
        for label, value in rows:
            banner.append("\n ").append(text(label.ljust(11), "version-label"))
            banner.append(" : ").append(text(value or "<none>", "version-value"))
        console.print(banner)


__all__ = (
    "Command",
    "FunctionCommand",
    "command",
    "BuildInfo",
    "VersionCommand",
)
