"""
Switchyard dispatch engine: build a program, resolve an argument vector, run it.

What this module provides
- ProgramBuilder: collects name, description, build metadata, global flags, commands,
  lifecycle hooks and output consoles, then build() returns an immutable Program.
- Program: resolve(args) decides exactly one outcome for an argument vector:
  • print usage (empty vector, help trigger, or nothing to run),
  • run a matched command, or the fallback action, wrapped by before/after,
  • report an unknown command or a flag failure (with usage).
  main() is the process-facing wrapper: it prints errors and usage to stderr and
  returns an exit status.
- Hook: optional callable; absence is a no-op with implicit success.
- Dispatch: the (usage, error) pair returned by resolve().

Resolution order
1. args is None or empty → Dispatch(True, None); nothing runs.
2. args[0] (the invocation name) is dropped; the rest is the residual.
3. "--help", "-h" or "help" anywhere in the residual → Dispatch(True, None); nothing runs.
   The usage target is the first command named before the trigger, else the root.
4. head (the first residual token) names a command → the global flags and the
   command's own flags are parsed from the tokens after it, target is
   (command.run, rest).
5. Otherwise, without an action: Dispatch(True, UnknownCommandError(head)), or
   Dispatch(True, None) for an empty residual. With an action: leading global flags
   are parsed from the residual and the action gets what remains.
   Any flag failure → Dispatch(True, <FlagError>); nothing runs.
6. before → runnable → after. The first one to raise stops the sequence and its
   exception is returned as-is with usage False.

Quick start
    from switchyard import ProgramBuilder

    builder = ProgramBuilder("yo", 'A tool that prints "yo"', version="v0.1.0", commit="ef2f64f")
    builder.flag("-d", descr="enable debug logging")

    @builder.action
    def main(context, args):
        print("yo")

    raise SystemExit(builder.build().main())
"""
import logging
import os
import sys
from typing import NamedTuple

from rich.console import Console

from .commands import Command, BuildInfo, VersionCommand, command
from .context import Context, PROGRAM_NAME, PROGRAM_VERSION, PROGRAM_COMMIT
from .faults import UnknownCommandError, FlagError, report
from .flags import FlagSet
from .usage import render_root, render_command, show
from .utils import Unset, coalesce, mirror

logger = logging.getLogger(__name__)

HELP_TRIGGERS = frozenset(("--help", "-h", "help"))


class Hook:
    """
    Optional callable value.

    Hook() is absent: calling it does nothing and returns None. Hook(fn) is present and
    forwards every call to fn. The engine calls hooks unconditionally, so there is no
    "is it set?" branch anywhere in the dispatch path.
    """

    __slots__ = ("_callback",)

    def __init__(self, callback=Unset, /):
        if callback is not Unset and not callable(callback):
            raise TypeError("hook must be callable")
        self._callback = callback

    @property
    def present(self):
        return self._callback is not Unset

    @property
    def callback(self):
        return coalesce(self._callback)

    def __bool__(self):
        return self.present

    def __call__(self, *args):
        if self._callback is Unset:
            return None
        return self._callback(*args)

    def __repr__(self):
        if self._callback is Unset:
            return "Hook(<absent>)"
        return f"Hook({getattr(self._callback, '__qualname__', self._callback)!r})"


class Dispatch(NamedTuple):
    """
    Outcome of one resolution.

    usage is True only when nothing ran (no hook, command or action); error is the
    exception produced by the stage that failed, or None.
    """
    usage: bool
    error: Exception | None = None


class _Resolution(NamedTuple):
    dispatch: Dispatch
    target: Command | None = None
    helped: bool = False


class Program:
    """
    Immutable, validated program configuration plus the dispatch engine.

    Build one with ProgramBuilder; every field is exposed read-only and collections are
    returned as read-only views. Nothing on a Program changes once built, which makes
    resolve() idempotent: the same arguments always give the same Dispatch.
    """

    __slots__ = (
        "_name",
        "_description",
        "_version",
        "_commit",
        "_flags",
        "_commands",
        "_before",
        "_action",
        "_after",
        "_stdout",
        "_stderr",
        "_colorful",
    )

    name = mirror("name")
    description = mirror("description")
    version = mirror("version")
    commit = mirror("commit")
    flags = mirror("flags")
    before = mirror("before")
    action = mirror("action")
    after = mirror("after")
    colorful = mirror("colorful")

    def __init__(
            self,
            *,
            name,
            description="",
            version="",
            commit="",
            flags=(),
            commands=(),
            before=Unset,
            action=Unset,
            after=Unset,
            stdout=Unset,
            stderr=Unset,
            colorful=False
    ):
        for value, label in ((name, "name"), (description, "description"), (version, "version"), (commit, "commit")):
            if not isinstance(value, str):
                raise TypeError(f"program {label!r} must be a string")
        if not name:
            raise ValueError("program 'name' cannot be empty")
        for value, label in ((stdout, "stdout"), (stderr, "stderr")):
            if not isinstance(value, Console | Unset):
                raise TypeError(f"program {label!r} must be a rich console")

        self._name = name
        self._description = description
        self._version = version
        self._commit = commit
        self._stdout = stdout
        self._stderr = stderr
        self._colorful = bool(colorful)

        # Building the set validates the specs and rejects alias collisions.
        self._flags = FlagSet("global", flags).specs

        self._commands = {}
        for item in commands:
            if not isinstance(item, Command):
                raise TypeError(f"program commands must be Command instances, got {type(item).__name__}")
            if item.name in self._commands:
                raise ValueError(f"command {item.name!r} is already defined")
            self._commands[item.name] = item
        # The built-in version command yields to a user command of the same name.
        if "version" not in self._commands:
            self._commands["version"] = VersionCommand(
                BuildInfo(name, version, commit), stdout, colorful=self._colorful
            )

        self._before = before if isinstance(before, Hook) else Hook(before)
        self._action = action if isinstance(action, Hook) else Hook(action)
        self._after = after if isinstance(after, Hook) else Hook(after)

    @property
    def commands(self):
        return tuple(self._commands.values())

    def lookup(self, name, /):
        """
        Exact, case-sensitive command lookup; None when nothing matches.
        """
        return self._commands.get(name)

    def resolve(self, args, /, context=Unset):
        """
        Resolve an argument vector (element 0 is the invocation name) into a Dispatch.

        Parameters
        - args: sequence of strings, or None.
        - context: parent Context whose cancellation and values are inherited; a fresh
          root context is used when Unset.

        Returns
        - Dispatch(usage, error); see the module docstring for the full decision order.
        """
        return self._resolve(args, context).dispatch

    def _resolve(self, args, context):
        if not isinstance(context, Context | Unset):
            raise TypeError("resolve() 'context' must be a context")
        args = [] if args is None else list(args)
        if len(args) < 1:
            logger.debug("%s: empty argument vector, printing usage", self._name)
            return _Resolution(Dispatch(True))

        residual = args[1:]
        if HELP_TRIGGERS.intersection(residual):
            target = self._help_target(residual)
            logger.debug("%s: help requested for %s", self._name, target.name if target else "the program")
            return _Resolution(Dispatch(True), target, True)

        flags = FlagSet("global", self._flags)
        if residual and (matched := self._commands.get(residual[0])) is not None:
            # Global and command flags are read together from the tokens after the name.
            flags = flags.derive(matched.name)
            matched.register(flags)
            try:
                tail = flags.parse(residual[1:])
            except FlagError as error:
                logger.debug("%s %s: flags rejected: %s", self._name, matched.name, error)
                return _Resolution(Dispatch(True, error), matched)
            logger.debug("%s: running command %r with %r", self._name, matched.name, tail)
            return _Resolution(self._sequence(self._context(context, flags), matched.run, tail), matched)

        if not self._action:
            if residual:
                logger.debug("%s: %r matches no command and there is no action", self._name, residual[0])
                return _Resolution(Dispatch(True, UnknownCommandError(residual[0])))
            logger.debug("%s: nothing to run, printing usage", self._name)
            return _Resolution(Dispatch(True))

        try:
            residual = flags.parse(residual)
        except FlagError as error:
            logger.debug("%s: global flags rejected: %s", self._name, error)
            return _Resolution(Dispatch(True, error))
        logger.debug("%s: running action with %r", self._name, residual)
        return _Resolution(self._sequence(self._context(context, flags), self._action, residual))

    def _help_target(self, residual):
        for token in residual:
            if token in HELP_TRIGGERS:
                break
            if (matched := self._commands.get(token)) is not None:
                return matched
        return None

    def _context(self, parent, flags):
        parent = coalesce(parent, Context())
        return parent.derive({
            PROGRAM_NAME: self._name,
            PROGRAM_VERSION: self._version,
            PROGRAM_COMMIT: self._commit,
        }, flags)

    def _sequence(self, context, runnable, args):
        # Before > runnable > after: the first stage to raise decides the error.
        try:
            self._before(context)
        except Exception as error:
            logger.debug("%s: before hook failed: %r", self._name, error)
            return Dispatch(False, error)
        try:
            runnable(context, list(args))
        except Exception as error:
            logger.debug("%s: runnable failed: %r", self._name, error)
            return Dispatch(False, error)
        try:
            self._after(context)
        except Exception as error:
            logger.debug("%s: after hook failed: %r", self._name, error)
            return Dispatch(False, error)
        return Dispatch(False)

    def usage(self, command=Unset, /):
        """
        Build the usage block (a rich Text) for the program, or for one command.
        """
        flags = FlagSet("global", self._flags)
        if command is Unset or command is None:
            return render_root(self._name, self._description, flags, self.commands, colorful=self._colorful)
        if not isinstance(command, Command):
            raise TypeError("usage() argument must be a command")
        flags = flags.derive(command.name)
        command.register(flags)
        return render_command(self._name, command, flags, colorful=self._colorful)

    def print_usage(self, command=Unset, /):
        """
        Print the usage block for the program (or one command) on the stderr console.
        """
        show(self._diagnostics(), self.usage(command))

    def _diagnostics(self):
        return coalesce(self._stderr, Console(stderr=True, highlight=False))

    def main(self, argv=Unset, /):
        """
        Resolve argv (sys.argv by default), surface the outcome on stderr and return an
        exit status.

        Returns
        - 0 when everything ran, or when usage was explicitly requested with a help trigger.
        - 1 on any error, or when usage is printed because there was nothing to run.
        """
        resolution = self._resolve(coalesce(argv, sys.argv), Unset)
        usage, error = resolution.dispatch
        if error is not None:
            report(error, self._diagnostics(), prog=self._name, colorful=self._colorful)
        if usage:
            self.print_usage(resolution.target)
        if error is not None or (usage and not resolution.helped):
            return 1
        return 0

    def __repr__(self):
        return f"Program({self._name!r}, commands={list(self._commands)!r})"


class ProgramBuilder:
    """
    Mutable staging area for a Program.

    Parameters
    - name: display name; defaults to the basename of sys.argv[0].
    - description: one-line description for the usage banner.
    - version, commit: build metadata for the version command and the context.
    - stdout, stderr: rich consoles for command output and diagnostics; resolved at use
      time when Unset, so redirections of sys.stdout/sys.stderr are honoured.
    - colorful: style usage/version/fault output with the palette.

    Hooks are registered with before()/action()/after(), which return the callable so
    they work as decorators. Each hook can be set only once.
    """

    def __init__(self, name=Unset, description="", *, version="", commit="", stdout=Unset, stderr=Unset, colorful=False):
        self._name = coalesce(name, os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "program")
        self._description = description
        self._version = version
        self._commit = commit
        self._stdout = stdout
        self._stderr = stderr
        self._colorful = colorful
        self._flags = FlagSet("global")
        self._commands = {}
        self._hooks = {"before": Unset, "action": Unset, "after": Unset}

    @property
    def flags(self):
        return self._flags

    def add_flag(self, spec, /):
        return self._flags.add(spec)

    def option(self, *names, **options):
        return self._flags.option(*names, **options)

    def flag(self, *names, **options):
        return self._flags.flag(*names, **options)

    def add_command(self, *commands):
        """
        Register Command instances; names must be unique.
        """
        for item in commands:
            if not isinstance(item, Command):
                raise TypeError(f"add_command() arguments must be commands, got {type(item).__name__}")
            if item.name in self._commands:
                raise ValueError(f"command {item.name!r} is already defined")
            self._commands[item.name] = item
        return self

    def command(self, source=Unset, /, **options):
        """
        Wrap a callable into a command and register it; usable as a decorator.

        Returns the created Command (direct form) or a decorator producing it.
        """
        if source is Unset:
            def wrapper(source, /):
                return self.command(source, **options)

            return wrapper
        created = command(source, **options)
        self.add_command(created)
        return created

    def _hook(self, kind, callback):
        if not callable(callback):
            raise TypeError(f"{kind} hook must be callable")
        if self._hooks[kind] is not Unset:
            raise TypeError(f"{kind} hook cannot be overridden")
        self._hooks[kind] = callback
        return callback

    def before(self, callback, /):
        return self._hook("before", callback)

    def action(self, callback, /):
        return self._hook("action", callback)

    def after(self, callback, /):
        return self._hook("after", callback)

    def build(self):
        """
        Validate everything collected so far and return an immutable Program.
        """
        program = Program(
            name=self._name,
            description=self._description,
            version=self._version,
            commit=self._commit,
            flags=self._flags.specs,
            commands=tuple(self._commands.values()),
            before=self._hooks["before"],
            action=self._hooks["action"],
            after=self._hooks["after"],
            stdout=self._stdout,
            stderr=self._stderr,
            colorful=self._colorful,
        )
        logger.debug("built %r", program)
        return program


__all__ = (
    "Hook",
    "Dispatch",
    "Program",
    "ProgramBuilder",
    "HELP_TRIGGERS",
)
