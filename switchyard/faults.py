"""
Switchyard faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing failure the
  engine itself raises. Codes are grouped by domain to keep copy consistent and make
  logs/searches predictable.
- CommandException: base type that carries a message + options and knows how to render
  itself through rich (header, message, hint).
- report(): central entry point to surface any failure on a diagnostic console.

Integration
- The dispatch engine never prints faults; it returns them inside a Dispatch result.
- Program.main() hands whatever error came back to report(), which renders
  CommandException instances with rich and any other exception as "<prog>: <error>".
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes raised by the dispatch engine (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND
    - flags (1111x)
      • UNKNOWN_FLAG, MISSING_FLAG_VALUE, INVALID_FLAG_VALUE
    - delegated (1113x)
      • DELEGATED_ERROR: anything raised by a hook or a command without its own code

    normalize() lets a host remap numeric ids to friendlier labels through a
    __codes__ mapping defined in __main__.
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND    = 11101

    # --- flag errors (11xxx) ---
    UNKNOWN_FLAG       = 11112
    MISSING_FLAG_VALUE = 11117
    INVALID_FLAG_VALUE = 11124

    # --- delegated errors (11xxx) ---
    DELEGATED_ERROR    = 11131

    def normalize(self):
        """
        return a host-normalized string for this code.

        when __main__ defines no __codes__ mapping (or has no entry for this
        code), the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    Base class for failures detected by the engine.

    The message is the exception text verbatim (str(fault) == message), so callers
    comparing error strings see exactly what was raised. Rendering options
    (prog, colorful, title, hint, code) are kept in a read-only mapping and can be
    overridden per report through __replace__.
    """

    code = FaultCode.DELEGATED_ERROR
    title = "command error"
    hint = Unset

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)

        def text(fragment, style):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        code = self.options.get("code", self.code)
        title = self.options.get("title", self.title)
        hint = coalesce(self.options.get("hint", self.hint))

        header = Text.assemble(
            "[ ",
            text(self.options.get("prog", getattr(main, "__prog__", "")), "prog-name"),
            " — ",
            text(code.normalize(), "code"),
            " | ",
            text(title.title(), "error-title"),
            " ]"
        )
        renders = [header, text(self.message, "error-message")]
        if hint:
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
        return Group(*renders)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        # Subclasses have their own constructors; clone the state instead of re-running them.
        fault = Exception.__new__(type(self))
        fault.__dict__.update(self.__dict__)
        fault.args = self.args
        fault.options = MappingProxyType({**self.options, **overrides})
        return fault


class UnknownCommandError(CommandException):
    """
    Raised (returned) when a residual head token names no command and no fallback
    action is configured.
    """

    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"

    def __init__(self, token, /, **options):
        self.token = token
        options.setdefault("hint", "run with --help to list the available commands")
        super().__init__(f"{token}: no such command", **options)


class FlagError(CommandException):
    """
    Base class for flag registry failures; `flag` is the offending token as typed.
    """

    title = "bad flag"

    def __init__(self, message, /, flag, **options):
        self.flag = flag
        super().__init__(message, **options)


class UnknownFlagError(FlagError):
    code = FaultCode.UNKNOWN_FLAG
    title = "unknown flag"

    def __init__(self, flag, /, **options):
        options.setdefault("hint", "run with --help to list the accepted flags")
        super().__init__(f"flag provided but not defined: {flag}", flag, **options)


class MissingFlagValueError(FlagError):
    code = FaultCode.MISSING_FLAG_VALUE
    title = "missing flag value"

    def __init__(self, flag, /, **options):
        options.setdefault("hint", f"pass a value as '{flag} VALUE' or '{flag}=VALUE'")
        super().__init__(f"flag needs an argument: {flag}", flag, **options)


class InvalidFlagValueError(FlagError):
    code = FaultCode.INVALID_FLAG_VALUE
    title = "invalid flag value"

    def __init__(self, flag, value, reason, /, **options):
        self.value = value
        super().__init__(f"invalid value {value!r} for flag {flag}: {reason}", flag, **options)


def report(fault, /, console, *, prog, colorful=False):
    """
    surface a failure on a (diagnostic) console.

    contract
    - CommandException instances are rendered through their __rich__ hook, with prog
      and colorful merged into their options.
    - any other exception is printed as "<prog>: <error>", the plain form callers of
      a command-line tool expect.
    """
    if isinstance(fault, CommandException):
        console.print(fault.__replace__(prog=prog, colorful=colorful))
    else:
        console.print(Text(f"{prog}: {fault}"))


__all__ = (
    "CommandException",
    "UnknownCommandError",
    "FlagError",
    "UnknownFlagError",
    "MissingFlagValueError",
    "InvalidFlagValueError",
    "FaultCode",
    "report",
)
