r"""
Switchyard flag registry: flag specifications and the per-invocation FlagSet.

Overview
- Specs
  • Option: named, value-bearing flag with one or more aliases (e.g., -o/--output).
  • Flag: named, presence-only switch (boolean), e.g., -d/--debug.

- Registry
  • FlagSet: maps every alias of every registered spec to that spec and holds the
    current value of each spec. A program keeps only specs; the dispatch engine builds
    a fresh FlagSet per invocation, so parsed values never leak between calls.

Metadata (validated on construction)
- names: one or more aliases matching r"--?[^\W\d_](-?[^\W_]+)*"; duplicates rejected.
  The help triggers (-h/--help) are reserved.
- default: Option defaults to None, Flag to False.
- type: Option only; a converter called on the raw string (str by default).
- descr: short description for usage output; non-empty when provided.
- hidden: suppressed from usage output.

Parsing (FlagSet.parse)
- Consumes leading switches only, stopping at the first non-switch token or after "--".
- Options accept "--name=value" and "--name value"; flags accept "--name" and
  "--name=<bool>" (1/0, t/f, true/false in any common casing).

Quick example:
    >>> flags = FlagSet("global", [
    ...     Flag("-d", "--debug", descr="enable debug logging"),
    ...     Option("-o", default="out.txt", descr="where to save the output"),
    ... ])
    >>> flags.parse(["-d", "-o=x.txt", "run", "-d"])
    ['run', '-d']
    >>> flags["debug"], flags["o"]
    (True, 'x.txt')
"""
import re
from collections.abc import Iterable

from .faults import UnknownFlagError, MissingFlagValueError, InvalidFlagValueError
from .utils import Unset, coalesce, mirror

_NAME = re.compile(r"--?[^\W\d_](-?[^\W_]+)*")
_RESERVED = frozenset(("-h", "--help"))
_TRUTHS = frozenset(("1", "t", "T", "true", "TRUE", "True"))
_FALSITIES = frozenset(("0", "f", "F", "false", "FALSE", "False"))


def _sanitize_names(cls, names, /):
    """
    Internal: validate aliases and order them short-first.

    Shorts (single dash) come before longs (double dash); within each kind the
    shorter alias wins, so names[0] is always the primary form used for sorting.
    """
    if not names:
        raise TypeError(f"{cls.__name__} requires at least one name")
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__name__} names must be strings")
        if not _NAME.fullmatch(name):
            raise ValueError(f"{cls.__name__} name {name!r} is not a valid flag name")
        if name in _RESERVED:
            raise ValueError(f"{cls.__name__} name {name!r} is reserved for help")
    if len(set(names)) != len(names):
        raise ValueError(f"{cls.__name__} names cannot be duplicated")
    shorts = sorted((name for name in names if not name.startswith("--")), key=len)
    longs = sorted((name for name in names if name.startswith("--")), key=len)
    return tuple(shorts + longs)


def _sanitize_descr(cls, descr, /):
    if not isinstance(descr, str | Unset):
        raise TypeError(f"{cls.__name__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__name__} 'descr' cannot be empty")
    return coalesce(descr)


class Option:
    """
    Named, value-bearing flag specification.

    The canonical key (used for lookups and in the parsed namespace) is the longest
    alias without its dashes, with inner dashes turned into underscores:
    Option("-o", "--output-dir").key == "output_dir".
    """

    names = mirror("names")
    key = mirror("key")
    default = mirror("default")
    type = mirror("type")
    descr = mirror("descr")
    hidden = mirror("hidden")

    def __init__(self, *names, default=Unset, type=str, descr=Unset, hidden=False):
        if not callable(type):
            raise TypeError(f"{self.__class__.__name__} 'type' must be callable")
        self._names = _sanitize_names(self.__class__, names)
        self._key = max(self._names, key=len).lstrip("-").replace("-", "_")
        self._default = coalesce(default)
        self._type = type
        self._descr = _sanitize_descr(self.__class__, descr)
        self._hidden = bool(hidden)

    @property
    def primary(self):
        return self._names[0]

    def convert(self, flag, raw, /):
        """
        Turn a raw string into the option's value, reporting converter failures as
        InvalidFlagValueError against the alias the user actually typed.
        """
        try:
            return self._type(raw)
        except (TypeError, ValueError) as error:
            raise InvalidFlagValueError(flag, raw, str(error) or "conversion failed") from error

    def display(self):
        """
        Render the default for usage output: booleans lowercased, None/"" as <none>.
        """
        if isinstance(self._default, bool):
            return str(self._default).lower()
        if self._default is None or self._default == "":
            return "<none>"
        return str(self._default)

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(map(repr, self._names))}, default={self._default!r})"


class Flag(Option):
    """
    Named, presence-only switch. Its value is False until the switch is given.
    """

    def __init__(self, *names, default=False, descr=Unset, hidden=False):
        super().__init__(*names, default=bool(default), type=bool, descr=descr, hidden=hidden)

    def convert(self, flag, raw, /):
        if raw in _TRUTHS:
            return True
        if raw in _FALSITIES:
            return False
        raise InvalidFlagValueError(flag, raw, "expected a boolean")


class FlagSet:
    """
    Registry of flag specs addressable by any alias, plus their current values.

    A FlagSet is cheap and disposable: derive() copies the specs and the current
    values into a new set, which is how a command's private flags get merged with
    the global ones without touching the parent set.
    """

    name = mirror("name")

    def __init__(self, name="global", specs=(), /):
        if not isinstance(name, str) or not name:
            raise TypeError("FlagSet name must be a non-empty string")
        self._name = name
        self._switches = {}
        self._specs = []
        self._values = {}
        for spec in specs:
            self.add(spec)

    @property
    def specs(self):
        return tuple(self._specs)

    def add(self, spec, /):
        """
        Register a spec under all of its aliases; returns the spec.

        Raises ValueError when an alias or the canonical key is already taken.
        """
        if not isinstance(spec, Option):
            raise TypeError("FlagSet.add() argument must be an Option or a Flag")
        for name in spec.names:
            if name in self._switches:
                raise ValueError(f"flag {name!r} is already defined in {self._name!r}")
        if spec.key in self._values:
            raise ValueError(f"flag key {spec.key!r} is already defined in {self._name!r}")
        self._switches.update(dict.fromkeys(spec.names, spec))
        self._specs.append(spec)
        self._values[spec.key] = spec.default
        return spec

    def option(self, *names, **options):
        return self.add(Option(*names, **options))

    def flag(self, *names, **options):
        return self.add(Flag(*names, **options))

    def lookup(self, name, /):
        """
        Find a spec by alias ("-o", "--output"), bare alias ("output") or key.
        """
        for candidate in (name, "-" + name, "--" + name):
            if candidate in self._switches:
                return self._switches[candidate]
        for spec in self._specs:
            if spec.key == name:
                return spec
        raise KeyError(name)

    def __contains__(self, name):
        try:
            self.lookup(name)
        except KeyError:
            return False
        return True

    def __getitem__(self, name):
        return self._values[self.lookup(name).key]

    def get(self, name, default=None, /):
        try:
            return self[name]
        except KeyError:
            return default

    def __len__(self):
        return len(self._specs)

    def namespace(self):
        """
        Snapshot of the current values keyed by canonical key.
        """
        return dict(self._values)

    def derive(self, name, /):
        """
        Copy the specs and current values into a new FlagSet called `name`.
        """
        derived = FlagSet(name, self._specs)
        derived._values.update(self._values)
        return derived

    def parse(self, tokens, /):
        """
        Consume leading switches from tokens and return the remaining tokens.

        Raises
        - UnknownFlagError: a switch that names no registered alias.
        - MissingFlagValueError: an option given last without a value.
        - InvalidFlagValueError: the converter rejected the value.
        """
        if not isinstance(tokens, Iterable) or isinstance(tokens, str):
            raise TypeError("FlagSet.parse() argument must be an iterable of strings")
        tokens = list(tokens)
        index = 0
        while index < len(tokens):
            token = tokens[index]
            if token == "--":
                index += 1
                break
            if not token.startswith("-") or token == "-":
                break
            name, assigned, inline = token.partition("=")
            if (spec := self._switches.get(name)) is None:
                raise UnknownFlagError(name)
            if isinstance(spec, Flag):
                value = spec.convert(name, inline) if assigned else True
            elif assigned:
                value = spec.convert(name, inline)
            elif index + 1 < len(tokens):
                index += 1
                value = spec.convert(name, tokens[index])
            else:
                raise MissingFlagValueError(name)
            self._values[spec.key] = value
            index += 1
        return tokens[index:]

    def describe(self):
        """
        Rows of (label, description) for every visible spec, sorted by the primary
        alias with its dashes stripped.

        Example row: ("-d, --debug", "enable debug logging (default: false)")
        """
        rows = []
        for spec in sorted(self._specs, key=lambda x: x.primary.lstrip("-")):
            if spec.hidden:
                continue
            default = f"(default: {spec.display()})"
            rows.append((", ".join(spec.names), f"{spec.descr} {default}" if spec.descr else default))
        return rows

    def __repr__(self):
        return f"FlagSet({self._name!r}, {self._values!r})"


__all__ = (
    "Option",
    "Flag",
    "FlagSet",
)
