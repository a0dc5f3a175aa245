"""
Switchyard context carrier: cancellation, well-known keys and parsed flags.

Scope
- Context is the single object threaded through before -> command/action -> after
  during one resolution. It carries:
  • a cooperative cancellation signal (cancel()/cancelled/wait()),
  • key-addressable values, looked up through the parent chain,
  • the FlagSet holding the flag values parsed for this invocation.

Semantics
- derive() creates a child scope. Cancelling a parent cancels every child derived
  from it; cancelling a child leaves the parent untouched. Parents hold their
  children weakly, so a long-lived parent shared by many dispatches does not grow.
- The dispatch engine only passes the context along; it never waits on it. Reacting to
  cancellation (for instance on SIGTERM) is up to hooks and commands.

Well-known keys
- PROGRAM_NAME, PROGRAM_VERSION, PROGRAM_COMMIT: set by the engine at dispatch start
  from the program's build metadata.
"""
import logging
import threading
import weakref
from typing import final

from .flags import FlagSet
from .utils import Unset

logger = logging.getLogger(__name__)


@final
class Key:
    """
    Identity-compared context key; two keys with the same label never collide.
    """

    __slots__ = ("label",)

    def __init__(self, label, /):
        self.label = label

    def __repr__(self):
        return f"Key({self.label!r})"


PROGRAM_NAME = Key("program.name")
PROGRAM_VERSION = Key("program.version")
PROGRAM_COMMIT = Key("program.commit")


class Context:
    """
    Cancellable, key-addressable scope for a single dispatch.

    Parameters
    - values: mapping or iterable of (key, value) pairs local to this scope.
    - flags: FlagSet for this scope; inherited from the parent when Unset, or an empty
      "global" set for a root context.
    - parent: Context to derive from (keyword-only); prefer parent.derive(...).
    """

    def __init__(self, values=(), /, flags=Unset, *, parent=Unset):
        if not isinstance(parent, Context | Unset):
            raise TypeError("Context 'parent' must be a context")
        if not isinstance(flags, FlagSet | Unset):
            raise TypeError("Context 'flags' must be a flag set")
        self._parent = parent
        self._values = dict(values)
        self._flags = flags if flags is not Unset else (parent.flags if parent is not Unset else FlagSet())
        self._event = threading.Event()
        self._children = weakref.WeakSet()
        self._lock = threading.Lock()
        if parent is not Unset:
            parent._adopt(self)

    @property
    def parent(self):
        return None if self._parent is Unset else self._parent

    @property
    def flags(self):
        return self._flags

    @property
    def children(self):
        """
        Live scopes derived from this one; a child is dropped once nothing references it.
        """
        with self._lock:
            return tuple(self._children)

    def derive(self, values=(), /, flags=Unset):
        """
        Return a child scope layering `values` (and optionally `flags`) over this one.
        """
        return Context(values, flags, parent=self)

    def _adopt(self, child):
        with self._lock:
            self._children.add(child)
            cancelled = self._event.is_set()
        if cancelled:
            child.cancel()

    def cancel(self):
        """
        Signal cancellation to this scope and every scope derived from it.
        """
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            children = list(self._children)
        logger.debug("context cancelled (%d derived scopes)", len(children))
        for child in children:
            child.cancel()

    @property
    def cancelled(self):
        return self._event.is_set()

    def wait(self, timeout=None):
        """
        Block until cancelled or until `timeout` seconds pass; True when cancelled.
        """
        return self._event.wait(timeout)

    def __getitem__(self, key):
        context = self
        while context is not Unset:
            if key in context._values:
                return context._values[key]
            context = context._parent
        raise KeyError(key)

    def __contains__(self, key):
        try:
            self[key]
        except KeyError:
            return False
        return True

    def get(self, key, default=None, /):
        try:
            return self[key]
        except KeyError:
            return default

    def __repr__(self):
        return f"Context(values={self._values!r}, cancelled={self.cancelled})"


__all__ = (
    "Key",
    "Context",
    "PROGRAM_NAME",
    "PROGRAM_VERSION",
    "PROGRAM_COMMIT",
)
