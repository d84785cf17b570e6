"""
Listener registry for mutation notifications.

Listeners are called as ``fn(type, path_parts, payload)`` in registration
order. One-shot listeners are removed after their first call unless that
call returns exactly ``False``.
"""
from dataclasses import dataclass
from enum import Enum
import logging
from types import MethodType
from typing import Any, Callable, List, Optional

from proxystate.errors import InvalidListenerError

logger = logging.getLogger(__name__)


class MutationType(str, Enum):
    """Kind of mutation reported to listeners. Compares equal to its value."""
    SET = "set"
    DELETE = "delete"
    ARRAY_MUTATION = "arrayMutation"


MutationListener = Callable[[str, List[str], Any], Any]

# Returned by a one-shot listener to stay registered
KEEP_LISTENER = False


def _same_listener(registered: MutationListener, fn: MutationListener) -> bool:
    """Identity match; bound methods match when bound to the same object."""
    if registered is fn:
        return True
    return isinstance(fn, MethodType) and isinstance(registered, MethodType) and registered == fn


@dataclass(eq=False)
class _ListenerEntry:
    fn: MutationListener
    once: bool


class ListenerRegistry:
    """Ordered set of mutation listeners with per-listener one-shot flags.

    Listeners are matched by identity, so unhashable callables (e.g. dataclass
    instances defining __call__) can be registered.

    Not thread-safe (all operations expected on one thread).
    """

    def __init__(self, isolate_errors: bool = True, strict: bool = False):
        """
        Args:
            isolate_errors: Log listener exceptions and keep dispatching
                instead of propagating them.
            strict: Raise InvalidListenerError for non-callable listeners
                instead of ignoring them.
        """
        self._entries: List[_ListenerEntry] = []
        self._isolate_errors = isolate_errors
        self._strict = strict

    def _find(self, fn: MutationListener) -> Optional[_ListenerEntry]:
        for entry in self._entries:
            if _same_listener(entry.fn, fn):
                return entry
        return None

    def add(self, fn: MutationListener, once: bool = False) -> None:
        """Register fn. Re-adding resets its once flag and moves it to the end."""
        if not callable(fn):
            if self._strict:
                raise InvalidListenerError(fn)
            logger.debug(f"Ignoring non-callable mutation listener: {fn!r}")
            return

        existing = self._find(fn)
        if existing is not None:
            self._entries.remove(existing)
        self._entries.append(_ListenerEntry(fn, bool(once)))
        logger.debug(f"Connected mutation listener: {fn} (once={bool(once)})")

    def remove(self, fn: MutationListener) -> None:
        """Unregister fn. No-op if it is not registered."""
        entry = self._find(fn)
        if entry is not None:
            self._entries.remove(entry)
            logger.debug(f"Disconnected mutation listener: {fn}")

    def clear(self) -> None:
        self._entries.clear()

    def _retire_once(self, entry: _ListenerEntry) -> None:
        # Only the registration that was just called; a re-add during the call wins
        if entry.once and entry in self._entries:
            self._entries.remove(entry)

    def dispatch(self, mutation_type: str, path: List[str], payload: Any) -> None:
        """Call every listener registered before this dispatch started.

        Listeners removed during dispatch still receive the in-flight event;
        listeners added during dispatch do not.
        """
        for entry in list(self._entries):
            try:
                result = entry.fn(mutation_type, path, payload)
            except Exception:
                self._retire_once(entry)
                if not self._isolate_errors:
                    raise
                logger.warning(
                    f"Error in mutation listener {entry.fn} for {mutation_type} at {path}",
                    exc_info=True,
                )
                continue

            if result is not KEEP_LISTENER:
                self._retire_once(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, fn: object) -> bool:
        return self._find(fn) is not None
