"""
Transparent wrappers for tracked dicts, lists and plain objects.

Wrappers hold no tracking state of their own beyond a stable id; all metadata
lives in the owning Tracker's WrapperStateStore. Reads of composite fields go
through Tracker.read() (lazy child wrapping), writes and deletes through
Tracker.emit(), and in-place list methods through Tracker.mutate_array().

Field keys as reported in paths:
    TrackedDict   -> the str key (non-str keys are untracked)
    TrackedList   -> decimal str of the non-negative index
    TrackedObject -> the attribute name (dunder names are untracked)
"""
from collections.abc import MutableMapping, MutableSequence
from dataclasses import is_dataclass
import operator
from types import SimpleNamespace
from typing import Any, Iterator, Optional

from proxystate.listeners import MutationType

# Attribute names a TrackedObject resolves on itself rather than on the wrapped object
RESERVED_NAMES = frozenset({'_target', '_tracker', '_wrapper_id', '_field_key'})


def unwrap(value: Any) -> Any:
    """Return the raw value behind a wrapper; anything else is returned as-is."""
    if isinstance(value, TrackedNode):
        return object.__getattribute__(value, '_target')
    return value


def is_tracked(value: Any) -> bool:
    """True if value is a wrapper (valid or discarded)."""
    return isinstance(value, TrackedNode)


def wrapper_type_for(value: Any, track_objects: bool = True) -> Optional[type]:
    """Pick the wrapper class for value, or None if value is a scalar."""
    if isinstance(value, dict):
        return TrackedDict
    if isinstance(value, list):
        return TrackedList
    if track_objects:
        if isinstance(value, SimpleNamespace):
            return TrackedObject
        if is_dataclass(value) and not isinstance(value, type):
            return TrackedObject
    return None


class TrackedNode:
    """Common base for all wrappers."""
    __slots__ = ('_target', '_tracker', '_wrapper_id', '__weakref__')

    def __init__(self, target: Any, tracker: Any, wrapper_id: int):
        object.__setattr__(self, '_target', target)
        object.__setattr__(self, '_tracker', tracker)
        object.__setattr__(self, '_wrapper_id', wrapper_id)

    def __eq__(self, other: object) -> bool:
        return self._target == unwrap(other)

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._target!r})"


class TrackedDict(TrackedNode, MutableMapping):
    """Wrapper for a dict. String keys are tracked fields."""
    __slots__ = ()

    @staticmethod
    def _field_key(key: Any) -> Optional[str]:
        return key if isinstance(key, str) else None

    def __getitem__(self, key: Any) -> Any:
        raw_value = self._target[key]
        field_key = self._field_key(key)
        if field_key is None:
            return raw_value
        return self._tracker.read(self, field_key, raw_value)

    def __setitem__(self, key: Any, value: Any) -> None:
        value = unwrap(value)
        self._target[key] = value
        field_key = self._field_key(key)
        if field_key is not None:
            self._tracker.emit(self, MutationType.SET, field_key, value)

    def __delitem__(self, key: Any) -> None:
        del self._target[key]
        field_key = self._field_key(key)
        if field_key is not None:
            self._tracker.emit(self, MutationType.DELETE, field_key, None)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._target)

    def __len__(self) -> int:
        return len(self._target)

    def __contains__(self, key: object) -> bool:
        return key in self._target

    # Removed values are detached from the graph, so hand them back raw
    _MISSING = object()

    def pop(self, key: Any, default: Any = _MISSING) -> Any:
        if key not in self._target:
            if default is self._MISSING:
                raise KeyError(key)
            return default
        value = self._target[key]
        del self[key]
        return value

    def popitem(self) -> tuple:
        if not self._target:
            raise KeyError('popitem(): dictionary is empty')
        key = next(reversed(self._target))
        return key, self.pop(key)

    # Non-mutating dict operations return raw results
    def copy(self) -> dict:
        return self._target.copy()

    def __reversed__(self) -> Iterator[Any]:
        return reversed(self._target)

    def __or__(self, other: Any) -> Any:
        return self._target | unwrap(other)

    def __ror__(self, other: Any) -> Any:
        return unwrap(other) | self._target

    def __ior__(self, other: Any) -> 'TrackedDict':
        self.update(other)
        return self


class TrackedList(TrackedNode, MutableSequence):
    """Wrapper for a list.

    Index reads/writes/deletes are tracked fields. Slice assignment, slice
    deletion and every in-place list method are reported as a single
    arrayMutation event.
    """
    __slots__ = ()

    def _field_key(self, index: Any) -> Optional[str]:
        if isinstance(index, bool):
            return None
        try:
            position = operator.index(index)
        except TypeError:
            return None
        if position < 0:
            position += len(self._target)
        return str(position)

    def _mutate(self, method_name: str, *args: Any, **kwargs: Any) -> Any:
        operation = getattr(self._target, method_name)
        return self._tracker.mutate_array(self, method_name, operation, args, kwargs)

    def __getitem__(self, index: Any) -> Any:
        raw_value = self._target[index]
        field_key = self._field_key(index)
        if field_key is None:
            return raw_value
        return self._tracker.read(self, field_key, raw_value)

    def __setitem__(self, index: Any, value: Any) -> None:
        if isinstance(index, slice):
            self._mutate('__setitem__', index, [unwrap(v) for v in value])
            return
        value = unwrap(value)
        self._target[index] = value
        field_key = self._field_key(index)
        if field_key is not None:
            self._tracker.emit(self, MutationType.SET, field_key, value)

    def __delitem__(self, index: Any) -> None:
        if isinstance(index, slice):
            self._mutate('__delitem__', index)
            return
        field_key = self._field_key(index)
        del self._target[index]
        self._tracker.retire_moved_children(self)
        if field_key is not None:
            self._tracker.emit(self, MutationType.DELETE, field_key, None)

    def __len__(self) -> int:
        return len(self._target)

    def __iter__(self) -> Iterator[Any]:
        for index in range(len(self._target)):
            yield self[index]

    def __contains__(self, value: object) -> bool:
        return unwrap(value) in self._target

    def append(self, value: Any) -> None:
        self._mutate('append', unwrap(value))

    def extend(self, values: Any) -> None:
        self._mutate('extend', [unwrap(v) for v in values])

    def insert(self, index: int, value: Any) -> None:
        self._mutate('insert', index, unwrap(value))

    def pop(self, *index: int) -> Any:
        return self._mutate('pop', *index)

    def remove(self, value: Any) -> None:
        self._mutate('remove', unwrap(value))

    def clear(self) -> None:
        self._mutate('clear')

    def sort(self, **kwargs: Any) -> None:
        self._mutate('sort', **kwargs)

    def reverse(self) -> None:
        self._mutate('reverse')

    def __iadd__(self, values: Any) -> 'TrackedList':
        self.extend(values)
        return self

    def __imul__(self, count: int) -> 'TrackedList':
        self._mutate('__imul__', count)
        return self

    # Non-mutating list operations return raw results
    def copy(self) -> list:
        return self._target.copy()

    def __add__(self, other: Any) -> Any:
        return self._target + unwrap(other)

    def __radd__(self, other: Any) -> Any:
        return unwrap(other) + self._target

    def __mul__(self, count: int) -> list:
        return self._target * count

    __rmul__ = __mul__

    def __lt__(self, other: Any) -> bool:
        return self._target < unwrap(other)

    def __le__(self, other: Any) -> bool:
        return self._target <= unwrap(other)

    def __gt__(self, other: Any) -> bool:
        return self._target > unwrap(other)

    def __ge__(self, other: Any) -> bool:
        return self._target >= unwrap(other)


class TrackedObject(TrackedNode):
    """Wrapper for a dataclass or SimpleNamespace instance.

    Attribute reads/writes/deletes are tracked fields. Methods are returned
    unwrapped and bound to the raw object.

    Writes and deletes of every name go to the wrapped object. Reads of the
    names in RESERVED_NAMES resolve on the wrapper itself; read such fields
    with ``unwrap(wrapper).<name>`` instead.
    """
    __slots__ = ()

    @staticmethod
    def _field_key(name: str) -> Optional[str]:
        if name.startswith('__') and name.endswith('__'):
            return None
        return name

    def __getattr__(self, name: str) -> Any:
        raw_value = getattr(self._target, name)
        field_key = self._field_key(name)
        if field_key is None:
            return raw_value
        return self._tracker.read(self, field_key, raw_value)

    def __setattr__(self, name: str, value: Any) -> None:
        value = unwrap(value)
        setattr(self._target, name, value)
        field_key = self._field_key(name)
        if field_key is not None:
            self._tracker.emit(self, MutationType.SET, field_key, value)

    def __delattr__(self, name: str) -> None:
        delattr(self._target, name)
        field_key = self._field_key(name)
        if field_key is not None:
            self._tracker.emit(self, MutationType.DELETE, field_key, None)

    def __dir__(self):
        return dir(self._target)
