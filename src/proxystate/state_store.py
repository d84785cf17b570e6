"""
Wrapper metadata arena and path resolution.

Every live wrapper owns one WrapperState slot, keyed by a stable integer id
allocated when the wrapper is created. Parent links are ids, so a child never
keeps its parent alive. Slots are reclaimed either explicitly (discard) or
when the wrapper itself is garbage collected (weakref.finalize).

Path layout (child to root):
    [key?, child.key, ..., top.key ("obj"), root.key ("")]
Reversed and stripped of the two synthetic root levels, this yields the
externally visible path starting at the first real field.
"""
from dataclasses import dataclass, field
import itertools
import logging
import weakref
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Key of the synthetic root wrapper and of the single field holding the user value
ROOT_KEY = ""
TOP_KEY = "obj"

_SYNTHETIC_LEVELS = 2


def _reclaim_slot(store_ref: "weakref.ref[WrapperStateStore]", wrapper_id: int) -> None:
    # Finalizer callback; holds the store weakly so the store can die first
    store = store_ref()
    if store is not None:
        store._states.pop(wrapper_id, None)


@dataclass
class ChildRecord:
    """Last value observed in a slot and the wrapper created for it."""
    value: Any
    wrapper: Any


@dataclass
class WrapperState:
    """Metadata for one valid wrapper."""
    key: str
    parent_id: Optional[int]
    children: Dict[str, ChildRecord] = field(default_factory=dict)


class WrapperStateStore:
    """Arena of WrapperState records keyed by wrapper id.

    A wrapper is valid iff its id is present in the store.
    """

    # Shared across stores so ids are never reused after a teardown
    _id_counter = itertools.count(1)

    def __init__(self):
        self._states: Dict[int, WrapperState] = {}

    @classmethod
    def allocate_id(cls) -> int:
        return next(cls._id_counter)

    def register(self, wrapper: Any, wrapper_id: int, key: str,
                 parent_id: Optional[int]) -> WrapperState:
        """Create the metadata slot for a freshly built wrapper."""
        state = WrapperState(key=key, parent_id=parent_id)
        self._states[wrapper_id] = state
        weakref.finalize(wrapper, _reclaim_slot, weakref.ref(self), wrapper_id)
        return state

    def get(self, wrapper_id: int) -> Optional[WrapperState]:
        return self._states.get(wrapper_id)

    def discard(self, wrapper_id: int) -> None:
        """Remove a wrapper's slot and, depth first, all of its cached descendants."""
        stack = [wrapper_id]
        discarded = 0
        while stack:
            state = self._states.pop(stack.pop(), None)
            if state is None:
                continue
            discarded += 1
            stack.extend(record.wrapper._wrapper_id for record in state.children.values())
        if discarded:
            logger.debug(f"Discarded {discarded} wrapper(s) rooted at #{wrapper_id}")

    def discard_child(self, state: WrapperState, key: str) -> None:
        """Retire whatever wrapper was watching slot key of state."""
        record = state.children.pop(key, None)
        if record is not None:
            self.discard(record.wrapper._wrapper_id)

    def resolve_path(self, wrapper_id: int, key: Optional[str] = None) -> List[str]:
        """Build the root-relative path of wrapper_id (plus key, if given).

        Stops quietly at the first ancestor whose slot is gone, returning
        whatever was collected so far.
        """
        parts: List[str] = [] if key is None else [key]
        state = self._states.get(wrapper_id)
        while state is not None:
            parts.append(state.key)
            if state.parent_id is None:
                break
            state = self._states.get(state.parent_id)
        parts.reverse()
        return parts[_SYNTHETIC_LEVELS:]

    def __contains__(self, wrapper_id: object) -> bool:
        return wrapper_id in self._states

    def __len__(self) -> int:
        return len(self._states)
