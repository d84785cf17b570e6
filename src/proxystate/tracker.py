"""
Tracker: the interception engine behind every wrapper of one tracking instance.

Owns the WrapperStateStore, the ListenerRegistry and the suppression flag.
Wrappers call back into it for:
    read()                    - lazy, identity-cached child wrapping
    emit()                    - child invalidation, path resolution, dispatch
    mutate_array()            - batched list mutation reported as one event
    retire_moved_children()   - drop list children whose slot changed

The user value lives under TOP_KEY of a synthetic root dict so that the
top-level wrapper has a parent like every other wrapper.
"""
from contextlib import contextmanager
import logging
from typing import Any, Callable, Dict, Generator, Optional, Tuple

from proxystate.config import TrackingConfig, resolve_config
from proxystate.listeners import ListenerRegistry, MutationType
from proxystate.state_store import ROOT_KEY, TOP_KEY, ChildRecord, WrapperStateStore
from proxystate.wrappers import TrackedList, TrackedNode, wrapper_type_for

logger = logging.getLogger(__name__)


class Tracker:
    """Interception engine for one tracked object graph.

    Not thread-safe: every operation, including dispatch, runs synchronously
    on the caller's thread before the intercepted call returns.
    """

    def __init__(self, root_value: Any, config: Optional[TrackingConfig] = None):
        self.config = resolve_config(config)
        self.store = WrapperStateStore()
        self.listeners = ListenerRegistry(
            isolate_errors=self.config.isolate_listener_errors,
            strict=self.config.strict_listeners,
        )
        self._suppressed = False
        self._root = self.wrap({TOP_KEY: root_value}, None, ROOT_KEY)

    @property
    def top(self) -> Any:
        """Wrapper for the user's root value (or the raw value if it is a scalar)."""
        return self._root[TOP_KEY]

    @property
    def is_suppressed(self) -> bool:
        return self._suppressed

    def is_valid(self, wrapper: TrackedNode) -> bool:
        return wrapper._wrapper_id in self.store

    # ========== WRAPPING ==========

    def wrap(self, value: Any, parent_id: Optional[int], key: str) -> TrackedNode:
        """Build a wrapper for a composite value and register its metadata."""
        wrapper_type = wrapper_type_for(value, self.config.track_objects)
        if wrapper_type is None:
            raise TypeError(f"Cannot track value of type {type(value).__name__}")
        wrapper_id = self.store.allocate_id()
        wrapper = wrapper_type(value, self, wrapper_id)
        self.store.register(wrapper, wrapper_id, key, parent_id)
        return wrapper

    def read(self, wrapper: TrackedNode, key: str, raw_value: Any) -> Any:
        """Return raw_value, or a tracked child wrapper if it is composite."""
        if wrapper_type_for(raw_value, self.config.track_objects) is None:
            return raw_value

        state = self.store.get(wrapper._wrapper_id)
        if state is None:
            # Discarded wrapper: no tracking below this point
            return raw_value

        record = state.children.get(key)
        if record is not None:
            if record.value is raw_value:
                return record.wrapper
            self.store.discard_child(state, key)

        child = self.wrap(raw_value, wrapper._wrapper_id, key)
        state.children[key] = ChildRecord(value=raw_value, wrapper=child)
        return child

    def retire_moved_children(self, wrapper: TrackedList) -> None:
        """Discard cached list children whose index no longer holds the same object."""
        state = self.store.get(wrapper._wrapper_id)
        if state is None or not state.children:
            return
        target = wrapper._target
        for key, record in list(state.children.items()):
            index = int(key)
            if index >= len(target) or target[index] is not record.value:
                self.store.discard_child(state, key)

    # ========== EMISSION ==========

    @contextmanager
    def suppressed(self) -> Generator[None, None, None]:
        """Silence emission for the duration of the block; always released."""
        previous = self._suppressed
        self._suppressed = True
        try:
            yield
        finally:
            self._suppressed = previous

    def emit(self, wrapper: TrackedNode, mutation_type: MutationType,
             key: Optional[str], payload: Any) -> None:
        """Report a mutation on wrapper (at field key, if given) to listeners.

        Skipped entirely while suppressed or if wrapper has been discarded.
        """
        if self._suppressed:
            return

        state = self.store.get(wrapper._wrapper_id)
        if state is None:
            return

        if key is not None:
            self.store.discard_child(state, key)

        path = self.store.resolve_path(wrapper._wrapper_id, key)
        self.listeners.dispatch(mutation_type, path, payload)

    def mutate_array(self, wrapper: TrackedList, method_name: str,
                     operation: Callable[..., Any], args: Tuple[Any, ...],
                     kwargs: Dict[str, Any]) -> Any:
        """Run one in-place list operation and report it as a single event.

        If the operation raises, nothing is emitted and the error propagates.
        """
        with self.suppressed():
            result = operation(*args, **kwargs)

        self.retire_moved_children(wrapper)

        payload = [method_name, *args]
        if kwargs:
            payload.append(dict(kwargs))
        self.emit(wrapper, MutationType.ARRAY_MUTATION, None, payload)
        return result

    # ========== TEARDOWN ==========

    def teardown(self) -> None:
        """Invalidate every wrapper issued so far and drop all listeners."""
        discarded = len(self.store)
        self.store = WrapperStateStore()
        self.listeners.clear()
        logger.debug(f"Tracker torn down ({discarded} wrapper(s) discarded)")
