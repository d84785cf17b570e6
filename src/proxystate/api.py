"""User-facing API entrypoints for proxystate."""
import logging
from typing import Any, Optional

from proxystate.config import TrackingConfig
from proxystate.listeners import MutationListener
from proxystate.tracker import Tracker
from proxystate.wrappers import TrackedNode

logger = logging.getLogger(__name__)


class TrackingProxy:
    """Handle returned by create_tracking_proxy().

    Attributes:
        proxy: Wrapper standing for the root value. Reads, writes, deletes and
            in-place list methods on it and on every composite value reached
            through it are reported to listeners.

    Usable as a context manager; teardown() runs on exit.
    """

    def __init__(self, root_value: Any, config: Optional[TrackingConfig] = None):
        self._tracker = Tracker(root_value, config)
        self.proxy = self._tracker.top

    def add_listener(self, fn: MutationListener, once: bool = False) -> None:
        """Register a mutation listener.

        fn is called as ``fn(type, path_parts, payload)``.

        Args:
            fn: Listener callable. Non-callables are ignored unless the config
                has strict_listeners set.
            once: Remove fn after its first call, unless that call returns
                False (then it stays registered for the next mutation).
        """
        self._tracker.listeners.add(fn, once)

    def remove_listener(self, fn: MutationListener) -> None:
        """Unregister a listener. No-op if it is not registered."""
        self._tracker.listeners.remove(fn)

    def teardown(self) -> None:
        """Stop tracking: all wrappers become inert and all listeners are dropped.

        The underlying value is left untouched and stays usable through the
        old wrappers.
        """
        self._tracker.teardown()

    @property
    def listener_count(self) -> int:
        return len(self._tracker.listeners)

    def __enter__(self) -> 'TrackingProxy':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.teardown()


def create_tracking_proxy(root_value: Any, config: Optional[TrackingConfig] = None) -> TrackingProxy:
    """Start tracking mutations of root_value.

    :param root_value: The object graph to observe (dict, list, dataclass, ...).
    :param config: Optional per-instance config; defaults to get_default_config().
    :returns: A TrackingProxy whose ``proxy`` attribute stands for root_value.
    """
    return TrackingProxy(root_value, config)


def is_discarded(wrapper: TrackedNode) -> bool:
    """True if wrapper no longer reports mutations (slot replaced or torn down)."""
    return not wrapper._tracker.is_valid(wrapper)
