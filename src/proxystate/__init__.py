"""
Mutation tracking for nested object graphs.

Wraps dicts, lists and plain objects (dataclasses, SimpleNamespace) in
transparent proxies and reports every write, delete and in-place list
mutation to listeners, together with the path from the root.

Quick Start:
    >>> from proxystate import create_tracking_proxy
    >>> tracking = create_tracking_proxy({"foo": {"bar": 123}, "baz": 456})
    >>> tracking.add_listener(lambda kind, path, value: print(kind.value, path, value))
    >>> tracking.proxy["foo"]["bar"] = 999
    set ['foo', 'bar'] 999
    >>> del tracking.proxy["baz"]
    delete ['baz'] None

Modules:
    - api: create_tracking_proxy() and the TrackingProxy handle
    - tracker: interception engine (lazy wrapping, emission, batching)
    - wrappers: TrackedDict, TrackedList, TrackedObject
    - state_store: wrapper metadata arena and path resolution
    - listeners: listener registry and MutationType
    - config: TrackingConfig and the module-level default
    - errors: exception types
"""

from proxystate.api import TrackingProxy, create_tracking_proxy, is_discarded
from proxystate.config import (
    TrackingConfig,
    get_default_config,
    reset_default_config,
    set_default_config,
)
from proxystate.errors import InvalidListenerError, TrackingError
from proxystate.listeners import KEEP_LISTENER, ListenerRegistry, MutationListener, MutationType
from proxystate.wrappers import TrackedDict, TrackedList, TrackedNode, TrackedObject, is_tracked, unwrap

__all__ = [
    # API
    'TrackingProxy',
    'create_tracking_proxy',
    'is_discarded',
    'is_tracked',
    'unwrap',
    # Wrappers
    'TrackedNode',
    'TrackedDict',
    'TrackedList',
    'TrackedObject',
    # Listeners
    'ListenerRegistry',
    'MutationListener',
    'MutationType',
    'KEEP_LISTENER',
    # Configuration
    'TrackingConfig',
    'set_default_config',
    'get_default_config',
    'reset_default_config',
    # Errors
    'TrackingError',
    'InvalidListenerError',
]

__version__ = '1.0.0'
