"""
Framework configuration for proxystate.

Holds the module-level default TrackingConfig used by create_tracking_proxy()
when no explicit config is passed. Tests and applications can swap the
default with set_default_config() and restore it with reset_default_config().
"""

from dataclasses import dataclass
import logging
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackingConfig:
    """Behavior knobs for one tracking instance.

    Attributes:
        isolate_listener_errors: If True (default), an exception raised by a
            listener is logged and dispatch continues with the next listener.
            If False, the exception propagates to the mutating call site and
            the remaining listeners are skipped for that event.
        strict_listeners: If True, registering a non-callable raises
            InvalidListenerError instead of being ignored.
        track_objects: If True (default), dataclass and SimpleNamespace
            instances are wrapped like dicts. If False they are returned raw.
    """
    isolate_listener_errors: bool = True
    strict_listeners: bool = False
    track_objects: bool = True


_DEFAULT_CONFIG = TrackingConfig()
_default_config: TrackingConfig = _DEFAULT_CONFIG


def set_default_config(config: TrackingConfig) -> None:
    """Set the config used by trackers created without an explicit config."""
    global _default_config
    if not isinstance(config, TrackingConfig):
        raise TypeError(f"Expected TrackingConfig, got {type(config).__name__}")
    _default_config = config
    logger.debug(f"Default tracking config set: {config}")


def get_default_config() -> TrackingConfig:
    """Get the config used by trackers created without an explicit config."""
    return _default_config


def reset_default_config() -> None:
    """Restore the built-in default config."""
    global _default_config
    _default_config = _DEFAULT_CONFIG


def resolve_config(config: Optional[TrackingConfig]) -> TrackingConfig:
    """Return config, or the current default when config is None."""
    return config if config is not None else _default_config
