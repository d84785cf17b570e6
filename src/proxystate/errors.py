"""Custom error types for proxystate."""


class TrackingError(Exception):
    """Base class for all proxystate errors."""


class InvalidListenerError(TrackingError, TypeError):
    """Raised when a non-callable is registered as a mutation listener.

    Only raised when ``TrackingConfig.strict_listeners`` is enabled;
    otherwise registration of a non-callable is silently ignored.
    """

    def __init__(self, listener: object) -> None:
        self.listener = listener
        super().__init__(f"Mutation listener must be callable, got {type(listener).__name__}")
