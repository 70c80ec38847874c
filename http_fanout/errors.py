"""Error types raised while building, sending, and reading requests."""


class FanoutError(Exception):
    """Base class for all request errors."""


class MalformedHeaderError(FanoutError):
    """A header entry is not in 'Key: Value' format."""


class RequestBuildError(FanoutError):
    """The HTTP layer rejected the method, URL, headers or body."""


class TransportError(FanoutError):
    """The request could not be sent (DNS, connect, timeout, ...)."""


class BodyDrainError(FanoutError):
    """Reading the response body failed after the status was received."""
