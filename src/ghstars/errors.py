"""Exception hierarchy for ghstars."""


class GhStarsError(Exception):
    """Base exception for ghstars errors."""


class ValidationError(GhStarsError):
    """Raised when a period identifier matches none of the grammars."""


class MethodError(GhStarsError):
    """Raised for any request method other than GET."""


class InternalError(GhStarsError):
    """Raised for faults surfaced to the caller as server errors."""


class CacheError(InternalError):
    """Raised when a cache entry cannot be read, decoded or stored."""


class FetchError(InternalError):
    """Raised when the batch fetch call fails as a whole."""
