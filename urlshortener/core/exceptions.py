"""Exceptions raised by the shorten/expand resolution engine.

Classes:
    ShortenerError:
        Base class for all application-specific errors.

    GenerationExhaustedError:
        No collision-free short code was found within the attempt budget. Fatal.

    StoreError:
        Base class for mapping store failures.

    StoreConflictError:
        An insert violated one of the unique indexes (original URL or short code),
        usually because a concurrent writer got there first. Recoverable.

    StoreUnavailableError:
        The store is unreachable or failed for a reason other than a constraint
        violation. Fatal.

    CacheUnavailableError:
        Any cache read or write failed. Always recoverable: callers log it and
        treat the call as a cache miss.

A short code that is absent from both cache and store is not an error;
ExpandService.expand() returns None for it.
"""


class ShortenerError(Exception):
    """Base exception for all application-specific errors."""

    pass


class GenerationExhaustedError(ShortenerError):
    """Raised when every short code candidate collided with an existing one."""

    pass


class StoreError(ShortenerError):
    """Base exception for mapping store errors."""

    pass


class StoreConflictError(StoreError):
    """Raised when an insert violates a uniqueness constraint."""

    pass


class StoreUnavailableError(StoreError):
    """Raised when the store cannot serve a request (connection issues, timeouts, etc.)."""

    pass


class CacheUnavailableError(ShortenerError):
    """Raised when a cache operation fails."""

    pass
