from __future__ import annotations


class ThrottleError(Exception):
    pass


class StoreUnavailable(ThrottleError):
    """The attempt store could not be reached or the operation failed."""


class InvalidIdentifier(ThrottleError, ValueError):
    pass
