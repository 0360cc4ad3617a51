"""
Progression errors.

The scoring core never raises for out-of-range numbers; these errors only
cross the persistence boundary (malformed stored progress).
"""


class ProgressionError(ValueError):
    """Base class for progression errors."""
    pass


class InvalidProgressDataError(ProgressionError):
    """Raised when a stored progress document cannot be read."""
    pass
