"""
Exception hierarchy for topic clustering.

All errors raised deliberately by this package derive from ClusteringError,
so callers can catch the whole family with a single except clause.
"""


class ClusteringError(Exception):
    """Base class for all topic clustering errors."""


class InvalidInputError(ClusteringError, ValueError):
    """Raised when input vectors are malformed (ragged, non-numeric, wrong rank)."""


class InvalidParameterError(ClusteringError, ValueError):
    """Raised when a clustering or reduction parameter is unknown or invalid."""


class NotFittedError(ClusteringError, RuntimeError):
    """Raised when a reducer is used before it has been fitted."""
