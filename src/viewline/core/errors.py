"""Errors for the viewline request pipeline.

Configuration errors are raised synchronously, before anything runs.
Collaborator failures (queries, hooks, handlers) never raise out of the
pipeline: they travel to the render target as the terminal error.
"""


class ViewlineError(Exception):
    """Base class for viewline errors."""

    def __init__(self, message: str, *, context: dict | None = None):
        """Initialize the exception.

        Args:
            message: Error description.
            context: Optional diagnostic context for tracing.
        """
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(ViewlineError):
    """Raised for invalid arguments, render targets or queue entries."""


class QueryError(ViewlineError):
    """Raised when a query reports a failure value that is not an exception.

    Attributes:
        path: Result tree path the query was bound to.
        reason: The original failure value.
    """

    def __init__(self, path: str, reason: object):
        """Initialize QueryError.

        Args:
            path: Dotted result tree path of the failing binding.
            reason: The failure value reported by the query.
        """
        self.path = path
        self.reason = reason
        super().__init__(f"Query bound to {path!r} failed: {reason!r}", context={"path": path})


__all__ = ["ViewlineError", "ConfigurationError", "QueryError"]
