"""Exceptions raised by the agent stat read path."""


class InvalidArgumentError(ValueError):
    """An argument is missing or cannot be represented.

    Raised before any store interaction takes place.
    """


class ScanError(RuntimeError):
    """A range scan against the underlying store failed.

    Store adapters raise this; the read path propagates it unmodified.
    """
