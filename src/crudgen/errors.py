"""Exceptions raised by crudgen.

Business outcomes (not found, validation, unsupported operation, failed
save) are never raised: they travel in :class:`SuccessOrErrors`. The
exceptions here signal defects in calling code or in DTO declarations.
"""

from __future__ import annotations


class CrudgenError(Exception):
    """Base class for all crudgen exceptions."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(CrudgenError):
    """A type, DTO declaration, key list or config file is malformed.

    Attributes:
        offending: The type or value that could not be handled, if any.
    """

    def __init__(self, message: str, *, offending: object | None = None) -> None:
        self.offending = offending
        super().__init__(message)


class InvalidOperationError(CrudgenError):
    """An API was called in a state that does not allow it."""
