"""SuccessOrErrors and ValidationError: the universal service contract.

INVARIANT: All service-layer methods return SuccessOrErrors.
``is_valid`` is true exactly when no errors have been recorded, and a
success message can only be attached to a valid result.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field

from crudgen.errors import InvalidOperationError


class ValidationError(BaseModel):
    """One error message, optionally tied to the members that caused it."""

    model_config = {"frozen": True}

    message: str
    members: tuple[str, ...] = Field(default_factory=tuple)

    def __str__(self) -> str:
        return self.message


class SuccessOrErrors[T]:
    """Validity, ordered errors, success message and an optional payload.

    A fresh instance is valid. Errors are appended in detection order and
    are never replaced. Services build one per call and hand it back; callers
    treat the returned object as read-only.

    Usage::

        status = SuccessOrErrors()
        if not found:
            return status.add_single_error("Could not find {0}.", name)
        return status.set_success_message("Successfully created {0}.", name)
    """

    __slots__ = ("_errors", "_success_message", "_warnings", "result")

    def __init__(self, result: T | None = None) -> None:
        self._errors: list[ValidationError] = []
        self._warnings: list[str] = []
        self._success_message: str | None = None
        self.result: T | None = result

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def success(cls, message: str, *args: object) -> SuccessOrErrors[T]:
        """A valid result carrying *message*."""
        return cls().set_success_message(message, *args)

    @classmethod
    def failure(cls, message: str, *args: object) -> SuccessOrErrors[T]:
        """An invalid result carrying a single error."""
        return cls().add_single_error(message, *args)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_valid(self) -> bool:
        return not self._errors

    @property
    def errors(self) -> list[ValidationError]:
        return list(self._errors)

    @property
    def error_messages(self) -> list[str]:
        return [err.message for err in self._errors]

    @property
    def success_message(self) -> str | None:
        """The success text, or None when invalid or not yet set."""
        return self._success_message if self.is_valid else None

    @property
    def warnings(self) -> list[str]:
        return list(self._warnings)

    @property
    def has_warnings(self) -> bool:
        return bool(self._warnings)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_single_error(
        self, message: str, *args: object, members: Iterable[str] = ()
    ) -> SuccessOrErrors[T]:
        """Append a formatted error; the result becomes invalid."""
        text = message.format(*args) if args else message
        self._errors.append(ValidationError(message=text, members=tuple(members)))
        self._success_message = None
        return self

    def add_validation_errors(self, errors: Iterable[ValidationError | str]) -> SuccessOrErrors[T]:
        """Append several errors, preserving their order."""
        for err in errors:
            if isinstance(err, ValidationError):
                self._errors.append(err)
            else:
                self._errors.append(ValidationError(message=str(err)))
        if self._errors:
            self._success_message = None
        return self

    def combine_errors(self, other: SuccessOrErrors[object]) -> SuccessOrErrors[T]:
        """Append the errors and warnings of *other* to this result."""
        self._warnings.extend(other.warnings)
        return self.add_validation_errors(other.errors)

    def add_warning(self, message: str, *args: object) -> SuccessOrErrors[T]:
        """Record a non-fatal note. Does not affect validity."""
        self._warnings.append(message.format(*args) if args else message)
        return self

    def set_success_message(self, message: str, *args: object) -> SuccessOrErrors[T]:
        """Set the success text. Raises if the result already has errors."""
        if not self.is_valid:
            raise InvalidOperationError(
                "You cannot set a success message on a result that has errors."
            )
        self._success_message = message.format(*args) if args else message
        return self

    def set_success_with_result(
        self, result: T, message: str, *args: object
    ) -> SuccessOrErrors[T]:
        """Attach the payload and the success text in one step."""
        self.set_success_message(message, *args)
        self.result = result
        return self

    def __repr__(self) -> str:
        if self.is_valid:
            return f"<SuccessOrErrors valid message={self._success_message!r}>"
        return f"<SuccessOrErrors invalid errors={self.error_messages!r}>"

    def __str__(self) -> str:
        if self.is_valid:
            return self._success_message or ""
        return "; ".join(self.error_messages)
