"""
WordForge Validation Exceptions
===============================

Typed failure signals raised by the validation layer.

- ``RuleConfigurationError``: a rule specification cannot be built
  (unknown identifier, empty token, wrong parameters).
- ``AuthorizationException``: a form request refused the caller before
  any validation ran.
- ``ValidationException``: validation ran and failed; carries the
  validator so the caller can read its error bag.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from wordforge.validation.validator import ErrorBag, Validator


class WordForgeError(Exception):
    """Base class for all WordForge errors."""


class RuleConfigurationError(WordForgeError):
    """A rule specification is malformed."""


class UnknownRuleError(RuleConfigurationError):
    """A rule identifier is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Validation rule '{name}' is not registered")
        self.name = name


class AuthorizationException(WordForgeError):
    """The request is not authorized to proceed."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)
        self.message = message


class ValidationException(WordForgeError):
    """
    Validation failed.

    Example:
        try:
            data = form.validated()
        except ValidationException as e:
            return {"message": str(e), "errors": e.errors().to_dict()}
    """

    def __init__(
        self,
        validator: "Validator",
        message: Optional[str] = None,
    ) -> None:
        super().__init__(message or "The given data was invalid.")
        self._validator = validator

    def validator(self) -> "Validator":
        """Get the validator whose evaluation failed."""
        return self._validator

    def errors(self) -> "ErrorBag":
        """Get the failed validator's error bag."""
        return self._validator.errors()
