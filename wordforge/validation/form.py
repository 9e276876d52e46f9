"""
WordForge Form Requests
=======================

A form request bundles authorization and validation into one gate that
runs before a controller action.

Lifecycle:

    CONSTRUCTED -> AUTHORIZING -> UNAUTHORIZED        (AuthorizationException)
                               -> AUTHORIZED -> VALIDATING -> INVALID  (ValidationException)
                                                           -> VALID

The gate runs at most once per instance; later calls return the same data
or raise the same exception again.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections import abc
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from wordforge.core.request import InputSource
from wordforge.utils.helpers import MISSING, get_nested
from wordforge.utils.logger import get_logger
from wordforge.validation.exceptions import AuthorizationException, ValidationException
from wordforge.validation.registry import RuleRegistry, RuleSpec
from wordforge.validation.validator import Validator

logger = get_logger("wordforge.validation")


class FormRequestState(Enum):
    """Form request gate states."""

    CONSTRUCTED = "constructed"
    AUTHORIZING = "authorizing"
    AUTHORIZED = "authorized"
    UNAUTHORIZED = "unauthorized"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"


class FormRequest(ABC):
    """
    Base form request.

    Subclasses define ``rules()`` and may override ``authorize()``,
    ``messages()`` and ``attributes()``.

    Example:
        class StoreUserRequest(FormRequest):
            def authorize(self) -> bool:
                return self.input("role") != "banned"

            def rules(self):
                return {
                    "name": "required|string|max:50",
                    "email": "required|email",
                    "password": "required|min:8|confirmed",
                }

            def messages(self):
                return {"email.required": "We need your email address."}

        # In a controller
        try:
            data = StoreUserRequest.resolve(request).validated()
        except AuthorizationException:
            ...  # 403
        except ValidationException as e:
            ...  # 422 with e.errors().to_dict()
    """

    def __init__(
        self,
        request: Union[InputSource, Mapping[str, Any]],
        registry: Optional[RuleRegistry] = None,
    ) -> None:
        """
        Capture the request and snapshot its input.

        Args:
            request: Transport request exposing ``all()``, or a plain mapping
            registry: Rule registry for the validator
        """
        self.request = request
        self.registry = registry
        source = request if isinstance(request, abc.Mapping) else request.all()
        self._input: Dict[str, Any] = dict(source)

        self.state = FormRequestState.CONSTRUCTED
        self._validator: Optional[Validator] = None
        self._validated: Optional[Dict[str, Any]] = None
        self._failure: Optional[Exception] = None

    @classmethod
    def resolve(
        cls,
        request: Union[InputSource, Mapping[str, Any]],
        registry: Optional[RuleRegistry] = None,
    ) -> "FormRequest":
        """Construct the form request and run its gate immediately."""
        form = cls(request, registry=registry)
        form.validate()
        return form

    # -------------------------------------------------------------------------
    # Definition hooks
    # -------------------------------------------------------------------------

    def authorize(self) -> bool:
        """Determine if the caller may make this request."""
        return True

    @abstractmethod
    def rules(self) -> Mapping[str, RuleSpec]:
        """Get the validation rules that apply to the request."""
        ...

    def messages(self) -> Mapping[str, str]:
        """Get custom messages keyed by ``"attribute.rule"``."""
        return {}

    def attributes(self) -> Mapping[str, str]:
        """Get display labels for attributes."""
        return {}

    # -------------------------------------------------------------------------
    # Input access
    # -------------------------------------------------------------------------

    def all(self) -> Dict[str, Any]:
        """Get the input snapshot."""
        return self._input

    def input(self, key: str, default: Any = None) -> Any:
        value = get_nested(self._input, key, MISSING)
        return default if value is MISSING else value

    # -------------------------------------------------------------------------
    # Gate
    # -------------------------------------------------------------------------

    @property
    def validator(self) -> Optional[Validator]:
        """Validator built by the gate, ``None`` until authorization passes."""
        return self._validator

    def validate(self) -> Dict[str, Any]:
        """
        Authorize, then validate.

        Returns:
            The input restricted to the attributes named in ``rules()``

        Raises:
            AuthorizationException: If ``authorize()`` returns false
            ValidationException: If the input fails validation
        """
        if self._failure is not None:
            raise self._failure
        if self._validated is not None:
            return copy.deepcopy(self._validated)

        log = logger.with_context(form=type(self).__name__)

        self.state = FormRequestState.AUTHORIZING
        if not self.authorize():
            self.state = FormRequestState.UNAUTHORIZED
            self._failure = self.failed_authorization()
            log.debug("Authorization denied")
            raise self._failure
        self.state = FormRequestState.AUTHORIZED

        validator = Validator(
            self._input,
            self.rules(),
            self.messages(),
            self.attributes(),
            registry=self.registry,
        )
        self._validator = validator

        self.state = FormRequestState.VALIDATING
        if validator.fails():
            self.state = FormRequestState.INVALID
            self._failure = ValidationException(validator)
            log.debug("Validation failed", fields=",".join(validator.errors()))
            raise self._failure

        self.state = FormRequestState.VALID
        self._validated = validator.validated()
        log.debug("Validation passed", fields=len(self._validated))
        return copy.deepcopy(self._validated)

    def validated(self) -> Dict[str, Any]:
        """Get the validated data, running the gate if it has not run."""
        return self.validate()

    def failed_authorization(self) -> AuthorizationException:
        """Build the exception raised when ``authorize()`` refuses."""
        return AuthorizationException()
