"""
WordForge
=========

Laravel-style validation for REST request data.

Validate a payload directly:

    from wordforge import Validator

    validator = Validator(
        {"email": "not-an-email"},
        {"email": "required|email"},
    )
    validator.fails()            # True
    validator.errors().to_dict() # {"email": ["The email must be a valid email address."]}

Or gate a controller action with a form request:

    from wordforge import FormRequest

    class StorePostRequest(FormRequest):
        def rules(self):
            return {"title": "required|max:120", "status": "in:draft,published"}

    data = StorePostRequest.resolve(request).validated()
"""

from __future__ import annotations

__version__ = "0.3.0"
__license__ = "MIT"

from typing import TYPE_CHECKING

from wordforge.core.config import Config
from wordforge.core.request import Request

if TYPE_CHECKING:
    from wordforge.validation import (
        AuthorizationException,
        ErrorBag,
        FormRequest,
        Rule,
        RuleRegistry,
        ValidationException,
        Validator,
    )
    from wordforge.utils.logger import Logger


def __getattr__(name: str):
    """Lazy loading of the validation layer."""
    _imports = {
        "Validator": "wordforge.validation.validator",
        "ErrorBag": "wordforge.validation.validator",
        "FormRequest": "wordforge.validation.form",
        "Rule": "wordforge.validation.rules",
        "RuleRegistry": "wordforge.validation.registry",
        "ValidationException": "wordforge.validation.exceptions",
        "AuthorizationException": "wordforge.validation.exceptions",
        "Logger": "wordforge.utils.logger",
    }

    if name in _imports:
        import importlib
        module = importlib.import_module(_imports[name])
        return getattr(module, name)

    raise AttributeError(f"module 'wordforge' has no attribute '{name}'")


__all__ = [
    "__version__",
    "__license__",
    "Config",
    "Request",
    "Validator",
    "ErrorBag",
    "FormRequest",
    "Rule",
    "RuleRegistry",
    "ValidationException",
    "AuthorizationException",
    "Logger",
]
