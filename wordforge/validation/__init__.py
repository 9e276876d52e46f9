"""
WordForge Validation System
===========================

Declarative validation for request data.

Features:
- Pipe-delimited rule strings ("required|email|max:255")
- Open rule registry for custom rules
- Nested data through dot-notation attributes
- Message overrides and attribute labels
- Form requests gating controllers on authorization and validation
"""

from wordforge.validation.exceptions import (
    AuthorizationException,
    RuleConfigurationError,
    UnknownRuleError,
    ValidationException,
    WordForgeError,
)
from wordforge.validation.form import FormRequest, FormRequestState
from wordforge.validation.registry import (
    RuleCall,
    RuleRegistry,
    default_registry,
    parse_rule,
    parse_rules,
    register_rule,
)
from wordforge.validation.rules import (
    Alpha,
    AlphaNum,
    Array,
    Between,
    Boolean,
    CallableRule,
    Confirmed,
    DataAwareRule,
    Date,
    Different,
    Email,
    In,
    Integer,
    Max,
    Min,
    NotIn,
    Numeric,
    Regex,
    Required,
    Rule,
    Same,
    String,
    Url,
    Uuid,
)
from wordforge.validation.validator import ErrorBag, Validator, validate

__all__ = [
    # Core
    "Validator",
    "ErrorBag",
    "validate",
    # Form requests
    "FormRequest",
    "FormRequestState",
    # Registry
    "RuleCall",
    "RuleRegistry",
    "default_registry",
    "parse_rule",
    "parse_rules",
    "register_rule",
    # Exceptions
    "WordForgeError",
    "RuleConfigurationError",
    "UnknownRuleError",
    "AuthorizationException",
    "ValidationException",
    # Rules
    "Rule",
    "DataAwareRule",
    "CallableRule",
    "Required",
    "String",
    "Numeric",
    "Integer",
    "Boolean",
    "Array",
    "Email",
    "Url",
    "Alpha",
    "AlphaNum",
    "Uuid",
    "Date",
    "Regex",
    "Min",
    "Max",
    "Between",
    "In",
    "NotIn",
    "Confirmed",
    "Same",
    "Different",
]
