"""formguard — declarative validation for web request handlers.

Constraints are declared on fields, checked by a validation engine, resolved
into localized messages and collected per request. When errors are present,
the request is dispatched to a recovery target.
"""

from formguard.errors import ErrorCollector, I18nMessage, Messages, SimpleMessage
from formguard.exceptions import (
    ConstraintDefinitionError,
    ConstraintEvaluationError,
    FormguardError,
    ValidationFailed,
)
from formguard.messages import MessageInterpolator
from formguard.validators import (
    ConstraintSet,
    Severity,
    ValidationContext,
    ValidationEngine,
    Violation,
    validation_engine,
)

__version__ = "1.0.0"

__all__ = [
    "ErrorCollector",
    "I18nMessage",
    "SimpleMessage",
    "Messages",
    "MessageInterpolator",
    "ValidationEngine",
    "validation_engine",
    "ConstraintSet",
    "ValidationContext",
    "Violation",
    "Severity",
    "FormguardError",
    "ConstraintDefinitionError",
    "ConstraintEvaluationError",
    "ValidationFailed",
]
