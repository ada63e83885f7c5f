"""Exception hierarchy.

Violations are never raised: they are collected as data. The exceptions here
signal faults in declarations, in custom validators, or in request flow.
"""

from typing import Any, Optional


class FormguardError(Exception):
    """Base class for every error raised by formguard."""


class ConstraintDefinitionError(FormguardError):
    """A constraint was declared with inconsistent parameters."""


class UnsupportedTypeError(ConstraintDefinitionError):
    """A constraint was applied to a value type it cannot check."""

    def __init__(self, kind: str, value: Any):
        self.kind = kind
        self.value_type = type(value).__name__
        super().__init__(f"Constraint '{kind}' does not support values of type '{self.value_type}'")


class UnknownConstraintError(FormguardError):
    """No validator is registered for a constraint kind."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"No validator registered for constraint kind '{kind}'")


class ConstraintEvaluationError(FormguardError):
    """A validator failed while evaluating a constraint (e.g. a lookup failure)."""

    def __init__(self, kind: str, category: str, cause: BaseException):
        self.kind = kind
        self.category = category
        self.cause = cause
        super().__init__(
            f"Constraint '{kind}' failed on '{category or '<root>'}': {type(cause).__name__}: {cause}"
        )


class ExpressionError(FormguardError):
    """A message expression could not be parsed or evaluated."""


class DispatchError(FormguardError):
    """Invalid use of the outcome dispatcher."""


class AlreadyDispatchedError(DispatchError):
    """The request already dispatched to a recovery target."""


class UndispatchedErrorsError(DispatchError):
    """A handler finished with validation errors but never chose where to go."""

    def __init__(self, categories: Optional[list[str]] = None):
        self.categories = categories or []
        super().__init__(
            "There are validation errors and no outcome was dispatched: "
            + ", ".join(self.categories)
        )


class ValidationFailed(FormguardError):
    """Raised on dispatch to stop the current handler.

    Carries the chosen outcome and the messages collected so far. Web
    integrations turn it into a response.
    """

    def __init__(self, outcome, messages):
        self.outcome = outcome
        self.messages = messages
        super().__init__(f"Validation failed with {len(messages.errors)} error(s); dispatching {outcome.kind}")
