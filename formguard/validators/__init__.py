"""Constraint validation — declarations, registry and the validation engine.

Usage:
    from formguard.validators import validation_engine, NotNull, Size

    class Customer(BaseModel):
        name: Annotated[Optional[str], NotNull(), Size(min=3, max=60)] = None

    violations = validation_engine.validate(customer, prefix="customer")
"""

from formguard.validators.base import BaseConstraintValidator
from formguard.validators.constraints import (
    DEFAULT_GROUP,
    AssertFalse,
    AssertTrue,
    Constraint,
    DecimalMax,
    DecimalMin,
    Digits,
    Email,
    Future,
    FutureOrPresent,
    Max,
    Min,
    Negative,
    NegativeOrZero,
    NotBlank,
    NotEmpty,
    NotNull,
    Null,
    Past,
    PastOrPresent,
    Pattern,
    Positive,
    PositiveOrZero,
    Size,
    Unique,
    Valid,
)
from formguard.validators.engine import ValidationEngine, validation_engine
from formguard.validators.metadata import ConstraintSet
from formguard.validators.models import Severity, ValidationContext, Violation
from formguard.validators.registry import ConstraintRegistry, default_registry
from formguard.validators.unique_validator import UniquenessLookup

__all__ = [
    "ValidationEngine",
    "validation_engine",
    "ConstraintRegistry",
    "default_registry",
    "BaseConstraintValidator",
    "ConstraintSet",
    "ValidationContext",
    "Violation",
    "Severity",
    "UniquenessLookup",
    "DEFAULT_GROUP",
    "Constraint",
    "Valid",
    "NotNull",
    "Null",
    "NotEmpty",
    "NotBlank",
    "Size",
    "Min",
    "Max",
    "DecimalMin",
    "DecimalMax",
    "Digits",
    "Positive",
    "PositiveOrZero",
    "Negative",
    "NegativeOrZero",
    "Past",
    "PastOrPresent",
    "Future",
    "FutureOrPresent",
    "Pattern",
    "Email",
    "AssertTrue",
    "AssertFalse",
    "Unique",
]
