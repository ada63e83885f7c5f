"""Constraint Registry — maps constraint kinds to validators and default messages."""

from typing import Optional

import structlog

from formguard.exceptions import UnknownConstraintError
from formguard.validators.base import BaseConstraintValidator
from formguard.validators.null_validators import (
    NotBlankValidator,
    NotEmptyValidator,
    NotNullValidator,
    NullValidator,
)
from formguard.validators.number_validators import (
    DecimalMaxValidator,
    DecimalMinValidator,
    DigitsValidator,
    MaxValidator,
    MinValidator,
    NegativeOrZeroValidator,
    NegativeValidator,
    PositiveOrZeroValidator,
    PositiveValidator,
)
from formguard.validators.pattern_validators import (
    AssertFalseValidator,
    AssertTrueValidator,
    EmailValidator,
    PatternValidator,
)
from formguard.validators.size_validator import SizeValidator
from formguard.validators.temporal_validators import (
    FutureOrPresentValidator,
    FutureValidator,
    PastOrPresentValidator,
    PastValidator,
)
from formguard.validators.unique_validator import UniqueValidator

logger = structlog.get_logger()


class ConstraintRegistry:
    """Registry of constraint validators keyed by kind."""

    def __init__(self, validators: Optional[list[BaseConstraintValidator]] = None):
        self._validators: dict[str, BaseConstraintValidator] = {}
        for validator in validators or []:
            self.register(validator)

    def register(self, validator: BaseConstraintValidator) -> None:
        """Register a validator; an existing validator for the same kind is replaced."""
        if validator.kind in self._validators:
            logger.debug("constraint_validator_replaced", kind=validator.kind)
        self._validators[validator.kind] = validator

    def unregister(self, kind: str) -> None:
        self._validators.pop(kind, None)

    def get(self, kind: str) -> BaseConstraintValidator:
        try:
            return self._validators[kind]
        except KeyError:
            raise UnknownConstraintError(kind) from None

    def default_message(self, kind: str) -> str:
        return self.get(kind).default_message

    def kinds(self) -> list[str]:
        return list(self._validators)

    def __contains__(self, kind: str) -> bool:
        return kind in self._validators

    def __len__(self) -> int:
        return len(self._validators)


def builtin_validators() -> list[BaseConstraintValidator]:
    """Every built-in validator, in registration order."""
    return [
        NotNullValidator(),
        NullValidator(),
        NotEmptyValidator(),
        NotBlankValidator(),
        SizeValidator(),
        MinValidator(),
        MaxValidator(),
        DecimalMinValidator(),
        DecimalMaxValidator(),
        DigitsValidator(),
        PositiveValidator(),
        PositiveOrZeroValidator(),
        NegativeValidator(),
        NegativeOrZeroValidator(),
        PastValidator(),
        PastOrPresentValidator(),
        FutureValidator(),
        FutureOrPresentValidator(),
        PatternValidator(),
        EmailValidator(),
        AssertTrueValidator(),
        AssertFalseValidator(),
        UniqueValidator(),
    ]


def default_registry() -> ConstraintRegistry:
    """Create a registry with all built-in constraints."""
    return ConstraintRegistry(builtin_validators())
