"""Base constraint validator — abstract class implementing the Strategy Pattern.

Each validator checks one constraint kind and is registered in the
ConstraintRegistry. New kinds are added without modifying the engine.
"""

import math
from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from formguard.exceptions import UnsupportedTypeError
from formguard.validators.constraints import Constraint
from formguard.validators.models import ValidationContext


class BaseConstraintValidator(ABC):
    """Abstract base for all constraint validators.

    Contract:
        - is_valid() returns True when the value satisfies the constraint
        - is_valid() is deterministic for a given value, constraint and context
        - built-in validators treat None as valid unless they check nullity
        - collaborators come from the constructor or context.service()
    """

    @property
    @abstractmethod
    def kind(self) -> str:
        """Constraint kind this validator handles."""
        ...

    @property
    def default_message(self) -> str:
        """Template used when the constraint declares no message."""
        return "{constraints." + self.kind + "}"

    @abstractmethod
    def is_valid(self, value: Any, constraint: Constraint, context: ValidationContext) -> bool:
        """Check one value.

        Args:
            value: The field value (may be None)
            constraint: The declaration with its parameters
            context: Services, clock and current category

        Returns:
            True if the value satisfies the constraint
        """
        ...

    # ── Helper Methods ──

    def _length(self, value: Any) -> int:
        """len() of strings, bytes and collections."""
        try:
            return len(value)
        except TypeError:
            raise UnsupportedTypeError(self.kind, value) from None

    def _as_decimal(self, value: Any) -> Optional[Decimal]:
        """Convert numbers and numeric strings to Decimal.

        Returns None for strings that are not numbers. NaN is never comparable.
        """
        if isinstance(value, bool):
            raise UnsupportedTypeError(self.kind, value)
        if isinstance(value, Decimal):
            return None if value.is_nan() else value
        if isinstance(value, int):
            return Decimal(value)
        if isinstance(value, float):
            if math.isnan(value):
                return None
            if math.isinf(value):
                return Decimal("Infinity") if value > 0 else Decimal("-Infinity")
            return Decimal(repr(value))
        if isinstance(value, str):
            try:
                parsed = Decimal(value.strip())
            except InvalidOperation:
                return None
            return None if parsed.is_nan() else parsed
        raise UnsupportedTypeError(self.kind, value)

    def _compare_to_now(self, value: Any, context: ValidationContext) -> int:
        """-1 if value is before now, 0 if equal, 1 if after.

        Naive datetimes are compared with local wall-clock time, dates with
        today's date.
        """
        now = context.now()
        if isinstance(value, datetime):
            reference = now if value.tzinfo is not None else now.replace(tzinfo=None)
        elif isinstance(value, date):
            reference = now.date()
        else:
            raise UnsupportedTypeError(self.kind, value)

        if value < reference:
            return -1
        if value > reference:
            return 1
        return 0
