"""Number Validators — Min, Max, DecimalMin, DecimalMax, Digits and sign checks.

Accepts int, float, Decimal and numeric strings. Strings that are not numbers
fail the check; other types are a declaration fault.
"""

from decimal import Decimal

from formguard.validators.base import BaseConstraintValidator


class _BoundValidator(BaseConstraintValidator):
    """Shared comparison against a single bound."""

    def _check(self, number: Decimal, bound: Decimal, inclusive: bool) -> bool:
        raise NotImplementedError

    def _bound(self, constraint) -> Decimal:
        return Decimal(str(constraint.value))

    def _inclusive(self, constraint) -> bool:
        return getattr(constraint, "inclusive", True)

    def is_valid(self, value, constraint, context) -> bool:
        if value is None:
            return True
        number = self._as_decimal(value)
        if number is None:
            return False
        return self._check(number, self._bound(constraint), self._inclusive(constraint))


class MinValidator(_BoundValidator):

    @property
    def kind(self) -> str:
        return "min"

    def _check(self, number, bound, inclusive) -> bool:
        return number >= bound if inclusive else number > bound


class MaxValidator(_BoundValidator):

    @property
    def kind(self) -> str:
        return "max"

    def _check(self, number, bound, inclusive) -> bool:
        return number <= bound if inclusive else number < bound


class DecimalMinValidator(MinValidator):

    @property
    def kind(self) -> str:
        return "decimal_min"


class DecimalMaxValidator(MaxValidator):

    @property
    def kind(self) -> str:
        return "decimal_max"


class DigitsValidator(BaseConstraintValidator):

    @property
    def kind(self) -> str:
        return "digits"

    def is_valid(self, value, constraint, context) -> bool:
        if value is None:
            return True
        number = self._as_decimal(value)
        if number is None or not number.is_finite():
            return False

        # normalize() drops trailing zeros: 12.50 has one fractional digit
        sign, digits, exponent = number.normalize().as_tuple()
        if exponent >= 0:
            integer_digits = len(digits) + exponent if digits != (0,) else 1
            fraction_digits = 0
        else:
            fraction_digits = -exponent
            integer_digits = max(len(digits) - fraction_digits, 0)

        return integer_digits <= constraint.integer and fraction_digits <= constraint.fraction


class _SignValidator(BaseConstraintValidator):
    """Compares the value against zero."""

    allow_zero = False
    positive = True

    def is_valid(self, value, constraint, context) -> bool:
        if value is None:
            return True
        number = self._as_decimal(value)
        if number is None:
            return False
        if number == 0:
            return self.allow_zero
        return number > 0 if self.positive else number < 0


class PositiveValidator(_SignValidator):

    @property
    def kind(self) -> str:
        return "positive"


class PositiveOrZeroValidator(_SignValidator):
    allow_zero = True

    @property
    def kind(self) -> str:
        return "positive_or_zero"


class NegativeValidator(_SignValidator):
    positive = False

    @property
    def kind(self) -> str:
        return "negative"


class NegativeOrZeroValidator(_SignValidator):
    allow_zero = True
    positive = False

    @property
    def kind(self) -> str:
        return "negative_or_zero"
