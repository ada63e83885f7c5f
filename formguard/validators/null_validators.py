"""Null family — NotNull, Null, NotEmpty, NotBlank."""

from formguard.exceptions import UnsupportedTypeError
from formguard.validators.base import BaseConstraintValidator


class NotNullValidator(BaseConstraintValidator):

    @property
    def kind(self) -> str:
        return "not_null"

    def is_valid(self, value, constraint, context) -> bool:
        return value is not None


class NullValidator(BaseConstraintValidator):

    @property
    def kind(self) -> str:
        return "null"

    def is_valid(self, value, constraint, context) -> bool:
        return value is None


class NotEmptyValidator(BaseConstraintValidator):
    """Strings, bytes and collections must have at least one element."""

    @property
    def kind(self) -> str:
        return "not_empty"

    def is_valid(self, value, constraint, context) -> bool:
        if value is None:
            return False
        return self._length(value) > 0


class NotBlankValidator(BaseConstraintValidator):
    """Strings must contain a non-whitespace character."""

    @property
    def kind(self) -> str:
        return "not_blank"

    def is_valid(self, value, constraint, context) -> bool:
        if value is None:
            return False
        if not isinstance(value, str):
            raise UnsupportedTypeError(self.kind, value)
        return bool(value.strip())
