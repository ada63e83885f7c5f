"""Text and boolean validators — Pattern, Email, AssertTrue, AssertFalse."""

from email_validator import EmailNotValidError, validate_email

from formguard.exceptions import UnsupportedTypeError
from formguard.validators.base import BaseConstraintValidator


class PatternValidator(BaseConstraintValidator):

    @property
    def kind(self) -> str:
        return "pattern"

    def is_valid(self, value, constraint, context) -> bool:
        if value is None:
            return True
        if not isinstance(value, str):
            raise UnsupportedTypeError(self.kind, value)
        return constraint.compiled().fullmatch(value) is not None


class EmailValidator(BaseConstraintValidator):
    """Well-formed address. Empty strings pass; combine with NotBlank."""

    @property
    def kind(self) -> str:
        return "email"

    def is_valid(self, value, constraint, context) -> bool:
        if value is None or value == "":
            return True
        if not isinstance(value, str):
            raise UnsupportedTypeError(self.kind, value)

        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            return False
        return True


class AssertTrueValidator(BaseConstraintValidator):

    @property
    def kind(self) -> str:
        return "assert_true"

    def is_valid(self, value, constraint, context) -> bool:
        if value is None:
            return True
        if not isinstance(value, bool):
            raise UnsupportedTypeError(self.kind, value)
        return value is True


class AssertFalseValidator(BaseConstraintValidator):

    @property
    def kind(self) -> str:
        return "assert_false"

    def is_valid(self, value, constraint, context) -> bool:
        if value is None:
            return True
        if not isinstance(value, bool):
            raise UnsupportedTypeError(self.kind, value)
        return value is False
