"""Size Validator — length bounds for strings, bytes and collections."""

from formguard.validators.base import BaseConstraintValidator


class SizeValidator(BaseConstraintValidator):

    @property
    def kind(self) -> str:
        return "size"

    def is_valid(self, value, constraint, context) -> bool:
        if value is None:
            return True

        length = self._length(value)
        if length < constraint.min:
            return False
        if constraint.max is not None and length > constraint.max:
            return False
        return True
