"""Unique Validator — delegates to an injected lookup service.

The lookup is an external collaborator (usually a repository). It is looked
up from the ValidationContext at evaluation time, so one registry can serve
requests bound to different data sources. Lookup failures propagate.
"""

from typing import Any, Protocol, runtime_checkable

from formguard.validators.base import BaseConstraintValidator


@runtime_checkable
class UniquenessLookup(Protocol):
    """Answers whether a value is already taken for a field."""

    def exists(self, field: str, value: Any) -> bool:
        ...


class UniqueValidator(BaseConstraintValidator):

    @property
    def kind(self) -> str:
        return "unique"

    def is_valid(self, value, constraint, context) -> bool:
        if value is None:
            return True

        lookup = context.service(constraint.lookup)
        field = constraint.field or context.category.rsplit(".", 1)[-1]
        return not lookup.exists(field, value)
