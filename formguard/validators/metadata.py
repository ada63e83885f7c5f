"""Constraint metadata — reads declarations off classes or explicit sets.

Three sources, in order of precedence:
    1. An explicit ConstraintSet passed to the engine
    2. pydantic models: ``Annotated`` metadata kept in ``model_fields``
    3. Any other class (dataclasses, plain classes): ``Annotated`` type hints

Object-level constraints come from a ``__constraints__`` class attribute.
Descriptors for classes are cached; they are immutable once built.
"""

import types
import typing
from dataclasses import dataclass, field
from functools import lru_cache
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from pydantic import BaseModel

from formguard.validators.constraints import Constraint, Valid


@dataclass(frozen=True)
class FieldConstraints:
    """Constraints declared on one field."""

    name: str
    constraints: tuple[Constraint, ...]
    cascade: bool = False


@dataclass(frozen=True)
class ConstraintSet:
    """Explicit declaration of constraints, independent of annotations.

    Usage:
        ConstraintSet({"name": [NotNull(), Size(max=60)], "address": [Valid()]})
    """

    fields: Mapping[str, Iterable[Constraint]] = field(default_factory=dict)
    object_constraints: tuple[Constraint, ...] = ()

    def describe(self) -> "ObjectDescriptor":
        return ObjectDescriptor(
            fields=tuple(_field(name, list(constraints)) for name, constraints in self.fields.items()),
            object_constraints=tuple(self.object_constraints),
        )


@dataclass(frozen=True)
class ObjectDescriptor:
    """All constraints of a type, in declaration order."""

    fields: tuple[FieldConstraints, ...] = ()
    object_constraints: tuple[Constraint, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.fields and not self.object_constraints

    def field_named(self, name: str) -> Optional[FieldConstraints]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


EMPTY = ObjectDescriptor()


def _field(name: str, metadata: Iterable[Any]) -> FieldConstraints:
    constraints = [m for m in metadata if isinstance(m, Constraint)]
    cascade = any(isinstance(c, Valid) for c in constraints)
    return FieldConstraints(
        name=name,
        constraints=tuple(c for c in constraints if not isinstance(c, Valid)),
        cascade=cascade,
    )


def _annotated_metadata(hint: Any) -> tuple:
    """Metadata of an ``Annotated`` hint, also when wrapped in Optional or a union."""
    origin = typing.get_origin(hint)
    if origin is typing.Annotated:
        return tuple(hint.__metadata__) + _annotated_metadata(hint.__origin__)
    if origin is typing.Union or origin is types.UnionType:
        return tuple(m for arg in typing.get_args(hint) for m in _annotated_metadata(arg))
    return ()


@lru_cache(maxsize=512)
def describe_type(cls: type) -> ObjectDescriptor:
    """Build the descriptor for a class from its annotations."""
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        pairs = [
            (name, tuple(info.metadata) + _annotated_metadata(info.annotation))
            for name, info in cls.model_fields.items()
        ]
    else:
        try:
            hints = typing.get_type_hints(cls, include_extras=True)
        except (NameError, TypeError):
            hints = {}
        pairs = [(name, _annotated_metadata(hint)) for name, hint in hints.items()]

    fields = tuple(
        f for f in (_field(name, metadata) for name, metadata in pairs)
        if f.constraints or f.cascade
    )
    object_constraints = tuple(
        c for c in getattr(cls, "__constraints__", ()) if isinstance(c, Constraint)
    )
    return ObjectDescriptor(fields=fields, object_constraints=object_constraints)


def describe(obj: Any, constraints: Optional[ConstraintSet] = None) -> ObjectDescriptor:
    """Descriptor for an instance, honoring an explicit ConstraintSet."""
    if constraints is not None:
        return constraints.describe()
    if obj is None or isinstance(obj, (str, bytes, int, float, bool, Mapping)):
        return EMPTY
    return describe_type(type(obj))


def field_value(obj: Any, name: str) -> Any:
    """Read a field from an object or a mapping; missing fields read as None."""
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)
