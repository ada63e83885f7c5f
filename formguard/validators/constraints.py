"""Constraint declarations.

Constraints are frozen keyword-only dataclasses attached to fields through
``typing.Annotated``::

    class Customer(BaseModel):
        name: Annotated[Optional[str], NotNull(), Size(min=3, max=60)] = None
        address: Annotated[Optional[Address], Valid()] = None

They only describe the rule. The logic lives in the validator registered for
the constraint's ``kind``.
"""

import re
from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any, ClassVar, Optional

from formguard.exceptions import ConstraintDefinitionError
from formguard.validators.models import Severity

DEFAULT_GROUP = "default"

# Attributes that configure evaluation and never reach message templates
_META_ATTRIBUTES = {"message", "groups", "severity"}


@dataclass(frozen=True, kw_only=True)
class Constraint:
    """Base declaration. Subclasses set ``kind`` and add parameters."""

    kind: ClassVar[str] = ""

    message: Optional[str] = None  # Template or {bundle.key}; registry default when None
    groups: tuple[str, ...] = (DEFAULT_GROUP,)
    severity: Severity = Severity.ERROR

    def __post_init__(self):
        if not self.kind:
            raise ConstraintDefinitionError(f"{type(self).__name__} does not declare a kind")
        if isinstance(self.groups, str):
            object.__setattr__(self, "groups", (self.groups,))
        if not self.groups:
            raise ConstraintDefinitionError(f"{type(self).__name__} must belong to at least one group")

    def attributes(self) -> dict[str, Any]:
        """Parameters exposed to message interpolation."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in _META_ATTRIBUTES
        }

    def applies_to(self, groups: tuple[str, ...]) -> bool:
        return any(g in self.groups for g in groups)


@dataclass(frozen=True, kw_only=True)
class Valid(Constraint):
    """Cascade validation into the annotated object, list or mapping."""

    kind: ClassVar[str] = "valid"


# ── Null family ──


@dataclass(frozen=True, kw_only=True)
class NotNull(Constraint):
    kind: ClassVar[str] = "not_null"


@dataclass(frozen=True, kw_only=True)
class Null(Constraint):
    kind: ClassVar[str] = "null"


@dataclass(frozen=True, kw_only=True)
class NotEmpty(Constraint):
    """Not None and len() > 0."""

    kind: ClassVar[str] = "not_empty"


@dataclass(frozen=True, kw_only=True)
class NotBlank(Constraint):
    """Not None and at least one non-whitespace character."""

    kind: ClassVar[str] = "not_blank"


# ── Size ──


@dataclass(frozen=True, kw_only=True)
class Size(Constraint):
    """len() between min and max, inclusive. Strings, bytes and collections."""

    kind: ClassVar[str] = "size"

    min: int = 0
    max: Optional[int] = None

    def __post_init__(self):
        super().__post_init__()
        if self.min < 0:
            raise ConstraintDefinitionError(f"Size.min cannot be negative (got {self.min})")
        if self.max is not None and self.max < self.min:
            raise ConstraintDefinitionError(f"Size.max ({self.max}) is lower than Size.min ({self.min})")


# ── Numbers ──


@dataclass(frozen=True, kw_only=True)
class Min(Constraint):
    kind: ClassVar[str] = "min"

    value: int


@dataclass(frozen=True, kw_only=True)
class Max(Constraint):
    kind: ClassVar[str] = "max"

    value: int


def _parse_decimal(owner: str, text: str) -> Decimal:
    try:
        return Decimal(str(text))
    except InvalidOperation:
        raise ConstraintDefinitionError(f"{owner}.value '{text}' is not a decimal number") from None


@dataclass(frozen=True, kw_only=True)
class DecimalMin(Constraint):
    kind: ClassVar[str] = "decimal_min"

    value: str
    inclusive: bool = True

    def __post_init__(self):
        super().__post_init__()
        _parse_decimal("DecimalMin", self.value)


@dataclass(frozen=True, kw_only=True)
class DecimalMax(Constraint):
    kind: ClassVar[str] = "decimal_max"

    value: str
    inclusive: bool = True

    def __post_init__(self):
        super().__post_init__()
        _parse_decimal("DecimalMax", self.value)


@dataclass(frozen=True, kw_only=True)
class Digits(Constraint):
    """At most ``integer`` integral digits and ``fraction`` fractional digits."""

    kind: ClassVar[str] = "digits"

    integer: int
    fraction: int = 0

    def __post_init__(self):
        super().__post_init__()
        if self.integer < 0 or self.fraction < 0:
            raise ConstraintDefinitionError("Digits.integer and Digits.fraction must be >= 0")


@dataclass(frozen=True, kw_only=True)
class Positive(Constraint):
    kind: ClassVar[str] = "positive"


@dataclass(frozen=True, kw_only=True)
class PositiveOrZero(Constraint):
    kind: ClassVar[str] = "positive_or_zero"


@dataclass(frozen=True, kw_only=True)
class Negative(Constraint):
    kind: ClassVar[str] = "negative"


@dataclass(frozen=True, kw_only=True)
class NegativeOrZero(Constraint):
    kind: ClassVar[str] = "negative_or_zero"


# ── Dates ──


@dataclass(frozen=True, kw_only=True)
class Past(Constraint):
    kind: ClassVar[str] = "past"


@dataclass(frozen=True, kw_only=True)
class PastOrPresent(Constraint):
    kind: ClassVar[str] = "past_or_present"


@dataclass(frozen=True, kw_only=True)
class Future(Constraint):
    kind: ClassVar[str] = "future"


@dataclass(frozen=True, kw_only=True)
class FutureOrPresent(Constraint):
    kind: ClassVar[str] = "future_or_present"


# ── Text and booleans ──

_REGEX_FLAGS = {
    "IGNORECASE": re.IGNORECASE,
    "MULTILINE": re.MULTILINE,
    "DOTALL": re.DOTALL,
    "VERBOSE": re.VERBOSE,
    "ASCII": re.ASCII,
}


@lru_cache(maxsize=256)
def _compile(regexp: str, flag_names: tuple[str, ...]) -> re.Pattern:
    flags = 0
    for name in flag_names:
        flags |= _REGEX_FLAGS[name]
    return re.compile(regexp, flags)


@dataclass(frozen=True, kw_only=True)
class Pattern(Constraint):
    """The whole string must match ``regexp``."""

    kind: ClassVar[str] = "pattern"

    regexp: str
    flags: tuple[str, ...] = ()

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "flags", tuple(self.flags))
        unknown = [f for f in self.flags if f not in _REGEX_FLAGS]
        if unknown:
            raise ConstraintDefinitionError(f"Unknown Pattern flag(s): {', '.join(unknown)}")
        try:
            self.compiled()
        except re.error as e:
            raise ConstraintDefinitionError(f"Invalid Pattern.regexp '{self.regexp}': {e}") from None

    def compiled(self) -> re.Pattern:
        return _compile(self.regexp, self.flags)


@dataclass(frozen=True, kw_only=True)
class Email(Constraint):
    kind: ClassVar[str] = "email"


@dataclass(frozen=True, kw_only=True)
class AssertTrue(Constraint):
    kind: ClassVar[str] = "assert_true"


@dataclass(frozen=True, kw_only=True)
class AssertFalse(Constraint):
    kind: ClassVar[str] = "assert_false"


# ── Lookups ──


@dataclass(frozen=True, kw_only=True)
class Unique(Constraint):
    """No other record holds this value.

    ``lookup`` names a service in the ValidationContext implementing
    ``UniquenessLookup``; ``field`` defaults to the annotated field name.
    """

    kind: ClassVar[str] = "unique"

    lookup: str
    field: Optional[str] = None
