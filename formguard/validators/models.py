"""Validation models — severity levels, violations and the evaluation context.

A Violation is created during a validation pass and lives as long as the
request that produced it.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, Field

from formguard.exceptions import ConstraintDefinitionError


class Severity(str, Enum):
    """Presentational intent of a violation."""

    ERROR = "error"  # Blocks successful completion
    WARN = "warn"    # Shown to the user, does not block
    INFO = "info"    # Informational only


class Violation(BaseModel):
    """A single failed check, with its message already resolved."""

    category: str
    message: str
    severity: Severity = Severity.ERROR
    code: Optional[str] = None  # Constraint kind or message key
    invalid_value: Any = Field(default=None, exclude=True)

    model_config = {"frozen": True}

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class ValidationContext:
    """Per-call context handed to every constraint validator.

    services holds collaborators for custom validators (repositories,
    lookups). clock returns an aware datetime and drives the temporal
    constraints.
    """

    services: Mapping[str, Any] = field(default_factory=dict)
    clock: Callable[[], datetime] = _local_now
    category: str = ""

    def service(self, name: str) -> Any:
        """Return a registered collaborator or fail loudly."""
        try:
            return self.services[name]
        except KeyError:
            raise ConstraintDefinitionError(
                f"Validator needs service '{name}' but the context only has: "
                f"{', '.join(sorted(self.services)) or 'nothing'}"
            ) from None

    def at(self, category: str) -> "ValidationContext":
        return replace(self, category=category)

    def with_services(self, **services: Any) -> "ValidationContext":
        """Copy with extra collaborators, replacing those of the same name."""
        return replace(self, services={**self.services, **services})

    def now(self) -> datetime:
        return self.clock()
