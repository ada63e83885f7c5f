"""Unresolved messages added by application code.

    collector.add(SimpleMessage("customer.age", "must be at least {0}", (18,)))
    collector.add(I18nMessage("customer.email", "customer.email.taken", (email,)))

Both resolve to a Violation with the collector's locale.
"""

from dataclasses import dataclass
from typing import Any, Optional

from formguard.messages import MessageInterpolator
from formguard.validators.models import Severity, Violation


def _positional(params: tuple) -> dict[str, Any]:
    return {str(i): value for i, value in enumerate(params)}


@dataclass(frozen=True)
class SimpleMessage:
    """Literal text. ``{0}``, ``{1}``... are replaced by ``params``."""

    category: str
    message: str
    params: tuple = ()
    severity: Severity = Severity.ERROR

    def __post_init__(self):
        object.__setattr__(self, "params", tuple(self.params))

    def resolve(self, interpolator: MessageInterpolator, locale: Optional[str] = None) -> Violation:
        text = interpolator.interpolate(
            self.message, _positional(self.params), locale, resolve_keys=False
        )
        return Violation(category=self.category, message=text, severity=self.severity)


@dataclass(frozen=True)
class I18nMessage:
    """Bundle key. Falls back to ``default`` and then to the key itself."""

    category: str
    key: str
    params: tuple = ()
    severity: Severity = Severity.ERROR
    default: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "params", tuple(self.params))

    def resolve(self, interpolator: MessageInterpolator, locale: Optional[str] = None) -> Violation:
        text = interpolator.message(self.key, _positional(self.params), locale, default=self.default)
        return Violation(category=self.category, message=text, severity=self.severity, code=self.key)
