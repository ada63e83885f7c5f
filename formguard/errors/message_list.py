"""View-layer access to collected violations.

Templates and JSON responses read violations through these lists::

    messages.errors.from_("customer.name").join(", ")
    messages.warnings.from_("customer.nickname")
"""

from typing import Iterable

from formguard.validators.models import Severity, Violation


class MessageList(list):
    """A list of violations with category queries."""

    def from_(self, category: str) -> "MessageList":
        """Violations whose category is exactly ``category``, in collection order."""
        return MessageList(v for v in self if v.category == category)

    def join(self, separator: str = ", ") -> str:
        """Messages concatenated in collection order."""
        return separator.join(v.message for v in self)

    def categories(self) -> list[str]:
        """Distinct categories, in order of first appearance."""
        return list(dict.fromkeys(v.category for v in self))

    def grouped(self) -> dict[str, list[str]]:
        """category -> messages, preserving order."""
        grouped: dict[str, list[str]] = {}
        for v in self:
            grouped.setdefault(v.category, []).append(v.message)
        return grouped

    def to_list(self) -> list[dict]:
        return [v.model_dump(mode="json", exclude_none=True) for v in self]


class Messages:
    """Everything collected during a request, split by severity."""

    def __init__(self, violations: Iterable[Violation] = ()):
        self.all = MessageList(violations)

    def _of(self, severity: Severity) -> MessageList:
        return MessageList(v for v in self.all if v.severity == severity)

    @property
    def errors(self) -> MessageList:
        return self._of(Severity.ERROR)

    @property
    def warnings(self) -> MessageList:
        return self._of(Severity.WARN)

    @property
    def info(self) -> MessageList:
        return self._of(Severity.INFO)

    def has_errors(self) -> bool:
        return any(v.is_error for v in self.all)

    def to_dict(self) -> dict[str, list[dict]]:
        return {
            "errors": self.errors.to_list(),
            "warnings": self.warnings.to_list(),
            "info": self.info.to_list(),
        }

    def __len__(self) -> int:
        return len(self.all)

    def __iter__(self):
        return iter(self.all)
