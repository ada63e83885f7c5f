"""Error Collector — request-scoped accumulation of violations.

Usage:
    collector = ErrorCollector(locale="pt_BR")
    collector.validate(customer, prefix="customer")
    collector.ensure(customer.accepted_terms, I18nMessage("customer.terms", "customer.terms.required"))
    collector.on_error_send_bad_request()   # raises ValidationFailed if any error
"""

from typing import Any, Callable, Iterable, Optional, Union

import structlog

from formguard.errors.dispatcher import (
    ForwardOutcome,
    OutcomeDispatcher,
    PageOutcome,
    RedirectOutcome,
    StatusOutcome,
)
from formguard.errors.message_list import MessageList, Messages
from formguard.errors.messages import I18nMessage, SimpleMessage
from formguard.validators import ValidationContext, ValidationEngine, Violation, validation_engine
from formguard.validators.metadata import ConstraintSet

logger = structlog.get_logger()

Item = Union[Violation, SimpleMessage, I18nMessage]


class ErrorCollector:
    """Collects violations for one request and dispatches on errors.

    Only ERROR severity blocks: warnings and info are kept for display.
    """

    def __init__(
        self,
        engine: Optional[ValidationEngine] = None,
        locale: Optional[str] = None,
        context: Optional[ValidationContext] = None,
        dispatcher: Optional[OutcomeDispatcher] = None,
    ):
        self.engine = engine or validation_engine
        self.locale = locale
        self.context = context or ValidationContext()
        self.dispatcher = dispatcher or OutcomeDispatcher()
        self._violations: list[Violation] = []

    # ── Collecting ──

    def add(self, item: Item) -> "ErrorCollector":
        """Add a violation or an unresolved message."""
        self.dispatcher.ensure_open()
        self._violations.append(self._resolve(item))
        return self

    def add_all(self, items: Iterable[Item]) -> "ErrorCollector":
        for item in items:
            self.add(item)
        return self

    def add_if(self, condition: bool, item: Item) -> "ErrorCollector":
        """Add ``item`` only when ``condition`` is true."""
        if condition:
            self.add(item)
        return self

    def ensure(self, condition: bool, item: Item) -> "ErrorCollector":
        """Add ``item`` only when ``condition`` is false."""
        if not condition:
            self.add(item)
        return self

    def validate(
        self,
        obj: Any,
        prefix: Optional[str] = None,
        groups: Optional[Iterable[str]] = None,
        constraints: Optional[ConstraintSet] = None,
        context: Optional[ValidationContext] = None,
    ) -> list[Violation]:
        """Run the engine on ``obj`` and add what it finds.

        ``context`` overrides the collector's context for this call only.
        """
        self.dispatcher.ensure_open()
        violations = self.engine.validate(
            obj,
            prefix=prefix or "",
            groups=groups,
            locale=self.locale,
            context=context or self.context,
            constraints=constraints,
        )
        self._violations.extend(violations)
        return violations

    def _resolve(self, item: Item) -> Violation:
        if isinstance(item, Violation):
            return item
        if isinstance(item, (SimpleMessage, I18nMessage)):
            return item.resolve(self.engine.interpolator, self.locale)
        raise TypeError(f"Cannot collect {type(item).__name__}; expected a Violation or a message")

    # ── Queries ──

    @property
    def messages(self) -> Messages:
        return Messages(self._violations)

    @property
    def errors(self) -> MessageList:
        return self.messages.errors

    @property
    def warnings(self) -> MessageList:
        return self.messages.warnings

    @property
    def info(self) -> MessageList:
        return self.messages.info

    def has_errors(self) -> bool:
        return any(v.is_error for v in self._violations)

    def __len__(self) -> int:
        return len(self._violations)

    # ── Dispatch ──

    @property
    def state(self):
        return self.dispatcher.state

    def on_error_use(self, outcome) -> None:
        """Dispatch ``outcome`` if there are errors; no-op otherwise."""
        if not self.has_errors():
            return
        self.dispatcher.dispatch(outcome, self.messages)

    def on_error_forward_to(self, handler: Callable[..., Any], **params: Any) -> None:
        self.on_error_use(ForwardOutcome(handler=handler, params=params))

    def on_error_redirect_to(self, route_name: str, **path_params: Any) -> None:
        self.on_error_use(RedirectOutcome(route_name=route_name, path_params=path_params))

    def on_error_use_page(self, page: str, **params: Any) -> None:
        self.on_error_use(PageOutcome(page=page, params=params))

    def on_error_send_bad_request(self, status_code: Optional[int] = None) -> None:
        self.on_error_use(StatusOutcome(status_code=status_code))
