"""Outcome Dispatcher — where a request goes when validation fails.

Two states: VALIDATING until an outcome is dispatched, then DISPATCHED for
the rest of the request. Dispatching raises ValidationFailed so the current
handler stops; the web layer renders the outcome.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, NoReturn, Optional

import structlog

from formguard.errors.message_list import Messages
from formguard.exceptions import AlreadyDispatchedError, ValidationFailed

logger = structlog.get_logger()


class DispatchState(str, Enum):
    VALIDATING = "validating"
    DISPATCHED = "dispatched"


@dataclass(frozen=True)
class ForwardOutcome:
    """Run another handler in the same request: ``handler(request, **params)``."""

    kind: ClassVar[str] = "forward"

    handler: Callable[..., Any]
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RedirectOutcome:
    """Redirect the client to a named route."""

    kind: ClassVar[str] = "redirect"

    route_name: str
    path_params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PageOutcome:
    """Render the page registered for a handler, with the messages in scope."""

    kind: ClassVar[str] = "page"

    page: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StatusOutcome:
    """Structured error payload; settings.BAD_REQUEST_STATUS when no status is given."""

    kind: ClassVar[str] = "status"

    status_code: Optional[int] = None


class OutcomeDispatcher:
    """Two-state machine guarding a single dispatch per request."""

    def __init__(self):
        self.state = DispatchState.VALIDATING
        self.outcome = None

    @property
    def dispatched(self) -> bool:
        return self.state == DispatchState.DISPATCHED

    def ensure_open(self) -> None:
        """Fail if the request already left the validating state."""
        if self.dispatched:
            raise AlreadyDispatchedError(
                f"Validation already dispatched to a {self.outcome.kind} outcome"
            )

    def dispatch(self, outcome, messages: Messages) -> NoReturn:
        """Transition to DISPATCHED and stop the current handler."""
        self.ensure_open()
        self.state = DispatchState.DISPATCHED
        self.outcome = outcome

        logger.info(
            "validation_dispatched",
            outcome=outcome.kind,
            errors=len(messages.errors),
            categories=messages.errors.categories(),
        )
        raise ValidationFailed(outcome, messages)
