"""Error collection and dispatch for request handlers."""

from formguard.errors.collector import ErrorCollector
from formguard.errors.dispatcher import (
    DispatchState,
    ForwardOutcome,
    OutcomeDispatcher,
    PageOutcome,
    RedirectOutcome,
    StatusOutcome,
)
from formguard.errors.message_list import MessageList, Messages
from formguard.errors.messages import I18nMessage, SimpleMessage

__all__ = [
    "ErrorCollector",
    "DispatchState",
    "OutcomeDispatcher",
    "ForwardOutcome",
    "RedirectOutcome",
    "PageOutcome",
    "StatusOutcome",
    "MessageList",
    "Messages",
    "SimpleMessage",
    "I18nMessage",
]
