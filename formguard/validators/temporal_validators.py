"""Temporal Validators — Past, PastOrPresent, Future, FutureOrPresent.

Dates and datetimes only. "Now" comes from the context clock so tests and
request handlers can pin it.
"""

from formguard.validators.base import BaseConstraintValidator


class _TemporalValidator(BaseConstraintValidator):

    # Accepted results of _compare_to_now()
    accepted: frozenset = frozenset()

    def is_valid(self, value, constraint, context) -> bool:
        if value is None:
            return True
        return self._compare_to_now(value, context) in self.accepted


class PastValidator(_TemporalValidator):
    accepted = frozenset({-1})

    @property
    def kind(self) -> str:
        return "past"


class PastOrPresentValidator(_TemporalValidator):
    accepted = frozenset({-1, 0})

    @property
    def kind(self) -> str:
        return "past_or_present"


class FutureValidator(_TemporalValidator):
    accepted = frozenset({1})

    @property
    def kind(self) -> str:
        return "future"


class FutureOrPresentValidator(_TemporalValidator):
    accepted = frozenset({0, 1})

    @property
    def kind(self) -> str:
        return "future_or_present"
