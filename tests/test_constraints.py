from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from formguard.exceptions import ConstraintDefinitionError, UnsupportedTypeError
from formguard.validators import (
    AssertFalse,
    AssertTrue,
    DecimalMax,
    DecimalMin,
    Digits,
    Email,
    Future,
    FutureOrPresent,
    Max,
    Min,
    Negative,
    NegativeOrZero,
    NotBlank,
    NotEmpty,
    NotNull,
    Null,
    Past,
    PastOrPresent,
    Pattern,
    Positive,
    PositiveOrZero,
    Size,
    Unique,
    ValidationContext,
    default_registry,
)
from tests.helpers import NOW

registry = default_registry()


def check(constraint, value, context=None):
    validator = registry.get(constraint.kind)
    return validator.is_valid(value, constraint, context or ValidationContext(clock=lambda: NOW))


# ── Declarations ──


def test_groups_accept_a_single_name():
    """A group name given as a string becomes a one-element tuple"""
    assert NotNull(groups="create").groups == ("create",)


def test_attributes_exclude_evaluation_settings():
    """Only rule parameters reach message templates"""
    assert Size(min=2, max=5, message="x", groups=("a",)).attributes() == {"min": 2, "max": 5}


def test_size_bounds_are_checked_on_declaration():
    with pytest.raises(ConstraintDefinitionError):
        Size(min=5, max=2)
    with pytest.raises(ConstraintDefinitionError):
        Size(min=-1)


def test_invalid_regexp_is_a_definition_error():
    with pytest.raises(ConstraintDefinitionError):
        Pattern(regexp="(unclosed")


def test_unknown_pattern_flag_is_a_definition_error():
    with pytest.raises(ConstraintDefinitionError):
        Pattern(regexp="a", flags=("NOPE",))


def test_decimal_bound_must_be_a_number():
    with pytest.raises(ConstraintDefinitionError):
        DecimalMin(value="ten")


def test_constraints_are_hashable_and_frozen():
    constraint = Size(max=3)
    assert constraint == Size(max=3)
    assert hash(constraint) == hash(Size(max=3))
    with pytest.raises(AttributeError):
        constraint.max = 4


# ── Null family ──


def test_null_family():
    assert check(NotNull(), 0)
    assert not check(NotNull(), None)
    assert check(Null(), None)
    assert not check(Null(), "")
    assert not check(NotEmpty(), "")
    assert not check(NotEmpty(), None)
    assert check(NotEmpty(), [1])
    assert not check(NotBlank(), "   ")
    assert check(NotBlank(), " a ")


def test_not_empty_rejects_values_without_length():
    with pytest.raises(UnsupportedTypeError):
        check(NotEmpty(), 42)


@pytest.mark.parametrize("value", [0, [], ["a"], b"text"])
def test_not_blank_rejects_non_text_values(value):
    with pytest.raises(UnsupportedTypeError):
        check(NotBlank(), value)


# ── Size ──


@pytest.mark.parametrize("value, expected", [
    ("ab", False),
    ("abc", True),
    ("abcde", True),
    ("abcdef", False),
    ([1, 2, 3], True),
    (None, True),
])
def test_size(value, expected):
    assert check(Size(min=3, max=5), value) is expected


# ── Numbers ──


def test_min_and_max_compare_numbers_and_numeric_strings():
    assert check(Min(value=18), 18)
    assert not check(Min(value=18), 17.99)
    assert check(Min(value=18), "20")
    assert not check(Min(value=18), "twenty")
    assert check(Max(value=10), Decimal("10"))
    assert not check(Max(value=10), 11)


def test_number_constraints_reject_booleans():
    with pytest.raises(UnsupportedTypeError):
        check(Min(value=0), True)


def test_decimal_bounds_respect_inclusive():
    assert check(DecimalMin(value="0.5"), Decimal("0.5"))
    assert not check(DecimalMin(value="0.5", inclusive=False), Decimal("0.5"))
    assert check(DecimalMax(value="99.99"), 99.99)
    assert not check(DecimalMax(value="99.99", inclusive=False), "99.99")


def test_nan_fails_numeric_checks():
    assert not check(Min(value=0), float("nan"))


@pytest.mark.parametrize("value, expected", [
    (Decimal("1234.56"), True),
    (Decimal("12345.6"), False),
    (Decimal("1.234"), False),
    (Decimal("12.50"), True),
    (0, True),
    (1000, True),
])
def test_digits(value, expected):
    assert check(Digits(integer=4, fraction=2), value) is expected


def test_digits_counts_integral_and_fraction_parts():
    assert check(Digits(integer=5, fraction=2), Decimal("12345.67"))
    assert not check(Digits(integer=4, fraction=2), Decimal("12345.67"))


def test_sign_constraints():
    assert check(Positive(), 1)
    assert not check(Positive(), 0)
    assert check(PositiveOrZero(), 0)
    assert check(Negative(), -0.1)
    assert not check(Negative(), 0)
    assert check(NegativeOrZero(), 0)
    assert not check(NegativeOrZero(), 1)


# ── Dates ──


def test_temporal_constraints_use_the_context_clock():
    today = NOW.date()
    assert check(Past(), today - timedelta(days=1))
    assert not check(Past(), today)
    assert check(PastOrPresent(), today)
    assert check(Future(), today + timedelta(days=1))
    assert not check(Future(), today)
    assert check(FutureOrPresent(), today)


def test_naive_datetimes_compare_to_wall_clock():
    naive_now = NOW.replace(tzinfo=None)
    assert check(Past(), naive_now - timedelta(seconds=1))
    assert check(Future(), naive_now + timedelta(seconds=1))
    assert check(PastOrPresent(), naive_now)


def test_aware_datetimes_compare_to_aware_now():
    assert check(Past(), NOW - timedelta(minutes=1))
    assert not check(Past(), NOW + timedelta(minutes=1))


def test_temporal_constraints_reject_other_types():
    with pytest.raises(UnsupportedTypeError):
        check(Past(), "2020-01-01")


# ── Text and booleans ──


def test_pattern_matches_the_whole_string():
    assert check(Pattern(regexp="[a-z]+"), "abc")
    assert not check(Pattern(regexp="[a-z]+"), "abc1")
    assert check(Pattern(regexp="[a-z]+", flags=("IGNORECASE",)), "ABC")


@pytest.mark.parametrize("value, expected", [
    ("ada@example.com", True),
    ("first.last+tag@sub.example.org", True),
    ("admin@intranet", False),
    ("", True),
    ("no-at-sign", False),
    ("two@@example.com", False),
    ("dot.@example.com", False),
    ("a" * 65 + "@example.com", False),
])
def test_email(value, expected):
    assert check(Email(), value) is expected


def test_assert_true_and_false():
    assert check(AssertTrue(), True)
    assert not check(AssertTrue(), False)
    assert check(AssertFalse(), False)
    assert check(AssertTrue(), None)
    with pytest.raises(UnsupportedTypeError):
        check(AssertTrue(), "true")


# ── Lookups ──


class Taken:
    def __init__(self, *values):
        self.values = set(values)
        self.calls = []

    def exists(self, field, value):
        self.calls.append((field, value))
        return value in self.values


def test_unique_uses_the_context_service():
    lookup = Taken("ada@example.com")
    context = ValidationContext(services={"users": lookup}, category="user.email")
    assert not check(Unique(lookup="users"), "ada@example.com", context)
    assert check(Unique(lookup="users"), "bob@example.com", context)
    assert lookup.calls[0] == ("email", "ada@example.com")


def test_unique_field_can_be_named():
    lookup = Taken("x")
    context = ValidationContext(services={"users": lookup}, category="form.login")
    check(Unique(lookup="users", field="username"), "x", context)
    assert lookup.calls == [("username", "x")]


def test_unique_without_service_is_a_definition_error():
    with pytest.raises(ConstraintDefinitionError):
        check(Unique(lookup="missing"), "x", ValidationContext(category="a.b"))


def test_dates_and_datetimes_are_both_supported():
    assert check(Past(), date(2000, 1, 1))
    assert check(Past(), datetime(2000, 1, 1))
