import json
from decimal import Decimal

from formguard.messages import BundleLoader, MessageInterpolator, escape


def test_bundle_key_is_resolved(interpolator):
    assert interpolator.interpolate("{constraints.not_null}") == "must not be null"


def test_parameters_are_substituted(interpolator):
    text = interpolator.interpolate("{constraints.min}", {"value": 18})
    assert text == "must be greater than or equal to 18"


def test_size_message_variants(interpolator):
    assert interpolator.interpolate("{constraints.size}", {"min": 2, "max": 8}) == "size must be between 2 and 8"
    assert interpolator.interpolate("{constraints.size}", {"min": 0, "max": 8}) == "size must be at most 8"
    assert interpolator.interpolate("{constraints.size}", {"min": 2, "max": None}) == "size must be at least 2"


def test_decimal_min_uses_inclusive_flag(interpolator):
    inclusive = interpolator.interpolate("{constraints.decimal_min}", {"value": "0", "inclusive": True})
    exclusive = interpolator.interpolate("{constraints.decimal_min}", {"value": "0", "inclusive": False})
    assert inclusive == "must be greater than or equal to 0"
    assert exclusive == "must be greater than 0"


def test_translated_message(interpolator):
    assert interpolator.interpolate("{constraints.size}", {"min": 2, "max": 8}, "pt-BR") == (
        "o tamanho deve ser entre 2 e 8"
    )


def test_validated_value_is_available(interpolator):
    text = interpolator.interpolate("{constraints.unique}", {"validatedValue": "ada@example.com"})
    assert text == "ada@example.com is already taken"


def test_formatter_in_expressions(interpolator):
    text = interpolator.interpolate(
        "limit is ${formatter.format('%,.2f', validatedValue)}",
        {"validatedValue": Decimal("1234.5")},
    )
    assert text == "limit is 1,234.50"


def test_unknown_placeholders_stay_literal(interpolator):
    assert interpolator.interpolate("hello {who}") == "hello {who}"


def test_failing_expressions_stay_literal(interpolator):
    assert interpolator.interpolate("value ${1 +}") == "value ${1 +}"
    assert interpolator.interpolate("value ${missing * 2}") == "value ${missing * 2}"


def test_escapes_render_literal_characters(interpolator):
    assert interpolator.interpolate(r"\{min\} costs \$5", {"min": 1}) == "{min} costs $5"


def test_parameter_values_are_not_interpreted(interpolator):
    """A value that looks like a placeholder is shown as typed"""
    text = interpolator.interpolate("{validatedValue} is invalid", {"validatedValue": "${1 + 1} {min}", "min": 3})
    assert text == "${1 + 1} {min} is invalid"


def test_escape_round_trip():
    assert escape("a{b}$c\\") == "a\\{b\\}\\$c\\\\"


def test_nested_keys_are_resolved(tmp_path):
    (tmp_path / "messages.json").write_text(
        json.dumps({"outer": "[{inner}]", "inner": "{constraints.not_null}"}), encoding="utf-8"
    )
    interpolator = MessageInterpolator(BundleLoader([tmp_path]))
    assert interpolator.interpolate("{outer}") == "[must not be null]"


def test_recursive_keys_are_bounded(tmp_path):
    """Self-referencing entries do not loop forever"""
    (tmp_path / "messages.json").write_text(json.dumps({"loop": "again {loop}"}), encoding="utf-8")
    interpolator = MessageInterpolator(BundleLoader([tmp_path]), max_depth=3)
    assert interpolator.interpolate("{loop}") == "again again again {loop}"


def test_missing_key_falls_back_to_default(interpolator):
    assert interpolator.message("no.such.key", default="fallback {0}", params={"0": 7}) == "fallback 7"


def test_missing_key_without_default_is_the_key(interpolator):
    """A missing entry resolves to a non-empty literal and never raises"""
    assert interpolator.message("no.such.key") == "no.such.key"


def test_message_with_positional_params(interpolator):
    text = interpolator.message("customer.birth_date.too_young", {"0": 18}, "pt_BR")
    assert text == "o cliente deve ter pelo menos 18 anos"


def test_expression_on_infinite_value_stays_literal(interpolator):
    template = "${formatter.format('%d', validatedValue)} is too big"
    assert interpolator.interpolate(template, {"validatedValue": float("inf")}) == template


def test_deeply_nested_expression_stays_literal(interpolator):
    template = "${" + "(" * 5000 + "1" + ")" * 5000 + "}"
    assert interpolator.interpolate(template) == template
