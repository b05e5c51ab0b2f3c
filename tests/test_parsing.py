"""Tests for flexible numeric input parsing."""

import pytest

from finance_engine.core.errors import InputParseError
from finance_engine.core.parsing import parse_field, parse_number, sanitize_for_error_message


def _error_for(value) -> str:
    with pytest.raises(InputParseError) as exc_info:
        parse_number(value)
    return str(exc_info.value)


def test_native_numbers_pass_through():
    assert parse_number(0.09) == 0.09
    assert parse_number(5) == 5.0
    assert parse_number(-12.5) == -12.5


def test_plain_numeric_strings():
    assert parse_number("0.09") == 0.09
    assert parse_number("  42  ") == 42.0
    assert parse_number("-.5") == -0.5
    assert parse_number("+3e2") == 300.0
    assert parse_number("1.") == 1.0


def test_decorations_are_stripped():
    assert parse_number("$1,250.50") == 1250.5
    assert parse_number("12.5%") == 12.5
    assert parse_number("€100") == 100.0
    assert parse_number("£2,000") == 2000.0
    assert parse_number("¥1,000,000") == 1_000_000.0


def test_decorated_and_clean_strings_parse_identically():
    assert parse_number("1234.5") == parse_number("$1,234.5")
    assert parse_number("1234.5") == parse_number("1,234.5%")
    assert parse_number("48.7") == parse_number("$48.7%")


def test_empty_input_rejected():
    assert _error_for("") == "Empty string cannot be parsed as number"
    assert _error_for("   ") == "Empty string cannot be parsed as number"


def test_malformed_input_rejected():
    assert _error_for("abc") == "Cannot parse 'abc' as a number"
    assert _error_for("1_000") == "Cannot parse '1_000' as a number"
    assert _error_for("$ 100") == "Cannot parse '$ 100' as a number"
    assert _error_for("$") == "Cannot parse '$' as a number"


def test_non_finite_values_rejected():
    assert _error_for("1e400") == "Invalid number: '1e400'"
    assert _error_for("inf") == "Invalid number: 'inf'"
    assert _error_for("NaN") == "Invalid number: 'NaN'"
    assert _error_for(float("inf")) == "Invalid number: 'inf'"
    assert _error_for(float("nan")) == "Invalid number: 'nan'"
    assert _error_for(10**400).startswith("Invalid number: '")


def test_non_numeric_types_rejected():
    assert _error_for(True) == "Cannot parse 'True' as a number"
    assert _error_for(None) == "Cannot parse 'None' as a number"


def test_security_checks_run_before_parsing():
    assert _error_for("1" * 101) == "Invalid number: input too long (max 100 characters)"
    assert _error_for("1\x00") == "Invalid number: input contains null bytes"
    assert _error_for("1\x01\x02\x03") == "Invalid number: input contains too many control characters"


def test_two_control_characters_are_tolerated_but_unparseable():
    assert _error_for("1\x01\x02") == "Cannot parse '1??' as a number"


def test_length_limit_applies_after_trimming():
    assert parse_number("   " + "1" * 100 + "   ") == float("1" * 100)


def test_sanitize_replaces_quotes_and_markup():
    assert sanitize_for_error_message("a\"b'c`d\\e<f>g") == "a?b?c?d?e?f?g"


def test_sanitize_flattens_whitespace_controls():
    assert sanitize_for_error_message("a\nb\tc\rd") == "a b c d"


def test_sanitize_truncates_long_input():
    echoed = sanitize_for_error_message("x" * 60)
    assert echoed == "x" * 47 + "..."
    assert sanitize_for_error_message("y" * 50) == "y" * 50


def test_sanitize_never_echoes_unsafe_characters():
    hostile = "".join(chr(c) for c in range(0, 256)) + "‮ €"
    for start in range(0, len(hostile), 40):
        echoed = sanitize_for_error_message(hostile[start:start + 40])
        for forbidden in "\"'`\\<>":
            assert forbidden not in echoed
        assert all(" " <= c <= "~" for c in echoed)


def test_error_message_echo_is_sanitized():
    message = _error_for("'; DROP <script>")
    assert message == "Cannot parse '?; DROP ?script?' as a number"


def test_parse_field_prefixes_field_name():
    with pytest.raises(InputParseError) as exc_info:
        parse_field("revenue_growth", "abc")
    assert str(exc_info.value) == "Invalid revenue_growth: Cannot parse 'abc' as a number"

    with pytest.raises(InputParseError) as exc_info:
        parse_field("total_revenue", "9" * 120)
    assert str(exc_info.value) == "Invalid total_revenue: Invalid number: input too long (max 100 characters)"

    assert parse_field("revenue_prior", "$48.70") == 48.7


def test_only_ascii_digits_are_numbers():
    assert _error_for("١٢") == "Cannot parse '??' as a number"
    assert _error_for("１２") == "Cannot parse '??' as a number"


def test_trimming_removes_unicode_whitespace_only():
    assert parse_number(" 1.5　") == 1.5
    assert parse_number(" -2\t\n") == -2.0
    # Information separators are control characters, not whitespace
    assert _error_for("1\x1c\x1c\x1c") == "Invalid number: input contains too many control characters"
    assert _error_for("1\x1f") == "Cannot parse '1?' as a number"
