"""Flexible numeric input parsing.

Tool arguments documented as "flexible numeric" arrive either as JSON numbers
or as strings such as ``"$1,250.50"`` or ``"12.5%"``. Everything is reduced to
a finite float here before any calculation runs. Error messages echo the
offending input, sanitized so it cannot inject quotes or control characters
into downstream logs.
"""

from __future__ import annotations

import math
import re
import unicodedata

from .errors import InputParseError
from .models import FlexibleNumber

MAX_INPUT_LENGTH = 100
MAX_CONTROL_CHARS = 2
ECHO_LIMIT = 50
ECHO_TRUNCATE_AT = 47

# Stripped in this order, every occurrence
DECORATIONS = (",", "$", "€", "£", "¥", "%")

_UNSAFE_ECHO_CHARS = frozenset("\"'`\\<>")

_NUMBER_PATTERN = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?(?:inf|infinity|nan)",
    re.IGNORECASE | re.ASCII,
)

# Unicode White_Space; str.strip() would also remove the \x1c-\x1f separators
WHITESPACE = (
    "\t\n\x0b\x0c\r \x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)


def sanitize_for_error_message(text: str) -> str:
    """Make user input safe to echo inside an error message."""
    if len(text) > ECHO_LIMIT:
        text = text[:ECHO_TRUNCATE_AT] + "..."

    chars = []
    for c in text:
        if c in "\n\r\t":
            chars.append(" ")
        elif c in _UNSAFE_ECHO_CHARS:
            chars.append("?")
        elif " " <= c <= "~":
            chars.append(c)
        else:
            chars.append("?")
    return "".join(chars)


def _is_control(c: str) -> bool:
    return unicodedata.category(c) == "Cc"


def validate_input_security(text: str, field_name: str = "number") -> None:
    """Reject oversized or control-character-laden input before parsing."""
    if len(text) > MAX_INPUT_LENGTH:
        raise InputParseError(f"Invalid {field_name}: input too long (max {MAX_INPUT_LENGTH} characters)")

    if "\0" in text:
        raise InputParseError(f"Invalid {field_name}: input contains null bytes")

    if sum(1 for c in text if _is_control(c)) > MAX_CONTROL_CHARS:
        raise InputParseError(f"Invalid {field_name}: input contains too many control characters")


def parse_number_string(text: str) -> float:
    """Parse a decorated numeric string like ``"$1,200"`` or ``"7.5%"``."""
    trimmed = text.strip(WHITESPACE)
    validate_input_security(trimmed)

    if not trimmed:
        raise InputParseError("Empty string cannot be parsed as number")

    echo = sanitize_for_error_message(trimmed)

    cleaned = trimmed
    for symbol in DECORATIONS:
        cleaned = cleaned.replace(symbol, "")

    if not _NUMBER_PATTERN.fullmatch(cleaned):
        raise InputParseError(f"Cannot parse '{echo}' as a number")

    value = float(cleaned)
    if math.isnan(value) or math.isinf(value):
        raise InputParseError(f"Invalid number: '{echo}'")
    return value


def parse_number(value: FlexibleNumber) -> float:
    """Convert a native number or a numeric string to a finite float.

    Raises:
        InputParseError: if the value is not numeric, is malformed, or is not finite.
    """
    if isinstance(value, str):
        return parse_number_string(value)

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        echo = sanitize_for_error_message(str(value))
        try:
            number = float(value)
        except OverflowError:
            raise InputParseError(f"Invalid number: '{echo}'") from None
        if math.isnan(number) or math.isinf(number):
            raise InputParseError(f"Invalid number: '{echo}'")
        return number

    raise InputParseError(f"Cannot parse '{sanitize_for_error_message(str(value))}' as a number")


def parse_field(field_name: str, value: FlexibleNumber) -> float:
    """Parse one named tool argument, prefixing failures with the field name."""
    try:
        return parse_number(value)
    except InputParseError as exc:
        raise InputParseError(f"Invalid {field_name}: {exc}") from exc
