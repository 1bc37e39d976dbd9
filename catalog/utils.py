"""
Utility functions for the catalog PDF generator
"""

import re
from datetime import datetime, timezone
from typing import Any, Optional

_FRACTION_RE = re.compile(r"\.(\d+)(?=[+-]|$)")
_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


def to_float(value: Any, default: float = 0.0) -> float:
    """Read a numeric backend field, treating empty values as the default"""
    if value is None or value == '':
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Not a number: {value!r}")


def format_amount(value: float) -> str:
    """
    Format an amount the es-PY way: '.' groups thousands, ',' separates
    decimals, at most 3 fraction digits.

    >>> format_amount(15000)
    '15.000'
    >>> format_amount(1234.5)
    '1.234,5'
    """
    negative = value < 0
    rounded = round(abs(value), 3)
    whole = int(rounded)
    fraction = f"{rounded - whole:.3f}"[2:].rstrip('0')

    grouped = f"{whole:,}".replace(',', '.')
    text = f"{grouped},{fraction}" if fraction else grouped
    return f"-{text}" if negative else text


def format_price(value: float, prefix: str = "Gs.") -> str:
    """Format an amount with the currency prefix"""
    return f"{prefix} {format_amount(value)}"


def format_number(value: float) -> str:
    """Render a discount value without a trailing '.0' for whole numbers"""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def slugify_title(title: str, extension: str = ".pdf") -> str:
    """Build the output file name: whitespace runs collapse to underscores"""
    return re.sub(r'\s+', '_', title) + extension


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a backend timestamp into an aware datetime.

    Accepts datetime objects and ISO-8601 strings (with 'Z' or an offset).
    Naive values are taken as UTC.
    """
    if value is None or value == '':
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        # fromisoformat before 3.11 takes only 3 or 6 fraction digits
        text = _FRACTION_RE.sub(lambda m: '.' + m.group(1)[:6].ljust(6, '0'), text, count=1)
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_bool(value: Any, default: bool = False) -> bool:
    """Read a flag that may arrive as a JSON boolean, a number or a string"""
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError(f"Not a boolean: {value!r}")
    return bool(value)
