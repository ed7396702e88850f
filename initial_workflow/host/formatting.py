"""Small conversions shared by log output and host calls."""
from __future__ import annotations

import textwrap
from typing import Any, Optional

import numpy as np


NAN_MARKER = "0/0"
ROUND_DIGITS = 4

# NaN passed as value tells the host to only read the current state.
READ_SENTINEL = float(np.nan)


def quote(text: Any) -> str:
    return f'"{text}"'


def is_missing(value: Any) -> bool:
    """Return ``True`` for ``None`` and NaN values."""

    if value is None:
        return True
    try:
        return bool(np.isnan(value))
    except TypeError:
        return False


def number_to_string(
    value: Any,
    none_replacement: Optional[str] = None,
    nan_replacement: Optional[str] = None,
) -> str:
    """Format ``value`` the way the host logs action parameters.

    Numbers use four decimals with a dot separator, missing values are
    rendered as ``0/0`` unless a replacement is given.
    """

    if value is None:
        return none_replacement or NAN_MARKER
    if is_missing(value):
        return nan_replacement or NAN_MARKER
    return f"{float(value):.{ROUND_DIGITS}f}"


def round_value(value: Any, digits: int = ROUND_DIGITS) -> float:
    """Round half up to ``digits`` decimals; missing values stay NaN."""

    if is_missing(value):
        return float(np.nan)
    factor = 10.0 ** digits
    return float(np.floor(float(value) * factor + 0.5) / factor)


def value_to_bool(value: Any) -> bool:
    """Interpret a host read result as a boolean state."""

    if is_missing(value):
        return False
    return value != 0


def wordwrap(text: str, limit: int = 50) -> str:
    """Wrap tooltip text at ``limit`` characters."""

    return "\n".join(textwrap.wrap(text, width=limit)) if text else text


__all__ = [
    "NAN_MARKER",
    "READ_SENTINEL",
    "ROUND_DIGITS",
    "is_missing",
    "number_to_string",
    "quote",
    "round_value",
    "value_to_bool",
    "wordwrap",
]
