"""Utility functions for the mortgage calculator.

This module provides helpers for turning user input into numbers. Form and
JSON input is parsed leniently (anything unusable becomes a fallback value)
while command line amounts are parsed strictly and may use ``k``/``m``
shorthand.
"""

from __future__ import annotations

import math
from typing import Any


def parse_number(value: Any, fallback: float = 0.0) -> float:
    """Convert a form or JSON value into a float.

    Numbers are returned as floats, numeric strings may contain thousands
    separators. ``None``, booleans, empty strings and anything that does not
    produce a finite number yield ``fallback``.
    """
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            return fallback
        try:
            number = float(cleaned)
        except ValueError:
            return fallback
    else:
        return fallback
    return number if math.isfinite(number) else fallback


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain floats ("300000") and shorthand with ``k``/``m`` suffixes
    (e.g. "300k" meaning 300_000).

    Raises
    ------
    ValueError
        If the string is not a valid amount.
    """
    cleaned = value.strip().lower().replace(",", "")
    factor = 1.0
    if cleaned.endswith("k"):
        factor = 1_000.0
        cleaned = cleaned[:-1]
    elif cleaned.endswith("m"):
        factor = 1_000_000.0
        cleaned = cleaned[:-1]
    try:
        number = float(cleaned) * factor
    except ValueError as exc:
        raise ValueError(f"Invalid amount: {value}") from exc
    if not math.isfinite(number):
        raise ValueError(f"Invalid amount: {value}")
    return number
