"""Parsing of reminder intervals such as ``"30m"``, ``"2h"`` or ``"45s"``."""

from __future__ import annotations

__all__ = [
    "IntervalError",
    "InvalidIntervalFormat",
    "InvalidIntervalNumber",
    "InvalidIntervalUnit",
    "parse_interval",
]

UNIT_SECONDS: dict[str, int] = {"s": 1, "m": 60, "h": 3600}


class IntervalError(ValueError):
    """Base class for malformed interval strings."""


class InvalidIntervalFormat(IntervalError):
    """The string is too short to hold a number and a unit."""


class InvalidIntervalNumber(IntervalError):
    """The part before the unit is not a non-negative integer."""


class InvalidIntervalUnit(IntervalError):
    """The trailing unit is not one of ``s``, ``m`` or ``h``."""


def parse_interval(interval: str) -> int:
    """Convert an interval string to whole seconds.

    Args:
        interval: digits followed by a single unit letter (``s``, ``m``, ``h``)

    Returns:
        int: the interval in seconds

    Raises:
        InvalidIntervalFormat: fewer than two characters
        InvalidIntervalNumber: the numeric prefix does not parse
        InvalidIntervalUnit: unknown unit letter

    """
    if len(interval) < 2:
        msg = f"invalid interval format: {interval!r}"
        raise InvalidIntervalFormat(msg)

    value, unit = interval[:-1], interval[-1]
    digits = value[1:] if value.startswith("+") else value
    # str.isdigit() alone accepts superscripts and other non-ASCII digits
    if not (digits.isascii() and digits.isdigit()):
        msg = f"invalid number in interval: {interval!r}"
        raise InvalidIntervalNumber(msg)

    factor = UNIT_SECONDS.get(unit)
    if factor is None:
        msg = f"invalid time unit in interval: {interval!r}"
        raise InvalidIntervalUnit(msg)
    return int(digits) * factor
