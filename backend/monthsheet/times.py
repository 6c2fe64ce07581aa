"""Hours/minutes value type used for clock times and signed durations."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


MINUTES_PER_HOUR = 60

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")
_TIME_PATTERN_SMALL = re.compile(r"^(\d{1,2})$")
_TIME_PATTERN_SEMI_SMALL = re.compile(r"^(\d{1,2}):(\d)$")
_DURATION_PATTERN = re.compile(r"^([+-])?(\d+):(\d{2})$")
_RAW_PATTERN = re.compile(r"^(\d+):(\d+)$")


class TimeRole(str, Enum):
    """Which input field a text value comes from."""

    CLOCK = "clock"
    BREAK = "break"
    DURATION = "duration"


class Comparison(str, Enum):
    BEFORE = "before"
    EQUAL = "equal"
    AFTER = "after"


class ParseError(ValueError):
    """Raised when a text value cannot be read as a time."""

    def __init__(self, text: str, role: TimeRole = TimeRole.CLOCK, reason: str = "Invalid time"):
        super().__init__(f"{reason}: {text!r}")
        self.text = text
        self.role = role
        self.reason = reason


@dataclass(frozen=True, order=True, slots=True)
class Time:
    """Immutable hours+minutes value.

    The same type serves as a point in the day (``08:30``) and as a signed
    duration (``41:15``, ``-00:45``). Values produced by arithmetic are always
    normalized: minutes lie in ``0..59`` and any overflow or deficit is folded
    into the hours, so ``-00:45`` is stored as ``Time(-1, 15)``.

    Direct construction does not validate, which lets records with
    out-of-range values reach the checker.
    """

    hours: int = 0
    minutes: int = 0

    @classmethod
    def from_minutes(cls, total: int) -> "Time":
        hours, minutes = divmod(int(total), MINUTES_PER_HOUR)
        return cls(hours, minutes)

    @classmethod
    def parse(cls, text: str, role: TimeRole = TimeRole.CLOCK) -> "Time":
        """Read user input into a Time.

        Clock and break fields accept ``H:MM``, ``HH:MM`` and a bare ``H`` or
        ``HH``. A bare number means hours, except a two digit number typed into
        a break field, which means minutes (``"45"`` is ``00:45``). A single
        minute digit gets a trailing zero (``"7:3"`` is ``07:30``).

        Duration fields accept an optional sign and any number of hour digits
        (``"39:00"``, ``"-00:45"``).
        """
        role = TimeRole(role)
        if text is None:
            raise ParseError("", role, "No time given")
        value = str(text).strip()
        if role is TimeRole.DURATION:
            return cls._parse_duration(value)

        if _TIME_PATTERN_SMALL.match(value):
            if role is TimeRole.BREAK and len(value) > 1:
                value = "00:" + value
            else:
                value += ":00"
        elif _TIME_PATTERN_SEMI_SMALL.match(value):
            value += "0"

        match = _TIME_PATTERN.match(value)
        if not match:
            raise ParseError(text, role)
        parsed = cls(int(match.group(1)), int(match.group(2)))
        if not parsed.is_valid_clock_time():
            raise ParseError(text, role, "Time out of range")
        return parsed

    @classmethod
    def _parse_duration(cls, value: str) -> "Time":
        match = _DURATION_PATTERN.match(value)
        if not match:
            raise ParseError(value, TimeRole.DURATION)
        hours = int(match.group(2))
        minutes = int(match.group(3))
        if minutes >= MINUTES_PER_HOUR:
            raise ParseError(value, TimeRole.DURATION, "Minutes out of range")
        total = hours * MINUTES_PER_HOUR + minutes
        if match.group(1) == "-":
            total = -total
        return cls.from_minutes(total)

    @property
    def total_minutes(self) -> int:
        return self.hours * MINUTES_PER_HOUR + self.minutes

    def is_valid_clock_time(self) -> bool:
        return 0 <= self.hours <= 23 and 0 <= self.minutes < MINUTES_PER_HOUR

    def is_valid_duration(self) -> bool:
        """True for a normalized, non-negative amount of time."""
        return self.hours >= 0 and 0 <= self.minutes < MINUTES_PER_HOUR

    def is_negative(self) -> bool:
        return self.total_minutes < 0

    def add(self, other: "Time") -> "Time":
        return Time.from_minutes(self.total_minutes + other.total_minutes)

    def subtract(self, other: "Time") -> "Time":
        return Time.from_minutes(self.total_minutes - other.total_minutes)

    def __add__(self, other: "Time") -> "Time":
        if not isinstance(other, Time):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: "Time") -> "Time":
        if not isinstance(other, Time):
            return NotImplemented
        return self.subtract(other)

    def __neg__(self) -> "Time":
        return Time.from_minutes(-self.total_minutes)

    def compare(self, other: "Time") -> Comparison:
        if (self.hours, self.minutes) < (other.hours, other.minutes):
            return Comparison.BEFORE
        if (self.hours, self.minutes) > (other.hours, other.minutes):
            return Comparison.AFTER
        return Comparison.EQUAL

    def is_after(self, other: "Time") -> bool:
        return self.compare(other) is Comparison.AFTER

    def same_length_as(self, other: "Time") -> bool:
        return self.total_minutes == other.total_minutes

    def to_string(self) -> str:
        total = self.total_minutes
        sign = "-" if total < 0 else ""
        hours, minutes = divmod(abs(total), MINUTES_PER_HOUR)
        return f"{sign}{hours:02d}:{minutes:02d}"

    def __str__(self) -> str:
        return self.to_string()


ZERO = Time(0, 0)


def parse_optional(text: Optional[str], role: TimeRole = TimeRole.CLOCK) -> Optional[Time]:
    """Parse ``text`` or return ``None`` when nothing was entered."""
    if text is None or not str(text).strip():
        return None
    return Time.parse(text, role)


def parse_lenient(text: Optional[str], role: TimeRole = TimeRole.CLOCK) -> Optional[Time]:
    """Read a stored value without raising.

    ``H:MM`` shaped values outside the valid range are kept as they are so the
    checker can report them; anything unreadable counts as unset.
    """
    try:
        return parse_optional(text, role)
    except ParseError:
        match = _RAW_PATTERN.match(str(text).strip())
        if match is None:
            return None
        return Time(int(match.group(1)), int(match.group(2)))


def format_time(value: Optional[Time]) -> str:
    if value is None:
        return ""
    return value.to_string()


def sum_times(values) -> Time:
    total = ZERO
    for value in values:
        total = total.add(value)
    return total


__all__ = [
    "Comparison",
    "ParseError",
    "Time",
    "TimeRole",
    "ZERO",
    "format_time",
    "parse_lenient",
    "parse_optional",
    "sum_times",
]
