"""Rule set that decides whether a month's timesheet may be handed in.

Every rule runs against every entry and all violations are collected; the
caller gets the full list in one go. Errors are ordered by rule first and by
entry position second, so identical input always yields an identical result.

Several entries on the same day are allowed on purpose (split shifts), there
is no day uniqueness rule.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from loguru import logger

from .models import Entry, MonthContext, count_slot_entries


LONG_DAY_MINUTES = 480
LONG_DAY_MIN_BREAK_MINUTES = 60
MEDIUM_DAY_MINUTES = 240
MEDIUM_DAY_MIN_BREAK_MINUTES = 30


class ErrorKind(str, Enum):
    TOO_MANY_ENTRIES = "TooManyEntries"
    MISSING_FIELD = "MissingField"
    INVALID_TIME = "InvalidTime"
    INVALID_DAY = "InvalidDay"
    START_AFTER_END = "StartAfterEnd"
    NEGATIVE_DURATION = "NegativeDuration"
    BREAK_TOO_SHORT_FOR_LONG_DAY = "BreakTooShortForLongDay"
    BREAK_TOO_SHORT_FOR_MEDIUM_DAY = "BreakTooShortForMediumDay"


class Verdict(str, Enum):
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True, slots=True)
class CheckerError:
    kind: ErrorKind
    message: str
    entry: Optional[Entry] = None
    field: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ValidationResult:
    verdict: Verdict
    errors: Tuple[CheckerError, ...] = ()

    @property
    def is_valid(self) -> bool:
        return self.verdict is Verdict.VALID

    def kinds(self) -> List[ErrorKind]:
        return [error.kind for error in self.errors]

    @classmethod
    def from_errors(cls, errors: Iterable[CheckerError]) -> "ValidationResult":
        collected = tuple(errors)
        verdict = Verdict.INVALID if collected else Verdict.VALID
        return cls(verdict=verdict, errors=collected)


EntryRule = Callable[[Entry, Optional[int], Optional[int]], List[CheckerError]]


def _check_required_fields(entry: Entry, year: Optional[int], month: Optional[int]) -> List[CheckerError]:
    errors: List[CheckerError] = []
    if entry.is_none():
        errors.append(
            CheckerError(ErrorKind.MISSING_FIELD, "You need to enter an activity!", entry, "activity")
        )
    if entry.is_vacation:
        return errors
    if entry.start is None:
        errors.append(CheckerError(ErrorKind.MISSING_FIELD, "You need to enter a start time!", entry, "start"))
    if entry.end is None:
        errors.append(CheckerError(ErrorKind.MISSING_FIELD, "You need to enter an end time!", entry, "end"))
    return errors


def _check_time_bounds(entry: Entry, year: Optional[int], month: Optional[int]) -> List[CheckerError]:
    errors: List[CheckerError] = []
    if entry.start is not None and not entry.start.is_valid_clock_time():
        errors.append(
            CheckerError(ErrorKind.INVALID_TIME, f"Invalid start time {entry.start.hours}:{entry.start.minutes}", entry, "start")
        )
    if entry.end is not None and not entry.end.is_valid_clock_time():
        errors.append(
            CheckerError(ErrorKind.INVALID_TIME, f"Invalid end time {entry.end.hours}:{entry.end.minutes}", entry, "end")
        )
    if not entry.break_time.is_valid_duration():
        errors.append(
            CheckerError(
                ErrorKind.INVALID_TIME,
                f"Invalid break time {entry.break_time.hours}:{entry.break_time.minutes}",
                entry,
                "break_time",
            )
        )
    if entry.day is not None and not _is_valid_day(entry.day, year, month):
        errors.append(CheckerError(ErrorKind.INVALID_DAY, f"Invalid day {entry.day}", entry, "day"))
    return errors


def _is_valid_day(day: int, year: Optional[int], month: Optional[int]) -> bool:
    if year is None or month is None:
        return 1 <= day <= 31
    return 1 <= day <= calendar.monthrange(year, month)[1]


def _has_valid_clock_times(entry: Entry) -> bool:
    return (
        entry.start is not None
        and entry.end is not None
        and entry.start.is_valid_clock_time()
        and entry.end.is_valid_clock_time()
    )


def _check_ordering(entry: Entry, year: Optional[int], month: Optional[int]) -> List[CheckerError]:
    if not _has_valid_clock_times(entry):
        return []
    if entry.start.is_after(entry.end):
        return [
            CheckerError(
                ErrorKind.START_AFTER_END,
                f"Start time {entry.start} is after end time {entry.end}",
                entry,
                "start",
            )
        ]
    return []


def _usable_worked_minutes(entry: Entry) -> Optional[int]:
    """Worked minutes for entries whose times passed the earlier rules."""
    if not _has_valid_clock_times(entry) or entry.start.is_after(entry.end):
        return None
    if not entry.break_time.is_valid_duration():
        return None
    return entry.worked_time().total_minutes


def _check_duration(entry: Entry, year: Optional[int], month: Optional[int]) -> List[CheckerError]:
    worked = _usable_worked_minutes(entry)
    if worked is None or worked >= 0:
        return []
    return [CheckerError(ErrorKind.NEGATIVE_DURATION, "You actually have to work.", entry, "break_time")]


def _check_break_minimums(entry: Entry, year: Optional[int], month: Optional[int]) -> List[CheckerError]:
    if entry.is_vacation:
        return []
    worked = _usable_worked_minutes(entry)
    if worked is None or worked < 0:
        return []
    break_minutes = entry.break_time.total_minutes
    if worked >= LONG_DAY_MINUTES:
        if break_minutes < LONG_DAY_MIN_BREAK_MINUTES:
            return [
                CheckerError(
                    ErrorKind.BREAK_TOO_SHORT_FOR_LONG_DAY,
                    "Break must be at least 1 hour for work of 8 hours or more",
                    entry,
                    "break_time",
                )
            ]
        return []
    if worked > MEDIUM_DAY_MINUTES and break_minutes < MEDIUM_DAY_MIN_BREAK_MINUTES:
        return [
            CheckerError(
                ErrorKind.BREAK_TOO_SHORT_FOR_MEDIUM_DAY,
                "Break must be at least 30 minutes for work over 4 hours",
                entry,
                "break_time",
            )
        ]
    return []


ENTRY_RULES: Tuple[EntryRule, ...] = (
    _check_required_fields,
    _check_time_bounds,
    _check_ordering,
    _check_duration,
    _check_break_minimums,
)


def _check_slot_cap(month: MonthContext) -> List[CheckerError]:
    used = count_slot_entries(entry for entry in month.entries if not entry.is_blank())
    if used <= month.max_entry_slots:
        return []
    return [
        CheckerError(
            ErrorKind.TOO_MANY_ENTRIES,
            f"{used} entries do not fit on one sheet (at most {month.max_entry_slots})",
        )
    ]


def check(month: MonthContext) -> ValidationResult:
    """Run all rules against ``month`` and collect every violation."""
    entries = [entry for entry in month.entries if not entry.is_blank()]
    errors: List[CheckerError] = _check_slot_cap(month)
    for rule in ENTRY_RULES:
        for entry in entries:
            errors.extend(rule(entry, month.year, month.month))
    result = ValidationResult.from_errors(errors)
    logger.debug(
        "Checked {}-{:02d}: {} entries, verdict {}, {} errors",
        month.year,
        month.month,
        len(entries),
        result.verdict.value,
        len(result.errors),
    )
    return result


def check_entry(entry: Entry, year: Optional[int] = None, month: Optional[int] = None) -> ValidationResult:
    """Entry rules only, for re-validating a single row while it is edited."""
    errors: List[CheckerError] = []
    for rule in ENTRY_RULES:
        errors.extend(rule(entry, year, month))
    return ValidationResult.from_errors(errors)


__all__ = [
    "CheckerError",
    "ENTRY_RULES",
    "ErrorKind",
    "LONG_DAY_MINUTES",
    "LONG_DAY_MIN_BREAK_MINUTES",
    "MEDIUM_DAY_MINUTES",
    "MEDIUM_DAY_MIN_BREAK_MINUTES",
    "ValidationResult",
    "Verdict",
    "check",
    "check_entry",
]
