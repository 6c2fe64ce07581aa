from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Tuple

from .times import ZERO, Time, TimeRole, format_time, parse_optional


ENTRY_SUMMARY_FORMAT = "{activity}, {day}. {start} - {end}, Break: {pause}, Vacation: {vacation}"


@dataclass(frozen=True, slots=True)
class Entry:
    """One row of a monthly timesheet."""

    activity: str = ""
    day: Optional[int] = None
    start: Optional[Time] = None
    end: Optional[Time] = None
    break_time: Time = ZERO
    is_vacation: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "activity", (self.activity or "").strip())
        if self.break_time is None:
            object.__setattr__(self, "break_time", ZERO)

    @classmethod
    def from_text(
        cls,
        activity: str,
        day: Optional[int],
        start: str,
        end: str,
        break_time: str,
        is_vacation: bool = False,
    ) -> "Entry":
        """Build an entry from raw editor input.

        Raises :class:`~monthsheet.times.ParseError` for unreadable times. An
        empty break field counts as no break.
        """
        return cls(
            activity=activity,
            day=day,
            start=parse_optional(start, TimeRole.CLOCK),
            end=parse_optional(end, TimeRole.CLOCK),
            break_time=parse_optional(break_time, TimeRole.BREAK),
            is_vacation=is_vacation,
        )

    def is_empty(self) -> bool:
        return self.start is None and self.end is None

    def is_none(self) -> bool:
        return not self.activity

    def is_blank(self) -> bool:
        return self.is_empty() and self.is_none()

    def has_times(self) -> bool:
        return self.start is not None and self.end is not None

    def worked_time(self) -> Optional[Time]:
        """``(end - start) - break``, or ``None`` while start or end is missing.

        Negative results are returned unchanged.
        """
        if not self.has_times():
            return None
        return self.end.subtract(self.start).subtract(self.break_time)

    def is_later_than(self, other: "Entry") -> bool:
        """Day first, then start, then end. Identical keys are not later."""
        return _order_key(self) > _order_key(other)

    def summary(self) -> str:
        return ENTRY_SUMMARY_FORMAT.format(
            activity=self.activity,
            day=f"{self.day:02d}" if self.day is not None else "",
            start=format_time(self.start),
            end=format_time(self.end),
            pause=format_time(self.break_time),
            vacation="yes" if self.is_vacation else "no",
        )


def _time_key(value: Optional[Time]) -> Tuple[int, int, int]:
    if value is None:
        return (0, 0, 0)
    return (1, value.hours, value.minutes)


def _order_key(entry: Entry) -> Tuple:
    day = (0, 0) if entry.day is None else (1, entry.day)
    return (day, _time_key(entry.start), _time_key(entry.end))


def insert_entry(entries: Iterable[Entry], entry: Entry) -> Tuple[Entry, ...]:
    """Insert before the first entry later than ``entry``, else append."""
    current = list(entries)
    for index, existing in enumerate(current):
        if existing.is_later_than(entry):
            current.insert(index, entry)
            return tuple(current)
    current.append(entry)
    return tuple(current)


def remove_entry(entries: Iterable[Entry], entry: Entry) -> Tuple[Entry, ...]:
    current = list(entries)
    for index, existing in enumerate(current):
        if existing is entry:
            del current[index]
            return tuple(current)
    for index, existing in enumerate(current):
        if existing == entry:
            del current[index]
            return tuple(current)
    raise ValueError(f"Entry not found: {entry.summary()}")


def replace_entry(entries: Iterable[Entry], old: Entry, new: Entry) -> Tuple[Entry, ...]:
    return insert_entry(remove_entry(entries, old), new)


def sort_entries(entries: Iterable[Entry]) -> Tuple[Entry, ...]:
    ordered: Tuple[Entry, ...] = ()
    for entry in entries:
        ordered = insert_entry(ordered, entry)
    return ordered


def count_slot_entries(entries: Iterable[Entry]) -> int:
    """Number of entries that occupy a row on the printed sheet."""
    return sum(1 for entry in entries if not entry.is_vacation)


def has_free_slot(entries: Iterable[Entry], max_entry_slots: int) -> bool:
    return count_slot_entries(entries) < max_entry_slots


@dataclass(frozen=True, slots=True)
class MonthContext:
    """A month's entries together with the figures needed to check it."""

    year: int
    month: int
    contractual_working_time: Time
    predecessor_transfer: Time = ZERO
    entries: Tuple[Entry, ...] = field(default_factory=tuple)
    max_entry_slots: int = 22
    vacation_nominal_time: Time = ZERO

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {self.month}")
        object.__setattr__(self, "entries", tuple(self.entries))

    def with_entry(self, entry: Entry) -> "MonthContext":
        return replace(self, entries=insert_entry(self.entries, entry))

    def without_entry(self, entry: Entry) -> "MonthContext":
        return replace(self, entries=remove_entry(self.entries, entry))

    def with_replaced_entry(self, old: Entry, new: Entry) -> "MonthContext":
        return replace(self, entries=replace_entry(self.entries, old, new))


__all__ = [
    "Entry",
    "MonthContext",
    "count_slot_entries",
    "has_free_slot",
    "insert_entry",
    "remove_entry",
    "replace_entry",
    "sort_entries",
]
