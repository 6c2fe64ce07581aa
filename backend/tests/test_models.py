from __future__ import annotations

import pytest

from monthsheet.models import (
    Entry,
    MonthContext,
    count_slot_entries,
    has_free_slot,
    insert_entry,
    remove_entry,
    replace_entry,
    sort_entries,
)
from monthsheet.times import ParseError, Time


def _entry(day: int, start: str, end: str, activity: str = "Work") -> Entry:
    return Entry.from_text(activity, day, start, end, "")


def test_from_text_parses_fields(sample_entry: Entry) -> None:
    assert sample_entry.activity == "Tutorial"
    assert sample_entry.start == Time(9, 0)
    assert sample_entry.end == Time(17, 30)
    assert sample_entry.break_time == Time(1, 0)
    assert sample_entry.worked_time() == Time(7, 30)


def test_from_text_blank_break_is_zero() -> None:
    entry = Entry.from_text("  Lab  ", 2, "8", "12:3", "")
    assert entry.activity == "Lab"
    assert entry.break_time == Time(0, 0)
    assert entry.end == Time(12, 30)


def test_from_text_rejects_unreadable_time() -> None:
    with pytest.raises(ParseError):
        Entry.from_text("Lab", 2, "8", "noon", "")


def test_worked_time_missing_and_negative() -> None:
    assert Entry(activity="Lab", day=1, start=Time(9, 0)).worked_time() is None
    entry = Entry(activity="Lab", day=1, start=Time(9, 0), end=Time(9, 30), break_time=Time(1, 0))
    assert entry.worked_time() == Time.from_minutes(-30)


def test_blank_predicates() -> None:
    assert Entry().is_blank()
    assert Entry(activity="Lab").is_empty()
    assert not Entry(activity="Lab").is_blank()
    assert Entry(start=Time(8, 0)).is_none()


def test_is_later_than_orders_by_day_start_end() -> None:
    a = _entry(3, "09:00", "10:00")
    assert _entry(4, "08:00", "09:00").is_later_than(a)
    assert _entry(3, "09:30", "10:00").is_later_than(a)
    assert _entry(3, "09:00", "11:00").is_later_than(a)
    assert not _entry(2, "18:00", "19:00").is_later_than(a)
    assert not _entry(3, "09:00", "10:00", "Other").is_later_than(a)


def test_insert_entry_keeps_order_and_stability() -> None:
    first = _entry(3, "09:00", "10:00", "first")
    second = _entry(3, "09:00", "10:00", "second")
    early = _entry(1, "09:00", "10:00")
    late = _entry(9, "09:00", "10:00")

    entries = insert_entry((), late)
    entries = insert_entry(entries, first)
    entries = insert_entry(entries, early)
    entries = insert_entry(entries, second)

    assert entries == (early, first, second, late)


def test_sort_entries() -> None:
    entries = [_entry(5, "10:00", "11:00"), _entry(1, "10:00", "11:00"), _entry(5, "08:00", "09:00")]
    ordered = sort_entries(entries)
    assert [(e.day, e.start) for e in ordered] == [(1, Time(10, 0)), (5, Time(8, 0)), (5, Time(10, 0))]


def test_remove_and_replace_entry() -> None:
    a = _entry(1, "09:00", "10:00")
    b = _entry(2, "09:00", "10:00")
    entries = (a, b)

    assert remove_entry(entries, a) == (b,)
    with pytest.raises(ValueError):
        remove_entry(entries, _entry(7, "09:00", "10:00"))

    moved = _entry(5, "09:00", "10:00")
    assert replace_entry(entries, a, moved) == (b, moved)


def test_summary_format(sample_entry: Entry) -> None:
    assert sample_entry.summary() == "Tutorial, 03. 09:00 - 17:30, Break: 01:00, Vacation: no"


def test_free_slots_ignore_vacation() -> None:
    entries = [_entry(1, "09:00", "10:00"), Entry(activity="Holiday", day=2, is_vacation=True)]
    assert count_slot_entries(entries) == 1
    assert has_free_slot(entries, 2)
    assert not has_free_slot(entries, 1)


def test_month_context_edits(sample_month: MonthContext) -> None:
    assert [e.day for e in sample_month.entries] == [3, 4, 4]
    extra = _entry(2, "09:00", "10:00")
    grown = sample_month.with_entry(extra)
    assert grown.entries[0] is extra
    assert grown.without_entry(extra).entries == sample_month.entries
    assert len(sample_month.entries) == 3


def test_month_context_rejects_bad_month() -> None:
    with pytest.raises(ValueError):
        MonthContext(year=2024, month=13, contractual_working_time=Time(40, 0))


SAMPLE_ENTRIES = [
    Entry(activity="Lab"),
    Entry(activity="Lab", day=1),
    _entry(1, "09:00", "10:00"),
    _entry(1, "09:00", "10:00", "Other"),
    _entry(1, "09:00", "11:00"),
    _entry(1, "10:00", "10:30"),
    _entry(2, "08:00", "09:00"),
    Entry(activity="Lab", day=2, start=Time(8, 0)),
    _entry(31, "00:00", "23:59"),
]


def _same_keys(a: Entry, b: Entry) -> bool:
    return (a.day, a.start, a.end) == (b.day, b.start, b.end)


@pytest.mark.parametrize("a", SAMPLE_ENTRIES)
@pytest.mark.parametrize("b", SAMPLE_ENTRIES)
def test_is_later_than_is_a_strict_order(a: Entry, b: Entry) -> None:
    outcomes = [a.is_later_than(b), b.is_later_than(a), _same_keys(a, b)]
    assert outcomes.count(True) == 1
    assert not a.is_later_than(a)


@pytest.mark.parametrize("a", SAMPLE_ENTRIES)
@pytest.mark.parametrize("b", SAMPLE_ENTRIES)
@pytest.mark.parametrize("c", SAMPLE_ENTRIES)
def test_is_later_than_is_transitive(a: Entry, b: Entry, c: Entry) -> None:
    if a.is_later_than(b) and b.is_later_than(c):
        assert a.is_later_than(c)
