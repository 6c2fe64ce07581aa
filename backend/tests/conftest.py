from __future__ import annotations

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from monthsheet.config import Limits
from monthsheet.main import app, get_limits
from monthsheet.models import Entry, MonthContext
from monthsheet.times import Time


@pytest.fixture()
def limits() -> Limits:
    return Limits(contractual_working_time=Time(40, 0), max_entry_slots=22, vacation_nominal_time=Time(0, 0))


@pytest.fixture(scope="function")
def client(limits: Limits) -> Generator[TestClient, None, None]:
    def override_get_limits() -> Limits:
        return limits

    app.dependency_overrides[get_limits] = override_get_limits
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def sample_entry() -> Entry:
    return Entry.from_text("Tutorial", 3, "09:00", "17:30", "01:00")


@pytest.fixture()
def sample_month(limits: Limits) -> MonthContext:
    entries = [
        Entry.from_text("Tutorial", 3, "09:00", "17:30", "01:00"),
        Entry.from_text("Grading", 4, "10:00", "13:00", ""),
        Entry.from_text("Office hours", 4, "14:00", "15:45", "00:15"),
    ]
    month = MonthContext(
        year=2024,
        month=1,
        contractual_working_time=limits.contractual_working_time,
        max_entry_slots=limits.max_entry_slots,
    )
    for entry in entries:
        month = month.with_entry(entry)
    return month
