from __future__ import annotations

from typing import List, Optional

from typing_extensions import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .checker import CheckerError, ValidationResult
from .config import Limits
from .models import Entry, MonthContext, sort_entries
from .services import Reconciliation
from .times import ZERO, ParseError, Time, TimeRole, format_time, parse_lenient


MONTH_SCHEMA_URL = "https://raw.githubusercontent.com/kit-sdq/TimeSheetGenerator/master/examples/schemas/month.json"


def _read_transfer(value: Optional[str]) -> Time:
    if value is None or not value.strip():
        return ZERO
    return Time.parse(value, TimeRole.DURATION)


class EntryRecord(BaseModel):
    """One entry as stored in a month record."""

    action: str = ""
    day: Optional[int] = None
    start: str = ""
    end: str = ""
    pause: str = ""
    vacation: bool = False

    def to_entry(self) -> Entry:
        return Entry(
            activity=self.action,
            day=self.day,
            start=parse_lenient(self.start, TimeRole.CLOCK),
            end=parse_lenient(self.end, TimeRole.CLOCK),
            break_time=parse_lenient(self.pause, TimeRole.BREAK),
            is_vacation=self.vacation,
        )

    @classmethod
    def from_entry(cls, entry: Entry) -> "EntryRecord":
        return cls(
            action=entry.activity,
            day=entry.day,
            start=format_time(entry.start),
            end=format_time(entry.end),
            pause=format_time(entry.break_time),
            vacation=entry.is_vacation,
        )


class MonthRecord(BaseModel):
    """Persisted per-month record as written by the timesheet editor."""

    model_config = ConfigDict(populate_by_name=True)

    schema_url: str = Field(default=MONTH_SCHEMA_URL, alias="$schema")
    year: int
    month: int = Field(ge=1, le=12)
    pred_transfer: str = "00:00"
    succ_transfer: str = "00:00"
    entries: List[EntryRecord] = Field(default_factory=list)

    @field_validator("pred_transfer", "succ_transfer")
    @classmethod
    def _validate_transfer(cls, value: Optional[str]) -> str:
        try:
            return _read_transfer(value).to_string()
        except ParseError as exc:
            raise ValueError(str(exc)) from exc

    def to_context(self, limits: Limits) -> MonthContext:
        return MonthContext(
            year=self.year,
            month=self.month,
            contractual_working_time=limits.contractual_working_time,
            predecessor_transfer=_read_transfer(self.pred_transfer),
            entries=sort_entries(record.to_entry() for record in self.entries),
            max_entry_slots=limits.max_entry_slots,
            vacation_nominal_time=limits.vacation_nominal_time,
        )

    @classmethod
    def from_context(
        cls,
        month: MonthContext,
        reconciliation: Optional[Reconciliation] = None,
    ) -> "MonthRecord":
        succ = reconciliation.successor_transfer if reconciliation else ZERO
        return cls(
            year=month.year,
            month=month.month,
            pred_transfer=month.predecessor_transfer.to_string(),
            succ_transfer=succ.to_string(),
            entries=[EntryRecord.from_entry(entry) for entry in month.entries],
        )


class CheckerErrorResponse(BaseModel):
    kind: str
    message: str
    field: Optional[str] = None
    entry: Optional[EntryRecord] = None

    @classmethod
    def from_error(cls, error: CheckerError) -> "CheckerErrorResponse":
        return cls(
            kind=error.kind.value,
            message=error.message,
            field=error.field,
            entry=EntryRecord.from_entry(error.entry) if error.entry is not None else None,
        )


def _errors_payload(result: ValidationResult) -> List[CheckerErrorResponse]:
    return [CheckerErrorResponse.from_error(error) for error in result.errors]


class TimeParseRequest(BaseModel):
    text: str
    role: Literal["clock", "break", "duration"] = "clock"


class TimeParseResponse(BaseModel):
    value: str
    total_minutes: int


class EntryCheckRequest(EntryRecord):
    year: Optional[int] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)


class EntryCheckResponse(BaseModel):
    verdict: str
    errors: List[CheckerErrorResponse]
    worked_time: str
    summary: str

    @classmethod
    def build(cls, entry: Entry, result: ValidationResult) -> "EntryCheckResponse":
        return cls(
            verdict=result.verdict.value,
            errors=_errors_payload(result),
            worked_time=format_time(entry.worked_time()),
            summary=entry.summary(),
        )


class EntryInsertRequest(BaseModel):
    entries: List[EntryRecord] = Field(default_factory=list)
    entry: EntryRecord
    max_entry_slots: Optional[int] = Field(default=None, ge=0)


class EntryInsertResponse(BaseModel):
    entries: List[EntryRecord]
    position: int
    has_free_slot: bool


class MonthCheckResponse(BaseModel):
    verdict: str
    errors: List[CheckerErrorResponse]
    total_worked: str
    total_vacation: str
    hours_sum: str
    contractual_working_time: str
    has_worked_hours_mismatch: bool
    warning: Optional[str] = None


class ReconcileResponse(BaseModel):
    total_worked: str
    total_vacation: str
    hours_sum: str
    pred_transfer: str
    succ_transfer: str
    contractual_working_time: str
    has_worked_hours_mismatch: bool
    warning: Optional[str] = None
    record: MonthRecord

    @classmethod
    def build(
        cls,
        month: MonthContext,
        reconciliation: Reconciliation,
        warning: Optional[str] = None,
    ) -> "ReconcileResponse":
        return cls(
            total_worked=reconciliation.total_worked.to_string(),
            total_vacation=reconciliation.total_vacation.to_string(),
            hours_sum=reconciliation.hours_sum.to_string(),
            pred_transfer=reconciliation.predecessor_transfer.to_string(),
            succ_transfer=reconciliation.successor_transfer.to_string(),
            contractual_working_time=reconciliation.contractual_working_time.to_string(),
            has_worked_hours_mismatch=reconciliation.has_worked_hours_mismatch,
            warning=warning,
            record=MonthRecord.from_context(month, reconciliation),
        )


class SettingsResponse(BaseModel):
    environment: str
    contractual_working_time: str
    max_entry_slots: int
    vacation_nominal_time: str
    warn_on_hours_mismatch: bool
