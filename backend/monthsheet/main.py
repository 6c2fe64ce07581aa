from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .checker import check, check_entry
from .config import Limits, settings
from .logging_setup import setup_logging
from .middleware import RequestLogMiddleware
from .models import has_free_slot, insert_entry, sort_entries
from .schemas import (
    CheckerErrorResponse,
    EntryCheckRequest,
    EntryCheckResponse,
    EntryInsertRequest,
    EntryInsertResponse,
    EntryRecord,
    MonthCheckResponse,
    MonthRecord,
    ReconcileResponse,
    SettingsResponse,
    TimeParseRequest,
    TimeParseResponse,
)
from .services import (
    ReconciliationError,
    has_worked_hours_mismatch,
    reconcile,
    total_vacation_time,
    total_worked_time,
)
from .times import ParseError, Time, TimeRole


setup_logging(settings)

app = FastAPI(title=settings.app_name)
app.state.limits = settings.limits()
app.add_middleware(RequestLogMiddleware)
if settings.allowed_origins():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )


def get_limits(request: Request) -> Limits:
    return request.app.state.limits


def _mismatch_warning(limits: Limits, contractual: Time, worked: Time) -> str | None:
    if not limits.warn_on_hours_mismatch:
        return None
    if not has_worked_hours_mismatch(contractual, worked):
        return None
    return f"Worked time {worked} does not match the contractual working time {contractual}"


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/settings", response_model=SettingsResponse)
def get_settings(limits: Limits = Depends(get_limits)) -> SettingsResponse:
    return SettingsResponse(
        environment=settings.environment,
        contractual_working_time=limits.contractual_working_time.to_string(),
        max_entry_slots=limits.max_entry_slots,
        vacation_nominal_time=limits.vacation_nominal_time.to_string(),
        warn_on_hours_mismatch=limits.warn_on_hours_mismatch,
    )


@app.post("/time/parse", response_model=TimeParseResponse)
def parse_time(payload: TimeParseRequest) -> TimeParseResponse:
    try:
        value = Time.parse(payload.text, TimeRole(payload.role))
    except ParseError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return TimeParseResponse(value=value.to_string(), total_minutes=value.total_minutes)


@app.post("/entries/check", response_model=EntryCheckResponse)
def entry_check(payload: EntryCheckRequest) -> EntryCheckResponse:
    entry = payload.to_entry()
    result = check_entry(entry, payload.year, payload.month)
    return EntryCheckResponse.build(entry, result)


@app.post("/entries/insert", response_model=EntryInsertResponse)
def entry_insert(payload: EntryInsertRequest, limits: Limits = Depends(get_limits)) -> EntryInsertResponse:
    max_slots = payload.max_entry_slots if payload.max_entry_slots is not None else limits.max_entry_slots
    existing = sort_entries(record.to_entry() for record in payload.entries)
    new_entry = payload.entry.to_entry()
    if not new_entry.is_vacation and not has_free_slot(existing, max_slots):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"No free slot left (at most {max_slots} entries)",
        )
    ordered = insert_entry(existing, new_entry)
    position = next(index for index, entry in enumerate(ordered) if entry is new_entry)
    return EntryInsertResponse(
        entries=[EntryRecord.from_entry(entry) for entry in ordered],
        position=position,
        has_free_slot=has_free_slot(ordered, max_slots),
    )


@app.post("/months/check", response_model=MonthCheckResponse)
def month_check(payload: MonthRecord, limits: Limits = Depends(get_limits)) -> MonthCheckResponse:
    month = payload.to_context(limits)
    result = check(month)
    worked = total_worked_time(month.entries)
    vacation = total_vacation_time(month.entries, month.vacation_nominal_time)
    return MonthCheckResponse(
        verdict=result.verdict.value,
        errors=[CheckerErrorResponse.from_error(error) for error in result.errors],
        total_worked=worked.to_string(),
        total_vacation=vacation.to_string(),
        hours_sum=worked.add(vacation).to_string(),
        contractual_working_time=month.contractual_working_time.to_string(),
        has_worked_hours_mismatch=has_worked_hours_mismatch(month.contractual_working_time, worked),
        warning=_mismatch_warning(limits, month.contractual_working_time, worked),
    )


@app.post("/months/reconcile", response_model=ReconcileResponse)
def month_reconcile(payload: MonthRecord, limits: Limits = Depends(get_limits)):
    month = payload.to_context(limits)
    result = check(month)
    try:
        reconciliation = reconcile(month, result)
    except ReconciliationError:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "detail": "Month is invalid and cannot be reconciled",
                "errors": [
                    CheckerErrorResponse.from_error(error).model_dump(mode="json") for error in result.errors
                ],
            },
        )
    warning = _mismatch_warning(limits, month.contractual_working_time, reconciliation.total_worked)
    return ReconcileResponse.build(month, reconciliation, warning)
