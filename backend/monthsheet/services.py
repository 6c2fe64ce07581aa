from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from loguru import logger

from .checker import ValidationResult, Verdict
from .models import Entry, MonthContext
from .times import ZERO, Time, sum_times


class ReconciliationError(RuntimeError):
    """Raised when a month that failed validation is reconciled."""

    def __init__(self, month: MonthContext, validation: ValidationResult):
        super().__init__(
            f"Cannot reconcile {month.year}-{month.month:02d}: "
            f"sheet is invalid ({len(validation.errors)} errors)"
        )
        self.month = month
        self.validation = validation


@dataclass(frozen=True, slots=True)
class Reconciliation:
    total_worked: Time
    total_vacation: Time
    predecessor_transfer: Time
    successor_transfer: Time
    contractual_working_time: Time
    has_worked_hours_mismatch: bool

    @property
    def hours_sum(self) -> Time:
        """Worked plus vacation time, the sum printed on the sheet."""
        return self.total_worked.add(self.total_vacation)


def total_worked_time(entries: Iterable[Entry]) -> Time:
    worked = []
    for entry in entries:
        if entry.is_vacation:
            continue
        value = entry.worked_time()
        if value is not None:
            worked.append(value)
    return sum_times(worked)


def vacation_time(entry: Entry, nominal: Time = ZERO) -> Time:
    """Duration credited for a vacation entry.

    Vacation rows without a start/end get the nominal value.
    """
    value = entry.worked_time()
    if value is None:
        return nominal
    return value


def total_vacation_time(entries: Iterable[Entry], nominal: Time = ZERO) -> Time:
    return sum_times(vacation_time(entry, nominal) for entry in entries if entry.is_vacation)


def successor_transfer(predecessor: Time, total_worked: Time, contractual_working_time: Time) -> Time:
    return predecessor.add(total_worked.subtract(contractual_working_time))


def has_worked_hours_mismatch(contractual_working_time: Time, total_worked: Time) -> bool:
    return not contractual_working_time.same_length_as(total_worked)


def reconcile(month: MonthContext, validation: Optional[ValidationResult]) -> Reconciliation:
    """Compute totals and the transfer carried into the next month.

    Only a month whose validation verdict is ``VALID`` may be reconciled.
    """
    if validation is None or validation.verdict is not Verdict.VALID:
        error = ReconciliationError(month, validation or ValidationResult(Verdict.INVALID))
        logger.error(str(error))
        raise error

    entries = [entry for entry in month.entries if not entry.is_blank()]
    worked = total_worked_time(entries)
    vacation = total_vacation_time(entries, month.vacation_nominal_time)
    succ = successor_transfer(month.predecessor_transfer, worked, month.contractual_working_time)
    mismatch = has_worked_hours_mismatch(month.contractual_working_time, worked)
    logger.info(
        "Reconciled {}-{:02d}: worked {}, vacation {}, transfer {} -> {}",
        month.year,
        month.month,
        worked,
        vacation,
        month.predecessor_transfer,
        succ,
    )
    if mismatch:
        logger.warning(
            "Worked time {} does not match contractual working time {}",
            worked,
            month.contractual_working_time,
        )
    return Reconciliation(
        total_worked=worked,
        total_vacation=vacation,
        predecessor_transfer=month.predecessor_transfer,
        successor_transfer=succ,
        contractual_working_time=month.contractual_working_time,
        has_worked_hours_mismatch=mismatch,
    )


__all__ = [
    "Reconciliation",
    "ReconciliationError",
    "has_worked_hours_mismatch",
    "reconcile",
    "successor_transfer",
    "total_vacation_time",
    "total_worked_time",
    "vacation_time",
]
