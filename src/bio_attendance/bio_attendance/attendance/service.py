from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_MERGE_MAX_RETRIES
from ..core.enums import AttendanceStatus
from ..core.exceptions import MergeConflictError
from ..employees.repository import EmployeeRepository
from ..schedules.model import ShiftAssignment
from ..schedules.repository import ScheduleRepository
from ..shifts.model import Classification
from ..shifts.patterns import scheduled_bounds
from .factory import StatusStrategyFactory
from .merge import append_note, merge_slot
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .strategies.base import StatusDecision

logger = logging.getLogger(__name__)

NON_WORK_DAY_NOTE = "non-work-day scan"


@dataclass(frozen=True)
class MergeResult:
    record: AttendanceRecord
    filled: bool
    duplicate: bool


class ReconciliationService:
    """Merge classified scans into per-day records and keep their status current."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        employees: EmployeeRepository | None = None,
        *,
        strategy_factory: StatusStrategyFactory | None = None,
        max_retries: int = DEFAULT_MERGE_MAX_RETRIES,
    ):
        self._attendance = attendance
        self._schedules = schedules
        self._employees = employees
        self._factory = strategy_factory or StatusStrategyFactory()
        self._max_retries = max(1, int(max_retries))

    def record_for(self, employee_id: int, shift_date: date) -> Optional[AttendanceRecord]:
        return self._attendance.get(employee_id, shift_date)

    def merge(
        self,
        classification: Classification,
        assignment: ShiftAssignment,
        *,
        site_id: Optional[int] = None,
        as_of: Optional[datetime] = None,
    ) -> MergeResult:
        employee_id = classification.employee_id
        shift_date = classification.shift_date

        for _ in range(self._max_retries):
            stored = self._attendance.get_or_create(employee_id, shift_date)
            outcome = merge_slot(stored, classification.slot, classification.timestamp, site_id)

            if outcome.filled and not self._attendance.fill_slot(
                stored.attendance_id, classification.slot, classification.timestamp, site_id
            ):
                # Another upload filled the slot between read and write.
                logger.info(
                    "slot %s of record %s filled concurrently, re-merging",
                    classification.slot.value,
                    stored.attendance_id,
                )
                continue
            break
        else:
            raise MergeConflictError(
                f"record ({employee_id}, {shift_date}) kept changing after {self._max_retries} attempts"
            )

        merged = outcome.record
        notes = merged.notes
        if classification.non_work_day:
            notes = append_note(notes, NON_WORK_DAY_NOTE)
        if (notes or None) != (stored.notes or None):
            self._attendance.update_notes(stored.attendance_id, notes)
            merged = replace(merged, notes=notes)

        if outcome.duplicate:
            logger.info(
                "duplicate %s scan %s for employee %s on %s kept existing value",
                classification.slot.value,
                classification.timestamp,
                employee_id,
                shift_date,
            )

        merged = self.recompute(merged, assignment, as_of=as_of)
        return MergeResult(record=merged, filled=outcome.filled, duplicate=outcome.duplicate)

    def decide(
        self, record: AttendanceRecord, assignment: ShiftAssignment, *, as_of: Optional[datetime] = None
    ) -> StatusDecision:
        if record.status == AttendanceStatus.ADVISED_ABSENCE and record.time_in is None and record.time_out is None:
            return StatusDecision(status=AttendanceStatus.ADVISED_ABSENCE)

        strategy = self._factory.for_assignment(assignment)
        return strategy.decide(
            record=record,
            bounds=scheduled_bounds(assignment, record.shift_date),
            grace_minutes=assignment.grace_period_minutes,
            as_of=as_of,
        )

    def recompute(
        self, record: AttendanceRecord, assignment: ShiftAssignment, *, as_of: Optional[datetime] = None
    ) -> AttendanceRecord:
        decision = self.decide(record, assignment, as_of=as_of)
        updated = replace(
            record,
            status=decision.status,
            secondary_status=decision.secondary_status,
            tardy_minutes=decision.tardy_minutes,
            undertime_minutes=decision.undertime_minutes,
            overtime_minutes=decision.overtime_minutes,
        )
        if updated != record:
            self._attendance.update_status(record.attendance_id, decision)
        return updated

    def recompute_for(self, record: AttendanceRecord) -> AttendanceRecord:
        assignment = self._schedules.get_active_for_employee(record.employee_id)
        if assignment is None:
            return record
        return self.recompute(record, assignment)

    def mark_absences(self, shift_date: date) -> int:
        """Create ncns records for scheduled employees with no record on shift_date."""
        active_ids = None
        if self._employees is not None:
            active_ids = {e.employee_id for e in self._employees.list_active()}

        existing = self._attendance.employee_ids_for_date(shift_date)
        created = 0
        for assignment in self._schedules.list_active():
            if assignment.employee_id in existing:
                continue
            if active_ids is not None and assignment.employee_id not in active_ids:
                continue
            if not assignment.covers(shift_date) or not assignment.works_on(shift_date):
                continue
            if self._attendance.create_absence(assignment.employee_id, shift_date):
                created += 1

        logger.info("absence detection for %s created %d ncns record(s)", shift_date, created)
        return created
