from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..attendance.service import ReconciliationService
from ..attendance.strategies.base import StatusDecision
from ..common.validators import require_positive_ids
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..ingestion.model import RawScan
from ..ingestion.service import IngestionService, ScanResult
from ..schedules.repository import ScheduleRepository
from .model import VerificationQueue
from .repository import UnresolvedScanRepository

logger = logging.getLogger(__name__)

# Marker for "field not supplied" in point edits (None means clear the value).
KEEP = object()


class VerificationService:
    """Reviewer operations over flagged records and unresolved scans."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        unresolved: UnresolvedScanRepository,
        reconciliation: ReconciliationService,
        schedules: ScheduleRepository,
        ingestion: IngestionService,
        employees: EmployeeRepository,
    ):
        self._attendance = attendance
        self._unresolved = unresolved
        self._reconciliation = reconciliation
        self._schedules = schedules
        self._ingestion = ingestion
        self._employees = employees

    def queue(self, *, start: Optional[date] = None, end: Optional[date] = None) -> VerificationQueue:
        if start and end and end < start:
            raise ValidationError("End date must be on or after start date")
        records = list(self._attendance.list_review(start=start, end=end))
        unresolved = [
            s
            for s in self._unresolved.list_open()
            if (start is None or s.scanned_at.date() >= start) and (end is None or s.scanned_at.date() <= end)
        ]
        return VerificationQueue(records=records, unresolved=unresolved)

    def update_record(
        self,
        attendance_id: int,
        *,
        time_in=KEEP,
        time_out=KEEP,
        status: Optional[AttendanceStatus] = None,
        notes=KEEP,
    ) -> AttendanceRecord:
        """Point edit. Status is re-derived only when a time changed and none was given."""
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError(f"Attendance record {attendance_id} not found")

        new_in = record.time_in if time_in is KEEP else time_in
        new_out = record.time_out if time_out is KEEP else time_out
        new_notes = record.notes if notes is KEEP else notes
        for label, value in (("time_in", new_in), ("time_out", new_out)):
            if value is not None and not isinstance(value, datetime):
                raise ValidationError(f"{label} must be a datetime")
        if new_in and new_out and new_out <= new_in:
            raise ValidationError("time_out must be after time_in")

        edited = replace(record, time_in=new_in, time_out=new_out, notes=new_notes, verified=True)
        times_changed = (new_in, new_out) != (record.time_in, record.time_out)

        decision = None
        if status is not None:
            # Derived secondary status and minutes no longer apply to a reviewer status.
            decision = StatusDecision(status=status)
        elif times_changed:
            assignment = self._schedules.get_active_for_employee(record.employee_id)
            if assignment is not None:
                decision = self._reconciliation.decide(edited, assignment)
        if decision is not None:
            edited = replace(
                edited,
                status=decision.status,
                secondary_status=decision.secondary_status,
                tardy_minutes=decision.tardy_minutes,
                undertime_minutes=decision.undertime_minutes,
                overtime_minutes=decision.overtime_minutes,
            )

        self._attendance.update_manual(
            attendance_id,
            time_in=edited.time_in,
            time_out=edited.time_out,
            status=edited.status,
            notes=edited.notes,
            verified=True,
        )
        if decision is not None:
            self._attendance.update_status(attendance_id, decision)
        logger.info("record %s edited by reviewer (times changed: %s)", attendance_id, times_changed)
        return edited

    def mark_advised(self, attendance_ids: Iterable[int]) -> int:
        ids = require_positive_ids(attendance_ids, "attendance_ids")
        return self._attendance.mark_advised(ids)

    def delete_records(self, attendance_ids: Iterable[int]) -> int:
        ids = require_positive_ids(attendance_ids, "attendance_ids")
        removed = self._attendance.delete_many(ids)
        logger.info("deleted %d attendance record(s)", removed)
        return removed

    def resolve_scan(self, unresolved_id: int, employee_id: int) -> ScanResult:
        """Attribute an unresolved scan to an employee and reconcile it like a normal scan."""
        pending = self._unresolved.get(unresolved_id)
        if not pending:
            raise NotFoundError(f"Unresolved scan {unresolved_id} not found")
        if pending.resolved:
            raise ValidationError("Scan is already resolved")
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError(f"Employee {employee_id} not found")

        scan = RawScan(
            device_id=pending.device_id or "",
            raw_name=pending.raw_name,
            mode=pending.mode,
            timestamp=pending.scanned_at,
        )
        result = self._ingestion.reconcile_scan(
            employee_id, scan, site_id=pending.site_id, upload_id=pending.upload_id
        )
        if result.review_reason is None:
            self._unresolved.mark_resolved(unresolved_id, employee_id)
        return result
