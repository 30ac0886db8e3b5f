from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence

from ..attendance.service import MergeResult, ReconciliationService
from ..audit.model import AuditEntry
from ..audit.service import AuditService
from ..core.constants import FILE_DATE_TOLERANCE_DAYS
from ..core.enums import MatchOutcome, ReviewReason
from ..core.exceptions import IngestionError, MergeConflictError, ValidationError
from ..employees.repository import EmployeeRepository
from ..matching.resolver import NameResolver
from ..matching.strategies.base import NameMatchStrategy
from ..schedules.model import ShiftAssignment
from ..schedules.repository import ScheduleRepository
from ..shifts.classifier import ShiftWindowClassifier
from ..verification.model import UnresolvedScan
from ..verification.repository import UnresolvedScanRepository
from .model import IngestionSummary, RawScan, ReprocessSummary
from .parser import AttendanceFileParser
from .repository import UploadRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    employee_id: Optional[int]
    merge: Optional[MergeResult] = None
    review_reason: Optional[ReviewReason] = None
    non_work_day: bool = False


class IngestionService:
    """Batch entry point: match names, classify, merge, and audit every scan."""

    def __init__(
        self,
        *,
        employees: EmployeeRepository,
        schedules: ScheduleRepository,
        reconciliation: ReconciliationService,
        audit: AuditService,
        unresolved: UnresolvedScanRepository,
        uploads: UploadRepository,
        strategies: Sequence[NameMatchStrategy],
        parser: AttendanceFileParser | None = None,
        filter_by_file_date: bool = True,
    ):
        self._employees = employees
        self._schedules = schedules
        self._reconciliation = reconciliation
        self._audit = audit
        self._unresolved = unresolved
        self._uploads = uploads
        self._parser = parser or AttendanceFileParser()
        self._filter_by_file_date = bool(filter_by_file_date)

        self._assignments: Dict[int, Optional[ShiftAssignment]] = {}
        self._classifier = ShiftWindowClassifier(record_for=reconciliation.record_for)
        self._resolver = NameResolver(strategies, assignment_for=self._assignment_for, classifier=self._classifier)

    def ingest_bytes(
        self,
        data: bytes,
        *,
        file_date: Optional[date],
        site_id: Optional[int] = None,
        file_name: Optional[str] = None,
    ) -> IngestionSummary:
        if file_date is None:
            raise IngestionError("File date is required")
        parsed = self._parser.parse_bytes(data)
        return self.ingest(parsed.scans, file_date=file_date, site_id=site_id, file_name=file_name, warnings=parsed.warnings)

    def ingest_file(self, path, *, file_date: Optional[date], site_id: Optional[int] = None) -> IngestionSummary:
        if file_date is None:
            raise IngestionError("File date is required")
        parsed = self._parser.parse_file(path)
        return self.ingest(
            parsed.scans,
            file_date=file_date,
            site_id=site_id,
            file_name=Path(path).name,
            warnings=parsed.warnings,
        )

    def ingest(
        self,
        scans: Iterable[RawScan],
        *,
        file_date: Optional[date],
        site_id: Optional[int] = None,
        file_name: Optional[str] = None,
        warnings: Sequence[str] = (),
    ) -> IngestionSummary:
        if file_date is None:
            raise IngestionError("File date is required")

        ordered = sorted(scans, key=lambda s: (s.timestamp, s.line_no or 0))
        upload_id = self._uploads.create(file_name=file_name, file_date=file_date, site_id=site_id)
        summary = IngestionSummary(
            upload_id=upload_id,
            file_date=file_date,
            site_id=site_id,
            total_scans=len(ordered),
            warnings=list(warnings),
        )

        earliest = file_date - timedelta(days=FILE_DATE_TOLERANCE_DAYS)
        latest = file_date + timedelta(days=FILE_DATE_TOLERANCE_DAYS)

        trail = []
        try:
            self._begin_batch()
            for scan in ordered:
                if self._filter_by_file_date and not (earliest <= scan.timestamp.date() <= latest):
                    summary.outside_range += 1
                    trail.append(AuditEntry(scan=scan, upload_id=upload_id, site_id=site_id))
                    continue

                result = self._process(scan, site_id=site_id, upload_id=upload_id, summary=summary)
                trail.append(AuditEntry(scan=scan, upload_id=upload_id, site_id=site_id, employee_id=result.employee_id))
        finally:
            # Scans not reached when the batch aborts are still kept for reprocessing.
            trail.extend(AuditEntry(scan=scan, upload_id=upload_id, site_id=site_id) for scan in ordered[len(trail):])
            self._audit.record(trail)
            self._uploads.finish(upload_id, summary)
        logger.info(
            "upload %s (%s, site %s): %d scans, %d matched, %d unmatched, %d flagged, %d warnings",
            upload_id,
            file_date,
            site_id,
            summary.total_scans,
            summary.matched,
            summary.unmatched,
            summary.flagged,
            len(summary.warnings),
        )
        return summary

    def reprocess(self, *, start: date, end: date, dry_run: bool = False) -> ReprocessSummary:
        """Replay the stored scan trail for start..end through matching and merging.

        Scans already merged map back to their slots, so only scans that failed
        before (unknown name, missing assignment, lost race) change anything.
        A dry run resolves names only and writes nothing.
        """
        if start is None or end is None:
            raise ValidationError("start and end are required")
        if end < start:
            raise ValidationError("end must not be before start")

        entries = self._audit.list_between(start, end)
        result = ReprocessSummary(start=start, end=end, dry_run=dry_run, total_scans=len(entries))
        applied = IngestionSummary(upload_id=None, file_date=start, total_scans=len(entries))
        self._begin_batch()

        for entry in entries:
            scan = entry.scan
            if dry_run:
                match = self._resolver.resolve(scan.raw_name, scan.timestamp)
                employee_id = match.employee.employee_id if match.outcome == MatchOutcome.RESOLVED else None
            else:
                employee_id = self._process(
                    scan, site_id=entry.site_id, upload_id=entry.upload_id, summary=applied
                ).employee_id

            if employee_id is None:
                result.unresolved += 1
            else:
                result.employees[employee_id] = result.employees.get(employee_id, 0) + 1

        if not dry_run:
            result.applied = applied
        logger.info(
            "reprocess %s..%s%s: %d scans, %d employees, %d unresolved",
            start,
            end,
            " (dry run)" if dry_run else "",
            result.total_scans,
            len(result.employees),
            result.unresolved,
        )
        return result

    def _process(
        self, scan: RawScan, *, site_id: Optional[int], upload_id: Optional[int], summary: IngestionSummary
    ) -> ScanResult:
        match = self._resolver.resolve(scan.raw_name, scan.timestamp)

        if match.outcome == MatchOutcome.UNMATCHED:
            summary.unmatched += 1
            self._flag(scan, ReviewReason.UNMATCHED_NAME, site_id=site_id, upload_id=upload_id)
            return ScanResult(employee_id=None, review_reason=ReviewReason.UNMATCHED_NAME)

        if match.outcome == MatchOutcome.AMBIGUOUS:
            summary.ambiguous += 1
            summary.flagged += 1
            self._flag(
                scan,
                ReviewReason.AMBIGUOUS_NAME,
                site_id=site_id,
                upload_id=upload_id,
                candidate_ids=match.candidate_ids,
            )
            return ScanResult(employee_id=None, review_reason=ReviewReason.AMBIGUOUS_NAME)

        result = self._reconcile(match.employee.employee_id, scan, site_id=site_id, upload_id=upload_id)
        if result.review_reason is not None:
            summary.flagged += 1
            return result

        summary.matched += 1
        if result.merge is not None and result.merge.duplicate:
            summary.duplicates += 1
        if result.non_work_day:
            summary.non_work_day += 1
        return result

    def reconcile_scan(
        self,
        employee_id: int,
        scan: RawScan,
        *,
        site_id: Optional[int] = None,
        upload_id: Optional[int] = None,
    ) -> ScanResult:
        """Classify and merge a scan already attributed to an employee (reviewer path)."""
        self._assignments.pop(employee_id, None)
        return self._reconcile(employee_id, scan, site_id=site_id, upload_id=upload_id)

    def _reconcile(
        self, employee_id: int, scan: RawScan, *, site_id: Optional[int], upload_id: Optional[int]
    ) -> ScanResult:
        assignment = self._assignment_for(employee_id)
        if assignment is None:
            logger.warning("employee %s has no active shift assignment for scan at %s", employee_id, scan.timestamp)
            self._flag(scan, ReviewReason.NO_ASSIGNMENT, site_id=site_id, upload_id=upload_id, employee_id=employee_id)
            return ScanResult(employee_id=employee_id, review_reason=ReviewReason.NO_ASSIGNMENT)

        classification = self._classifier.classify(assignment, scan.timestamp, scan.mode)
        if classification is None or not assignment.covers(classification.shift_date):
            reason = ReviewReason.OUT_OF_WINDOW if classification is None else ReviewReason.NO_ASSIGNMENT
            logger.warning(
                "scan %r at %s for employee %s not placed (%s)", scan.raw_name, scan.timestamp, employee_id, reason.value
            )
            self._flag(scan, reason, site_id=site_id, upload_id=upload_id, employee_id=employee_id)
            return ScanResult(employee_id=employee_id, review_reason=reason)

        try:
            merge = self._reconciliation.merge(classification, assignment, site_id=site_id)
        except MergeConflictError as exc:
            logger.warning("scan %r at %s left for review: %s", scan.raw_name, scan.timestamp, exc)
            reason = ReviewReason.MERGE_CONFLICT
            self._flag(scan, reason, site_id=site_id, upload_id=upload_id, employee_id=employee_id)
            return ScanResult(employee_id=employee_id, review_reason=reason)
        return ScanResult(employee_id=employee_id, merge=merge, non_work_day=classification.non_work_day)

    def _begin_batch(self) -> None:
        self._assignments.clear()
        self._resolver.begin_batch(self._employees.list_active())

    def _assignment_for(self, employee_id: int) -> Optional[ShiftAssignment]:
        if employee_id not in self._assignments:
            self._assignments[employee_id] = self._schedules.get_active_for_employee(employee_id)
        return self._assignments[employee_id]

    def _flag(
        self,
        scan: RawScan,
        reason: ReviewReason,
        *,
        site_id: Optional[int],
        upload_id: Optional[int],
        candidate_ids=(),
        employee_id: Optional[int] = None,
    ) -> None:
        self._unresolved.add(
            UnresolvedScan(
                raw_name=scan.raw_name,
                mode=scan.mode,
                scanned_at=scan.timestamp,
                reason=reason,
                candidate_ids=tuple(candidate_ids),
                device_id=scan.device_id,
                site_id=site_id,
                upload_id=upload_id,
                employee_id=employee_id,
            )
        )
