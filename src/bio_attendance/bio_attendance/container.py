from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .attendance.factory import StatusStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import ReconciliationService
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.service import AuditService
from .core.constants import (
    DEFAULT_AUDIT_RETENTION_DAYS,
    DEFAULT_GRACE_MINUTES,
    DEFAULT_MERGE_MAX_RETRIES,
    DEFAULT_NAME_MATCH_PRECEDENCE,
)
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .ingestion.mysql_upload_repository import MySQLUploadRepository
from .ingestion.service import IngestionService
from .matching.factory import NameMatchStrategyFactory
from .reports.service import StatisticsService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService
from .verification.mysql_unresolved_repository import MySQLUnresolvedScanRepository
from .verification.service import VerificationService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    schedules_repo: MySQLScheduleRepository
    attendance_repo: MySQLAttendanceRepository
    audit_repo: MySQLAuditRepository
    unresolved_repo: MySQLUnresolvedScanRepository
    uploads_repo: MySQLUploadRepository

    schedule_service: ScheduleService
    reconciliation_service: ReconciliationService
    audit_service: AuditService
    ingestion_service: IngestionService
    verification_service: VerificationService
    statistics_service: StatisticsService


def build_container(
    *,
    db_config: dict,
    audit_retention_days: int = DEFAULT_AUDIT_RETENTION_DAYS,
    default_grace_minutes: int = DEFAULT_GRACE_MINUTES,
    name_match_precedence: Sequence[str] = DEFAULT_NAME_MATCH_PRECEDENCE,
    filter_scans_by_file_date: bool = True,
    merge_max_retries: int = DEFAULT_MERGE_MAX_RETRIES,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_settings(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn, max_retries=merge_max_retries)
    audit_repo = MySQLAuditRepository(conn)
    unresolved_repo = MySQLUnresolvedScanRepository(conn)
    uploads_repo = MySQLUploadRepository(conn)

    schedule_service = ScheduleService(schedules_repo, default_grace_minutes=default_grace_minutes)
    reconciliation_service = ReconciliationService(
        attendance_repo,
        schedules_repo,
        employees_repo,
        strategy_factory=StatusStrategyFactory(),
        max_retries=merge_max_retries,
    )
    audit_service = AuditService(audit_repo, retention_days=audit_retention_days)
    ingestion_service = IngestionService(
        employees=employees_repo,
        schedules=schedules_repo,
        reconciliation=reconciliation_service,
        audit=audit_service,
        unresolved=unresolved_repo,
        uploads=uploads_repo,
        strategies=NameMatchStrategyFactory(precedence=tuple(name_match_precedence)).build(),
        filter_by_file_date=filter_scans_by_file_date,
    )
    verification_service = VerificationService(
        attendance_repo,
        unresolved_repo,
        reconciliation_service,
        schedules_repo,
        ingestion_service,
        employees_repo,
    )
    statistics_service = StatisticsService(attendance_repo)

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        audit_repo=audit_repo,
        unresolved_repo=unresolved_repo,
        uploads_repo=uploads_repo,
        schedule_service=schedule_service,
        reconciliation_service=reconciliation_service,
        audit_service=audit_service,
        ingestion_service=ingestion_service,
        verification_service=verification_service,
        statistics_service=statistics_service,
    )
