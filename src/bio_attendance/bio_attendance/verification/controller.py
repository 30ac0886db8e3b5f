from __future__ import annotations

from flask import Flask, jsonify, request

from ..attendance.model import AttendanceRecord
from ..common.http import date_arg, iso
from ..common.validators import optional_datetime
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import UnresolvedScan
from .service import KEEP


def record_to_dict(r: AttendanceRecord) -> dict:
    return {
        "attendance_id": r.attendance_id,
        "employee_id": r.employee_id,
        "shift_date": r.shift_date.strftime("%Y-%m-%d"),
        "time_in": iso(r.time_in),
        "time_out": iso(r.time_out),
        "site_in": r.site_in,
        "site_out": r.site_out,
        "status": r.status.value,
        "secondary_status": r.secondary_status.value if r.secondary_status else None,
        "tardy_minutes": r.tardy_minutes,
        "undertime_minutes": r.undertime_minutes,
        "overtime_minutes": r.overtime_minutes,
        "cross_site": r.cross_site,
        "verified": r.verified,
        "notes": r.notes,
    }


def unresolved_to_dict(s: UnresolvedScan) -> dict:
    return {
        "unresolved_id": s.unresolved_id,
        "raw_name": s.raw_name,
        "mode": s.mode.value,
        "scanned_at": iso(s.scanned_at),
        "reason": s.reason.value,
        "candidate_ids": list(s.candidate_ids),
        "site_id": s.site_id,
        "upload_id": s.upload_id,
        "employee_id": s.employee_id,
    }


def register(app: Flask, container: Container) -> None:
    def _ids_from_body() -> list:
        data = request.get_json(silent=True) or {}
        ids = data.get("ids")
        if not isinstance(ids, list):
            raise ValidationError("ids must be a list")
        return ids

    @app.route("/api/verification", methods=["GET"], endpoint="api_verification_queue")
    def api_verification_queue():
        queue = container.verification_service.queue(
            start=date_arg(request.args.get("start"), "start"),
            end=date_arg(request.args.get("end"), "end"),
        )
        return jsonify(
            {
                "records": [record_to_dict(r) for r in queue.records],
                "unresolved": [unresolved_to_dict(s) for s in queue.unresolved],
                "size": queue.size,
            }
        )

    @app.route("/api/attendance/<int:attendance_id>", methods=["PATCH"], endpoint="api_attendance_update")
    def api_attendance_update(attendance_id: int):
        data = request.get_json(silent=True) or {}
        status = None
        if data.get("status"):
            try:
                status = AttendanceStatus(data["status"])
            except ValueError:
                raise ValidationError(f"Unknown status {data['status']!r}") from None

        record = container.verification_service.update_record(
            attendance_id,
            time_in=optional_datetime(data["time_in"], "time_in") if "time_in" in data else KEEP,
            time_out=optional_datetime(data["time_out"], "time_out") if "time_out" in data else KEEP,
            status=status,
            notes=data["notes"] if "notes" in data else KEEP,
        )
        return jsonify({"success": True, "record": record_to_dict(record)})

    @app.route("/api/attendance/advised", methods=["POST"], endpoint="api_attendance_advised")
    def api_attendance_advised():
        updated = container.verification_service.mark_advised(_ids_from_body())
        return jsonify({"success": True, "updated": updated})

    @app.route("/api/attendance/delete", methods=["POST"], endpoint="api_attendance_delete")
    def api_attendance_delete():
        deleted = container.verification_service.delete_records(_ids_from_body())
        return jsonify({"success": True, "deleted": deleted})

    @app.route(
        "/api/verification/unresolved/<int:unresolved_id>/resolve",
        methods=["POST"],
        endpoint="api_unresolved_resolve",
    )
    def api_unresolved_resolve(unresolved_id: int):
        data = request.get_json(silent=True) or {}
        try:
            employee_id = int(data.get("employee_id") or 0)
        except (TypeError, ValueError):
            raise ValidationError("employee_id must be an integer") from None
        if employee_id <= 0:
            raise ValidationError("employee_id is required")

        result = container.verification_service.resolve_scan(unresolved_id, employee_id)
        body = {"success": result.review_reason is None}
        if result.review_reason is not None:
            body["message"] = f"Scan still needs review: {result.review_reason.value}"
        if result.merge is not None:
            body["record"] = record_to_dict(result.merge.record)
        return jsonify(body)
