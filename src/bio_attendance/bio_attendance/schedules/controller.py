from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_clock, parse_iso_date
from ..core.enums import ShiftType
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container
from ..shifts.patterns import window_for


def register(app: Flask, container: Container) -> None:
    @app.route("/api/schedules", methods=["POST"], endpoint="api_schedules_assign")
    def api_schedules_assign():
        data = request.get_json(silent=True) or {}
        try:
            shift_type = ShiftType(data.get("shift_type", ""))
            time_in = parse_clock(data.get("scheduled_time_in", ""))
            time_out = parse_clock(data.get("scheduled_time_out", ""))
            effective = parse_iso_date(data.get("effective_date", ""))
            end = parse_iso_date(data["end_date"]) if data.get("end_date") else None
            employee_id = int(data.get("employee_id") or 0)
            grace = data.get("grace_period_minutes")
            site_id = data.get("site_id")
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid schedule: {e}") from None

        if container.employees_repo.get_by_id(employee_id) is None:
            raise NotFoundError(f"Employee {employee_id} not found")

        assignment_id = container.schedule_service.assign(
            employee_id=employee_id,
            shift_type=shift_type,
            scheduled_time_in=time_in,
            scheduled_time_out=time_out,
            work_days=data.get("work_days") or [],
            effective_date=effective,
            grace_period_minutes=int(grace) if grace is not None else None,
            end_date=end,
            site_id=int(site_id) if site_id is not None else None,
        )
        return jsonify({"success": True, "assignment_id": assignment_id}), 201

    @app.route("/api/employees/<int:employee_id>/schedule", methods=["GET"], endpoint="api_employee_schedule")
    def api_employee_schedule(employee_id: int):
        assignment = container.schedules_repo.get_active_for_employee(employee_id)
        if assignment is None:
            raise NotFoundError(f"Employee {employee_id} has no active assignment")

        window = window_for(assignment)
        return jsonify(
            {
                "assignment_id": assignment.assignment_id,
                "shift_type": assignment.shift_type.value,
                "scheduled_time_in": assignment.scheduled_time_in.strftime("%H:%M"),
                "scheduled_time_out": assignment.scheduled_time_out.strftime("%H:%M"),
                "work_days": sorted(assignment.work_days),
                "grace_period_minutes": assignment.grace_period_minutes,
                "pattern": window.name,
                "time_in_range": [window.time_in.min, window.time_in.max],
                "time_out_range": [window.time_out.min, window.time_out.max],
            }
        )
