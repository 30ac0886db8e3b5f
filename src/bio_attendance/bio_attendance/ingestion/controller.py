from __future__ import annotations

from flask import Flask, jsonify, request
from werkzeug.utils import secure_filename

from ..common.http import date_arg, iso
from ..core.exceptions import IngestionError, NotFoundError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/uploads", methods=["POST"], endpoint="api_upload_create")
    def api_upload_create():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            raise ValidationError("An attendance file is required")

        file_date = date_arg(request.form.get("file_date"), "file_date")
        if file_date is None:
            raise IngestionError("File date is required")
        site_s = request.form.get("site_id") or ""
        if site_s and not site_s.isdigit():
            raise ValidationError("site_id must be an integer")

        summary = container.ingestion_service.ingest_bytes(
            upload.read(),
            file_date=file_date,
            site_id=int(site_s) if site_s else None,
            file_name=secure_filename(upload.filename),
        )
        return jsonify({"success": True, "summary": summary.to_dict()}), 201

    @app.route("/api/uploads", methods=["GET"], endpoint="api_upload_list")
    def api_upload_list():
        limit = request.args.get("limit", "20")
        rows = container.uploads_repo.list_recent(int(limit) if limit.isdigit() else 20)
        return jsonify(
            [
                {
                    "upload_id": u.upload_id,
                    "file_name": u.file_name,
                    "file_date": u.file_date.strftime("%Y-%m-%d"),
                    "site_id": u.site_id,
                    "total_scans": u.total_scans,
                    "matched": u.matched,
                    "unmatched": u.unmatched,
                    "flagged": u.flagged,
                    "warnings": u.warnings,
                }
                for u in rows
            ]
        )

    @app.route("/api/uploads/<int:upload_id>/scans", methods=["GET"], endpoint="api_upload_scans")
    def api_upload_scans(upload_id: int):
        if container.uploads_repo.get(upload_id) is None:
            raise NotFoundError(f"Upload {upload_id} not found")
        entries = container.audit_service.list_for_upload(upload_id)
        return jsonify(
            [
                {
                    "scan_id": e.scan_id,
                    "device_id": e.scan.device_id,
                    "raw_name": e.scan.raw_name,
                    "mode": e.scan.mode.value,
                    "scanned_at": iso(e.scan.timestamp),
                    "employee_id": e.employee_id,
                }
                for e in entries
            ]
        )

    @app.route("/api/reprocess", methods=["POST"], endpoint="api_reprocess")
    def api_reprocess():
        data = request.get_json(silent=True) or {}
        start = date_arg(data.get("start"), "start")
        end = date_arg(data.get("end"), "end")
        result = container.ingestion_service.reprocess(start=start, end=end, dry_run=bool(data.get("dry_run")))
        return jsonify({"success": True, "result": result.to_dict()})
