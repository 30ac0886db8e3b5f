from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.http import date_arg
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/statistics", methods=["GET"], endpoint="api_statistics")
    def api_statistics():
        today = date.today()
        start = date_arg(request.args.get("start"), "start") or today.replace(day=1)
        end = date_arg(request.args.get("end"), "end") or today
        stats = container.statistics_service.status_counts(start=start, end=end)
        return jsonify(stats.to_dict())
