from __future__ import annotations

import hmac

from flask import Flask, current_app, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import fail, handle_domain_errors, ok
from ..container import Container


def _authorized() -> bool:
    expected = str(current_app.config.get("CRON_SECRET") or "")
    provided = request.headers.get("X-Cron-Secret", "")
    return bool(expected) and hmac.compare_digest(expected, provided)


def register(app: Flask, container: Container) -> None:
    @app.route("/internal/attendance/tick", methods=["POST"], endpoint="scheduler_tick")
    @handle_domain_errors
    def tick():
        if not _authorized():
            return fail("Unauthorized", 401)
        report = container.scheduler.tick()
        return ok("Tick processed", report.to_dict())

    @app.route("/internal/attendance/mark-absent", methods=["POST"], endpoint="scheduler_mark_absent")
    @handle_domain_errors
    def mark_absent():
        if not _authorized():
            return fail("Unauthorized", 401)
        data = request.get_json(silent=True) or {}
        start = parse_iso_date(data.get("startDate") or "")
        end = parse_iso_date(data.get("endDate") or data.get("startDate") or "")
        report = container.scheduler.backfill_absent(start, end)
        return ok("Absent records backfilled", report.to_dict())
