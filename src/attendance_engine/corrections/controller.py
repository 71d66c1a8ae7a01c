from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_employee_id, fail, handle_domain_errors, login_required, ok
from ..container import Container
from ..core.enums import CorrectionType
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/corrections", methods=["GET"], endpoint="corrections_list")
    @login_required
    @handle_domain_errors
    def corrections_list():
        if request.args.get("scope") == "review":
            items = container.correction_service.list_pending(current_employee_id())
        else:
            items = container.correction_service.list_for_employee(current_employee_id())
        return ok("OK", [c.to_dict() for c in items])

    @app.route("/api/attendance/corrections", methods=["POST"], endpoint="corrections_submit")
    @login_required
    @handle_domain_errors
    def corrections_submit():
        data = request.get_json(silent=True) or {}
        try:
            correction_type = CorrectionType(data.get("correctionType") or "")
        except ValueError:
            raise ValidationError("Invalid correction type")

        correction = container.correction_service.submit(
            current_employee_id(),
            work_date=parse_iso_date(data.get("date") or ""),
            correction_type=correction_type,
            reason=data.get("reason") or "",
            requested_check_in=data.get("requestedCheckIn"),
            requested_check_out=data.get("requestedCheckOut"),
            requested_status=data.get("requestedStatus"),
        )
        return ok("Correction request submitted", correction.to_dict(), 201)

    @app.route("/api/attendance/corrections/<int:correction_id>/decision", methods=["POST"], endpoint="corrections_decide")
    @login_required
    @handle_domain_errors
    def corrections_decide(correction_id: int):
        data = request.get_json(silent=True) or {}
        action = (data.get("action") or "").strip().lower()
        comments = data.get("comments") or ""

        if action == "approve":
            record = container.correction_service.approve(current_employee_id(), correction_id, comments=comments)
            return ok("Correction approved", record.to_dict())
        if action == "reject":
            container.correction_service.reject(current_employee_id(), correction_id, comments=comments)
            return ok("Correction rejected")
        return fail("action must be 'approve' or 'reject'")
