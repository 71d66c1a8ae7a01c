from __future__ import annotations

from flask import Flask, request

from ..common.web import current_employee_id, fail, handle_domain_errors, login_required, ok
from ..container import Container
from ..core.enums import OvertimeStatus
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/overtime", methods=["GET"], endpoint="overtime_list")
    @login_required
    @handle_domain_errors
    def overtime_list():
        raw = (request.args.get("status") or OvertimeStatus.PENDING.value).strip()
        try:
            status = None if raw == "all" else OvertimeStatus(raw)
        except ValueError:
            raise ValidationError("Invalid overtime status")
        items = container.overtime_service.list_for_employee(current_employee_id(), status=status)
        return ok("OK", [r.to_dict() for r in items])

    @app.route("/api/attendance/overtime", methods=["POST"], endpoint="overtime_respond")
    @login_required
    @handle_domain_errors
    def overtime_respond():
        data = request.get_json(silent=True) or {}
        if data.get("requestId") is None or data.get("isWorkingOvertime") is None:
            return fail("requestId and isWorkingOvertime are required")

        response = container.overtime_service.respond(
            current_employee_id(),
            int(data["requestId"]),
            is_working_overtime=bool(data["isWorkingOvertime"]),
        )
        container.dispatcher.dispatch(response.effects)
        message = "Overtime confirmed" if response.record is None else "Clocked out successfully"
        return ok(
            message,
            {
                "request": response.request.to_dict(),
                "attendance": response.record.to_dict() if response.record else None,
            },
        )
