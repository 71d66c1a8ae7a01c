from __future__ import annotations

from flask import Flask, request

from ..common.validators import optional_latitude, optional_longitude
from ..common.web import current_employee_id, handle_domain_errors, login_required, ok
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT


def _location_args(data: dict) -> dict:
    return {
        "latitude": optional_latitude(data.get("latitude")),
        "longitude": optional_longitude(data.get("longitude")),
        "address": (data.get("address") or "").strip() or None,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    @login_required
    @handle_domain_errors
    def clock_in():
        data = request.get_json(silent=True) or {}
        outcome = container.attendance_service.clock_in(current_employee_id(), **_location_args(data))
        container.dispatcher.dispatch(outcome.effects)
        return ok("Clocked in successfully", outcome.record.to_dict())

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    @login_required
    @handle_domain_errors
    def clock_out():
        data = request.get_json(silent=True) or {}
        outcome = container.attendance_service.clock_out(current_employee_id(), **_location_args(data))
        container.dispatcher.dispatch(outcome.effects)
        return ok("Clocked out successfully", outcome.record.to_dict())

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    @handle_domain_errors
    def today():
        record = container.attendance_service.get_today(current_employee_id())
        return ok("OK", record.to_dict() if record else None)

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    @handle_domain_errors
    def history():
        limit = min(request.args.get("limit", DEFAULT_HISTORY_LIMIT, type=int), 200)
        records = container.attendance_service.get_history(current_employee_id(), limit=limit)
        return ok("OK", [r.to_dict() for r in records])

    @app.route("/api/attendance/team-today", methods=["GET"], endpoint="attendance_team_today")
    @login_required
    @handle_domain_errors
    def team_today():
        team = container.attendance_service.get_team_today(current_employee_id())
        return ok("OK", {"members": [m.to_dict() for m in team.members], "meta": team.meta()})

    @app.route("/api/attendance/geolocation-check", methods=["POST"], endpoint="attendance_geolocation_check")
    @login_required
    @handle_domain_errors
    def geolocation_check():
        data = request.get_json(silent=True) or {}
        args = _location_args(data)
        if args["latitude"] is None or args["longitude"] is None:
            return ok("Location not provided", {"allowed": False, "geofenceRequired": None})

        check = container.attendance_service.check_location(
            current_employee_id(), latitude=args["latitude"], longitude=args["longitude"]
        )
        resolution = check.resolution
        nearest = resolution.nearest_location if resolution else None
        return ok(
            "OK",
            {
                "allowed": check.allowed,
                "geofenceRequired": check.geofence_required,
                "isWithinGeofence": bool(resolution and resolution.is_within_any_geofence),
                "distance": resolution.distance_m if resolution else None,
                "location": {"id": nearest.location_id, "name": nearest.name} if nearest else None,
            },
        )
