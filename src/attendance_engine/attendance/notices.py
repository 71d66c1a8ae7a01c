from __future__ import annotations

from ..common.datetime_utils import to_local
from ..core.enums import AttendanceStatus
from ..employees.model import Employee
from ..notifications.effects import ActivityEntry, EmailMessage, Effect, PushNotification
from ..settings.model import ResolvedSettings
from .model import AttendanceRecord

_STATUS_EMAIL_TOGGLES = {
    AttendanceStatus.PRESENT: "email_on_present",
    AttendanceStatus.HALF_DAY: "email_on_half_day",
    AttendanceStatus.ABSENT: "email_on_absent",
}


def _clock(record_time, settings: ResolvedSettings) -> str:
    return to_local(record_time, settings.timezone).strftime("%H:%M")


def clock_in_effects(employee: Employee, record: AttendanceRecord, settings: ResolvedSettings) -> list[Effect]:
    at = _clock(record.check_in, settings)
    status = record.check_in_status.value if record.check_in_status else "on-time"
    effects: list[Effect] = [
        ActivityEntry(
            employee_id=employee.employee_id,
            type="attendance_checkin",
            action="Clocked in",
            details=f"Clocked in at {at} ({status})" + (" from home" if record.work_from_home else ""),
            related_id=record.attendance_id,
        )
    ]

    prefs = settings.notifications
    if prefs.email_enabled and prefs.email_on_clock_in and employee.email:
        effects.append(
            EmailMessage(
                to=employee.email,
                subject="Clock-in recorded",
                text=(
                    f"Hi {employee.full_name},\n\n"
                    f"Your clock-in at {at} on {record.work_date.isoformat()} was recorded ({status})."
                ),
            )
        )
    if prefs.push_enabled:
        effects.append(
            PushNotification(
                user_id=employee.user_id,
                title="Clock-in recorded",
                body=f"You clocked in at {at} ({status}).",
                event_type="attendance_clock_in",
                data={"attendanceId": record.attendance_id, "checkInStatus": status},
            )
        )
    return effects


def clock_out_effects(employee: Employee, record: AttendanceRecord, settings: ResolvedSettings) -> list[Effect]:
    at = _clock(record.check_out, settings)
    summary = f"{record.work_hours:.2f}h worked, status {record.status.value}"
    if record.overtime_hours:
        summary += f", {record.overtime_hours:.2f}h overtime"
    effects: list[Effect] = [
        ActivityEntry(
            employee_id=employee.employee_id,
            type="attendance_checkout",
            action="Clocked out",
            details=f"Clocked out at {at} ({summary})",
            related_id=record.attendance_id,
        )
    ]

    prefs = settings.notifications
    toggle = _STATUS_EMAIL_TOGGLES.get(record.status)
    if prefs.email_enabled and toggle and getattr(prefs, toggle) and employee.email:
        effects.append(
            EmailMessage(
                to=employee.email,
                subject="Clock-out recorded",
                text=(
                    f"Hi {employee.full_name},\n\n"
                    f"Your clock-out at {at} on {record.work_date.isoformat()} was recorded.\n"
                    f"Logged: {record.total_logged_hours:.2f}h, breaks: {record.break_minutes} min, "
                    f"effective: {record.work_hours:.2f}h.\n"
                    f"Status: {record.status.value}. {record.status_reason or ''}".rstrip()
                ),
            )
        )
    if prefs.push_enabled:
        effects.append(
            PushNotification(
                user_id=employee.user_id,
                title="Clock-out recorded",
                body=f"You clocked out at {at} ({summary}).",
                event_type="attendance_clock_out",
                data={"attendanceId": record.attendance_id, "status": record.status.value},
            )
        )
    return effects
