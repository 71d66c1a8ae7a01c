from datetime import date, datetime, timedelta, timezone

import pytest

from attendance_engine.core.enums import AttendanceStatus, CheckInStatus, CheckOutStatus, OvertimeStatus, Role
from attendance_engine.core.exceptions import (
    AlreadyClockedIn,
    AlreadyClockedOut,
    EmployeeNotFound,
    HolidayBlocked,
    LocationRequired,
    NotAWorkingDay,
    NotClockedIn,
    OutsideGeofence,
)
from attendance_engine.geofence.model import GeofenceLocation
from attendance_engine.notifications.effects import ActivityEntry, EmailMessage, PushNotification
from attendance_engine.overtime.model import OvertimeRequest
from attendance_engine.settings.model import GeofenceConfig, NotificationPreferences
from attendance_engine.workcalendar.model import ApprovedLeave, Holiday

from fakes import MONDAY, SATURDAY, build_world, employee, utc, utc_settings

HQ = GeofenceLocation(location_id=1, name="HQ", latitude=12.9716, longitude=77.5946, radius_m=200)
STRICT = GeofenceConfig(enabled=True, strict_mode=True, use_multiple_locations=True)


def test_clock_in_late_records_in_progress_day():
    w = build_world()

    outcome = w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 20))

    record = outcome.record
    assert record.attendance_id is not None
    assert record.work_date == MONDAY
    assert record.status == AttendanceStatus.IN_PROGRESS
    assert record.check_in_status == CheckInStatus.LATE
    assert record.status_reason == "Late by 20 min"


def test_clock_in_on_weekend_is_rejected():
    w = build_world()

    with pytest.raises(NotAWorkingDay):
        w.attendance_service.clock_in(1, now=utc(SATURDAY, 9, 0))

    assert w.attendance.records == {}


def test_clock_in_on_holiday_is_rejected():
    w = build_world(holidays=[Holiday(holiday_id=1, name="Founders Day", start_date=MONDAY, end_date=MONDAY)])

    with pytest.raises(HolidayBlocked) as exc:
        w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0))

    assert "Founders Day" in str(exc.value)


def test_clock_in_twice_is_rejected():
    w = build_world()
    w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0))

    with pytest.raises(AlreadyClockedIn):
        w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 5))


def test_clock_in_unknown_or_inactive_employee():
    w = build_world(employees=[employee(1, is_active=False)])

    with pytest.raises(EmployeeNotFound):
        w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0))
    with pytest.raises(EmployeeNotFound):
        w.attendance_service.clock_in(42, now=utc(MONDAY, 9, 0))


def test_work_date_is_the_company_local_day():
    # 20:00 UTC on Sunday is already Monday 01:30 in Kolkata.
    w = build_world(settings=utc_settings(timezone="Asia/Kolkata"))
    sunday_evening = datetime(2025, 1, 5, 20, 0, tzinfo=timezone.utc)

    outcome = w.attendance_service.clock_in(1, now=sunday_evening)

    assert outcome.record.work_date == MONDAY
    assert outcome.record.check_in_status == CheckInStatus.EARLY


def test_strict_geofence_rejects_point_outside():
    w = build_world(settings=utc_settings(geofence=STRICT), locations=[HQ])

    with pytest.raises(OutsideGeofence) as exc:
        w.attendance_service.clock_in(1, latitude=12.9760, longitude=77.5946, now=utc(MONDAY, 9, 0))

    assert exc.value.nearest_location_name == "HQ"
    assert 480 < exc.value.distance_m < 500
    assert w.attendance.records == {}


def test_strict_geofence_requires_coordinates():
    w = build_world(settings=utc_settings(geofence=STRICT), locations=[HQ])

    with pytest.raises(LocationRequired):
        w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0))


def test_strict_geofence_accepts_point_inside_and_stamps_location():
    w = build_world(settings=utc_settings(geofence=STRICT), locations=[HQ])

    record = w.attendance_service.clock_in(
        1, latitude=12.9717, longitude=77.5946, address="MG Road", now=utc(MONDAY, 9, 0)
    ).record

    assert record.geofence_validated is True
    assert record.check_in_location.location_name == "HQ"
    assert record.check_in_location.address == "MG Road"


def test_lenient_geofence_allows_point_outside():
    lenient = GeofenceConfig(enabled=True, strict_mode=False, use_multiple_locations=True)
    w = build_world(settings=utc_settings(geofence=lenient), locations=[HQ])

    record = w.attendance_service.clock_in(1, latitude=12.9760, longitude=77.5946, now=utc(MONDAY, 9, 0)).record

    assert record.geofence_validated is False
    assert record.check_in_location.location_id is None


def test_work_from_home_skips_geofence():
    wfh = ApprovedLeave(leave_id=1, employee_id=1, start_date=MONDAY, end_date=MONDAY, work_from_home=True)
    w = build_world(settings=utc_settings(geofence=STRICT), locations=[HQ], leaves=[wfh])

    record = w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0)).record

    assert record.work_from_home is True
    assert record.geofence_validated is False


def test_clock_in_fills_work_from_home_placeholder():
    wfh = ApprovedLeave(leave_id=1, employee_id=1, start_date=MONDAY, end_date=MONDAY, work_from_home=True)
    w = build_world(leaves=[wfh])
    placeholder = w.attendance_service.get_today(1, now=utc(MONDAY, 8, 0))

    record = w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0)).record

    assert placeholder.check_in is None
    assert record.attendance_id == placeholder.attendance_id
    assert record.check_in == utc(MONDAY, 9, 0)
    assert len(w.attendance.records) == 1


def test_get_today_synthesizes_leave_record():
    leave = ApprovedLeave(leave_id=1, employee_id=1, start_date=MONDAY, end_date=MONDAY)
    w = build_world(leaves=[leave])

    record = w.attendance_service.get_today(1, now=utc(MONDAY, 8, 0))

    assert record.status == AttendanceStatus.ON_LEAVE
    assert w.attendance_service.get_today(1, now=utc(MONDAY, 9, 0)).attendance_id == record.attendance_id


def test_get_today_without_record_or_leave():
    w = build_world()

    assert w.attendance_service.get_today(1, now=utc(MONDAY, 8, 0)) is None


def test_clock_out_without_clock_in():
    w = build_world()

    with pytest.raises(NotClockedIn):
        w.attendance_service.clock_out(1, now=utc(MONDAY, 18, 0))


def test_clock_out_computes_hours_and_status():
    w = build_world()
    w.attendance_service.clock_in(1, now=utc(MONDAY, 8, 30))

    record = w.attendance_service.clock_out(1, now=utc(MONDAY, 17, 30)).record

    assert record.status == AttendanceStatus.PRESENT
    assert record.check_out_status == CheckOutStatus.EARLY
    assert record.total_logged_hours == 9.0
    assert record.break_minutes == 30
    assert record.work_hours == 8.5
    assert record.shrinkage_percentage == 5.56
    assert record.overtime_hours is None
    assert record.status_reason.endswith("(Left 30 min before end of shift)")


def test_short_day_is_half_day():
    w = build_world()
    w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0))

    record = w.attendance_service.clock_out(1, now=utc(MONDAY, 14, 0)).record

    assert record.work_hours == 4.5
    assert record.status == AttendanceStatus.HALF_DAY


def test_clock_out_twice_is_rejected():
    w = build_world()
    w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0))
    w.attendance_service.clock_out(1, now=utc(MONDAY, 18, 0))

    with pytest.raises(AlreadyClockedOut):
        w.attendance_service.clock_out(1, now=utc(MONDAY, 18, 5))


def test_clock_out_losing_race_to_scheduler_is_rejected():
    w = build_world()
    w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0))
    w.attendance.fail_next_close = True

    with pytest.raises(AlreadyClockedOut):
        w.attendance_service.clock_out(1, now=utc(MONDAY, 18, 0))


def test_clock_out_with_confirmed_overtime_counts_hours_past_schedule():
    w = build_world()
    record = w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0)).record
    request = w.overtime.create(
        OvertimeRequest(
            request_id=None,
            employee_id=1,
            attendance_id=record.attendance_id,
            work_date=MONDAY,
            scheduled_check_out=utc(MONDAY, 18, 0),
            prompt_sent_at=utc(MONDAY, 18, 30),
            status=OvertimeStatus.CONFIRMED,
        )
    )

    closed = w.attendance_service.clock_out(1, now=utc(MONDAY, 20, 15)).record

    assert closed.overtime_hours == 2.25
    assert closed.check_out_status == CheckOutStatus.ON_TIME
    assert closed.status_reason.endswith("(Left 135 min after end of shift)")
    updated = w.overtime.get_by_id(request.request_id)
    assert updated.status == OvertimeStatus.MANUAL_CHECKOUT
    assert updated.overtime_hours == 2.25


def test_clock_events_produce_activity_email_and_push():
    w = build_world()

    effects = w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0)).effects

    kinds = [type(e) for e in effects]
    assert kinds == [ActivityEntry, EmailMessage, PushNotification]
    assert effects[1].subject == "Clock-in recorded"
    assert effects[2].event_type == "attendance_clock_in"


def test_disabled_channels_produce_only_activity():
    prefs = NotificationPreferences(email_enabled=False, push_enabled=False)
    w = build_world(settings=utc_settings(notifications=prefs))
    w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0))

    effects = w.attendance_service.clock_out(1, now=utc(MONDAY, 18, 0)).effects

    assert [type(e) for e in effects] == [ActivityEntry]


def test_status_email_toggle_is_respected():
    prefs = NotificationPreferences(email_on_half_day=False)
    w = build_world(settings=utc_settings(notifications=prefs))
    w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0))

    effects = w.attendance_service.clock_out(1, now=utc(MONDAY, 14, 0)).effects

    assert not any(isinstance(e, EmailMessage) for e in effects)


def test_check_location_reports_required_and_allowed():
    w = build_world(settings=utc_settings(geofence=STRICT), locations=[HQ])

    inside = w.attendance_service.check_location(1, latitude=12.9716, longitude=77.5946, now=utc(MONDAY, 8, 50))
    outside = w.attendance_service.check_location(1, latitude=13.5, longitude=77.5946, now=utc(MONDAY, 8, 50))

    assert inside.geofence_required is True
    assert inside.allowed is True
    assert outside.allowed is False
    assert outside.resolution.nearest_location == HQ


def test_history_is_newest_first():
    w = build_world()
    for offset in range(3):
        day = MONDAY + timedelta(days=offset)
        w.attendance_service.clock_in(1, now=utc(day, 9, 0))
        w.attendance_service.clock_out(1, now=utc(day, 18, 0))

    history = w.attendance_service.get_history(1, limit=2)

    assert [r.work_date for r in history] == [date(2025, 1, 8), date(2025, 1, 7)]


def test_weekend_is_rejected_even_with_wfh_and_strict_geofence():
    wfh = ApprovedLeave(leave_id=1, employee_id=1, start_date=SATURDAY, end_date=SATURDAY, work_from_home=True)
    w = build_world(settings=utc_settings(geofence=STRICT), locations=[HQ], leaves=[wfh])

    with pytest.raises(NotAWorkingDay):
        w.attendance_service.clock_in(1, latitude=13.5, longitude=77.5946, now=utc(SATURDAY, 9, 0))


def test_clock_in_after_being_marked_absent_replaces_the_absent_reason():
    w = build_world()
    w.scheduler.tick(utc(MONDAY, 10, 0))

    record = w.attendance_service.clock_in(1, now=utc(MONDAY, 10, 30)).record

    assert record.status == AttendanceStatus.IN_PROGRESS
    assert record.check_in_status == CheckInStatus.LATE
    assert record.status_reason == "Late by 90 min"
    assert len(w.attendance.records) == 1


def _team():
    return [
        employee(1, role=Role.MANAGER, department_id=10),
        employee(2, reporting_manager_id=1, department_id=20),
        employee(3, department_id=10),
        employee(4, department_id=30),
        employee(5, role=Role.HR, department_id=40),
    ]


def test_team_today_for_a_manager_covers_reports_and_department():
    leave = ApprovedLeave(leave_id=1, employee_id=2, start_date=MONDAY, end_date=MONDAY)
    w = build_world(employees=_team(), leaves=[leave])
    w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0))

    team = w.attendance_service.get_team_today(1, now=utc(MONDAY, 9, 30))

    assert [(m.employee.employee_id, m.status) for m in team.members] == [
        (1, "in-progress"),
        (2, "on-leave"),
        (3, "not-checked-in"),
    ]
    assert team.members[0].record.check_in == utc(MONDAY, 9, 0)
    assert team.meta()["present"] == 1
    assert team.meta()["onLeave"] == 1
    assert team.meta()["notCheckedIn"] == 1


def test_team_today_for_hr_covers_everyone_by_time_of_day():
    holiday = Holiday(holiday_id=1, name="Foundation Day", start_date=MONDAY, end_date=MONDAY, company_id=8)
    w = build_world(employees=_team() + [employee(6, company_id=8)], holidays=[holiday])

    before = w.attendance_service.get_team_today(5, now=utc(MONDAY, 8, 0))
    after = w.attendance_service.get_team_today(5, now=utc(MONDAY, 10, 30))

    assert [m.status for m in before.members] == ["not-started"] * 5 + ["day-off"]
    assert [m.status for m in after.members] == ["absent"] * 5 + ["day-off"]
    assert after.meta()["absent"] == 5
