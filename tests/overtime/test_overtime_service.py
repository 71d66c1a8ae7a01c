import pytest

from attendance_engine.core.enums import AttendanceStatus, CheckOutStatus, OvertimeStatus
from attendance_engine.core.exceptions import RecordNotFound, ValidationError
from attendance_engine.notifications.effects import ActivityEntry

from fakes import MONDAY, build_world, employee, utc


def _prompted_world():
    w = build_world(employees=[employee(1), employee(2)])
    w.attendance_service.clock_in(1, now=utc(MONDAY, 9, 0))
    w.scheduler.tick(utc(MONDAY, 18, 30))
    request = next(iter(w.overtime.requests.values()))
    return w, request


def test_confirm_keeps_employee_clocked_in():
    w, request = _prompted_world()

    response = w.overtime_service.respond(1, request.request_id, is_working_overtime=True, now=utc(MONDAY, 18, 40))

    assert response.record is None
    assert response.effects == ()
    assert response.request.status == OvertimeStatus.CONFIRMED
    assert response.request.responded_at == utc(MONDAY, 18, 40)
    assert w.attendance.get_by_id(request.attendance_id).is_open


def test_confirmed_overtime_is_counted_at_clock_out():
    w, request = _prompted_world()
    w.overtime_service.respond(1, request.request_id, is_working_overtime=True, now=utc(MONDAY, 18, 40))

    record = w.attendance_service.clock_out(1, now=utc(MONDAY, 19, 30)).record

    assert record.overtime_hours == 1.5
    assert w.overtime.get_by_id(request.request_id).status == OvertimeStatus.MANUAL_CHECKOUT


def test_decline_clocks_out_now():
    w, request = _prompted_world()

    response = w.overtime_service.respond(1, request.request_id, is_working_overtime=False, now=utc(MONDAY, 18, 40))

    assert response.request.status == OvertimeStatus.MANUAL_CHECKOUT
    assert response.record.check_out == utc(MONDAY, 18, 40)
    assert response.record.check_out_status == CheckOutStatus.ON_TIME
    assert response.record.status == AttendanceStatus.PRESENT
    assert response.record.remarks == "Clocked out from overtime prompt"
    assert isinstance(response.effects[0], ActivityEntry)


def test_answering_twice_is_rejected():
    w, request = _prompted_world()
    w.overtime_service.respond(1, request.request_id, is_working_overtime=True, now=utc(MONDAY, 18, 40))

    with pytest.raises(ValidationError):
        w.overtime_service.respond(1, request.request_id, is_working_overtime=False, now=utc(MONDAY, 18, 45))


def test_other_employees_request_is_not_found():
    w, request = _prompted_world()

    with pytest.raises(RecordNotFound):
        w.overtime_service.respond(2, request.request_id, is_working_overtime=True, now=utc(MONDAY, 18, 40))
    with pytest.raises(RecordNotFound):
        w.overtime_service.respond(1, 999, is_working_overtime=True, now=utc(MONDAY, 18, 40))


def test_list_defaults_to_pending():
    w, request = _prompted_world()

    assert [r.request_id for r in w.overtime_service.list_for_employee(1)] == [request.request_id]

    w.overtime_service.respond(1, request.request_id, is_working_overtime=True, now=utc(MONDAY, 18, 40))

    assert w.overtime_service.list_for_employee(1) == []
    assert len(w.overtime_service.list_for_employee(1, status=None)) == 1
