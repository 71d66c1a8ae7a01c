from datetime import date

import pytest

from attendance_engine.core.enums import AttendanceStatus, CorrectionStatus, CorrectionType
from attendance_engine.core.exceptions import AuthorizationError, RecordNotFound, ValidationError

from fakes import MONDAY, build_world, manager_and_report, utc

TUESDAY = date(2025, 1, 7)


def _world():
    return build_world(employees=manager_and_report())


def _submit(w, **kwargs):
    values = dict(
        work_date=MONDAY,
        correction_type=CorrectionType.MISSING_ENTRY,
        reason="Forgot to clock in",
        requested_check_in="09:00",
        requested_check_out="18:00",
        now=utc(TUESDAY, 10, 0),
    )
    values.update(kwargs)
    return w.correction_service.submit(2, **values)


def test_missing_entry_creates_manual_placeholder():
    w = _world()

    correction = _submit(w)

    record = w.attendance.get_by_id(correction.attendance_id)
    assert correction.status == CorrectionStatus.PENDING
    assert correction.requested_check_in == utc(MONDAY, 9, 0)
    assert record.status == AttendanceStatus.ABSENT
    assert record.is_manual_entry is True


def test_wrong_time_needs_an_existing_record():
    w = _world()

    with pytest.raises(RecordNotFound):
        _submit(w, correction_type=CorrectionType.WRONG_TIME)


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(reason="   "),
        dict(work_date=date(2025, 1, 8)),
        dict(requested_check_in=None, requested_check_out=None),
        dict(requested_check_in="18:00", requested_check_out="09:00"),
        dict(requested_check_in=None, requested_check_out=None, requested_status="in-progress"),
        dict(requested_check_in="9am"),
    ],
)
def test_invalid_submissions_are_rejected(kwargs):
    w = _world()

    with pytest.raises(ValidationError):
        _submit(w, **kwargs)


def test_only_one_pending_correction_per_day():
    w = _world()
    _submit(w)

    with pytest.raises(ValidationError):
        _submit(w, correction_type=CorrectionType.WRONG_TIME)


def test_manager_approval_recomputes_the_day():
    w = _world()
    correction = _submit(w)

    record = w.correction_service.approve(1, correction.correction_id, comments="ok", now=utc(TUESDAY, 12, 0))

    assert record.status == AttendanceStatus.PRESENT
    assert record.work_hours == 8.5
    assert record.break_minutes == 30
    assert record.check_out == utc(MONDAY, 18, 0)
    assert record.remarks == "Corrected on 2025-01-07 - Forgot to clock in"
    decided = w.corrections.get_by_id(correction.correction_id)
    assert decided.status == CorrectionStatus.APPROVED
    assert decided.reviewed_by == 1
    assert decided.reviewer_comments == "ok"


def test_requested_status_wins():
    w = _world()
    w.attendance_service.clock_in(2, now=utc(MONDAY, 9, 0))
    w.attendance_service.clock_out(2, now=utc(MONDAY, 12, 0))
    correction = _submit(
        w,
        correction_type=CorrectionType.STATUS,
        requested_check_in=None,
        requested_check_out=None,
        requested_status="present",
    )

    record = w.correction_service.approve(3, correction.correction_id, now=utc(TUESDAY, 12, 0))

    assert record.status == AttendanceStatus.PRESENT
    assert record.status_reason == "Set to present by approved correction"


def test_unrelated_employee_cannot_review():
    w = _world()
    correction = _submit(w)

    with pytest.raises(AuthorizationError):
        w.correction_service.approve(4, correction.correction_id, now=utc(TUESDAY, 12, 0))
    with pytest.raises(AuthorizationError):
        w.correction_service.reject(2, correction.correction_id, now=utc(TUESDAY, 12, 0))


def test_reject_then_decide_again_fails():
    w = _world()
    correction = _submit(w)
    w.correction_service.reject(3, correction.correction_id, comments="No evidence", now=utc(TUESDAY, 12, 0))

    assert w.corrections.get_by_id(correction.correction_id).status == CorrectionStatus.REJECTED
    with pytest.raises(ValidationError):
        w.correction_service.approve(3, correction.correction_id, now=utc(TUESDAY, 13, 0))


def test_pending_list_is_scoped_to_reviewer():
    w = _world()
    correction = _submit(w)

    assert [c.correction_id for c in w.correction_service.list_pending(1)] == [correction.correction_id]
    assert [c.correction_id for c in w.correction_service.list_pending(3)] == [correction.correction_id]
    assert w.correction_service.list_pending(4) == []
    assert len(w.correction_service.list_for_employee(2)) == 1
