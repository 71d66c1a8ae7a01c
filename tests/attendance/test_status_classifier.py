from attendance_engine.attendance.classifier import STATUS_RANK, StatusClassifier
from attendance_engine.core.enums import AttendanceStatus


def _classify(hours, full=8.0, half=4.0):
    return StatusClassifier().classify(hours, full_day_hours=full, half_day_hours=half)


def test_present_at_ninety_percent_of_full_day():
    result = _classify(7.3)

    assert result.status == AttendanceStatus.PRESENT
    assert result.reason == "Worked 7.30 hours (>=7.2h threshold for full day)"


def test_half_day_between_thresholds():
    result = _classify(5.0)

    assert result.status == AttendanceStatus.HALF_DAY
    assert "half-day threshold" in result.reason


def test_absent_below_half_day():
    result = _classify(3.9)

    assert result.status == AttendanceStatus.ABSENT
    assert result.reason == "Worked only 3.90 hours (<4h half-day threshold)"


def test_thresholds_are_inclusive():
    assert _classify(7.2).status == AttendanceStatus.PRESENT
    assert _classify(4.0).status == AttendanceStatus.HALF_DAY


def test_custom_full_day_hours():
    assert _classify(8.1, full=9.0, half=4.5).status == AttendanceStatus.PRESENT
    assert _classify(8.0, full=9.0, half=4.5).status == AttendanceStatus.HALF_DAY


def test_more_hours_never_lowers_the_status():
    ranks = [STATUS_RANK[_classify(h / 4).status] for h in range(0, 48)]

    assert ranks == sorted(ranks)
