from datetime import time

import pytest

from attendance_engine.attendance.calculator.shrinkage_calculator import ShrinkageCalculator
from attendance_engine.settings.model import BreakWindow

from fakes import LUNCH, MONDAY, SATURDAY, utc


def test_full_day_with_lunch_inside():
    hours = ShrinkageCalculator().calculate(utc(MONDAY, 8, 30), utc(MONDAY, 17, 30), [LUNCH], "UTC")

    assert hours.total_logged_hours == 9.0
    assert hours.break_minutes == 30
    assert hours.effective_work_hours == 8.5
    assert hours.shrinkage_percentage == 5.56


def test_partial_break_overlap_counts_only_the_overlap():
    hours = ShrinkageCalculator().calculate(utc(MONDAY, 9, 0), utc(MONDAY, 13, 15), [LUNCH], "UTC")

    assert hours.break_minutes == 15
    assert hours.total_logged_hours == 4.25
    assert hours.effective_work_hours == 4.0


def test_zero_length_interval_is_all_zero():
    hours = ShrinkageCalculator().calculate(utc(MONDAY, 9, 0), utc(MONDAY, 9, 0), [LUNCH], "UTC")

    assert hours.total_logged_hours == 0.0
    assert hours.effective_work_hours == 0.0
    assert hours.shrinkage_percentage == 0.0


def test_whole_interval_inside_a_break_is_fully_shrunk():
    hours = ShrinkageCalculator().calculate(utc(MONDAY, 13, 5), utc(MONDAY, 13, 20), [LUNCH], "UTC")

    assert hours.effective_work_hours == 0.0
    assert hours.shrinkage_percentage == 100.0


def test_breaks_for_other_weekdays_are_ignored():
    friday_tea = BreakWindow(name="Tea", start_time=time(16, 0), end_time=time(16, 15), days=("Friday",))

    hours = ShrinkageCalculator().calculate(utc(MONDAY, 9, 0), utc(MONDAY, 18, 0), [LUNCH, friday_tea], "UTC")

    assert hours.break_minutes == 30


def test_inactive_breaks_are_ignored():
    inactive = BreakWindow(name="Lunch", start_time=time(13, 0), end_time=time(13, 30), is_active=False)

    hours = ShrinkageCalculator().calculate(utc(SATURDAY, 9, 0), utc(SATURDAY, 18, 0), [inactive], "UTC")

    assert hours.break_minutes == 0
    assert hours.effective_work_hours == 9.0


def test_breaks_follow_company_timezone():
    # 13:00-13:30 in Kolkata is 07:30-08:00 UTC.
    hours = ShrinkageCalculator().calculate(utc(MONDAY, 3, 30), utc(MONDAY, 12, 30), [LUNCH], "Asia/Kolkata")

    assert hours.break_minutes == 30
    assert hours.effective_work_hours == 8.5


@pytest.mark.parametrize(
    "start, end",
    [((8, 0), (12, 0)), ((12, 50), (13, 10)), ((13, 0), (13, 30)), ((9, 0), (23, 59)), ((14, 0), (14, 1))],
)
def test_effective_hours_never_exceed_logged(start, end):
    hours = ShrinkageCalculator().calculate(utc(MONDAY, *start), utc(MONDAY, *end), [LUNCH], "UTC")

    assert hours.total_logged_hours >= 0
    assert hours.effective_work_hours <= hours.total_logged_hours
    assert 0 <= hours.shrinkage_percentage <= 100
