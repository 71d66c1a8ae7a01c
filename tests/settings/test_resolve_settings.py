from datetime import time

from attendance_engine.settings.model import CompanyOverrides, CompanySettings, GeofenceConfig
from attendance_engine.settings.resolver import resolve_settings
from attendance_engine.settings.service import SettingsService

from fakes import MONDAY, SATURDAY, InMemorySettingsRepo, employee, utc


def test_defaults_without_overrides():
    settings = resolve_settings(CompanySettings())

    assert settings.company_id is None
    assert settings.check_in_time == time(9, 0)
    assert settings.check_out_time == time(18, 0)
    assert settings.late_threshold_minutes == 15
    assert settings.full_day_hours == 8.0
    assert settings.timezone == "Asia/Kolkata"
    assert settings.is_working_day(MONDAY)
    assert not settings.is_working_day(SATURDAY)


def test_overrides_win_field_by_field():
    overrides = CompanyOverrides(company_id=5, check_in_time=time(10, 0), working_days=("Saturday",))

    settings = resolve_settings(CompanySettings(late_threshold_minutes=5), overrides)

    assert settings.company_id == 5
    assert settings.check_in_time == time(10, 0)
    assert settings.check_out_time == time(18, 0)
    assert settings.late_threshold_minutes == 5
    assert settings.is_working_day(SATURDAY)
    assert not settings.is_working_day(MONDAY)


def test_falsy_override_values_still_apply():
    overrides = CompanyOverrides(company_id=5, late_threshold_minutes=0, break_timings=())

    settings = resolve_settings(CompanySettings(late_threshold_minutes=15), overrides)

    assert settings.late_threshold_minutes == 0
    assert settings.break_timings == ()


def test_derived_instants_use_company_timezone():
    settings = resolve_settings(CompanySettings(timezone="Asia/Kolkata"))

    assert settings.start_at(MONDAY) == utc(MONDAY, 3, 30)
    assert settings.late_after(MONDAY) == utc(MONDAY, 3, 45)
    assert settings.absent_after(MONDAY) == utc(MONDAY, 4, 30)
    assert settings.today(utc(MONDAY, 20, 0)).isoformat() == "2025-01-07"


def test_service_resolves_per_employee_and_lists_contexts():
    geofence = GeofenceConfig(enabled=True)
    repo = InMemorySettingsRepo(CompanySettings(), [CompanyOverrides(company_id=5, geofence=geofence)])
    service = SettingsService(repo)

    assert service.for_employee(employee(1)).geofence.enabled is False
    assert service.for_employee(employee(2, company_id=5)).geofence.enabled is True
    assert service.for_employee(employee(3, company_id=6)).company_id is None
    assert [c.company_id for c in service.list_contexts()] == [None, 5]
