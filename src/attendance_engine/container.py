from __future__ import annotations

from dataclasses import dataclass

from .attendance.evaluation import WorkdayEvaluator
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .corrections.mysql_correction_repository import MySQLCorrectionRepository
from .corrections.service import CorrectionService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .geofence.mysql_geofence_repository import MySQLGeofenceRepository
from .notifications.effects import EffectDispatcher
from .notifications.mysql_outbox import MySQLActivityLogger, MySQLEmailOutbox, MySQLNotificationOutbox
from .overtime.mysql_overtime_repository import MySQLOvertimeRepository
from .overtime.service import OvertimeService
from .scheduler.service import NotificationScheduler
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.service import SettingsService
from .workcalendar.mysql_calendar_repository import MySQLHolidayRepository, MySQLLeaveRepository


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    employees_repo: EmployeeRepository

    settings_service: SettingsService
    attendance_service: AttendanceService
    overtime_service: OvertimeService
    correction_service: CorrectionService
    scheduler: NotificationScheduler
    dispatcher: EffectDispatcher


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    attendance_repo = MySQLAttendanceRepository(conn)
    employees_repo = MySQLEmployeeRepository(conn)
    settings_repo = MySQLSettingsRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)
    geofence_repo = MySQLGeofenceRepository(conn)
    overtime_repo = MySQLOvertimeRepository(conn)
    corrections_repo = MySQLCorrectionRepository(conn)

    dispatcher = EffectDispatcher(
        MySQLNotificationOutbox(conn),
        MySQLEmailOutbox(conn),
        MySQLActivityLogger(conn),
    )

    factory = AttendanceStrategyFactory()
    evaluator = WorkdayEvaluator()
    settings_service = SettingsService(settings_repo)

    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        settings_service,
        leaves_repo,
        holidays_repo,
        geofence_repo,
        overtime_repo,
        strategy_factory=factory,
        evaluator=evaluator,
    )
    overtime_service = OvertimeService(
        overtime_repo,
        attendance_repo,
        employees_repo,
        settings_service,
        strategy_factory=factory,
        evaluator=evaluator,
    )
    correction_service = CorrectionService(
        corrections_repo,
        attendance_repo,
        employees_repo,
        settings_service,
        evaluator=evaluator,
    )
    scheduler = NotificationScheduler(
        attendance_repo,
        employees_repo,
        settings_service,
        leaves_repo,
        holidays_repo,
        overtime_repo,
        dispatcher,
        evaluator=evaluator,
    )

    return Container(
        attendance_repo=attendance_repo,
        employees_repo=employees_repo,
        settings_service=settings_service,
        attendance_service=attendance_service,
        overtime_service=overtime_service,
        correction_service=correction_service,
        scheduler=scheduler,
        dispatcher=dispatcher,
    )
