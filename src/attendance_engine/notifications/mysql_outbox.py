from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.datetime_utils import now_utc
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, to_db_datetime
from .gateway import ActivityLogger, EmailSender, NotificationSender


class MySQLNotificationOutbox(NotificationSender):
    """Queues push notifications; a delivery worker drains notification_outbox."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def send_notification(
        self,
        user_id: int,
        title: str,
        body: str,
        *,
        event_type: str,
        data: Optional[Mapping[str, Any]] = None,
    ) -> None:
        payload = dict(data or {})
        priority = str(payload.pop("priority", "normal"))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notification_outbox(user_id, title, body, event_type, priority, data, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), title, body, event_type, priority, dump_json(payload), to_db_datetime(now_utc())),
            )


class MySQLEmailOutbox(EmailSender):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def send_email(self, to: str, subject: str, text: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO email_outbox(recipient, subject, body, created_at) VALUES(%s,%s,%s,%s)",
                (to, subject, text, to_db_datetime(now_utc())),
            )


class MySQLActivityLogger(ActivityLogger):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def log_activity(
        self,
        employee_id: int,
        type: str,
        action: str,
        details: str,
        *,
        related_id: Optional[int] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activity_logs(employee_id, type, action, details, related_id, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), type, action, details, related_id, to_db_datetime(now_utc())),
            )
