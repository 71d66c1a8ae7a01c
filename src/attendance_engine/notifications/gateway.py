from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol


class NotificationSender(Protocol):
    def send_notification(
        self,
        user_id: int,
        title: str,
        body: str,
        *,
        event_type: str,
        data: Optional[Mapping[str, Any]] = None,
    ) -> None:
        raise NotImplementedError


class EmailSender(Protocol):
    def send_email(self, to: str, subject: str, text: str) -> None:
        raise NotImplementedError


class ActivityLogger(Protocol):
    def log_activity(
        self,
        employee_id: int,
        type: str,
        action: str,
        details: str,
        *,
        related_id: Optional[int] = None,
    ) -> None:
        raise NotImplementedError
