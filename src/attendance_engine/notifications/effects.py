from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

from .gateway import ActivityLogger, EmailSender, NotificationSender

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushNotification:
    user_id: int
    title: str
    body: str
    event_type: str
    data: Mapping[str, Any] = field(default_factory=dict)
    priority: str = "normal"


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    text: str


@dataclass(frozen=True)
class ActivityEntry:
    employee_id: int
    type: str
    action: str
    details: str
    related_id: Optional[int] = None


Effect = Union[PushNotification, EmailMessage, ActivityEntry]


class EffectDispatcher:
    """Runs best-effort side effects.

    Every effect is attempted independently; failures are logged and never
    raised back to the attendance transition that produced them.
    """

    def __init__(self, notifier: NotificationSender, mailer: EmailSender, activity: ActivityLogger):
        self._notifier = notifier
        self._mailer = mailer
        self._activity = activity

    def dispatch(self, effects: Iterable[Effect]) -> int:
        delivered = 0
        for effect in effects:
            try:
                self._run(effect)
                delivered += 1
            except Exception:
                logger.exception("Side effect %s failed", type(effect).__name__)
        return delivered

    def _run(self, effect: Effect) -> None:
        if isinstance(effect, PushNotification):
            self._notifier.send_notification(
                effect.user_id,
                effect.title,
                effect.body,
                event_type=effect.event_type,
                data={**effect.data, "priority": effect.priority},
            )
        elif isinstance(effect, EmailMessage):
            self._mailer.send_email(effect.to, effect.subject, effect.text)
        elif isinstance(effect, ActivityEntry):
            self._activity.log_activity(
                effect.employee_id,
                effect.type,
                effect.action,
                effect.details,
                related_id=effect.related_id,
            )
        else:
            raise TypeError(f"Unsupported effect: {effect!r}")
