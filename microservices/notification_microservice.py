import logging
from collections import deque
from typing import Callable, Deque, List

from schemas.notification_schemas import Notification, Severity

logger = logging.getLogger("cumall.notifications")

NotificationSink = Callable[[Notification], None]


class NotificationFeed:
    # keeps the latest notifications so the ui can poll them
    def __init__(self, maxlen: int = 50):
        self._items: Deque[Notification] = deque(maxlen=maxlen)

    def __call__(self, notification: Notification) -> None:
        self._items.append(notification)
        level = logging.WARNING if notification.severity == Severity.DESTRUCTIVE else logging.INFO
        logger.log(level, "%s: %s", notification.title, notification.description)

    def recent(self) -> List[Notification]:
        return list(self._items)


def notify(sink: NotificationSink, title: str, description: str, severity: Severity = Severity.DEFAULT):
    # fire and forget, a broken sink must not break the cart
    try:
        sink(Notification(title=title, description=description, severity=severity))
    except Exception:
        logger.exception("Notification sink failed for %r", title)
