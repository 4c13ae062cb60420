"""
Non-blocking user notifications ("toasts") raised by the board.
"""
import enum
import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional

logger = logging.getLogger(__name__)

# Most recent notifications kept for of_kind(); the sink sees every one
HISTORY_SIZE = 50


class NotificationKind(str, enum.Enum):
    FETCH_FAILED = "fetch_failed"
    MOVE_FAILED = "move_failed"
    MOVED = "moved"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str
    description: str = ""
    variant: str = "default"  # "default" or "destructive"


class Notifier:
    """
    Collects notifications and forwards them to an optional sink (the UI).

    A failing sink is logged and otherwise ignored so a broken toast never
    takes the board down with it.
    """

    def __init__(
        self,
        sink: Optional[Callable[[Notification], None]] = None,
        history_size: int = HISTORY_SIZE,
    ):
        self.sink = sink
        self.history: Deque[Notification] = deque(maxlen=history_size)

    def notify(self, notification: Notification) -> None:
        self.history.append(notification)
        if notification.variant == "destructive":
            logger.warning(f"{notification.title}: {notification.description}")
        else:
            logger.info(f"{notification.title}: {notification.description}")

        if self.sink is not None:
            try:
                self.sink(notification)
            except Exception as e:
                logger.error(f"Notification sink failed: {e}", exc_info=True)

    def error(self, kind: NotificationKind, title: str, description: str = "") -> None:
        self.notify(Notification(kind=kind, title=title, description=description, variant="destructive"))

    def of_kind(self, kind: NotificationKind) -> List[Notification]:
        return [n for n in self.history if n.kind == kind]
