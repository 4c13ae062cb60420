"""
Drag-and-drop stage changes on the Kanban board.

A drop only changes what the board shows after the server has confirmed the
new status and the affected columns have been re-fetched. Nothing is moved
locally, so a failed or interrupted move cannot leave a card in two columns
or in none.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from app.db.models.application import ApplicationStatus
from app.kanban.board import KanbanBoard
from app.kanban.notifications import Notification, NotificationKind, Notifier
from app.kanban.query import coerce_stage
from app.kanban.repository import ApplicationRepository, RepositoryError

logger = logging.getLogger(__name__)

PAYLOAD_KEY = "applicationId"


class DropOutcome(str, enum.Enum):
    IGNORED = "ignored"      # payload was not an application id
    UNCHANGED = "unchanged"  # dropped on the column it already sits in
    MOVED = "moved"
    REJECTED = "rejected"    # the server refused or the request failed


@dataclass
class DragPayload:
    """Stand-in for the browser's DataTransfer: string keys to string values."""
    data: Dict[str, str] = field(default_factory=dict)

    def set_data(self, key: str, value: str) -> None:
        self.data[key] = value

    def get_data(self, key: str) -> str:
        return self.data.get(key, "")


def parse_application_id(payload: Union[DragPayload, str, None]) -> Optional[int]:
    """Application id carried by a drag payload, or None if there isn't one."""
    raw = payload.get_data(PAYLOAD_KEY) if isinstance(payload, DragPayload) else payload
    if not isinstance(raw, str):
        return None
    try:
        application_id = int(raw.strip())
    except ValueError:
        return None
    return application_id if application_id > 0 else None


class DragDropController:
    def __init__(
        self,
        board: KanbanBoard,
        repository: Optional[ApplicationRepository] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.board = board
        self.repository = repository or board.repository
        self.notifier = notifier or board.notifier

    def on_drag_start(self, application_id: int, payload: Optional[DragPayload] = None) -> DragPayload:
        payload = payload if payload is not None else DragPayload()
        payload.set_data(PAYLOAD_KEY, str(application_id))
        return payload

    async def on_drop(
        self,
        payload: Union[DragPayload, str, None],
        target_stage: Union[ApplicationStatus, str],
    ) -> DropOutcome:
        """
        Move the dragged application to `target_stage`.

        Drops that don't carry an application id come from some other drag
        source and are ignored without a notification.
        """
        target = coerce_stage(target_stage)
        application_id = parse_application_id(payload)
        if application_id is None:
            logger.debug("Ignoring drop without an application id")
            return DropOutcome.IGNORED

        source = self.board.locate(application_id)
        if source == target:
            return DropOutcome.UNCHANGED

        try:
            updated = await self.repository.update_status(application_id, target)
        except RepositoryError as e:
            logger.warning(f"Move of application {application_id} to {target.value} rejected: {e.message}")
            self.notifier.error(
                NotificationKind.MOVE_FAILED,
                title="Could not move application",
                description=f"The application stays in {source.label if source else 'its current column'}: {e.message}",
            )
            return DropOutcome.REJECTED

        logger.info(f"Application {application_id} moved {source.value if source else '?'} -> {target.value}")

        # Source unknown (card not on a displayed page): every column may have changed
        stages = [source, target] if source is not None else None
        await self.board.refresh(stages)

        self.notifier.notify(
            Notification(
                kind=NotificationKind.MOVED,
                title="Application moved",
                description=f"{updated.company} moved to {target.label}",
            )
        )
        return DropOutcome.MOVED
