"""
Kanban board client: paginated per-stage columns over the JAMS API and
drag-and-drop stage changes.
"""
from app.kanban.board import ColumnView, KanbanBoard, SKELETON_CARDS
from app.kanban.drag import DragDropController, DragPayload, DropOutcome
from app.kanban.notifications import Notification, NotificationKind, Notifier
from app.kanban.query import PAGE_SIZE, STAGES, InvalidQueryError, SortConfig, build_column_query, toggle_sort
from app.kanban.repository import (
    ApplicationRepository,
    ColumnResult,
    HttpApplicationRepository,
    RepositoryError,
)
from app.kanban.store import ColumnSnapshot, ColumnStore

__all__ = [
    "ApplicationRepository",
    "ColumnResult",
    "ColumnSnapshot",
    "ColumnStore",
    "ColumnView",
    "DragDropController",
    "DragPayload",
    "DropOutcome",
    "HttpApplicationRepository",
    "InvalidQueryError",
    "KanbanBoard",
    "Notification",
    "NotificationKind",
    "Notifier",
    "PAGE_SIZE",
    "SKELETON_CARDS",
    "STAGES",
    "RepositoryError",
    "SortConfig",
    "build_column_query",
    "toggle_sort",
]
