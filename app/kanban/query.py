"""
Query construction for Kanban columns.

One request descriptor per column: the column's stage and page plus the
search and sort shared by the whole board.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from app.core.config import KANBAN_PAGE_SIZE
from app.db.models.application import ApplicationStatus

STAGES = tuple(ApplicationStatus)
PAGE_SIZE = KANBAN_PAGE_SIZE

SORT_ASC = "asc"
SORT_DESC = "desc"


class InvalidQueryError(ValueError):
    """Raised for a stage, page or page size a column query cannot use."""


@dataclass(frozen=True)
class SortConfig:
    """Board-wide sort. `field=None` means the server default ordering."""
    field: Optional[str] = None
    order: str = SORT_DESC


def toggle_sort(current: SortConfig, field: str) -> SortConfig:
    """
    Next sort after the user picks `field`.

    Picking the active field again flips the direction; picking a different
    field starts it descending.
    """
    if current.field == field:
        return SortConfig(field=field, order=SORT_ASC if current.order == SORT_DESC else SORT_DESC)
    return SortConfig(field=field, order=SORT_DESC)


def coerce_stage(stage: Union[ApplicationStatus, str]) -> ApplicationStatus:
    try:
        return ApplicationStatus(stage)
    except ValueError:
        raise InvalidQueryError(f"Unknown stage: {stage!r}") from None


def build_column_query(
    stage: Union[ApplicationStatus, str],
    page: int,
    page_size: int = PAGE_SIZE,
    search: str = "",
    sort: Optional[SortConfig] = None,
) -> Dict[str, Any]:
    """
    Build the list-request parameters for one column.

    `status`, `page` and `limit` are always present. `search` is included only
    when it is non-blank and `sortBy`/`sortOrder` only when a sort field is set.

    Raises:
        InvalidQueryError: For an unknown stage, page < 1 or page_size < 1
    """
    stage = coerce_stage(stage)
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise InvalidQueryError(f"Page must be a positive integer, got {page!r}")
    if page_size < 1:
        raise InvalidQueryError(f"Page size must be positive, got {page_size!r}")

    params: Dict[str, Any] = {
        "status": stage.value,
        "page": page,
        "limit": page_size,
    }

    search = (search or "").strip()
    if search:
        params["search"] = search

    if sort is not None and sort.field:
        params["sortBy"] = sort.field
        params["sortOrder"] = sort.order

    return params
