"""
Per-column state: the latest page of applications fetched for one stage.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Union

from app.db.models.application import ApplicationStatus
from app.kanban.notifications import Notifier, NotificationKind
from app.kanban.query import PAGE_SIZE, SortConfig, build_column_query, coerce_stage
from app.kanban.repository import ApplicationRepository, ColumnResult, RepositoryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnSnapshot:
    """What a column displays. Page and result always change together."""
    page: int
    result: ColumnResult
    seq: int = 0


class ColumnStore:
    """
    Holds the displayed page of one stage and fetches new ones.

    Every fetch is stamped with a sequence number. A response is applied only
    if its number is higher than that of the snapshot on display, so a slow
    response for an older request can never overwrite a newer one.
    """

    def __init__(
        self,
        stage: Union[ApplicationStatus, str],
        repository: ApplicationRepository,
        notifier: Notifier,
        page_size: int = PAGE_SIZE,
    ):
        self.stage = coerce_stage(stage)
        self.repository = repository
        self.notifier = notifier
        self.page_size = page_size

        # Requested page (the column's query state); may run ahead of the snapshot
        self.page = 1
        self.snapshot = ColumnSnapshot(page=1, result=ColumnResult())
        self.settled = False
        # Message of the newest request's failure, cleared by the next success
        self.error: Optional[str] = None
        self._issued_seq = 0
        # Highest sequence that has decided what the column shows, by success or failure
        self._resolved_seq = 0
        self._in_flight = 0

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @property
    def loaded(self) -> bool:
        return self.snapshot.seq > 0

    @property
    def result(self) -> ColumnResult:
        return self.snapshot.result

    async def fetch_page(
        self,
        page: int,
        search: str = "",
        sort: Optional[SortConfig] = None,
    ) -> bool:
        """
        Fetch `page` and display it if no newer response got there first.

        Returns:
            True if the response was applied, False if the request failed or
            its response was stale.
        """
        params = build_column_query(self.stage, page, self.page_size, search, sort)

        self._issued_seq += 1
        seq = self._issued_seq
        self.page = page
        self._in_flight += 1

        try:
            result = await self.repository.list_applications(params)
        except RepositoryError as e:
            self._on_failure(seq, page, e)
            return False
        finally:
            self._in_flight -= 1
            self.settled = True

        if seq <= self._resolved_seq:
            logger.debug(f"Discarding stale {self.stage.value} page {page} (seq={seq}, resolved={self._resolved_seq})")
            return False

        self._resolved_seq = seq
        self.snapshot = ColumnSnapshot(page=page, result=result, seq=seq)
        self.error = None
        logger.debug(
            f"Column {self.stage.value}: page {page}/{result.total_pages}, "
            f"{len(result.applications)} of {result.total_items} applications"
        )
        return True

    def _on_failure(self, seq: int, page: int, error: RepositoryError) -> None:
        if seq != self._issued_seq:
            # A newer request for this column is already out; it decides what is shown
            logger.debug(f"Ignoring failure of superseded {self.stage.value} fetch: {error}")
            return

        # Older requests still in flight must not replace what this failure kept on screen
        self._resolved_seq = seq
        self.page = self.snapshot.page
        self.error = error.message
        self.notifier.error(
            NotificationKind.FETCH_FAILED,
            title=f"Could not load {self.stage.label} applications",
            description=error.message,
        )
