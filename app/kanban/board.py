"""
Kanban board controller.

Owns one ColumnStore per stage plus the search and sort every column shares.
Any change to search or sort is turned into one independent fetch per column;
columns never wait on each other.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from app.db.models.application import ApplicationStatus
from app.kanban.notifications import Notifier
from app.kanban.query import PAGE_SIZE, STAGES, SortConfig, coerce_stage, toggle_sort
from app.kanban.repository import ApplicationRepository
from app.kanban.store import ColumnStore
from app.schemas.application import ApplicationResponse

logger = logging.getLogger(__name__)

# Placeholder cards per column while the first page is loading
SKELETON_CARDS = 2


@dataclass(frozen=True)
class ColumnView:
    """Render model for one column."""
    stage: ApplicationStatus
    title: str
    page: int
    total_pages: int
    total_items: int
    applications: Tuple[ApplicationResponse, ...]
    skeleton: bool
    loading: bool
    loaded: bool = False
    error: Optional[str] = None

    @property
    def skeleton_cards(self) -> int:
        return SKELETON_CARDS if self.skeleton else 0

    @property
    def empty(self) -> bool:
        """
        True when the empty-state placeholder should be shown.

        Only a fetch that succeeded with no matches counts; a column whose
        first load failed shows its error instead.
        """
        return self.loaded and not self.applications


class KanbanBoard:
    """
    Drives the four pipeline columns.

    Args:
        repository: Where applications are listed from
        notifier: Receives fetch failures
        page_size: Applications per column page
        reset_page_on_filter: Send every column back to page 1 when search or
            sort changes. Keeping the current page can point past the end of a
            smaller filtered set, so this defaults to True.
    """

    def __init__(
        self,
        repository: ApplicationRepository,
        notifier: Optional[Notifier] = None,
        page_size: int = PAGE_SIZE,
        reset_page_on_filter: bool = True,
    ):
        self.repository = repository
        self.notifier = notifier or Notifier()
        self.page_size = page_size
        self.reset_page_on_filter = reset_page_on_filter

        self.search_query = ""
        self.sort = SortConfig()
        self.stores: Dict[ApplicationStatus, ColumnStore] = {
            stage: ColumnStore(stage, repository, self.notifier, page_size=page_size)
            for stage in STAGES
        }

    def store(self, stage: Union[ApplicationStatus, str]) -> ColumnStore:
        return self.stores[coerce_stage(stage)]

    def page_for(self, stage: Union[ApplicationStatus, str]) -> int:
        return self.store(stage).page

    async def fetch_page(self, stage: Union[ApplicationStatus, str], page: int) -> bool:
        """Fetch `page` of one column with the board's current search and sort."""
        return await self.store(stage).fetch_page(page, self.search_query, self.sort)

    async def mount(self) -> None:
        """Initial load: page 1 of every column."""
        logger.info("Mounting Kanban board")
        await self._fetch_all((stage, 1) for stage in STAGES)

    async def refresh(self, stages: Optional[Iterable[Union[ApplicationStatus, str]]] = None, reset_page: bool = False) -> None:
        """
        Re-fetch the given columns (all by default) concurrently.

        Each column keeps its current page unless `reset_page` is set.
        """
        targets = list(dict.fromkeys(coerce_stage(s) for s in (stages if stages is not None else STAGES)))
        await self._fetch_all(
            (stage, 1 if reset_page else self.stores[stage].page) for stage in targets
        )

        # Moving the last card off a page can leave a column past its end
        overshot = [
            stage for stage in targets
            if self.stores[stage].loaded
            and 0 < self.stores[stage].result.total_pages < self.stores[stage].snapshot.page
        ]
        if overshot:
            await self._fetch_all((stage, self.stores[stage].result.total_pages) for stage in overshot)

    async def set_search(self, query: str) -> None:
        query = (query or "").strip()
        if query == self.search_query:
            return
        self.search_query = query
        logger.debug(f"Board search changed to {query!r}")
        await self.refresh(reset_page=self.reset_page_on_filter)

    async def handle_sort(self, field: str) -> SortConfig:
        """
        Pick a sort field for every column.

        The same field again flips the direction; a new field starts descending.
        """
        self.sort = toggle_sort(self.sort, field)
        logger.debug(f"Board sort changed to {self.sort.field} {self.sort.order}")
        await self.refresh(reset_page=self.reset_page_on_filter)
        return self.sort

    async def handle_page_change(self, stage: Union[ApplicationStatus, str], page: int) -> bool:
        """Show another page of one column. Other columns are untouched."""
        return await self.fetch_page(stage, page)

    def locate(self, application_id: int) -> Optional[ApplicationStatus]:
        """Stage whose displayed page holds `application_id`, if any."""
        for stage, store in self.stores.items():
            if store.result.contains(application_id):
                return stage
        return None

    def columns(self) -> List[ColumnView]:
        views = []
        for stage in STAGES:
            store = self.stores[stage]
            snapshot = store.snapshot
            views.append(
                ColumnView(
                    stage=stage,
                    title=stage.label,
                    page=snapshot.page,
                    total_pages=snapshot.result.total_pages,
                    total_items=snapshot.result.total_items,
                    applications=snapshot.result.applications,
                    skeleton=not store.settled,
                    loading=store.loading,
                    loaded=store.loaded,
                    error=store.error,
                )
            )
        return views

    async def _fetch_all(self, requests: Iterable[Tuple[ApplicationStatus, int]]) -> None:
        # Search and sort are read here, at issue time; fetches never write them
        search, sort = self.search_query, self.sort
        await asyncio.gather(
            *(self.stores[stage].fetch_page(page, search, sort) for stage, page in requests)
        )
