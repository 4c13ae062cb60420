"""
Client side of the application list / status update API.

`ApplicationRepository` is what the board talks to; `HttpApplicationRepository`
binds it to the JAMS HTTP API with httpx.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

import httpx
from pydantic import ValidationError

from app.core.config import JAMS_API_URL
from app.core.logging_config import sanitize_log_data
from app.db.models.application import ApplicationStatus
from app.schemas.application import ApplicationResponse

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """A list or update request failed (network error, non-2xx, bad payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class ColumnResult:
    """One fetched page of a column. Replaced as a whole, never edited."""
    applications: Tuple[ApplicationResponse, ...] = ()
    total_pages: int = 0
    total_items: int = 0

    def contains(self, application_id: int) -> bool:
        return any(app.id == application_id for app in self.applications)


class ApplicationRepository(ABC):
    """Operations the Kanban board needs from the application store."""

    @abstractmethod
    async def list_applications(self, params: Dict[str, Any]) -> ColumnResult:
        """
        Fetch one page of applications.

        Args:
            params: Descriptor from build_column_query

        Raises:
            RepositoryError: If the request fails
        """

    @abstractmethod
    async def update_status(
        self, application_id: int, stage: ApplicationStatus
    ) -> ApplicationResponse:
        """
        Move an application to `stage`.

        Raises:
            RepositoryError: If the update is rejected or the request fails
        """


def parse_list_payload(payload: Dict[str, Any]) -> ColumnResult:
    try:
        return ColumnResult(
            applications=tuple(ApplicationResponse.model_validate(item) for item in payload["applications"]),
            total_pages=int(payload["totalPages"]),
            total_items=int(payload["totalItems"]),
        )
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise RepositoryError(f"Malformed application list response: {e}") from e


class HttpApplicationRepository(ApplicationRepository):
    """ApplicationRepository over the JAMS REST API."""

    def __init__(
        self,
        base_url: str = JAMS_API_URL,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self.client.headers.update(headers)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        logger.debug(
            f"{method} {url} params={sanitize_log_data(kwargs.get('params') or {})} "
            f"headers={sanitize_log_data(dict(self.client.headers))}"
        )
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise RepositoryError(f"Request failed: {e}") from e

        if response.is_error:
            detail = _error_detail(response)
            logger.warning(f"{method} {url} returned {response.status_code}: {detail}")
            raise RepositoryError(detail, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise RepositoryError("Response was not valid JSON", status_code=response.status_code) from e

    async def list_applications(self, params: Dict[str, Any]) -> ColumnResult:
        payload = await self._request("GET", "/applications", params=params)
        return parse_list_payload(payload)

    async def update_status(
        self, application_id: int, stage: Union[ApplicationStatus, str]
    ) -> ApplicationResponse:
        stage = ApplicationStatus(stage)
        payload = await self._request(
            "PATCH", f"/applications/{application_id}", json={"status": stage.value}
        )
        try:
            return ApplicationResponse.model_validate(payload)
        except ValidationError as e:
            raise RepositoryError(f"Malformed application response: {e}") from e


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    if isinstance(detail, str):
        return detail
    return f"HTTP {response.status_code}"
