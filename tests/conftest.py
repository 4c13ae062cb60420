"""
Pytest configuration and shared fixtures for JAMS tests.
"""
import asyncio
import math
from typing import Any, Dict, List, Optional, Set, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import models  # noqa: F401
from app.main import app
from app.db.base import Base
from app.db.models.application import Application, ApplicationStatus
from app.db.models.user import User
from app.db.session import get_db
from app.core.security import hash_password, create_access_token
from app.kanban.notifications import Notifier
from app.kanban.repository import ApplicationRepository, ColumnResult, HttpApplicationRepository, RepositoryError
from app.schemas.application import ApplicationResponse


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function", autouse=True)
def setup_db():
    """Create and drop tables for each test."""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session():
    """Provide a database session for tests."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def test_user(db_session):
    """Create a test user."""
    user = User(
        full_name="Test User",
        email="test@example.com",
        password_hash=hash_password("testpass123"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def other_user(db_session):
    """A second user whose applications must stay invisible to test_user."""
    user = User(
        full_name="Other User",
        email="other@example.com",
        password_hash=hash_password("otherpass123"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user_token(test_user):
    """Create JWT token for test user."""
    return create_access_token({"sub": test_user.email})


@pytest.fixture
def auth_headers(test_user_token):
    return {"Authorization": f"Bearer {test_user_token}"}


@pytest.fixture
def make_application(db_session):
    """Factory inserting applications straight into the database."""
    def _make(user, company="Acme", position="Engineer", status=ApplicationStatus.APPLIED, **kwargs):
        application = Application(
            user_id=user.id,
            company=company,
            position=position,
            status=ApplicationStatus(status).value,
            **kwargs,
        )
        db_session.add(application)
        db_session.commit()
        db_session.refresh(application)
        return application
    return _make


@pytest.fixture
def make_api_repository(test_user_token):
    """
    Factory for an HttpApplicationRepository wired to the app in-process.

    Must be called inside the running event loop of the test.
    """
    def _make(token: Optional[str] = test_user_token) -> HttpApplicationRepository:
        return HttpApplicationRepository(
            base_url="http://testserver",
            token=token,
            transport=httpx.ASGITransport(app=app),
        )
    return _make


class FakeApplicationRepository(ApplicationRepository):
    """
    In-memory ApplicationRepository that records every call.

    `hold(stage, page)` makes the next list call for that column wait until
    `release(stage, page)` is called, which lets tests finish requests out of
    order.
    """

    def __init__(self):
        self.applications: Dict[int, Dict[str, Any]] = {}
        self.list_calls: List[Dict[str, Any]] = []
        self.update_calls: List[Tuple[int, str]] = []
        self.failing_stages: Set[str] = set()
        self.fail_updates = False
        self._gates: Dict[Tuple[str, int], asyncio.Event] = {}
        self._next_id = 1

    def add(self, company="Acme", position="Engineer", status=ApplicationStatus.APPLIED) -> int:
        application_id = self._next_id
        self._next_id += 1
        self.applications[application_id] = {
            "id": application_id,
            "user_id": 1,
            "company": company,
            "position": position,
            "status": ApplicationStatus(status).value,
        }
        return application_id

    def add_many(self, count: int, status=ApplicationStatus.APPLIED, company_prefix="Company") -> List[int]:
        return [self.add(company=f"{company_prefix} {i:02d}", status=status) for i in range(1, count + 1)]

    def hold(self, stage, page: int) -> None:
        self._gates[(ApplicationStatus(stage).value, page)] = asyncio.Event()

    def release(self, stage, page: int) -> None:
        self._gates[(ApplicationStatus(stage).value, page)].set()

    def calls_for(self, stage) -> List[Dict[str, Any]]:
        value = ApplicationStatus(stage).value
        return [call for call in self.list_calls if call["status"] == value]

    async def list_applications(self, params: Dict[str, Any]) -> ColumnResult:
        self.list_calls.append(dict(params))
        stage, page, limit = params["status"], params["page"], params["limit"]

        # Snapshot at request time, like a server answering immediately
        rows = [a for a in self.applications.values() if a["status"] == stage]
        search = params.get("search", "").lower()
        if search:
            rows = [a for a in rows if search in a["company"].lower() or search in a["position"].lower()]
        sort_by = params.get("sortBy")
        if sort_by:
            rows.sort(key=lambda a: (a[sort_by], a["id"]), reverse=params.get("sortOrder") == "desc")
        else:
            rows.sort(key=lambda a: a["id"])

        gate = self._gates.get((stage, page))
        if gate is not None:
            await gate.wait()
            self._gates.pop((stage, page), None)
        else:
            await asyncio.sleep(0)

        if stage in self.failing_stages:
            raise RepositoryError("Failed to fetch applications", status_code=500)

        start = (page - 1) * limit
        return ColumnResult(
            applications=tuple(ApplicationResponse.model_validate(a) for a in rows[start:start + limit]),
            total_pages=math.ceil(len(rows) / limit),
            total_items=len(rows),
        )

    async def update_status(self, application_id: int, stage) -> ApplicationResponse:
        stage = ApplicationStatus(stage)
        self.update_calls.append((application_id, stage.value))
        await asyncio.sleep(0)
        if self.fail_updates:
            raise RepositoryError("Failed to update application", status_code=500)
        if application_id not in self.applications:
            raise RepositoryError("Application not found", status_code=404)
        self.applications[application_id]["status"] = stage.value
        return ApplicationResponse.model_validate(self.applications[application_id])


@pytest.fixture
def fake_repository():
    return FakeApplicationRepository()


@pytest.fixture
def notifier():
    return Notifier()
