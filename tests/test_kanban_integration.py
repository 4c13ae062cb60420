"""
End-to-end tests: the Kanban board driving the real API through httpx.
"""
import asyncio
import logging

from app.db.models.application import ApplicationStatus
from app.kanban.board import KanbanBoard
from app.kanban.drag import DragDropController, DropOutcome
from app.kanban.notifications import NotificationKind
from app.kanban.repository import RepositoryError

APPLIED = ApplicationStatus.APPLIED
INTERVIEW = ApplicationStatus.INTERVIEW
OFFER = ApplicationStatus.OFFER


def test_board_pages_through_applied_column(test_user, make_application, make_api_repository, notifier):
    """Test the 25-application scenario against the API: 20 on page 1, 5 on page 2."""
    for i in range(25):
        make_application(test_user, company=f"Company {i:02d}")

    async def scenario():
        async with make_api_repository() as repository:
            board = KanbanBoard(repository, notifier, page_size=20)
            await board.mount()
            first = board.store(APPLIED).snapshot
            await board.handle_page_change(APPLIED, 2)
            return first, board.store(APPLIED).snapshot

    first, second = asyncio.run(scenario())

    assert len(first.result.applications) == 20
    assert (first.result.total_pages, first.result.total_items) == (2, 25)
    assert second.page == 2
    assert len(second.result.applications) == 5
    assert (second.result.total_pages, second.result.total_items) == (2, 25)
    assert list(notifier.history) == []


def test_board_search_shows_empty_state(test_user, make_application, make_api_repository, notifier):
    """Test searching 'google' refetches all columns; unmatched columns render empty, not skeleton."""
    make_application(test_user, company="Google", status=APPLIED)
    make_application(test_user, company="Initech", status=APPLIED)
    make_application(test_user, company="Globex", status=OFFER)

    async def scenario():
        async with make_api_repository() as repository:
            board = KanbanBoard(repository, notifier, page_size=20)
            await board.mount()
            await board.set_search("google")
            return {view.stage: view for view in board.columns()}

    views = asyncio.run(scenario())

    assert [app.company for app in views[APPLIED].applications] == ["Google"]
    for stage in (INTERVIEW, OFFER, ApplicationStatus.REJECTED):
        assert views[stage].empty
        assert not views[stage].skeleton


def test_board_drop_moves_card_through_api(test_user, make_application, make_api_repository, notifier, client, auth_headers):
    """Test a drop PATCHes the API and both columns reflect the move."""
    application = make_application(test_user, company="Acme", status=APPLIED)

    async def scenario():
        async with make_api_repository() as repository:
            board = KanbanBoard(repository, notifier, page_size=20)
            await board.mount()
            drag = DragDropController(board)
            outcome = await drag.on_drop(drag.on_drag_start(application.id), INTERVIEW)
            return outcome, board

    outcome, board = asyncio.run(scenario())

    assert outcome == DropOutcome.MOVED
    assert board.locate(application.id) == INTERVIEW
    assert board.store(APPLIED).result.total_items == 0
    stored = client.get(f"/applications/{application.id}", headers=auth_headers).json()
    assert stored["status"] == "interview"


def test_board_drop_of_foreign_application_is_rejected(test_user, other_user, make_application, make_api_repository, notifier):
    """Test the API's 404 for someone else's application surfaces as a failed move."""
    theirs = make_application(other_user, status=APPLIED)

    async def scenario():
        async with make_api_repository() as repository:
            board = KanbanBoard(repository, notifier, page_size=20)
            await board.mount()
            return await DragDropController(board).on_drop(str(theirs.id), OFFER)

    outcome = asyncio.run(scenario())

    assert outcome == DropOutcome.REJECTED
    assert len(notifier.of_kind(NotificationKind.MOVE_FAILED)) == 1


def test_unauthorized_fetch_is_reported_per_column(test_user, make_api_repository, notifier):
    """Test a bad token turns into fetch-failure notifications, not exceptions."""
    async def scenario():
        async with make_api_repository(token="invalid") as repository:
            board = KanbanBoard(repository, notifier, page_size=20)
            await board.mount()
            return board

    board = asyncio.run(scenario())

    assert len(notifier.of_kind(NotificationKind.FETCH_FAILED)) == 4
    for view in board.columns():
        assert not view.skeleton
        assert not view.empty
        assert view.error == "Invalid token"


def test_repository_raises_with_status_code(test_user, make_api_repository):
    """Test HTTP errors become RepositoryError carrying the status code."""
    async def scenario():
        async with make_api_repository() as repository:
            try:
                await repository.update_status(9999, OFFER)
            except RepositoryError as e:
                return e
        return None

    error = asyncio.run(scenario())

    assert error is not None
    assert error.status_code == 404
    assert error.message == "Application not found"


def test_repository_request_logs_redact_token(test_user, test_user_token, make_api_repository, caplog):
    """Test the bearer token never reaches the debug log of a request."""
    async def scenario():
        async with make_api_repository() as repository:
            await repository.list_applications({"status": "applied", "page": 1, "limit": 20})

    with caplog.at_level(logging.DEBUG, logger="app.kanban.repository"):
        asyncio.run(scenario())

    assert "GET /applications" in caplog.text
    assert "***REDACTED***" in caplog.text
    assert test_user_token not in caplog.text
