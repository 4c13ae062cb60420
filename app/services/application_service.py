"""
Application service - data access for applications, interview steps and timeline.

Route handlers stay thin; everything that touches the query builder lives here.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session, selectinload

from app.db.models.application import Application, ApplicationStatus
from app.db.models.interview_step import InterviewStep
from app.db.models.timeline_event import TimelineEvent
from app.schemas.application import (
    ApplicationCreate,
    ApplicationUpdate,
    InterviewStepCreate,
    InterviewStepUpdate,
)
from app.services.step_order import renumber, reorder_steps, validate_order

logger = logging.getLogger(__name__)

DEFAULT_SORT_FIELD = "updated_at"
DEFAULT_SORT_ORDER = "desc"

# Accepted sortBy values; camelCase aliases match what browser clients send
SORTABLE_FIELDS = {
    "company": Application.company,
    "position": Application.position,
    "status": Application.status,
    "location": Application.location,
    "applied_date": Application.applied_date,
    "appliedDate": Application.applied_date,
    "created_at": Application.created_at,
    "createdAt": Application.created_at,
    "updated_at": Application.updated_at,
    "updatedAt": Application.updated_at,
}

REQUIRED_FIELDS = ("company", "position")

STATUS_EVENT_TYPES = {
    ApplicationStatus.APPLIED.value: "status_change",
    ApplicationStatus.INTERVIEW.value: "interview",
    ApplicationStatus.OFFER.value: "offer",
    ApplicationStatus.REJECTED.value: "rejection",
}


class InvalidSortError(ValueError):
    """Raised for an unknown sort field or sort direction."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def total_pages_for(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


def _escape_like(term: str) -> str:
    """Make % and _ in user input match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _filtered_query(db: Session, user_id: int, status: Optional[str], search: Optional[str]):
    conditions = [Application.user_id == user_id]
    if status:
        conditions.append(Application.status == status)
    if search:
        search_term = f"%{_escape_like(search.strip())}%"
        conditions.append(
            or_(
                Application.company.ilike(search_term, escape="\\"),
                Application.position.ilike(search_term, escape="\\"),
            )
        )
    return db.query(Application).filter(and_(*conditions))


def _order_clause(sort_by: Optional[str], sort_order: Optional[str]):
    sort_by = sort_by or DEFAULT_SORT_FIELD
    sort_order = (sort_order or DEFAULT_SORT_ORDER).lower()

    column = SORTABLE_FIELDS.get(sort_by)
    if column is None:
        raise InvalidSortError(f"Cannot sort by '{sort_by}'")
    if sort_order not in ("asc", "desc"):
        raise InvalidSortError(f"Sort order must be 'asc' or 'desc', got '{sort_order}'")

    # id as tie-breaker keeps page boundaries stable between requests
    if sort_order == "asc":
        return [column.asc(), Application.id.asc()]
    return [column.desc(), Application.id.desc()]


def list_applications(
    db: Session,
    user_id: int,
    page: int = 1,
    limit: int = 20,
    status: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
) -> Tuple[List[Application], int]:
    """
    Fetch one page of a user's applications.

    Args:
        db: Database session
        user_id: Owner of the applications
        page: 1-based page number
        limit: Page size
        status: Restrict to one pipeline stage
        search: Case-insensitive substring matched against company and position
        sort_by: One of SORTABLE_FIELDS
        sort_order: "asc" or "desc"

    Returns:
        Tuple of (applications on the page, total matching applications)

    Raises:
        InvalidSortError: For an unknown sort field or direction
    """
    order_by = _order_clause(sort_by, sort_order)
    query = _filtered_query(db, user_id, status, search)

    total = query.count()
    offset = (page - 1) * limit
    applications = (
        query.options(selectinload(Application.steps))
        .order_by(*order_by)
        .offset(offset)
        .limit(limit)
        .all()
    )

    logger.debug(
        f"Applications listed: user_id={user_id}, status={status}, page={page}, "
        f"returned={len(applications)}, total={total}"
    )
    return applications, total


def count_by_status(db: Session, user_id: int) -> Dict[str, int]:
    """Number of applications per pipeline stage, zero-filled."""
    rows = (
        db.query(Application.status, func.count(Application.id))
        .filter(Application.user_id == user_id)
        .group_by(Application.status)
        .all()
    )
    counts = {stage.value: 0 for stage in ApplicationStatus}
    for status, count in rows:
        counts[status] = int(count)
    return counts


def get_application(db: Session, user_id: int, application_id: int) -> Optional[Application]:
    return db.query(Application).filter(
        and_(
            Application.id == application_id,
            Application.user_id == user_id,
        )
    ).first()


def record_timeline_event(
    db: Session,
    application: Application,
    title: str,
    event_type: str,
    description: Optional[str] = None,
    date: Optional[datetime] = None,
) -> TimelineEvent:
    event = TimelineEvent(
        application_id=application.id,
        user_id=application.user_id,
        title=title,
        description=description,
        type=event_type,
        date=date or _utcnow(),
    )
    db.add(event)
    return event


def create_application(db: Session, user_id: int, data: ApplicationCreate) -> Application:
    values = data.model_dump(exclude_none=True)
    values["status"] = data.status.value
    application = Application(user_id=user_id, **values)
    db.add(application)
    db.flush()

    record_timeline_event(
        db,
        application,
        title="Application Submitted",
        event_type="application",
        description=f"Applied for {application.position} at {application.company}",
    )
    db.commit()
    db.refresh(application)

    logger.info(f"Application created: application_id={application.id}, user_id={user_id}, status={application.status}")
    return application


def update_application(db: Session, application: Application, data: ApplicationUpdate) -> Application:
    """
    Apply a partial update.

    A status change is the Kanban "move": it bumps last_activity and leaves a
    timeline entry behind.
    """
    update_data = data.model_dump(exclude_unset=True)
    new_status = update_data.pop("status", None)

    for field, value in update_data.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(application, field, value)

    if new_status is not None:
        new_status = ApplicationStatus(new_status).value
        if new_status != application.status:
            old_status = application.status
            application.status = new_status
            application.last_activity = _utcnow()
            record_timeline_event(
                db,
                application,
                title=f"Moved to {ApplicationStatus(new_status).label}",
                event_type=STATUS_EVENT_TYPES[new_status],
                description=f"Status changed from {old_status} to {new_status}",
            )
            logger.info(f"Application moved: application_id={application.id}, {old_status} -> {new_status}")

    application.updated_at = _utcnow()
    db.commit()
    db.refresh(application)
    return application


def delete_application(db: Session, application: Application) -> None:
    application_id = application.id
    db.delete(application)
    db.commit()
    logger.info(f"Application deleted: application_id={application_id}")


def list_timeline(db: Session, application: Application) -> List[TimelineEvent]:
    return (
        db.query(TimelineEvent)
        .filter(TimelineEvent.application_id == application.id)
        .order_by(TimelineEvent.date.desc(), TimelineEvent.id.desc())
        .all()
    )


# ============================================
# Interview steps
# ============================================

def list_steps(db: Session, application: Application) -> List[InterviewStep]:
    return (
        db.query(InterviewStep)
        .filter(InterviewStep.application_id == application.id)
        .order_by(InterviewStep.sequence.asc(), InterviewStep.id.asc())
        .all()
    )


def get_step(db: Session, application: Application, step_id: int) -> Optional[InterviewStep]:
    return db.query(InterviewStep).filter(
        and_(
            InterviewStep.id == step_id,
            InterviewStep.application_id == application.id,
        )
    ).first()


def add_step(db: Session, application: Application, data: InterviewStepCreate) -> InterviewStep:
    last_sequence = (
        db.query(func.max(InterviewStep.sequence))
        .filter(InterviewStep.application_id == application.id)
        .scalar()
    )
    step = InterviewStep(
        application_id=application.id,
        sequence=(last_sequence or 0) + 1,
        **data.model_dump(),
    )
    db.add(step)

    if step.scheduled_date:
        record_timeline_event(
            db,
            application,
            title="Interview Step Added",
            event_type="interview",
            description=f"{step.step_name} scheduled for {step.scheduled_date:%Y-%m-%d}",
            date=step.scheduled_date,
        )

    db.commit()
    db.refresh(step)
    logger.info(f"Interview step added: step_id={step.id}, application_id={application.id}, sequence={step.sequence}")
    return step


def update_step(db: Session, step: InterviewStep, data: InterviewStepUpdate) -> InterviewStep:
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in ("step_name", "completed"):
            continue
        setattr(step, field, value)
    db.commit()
    db.refresh(step)
    return step


def delete_step(db: Session, application: Application, step: InterviewStep) -> None:
    db.delete(step)
    db.flush()
    # Close the gap so sequences stay 1..n
    remaining = list_steps(db, application)
    _apply_order(remaining, [s.id for s in remaining])
    db.commit()


def set_step_order(db: Session, application: Application, step_ids: List[int]) -> List[InterviewStep]:
    """
    Reorder all steps of an application.

    Raises:
        StepOrderError: If `step_ids` is not a permutation of the current step IDs
    """
    steps = list_steps(db, application)
    validate_order((s.id for s in steps), step_ids)
    _apply_order(steps, step_ids)
    db.commit()
    return list_steps(db, application)


def move_step(db: Session, application: Application, step_id: int, new_index: int) -> List[InterviewStep]:
    """
    Move one step to `new_index` (0-based) in the current order.

    Raises:
        StepOrderError: If the step does not belong to the application
    """
    steps = list_steps(db, application)
    new_order = reorder_steps([s.id for s in steps], step_id, new_index)
    _apply_order(steps, new_order)
    db.commit()
    return list_steps(db, application)


def _apply_order(steps: List[InterviewStep], ordered_ids: List[int]) -> None:
    sequences = renumber(ordered_ids)
    for step in steps:
        step.sequence = sequences[step.id]
