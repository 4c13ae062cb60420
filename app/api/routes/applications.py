"""
Application endpoints for the JAMS pipeline.

Provides the paginated list the Kanban board pages through, the status PATCH
a board drop issues, plus CRUD for applications, interview steps and timeline.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User
from app.db.models.application import Application, ApplicationStatus
from app.core.auth_dependency import get_current_user_obj
from app.schemas.application import (
    ApplicationCreate,
    ApplicationUpdate,
    ApplicationResponse,
    ApplicationListResponse,
    ApplicationStatsResponse,
    InterviewStepCreate,
    InterviewStepUpdate,
    InterviewStepResponse,
    StepOrderRequest,
    TimelineEventResponse,
)
from app.services import application_service
from app.services.application_service import InvalidSortError, total_pages_for
from app.services.step_order import StepOrderError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])


def get_owned_application(
    application_id: int,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
) -> Application:
    """Resolve an application owned by the current user, or 404."""
    application = application_service.get_application(db, user.id, application_id)
    if not application:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found"
        )
    return application


@router.get("", status_code=status.HTTP_200_OK, response_model=ApplicationListResponse)
def list_applications(
    stage: Optional[ApplicationStatus] = Query(None, alias="status", description="Pipeline stage"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search in company and position"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="Sort field"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc or desc"),
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    """
    List the current user's applications, one page at a time.

    Each Kanban column calls this with its own `status` and `page`; search and
    sort are shared across columns by the client.
    """
    try:
        applications, total = application_service.list_applications(
            db,
            user.id,
            page=page,
            limit=limit,
            status=stage.value if stage else None,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except InvalidSortError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to list applications: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch applications"
        )

    return ApplicationListResponse(
        applications=[ApplicationResponse.model_validate(app) for app in applications],
        total_pages=total_pages_for(total, limit),
        current_page=page,
        total_items=total,
        items_per_page=limit,
    )


@router.get("/stats", response_model=ApplicationStatsResponse)
def application_stats(
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    """Count of applications per stage for the dashboard cards."""
    counts = application_service.count_by_status(db, user.id)
    return ApplicationStatsResponse(total=sum(counts.values()), **counts)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ApplicationResponse)
def create_application(
    application_data: ApplicationCreate,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    try:
        application = application_service.create_application(db, user.id, application_data)
        return ApplicationResponse.model_validate(application)
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to create application: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create application"
        )


@router.get("/{application_id}", response_model=ApplicationResponse)
def get_application(application: Application = Depends(get_owned_application)):
    return ApplicationResponse.model_validate(application)


@router.patch("/{application_id}", response_model=ApplicationResponse)
def update_application(
    application_data: ApplicationUpdate,
    application: Application = Depends(get_owned_application),
    db: Session = Depends(get_db),
):
    """
    Update an application. Only provided fields change.

    This is the call a Kanban drop makes with `{"status": <stage>}`.
    """
    try:
        application = application_service.update_application(db, application, application_data)
        return ApplicationResponse.model_validate(application)
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to update application: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update application"
        )


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_application(
    application: Application = Depends(get_owned_application),
    db: Session = Depends(get_db),
):
    try:
        application_service.delete_application(db, application)
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to delete application: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete application"
        )
    return None


@router.get("/{application_id}/timeline", response_model=List[TimelineEventResponse])
def get_timeline(
    application: Application = Depends(get_owned_application),
    db: Session = Depends(get_db),
):
    events = application_service.list_timeline(db, application)
    return [TimelineEventResponse.model_validate(event) for event in events]


# ============================================
# ✅ INTERVIEW STEPS
# ============================================

@router.get("/{application_id}/steps", response_model=List[InterviewStepResponse])
def list_steps(
    application: Application = Depends(get_owned_application),
    db: Session = Depends(get_db),
):
    steps = application_service.list_steps(db, application)
    return [InterviewStepResponse.model_validate(step) for step in steps]


@router.post("/{application_id}/steps", status_code=status.HTTP_201_CREATED, response_model=InterviewStepResponse)
def create_step(
    step_data: InterviewStepCreate,
    application: Application = Depends(get_owned_application),
    db: Session = Depends(get_db),
):
    try:
        step = application_service.add_step(db, application, step_data)
        return InterviewStepResponse.model_validate(step)
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to add interview step: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add interview step"
        )


@router.put("/{application_id}/steps/order", response_model=List[InterviewStepResponse])
def reorder_steps(
    order: StepOrderRequest,
    application: Application = Depends(get_owned_application),
    db: Session = Depends(get_db),
):
    """Replace the step order; `step_ids` must list every step exactly once."""
    try:
        steps = application_service.set_step_order(db, application, order.step_ids)
    except StepOrderError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return [InterviewStepResponse.model_validate(step) for step in steps]


@router.post("/{application_id}/steps/{step_id}/move", response_model=List[InterviewStepResponse])
def move_step(
    step_id: int,
    index: int = Query(..., ge=0, description="New 0-based position"),
    application: Application = Depends(get_owned_application),
    db: Session = Depends(get_db),
):
    """Move a single step to a new position, renumbering the rest."""
    try:
        steps = application_service.move_step(db, application, step_id, index)
    except StepOrderError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return [InterviewStepResponse.model_validate(step) for step in steps]


@router.patch("/{application_id}/steps/{step_id}", response_model=InterviewStepResponse)
def update_step(
    step_id: int,
    step_data: InterviewStepUpdate,
    application: Application = Depends(get_owned_application),
    db: Session = Depends(get_db),
):
    step = application_service.get_step(db, application, step_id)
    if not step:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Interview step not found")

    step = application_service.update_step(db, step, step_data)
    return InterviewStepResponse.model_validate(step)


@router.delete("/{application_id}/steps/{step_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_step(
    step_id: int,
    application: Application = Depends(get_owned_application),
    db: Session = Depends(get_db),
):
    step = application_service.get_step(db, application, step_id)
    if not step:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Interview step not found")

    application_service.delete_step(db, application, step)
    return None
