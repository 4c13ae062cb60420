"""
Pydantic schemas for application, interview step and timeline endpoints.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.db.models.application import ApplicationStatus


class InterviewStepBase(BaseModel):
    """Base interview step schema with common fields."""
    step_name: str = Field(..., description="Step name, e.g. 'Phone screen'", min_length=1, max_length=255)
    completed: bool = Field(False, description="Whether the step is done")
    scheduled_date: Optional[datetime] = Field(None, description="When the step takes place")
    duration: Optional[int] = Field(None, ge=0, description="Duration in minutes")
    interviewer_name: Optional[str] = Field(None, description="Interviewer name")
    interviewer_linkedin: Optional[str] = Field(None, description="Interviewer LinkedIn URL")
    meeting_url: Optional[str] = Field(None, description="Meeting link")
    comments: Optional[str] = Field(None, description="Preparation notes")
    feedback: Optional[str] = Field(None, description="Feedback after the step")


class InterviewStepCreate(InterviewStepBase):
    """Schema for adding a step; it is appended after the last existing step."""
    pass


class InterviewStepUpdate(BaseModel):
    """Schema for updating an existing step."""
    step_name: Optional[str] = Field(None, min_length=1, max_length=255)
    completed: Optional[bool] = None
    scheduled_date: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=0)
    interviewer_name: Optional[str] = None
    interviewer_linkedin: Optional[str] = None
    meeting_url: Optional[str] = None
    comments: Optional[str] = None
    feedback: Optional[str] = None


class InterviewStepResponse(InterviewStepBase):
    """Schema for interview step response."""
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Step ID")
    application_id: int = Field(..., description="Owning application ID")
    sequence: int = Field(..., description="Display order within the application")


class StepOrderRequest(BaseModel):
    """New order of an application's steps, given as step IDs."""
    step_ids: List[int] = Field(..., description="Every step ID of the application, in the new order")

    @field_validator("step_ids")
    @classmethod
    def validate_unique(cls, v: List[int]) -> List[int]:
        if len(set(v)) != len(v):
            raise ValueError("step_ids must not contain duplicates")
        return v


class ApplicationBase(BaseModel):
    """Base application schema with common fields."""
    company: str = Field(..., description="Company name", min_length=1, max_length=255)
    position: str = Field(..., description="Position title", min_length=1, max_length=255)
    status: ApplicationStatus = Field(ApplicationStatus.APPLIED, description="Pipeline stage")
    url: Optional[str] = Field(None, description="Job posting URL")
    description: Optional[str] = Field(None, description="Job description")
    notes: Optional[str] = Field(None, description="Notes about this application")
    location: Optional[str] = Field(None, description="Job location")
    applied_date: Optional[datetime] = Field(None, description="Date applied")


class ApplicationCreate(ApplicationBase):
    """Schema for creating a new application."""
    pass


class ApplicationUpdate(BaseModel):
    """Schema for updating an existing application. Only provided fields change."""
    company: Optional[str] = Field(None, min_length=1, max_length=255)
    position: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[ApplicationStatus] = None
    url: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    location: Optional[str] = None
    applied_date: Optional[datetime] = None


class ApplicationResponse(ApplicationBase):
    """Schema for application response."""
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "user_id": 1,
                "company": "Tech Innovations Inc.",
                "position": "Senior Frontend Developer",
                "status": "applied",
                "url": "https://techinnovations.example.com/careers",
                "notes": "Applied through company website.",
                "applied_date": "2026-01-15T10:00:00Z",
                "steps": [],
                "created_at": "2026-01-15T09:00:00Z",
                "updated_at": "2026-01-15T10:00:00Z",
            }
        },
    )

    id: int = Field(..., description="Application ID")
    user_id: int = Field(..., description="User ID who owns this application")
    last_activity: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    steps: List[InterviewStepResponse] = Field(default_factory=list, description="Interview steps in order")


class ApplicationListResponse(BaseModel):
    """Paginated list of applications for one stage (or all stages)."""
    model_config = ConfigDict(populate_by_name=True)

    applications: List[ApplicationResponse] = Field(..., description="Applications on the requested page")
    total_pages: int = Field(..., serialization_alias="totalPages")
    current_page: int = Field(..., serialization_alias="currentPage")
    total_items: int = Field(..., serialization_alias="totalItems")
    items_per_page: int = Field(..., serialization_alias="itemsPerPage")


class ApplicationStatsResponse(BaseModel):
    """Number of applications per pipeline stage."""
    applied: int = 0
    interview: int = 0
    offer: int = 0
    rejected: int = 0
    total: int = 0


class TimelineEventResponse(BaseModel):
    """Schema for a single timeline entry."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    title: str
    description: Optional[str] = None
    type: str
    date: datetime
