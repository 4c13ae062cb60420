"""
Application model - one job application moving through the pipeline stages.
"""
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.base import Base


class ApplicationStatus(str, enum.Enum):
    """Pipeline stages an application can occupy."""
    APPLIED = "applied"
    INTERVIEW = "interview"
    OFFER = "offer"
    REJECTED = "rejected"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Application(Base):
    """
    Application model for the job pipeline.

    `status` always holds one of the ApplicationStatus values; it is stored as a
    plain string so the wire value and the column value are identical.
    """
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    company = Column(String, nullable=False, index=True)
    position = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default=ApplicationStatus.APPLIED.value, index=True)
    url = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    location = Column(String, nullable=True)

    applied_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    last_activity = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", backref="applications")
    steps = relationship(
        "InterviewStep",
        back_populates="application",
        order_by="InterviewStep.sequence",
        cascade="all, delete-orphan",
    )
    timeline_events = relationship(
        "TimelineEvent",
        back_populates="application",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_user_status_updated", "user_id", "status", "updated_at"),
    )

    def __repr__(self):
        return f"<Application(id={self.id}, company='{self.company}', status='{self.status}')>"
