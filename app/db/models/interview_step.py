"""
InterviewStep model - ordered interview rounds belonging to an application.
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.base import Base


class InterviewStep(Base):
    __tablename__ = "interview_steps"

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(Integer, ForeignKey("applications.id"), nullable=False, index=True)

    step_name = Column(String, nullable=False)
    sequence = Column(Integer, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)

    scheduled_date = Column(DateTime(timezone=True), nullable=True)
    duration = Column(Integer, nullable=True)  # minutes
    interviewer_name = Column(String, nullable=True)
    interviewer_linkedin = Column(String, nullable=True)
    meeting_url = Column(String, nullable=True)
    comments = Column(Text, nullable=True)
    feedback = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    application = relationship("Application", back_populates="steps")

    def __repr__(self):
        return f"<InterviewStep(id={self.id}, application_id={self.application_id}, sequence={self.sequence})>"
