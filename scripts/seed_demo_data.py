"""
Script to create a demo user with applications in every pipeline stage.
Run: python -m scripts.seed_demo_data [email] [password]
"""
import sys
import os
from datetime import datetime, timedelta, timezone

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.init_db import init_db
from app.db.session import SessionLocal
from app.db.models.user import User
from app.db.models.application import ApplicationStatus
from app.core.security import hash_password
from app.schemas.application import ApplicationCreate, ApplicationUpdate, InterviewStepCreate
from app.services import application_service
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_APPLICATIONS = [
    {
        "company": "Tech Innovations Inc.",
        "position": "Senior Frontend Developer",
        "status": ApplicationStatus.APPLIED,
        "url": "https://techinnovations.example.com/careers",
        "notes": "Applied through company website. Used resume v2.0.",
        "days_ago": 0,
    },
    {
        "company": "Global Solutions Ltd.",
        "position": "Full Stack Engineer",
        "status": ApplicationStatus.INTERVIEW,
        "url": "https://globalsolutions.example.com/jobs",
        "notes": "First interview scheduled for next week. Research company products.",
        "days_ago": 7,
        "steps": ["Recruiter call", "Technical interview", "Team fit"],
    },
    {
        "company": "Startup Ventures",
        "position": "React Developer",
        "status": ApplicationStatus.OFFER,
        "url": "https://startupventures.example.com/careers",
        "notes": "Received offer! Need to review contract details.",
        "days_ago": 14,
    },
    {
        "company": "Enterprise Solutions",
        "position": "UI/UX Developer",
        "status": ApplicationStatus.REJECTED,
        "url": "https://enterprise.example.com/jobs",
        "notes": "Rejected after second interview. Follow up for feedback.",
        "days_ago": 21,
    },
]

# Extra applied entries so the Applied column spans more than one page
FILLER_COUNT = 24


def seed_demo_data(email: str, password: str) -> bool:
    """Create (or reuse) the demo user and add the demo applications."""
    init_db()
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email.lower()).first()
        if not user:
            user = User(
                email=email.lower(),
                full_name="Demo User",
                password_hash=hash_password(password),
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info(f"Created user with ID: {user.id}")
        else:
            logger.info(f"Found existing user: {email} (ID: {user.id})")

        now = datetime.now(timezone.utc)
        for demo in DEMO_APPLICATIONS:
            # Created as applied, then moved, so the timeline shows the transition
            application = application_service.create_application(
                db,
                user.id,
                ApplicationCreate(
                    company=demo["company"],
                    position=demo["position"],
                    url=demo["url"],
                    notes=demo["notes"],
                    applied_date=now - timedelta(days=demo["days_ago"]),
                ),
            )
            if demo["status"] != ApplicationStatus.APPLIED:
                application_service.update_application(db, application, ApplicationUpdate(status=demo["status"]))
            for step_name in demo.get("steps", []):
                application_service.add_step(db, application, InterviewStepCreate(step_name=step_name))

        for i in range(1, FILLER_COUNT + 1):
            application_service.create_application(
                db,
                user.id,
                ApplicationCreate(company=f"Example Corp {i:02d}", position="Software Engineer"),
            )

        logger.info(f"Seeded {len(DEMO_APPLICATIONS) + FILLER_COUNT} applications for {email}")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Seeding failed: {e}", exc_info=True)
        return False
    finally:
        db.close()


if __name__ == "__main__":
    email = sys.argv[1] if len(sys.argv) > 1 else "demo@jams.example.com"
    password = sys.argv[2] if len(sys.argv) > 2 else "demo-password"

    if seed_demo_data(email, password):
        print(f"\n[SUCCESS] Demo data ready for {email}")
    else:
        print(f"\n[ERROR] Failed to seed demo data for {email}")
        sys.exit(1)
