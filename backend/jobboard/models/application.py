from enum import Enum
from sqlalchemy import Column, String, Integer, Text, ForeignKey, Index, UniqueConstraint

from jobboard.database import Base
from jobboard.database_types import UTCDateTime, utcnow


class ApplicationStatus(str, Enum):
    """Valid states for job applications"""
    APPLIED = "APPLIED"
    UNDER_REVIEW = "UNDER_REVIEW"
    REJECTED = "REJECTED"
    ACCEPTED = "ACCEPTED"
    WITHDRAWN = "WITHDRAWN"


class Application(Base):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False)
    candidate_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Link only, file storage lives elsewhere
    resume_url = Column(String(500), nullable=True)

    # State machine
    status = Column(String, nullable=False, default=ApplicationStatus.APPLIED.value)

    # Feedback from the recruiter/employer to the candidate
    notes = Column(Text, nullable=True)

    # Timestamps
    applied_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        # One application per candidate per job
        UniqueConstraint('job_id', 'candidate_id', name='uq_job_candidate'),

        Index('idx_applications_job_status', 'job_id', 'status'),
    )
