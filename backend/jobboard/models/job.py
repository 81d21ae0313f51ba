from enum import Enum
from sqlalchemy import Column, String, Integer, Float, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from jobboard.database import Base
from jobboard.database_types import UTCDateTime, utcnow


class JobStatus(str, Enum):
    """Lifecycle states for job postings"""
    DRAFT = "DRAFT"  # Created but not published
    ACTIVE = "ACTIVE"  # Published, accepting applications
    CLOSED = "CLOSED"  # No longer accepting applications, still visible to the company
    DELETED = "DELETED"  # Soft-deleted, kept for history


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Job details
    title = Column(String(100), nullable=False)
    location = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    employment_type = Column(String, nullable=True)  # full-time | part-time | contract
    work_arrangement = Column(String, nullable=True)  # remote | hybrid | onsite
    salary_min = Column(Float, nullable=False)
    salary_max = Column(Float, nullable=True)
    currency_code = Column(String(3), nullable=False)

    # State machine
    status = Column(String, nullable=False, default=JobStatus.DRAFT.value)

    # Timestamps
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)
    reposted_at = Column(UTCDateTime, nullable=True)

    # Required skills. Eager (selectin) so async code never lazy-loads them
    skills = relationship("Skill", secondary="job_skills", lazy="selectin", order_by="Skill.name")

    __table_args__ = (
        Index('idx_jobs_company_status', 'company_id', 'status'),
    )

    def last_action_at(self):
        """Creation or last repost, whichever is later (repost cooldown anchor)."""
        return self.reposted_at or self.created_at
