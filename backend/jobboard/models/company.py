"""Company model: one employer plus any number of recruiters."""
from sqlalchemy import Column, String, Integer, Boolean, Text, ForeignKey

from jobboard.database import Base
from jobboard.database_types import UTCDateTime, utcnow


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    industry = Column(String(100), nullable=False)

    # Exactly one employer owns the company.
    # Related users (employer + recruiters) are the users whose company_id points here.
    employer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Soft delete (jobs are soft-deleted alongside)
    deleted = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)
