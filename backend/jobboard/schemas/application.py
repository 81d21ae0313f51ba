"""Application-related Pydantic schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from jobboard.models.application import ApplicationStatus


class ApplicationCreate(BaseModel):
    """Request body for applying to a job."""
    job_id: int
    resume_url: Optional[str] = Field(default=None, max_length=500)


class ApplicationDecision(BaseModel):
    """Decision (REJECTED/ACCEPTED) and/or feedback from the company."""
    status: Optional[ApplicationStatus] = None
    notes: Optional[str] = None


class ApplicationResponse(BaseModel):
    id: int
    job_id: int
    candidate_id: int
    resume_url: Optional[str] = None
    status: ApplicationStatus
    notes: Optional[str] = None
    applied_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
