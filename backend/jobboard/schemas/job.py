"""Job-related Pydantic schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from jobboard.models.job import JobStatus
from jobboard.schemas.skill import SkillResponse


class JobBase(BaseModel):
    """Base schema with common job posting fields."""
    title: str = Field(min_length=1, max_length=100)
    location: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1)
    employment_type: Optional[str] = None  # full-time | part-time | contract
    work_arrangement: Optional[str] = None  # remote | hybrid | onsite
    salary_min: float = Field(ge=0)
    salary_max: Optional[float] = Field(default=None, ge=0)
    currency_code: str = Field(min_length=3, max_length=3)


class JobCreate(JobBase):
    """Schema for creating a new job posting (DRAFT or ACTIVE)."""
    status: JobStatus = JobStatus.DRAFT
    skill_ids: List[int] = Field(default_factory=list)


class JobUpdate(BaseModel):
    """Partial update; only the fields sent are applied."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    location: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1)
    employment_type: Optional[str] = None
    work_arrangement: Optional[str] = None
    salary_min: Optional[float] = Field(default=None, ge=0)
    salary_max: Optional[float] = Field(default=None, ge=0)
    currency_code: Optional[str] = Field(default=None, min_length=3, max_length=3)
    status: Optional[JobStatus] = None
    # Replaces the whole skill list when sent
    skill_ids: Optional[List[int]] = None


class JobDuplicateRequest(BaseModel):
    """Status of the copy made from a closed job."""
    status: JobStatus = JobStatus.DRAFT


class JobResponse(JobBase):
    """Schema for job posting response."""
    id: int
    company_id: int
    created_by_id: int
    status: JobStatus
    created_at: datetime
    updated_at: datetime
    reposted_at: Optional[datetime] = None
    skills: List[SkillResponse] = []

    model_config = ConfigDict(from_attributes=True)
