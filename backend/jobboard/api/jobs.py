"""
Jobs API endpoints.
Handles job posting CRUD and the job lifecycle (close, repost, duplicate).
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.api.auth import require_identity
from jobboard.database import get_db
from jobboard.models.job import JobStatus
from jobboard.schemas.auth import MessageResponse
from jobboard.schemas.job import JobCreate, JobDuplicateRequest, JobResponse, JobUpdate
from jobboard.services import jobs
from jobboard.services.gateway import AuthenticatedIdentity

# Configure logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(
    job: JobCreate,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    """Create a job posting for the caller's company (DRAFT or ACTIVE)."""
    return await jobs.create_job(db, identity, job)


@router.get("", response_model=List[JobResponse])
async def list_jobs(db: AsyncSession = Depends(get_db)):
    """All ACTIVE jobs, newest first."""
    return await jobs.list_active_jobs(db)


@router.get("/company", response_model=List[JobResponse])
async def list_company_jobs(
    status: JobStatus = Query(JobStatus.ACTIVE),
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    """Jobs of the caller's company in one status."""
    return await jobs.list_company_jobs(db, identity, status)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await jobs.get_job(db, identity, job_id)


@router.patch("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: int,
    update: JobUpdate,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await jobs.update_job(db, identity, job_id, update)


@router.post("/{job_id}/close", response_model=JobResponse)
async def close_job(
    job_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await jobs.close_job(db, identity, job_id)


@router.post("/{job_id}/repost", response_model=JobResponse)
async def repost_job(
    job_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    """
    Repost an ACTIVE job.

    Returns:
        200: Job with updated reposted_at
        429: Cooldown since creation or last repost not over
    """
    return await jobs.repost_job(db, identity, job_id)


@router.post("/{job_id}/duplicate", response_model=JobResponse, status_code=201)
async def duplicate_job(
    job_id: int,
    request: JobDuplicateRequest,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    """Copy a CLOSED job into a new DRAFT or ACTIVE job."""
    return await jobs.duplicate_closed_job(db, identity, job_id, request.status)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(
    job_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    await jobs.delete_job(db, identity, job_id)
    return MessageResponse(message="Job deleted.")
