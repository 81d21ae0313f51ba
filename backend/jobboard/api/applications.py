"""
Applications API endpoints.
Candidates apply and withdraw; company staff review and decide.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.api.auth import require_identity
from jobboard.database import get_db
from jobboard.schemas.application import ApplicationCreate, ApplicationDecision, ApplicationResponse
from jobboard.schemas.auth import MessageResponse
from jobboard.services import applications
from jobboard.services.gateway import AuthenticatedIdentity

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=ApplicationResponse, status_code=201)
async def apply(
    request: ApplicationCreate,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    """
    Apply to an ACTIVE job.

    Returns:
        201: Application created in APPLIED
        403: Job not ACTIVE, or caller is not a candidate
        409: Already applied
    """
    return await applications.apply(db, identity, request.job_id, request.resume_url)


@router.get("/mine", response_model=List[ApplicationResponse])
async def list_my_applications(
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await applications.list_for_candidate(db, identity)


@router.get("/job/{job_id}", response_model=List[ApplicationResponse])
async def list_job_applications(
    job_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await applications.list_for_job(db, identity, job_id)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await applications.get_application(db, identity, application_id)


@router.post("/{application_id}/review", response_model=ApplicationResponse)
async def review_application(
    application_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await applications.mark_under_review(db, identity, application_id)


@router.patch("/{application_id}", response_model=ApplicationResponse)
async def decide_application(
    application_id: int,
    decision: ApplicationDecision,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    """Record a decision (REJECTED/ACCEPTED) and/or feedback notes."""
    return await applications.decide(
        db, identity, application_id, status=decision.status, notes=decision.notes
    )


@router.post("/{application_id}/withdraw", response_model=ApplicationResponse)
async def withdraw_application(
    application_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await applications.withdraw(db, identity, application_id)


@router.delete("/{application_id}", response_model=MessageResponse)
async def delete_application(
    application_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    await applications.delete_application(db, identity, application_id)
    return MessageResponse(message="Application deleted.")
