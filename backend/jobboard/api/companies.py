"""
Company endpoints.
Company lifecycle, recruiters and employer handover.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.api.auth import require_identity
from jobboard.database import get_db
from jobboard.schemas.auth import MessageResponse
from jobboard.schemas.company import CompanyCreate, CompanyResponse, CompanyUpdate
from jobboard.schemas.user import UserResponse
from jobboard.services import companies
from jobboard.services.gateway import AuthenticatedIdentity

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(
    request: CompanyCreate,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    """
    Found a company. The caller becomes its employer.

    The caller's tokens are invalidated; log in again to act as employer.
    """
    return await companies.create_company(db, identity, request)


@router.get("", response_model=List[CompanyResponse])
async def list_companies(db: AsyncSession = Depends(get_db)):
    return await companies.list_companies(db)


@router.patch("/mine", response_model=CompanyResponse)
async def update_my_company(
    request: CompanyUpdate,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await companies.update_company(db, identity, request)


@router.delete("/mine", response_model=MessageResponse)
async def delete_my_company(
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    await companies.delete_company(db, identity)
    return MessageResponse(message="Company deleted.")


@router.get("/mine/recruiters", response_model=List[UserResponse])
async def list_recruiters(
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await companies.list_recruiters(db, identity)


@router.post("/mine/recruiters/{user_id}", response_model=UserResponse)
async def appoint_recruiter(
    user_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await companies.appoint_recruiter(db, identity, user_id)


@router.delete("/mine/recruiters/{user_id}", response_model=UserResponse)
async def remove_recruiter(
    user_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await companies.remove_recruiter(db, identity, user_id)


@router.put("/mine/employer/{user_id}", response_model=CompanyResponse)
async def change_employer(
    user_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    """Hand the company over. Both old and new employer must log in again."""
    return await companies.change_employer(db, identity, user_id)


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: int,
    db: AsyncSession = Depends(get_db)
):
    return await companies.get_company(db, company_id)
