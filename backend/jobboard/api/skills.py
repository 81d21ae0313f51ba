"""
Skill catalog endpoints.
Anyone signed in can browse skills; only admins curate the catalog.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.api.auth import require_identity
from jobboard.database import get_db
from jobboard.schemas.auth import MessageResponse
from jobboard.schemas.skill import SkillCreate, SkillResponse, SkillUpdate
from jobboard.services import skills
from jobboard.services.gateway import AuthenticatedIdentity

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=SkillResponse, status_code=201)
async def create_skill(
    request: SkillCreate,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    """
    Add a skill to the catalog.

    Returns:
        201: The stored (normalized) skill
        409: A skill with the same normalized name exists
    """
    return await skills.create_skill(db, identity, request.name)


@router.get("", response_model=List[SkillResponse])
async def list_skills(db: AsyncSession = Depends(get_db)):
    return await skills.list_skills(db)


@router.get("/{skill_id}", response_model=SkillResponse)
async def get_skill(skill_id: int, db: AsyncSession = Depends(get_db)):
    return await skills.get_skill(db, skill_id)


@router.put("/{skill_id}", response_model=SkillResponse)
async def update_skill(
    skill_id: int,
    request: SkillUpdate,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    return await skills.update_skill(db, identity, skill_id, request.name)


@router.delete("/{skill_id}", response_model=MessageResponse)
async def delete_skill(
    skill_id: int,
    identity: AuthenticatedIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db)
):
    """Remove a skill. Jobs that listed it simply lose the tag."""
    await skills.delete_skill(db, identity, skill_id)
    return MessageResponse(message="Skill deleted.")
