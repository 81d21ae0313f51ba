"""
Skill catalog.

Skills are an admin-curated list that job postings reference by id.
Names are stored normalized so "Node-JS", "node js" and "Nóde  JS" are one
skill.
"""
import logging
import re
import unicodedata
from typing import Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.errors import DuplicateResource, NotFound, ValidationFailed
from jobboard.models.skill import Skill, job_skills
from jobboard.models.user import UserRole
from jobboard.services import policy

logger = logging.getLogger(__name__)

MAX_SKILL_NAME_LENGTH = 50

# Dash and underscore variants count as word separators
SEPARATORS = re.compile(r"[-_]")
WHITESPACE = re.compile(r"\s+")


def normalize_skill_name(name: str) -> str:
    """
    Canonical form of a skill name: lowercase, diacritics removed,
    dashes/underscores turned into spaces, whitespace collapsed.

    Raises:
        ValidationFailed: Nothing left after normalization, or too long
    """
    decomposed = unicodedata.normalize("NFKD", name.lower())
    normalized = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    normalized = SEPARATORS.sub(" ", normalized)
    normalized = WHITESPACE.sub(" ", normalized).strip()

    if not normalized:
        raise ValidationFailed("Skill name must not be empty.")
    if len(normalized) > MAX_SKILL_NAME_LENGTH:
        raise ValidationFailed(f"Skill name must be at most {MAX_SKILL_NAME_LENGTH} characters.")
    return normalized


async def find_skill_by_name(db: AsyncSession, name: str) -> Optional[Skill]:
    result = await db.execute(select(Skill).where(Skill.name == name))
    return result.scalar_one_or_none()


async def get_skill(db: AsyncSession, skill_id: int) -> Skill:
    skill = await db.get(Skill, skill_id)
    if not skill:
        raise NotFound("Skill not found.")
    return skill


async def list_skills(db: AsyncSession) -> list[Skill]:
    result = await db.execute(select(Skill).order_by(Skill.name))
    return list(result.scalars().all())


async def resolve_skills(db: AsyncSession, skill_ids: Iterable[int]) -> list[Skill]:
    """
    Load the skills a job references, in request order, ignoring repeats.

    Raises:
        NotFound: Any id is unknown
    """
    unique_ids = list(dict.fromkeys(skill_ids))
    if not unique_ids:
        return []

    result = await db.execute(select(Skill).where(Skill.id.in_(unique_ids)))
    by_id = {skill.id: skill for skill in result.scalars().all()}
    missing = [skill_id for skill_id in unique_ids if skill_id not in by_id]
    if missing:
        raise NotFound(f"Skill not found: {', '.join(str(skill_id) for skill_id in missing)}")
    return [by_id[skill_id] for skill_id in unique_ids]


async def _commit_name(db: AsyncSession, skill: Skill) -> Skill:
    # The unique index catches a concurrent insert of the same name
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateResource("A skill with this name already exists.")
    await db.refresh(skill)
    return skill


async def create_skill(db: AsyncSession, actor, name: str) -> Skill:
    """
    Add a skill to the catalog (ADMIN only).

    Raises:
        Unauthorized: Actor is not an admin
        DuplicateResource: The normalized name already exists
    """
    policy.ensure_role(actor, UserRole.ADMIN)
    normalized = normalize_skill_name(name)
    if await find_skill_by_name(db, normalized):
        raise DuplicateResource("A skill with this name already exists.")

    skill = Skill(name=normalized)
    db.add(skill)
    skill = await _commit_name(db, skill)

    logger.info(f"Skill created: {skill.name}", extra={"skill_id": skill.id, "user_id": actor.id})
    return skill


async def update_skill(db: AsyncSession, actor, skill_id: int, name: str) -> Skill:
    """Rename a skill (ADMIN only). Jobs keep pointing at the same row."""
    policy.ensure_role(actor, UserRole.ADMIN)
    skill = await get_skill(db, skill_id)
    normalized = normalize_skill_name(name)

    existing = await find_skill_by_name(db, normalized)
    if existing and existing.id != skill.id:
        raise DuplicateResource("A skill with this name already exists.")

    previous = skill.name
    skill.name = normalized
    skill = await _commit_name(db, skill)

    logger.info(f"Skill renamed: {previous} → {skill.name}", extra={"skill_id": skill.id})
    return skill


async def delete_skill(db: AsyncSession, actor, skill_id: int) -> None:
    """Remove a skill (ADMIN only) and untag every job that listed it."""
    policy.ensure_role(actor, UserRole.ADMIN)
    skill = await get_skill(db, skill_id)

    await db.execute(delete(job_skills).where(job_skills.c.skill_id == skill.id))
    await db.delete(skill)
    await db.commit()

    logger.info(f"Skill deleted: {skill.name}", extra={"skill_id": skill_id, "user_id": actor.id})
