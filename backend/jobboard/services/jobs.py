"""
Job posting flows.

Every mutation is one transaction: load (row-locked), authorize, run the
job state machine, commit. Company-scoped mutations are gated by
``ensure_company_role(actor, job.company_id, EMPLOYER, RECRUITER)``.
"""
import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.database_types import utcnow
from jobboard.errors import IllegalStateTransition, NotFound, Unauthorized, ValidationFailed
from jobboard.models.company import Company
from jobboard.models.job import Job, JobStatus
from jobboard.models.user import COMPANY_ROLES
from jobboard.schemas.job import JobCreate, JobUpdate
from jobboard.services import policy
from jobboard.services.skills import resolve_skills
from jobboard.services.state_machine import ensure_job_initial_state, repost, transition_job

logger = logging.getLogger(__name__)

# Fields copied when a closed job is duplicated
DUPLICATED_FIELDS = (
    "title",
    "location",
    "description",
    "employment_type",
    "work_arrangement",
    "salary_min",
    "salary_max",
    "currency_code",
)


def _validate_salary_range(salary_min: Optional[float], salary_max: Optional[float]) -> None:
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise ValidationFailed("Maximum salary must be greater than or equal to minimum salary.")


async def load_job(db: AsyncSession, job_id: int, lock: bool = False) -> Job:
    """
    Fetch a non-deleted job.

    With ``lock=True`` the row is re-read from the database under
    SELECT FOR UPDATE, never served from the session's identity map, so
    status decisions are made on current state.

    Raises:
        NotFound: Missing or DELETED job
    """
    stmt = select(Job).where(Job.id == job_id, Job.status != JobStatus.DELETED.value)
    if lock:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(stmt)
    job = result.scalar_one_or_none()
    if not job:
        raise NotFound("Job not found.")
    return job


async def load_job_for_update(db: AsyncSession, job_id: int) -> Job:
    return await load_job(db, job_id, lock=True)


async def load_active_company(db: AsyncSession, company_id: Optional[int]) -> Company:
    company = await db.get(Company, company_id) if company_id is not None else None
    if not company or company.deleted:
        raise NotFound("Company not found.")
    return company


async def create_job(db: AsyncSession, actor, data: JobCreate) -> Job:
    """Create a job in the actor's company, starting as DRAFT or ACTIVE."""
    policy.ensure_role(actor, *COMPANY_ROLES)
    if actor.company_id is None:
        raise Unauthorized("You are not associated with any company.")
    company = await load_active_company(db, actor.company_id)

    _validate_salary_range(data.salary_min, data.salary_max)
    ensure_job_initial_state(data.status)
    skills = await resolve_skills(db, data.skill_ids)

    job = Job(
        company_id=company.id,
        created_by_id=actor.id,
        title=data.title.strip(),
        location=data.location,
        description=data.description,
        employment_type=data.employment_type,
        work_arrangement=data.work_arrangement,
        salary_min=data.salary_min,
        salary_max=data.salary_max,
        currency_code=data.currency_code.upper(),
        status=data.status.value,
        skills=skills,
    )
    db.add(job)
    await db.commit()
    await db.refresh(job)

    logger.info(f"Created job {job.id} ({job.status}) for company {company.id}", extra={"job_id": job.id})
    return job


async def update_job(db: AsyncSession, actor, job_id: int, data: JobUpdate) -> Job:
    """
    Update job fields and, optionally, its status.

    A status change goes through the state machine (DRAFT → ACTIVE,
    ACTIVE → CLOSED); setting the current status again is a no-op.
    """
    job = await load_job_for_update(db, job_id)
    policy.ensure_company_role(actor, job.company_id, *COMPANY_ROLES)

    changes = data.model_dump(exclude_unset=True, exclude={"status", "skill_ids"})
    _validate_salary_range(
        changes.get("salary_min", job.salary_min),
        changes.get("salary_max", job.salary_max),
    )

    if data.skill_ids is not None:
        job.skills = await resolve_skills(db, data.skill_ids)
    if data.status is not None and data.status.value != job.status:
        transition_job(job, data.status)

    if "title" in changes and changes["title"] is not None:
        changes["title"] = changes["title"].strip()
    if "currency_code" in changes and changes["currency_code"] is not None:
        changes["currency_code"] = changes["currency_code"].upper()
    for field, value in changes.items():
        setattr(job, field, value)
    job.updated_at = utcnow()

    await db.commit()
    await db.refresh(job)
    return job


async def close_job(db: AsyncSession, actor, job_id: int) -> Job:
    """ACTIVE → CLOSED. Applications can no longer be created or reviewed."""
    job = await load_job_for_update(db, job_id)
    policy.ensure_company_role(actor, job.company_id, *COMPANY_ROLES)

    transition_job(job, JobStatus.CLOSED)
    await db.commit()
    await db.refresh(job)
    return job


async def repost_job(db: AsyncSession, actor, job_id: int) -> Job:
    """
    ACTIVE → ACTIVE repost, at most once per cooldown window.

    Raises:
        IllegalStateTransition: Job is not ACTIVE (nothing is written)
        RateLimited: Cooldown since creation/last repost has not passed
    """
    job = await load_job_for_update(db, job_id)
    policy.ensure_company_role(actor, job.company_id, *COMPANY_ROLES)

    repost(job)
    await db.commit()
    await db.refresh(job)

    logger.info(f"Job {job.id} reposted at {job.reposted_at.isoformat()}", extra={"job_id": job.id})
    return job


async def duplicate_closed_job(db: AsyncSession, actor, job_id: int, status: JobStatus) -> Job:
    """
    Reopen a CLOSED job by copying it into a brand new job.

    The closed original is left untouched. The copy belongs to the actor
    and starts in ``status`` (DRAFT or ACTIVE).
    """
    original = await load_job(db, job_id)
    policy.ensure_company_role(actor, original.company_id, *COMPANY_ROLES)

    if JobStatus(original.status) != JobStatus.CLOSED:
        raise IllegalStateTransition("Only closed jobs can be duplicated.")
    ensure_job_initial_state(status)

    duplicate = Job(
        company_id=original.company_id,
        created_by_id=actor.id,
        status=status.value,
        skills=list(original.skills),
        **{field: getattr(original, field) for field in DUPLICATED_FIELDS},
    )
    db.add(duplicate)
    await db.commit()
    await db.refresh(duplicate)

    logger.info(f"Duplicated closed job {original.id} into job {duplicate.id} ({status.value})")
    return duplicate


async def delete_job(db: AsyncSession, actor, job_id: int) -> None:
    """Soft delete: any non-DELETED state → DELETED. The row is kept."""
    job = await load_job_for_update(db, job_id)
    policy.ensure_company_role(actor, job.company_id, *COMPANY_ROLES)

    transition_job(job, JobStatus.DELETED)
    await db.commit()


async def get_job(db: AsyncSession, actor, job_id: int) -> Job:
    """
    Fetch a job for display.

    ACTIVE jobs are visible to everyone signed in; drafts and closed jobs
    only to the owning company and admins.
    """
    job = await load_job(db, job_id)
    if JobStatus(job.status) != JobStatus.ACTIVE and not policy.is_admin(actor):
        if not policy.belongs_to_company(actor, job.company_id):
            raise NotFound("Job not found.")
    return job


async def list_active_jobs(db: AsyncSession) -> list[Job]:
    result = await db.execute(
        select(Job)
        .where(Job.status == JobStatus.ACTIVE.value)
        .order_by(Job.created_at.desc())
    )
    return list(result.scalars().all())


async def list_company_jobs(db: AsyncSession, actor, status: JobStatus) -> list[Job]:
    """Jobs of the actor's own company in one status (never DELETED)."""
    policy.ensure_role(actor, *COMPANY_ROLES)
    if status == JobStatus.DELETED:
        raise ValidationFailed("Deleted jobs cannot be listed.")

    result = await db.execute(
        select(Job)
        .where(Job.company_id == actor.company_id, Job.status == status.value)
        .order_by(Job.created_at.desc())
    )
    return list(result.scalars().all())


async def transfer_job_management(
    db: AsyncSession,
    from_user_id: int,
    company_id: int,
    to_user_id: int
) -> int:
    """
    Hand a leaving employer/recruiter's jobs over to another company member.

    Returns:
        Number of jobs reassigned
    """
    result = await db.execute(
        update(Job)
        .where(Job.created_by_id == from_user_id, Job.company_id == company_id)
        .values(created_by_id=to_user_id, updated_at=utcnow())
        .execution_options(synchronize_session="fetch")
    )
    count = result.rowcount or 0
    if count:
        logger.info(
            f"Transferred {count} jobs from user {from_user_id} to user {to_user_id}",
            extra={"company_id": company_id}
        )
    return count


async def mark_company_jobs_deleted(db: AsyncSession, company_id: int) -> int:
    """Soft-delete every remaining job of a company through the state machine."""
    result = await db.execute(
        select(Job)
        .where(Job.company_id == company_id, Job.status != JobStatus.DELETED.value)
        .with_for_update()
    )
    jobs = list(result.scalars().all())
    for job in jobs:
        transition_job(job, JobStatus.DELETED)
    return len(jobs)
