"""
Application flows.

Creating an application re-reads the job under a row lock immediately
before the insert, so a job closed concurrently can never collect a new
application. The (job, candidate) pair is unique, enforced up front and by
the ``uq_job_candidate`` constraint.
"""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.errors import DuplicateResource, IllegalStateTransition, NotFound, Unauthorized, ValidationFailed
from jobboard.models.application import Application, ApplicationStatus
from jobboard.models.job import Job, JobStatus
from jobboard.models.user import UserRole, COMPANY_ROLES
from jobboard.services import policy
from jobboard.services.jobs import load_job, load_job_for_update
from jobboard.services.state_machine import (
    ActorKind,
    is_application_final,
    transition_application,
)

logger = logging.getLogger(__name__)

# Decisions a company member can record explicitly
DECISION_STATES = {ApplicationStatus.REJECTED, ApplicationStatus.ACCEPTED}


async def _load_application(db: AsyncSession, application_id: int, lock: bool = False) -> Application:
    stmt = select(Application).where(Application.id == application_id)
    if lock:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(stmt)
    application = result.scalar_one_or_none()
    if not application:
        raise NotFound(f"Application {application_id} not found")
    return application


async def _load_owning_job(db: AsyncSession, application: Application) -> Job:
    """The application's job in whatever state it is in (DELETED included)."""
    result = await db.execute(
        select(Job)
        .where(Job.id == application.job_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def apply(
    db: AsyncSession,
    actor,
    job_id: int,
    resume_url: Optional[str] = None
) -> Application:
    """
    Apply to an ACTIVE job as a candidate.

    Raises:
        Unauthorized: Actor is not a candidate
        NotFound: Job missing or deleted
        IllegalStateTransition: Job is not ACTIVE at the time of the insert
        DuplicateResource: Candidate already applied to this job
    """
    policy.ensure_role(actor, UserRole.CANDIDATE)

    # Read-then-decide on fresh, locked state
    job = await load_job_for_update(db, job_id)
    if JobStatus(job.status) != JobStatus.ACTIVE:
        raise IllegalStateTransition("Cannot apply to an inactive job.")

    existing = await db.execute(
        select(Application.id).where(
            Application.job_id == job.id,
            Application.candidate_id == actor.id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise DuplicateResource("You have already applied to this job.")

    application = Application(
        job_id=job.id,
        candidate_id=actor.id,
        resume_url=resume_url,
        status=ApplicationStatus.APPLIED.value,
    )
    db.add(application)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateResource("You have already applied to this job.")

    await db.commit()
    await db.refresh(application)

    logger.info(
        f"Candidate {actor.id} applied to job {job.id}",
        extra={"application_id": application.id, "job_id": job.id}
    )
    return application


async def mark_under_review(db: AsyncSession, actor, application_id: int) -> Application:
    """APPLIED → UNDER_REVIEW by an employer/recruiter of the job's company."""
    application = await _load_application(db, application_id, lock=True)
    job = await _load_owning_job(db, application)
    policy.ensure_company_role(actor, job.company_id, *COMPANY_ROLES)

    transition_application(
        application, ApplicationStatus.UNDER_REVIEW, ActorKind.COMPANY, JobStatus(job.status)
    )
    await db.commit()
    await db.refresh(application)
    return application


async def decide(
    db: AsyncSession,
    actor,
    application_id: int,
    status: Optional[ApplicationStatus] = None,
    notes: Optional[str] = None
) -> Application:
    """
    Record a decision and/or feedback on an application.

    - ``status`` REJECTED/ACCEPTED finalizes the application
    - feedback alone (no status) moves APPLIED → UNDER_REVIEW implicitly
    - feedback on a finalized application is refused

    Raises:
        ValidationFailed: Nothing to record, or status is not a decision
        Unauthorized: Actor is not staff of the job's company
        IllegalStateTransition: Finalized application or job not ACTIVE
    """
    if status is None and notes is None:
        raise ValidationFailed("Provide a decision status, feedback notes, or both.")
    if status is not None and status not in DECISION_STATES:
        raise ValidationFailed("Decision status must be REJECTED or ACCEPTED.")

    application = await _load_application(db, application_id, lock=True)
    job = await _load_owning_job(db, application)
    policy.ensure_company_role(actor, job.company_id, *COMPANY_ROLES)

    current = ApplicationStatus(application.status)
    job_status = JobStatus(job.status)

    if status is not None:
        transition_application(application, status, ActorKind.COMPANY, job_status)
    else:
        if is_application_final(current):
            raise IllegalStateTransition(f"Application is already finalized ({current.value}).")
        if job_status != JobStatus.ACTIVE:
            raise IllegalStateTransition(
                f"Cannot update applications for a job in state {job_status.value}"
            )
        if current == ApplicationStatus.APPLIED:
            transition_application(
                application, ApplicationStatus.UNDER_REVIEW, ActorKind.COMPANY, job_status
            )

    if notes is not None:
        application.notes = notes

    await db.commit()
    await db.refresh(application)
    return application


async def withdraw(db: AsyncSession, actor, application_id: int) -> Application:
    """
    Withdraw an open application. Only the owning candidate may do this.

    Raises:
        Unauthorized: Actor is not the owning candidate
        IllegalStateTransition: Application already finalized or withdrawn
    """
    application = await _load_application(db, application_id, lock=True)
    if application.candidate_id != actor.id:
        raise Unauthorized("You can only withdraw your own application.")

    job = await _load_owning_job(db, application)
    transition_application(
        application, ApplicationStatus.WITHDRAWN, ActorKind.CANDIDATE, JobStatus(job.status)
    )
    await db.commit()
    await db.refresh(application)
    return application


async def get_application(db: AsyncSession, actor, application_id: int) -> Application:
    application = await _load_application(db, application_id)
    job = await _load_owning_job(db, application)
    policy.ensure_application_access(actor, application.candidate_id, job.company_id)
    return application


async def list_for_candidate(db: AsyncSession, actor) -> list[Application]:
    policy.ensure_role(actor, UserRole.CANDIDATE)
    result = await db.execute(
        select(Application)
        .where(Application.candidate_id == actor.id)
        .order_by(Application.applied_at.desc())
    )
    return list(result.scalars().all())


async def list_for_job(db: AsyncSession, actor, job_id: int) -> list[Application]:
    """All applications of one job, for employers/recruiters of its company."""
    job = await load_job(db, job_id)
    policy.ensure_company_role(actor, job.company_id, *COMPANY_ROLES)

    result = await db.execute(
        select(Application)
        .where(Application.job_id == job.id)
        .order_by(Application.applied_at.asc())
    )
    return list(result.scalars().all())


async def delete_application(db: AsyncSession, actor, application_id: int) -> None:
    """Hard delete for moderation (admin only)."""
    policy.ensure_role(actor, UserRole.ADMIN)
    application = await _load_application(db, application_id)
    await db.delete(application)
    await db.commit()

    logger.info(f"Application {application_id} deleted by admin {actor.id}")


async def withdraw_open_applications(db: AsyncSession, candidate_id: int) -> int:
    """
    Withdraw every open application of a candidate (account deactivation).

    Runs inside the caller's transaction.
    """
    result = await db.execute(
        select(Application, Job.status)
        .join(Job, Job.id == Application.job_id)
        .where(
            Application.candidate_id == candidate_id,
            Application.status.in_([
                ApplicationStatus.APPLIED.value,
                ApplicationStatus.UNDER_REVIEW.value,
            ]),
        )
        .with_for_update()
    )
    rows = result.all()
    for application, job_status in rows:
        transition_application(
            application, ApplicationStatus.WITHDRAWN, ActorKind.CANDIDATE, JobStatus(job_status)
        )
    return len(rows)
