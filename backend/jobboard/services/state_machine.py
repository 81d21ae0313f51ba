"""
State machines for job postings and applications.
ALL status changes must go through this module.

Transition functions mutate the already-loaded (and, for writes, row-locked)
entity and never commit; the calling service owns the transaction.
"""
import enum
import logging
from datetime import datetime, timedelta
from typing import Optional, Dict

from jobboard.config import settings
from jobboard.database_types import utcnow
from jobboard.errors import IllegalStateTransition, RateLimited, Unauthorized
from jobboard.models.application import Application, ApplicationStatus
from jobboard.models.job import Job, JobStatus

# Configure logger
logger = logging.getLogger(__name__)


# =============================================================================
# Job
# =============================================================================

JOB_TRANSITIONS: Dict[JobStatus, set[JobStatus]] = {
    JobStatus.DRAFT: {JobStatus.ACTIVE, JobStatus.DELETED},
    JobStatus.ACTIVE: {
        JobStatus.ACTIVE,  # Repost (cooldown applies)
        JobStatus.CLOSED,
        JobStatus.DELETED,
    },
    JobStatus.CLOSED: {JobStatus.DELETED},  # Reopening = duplicate into a new job
    JobStatus.DELETED: set(),  # Terminal
}

# A new job (created or duplicated from a closed one) starts here
JOB_INITIAL_STATES = {JobStatus.DRAFT, JobStatus.ACTIVE}


def can_transition_job(from_status: JobStatus, to_status: JobStatus) -> bool:
    """Check if a job transition is allowed without touching the entity"""
    return to_status in JOB_TRANSITIONS.get(from_status, set())


def ensure_job_initial_state(status: JobStatus) -> None:
    if status not in JOB_INITIAL_STATES:
        raise IllegalStateTransition(
            f"A new job must start as DRAFT or ACTIVE, not {status.value}"
        )


def ensure_repost_cooldown(job: Job, now: datetime, cooldown_days: int) -> None:
    """Raise RateLimited unless ``cooldown_days`` passed since the last repost/creation."""
    next_allowed = job.last_action_at() + timedelta(days=cooldown_days)
    if now < next_allowed:
        raise RateLimited(
            f"This job can only be reposted once every {cooldown_days} days. "
            f"Next repost allowed at {next_allowed.isoformat()}"
        )


def transition_job(
    job: Job,
    to_status: JobStatus,
    now: Optional[datetime] = None,
    cooldown_days: Optional[int] = None
) -> Job:
    """
    Move a job to ``to_status``.

    ACTIVE -> ACTIVE is a repost: allowed only once the cooldown has passed,
    and it stamps ``reposted_at``.

    Raises:
        IllegalStateTransition: Transition not in JOB_TRANSITIONS
        RateLimited: Repost attempted inside the cooldown window
    """
    now = now or utcnow()
    current = JobStatus(job.status)

    if not can_transition_job(current, to_status):
        raise IllegalStateTransition(
            f"Invalid job transition from {current.value} to {to_status.value}"
        )

    if current == JobStatus.ACTIVE and to_status == JobStatus.ACTIVE:
        if cooldown_days is None:
            cooldown_days = settings.repost_cooldown_days
        ensure_repost_cooldown(job, now, cooldown_days)
        job.reposted_at = now

    job.status = to_status.value
    job.updated_at = now

    logger.info(
        f"Job state transition: {current.value} → {to_status.value}",
        extra={"job_id": job.id, "from_state": current.value, "to_state": to_status.value}
    )
    return job


def repost(
    job: Job,
    now: Optional[datetime] = None,
    cooldown_days: Optional[int] = None
) -> Job:
    """
    ACTIVE -> ACTIVE repost. Any other current state is rejected before
    the job is touched, so a draft can never be published this way.

    Raises:
        IllegalStateTransition: Job is not ACTIVE
        RateLimited: Repost attempted inside the cooldown window
    """
    current = JobStatus(job.status)
    if current != JobStatus.ACTIVE:
        raise IllegalStateTransition(
            f"Only active jobs can be reposted (job is {current.value})"
        )
    return transition_job(job, JobStatus.ACTIVE, now=now, cooldown_days=cooldown_days)


# =============================================================================
# Application
# =============================================================================

class ActorKind(str, enum.Enum):
    """Who is driving an application transition"""
    CANDIDATE = "candidate"  # The owning candidate
    COMPANY = "company"  # Employer/recruiter of the job's company


APPLICATION_TRANSITIONS: Dict[ApplicationStatus, set[ApplicationStatus]] = {
    ApplicationStatus.APPLIED: {
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.REJECTED,
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.WITHDRAWN,
    },
    ApplicationStatus.UNDER_REVIEW: {
        ApplicationStatus.REJECTED,
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.WITHDRAWN,
    },
    ApplicationStatus.REJECTED: set(),  # Terminal
    ApplicationStatus.ACCEPTED: set(),  # Terminal
    ApplicationStatus.WITHDRAWN: set(),  # Terminal
}

APPLICATION_TERMINAL_STATES = {
    status for status, targets in APPLICATION_TRANSITIONS.items() if not targets
}

# Which actor may move an application into each target state
APPLICATION_TARGET_ACTORS: Dict[ApplicationStatus, ActorKind] = {
    ApplicationStatus.UNDER_REVIEW: ActorKind.COMPANY,
    ApplicationStatus.REJECTED: ActorKind.COMPANY,
    ApplicationStatus.ACCEPTED: ActorKind.COMPANY,
    ApplicationStatus.WITHDRAWN: ActorKind.CANDIDATE,
}


def can_transition_application(from_status: ApplicationStatus, to_status: ApplicationStatus) -> bool:
    """Check if an application transition is allowed without touching the entity"""
    return to_status in APPLICATION_TRANSITIONS.get(from_status, set())


def is_application_final(status: ApplicationStatus) -> bool:
    return status in APPLICATION_TERMINAL_STATES


def transition_application(
    application: Application,
    to_status: ApplicationStatus,
    actor_kind: ActorKind,
    job_status: JobStatus,
    now: Optional[datetime] = None
) -> Application:
    """
    Move an application to ``to_status``.

    Guards, in order:
    1. The actor kind must own the target state (withdraw is candidate-only,
       review/decisions are company-only)
    2. The transition must be in APPLICATION_TRANSITIONS (terminal states
       have no exits, so re-withdrawing fails here too)
    3. Company-initiated transitions require the job to be ACTIVE

    Raises:
        Unauthorized: Wrong actor for the target state
        IllegalStateTransition: Transition or guard rejected
    """
    now = now or utcnow()
    current = ApplicationStatus(application.status)

    if APPLICATION_TARGET_ACTORS.get(to_status) != actor_kind:
        raise Unauthorized(
            f"A {actor_kind.value} cannot move an application to {to_status.value}"
        )

    if not can_transition_application(current, to_status):
        if current == ApplicationStatus.WITHDRAWN and to_status == ApplicationStatus.WITHDRAWN:
            message = "Application already withdrawn."
        elif is_application_final(current):
            message = f"Application is already finalized ({current.value})."
        else:
            message = f"Invalid application transition from {current.value} to {to_status.value}"
        raise IllegalStateTransition(message)

    if actor_kind == ActorKind.COMPANY and job_status != JobStatus.ACTIVE:
        raise IllegalStateTransition(
            f"Cannot update applications for a job in state {job_status.value}"
        )

    application.status = to_status.value
    application.updated_at = now

    logger.info(
        f"Application state transition: {current.value} → {to_status.value}",
        extra={
            "application_id": application.id,
            "from_state": current.value,
            "to_state": to_status.value,
            "actor_kind": actor_kind.value,
        }
    )
    return application
