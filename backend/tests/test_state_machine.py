"""
Tests for the job and application state machines.

Validates:
- All valid job transitions and the repost cooldown
- Terminal states (DELETED, ACCEPTED, REJECTED, WITHDRAWN) have no exits
- Actor guards: withdraw is candidate-only, decisions are company-only
- Company decisions require an ACTIVE job
"""
from datetime import timedelta

import pytest

from jobboard.database_types import utcnow
from jobboard.errors import IllegalStateTransition, RateLimited, Unauthorized
from jobboard.models.application import Application, ApplicationStatus
from jobboard.models.job import Job, JobStatus
from jobboard.services.state_machine import (
    ActorKind,
    can_transition_application,
    can_transition_job,
    ensure_job_initial_state,
    repost,
    transition_application,
    transition_job,
)

T0 = utcnow()


def make_job(status: JobStatus, created_at=T0, reposted_at=None) -> Job:
    return Job(
        id=1,
        company_id=1,
        created_by_id=1,
        title="Engineer",
        location="Remote",
        description="...",
        salary_min=1,
        currency_code="USD",
        status=status.value,
        created_at=created_at,
        reposted_at=reposted_at,
    )


def make_application(status: ApplicationStatus) -> Application:
    return Application(id=1, job_id=1, candidate_id=1, status=status.value)


# =============================================================================
# Job transitions
# =============================================================================

@pytest.mark.parametrize("from_status,to_status", [
    (JobStatus.DRAFT, JobStatus.ACTIVE),
    (JobStatus.DRAFT, JobStatus.DELETED),
    (JobStatus.ACTIVE, JobStatus.CLOSED),
    (JobStatus.ACTIVE, JobStatus.DELETED),
    (JobStatus.CLOSED, JobStatus.DELETED),
])
def test_valid_job_transitions(from_status, to_status):
    job = make_job(from_status)

    transition_job(job, to_status)

    assert job.status == to_status.value


@pytest.mark.parametrize("from_status,to_status", [
    (JobStatus.DRAFT, JobStatus.CLOSED),
    (JobStatus.CLOSED, JobStatus.ACTIVE),
    (JobStatus.CLOSED, JobStatus.DRAFT),
    (JobStatus.ACTIVE, JobStatus.DRAFT),
    (JobStatus.DELETED, JobStatus.ACTIVE),
    (JobStatus.DELETED, JobStatus.DELETED),
])
def test_invalid_job_transitions(from_status, to_status):
    job = make_job(from_status)

    assert not can_transition_job(from_status, to_status)
    with pytest.raises(IllegalStateTransition):
        transition_job(job, to_status)
    assert job.status == from_status.value


def test_new_jobs_start_as_draft_or_active():
    ensure_job_initial_state(JobStatus.DRAFT)
    ensure_job_initial_state(JobStatus.ACTIVE)
    for status in (JobStatus.CLOSED, JobStatus.DELETED):
        with pytest.raises(IllegalStateTransition):
            ensure_job_initial_state(status)


def test_repost_inside_cooldown_is_rate_limited():
    job = make_job(JobStatus.ACTIVE)

    with pytest.raises(RateLimited):
        transition_job(job, JobStatus.ACTIVE, now=T0 + timedelta(days=6), cooldown_days=7)
    assert job.reposted_at is None


def test_repost_after_cooldown_stamps_reposted_at():
    job = make_job(JobStatus.ACTIVE)
    now = T0 + timedelta(days=7)

    transition_job(job, JobStatus.ACTIVE, now=now, cooldown_days=7)

    assert job.status == JobStatus.ACTIVE.value
    assert job.reposted_at == now


def test_repost_cooldown_restarts_from_last_repost():
    job = make_job(JobStatus.ACTIVE, reposted_at=T0 + timedelta(days=10))

    with pytest.raises(RateLimited):
        transition_job(job, JobStatus.ACTIVE, now=T0 + timedelta(days=14), cooldown_days=7)
    transition_job(job, JobStatus.ACTIVE, now=T0 + timedelta(days=17), cooldown_days=7)


@pytest.mark.parametrize("status", [JobStatus.DRAFT, JobStatus.CLOSED])
def test_repost_requires_active_job(status):
    job = make_job(status, created_at=T0 - timedelta(days=30))

    with pytest.raises(IllegalStateTransition):
        repost(job, now=T0, cooldown_days=7)
    assert job.status == status.value
    assert job.reposted_at is None


def test_repost_of_active_job_goes_through_cooldown():
    job = make_job(JobStatus.ACTIVE, created_at=T0 - timedelta(days=8))

    repost(job, now=T0, cooldown_days=7)

    assert job.reposted_at == T0
    with pytest.raises(RateLimited):
        repost(job, now=T0 + timedelta(days=1), cooldown_days=7)


# =============================================================================
# Application transitions
# =============================================================================

@pytest.mark.parametrize("to_status", [
    ApplicationStatus.UNDER_REVIEW,
    ApplicationStatus.REJECTED,
    ApplicationStatus.ACCEPTED,
])
def test_company_moves_open_application(to_status):
    application = make_application(ApplicationStatus.APPLIED)

    transition_application(application, to_status, ActorKind.COMPANY, JobStatus.ACTIVE)

    assert application.status == to_status.value


@pytest.mark.parametrize("from_status", [ApplicationStatus.APPLIED, ApplicationStatus.UNDER_REVIEW])
def test_candidate_withdraws_open_application(from_status):
    application = make_application(from_status)

    transition_application(
        application, ApplicationStatus.WITHDRAWN, ActorKind.CANDIDATE, JobStatus.CLOSED
    )

    assert application.status == ApplicationStatus.WITHDRAWN.value


@pytest.mark.parametrize("from_status", [
    ApplicationStatus.ACCEPTED,
    ApplicationStatus.REJECTED,
    ApplicationStatus.WITHDRAWN,
])
def test_withdraw_from_terminal_state_is_illegal(from_status):
    application = make_application(from_status)

    with pytest.raises(IllegalStateTransition):
        transition_application(
            application, ApplicationStatus.WITHDRAWN, ActorKind.CANDIDATE, JobStatus.ACTIVE
        )
    assert application.status == from_status.value


def test_rewithdraw_message():
    application = make_application(ApplicationStatus.WITHDRAWN)

    with pytest.raises(IllegalStateTransition, match="already withdrawn"):
        transition_application(
            application, ApplicationStatus.WITHDRAWN, ActorKind.CANDIDATE, JobStatus.ACTIVE
        )


def test_under_review_cannot_go_back_to_applied():
    assert not can_transition_application(ApplicationStatus.UNDER_REVIEW, ApplicationStatus.APPLIED)


def test_candidate_cannot_decide():
    application = make_application(ApplicationStatus.APPLIED)

    with pytest.raises(Unauthorized):
        transition_application(
            application, ApplicationStatus.ACCEPTED, ActorKind.CANDIDATE, JobStatus.ACTIVE
        )


def test_company_cannot_withdraw():
    application = make_application(ApplicationStatus.APPLIED)

    with pytest.raises(Unauthorized):
        transition_application(
            application, ApplicationStatus.WITHDRAWN, ActorKind.COMPANY, JobStatus.ACTIVE
        )


@pytest.mark.parametrize("job_status", [JobStatus.DRAFT, JobStatus.CLOSED, JobStatus.DELETED])
def test_company_decision_requires_active_job(job_status):
    application = make_application(ApplicationStatus.UNDER_REVIEW)

    with pytest.raises(IllegalStateTransition):
        transition_application(
            application, ApplicationStatus.REJECTED, ActorKind.COMPANY, job_status
        )
