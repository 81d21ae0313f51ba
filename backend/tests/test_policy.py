"""
Tests for the authorization policy.

The policy is pure: identities are built directly, no database involved.
"""
import pytest

from jobboard.database_types import utcnow
from jobboard.errors import Unauthorized
from jobboard.models.user import UserRole, COMPANY_ROLES
from jobboard.services import policy
from jobboard.services.gateway import AuthenticatedIdentity

COMPANY_A = 1
COMPANY_B = 2


def make_identity(user_id: int, role: UserRole, company_id=None) -> AuthenticatedIdentity:
    return AuthenticatedIdentity(
        id=user_id,
        email=f"user{user_id}@example.com",
        role=role,
        company_id=company_id,
        issued_at=utcnow(),
    )


def test_recruiter_of_company_a_refused_on_company_b():
    recruiter = make_identity(10, UserRole.RECRUITER, COMPANY_A)

    policy.ensure_company_role(recruiter, COMPANY_A, *COMPANY_ROLES)
    with pytest.raises(Unauthorized):
        policy.ensure_company_role(recruiter, COMPANY_B, *COMPANY_ROLES)


def test_membership_without_role_is_refused():
    """A recruiter passes membership but not an employer-only check."""
    recruiter = make_identity(10, UserRole.RECRUITER, COMPANY_A)

    with pytest.raises(Unauthorized):
        policy.ensure_company_role(recruiter, COMPANY_A, UserRole.EMPLOYER)


def test_identity_without_company_never_belongs():
    candidate = make_identity(1, UserRole.CANDIDATE)

    assert policy.belongs_to_company(candidate, COMPANY_A) is False
    assert policy.belongs_to_company(candidate, None) is False


def test_ensure_role_lists_required_roles():
    candidate = make_identity(1, UserRole.CANDIDATE)

    with pytest.raises(Unauthorized) as exc_info:
        policy.ensure_role(candidate, UserRole.EMPLOYER, UserRole.RECRUITER)

    assert "EMPLOYER" in exc_info.value.message
    assert "RECRUITER" in exc_info.value.message
    assert exc_info.value.status_code == 403


def test_ensure_self_or_admin():
    owner = make_identity(1, UserRole.CANDIDATE)
    stranger = make_identity(2, UserRole.CANDIDATE)
    admin = make_identity(3, UserRole.ADMIN)

    policy.ensure_self_or_admin(owner, owner_id=1)
    policy.ensure_self_or_admin(admin, owner_id=1)
    with pytest.raises(Unauthorized):
        policy.ensure_self_or_admin(stranger, owner_id=1)


@pytest.mark.parametrize(
    "identity",
    [
        make_identity(99, UserRole.ADMIN),
        make_identity(5, UserRole.CANDIDATE),
        make_identity(20, UserRole.EMPLOYER, COMPANY_A),
        make_identity(21, UserRole.RECRUITER, COMPANY_A),
    ],
    ids=["admin", "owner", "employer", "recruiter"],
)
def test_application_access_allowed(identity):
    policy.ensure_application_access(identity, candidate_id=5, job_company_id=COMPANY_A)


@pytest.mark.parametrize(
    "identity",
    [
        make_identity(6, UserRole.CANDIDATE),
        make_identity(30, UserRole.RECRUITER, COMPANY_B),
        make_identity(31, UserRole.EMPLOYER, COMPANY_B),
    ],
    ids=["other-candidate", "foreign-recruiter", "foreign-employer"],
)
def test_application_access_denied(identity):
    with pytest.raises(Unauthorized):
        policy.ensure_application_access(identity, candidate_id=5, job_company_id=COMPANY_A)
