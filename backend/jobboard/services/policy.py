"""
Authorization policy: pure decision functions, no I/O.

Checks take the explicit ``AuthenticatedIdentity`` produced by the gateway
(anything with ``id``, ``role`` and ``company_id`` works, including a
``User`` row). ``ensure_*`` functions raise ``Unauthorized``.

Admin short-circuits ownership checks before any company lookup, so an
admin without a company never trips a membership comparison.
"""
import logging
from typing import Optional

from jobboard.errors import Unauthorized
from jobboard.models.user import UserRole, COMPANY_ROLES

logger = logging.getLogger(__name__)


def has_role(identity, *roles: UserRole) -> bool:
    return identity.role in roles


def is_admin(identity) -> bool:
    return identity.role == UserRole.ADMIN


def belongs_to_company(identity, company_id: Optional[int]) -> bool:
    if identity.company_id is None or company_id is None:
        return False
    return identity.company_id == company_id


def ensure_role(identity, *roles: UserRole) -> None:
    """Require one of ``roles``."""
    if has_role(identity, *roles):
        return
    required = ", ".join(role.value for role in roles)
    logger.warning(
        f"User {identity.id} (role={identity.role.value}) lacks required role",
        extra={"user_id": identity.id, "required_roles": required}
    )
    raise Unauthorized(
        f"You do not have the required role to perform this action. Required roles: {required}"
    )


def ensure_belongs_to_company(identity, company_id: Optional[int]) -> None:
    if not belongs_to_company(identity, company_id):
        logger.warning(
            f"User {identity.id} attempted action on company {company_id}",
            extra={"user_id": identity.id, "company_id": company_id}
        )
        raise Unauthorized("You are not associated with this company.")


def ensure_company_role(identity, company_id: Optional[int], *roles: UserRole) -> None:
    """
    Combined tenant + role check gating every company-scoped mutation.

    Membership is checked first: a recruiter of company A is refused on
    company B regardless of role.
    """
    ensure_belongs_to_company(identity, company_id)
    ensure_role(identity, *roles)


def ensure_self_or_admin(identity, owner_id: int) -> None:
    if is_admin(identity):
        return
    if identity.id != owner_id:
        raise Unauthorized("Not authorized for this action.")


def ensure_application_access(identity, candidate_id: int, job_company_id: Optional[int]) -> None:
    """
    Allow admins, the owning candidate, or company staff of the job's company.

    Args:
        identity: The acting identity
        candidate_id: Owner of the application
        job_company_id: Company owning the application's job
    """
    # Case 1: admin
    if is_admin(identity):
        return

    # Case 2: owning candidate
    if identity.id == candidate_id:
        return

    # Case 3: employer/recruiter of the job's company
    if has_role(identity, *COMPANY_ROLES) and belongs_to_company(identity, job_company_id):
        return

    raise Unauthorized("You do not have permission to view this application.")
