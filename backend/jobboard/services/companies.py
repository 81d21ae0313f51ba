"""
Company membership and role assignment.

Every flow that changes a user's role or company invalidates that user's
authentication (session record + revocation timestamp), forcing a login
that picks up the new role. Role and company are always changed together
inside one transaction.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.errors import IllegalStateTransition, ValidationFailed
from jobboard.models.company import Company
from jobboard.models.user import User, UserRole, COMPANY_ROLES
from jobboard.schemas.company import CompanyCreate, CompanyUpdate
from jobboard.services import policy
from jobboard.services.identities import lock_active_user
from jobboard.services.jobs import load_active_company, mark_company_jobs_deleted, transfer_job_management
from jobboard.services.revocation import invalidate_all_authentication

logger = logging.getLogger(__name__)


async def _load_own_company(db: AsyncSession, actor) -> Company:
    """The company the actor is EMPLOYER of."""
    policy.ensure_role(actor, UserRole.EMPLOYER)
    company = await load_active_company(db, actor.company_id)
    policy.ensure_company_role(actor, company.id, UserRole.EMPLOYER)
    return company


async def _related_users(db: AsyncSession, company_id: int) -> list[User]:
    result = await db.execute(
        select(User).where(User.company_id == company_id).with_for_update()
    )
    return list(result.scalars().all())


async def create_company(db: AsyncSession, actor, data: CompanyCreate) -> Company:
    """
    Found a company. The founder becomes its EMPLOYER.

    Only unaffiliated candidates can found a company (one company per
    employer/recruiter).
    """
    policy.ensure_role(actor, UserRole.CANDIDATE)
    founder = await lock_active_user(db, actor.id)
    if founder.company_id is not None:
        raise IllegalStateTransition("You are already associated with a company.")

    company = Company(
        name=data.name.strip(),
        description=data.description,
        industry=data.industry,
        employer_id=founder.id,
    )
    db.add(company)
    await db.flush()

    founder.role = UserRole.EMPLOYER
    founder.company_id = company.id
    await invalidate_all_authentication(db, founder)

    await db.commit()
    await db.refresh(company)

    logger.info(f"Company {company.id} created by user {founder.id}", extra={"company_id": company.id})
    return company


async def appoint_recruiter(db: AsyncSession, actor, user_id: int) -> User:
    """Make an unaffiliated candidate a RECRUITER of the actor's company."""
    company = await _load_own_company(db, actor)
    recruiter = await lock_active_user(db, user_id)

    if recruiter.company_id is not None or recruiter.role != UserRole.CANDIDATE:
        raise IllegalStateTransition(
            "User is already an Employer, Recruiter or Admin. Please try appointing a different user."
        )

    recruiter.role = UserRole.RECRUITER
    recruiter.company_id = company.id
    await invalidate_all_authentication(db, recruiter)

    await db.commit()
    await db.refresh(recruiter)

    logger.info(f"User {recruiter.id} appointed recruiter of company {company.id}")
    return recruiter


async def remove_recruiter(db: AsyncSession, actor, user_id: int) -> User:
    """
    Remove a recruiter from the actor's company.

    Their jobs are handed to the employer; they revert to CANDIDATE.
    """
    company = await _load_own_company(db, actor)
    recruiter = await lock_active_user(db, user_id)

    if recruiter.role != UserRole.RECRUITER or recruiter.company_id != company.id:
        raise IllegalStateTransition("User is not a recruiter for this company and cannot be removed.")

    await transfer_job_management(db, recruiter.id, company.id, company.employer_id)

    recruiter.company_id = None
    recruiter.role = UserRole.CANDIDATE
    await invalidate_all_authentication(db, recruiter)

    await db.commit()
    await db.refresh(recruiter)

    logger.info(f"Recruiter {recruiter.id} removed from company {company.id}")
    return recruiter


async def change_employer(db: AsyncSession, actor, new_employer_id: int) -> Company:
    """
    Hand the company over to another user.

    The new employer must be unaffiliated or a recruiter of this company.
    The outgoing employer reverts to CANDIDATE. Both are re-authenticated.
    """
    company = await _load_own_company(db, actor)

    if new_employer_id == company.employer_id:
        raise ValidationFailed("The new employer cannot be the same as the current employer.")

    current_employer = await lock_active_user(db, company.employer_id)
    new_employer = await lock_active_user(db, new_employer_id)

    if new_employer.role in (UserRole.EMPLOYER, UserRole.ADMIN):
        raise IllegalStateTransition(
            "User is already an employer or an admin and cannot become an employer for this company."
        )
    if new_employer.company_id is not None and new_employer.company_id != company.id:
        raise IllegalStateTransition("User belongs to another company.")

    await transfer_job_management(db, current_employer.id, company.id, new_employer.id)

    current_employer.role = UserRole.CANDIDATE
    current_employer.company_id = None
    new_employer.role = UserRole.EMPLOYER
    new_employer.company_id = company.id
    company.employer_id = new_employer.id

    await invalidate_all_authentication(db, current_employer)
    await invalidate_all_authentication(db, new_employer)

    await db.commit()
    await db.refresh(company)

    logger.info(
        f"Company {company.id} employer changed from {current_employer.id} to {new_employer.id}"
    )
    return company


async def soft_delete_company(db: AsyncSession, company: Company) -> None:
    """
    Dissolve a company inside the caller's transaction.

    All related users revert to CANDIDATE and lose their sessions, all its
    jobs move to DELETED, and the company itself is flagged deleted.
    """
    for user in await _related_users(db, company.id):
        user.company_id = None
        user.role = UserRole.CANDIDATE
        await invalidate_all_authentication(db, user)

    deleted_jobs = await mark_company_jobs_deleted(db, company.id)
    company.deleted = True

    logger.info(
        f"Company {company.id} soft-deleted ({deleted_jobs} jobs deleted)",
        extra={"company_id": company.id}
    )


async def delete_company(db: AsyncSession, actor) -> None:
    company = await _load_own_company(db, actor)
    await soft_delete_company(db, company)
    await db.commit()


async def update_company(db: AsyncSession, actor, data: CompanyUpdate) -> Company:
    company = await _load_own_company(db, actor)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(company, field, value)
    await db.commit()
    await db.refresh(company)
    return company


async def get_company(db: AsyncSession, company_id: int) -> Company:
    return await load_active_company(db, company_id)


async def list_companies(db: AsyncSession) -> list[Company]:
    result = await db.execute(
        select(Company).where(Company.deleted.is_(False)).order_by(Company.name)
    )
    return list(result.scalars().all())


async def list_recruiters(db: AsyncSession, actor) -> list[User]:
    company = await _load_own_company(db, actor)
    result = await db.execute(
        select(User)
        .where(User.company_id == company.id, User.role == UserRole.RECRUITER)
        .order_by(User.id)
    )
    return list(result.scalars().all())


async def leave_company_on_deactivation(db: AsyncSession, user: User) -> None:
    """
    Detach a deactivating employer/recruiter from their company.

    An employer leaving dissolves the company; a recruiter's jobs go to the
    employer. Runs inside the caller's transaction.
    """
    if user.company_id is None or user.role not in COMPANY_ROLES:
        return
    company = await load_active_company(db, user.company_id)

    if user.role == UserRole.EMPLOYER:
        await soft_delete_company(db, company)
    else:
        await transfer_job_management(db, user.id, company.id, company.employer_id)

    user.company_id = None
    user.role = UserRole.CANDIDATE
