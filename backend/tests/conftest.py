"""
Pytest fixtures for testing.
"""
import pytest
import pytest_asyncio
from typing import AsyncGenerator, Optional

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Import database module BEFORE app to allow override
import jobboard.database
from jobboard.database import Base
from jobboard.database_types import utcnow
# Import ALL models so Base.metadata knows about all tables
from jobboard.models import Application, Company, Job, JobStatus, SessionRecord, Skill, User, UserRole
from jobboard.services.credentials import get_credential_codec
from jobboard.services.gateway import AuthenticatedIdentity
from jobboard.services.passwords import hash_password

# Now import app (after we can override database)
from jobboard.main import app as fastapi_app


# Test database URL (use in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database for each test.
    Ensures cleanup happens even if test fails.
    """
    # StaticPool keeps a single connection alive so every session
    # sees the same in-memory database
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Replace the app's engine and sessionmaker so get_db() uses the test DB
    original_engine = jobboard.database.engine
    original_sessionmaker = jobboard.database.AsyncSessionLocal

    jobboard.database.engine = test_engine
    jobboard.database.AsyncSessionLocal = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    session = async_session()

    try:
        yield session
    finally:
        await session.close()
        async with test_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await test_engine.dispose()

        jobboard.database.engine = original_engine
        jobboard.database.AsyncSessionLocal = original_sessionmaker


@pytest_asyncio.fixture
async def async_client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing endpoints.

    The db fixture already replaced jobboard.database.engine with the test
    engine, so all endpoints use the test database.
    """
    transport = ASGITransport(app=fastapi_app)

    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def create_user(
    db: AsyncSession,
    email: str,
    role: UserRole = UserRole.CANDIDATE,
    company_id: Optional[int] = None,
    password: str = TEST_PASSWORD,
    deleted: bool = False,
) -> User:
    user = User(
        first_name="Test",
        last_name=email.split("@")[0].title(),
        email=email,
        password_hash=hash_password(password),
        role=role,
        company_id=company_id,
        deleted=deleted,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_company_with_employer(db: AsyncSession, email: str, name: str):
    """Employer user plus the company they own."""
    employer = await create_user(db, email)
    company = Company(name=name, industry="Software", employer_id=employer.id)
    db.add(company)
    await db.flush()
    employer.role = UserRole.EMPLOYER
    employer.company_id = company.id
    await db.commit()
    await db.refresh(employer)
    await db.refresh(company)
    return employer, company


async def create_job(
    db: AsyncSession,
    company: Company,
    created_by: User,
    status: JobStatus = JobStatus.ACTIVE,
    title: str = "Backend Engineer",
) -> Job:
    job = Job(
        company_id=company.id,
        created_by_id=created_by.id,
        title=title,
        location="Berlin",
        description="Build and run APIs.",
        employment_type="full-time",
        work_arrangement="hybrid",
        salary_min=60000,
        salary_max=80000,
        currency_code="EUR",
        status=status.value,
    )
    db.add(job)
    await db.commit()
    await db.refresh(job)
    return job


def identity_for(user: User) -> AuthenticatedIdentity:
    """Identity as the gateway would hand it to a service."""
    return AuthenticatedIdentity.from_user(user, issued_at=utcnow())


def auth_headers(user: User) -> dict:
    token = get_credential_codec().issue(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def candidate(db: AsyncSession) -> User:
    return await create_user(db, "candidate@example.com")


@pytest_asyncio.fixture
async def other_candidate(db: AsyncSession) -> User:
    return await create_user(db, "other.candidate@example.com")


@pytest_asyncio.fixture
async def admin(db: AsyncSession) -> User:
    return await create_user(db, "admin@example.com", role=UserRole.ADMIN)


@pytest_asyncio.fixture
async def company_a(db: AsyncSession):
    """(employer, company) pair for Acme."""
    return await create_company_with_employer(db, "employer.a@example.com", "Acme")


@pytest_asyncio.fixture
async def company_b(db: AsyncSession):
    """(employer, company) pair for Globex."""
    return await create_company_with_employer(db, "employer.b@example.com", "Globex")


@pytest_asyncio.fixture
async def employer(company_a) -> User:
    return company_a[0]


@pytest_asyncio.fixture
async def recruiter_a(db: AsyncSession, company_a) -> User:
    _, company = company_a
    return await create_user(
        db, "recruiter.a@example.com", role=UserRole.RECRUITER, company_id=company.id
    )


@pytest_asyncio.fixture
async def active_job(db: AsyncSession, company_a) -> Job:
    employer, company = company_a
    return await create_job(db, company, employer, JobStatus.ACTIVE)


@pytest_asyncio.fixture
async def draft_job(db: AsyncSession, company_a) -> Job:
    employer, company = company_a
    return await create_job(db, company, employer, JobStatus.DRAFT, title="Draft Engineer")


@pytest.fixture
def password() -> str:
    return TEST_PASSWORD
