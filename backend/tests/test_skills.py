"""
Tests for the skill catalog and skill tags on job postings.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import select

from jobboard.errors import DuplicateResource, NotFound, Unauthorized, ValidationFailed
from jobboard.models import JobStatus, Skill, job_skills
from jobboard.schemas.job import JobCreate, JobUpdate
from jobboard.services import jobs, skills
from jobboard.services.skills import normalize_skill_name

from conftest import auth_headers, identity_for


async def add_skill(db, name: str) -> Skill:
    skill = Skill(name=normalize_skill_name(name))
    db.add(skill)
    await db.commit()
    await db.refresh(skill)
    return skill


async def tagged_skill_ids(db, job_id: int) -> set:
    result = await db.execute(select(job_skills.c.skill_id).where(job_skills.c.job_id == job_id))
    return set(result.scalars().all())


# ============================================================
# NORMALIZATION
# ============================================================

@pytest.mark.parametrize("raw,expected", [
    ("Python", "python"),
    ("  Node-JS ", "node js"),
    ("machine_learning", "machine learning"),
    ("Nóde   Jś", "node js"),
    ("C++", "c++"),
])
def test_normalize_skill_name(raw, expected):
    assert normalize_skill_name(raw) == expected


@pytest.mark.parametrize("raw", ["   ", "-_-", "x" * 51])
def test_normalize_rejects_empty_or_long_names(raw):
    with pytest.raises(ValidationFailed):
        normalize_skill_name(raw)


# ============================================================
# CATALOG
# ============================================================

@pytest.mark.asyncio
async def test_admin_creates_normalized_skill(db, admin):
    skill = await skills.create_skill(db, identity_for(admin), "  Type-Script ")

    assert skill.id is not None
    assert skill.name == "type script"


@pytest.mark.asyncio
async def test_duplicate_normalized_name_is_rejected(db, admin):
    await skills.create_skill(db, identity_for(admin), "PostgreSQL")

    with pytest.raises(DuplicateResource):
        await skills.create_skill(db, identity_for(admin), "postgresql ")


@pytest.mark.asyncio
async def test_only_admin_curates_skills(db, admin, employer, candidate):
    skill = await add_skill(db, "Go")

    with pytest.raises(Unauthorized):
        await skills.create_skill(db, identity_for(employer), "Rust")
    with pytest.raises(Unauthorized):
        await skills.update_skill(db, identity_for(candidate), skill.id, "Golang")
    with pytest.raises(Unauthorized):
        await skills.delete_skill(db, identity_for(employer), skill.id)

    assert [s.name for s in await skills.list_skills(db)] == ["go"]


@pytest.mark.asyncio
async def test_rename_skill(db, admin):
    skill = await add_skill(db, "Javascript")
    other = await add_skill(db, "Kotlin")

    renamed = await skills.update_skill(db, identity_for(admin), skill.id, "Java-Script")
    assert renamed.name == "java script"

    # Renaming to its own name is fine, taking another skill's name is not
    await skills.update_skill(db, identity_for(admin), skill.id, "java script")
    with pytest.raises(DuplicateResource):
        await skills.update_skill(db, identity_for(admin), skill.id, other.name)


@pytest.mark.asyncio
async def test_unknown_skill_is_not_found(db, admin):
    with pytest.raises(NotFound):
        await skills.get_skill(db, 999)
    with pytest.raises(NotFound):
        await skills.delete_skill(db, identity_for(admin), 999)


@pytest.mark.asyncio
async def test_delete_skill_untags_jobs(db, admin, active_job):
    skill = await add_skill(db, "Docker")
    await db.execute(job_skills.insert().values(job_id=active_job.id, skill_id=skill.id))
    await db.commit()

    await skills.delete_skill(db, identity_for(admin), skill.id)

    assert await tagged_skill_ids(db, active_job.id) == set()
    assert await skills.list_skills(db) == []


# ============================================================
# JOB TAGS
# ============================================================

@pytest.mark.asyncio
async def test_create_job_with_skills(db, employer):
    python = await add_skill(db, "Python")
    sql = await add_skill(db, "SQL")

    job = await jobs.create_job(db, identity_for(employer), JobCreate(
        title="Data Engineer",
        location="Remote",
        description="Pipelines.",
        salary_min=1000,
        currency_code="usd",
        skill_ids=[sql.id, python.id, sql.id],
    ))

    assert sorted(s.name for s in job.skills) == ["python", "sql"]
    assert await tagged_skill_ids(db, job.id) == {python.id, sql.id}


@pytest.mark.asyncio
async def test_create_job_with_unknown_skill_fails(db, employer):
    with pytest.raises(NotFound):
        await jobs.create_job(db, identity_for(employer), JobCreate(
            title="Data Engineer",
            location="Remote",
            description="Pipelines.",
            salary_min=1000,
            currency_code="usd",
            skill_ids=[42],
        ))


@pytest.mark.asyncio
async def test_update_replaces_skill_list(db, employer, active_job):
    python = await add_skill(db, "Python")
    rust = await add_skill(db, "Rust")
    await jobs.update_job(db, identity_for(employer), active_job.id, JobUpdate(skill_ids=[python.id]))

    # Fields not sent leave the tags alone
    await jobs.update_job(db, identity_for(employer), active_job.id, JobUpdate(title="Renamed"))
    assert await tagged_skill_ids(db, active_job.id) == {python.id}

    job = await jobs.update_job(db, identity_for(employer), active_job.id, JobUpdate(skill_ids=[rust.id]))
    assert [s.name for s in job.skills] == ["rust"]
    assert await tagged_skill_ids(db, active_job.id) == {rust.id}


@pytest.mark.asyncio
async def test_duplicate_copies_skills(db, employer, active_job):
    python = await add_skill(db, "Python")
    await jobs.update_job(db, identity_for(employer), active_job.id, JobUpdate(skill_ids=[python.id]))
    await jobs.close_job(db, identity_for(employer), active_job.id)

    copy = await jobs.duplicate_closed_job(db, identity_for(employer), active_job.id, JobStatus.DRAFT)

    assert await tagged_skill_ids(db, copy.id) == {python.id}


# ============================================================
# API
# ============================================================

@pytest.mark.asyncio
async def test_api_skill_catalog(async_client: AsyncClient, admin, candidate):
    response = await async_client.post("/api/skills", json={"name": "Vue-JS"}, headers=auth_headers(admin))
    assert response.status_code == 201
    assert response.json()["name"] == "vue js"

    response = await async_client.post("/api/skills", json={"name": "vue js"}, headers=auth_headers(admin))
    assert response.status_code == 409
    assert response.json()["kind"] == "DUPLICATE_RESOURCE"

    response = await async_client.post("/api/skills", json={"name": "Svelte"}, headers=auth_headers(candidate))
    assert response.status_code == 403

    response = await async_client.get("/api/skills", headers=auth_headers(candidate))
    assert response.status_code == 200
    assert [s["name"] for s in response.json()] == ["vue js"]


@pytest.mark.asyncio
async def test_api_job_response_embeds_skills(async_client: AsyncClient, db, employer):
    skill = await add_skill(db, "Terraform")

    response = await async_client.post("/api/jobs", json={
        "title": "SRE",
        "location": "Remote",
        "description": "Keep things up.",
        "salary_min": 1000,
        "currency_code": "usd",
        "skill_ids": [skill.id],
    }, headers=auth_headers(employer))

    assert response.status_code == 201
    assert response.json()["skills"] == [{"id": skill.id, "name": "terraform"}]
