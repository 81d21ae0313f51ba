"""Skill catalog and the job <-> skill link table."""
from sqlalchemy import Column, String, Integer, ForeignKey, Table

from jobboard.database import Base


# Many-to-many: a job lists required skills, a skill is shared by many jobs
job_skills = Table(
    "job_skills",
    Base.metadata,
    Column("job_id", Integer, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Integer, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)


class Skill(Base):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Stored normalized (lowercase, no diacritics, single spaces)
    name = Column(String(50), nullable=False, unique=True, index=True)
