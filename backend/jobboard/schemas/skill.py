"""Skill catalog Pydantic schemas."""
from pydantic import BaseModel, ConfigDict, Field


class SkillCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)


class SkillUpdate(BaseModel):
    """Rename a skill; the new name is normalized like on creation."""
    name: str = Field(min_length=1, max_length=50)


class SkillResponse(BaseModel):
    # No jobs here: a job embeds its skills, never the other way round
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)
