"""Company-related Pydantic schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class CompanyCreate(BaseModel):
    """Request body for founding a company."""
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    industry: str = Field(min_length=1, max_length=100)


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    industry: Optional[str] = Field(default=None, min_length=1, max_length=100)


class CompanyResponse(BaseModel):
    """Schema for company response."""
    id: int
    name: str
    description: Optional[str] = None
    industry: str
    employer_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
