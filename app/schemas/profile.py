"""
Pydantic schemas for profile endpoints.
"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class SkillsUpdate(BaseModel):
    """Request body for PUT /v1/profile/skills."""
    skills: List[str] = Field(..., max_length=100)

    @field_validator("skills")
    @classmethod
    def clean_skills(cls, v: List[str]) -> List[str]:
        """Trim, drop blanks and dedupe case-insensitively, keeping first spelling."""
        seen = set()
        cleaned = []
        for skill in v:
            name = skill.strip()
            if name and name.lower() not in seen:
                seen.add(name.lower())
                cleaned.append(name)
        return cleaned


class Availability(BaseModel):
    """Availability document stored on the profile."""
    available: bool = True
    hours: Optional[str] = Field(default=None, max_length=100)
    timezone: Optional[str] = Field(default=None, max_length=64)
    notice_period: Optional[str] = Field(default=None, max_length=100)
    max_hours_per_week: Optional[float] = Field(default=None, ge=0, le=168)
    current_weekly_hours: Optional[float] = Field(default=None, ge=0, le=168)


class Certification(BaseModel):
    """Stored certification."""
    id: str
    name: str
    issuer: Optional[str] = None
    issue_date: Optional[date] = None
    credential_url: Optional[str] = None


class CertificationCreate(BaseModel):
    """Request body for POST /v1/profile/certifications."""
    name: str = Field(..., min_length=1, max_length=200)
    issuer: Optional[str] = Field(default=None, max_length=200)
    issue_date: Optional[date] = None
    credential_url: Optional[str] = Field(default=None, max_length=500)


class EducationUpdate(BaseModel):
    """Request body for PUT /v1/profile/education; certifications are managed separately."""
    degree: Optional[str] = Field(default=None, max_length=200)
    institution: Optional[str] = Field(default=None, max_length=200)
    graduation_year: Optional[int] = Field(default=None, ge=1900, le=2100)


class Education(EducationUpdate):
    """Education document stored on the profile."""
    certifications: List[Certification] = []


class PortfolioLinkCreate(BaseModel):
    """Request body for adding or replacing a portfolio link."""
    label: str = Field(..., min_length=1, max_length=50)
    url: str = Field(..., max_length=500)
    description: Optional[str] = Field(default=None, max_length=500)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Only http(s) links are accepted."""
        v = v.strip()
        if not (v.startswith("http://") or v.startswith("https://")) or len(v.split("://", 1)[1]) == 0:
            raise ValueError("URL must start with http:// or https://")
        return v


class PortfolioLink(PortfolioLinkCreate):
    """Stored portfolio link."""
    id: str


class ProfileResponse(BaseModel):
    """Full profile of the current user."""
    id: UUID
    user_id: UUID
    bio: Optional[str] = None
    skills: List[str] = []
    availability: Optional[Availability] = None
    education: Optional[Education] = None
    portfolio_links: List[PortfolioLink] = []
    hourly_rate: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
