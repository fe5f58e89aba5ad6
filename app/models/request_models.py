"""Request models for the cover letter API.

Field names are snake_case in Python and camelCase on the wire
(``developerProfile``, ``roleInfo``, ...), matching the frontend payloads.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class RequestType(str, Enum):
    """Kind of artifact to generate."""

    COVER_LETTER = "coverLetter"
    OUTREACH_MESSAGE = "outreachMessage"


class Tone(str, Enum):
    """Voice of the generated text."""

    FORMAL = "formal"
    FRIENDLY = "friendly"
    ENTHUSIASTIC = "enthusiastic"
    CASUAL = "casual"


class CamelModel(BaseModel):
    """Base model accepting camelCase keys (and snake_case for Python callers)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ── Developer profile ─────────────────────────────────────────────────────────


class ContactInfo(CamelModel):
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    website: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


class Skill(CamelModel):
    name: str
    category: Optional[str] = None
    level: Optional[str] = None


class Experience(CamelModel):
    title: Optional[str] = None
    company: Optional[str] = None
    description: Optional[str] = None
    achievements: Optional[list[str]] = None
    tech_stack: Optional[list[str]] = None
    current: bool = False


class ProfileAchievement(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None


class DeveloperProfile(CamelModel):
    """The requester: identity plus free-text CV content and/or structured fields."""

    id: str = Field(..., min_length=1, description="Developer identifier")
    name: Optional[str] = None
    email: Optional[str] = None
    profile_email: Optional[str] = None
    title: Optional[str] = None
    about: Optional[str] = None
    mvp_content: Optional[str] = Field(
        default=None,
        description="Raw CV text extracted from the developer's uploaded CV",
    )
    contact_info: Optional[ContactInfo] = None
    skills: Optional[list[Skill]] = None
    experience: Optional[list[Experience]] = None
    achievements: Optional[list[ProfileAchievement]] = None

    @property
    def has_rich_source(self) -> bool:
        """True when free-text CV content is present and non-blank."""
        return bool(self.mvp_content and self.mvp_content.strip())


# ── Role / company ────────────────────────────────────────────────────────────


class RoleInfo(CamelModel):
    title: str = Field(..., min_length=1, description="Role title")
    description: Optional[str] = None
    requirements: Optional[list[str]] = None
    skills: Optional[list[str]] = None
    location: Optional[str] = None
    seniority: Optional[str] = None
    employment_type: Optional[list[str]] = None
    remote: Optional[bool] = None
    salary: Optional[str] = None
    ai_key_skills: Optional[list[str]] = None
    ai_core_responsibilities: Optional[str] = None
    ai_requirements_summary: Optional[str] = None
    ai_work_arrangement: Optional[str] = None
    recruiter_name: Optional[str] = None
    ai_hiring_manager_name: Optional[str] = None


class CompanyInfo(CamelModel):
    name: str = Field(..., min_length=1, description="Company name")
    location: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[str] = None
    description: Optional[str] = None
    attraction_points: Optional[list[str]] = None
    specialties: Optional[list[str]] = None
    culture_notes: Optional[str] = None


class JobSourceInfo(CamelModel):
    source: Optional[str] = None


# ── Top-level request ─────────────────────────────────────────────────────────


class GenerationRequest(CamelModel):
    """Body of POST /generate-cover-letter."""

    developer_profile: DeveloperProfile
    role_info: RoleInfo
    company_info: CompanyInfo
    job_source_info: Optional[JobSourceInfo] = None
    hiring_manager: Optional[str] = None
    achievements: Optional[list[str]] = None
    request_type: RequestType = RequestType.COVER_LETTER
    tone: Tone = Tone.FORMAL
    regeneration_count: int = Field(default=0, ge=0)

    @field_validator("request_type", mode="before")
    @classmethod
    def _accept_legacy_outreach(cls, value: Any) -> Any:
        # Older clients send "outreach"
        if value == "outreach":
            return RequestType.OUTREACH_MESSAGE
        return value

    @field_validator("request_type", "tone", "regeneration_count", mode="before")
    @classmethod
    def _null_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    @property
    def job_source(self) -> Optional[str]:
        if self.job_source_info is None:
            return None
        return self.job_source_info.source
