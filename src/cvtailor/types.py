from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Proficiency = Literal["beginner", "intermediate", "advanced", "expert"]
ApplicationStatus = Literal["generated", "applied", "interviewing", "offered", "rejected"]
UserRole = Literal["user", "admin"]
DocumentFormat = Literal["docx", "pdf"]

NOT_SPECIFIED = "Not specified"


class ContactInfo(BaseModel):
    full_name: str
    email: str = ""
    phone: str = ""
    address: str = ""
    linkedin: str = ""
    github: str = ""
    experience_years: int = 0


class EmploymentEntry(BaseModel):
    position: str
    company: str
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""


class EducationEntry(BaseModel):
    degree: str
    institution: str
    location: str = ""
    graduation_date: str = ""
    gpa: str = ""


class CertificationEntry(BaseModel):
    name: str
    issuer: str = ""
    date_obtained: str = ""
    expiry_date: str = ""
    credential_id: str = ""


class SkillEntry(BaseModel):
    name: str
    proficiency: Proficiency = "intermediate"


class AdditionalInfoEntry(BaseModel):
    category: str
    content: str


class ProfileData(BaseModel):
    user_id: int
    contact: ContactInfo
    employment: list[EmploymentEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    certifications: list[CertificationEntry] = Field(default_factory=list)
    skills: list[SkillEntry] = Field(default_factory=list)
    additional_info: list[AdditionalInfoEntry] = Field(default_factory=list)


def _blank_if_none(value: Any) -> Any:
    return "" if value is None else value


def _list_if_none(value: Any) -> Any:
    return [] if value is None else value


class ExperienceBlock(BaseModel):
    position: str = ""
    company: str = ""
    location: str = ""
    period: str = ""
    achievements: list[str] = Field(default_factory=list)

    @field_validator("position", "company", "location", "period", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _blank_if_none(value)

    @field_validator("achievements", mode="before")
    @classmethod
    def coerce_list(cls, value: Any) -> Any:
        return _list_if_none(value)


class EducationBlock(BaseModel):
    degree: str = ""
    institution: str = ""
    graduation: str = ""
    details: str = ""

    @field_validator("degree", "institution", "graduation", "details", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _blank_if_none(value)


class AdditionalSection(BaseModel):
    title: str = ""
    content: str = ""

    @field_validator("title", "content", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _blank_if_none(value)


class SynthesizedContent(BaseModel):
    """Job-tailored resume content as returned by the writer model.

    Serialize with ``model_dump(by_alias=True)`` to get the wire shape
    (``additionalSections`` in camelCase).
    """

    model_config = ConfigDict(populate_by_name=True)

    summary: str = ""
    skills: list[str] = Field(default_factory=list)
    experience: list[ExperienceBlock] = Field(default_factory=list)
    education: list[EducationBlock] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    additional_sections: list[AdditionalSection] = Field(default_factory=list, alias="additionalSections")

    @field_validator("summary", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _blank_if_none(value)

    @field_validator("skills", "experience", "education", "certifications", "additional_sections", mode="before")
    @classmethod
    def coerce_lists(cls, value: Any) -> Any:
        return _list_if_none(value)


class JobDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_title: str = Field(default=NOT_SPECIFIED, alias="jobTitle")
    company_name: str = Field(default=NOT_SPECIFIED, alias="companyName")

    @field_validator("job_title", "company_name", mode="before")
    @classmethod
    def default_blank(cls, value: Any) -> str:
        if value is None or not str(value).strip():
            return NOT_SPECIFIED
        return str(value).strip()

    @classmethod
    def unspecified(cls) -> "JobDetails":
        return cls(job_title=NOT_SPECIFIED, company_name=NOT_SPECIFIED)


class ModelResponse(BaseModel):
    content: str
    provider: str
    finish_reason: str | None = None
