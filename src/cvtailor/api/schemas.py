from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cvtailor.types import ApplicationStatus, Proficiency, UserRole


class RegisterRequest(BaseModel):
    email: str = ""
    password: str = ""
    full_name: str = ""
    address: str = ""
    phone_number: str = ""
    linkedin_profile: str = ""
    github_link: str = ""
    experience_years: int = 0


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class PasswordChangeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(default="", alias="currentPassword")
    new_password: str = Field(default="", alias="newPassword")


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str
    address: str
    phone_number: str
    linkedin_profile: str
    github_link: str
    experience_years: int
    role: str
    created_at: datetime | None = None


class AuthResponse(BaseModel):
    message: str
    user: UserResponse
    token: str


class MessageResponse(BaseModel):
    message: str


class ProfileUpdateRequest(BaseModel):
    full_name: str | None = None
    address: str | None = None
    phone_number: str | None = None
    linkedin_profile: str | None = None
    github_link: str | None = None
    experience_years: int | None = None


class EmploymentRequest(BaseModel):
    position: str
    company: str
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""


class EmploymentUpdateRequest(BaseModel):
    position: str | None = None
    company: str | None = None
    location: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    description: str | None = None


class EmploymentResponse(EmploymentRequest):
    model_config = ConfigDict(from_attributes=True)

    id: int


class EducationRequest(BaseModel):
    degree: str
    institution: str
    location: str = ""
    graduation_date: str = ""
    gpa: str = ""


class EducationUpdateRequest(BaseModel):
    degree: str | None = None
    institution: str | None = None
    location: str | None = None
    graduation_date: str | None = None
    gpa: str | None = None


class EducationResponse(EducationRequest):
    model_config = ConfigDict(from_attributes=True)

    id: int


class CertificationRequest(BaseModel):
    name: str
    issuer: str = ""
    date_obtained: str = ""
    expiry_date: str = ""
    credential_id: str = ""


class CertificationResponse(CertificationRequest):
    model_config = ConfigDict(from_attributes=True)

    id: int


class SkillRequest(BaseModel):
    skill_name: str
    proficiency_level: Proficiency = "intermediate"


class SkillResponse(SkillRequest):
    model_config = ConfigDict(from_attributes=True)

    id: int


class AdditionalInfoRequest(BaseModel):
    category: str
    content: str


class AdditionalInfoResponse(AdditionalInfoRequest):
    model_config = ConfigDict(from_attributes=True)

    id: int


class ProfileResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user: UserResponse
    employment_history: list[EmploymentResponse] = Field(default_factory=list, alias="employmentHistory")
    education: list[EducationResponse] = Field(default_factory=list)
    certifications: list[CertificationResponse] = Field(default_factory=list)
    skills: list[SkillResponse] = Field(default_factory=list)
    additional_info: list[AdditionalInfoResponse] = Field(default_factory=list, alias="additionalInfo")


class RoleUpdateRequest(BaseModel):
    role: UserRole


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_description: str = Field(default="", alias="jobDescription")
    jd_link: str = Field(default="", alias="jdLink")


class PreviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_description: str = Field(default="", alias="jobDescription")


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    job_title: str | None = Field(alias="jobTitle")
    company_name: str | None = Field(alias="companyName")
    jd_link: str = Field(alias="jdLink")
    applied_at: datetime | None = Field(alias="appliedAt")
    status: str
    notes: str
    cv_doc_url: str = Field(alias="cvDocUrl")
    cv_pdf_url: str = Field(alias="cvPdfUrl")


class ApplicationDetailResponse(ApplicationResponse):
    jd_content: str = Field(alias="jdContent")


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationResponse]
    total: int


class ApplicationUpdateRequest(BaseModel):
    status: ApplicationStatus | None = None
    notes: str | None = None


class GenerateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    application: ApplicationResponse
    cv_content: dict[str, Any] = Field(alias="cvContent")


class UserInfoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(alias="fullName")
    email: str
    phone: str
    address: str
    linkedin: str
    github: str


class PreviewResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    cv_content: dict[str, Any] = Field(alias="cvContent")
    user_info: UserInfoResponse = Field(alias="userInfo")
