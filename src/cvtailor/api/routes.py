from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from cvtailor.api.deps import (
    get_bearer_token,
    get_current_user,
    get_db,
    get_orchestrator,
    get_settings_dep,
    require_admin,
)
from cvtailor.api.schemas import (
    AdditionalInfoRequest,
    AdditionalInfoResponse,
    ApplicationDetailResponse,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationUpdateRequest,
    AuthResponse,
    CertificationRequest,
    CertificationResponse,
    EducationRequest,
    EducationResponse,
    EducationUpdateRequest,
    EmploymentRequest,
    EmploymentResponse,
    EmploymentUpdateRequest,
    GenerateRequest,
    GenerateResponse,
    LoginRequest,
    MessageResponse,
    PasswordChangeRequest,
    PreviewRequest,
    PreviewResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    RoleUpdateRequest,
    SkillRequest,
    SkillResponse,
    UserInfoResponse,
    UserResponse,
)
from cvtailor.config import Settings
from cvtailor.core.orchestrator import GenerationOrchestrator
from cvtailor.core.security import hash_password, new_session_token, verify_password
from cvtailor.db.models import Application, User
from cvtailor.db.repositories import Repository
from cvtailor.errors import AuthenticationFailure, NotFound, ValidationFailure
from cvtailor.types import DocumentFormat

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])
users_router = APIRouter(prefix="/api/users", tags=["users"])
cv_router = APIRouter(prefix="/api/cv", tags=["cv"])
applications_router = APIRouter(prefix="/api/applications", tags=["applications"])


def application_response(application: Application, *, detail: bool = False) -> ApplicationResponse:
    payload = {
        "id": application.id,
        "job_title": application.job_title,
        "company_name": application.company_name,
        "jd_link": application.jd_link,
        "applied_at": application.applied_at,
        "status": application.status,
        "notes": application.notes,
        "cv_doc_url": f"/uploads/{application.cv_doc_path}",
        "cv_pdf_url": f"/uploads/{application.cv_pdf_path}",
    }
    if detail:
        return ApplicationDetailResponse(**payload, jd_content=application.jd_content)
    return ApplicationResponse(**payload)


# auth


@auth_router.post("/register", response_model=AuthResponse, status_code=201)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
) -> AuthResponse:
    if not payload.email.strip() or not payload.password or not payload.full_name.strip():
        raise ValidationFailure("Email, password, and full name are required")

    repo = Repository(db)
    user = repo.create_user(
        email=payload.email,
        password_hash=hash_password(payload.password, method=settings.password_hash_method),
        full_name=payload.full_name.strip(),
        address=payload.address,
        phone_number=payload.phone_number,
        linkedin_profile=payload.linkedin_profile,
        github_link=payload.github_link,
        experience_years=payload.experience_years,
    )
    token = new_session_token()
    repo.create_auth_session(user.id, token, settings.session_ttl_min)
    logger.info("Registered user_id=%s", user.id)
    return AuthResponse(message="User registered successfully", user=UserResponse.model_validate(user), token=token)


@auth_router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
) -> AuthResponse:
    if not payload.email.strip() or not payload.password:
        raise ValidationFailure("Email and password are required")

    repo = Repository(db)
    user = repo.get_user_by_email(payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        raise AuthenticationFailure("Invalid credentials")

    token = new_session_token()
    repo.create_auth_session(user.id, token, settings.session_ttl_min)
    return AuthResponse(message="Login successful", user=UserResponse.model_validate(user), token=token)


@auth_router.get("/me")
def me(user: User = Depends(get_current_user)) -> dict:
    return {"user": UserResponse.model_validate(user).model_dump(mode="json")}


@auth_router.put("/password", response_model=MessageResponse)
def change_password(
    payload: PasswordChangeRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
) -> MessageResponse:
    if not payload.current_password or not payload.new_password:
        raise ValidationFailure("Current and new passwords are required")
    if not verify_password(payload.current_password, user.password_hash):
        raise AuthenticationFailure("Current password is incorrect")

    Repository(db).update_password_hash(
        user.id, hash_password(payload.new_password, method=settings.password_hash_method)
    )
    return MessageResponse(message="Password updated successfully")


@auth_router.post("/logout", response_model=MessageResponse)
def logout(token: str = Depends(get_bearer_token), db: Session = Depends(get_db)) -> MessageResponse:
    Repository(db).delete_auth_session(token)
    return MessageResponse(message="Logged out")


# users / profile


@users_router.get("/profile", response_model=ProfileResponse)
def get_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> ProfileResponse:
    repo = Repository(db)
    return ProfileResponse(
        user=UserResponse.model_validate(user),
        employment_history=[EmploymentResponse.model_validate(row) for row in repo.list_employment(user.id)],
        education=[EducationResponse.model_validate(row) for row in repo.list_education(user.id)],
        certifications=[CertificationResponse.model_validate(row) for row in repo.list_certifications(user.id)],
        skills=[SkillResponse.model_validate(row) for row in repo.list_skills(user.id)],
        additional_info=[AdditionalInfoResponse.model_validate(row) for row in repo.list_additional_info(user.id)],
    )


@users_router.put("/profile", response_model=MessageResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    Repository(db).update_user(user.id, payload.model_dump(exclude_none=True))
    return MessageResponse(message="Profile updated successfully")


@users_router.post("/employment", response_model=EmploymentResponse, status_code=201)
def add_employment(
    payload: EmploymentRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> EmploymentResponse:
    if not payload.position.strip() or not payload.company.strip():
        raise ValidationFailure("Position and company are required")
    item = Repository(db).add_profile_entry(user.id, "employment", payload.model_dump())
    return EmploymentResponse.model_validate(item)


@users_router.put("/employment/{entry_id}", response_model=EmploymentResponse)
def update_employment(
    entry_id: int,
    payload: EmploymentUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> EmploymentResponse:
    item = Repository(db).update_profile_entry(user.id, "employment", entry_id, payload.model_dump())
    return EmploymentResponse.model_validate(item)


@users_router.delete("/employment/{entry_id}", response_model=MessageResponse)
def delete_employment(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    Repository(db).delete_profile_entry(user.id, "employment", entry_id)
    return MessageResponse(message="Employment deleted successfully")


@users_router.post("/education", response_model=EducationResponse, status_code=201)
def add_education(
    payload: EducationRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> EducationResponse:
    if not payload.degree.strip() or not payload.institution.strip():
        raise ValidationFailure("Degree and institution are required")
    item = Repository(db).add_profile_entry(user.id, "education", payload.model_dump())
    return EducationResponse.model_validate(item)


@users_router.put("/education/{entry_id}", response_model=EducationResponse)
def update_education(
    entry_id: int,
    payload: EducationUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> EducationResponse:
    item = Repository(db).update_profile_entry(user.id, "education", entry_id, payload.model_dump())
    return EducationResponse.model_validate(item)


@users_router.delete("/education/{entry_id}", response_model=MessageResponse)
def delete_education(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    Repository(db).delete_profile_entry(user.id, "education", entry_id)
    return MessageResponse(message="Education deleted successfully")


@users_router.post("/certifications", response_model=CertificationResponse, status_code=201)
def add_certification(
    payload: CertificationRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CertificationResponse:
    if not payload.name.strip():
        raise ValidationFailure("Certification name is required")
    item = Repository(db).add_profile_entry(user.id, "certifications", payload.model_dump())
    return CertificationResponse.model_validate(item)


@users_router.delete("/certifications/{entry_id}", response_model=MessageResponse)
def delete_certification(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    Repository(db).delete_profile_entry(user.id, "certifications", entry_id)
    return MessageResponse(message="Certification deleted successfully")


@users_router.post("/skills", response_model=SkillResponse, status_code=201)
def add_skill(
    payload: SkillRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SkillResponse:
    if not payload.skill_name.strip():
        raise ValidationFailure("Skill name is required")
    item = Repository(db).add_profile_entry(user.id, "skills", payload.model_dump())
    return SkillResponse.model_validate(item)


@users_router.delete("/skills/{entry_id}", response_model=MessageResponse)
def delete_skill(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    Repository(db).delete_profile_entry(user.id, "skills", entry_id)
    return MessageResponse(message="Skill deleted successfully")


@users_router.post("/additional", response_model=AdditionalInfoResponse, status_code=201)
def add_additional_info(
    payload: AdditionalInfoRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AdditionalInfoResponse:
    if not payload.category.strip() or not payload.content.strip():
        raise ValidationFailure("Category and content are required")
    item = Repository(db).add_profile_entry(user.id, "additional", payload.model_dump())
    return AdditionalInfoResponse.model_validate(item)


@users_router.delete("/additional/{entry_id}", response_model=MessageResponse)
def delete_additional_info(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    Repository(db).delete_profile_entry(user.id, "additional", entry_id)
    return MessageResponse(message="Additional info deleted successfully")


@users_router.get("/all", response_model=list[UserResponse])
def list_users(_: User = Depends(require_admin), db: Session = Depends(get_db)) -> list[UserResponse]:
    return [UserResponse.model_validate(row) for row in Repository(db).list_users()]


@users_router.put("/{user_id}/role", response_model=MessageResponse)
def update_user_role(
    user_id: int,
    payload: RoleUpdateRequest,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> MessageResponse:
    Repository(db).set_user_role(user_id, payload.role)
    return MessageResponse(message="User role updated successfully")


@users_router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> MessageResponse:
    if user_id == admin.id:
        raise ValidationFailure("Cannot delete your own account")
    Repository(db).delete_user(user_id)
    return MessageResponse(message="User deleted successfully")


# cv generation


@cv_router.post("/generate", response_model=GenerateResponse)
def generate_cv(
    payload: GenerateRequest,
    user: User = Depends(get_current_user),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> GenerateResponse:
    result = orchestrator.generate(
        user_id=user.id,
        job_description=payload.job_description,
        job_link=payload.jd_link,
    )
    return GenerateResponse(
        message="CV generated successfully",
        application=application_response(result.application),
        cv_content=result.content.model_dump(by_alias=True),
    )


@cv_router.post("/preview", response_model=PreviewResponse)
def preview_cv(
    payload: PreviewRequest,
    user: User = Depends(get_current_user),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> PreviewResponse:
    result = orchestrator.preview(user_id=user.id, job_description=payload.job_description)
    contact = result.contact
    return PreviewResponse(
        message="CV preview generated",
        cv_content=result.content.model_dump(by_alias=True),
        user_info=UserInfoResponse(
            full_name=contact.full_name,
            email=contact.email,
            phone=contact.phone,
            address=contact.address,
            linkedin=contact.linkedin,
            github=contact.github,
        ),
    )


MEDIA_TYPES = {
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "pdf": "application/pdf",
}


@cv_router.get("/download/{fmt}/{application_id}")
def download_cv(
    fmt: DocumentFormat,
    application_id: int,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FileResponse:
    application = Repository(db).get_application(user.id, application_id)
    filename = application.cv_doc_path if fmt == "docx" else application.cv_pdf_path
    try:
        path = request.app.state.renderer.store.resolve(filename)
    except FileNotFoundError as exc:
        logger.warning("Generated file missing application_id=%s file=%s", application_id, filename)
        raise NotFound("Generated file not found") from exc
    return FileResponse(path, media_type=MEDIA_TYPES[fmt], filename=f"resume_{application_id}.{fmt}")


# applications


@applications_router.get("", response_model=ApplicationListResponse)
def list_applications(
    status: str | None = None,
    limit: int = 50,
    offset: int = 0,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApplicationListResponse:
    repo = Repository(db)
    rows = repo.list_applications(user.id, status=status, limit=min(limit, 200), offset=max(offset, 0))
    return ApplicationListResponse(
        applications=[application_response(row) for row in rows],
        total=repo.count_applications(user.id),
    )


@applications_router.get("/stats")
def application_stats(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    counts = Repository(db).application_stats(user.id)
    return {"total": sum(counts.values()), "byStatus": counts}


@applications_router.get("/admin/all", response_model=ApplicationListResponse)
def list_all_applications(
    status: str | None = None,
    limit: int = 50,
    offset: int = 0,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ApplicationListResponse:
    rows = Repository(db).list_applications(None, status=status, limit=min(limit, 200), offset=max(offset, 0))
    return ApplicationListResponse(applications=[application_response(row) for row in rows], total=len(rows))


@applications_router.get("/{application_id}", response_model=ApplicationDetailResponse)
def get_application(
    application_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApplicationResponse:
    return application_response(Repository(db).get_application(user.id, application_id), detail=True)


@applications_router.put("/{application_id}", response_model=ApplicationDetailResponse)
def update_application(
    application_id: int,
    payload: ApplicationUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApplicationResponse:
    application = Repository(db).update_application(
        user.id,
        application_id,
        status=payload.status,
        notes=payload.notes,
    )
    return application_response(application, detail=True)


@applications_router.delete("/{application_id}", response_model=MessageResponse)
def delete_application(
    application_id: int,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    repo = Repository(db)
    application = repo.get_application(user.id, application_id)
    filenames = (application.cv_doc_path, application.cv_pdf_path)
    repo.delete_application(user.id, application_id)

    store = request.app.state.renderer.store
    for filename in filenames:
        store.remove(filename)
    logger.info("Deleted application_id=%s user_id=%s", application_id, user.id)
    return MessageResponse(message="Application deleted successfully")
