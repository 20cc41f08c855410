from __future__ import annotations

import hashlib
import logging
from datetime import UTC, datetime, timedelta
from typing import Any, get_args

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cvtailor.db.models import (
    AdditionalInfo,
    Application,
    AuthSession,
    Certification,
    Education,
    Employment,
    Skill,
    User,
)
from cvtailor.errors import NotFound, ValidationFailure
from cvtailor.types import (
    AdditionalInfoEntry,
    CertificationEntry,
    ContactInfo,
    EducationEntry,
    EmploymentEntry,
    ProfileData,
    Proficiency,
    SkillEntry,
)

PROFILE_SECTIONS: dict[str, type] = {
    "employment": Employment,
    "education": Education,
    "certifications": Certification,
    "skills": Skill,
    "additional": AdditionalInfo,
}

USER_PROFILE_FIELDS = (
    "full_name",
    "address",
    "phone_number",
    "linkedin_profile",
    "github_link",
    "experience_years",
)

PROFICIENCY_LEVELS = get_args(Proficiency)
DEFAULT_PROFICIENCY = "intermediate"

# columns the repository owns on every profile row
_MANAGED_COLUMNS = {"id", "user_id", "created_at", "updated_at"}

logger = logging.getLogger(__name__)


def hash_text(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _stored_proficiency(value: str | None) -> str:
    level = (value or "").strip().lower()
    if level in PROFICIENCY_LEVELS:
        return level
    logger.warning("Unknown proficiency level %r stored; using %s", value, DEFAULT_PROFICIENCY)
    return DEFAULT_PROFICIENCY


class Repository:
    def __init__(self, session: Session):
        self.session = session

    # users

    def create_user(self, *, email: str, password_hash: str, full_name: str, **values: Any) -> User:
        email = email.strip().lower()
        if self.get_user_by_email(email):
            raise ValidationFailure("Email already registered")

        user = User(email=email, password_hash=password_hash, full_name=full_name)
        for key, value in values.items():
            if key in USER_PROFILE_FIELDS and value is not None:
                setattr(user, key, value)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ValidationFailure("Email already registered") from exc
        self.session.refresh(user)
        return user

    def get_user(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def require_user(self, user_id: int) -> User:
        user = self.get_user(user_id)
        if user is None:
            raise NotFound(f"user {user_id} not found")
        return user

    def get_user_by_email(self, email: str) -> User | None:
        return self.session.scalar(select(User).where(User.email == email.strip().lower()))

    def list_users(self) -> list[User]:
        return list(self.session.scalars(select(User).order_by(User.created_at.desc(), User.id.desc())).all())

    def update_user(self, user_id: int, values: dict[str, Any]) -> User:
        user = self.require_user(user_id)
        for key, value in values.items():
            if key in USER_PROFILE_FIELDS and value is not None:
                setattr(user, key, value)
        self.session.commit()
        self.session.refresh(user)
        return user

    def update_password_hash(self, user_id: int, password_hash: str) -> None:
        user = self.require_user(user_id)
        user.password_hash = password_hash
        self.session.commit()

    def set_user_role(self, user_id: int, role: str) -> User:
        if role not in {"user", "admin"}:
            raise ValidationFailure("Invalid role")
        user = self.require_user(user_id)
        user.role = role
        self.session.commit()
        self.session.refresh(user)
        return user

    def delete_user(self, user_id: int) -> None:
        user = self.require_user(user_id)
        self.session.delete(user)
        self.session.commit()

    # profile sections

    def _section_model(self, section: str) -> type:
        try:
            return PROFILE_SECTIONS[section]
        except KeyError as exc:
            raise ValidationFailure(f"unsupported profile section '{section}'") from exc

    def _entry_values(self, section: str, model: type, values: dict[str, Any]) -> dict[str, Any]:
        editable = set(model.__table__.columns.keys()) - _MANAGED_COLUMNS
        unknown = sorted(set(values) - editable)
        if unknown:
            raise ValidationFailure(f"unknown {section} field(s): {', '.join(unknown)}")
        payload = {key: value for key, value in values.items() if value is not None}
        level = payload.get("proficiency_level")
        if level is not None and level not in PROFICIENCY_LEVELS:
            raise ValidationFailure(
                f"proficiency_level must be one of {', '.join(PROFICIENCY_LEVELS)}, got {level!r}"
            )
        return payload

    def _commit_entry(self, item: Any) -> Any:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ValidationFailure("profile entry is missing required fields") from exc
        self.session.refresh(item)
        return item

    def add_profile_entry(self, user_id: int, section: str, values: dict[str, Any]) -> Any:
        model = self._section_model(section)
        payload = self._entry_values(section, model, values)
        self.require_user(user_id)
        item = model(user_id=user_id, **payload)
        self.session.add(item)
        return self._commit_entry(item)

    def get_profile_entry(self, user_id: int, section: str, entry_id: int) -> Any:
        model = self._section_model(section)
        item = self.session.get(model, entry_id)
        if item is None or item.user_id != user_id:
            raise NotFound(f"{section} entry {entry_id} not found")
        return item

    def update_profile_entry(self, user_id: int, section: str, entry_id: int, values: dict[str, Any]) -> Any:
        item = self.get_profile_entry(user_id, section, entry_id)
        for key, value in self._entry_values(section, type(item), values).items():
            setattr(item, key, value)
        return self._commit_entry(item)

    def delete_profile_entry(self, user_id: int, section: str, entry_id: int) -> None:
        item = self.get_profile_entry(user_id, section, entry_id)
        self.session.delete(item)
        self.session.commit()

    def list_employment(self, user_id: int) -> list[Employment]:
        statement = (
            select(Employment)
            .where(Employment.user_id == user_id)
            .order_by(Employment.start_date.desc(), Employment.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def list_education(self, user_id: int) -> list[Education]:
        statement = (
            select(Education)
            .where(Education.user_id == user_id)
            .order_by(Education.graduation_date.desc(), Education.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def list_certifications(self, user_id: int) -> list[Certification]:
        statement = select(Certification).where(Certification.user_id == user_id).order_by(Certification.id)
        return list(self.session.scalars(statement).all())

    def list_skills(self, user_id: int) -> list[Skill]:
        statement = select(Skill).where(Skill.user_id == user_id).order_by(Skill.id)
        return list(self.session.scalars(statement).all())

    def list_additional_info(self, user_id: int) -> list[AdditionalInfo]:
        statement = select(AdditionalInfo).where(AdditionalInfo.user_id == user_id).order_by(AdditionalInfo.id)
        return list(self.session.scalars(statement).all())

    def load_profile(self, user_id: int) -> ProfileData:
        user = self.require_user(user_id)
        return ProfileData(
            user_id=user.id,
            contact=ContactInfo(
                full_name=user.full_name,
                email=user.email,
                phone=user.phone_number,
                address=user.address,
                linkedin=user.linkedin_profile,
                github=user.github_link,
                experience_years=user.experience_years,
            ),
            employment=[
                EmploymentEntry(
                    position=row.position,
                    company=row.company,
                    location=row.location,
                    start_date=row.start_date,
                    end_date=row.end_date,
                    description=row.description,
                )
                for row in self.list_employment(user_id)
            ],
            education=[
                EducationEntry(
                    degree=row.degree,
                    institution=row.institution,
                    location=row.location,
                    graduation_date=row.graduation_date,
                    gpa=row.gpa,
                )
                for row in self.list_education(user_id)
            ],
            certifications=[
                CertificationEntry(
                    name=row.name,
                    issuer=row.issuer,
                    date_obtained=row.date_obtained,
                    expiry_date=row.expiry_date,
                    credential_id=row.credential_id,
                )
                for row in self.list_certifications(user_id)
            ],
            skills=[
                SkillEntry(name=row.skill_name, proficiency=_stored_proficiency(row.proficiency_level))
                for row in self.list_skills(user_id)
            ],
            additional_info=[
                AdditionalInfoEntry(category=row.category, content=row.content)
                for row in self.list_additional_info(user_id)
            ],
        )

    # applications

    def create_application(
        self,
        *,
        user_id: int,
        job_title: str | None,
        company_name: str | None,
        jd_link: str,
        jd_content: str,
        cv_doc_path: str,
        cv_pdf_path: str,
    ) -> Application:
        item = Application(
            user_id=user_id,
            job_title=job_title,
            company_name=company_name,
            jd_link=jd_link,
            jd_content=jd_content,
            cv_doc_path=cv_doc_path,
            cv_pdf_path=cv_pdf_path,
        )
        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)
        return item

    def get_application(self, user_id: int, application_id: int) -> Application:
        item = self.session.get(Application, application_id)
        if item is None or item.user_id != user_id:
            raise NotFound("Application not found")
        return item

    def list_applications(
        self,
        user_id: int | None,
        *,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Application]:
        statement = select(Application)
        if user_id is not None:
            statement = statement.where(Application.user_id == user_id)
        if status:
            statement = statement.where(Application.status == status)
        statement = statement.order_by(Application.applied_at.desc(), Application.id.desc()).limit(limit).offset(offset)
        return list(self.session.scalars(statement).all())

    def count_applications(self, user_id: int) -> int:
        statement = select(func.count(Application.id)).where(Application.user_id == user_id)
        return int(self.session.scalar(statement) or 0)

    def application_stats(self, user_id: int) -> dict[str, int]:
        statement = (
            select(Application.status, func.count(Application.id))
            .where(Application.user_id == user_id)
            .group_by(Application.status)
        )
        return {status: int(count) for status, count in self.session.execute(statement).all()}

    def update_application(
        self,
        user_id: int,
        application_id: int,
        *,
        status: str | None = None,
        notes: str | None = None,
    ) -> Application:
        item = self.get_application(user_id, application_id)
        if status is not None:
            item.status = status
        if notes is not None:
            item.notes = notes
        self.session.commit()
        self.session.refresh(item)
        return item

    def delete_application(self, user_id: int, application_id: int) -> None:
        item = self.get_application(user_id, application_id)
        self.session.delete(item)
        self.session.commit()

    # auth sessions

    def create_auth_session(self, user_id: int, token: str, ttl_min: int) -> AuthSession:
        now = datetime.now(UTC)
        item = AuthSession(
            user_id=user_id,
            token_hash=hash_text(token),
            created_at=now,
            expires_at=now + timedelta(minutes=ttl_min),
        )
        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)
        return item

    def get_user_for_token(self, token: str) -> User | None:
        item = self.session.scalar(select(AuthSession).where(AuthSession.token_hash == hash_text(token)))
        if item is None:
            return None
        if _as_utc(item.expires_at) <= datetime.now(UTC):
            self.session.delete(item)
            self.session.commit()
            return None
        return self.session.get(User, item.user_id)

    def delete_auth_session(self, token: str) -> None:
        self.session.execute(delete(AuthSession).where(AuthSession.token_hash == hash_text(token)))
        self.session.commit()
