from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select

from cvtailor.db.models import Application, AuthSession, Employment, Skill
from cvtailor.db.repositories import Repository, hash_text
from cvtailor.errors import NotFound, ValidationFailure


def _user(repo: Repository, email: str = "dana@example.com"):
    return repo.create_user(email=email, password_hash="x", full_name="Dana Reyes")


def _application(repo: Repository, user_id: int, **overrides) -> Application:
    values = {
        "user_id": user_id,
        "job_title": "Backend Engineer",
        "company_name": "Globex",
        "jd_link": "",
        "jd_content": "jd",
        "cv_doc_path": "cv_a.docx",
        "cv_pdf_path": "cv_a.pdf",
    }
    values.update(overrides)
    return repo.create_application(**values)


def test_duplicate_email_is_rejected_case_insensitively(session) -> None:
    repo = Repository(session)
    _user(repo, "Dana@Example.com")

    with pytest.raises(ValidationFailure):
        _user(repo, "dana@example.com ")


def test_load_profile_maps_rows_and_orders_recent_first(session) -> None:
    repo = Repository(session)
    user = repo.update_user(_user(repo).id, {"phone_number": "555-0100", "github_link": "github.com/dana"})
    repo.add_profile_entry(user.id, "employment", {"position": "Engineer", "company": "Initech", "start_date": "2016"})
    repo.add_profile_entry(user.id, "employment", {"position": "Lead", "company": "Acme", "start_date": "2020"})
    repo.add_profile_entry(user.id, "skills", {"skill_name": "Python", "proficiency_level": "expert"})
    repo.add_profile_entry(user.id, "additional", {"category": "Languages", "content": "Spanish"})

    profile = repo.load_profile(user.id)

    assert profile.contact.phone == "555-0100"
    assert profile.contact.github == "github.com/dana"
    assert [job.company for job in profile.employment] == ["Acme", "Initech"]
    assert profile.skills[0].name == "Python"
    assert profile.skills[0].proficiency == "expert"
    assert profile.additional_info[0].category == "Languages"
    assert profile.education == []


def test_load_profile_for_missing_user_is_not_found(session) -> None:
    with pytest.raises(NotFound):
        Repository(session).load_profile(42)


def test_profile_entries_are_scoped_to_owner(session) -> None:
    repo = Repository(session)
    owner = _user(repo)
    other = _user(repo, "other@example.com")
    entry = repo.add_profile_entry(owner.id, "employment", {"position": "Dev", "company": "Acme"})

    with pytest.raises(NotFound):
        repo.update_profile_entry(other.id, "employment", entry.id, {"position": "CTO"})
    with pytest.raises(NotFound):
        repo.delete_profile_entry(other.id, "employment", entry.id)

    updated = repo.update_profile_entry(owner.id, "employment", entry.id, {"position": "Lead Dev", "company": None})
    assert (updated.position, updated.company) == ("Lead Dev", "Acme")


def test_unknown_profile_section_is_rejected(session) -> None:
    repo = Repository(session)
    user = _user(repo)

    with pytest.raises(ValidationFailure):
        repo.add_profile_entry(user.id, "publications", {"title": "Paper"})


def test_profile_entry_rejects_unknown_fields_and_bad_proficiency(session) -> None:
    repo = Repository(session)
    user = _user(repo)
    skill = repo.add_profile_entry(user.id, "skills", {"skill_name": "Python"})

    with pytest.raises(ValidationFailure, match="title"):
        repo.add_profile_entry(user.id, "employment", {"title": "Dev", "company": "Acme"})
    with pytest.raises(ValidationFailure, match="proficiency_level"):
        repo.add_profile_entry(user.id, "skills", {"skill_name": "Go", "proficiency_level": "Expert"})
    with pytest.raises(ValidationFailure, match="proficiency_level"):
        repo.update_profile_entry(user.id, "skills", skill.id, {"proficiency_level": "guru"})
    with pytest.raises(ValidationFailure):
        repo.add_profile_entry(user.id, "employment", {"company": "Acme"})

    assert [row.skill_name for row in repo.list_skills(user.id)] == ["Python"]
    assert repo.list_employment(user.id) == []


def test_load_profile_tolerates_stored_proficiency_outside_the_scale(session) -> None:
    repo = Repository(session)
    user = _user(repo)
    session.add_all(
        [
            Skill(user_id=user.id, skill_name="Python", proficiency_level="Expert"),
            Skill(user_id=user.id, skill_name="Rust", proficiency_level="guru"),
        ]
    )
    session.commit()

    profile = repo.load_profile(user.id)

    assert [(skill.name, skill.proficiency) for skill in profile.skills] == [
        ("Python", "expert"),
        ("Rust", "intermediate"),
    ]


def test_deleting_user_cascades_to_owned_rows(session) -> None:
    repo = Repository(session)
    user = _user(repo)
    repo.add_profile_entry(user.id, "employment", {"position": "Dev", "company": "Acme"})
    repo.add_profile_entry(user.id, "skills", {"skill_name": "Go"})
    _application(repo, user.id)
    repo.create_auth_session(user.id, "token", ttl_min=10)

    repo.delete_user(user.id)

    for model in (Employment, Skill, Application, AuthSession):
        assert session.scalar(select(func.count(model.id))) == 0


def test_applications_list_filters_and_stats(session) -> None:
    repo = Repository(session)
    user = _user(repo)
    other = _user(repo, "other@example.com")
    first = _application(repo, user.id)
    second = _application(repo, user.id, job_title="Data Engineer")
    _application(repo, other.id)
    repo.update_application(user.id, first.id, status="applied", notes="Sent via referral")

    assert [row.id for row in repo.list_applications(user.id)] == [second.id, first.id]
    assert [row.id for row in repo.list_applications(user.id, status="applied")] == [first.id]
    assert len(repo.list_applications(user.id, limit=1)) == 1
    assert len(repo.list_applications(None)) == 3
    assert repo.count_applications(user.id) == 2
    assert repo.application_stats(user.id) == {"applied": 1, "generated": 1}
    assert repo.get_application(user.id, first.id).notes == "Sent via referral"

    with pytest.raises(NotFound):
        repo.get_application(other.id, first.id)


def test_auth_session_tokens_are_stored_hashed_and_expire(session) -> None:
    repo = Repository(session)
    user = _user(repo)

    stored = repo.create_auth_session(user.id, "live-token", ttl_min=60)
    assert stored.token_hash == hash_text("live-token")
    assert repo.get_user_for_token("live-token").id == user.id
    assert repo.get_user_for_token("unknown") is None

    expired = repo.create_auth_session(user.id, "old-token", ttl_min=60)
    expired.expires_at = datetime.now(UTC) - timedelta(minutes=1)
    session.commit()

    assert repo.get_user_for_token("old-token") is None
    assert session.scalar(select(func.count(AuthSession.id))) == 1

    repo.delete_auth_session("live-token")
    assert repo.get_user_for_token("live-token") is None
