from __future__ import annotations

from io import BytesIO

import pytest
from docx import Document
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from cvtailor.core.orchestrator import GenerationOrchestrator
from cvtailor.db.models import Application, Skill
from cvtailor.db.repositories import Repository
from cvtailor.errors import GenerationFailure, NotFound, ValidationFailure
from cvtailor.types import NOT_SPECIFIED

JOB_DESCRIPTION = "Looking for a backend engineer"


@pytest.fixture
def user_id(session) -> int:
    repo = Repository(session)
    user = repo.create_user(email="dana@example.com", password_hash="x", full_name="Dana Reyes")
    repo.add_profile_entry(
        user.id,
        "employment",
        {
            "position": "Senior Engineer",
            "company": "Acme Corp",
            "start_date": "Jan 2020",
            "description": "Built backend systems",
        },
    )
    return user.id


@pytest.fixture
def orchestrator(session, settings, llm_router) -> GenerationOrchestrator:
    return GenerationOrchestrator(session, settings=settings, llm=llm_router)


def _application_count(session) -> int:
    return session.scalar(select(func.count(Application.id)))


def _output_files(settings) -> list:
    return sorted(settings.output_dir.glob("*"))


def test_generate_tailors_renders_and_records_application(orchestrator, chat_client, settings, user_id) -> None:
    result = orchestrator.generate(user_id=user_id, job_description=JOB_DESCRIPTION, job_link="https://jobs/1")

    user_message = chat_client.resume_calls[0]["messages"][1]["content"]
    assert "Built backend systems" in user_message
    assert JOB_DESCRIPTION in user_message
    assert len(chat_client.details_calls) == 1

    application = result.application
    assert application.user_id == user_id
    assert application.job_title == "Backend Engineer"
    assert application.company_name == "Globex"
    assert application.jd_link == "https://jobs/1"
    assert application.jd_content == JOB_DESCRIPTION
    assert application.status == "generated"

    docx_path = settings.output_dir / application.cv_doc_path
    pdf_path = settings.output_dir / application.cv_pdf_path
    assert docx_path.is_file() and pdf_path.is_file()
    text = "\n".join(p.text for p in Document(BytesIO(docx_path.read_bytes())).paragraphs)
    assert "Senior Engineer | Acme Corp" in text
    assert "CERTIFICATIONS" not in text
    assert result.content.experience[0].company == "Acme Corp"


def test_generate_succeeds_with_legacy_proficiency_casing(orchestrator, chat_client, session, user_id) -> None:
    session.add(Skill(user_id=user_id, skill_name="Python", proficiency_level="Expert"))
    session.commit()

    result = orchestrator.generate(user_id=user_id, job_description=JOB_DESCRIPTION)

    assert result.application.id is not None
    assert "Python (expert)" in chat_client.resume_calls[0]["messages"][1]["content"]


@pytest.mark.parametrize("job_description", ["", "   \n\t"])
def test_blank_job_description_fails_before_any_work(
    orchestrator, chat_client, session, settings, user_id, job_description
) -> None:
    with pytest.raises(ValidationFailure):
        orchestrator.generate(user_id=user_id, job_description=job_description)

    assert chat_client.calls == []
    assert _application_count(session) == 0
    assert _output_files(settings) == []


def test_synthesis_transport_error_leaves_no_application(orchestrator, chat_client, session, settings, user_id) -> None:
    chat_client.resume_error = ConnectionError("connection reset by peer")

    with pytest.raises(GenerationFailure):
        orchestrator.generate(user_id=user_id, job_description=JOB_DESCRIPTION)

    assert _application_count(session) == 0
    assert _output_files(settings) == []


def test_extraction_failure_still_generates_with_placeholder_metadata(orchestrator, chat_client, user_id) -> None:
    chat_client.details_error = TimeoutError("timed out")

    result = orchestrator.generate(user_id=user_id, job_description=JOB_DESCRIPTION)

    assert result.application.job_title == NOT_SPECIFIED
    assert result.application.company_name == NOT_SPECIFIED


def test_unknown_user_is_not_found(orchestrator, chat_client) -> None:
    with pytest.raises(NotFound):
        orchestrator.generate(user_id=999, job_description=JOB_DESCRIPTION)

    assert chat_client.calls == []


def test_persistence_failure_discards_rendered_files(orchestrator, session, settings, user_id, monkeypatch) -> None:
    def broken_create(**kwargs):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(orchestrator.repo, "create_application", broken_create)

    with pytest.raises(SQLAlchemyError):
        orchestrator.generate(user_id=user_id, job_description=JOB_DESCRIPTION)

    assert _output_files(settings) == []
    assert _application_count(session) == 0


def test_preview_returns_content_without_persisting(orchestrator, chat_client, session, settings, user_id) -> None:
    result = orchestrator.preview(user_id=user_id, job_description=JOB_DESCRIPTION)

    assert result.content.experience[0].position == "Senior Engineer"
    assert result.contact.full_name == "Dana Reyes"
    assert result.contact.email == "dana@example.com"
    assert chat_client.details_calls == []
    assert _application_count(session) == 0
    assert _output_files(settings) == []


def test_preview_requires_job_description(orchestrator, chat_client, user_id) -> None:
    with pytest.raises(ValidationFailure):
        orchestrator.preview(user_id=user_id, job_description="")

    assert chat_client.calls == []
