from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cvtailor.config import Settings, get_settings
from cvtailor.db.models import Application
from cvtailor.db.repositories import Repository
from cvtailor.errors import CVTailorError, ValidationFailure
from cvtailor.llm.router import LLMRouter
from cvtailor.render.renderer import DocumentRenderer
from cvtailor.render.storage import FileStore
from cvtailor.types import ContactInfo, SynthesizedContent

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GenerationResult:
    application: Application
    content: SynthesizedContent


@dataclass(slots=True)
class PreviewResult:
    content: SynthesizedContent
    contact: ContactInfo


def require_job_description(job_description: str | None) -> str:
    if job_description is None or not job_description.strip():
        raise ValidationFailure("Job description is required")
    return job_description


class GenerationOrchestrator:
    """Profile -> tailored content -> DOCX/PDF -> application record."""

    def __init__(
        self,
        session: Session,
        *,
        settings: Settings | None = None,
        llm: LLMRouter | None = None,
        renderer: DocumentRenderer | None = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.repo = Repository(session)
        self.llm = llm or LLMRouter(self.settings)
        self.renderer = renderer or DocumentRenderer(FileStore(self.settings.output_dir))

    def generate(self, *, user_id: int, job_description: str, job_link: str = "") -> GenerationResult:
        job_description = require_job_description(job_description)
        profile = self.repo.load_profile(user_id)
        logger.info("Generating tailored CV user_id=%s jd_chars=%d", user_id, len(job_description))

        # both model calls run together; leaving the block joins both
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="llm") as pool:
            content_future = pool.submit(
                self.llm.synthesize_content,
                profile=profile,
                job_description=job_description,
            )
            details_future = pool.submit(self.llm.extract_job_details, job_description=job_description)
            try:
                content = content_future.result()
            except CVTailorError:
                logger.warning("CV generation aborted at synthesis user_id=%s", user_id)
                raise
            details = details_future.result()

        try:
            documents = self.renderer.render_all(content, profile.contact)
        except CVTailorError:
            logger.warning("CV generation aborted at rendering user_id=%s", user_id)
            raise

        try:
            application = self.repo.create_application(
                user_id=user_id,
                job_title=details.job_title,
                company_name=details.company_name,
                jd_link=job_link or "",
                jd_content=job_description,
                cv_doc_path=documents.docx.filename,
                cv_pdf_path=documents.pdf.filename,
            )
        except SQLAlchemyError:
            self.session.rollback()
            self.renderer.store.discard(documents.docx)
            self.renderer.store.discard(documents.pdf)
            logger.exception("Failed to persist application user_id=%s", user_id)
            raise

        logger.info(
            "Generated CV application_id=%s user_id=%s title=%r company=%r",
            application.id,
            user_id,
            application.job_title,
            application.company_name,
        )
        return GenerationResult(application=application, content=content)

    def preview(self, *, user_id: int, job_description: str) -> PreviewResult:
        job_description = require_job_description(job_description)
        profile = self.repo.load_profile(user_id)
        content = self.llm.synthesize_content(profile=profile, job_description=job_description)
        return PreviewResult(content=content, contact=profile.contact)
