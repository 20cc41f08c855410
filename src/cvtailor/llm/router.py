from __future__ import annotations

import logging

from pydantic import ValidationError

from cvtailor.config import Settings, get_settings
from cvtailor.errors import GenerationFailure
from cvtailor.llm.prompts import build_job_details_messages, build_resume_messages
from cvtailor.llm.providers import LLMProvider, ProviderPool
from cvtailor.types import JobDetails, ProfileData, SynthesizedContent

logger = logging.getLogger(__name__)


class LLMRouter:
    """Sends the two generation tasks to their configured providers.

    ``writer`` produces the tailored resume content and fails closed.
    ``extract`` pulls job metadata and degrades to "Not specified".
    """

    def __init__(self, settings: Settings | None = None, pool: ProviderPool | None = None):
        self.settings = settings or get_settings()
        self.pool = pool or ProviderPool(self.settings)

    def synthesize_content(self, *, profile: ProfileData, job_description: str) -> SynthesizedContent:
        provider = self._provider_for("writer")
        if provider is None:
            raise GenerationFailure("Failed to generate CV content: no language model provider configured")

        messages = build_resume_messages(profile, job_description)
        try:
            data = provider.complete_json(
                model=self._model_for("writer", provider),
                messages=messages,
                temperature=self.settings.resume_temperature,
                max_tokens=self.settings.resume_max_tokens,
            )
        except Exception as exc:
            logger.error(
                "Resume synthesis call failed provider=%s user_id=%s error=%s",
                provider.config.name,
                profile.user_id,
                exc,
            )
            raise GenerationFailure("Failed to generate CV content") from exc

        if not data:
            logger.error("Resume synthesis returned unparsable content user_id=%s", profile.user_id)
            raise GenerationFailure("Failed to generate CV content: model returned unparsable output")

        try:
            return SynthesizedContent.model_validate(data)
        except ValidationError as exc:
            logger.error("Resume synthesis returned an invalid shape user_id=%s error=%s", profile.user_id, exc)
            raise GenerationFailure("Failed to generate CV content: model returned an invalid structure") from exc

    def extract_job_details(self, *, job_description: str) -> JobDetails:
        provider = self._provider_for("extract")
        if provider is None:
            logger.warning("No provider configured for job detail extraction")
            return JobDetails.unspecified()

        excerpt = job_description[: self.settings.extract_max_chars]
        try:
            data = provider.complete_json(
                model=self._model_for("extract", provider),
                messages=build_job_details_messages(excerpt),
                temperature=0,
                max_tokens=self.settings.extract_max_tokens,
            )
            return JobDetails.model_validate(data)
        except Exception as exc:
            logger.warning("Job details extraction failed provider=%s error=%s", provider.config.name, exc)
            return JobDetails.unspecified()

    def _provider_for(self, task: str) -> LLMProvider | None:
        provider_name = {
            "writer": self.settings.llm_router_writer_provider,
            "extract": self.settings.llm_router_extract_provider,
        }[task]
        if not self.pool.is_available(provider_name):
            return None
        return self.pool.get(provider_name)

    def _model_for(self, task: str, provider: LLMProvider) -> str:
        if provider.config.name == "local":
            return self.settings.local_llm_model
        if task == "extract":
            return self.settings.openai_model_extractor
        return self.settings.openai_model_writer
