from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any

from openai import OpenAI

from cvtailor.config import Settings
from cvtailor.types import ModelResponse

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProviderConfig:
    name: str
    base_url: str
    api_key: str
    timeout_sec: int
    max_retries: int = 0


class LLMProvider:
    def __init__(self, config: ProviderConfig):
        self.config = config
        self.client = OpenAI(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=float(config.timeout_sec),
            max_retries=config.max_retries,
        )

    def complete_chat(
        self,
        *,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> ModelResponse:
        response = self.client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format={"type": "json_object"},
        )
        choices = getattr(response, "choices", None) or []
        return ModelResponse(
            content=self._extract_chat_text(response),
            provider=self.config.name,
            finish_reason=getattr(choices[0], "finish_reason", None) if choices else None,
        )

    def complete_json(
        self,
        *,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> dict[str, Any]:
        response = self.complete_chat(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if response.finish_reason == "length":
            logger.warning("%s output for %s was cut off at max_tokens=%d", response.provider, model, max_tokens)
        return parse_json(response.content)

    @staticmethod
    def _extract_chat_text(response: Any) -> str:
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""

        message = getattr(choices[0], "message", None)
        if message is None:
            return ""

        content = getattr(message, "content", "")
        if isinstance(content, str):
            return content
        if content is None:
            return ""
        return str(content)


def parse_json(content: str) -> dict[str, Any]:
    candidate = content.strip()
    if not candidate:
        return {}

    if "```" in candidate:
        parts = candidate.split("```")
        for part in parts:
            part = part.strip()
            if part.startswith("json"):
                part = part[4:].strip()
            if part.startswith("{") and part.endswith("}"):
                candidate = part
                break

    try:
        value = json.loads(candidate)
        return value if isinstance(value, dict) else {}
    except json.JSONDecodeError:
        logger.warning("Failed to parse JSON model output")
        return {}


class ProviderPool:
    def __init__(self, settings: Settings):
        self.settings = settings
        self._openai: LLMProvider | None = None
        self._local: LLMProvider | None = None
        self._lock = threading.Lock()

    def is_available(self, name: str) -> bool:
        if name == "openai":
            return bool(self.settings.openai_api_key)
        if name == "local":
            return self.settings.local_llm_enabled
        return False

    def get(self, name: str) -> LLMProvider:
        return self.local() if name == "local" else self.openai()

    def openai(self) -> LLMProvider:
        with self._lock:
            if self._openai is None:
                self._openai = LLMProvider(
                    ProviderConfig(
                        name="openai",
                        base_url=self.settings.openai_base_url,
                        api_key=self.settings.openai_api_key,
                        timeout_sec=self.settings.openai_timeout_sec,
                        max_retries=self.settings.openai_max_retries,
                    )
                )
            return self._openai

    def local(self) -> LLMProvider:
        with self._lock:
            if self._local is None:
                self._local = LLMProvider(
                    ProviderConfig(
                        name="local",
                        base_url=self.settings.local_llm_base_url,
                        api_key=self.settings.local_llm_api_key,
                        timeout_sec=self.settings.local_llm_timeout_sec,
                        max_retries=self.settings.openai_max_retries,
                    )
                )
            return self._local
