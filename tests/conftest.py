from __future__ import annotations

import json
from collections.abc import Generator
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from cvtailor.api.app import create_app
from cvtailor.config import Settings
from cvtailor.db.session import Database
from cvtailor.llm.prompts import JOB_DETAILS_PROMPT
from cvtailor.llm.router import LLMRouter

RESUME_JSON: dict[str, Any] = {
    "summary": "Backend engineer who builds reliable Python services.",
    "skills": ["Python", "PostgreSQL", "AWS"],
    "experience": [
        {
            "position": "Senior Engineer",
            "company": "Acme Corp",
            "location": "Remote",
            "period": "Jan 2020 - Present",
            "achievements": ["Built backend systems serving 2M requests a day"],
        }
    ],
    "education": [
        {
            "degree": "BSc Computer Science",
            "institution": "State University",
            "graduation": "2017",
            "details": "",
        }
    ],
    "certifications": [],
    "additionalSections": [],
}

DETAILS_JSON: dict[str, Any] = {"jobTitle": "Backend Engineer", "companyName": "Globex"}


class FakeChatPayload:
    def __init__(self, content: str):
        self.choices = [SimpleNamespace(message=SimpleNamespace(content=content))]


class FakeChatClient:
    """Stands in for ``openai.OpenAI`` on a provider.

    Replies are chosen by system prompt: the job-detail prompt gets
    ``details``, everything else gets ``resume``. Setting an ``*_error``
    makes that call raise instead.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.resume: dict[str, Any] | str = RESUME_JSON
        self.details: dict[str, Any] | str = DETAILS_JSON
        self.resume_error: Exception | None = None
        self.details_error: Exception | None = None
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    @property
    def resume_calls(self) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["messages"][0]["content"] != JOB_DETAILS_PROMPT]

    @property
    def details_calls(self) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["messages"][0]["content"] == JOB_DETAILS_PROMPT]

    def _create(self, **kwargs: Any) -> FakeChatPayload:
        self.calls.append(kwargs)
        if kwargs["messages"][0]["content"] == JOB_DETAILS_PROMPT:
            error, reply = self.details_error, self.details
        else:
            error, reply = self.resume_error, self.resume
        if error is not None:
            raise error
        return FakeChatPayload(reply if isinstance(reply, str) else json.dumps(reply))


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        app_env="test",
        database_url=f"sqlite:///{tmp_path / 'cvtailor_test.db'}",
        data_dir=tmp_path,
        output_dir=tmp_path / "uploads",
        openai_api_key="test-key",
        local_llm_enabled=False,
        llm_router_writer_provider="openai",
        llm_router_extract_provider="openai",
        password_hash_method="pbkdf2:sha256:1000",
    )


@pytest.fixture
def database(settings: Settings) -> Generator[Database, None, None]:
    database = Database(settings.database_url)
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def session(database: Database) -> Generator[Session, None, None]:
    db = database.session()
    yield db
    db.close()


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def llm_router(settings: Settings, chat_client: FakeChatClient) -> LLMRouter:
    router = LLMRouter(settings=settings)
    router.pool.openai().client = chat_client
    return router


@pytest.fixture
def client(settings: Settings, database: Database, llm_router: LLMRouter) -> Generator[TestClient, None, None]:
    with TestClient(create_app(settings, database=database, llm=llm_router)) as test_client:
        yield test_client


@pytest.fixture
def register_user(client: TestClient):
    """Register an account over the API and return its bearer headers."""

    def _register(email: str = "dana@example.com", full_name: str = "Dana Reyes") -> dict[str, str]:
        response = client.post(
            "/api/auth/register",
            json={"email": email, "password": "s3cret!", "full_name": full_name},
        )
        assert response.status_code == 201
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _register
