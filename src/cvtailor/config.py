from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "CVTailor"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 3000
    log_level: str = "INFO"

    database_url: str = "sqlite:///./data/cvtailor.db"
    data_dir: Path = Path("./data")
    output_dir: Path = Path("./data/uploads")

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model_writer: str = "gpt-4o"
    openai_model_extractor: str = "gpt-4o-mini"
    openai_timeout_sec: int = 60
    openai_max_retries: int = 0

    local_llm_enabled: bool = False
    local_llm_base_url: str = "http://localhost:11434/v1"
    local_llm_api_key: str = "local"
    local_llm_model: str = "qwen2.5:14b-instruct"
    local_llm_timeout_sec: int = 90

    llm_router_writer_provider: str = "openai"
    llm_router_extract_provider: str = "openai"

    resume_temperature: float = 0.7
    resume_max_tokens: int = 2500
    extract_max_tokens: int = 100
    extract_max_chars: int = 2000

    session_ttl_min: int = 10080
    password_hash_method: str = "scrypt"
    job_fetch_timeout_sec: int = 30

    cors_origins: str = "http://localhost:5173"

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @field_validator("llm_router_writer_provider", "llm_router_extract_provider")
    @classmethod
    def validate_provider(cls, value: str) -> str:
        if value not in {"openai", "local"}:
            raise ValueError("llm provider must be 'openai' or 'local'")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
