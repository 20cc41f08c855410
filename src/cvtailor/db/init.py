from __future__ import annotations

from pathlib import Path

from cvtailor.config import Settings, get_settings
from cvtailor.db.session import Database


def ensure_data_directories(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    paths: list[Path] = [settings.data_dir, settings.output_dir]
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def init_database(database: Database, settings: Settings | None = None) -> dict[str, str]:
    ensure_data_directories(settings)
    database.create_all()
    return {"database_url": database.url}
