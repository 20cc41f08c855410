from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StoredFile:
    filename: str
    path: Path


class FileStore:
    """Writes generated documents under one directory with collision-free names."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def new_filename(self, extension: str) -> str:
        return f"cv_{uuid.uuid4()}.{extension.lstrip('.')}"

    def save(self, data: bytes, extension: str) -> StoredFile:
        self.root.mkdir(parents=True, exist_ok=True)
        filename = self.new_filename(extension)
        path = self.root / filename
        path.write_bytes(data)
        logger.info("Stored generated document %s (%d bytes)", filename, len(data))
        return StoredFile(filename=filename, path=path)

    def resolve(self, filename: str) -> Path:
        # filenames come from the database, never from the request path
        path = (self.root / Path(filename).name).resolve()
        if not path.is_file():
            raise FileNotFoundError(filename)
        return path

    def discard(self, stored: StoredFile) -> None:
        stored.path.unlink(missing_ok=True)

    def remove(self, filename: str) -> None:
        if filename:
            (self.root / Path(filename).name).unlink(missing_ok=True)
