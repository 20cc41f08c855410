from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from cvtailor.errors import RenderFailure
from cvtailor.render.docx_renderer import render_docx
from cvtailor.render.pdf_renderer import render_pdf
from cvtailor.render.storage import FileStore, StoredFile
from cvtailor.types import ContactInfo, SynthesizedContent

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RenderedDocuments:
    docx: StoredFile
    pdf: StoredFile


class DocumentRenderer:
    def __init__(self, store: FileStore):
        self.store = store

    def render_all(self, content: SynthesizedContent, contact: ContactInfo) -> RenderedDocuments:
        """Encode DOCX and PDF in parallel and store both, or neither."""
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="render") as pool:
            docx_future = pool.submit(render_docx, content, contact)
            pdf_future = pool.submit(render_pdf, content, contact)
            try:
                docx_bytes = docx_future.result()
                pdf_bytes = pdf_future.result()
            except Exception as exc:
                logger.exception("Document rendering failed for %s", contact.full_name)
                raise RenderFailure("Failed to render CV documents") from exc

        stored: list[StoredFile] = []
        try:
            stored.append(self.store.save(docx_bytes, "docx"))
            stored.append(self.store.save(pdf_bytes, "pdf"))
        except OSError as exc:
            for item in stored:
                self.store.discard(item)
            logger.exception("Failed to store rendered documents")
            raise RenderFailure("Failed to store CV documents") from exc

        return RenderedDocuments(docx=stored[0], pdf=stored[1])
