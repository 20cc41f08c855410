from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from cvtailor.api.routes import applications_router, auth_router, cv_router, users_router
from cvtailor.config import Settings, get_settings
from cvtailor.db.init import ensure_data_directories, init_database
from cvtailor.db.session import Database
from cvtailor.errors import CVTailorError
from cvtailor.llm.router import LLMRouter
from cvtailor.render.renderer import DocumentRenderer
from cvtailor.render.storage import FileStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
    llm: LLMRouter | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    database = database or Database(settings.database_url)
    ensure_data_directories(settings)

    app = FastAPI(title=settings.app_name)
    app.state.settings = settings
    app.state.database = database
    app.state.llm = llm or LLMRouter(settings)
    app.state.renderer = DocumentRenderer(FileStore(settings.output_dir))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_origin_regex=r"chrome-extension://.*",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def _startup() -> None:
        init_database(database, settings)

    @app.exception_handler(CVTailorError)
    async def _domain_error(request: Request, exc: CVTailorError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.get("/api/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok", "timestamp": datetime.now(UTC).isoformat()})

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(cv_router)
    app.include_router(applications_router)

    app.mount("/uploads", StaticFiles(directory=str(settings.output_dir)), name="uploads")
    return app
