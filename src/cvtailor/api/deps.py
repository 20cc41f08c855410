from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from cvtailor.config import Settings
from cvtailor.core.orchestrator import GenerationOrchestrator
from cvtailor.db.models import User
from cvtailor.db.repositories import Repository
from cvtailor.errors import AuthenticationFailure, PermissionDenied


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Generator[Session, None, None]:
    yield from request.app.state.database.iter_session()


def get_bearer_token(request: Request) -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationFailure("Authentication required")
    return token.strip()


def get_current_user(token: str = Depends(get_bearer_token), db: Session = Depends(get_db)) -> User:
    user = Repository(db).get_user_for_token(token)
    if user is None:
        raise AuthenticationFailure("Invalid or expired token")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise PermissionDenied("Admin access required")
    return user


def get_orchestrator(request: Request, db: Session = Depends(get_db)) -> GenerationOrchestrator:
    state = request.app.state
    return GenerationOrchestrator(db, settings=state.settings, llm=state.llm, renderer=state.renderer)
