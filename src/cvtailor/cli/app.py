from __future__ import annotations

import getpass
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

import typer
import uvicorn
from pydantic import BaseModel, ValidationError

from cvtailor.api.app import create_app
from cvtailor.api.schemas import (
    AdditionalInfoRequest,
    CertificationRequest,
    EducationRequest,
    EmploymentRequest,
    ProfileUpdateRequest,
    SkillRequest,
)
from cvtailor.config import Settings, get_settings
from cvtailor.core.job_fetcher import fetch_job_text
from cvtailor.core.orchestrator import GenerationOrchestrator
from cvtailor.core.security import hash_password
from cvtailor.db.init import init_database
from cvtailor.db.repositories import Repository
from cvtailor.db.session import Database
from cvtailor.errors import CVTailorError, ValidationFailure
from cvtailor.logging_config import configure_logging

app = typer.Typer(help="CVTailor CLI")
user_app = typer.Typer(help="Manage user accounts")
profile_app = typer.Typer(help="Manage resume profiles")
applications_app = typer.Typer(help="Generated application history")

app.add_typer(user_app, name="user")
app.add_typer(profile_app, name="profile")
app.add_typer(applications_app, name="applications")

# profile file key -> (repository section, row schema)
PROFILE_FILE_SECTIONS: dict[str, tuple[str, type[BaseModel]]] = {
    "employment": ("employment", EmploymentRequest),
    "education": ("education", EducationRequest),
    "certifications": ("certifications", CertificationRequest),
    "skills": ("skills", SkillRequest),
    "additional_info": ("additional", AdditionalInfoRequest),
}


@dataclass
class CLIState:
    settings: Settings
    database: Database


@app.callback()
def main(ctx: typer.Context) -> None:
    configure_logging()
    if ctx.obj is None:
        settings = get_settings()
        database = Database(settings.database_url)
        init_database(database, settings)
        ctx.obj = CLIState(settings=settings, database=database)
        ctx.call_on_close(database.dispose)


def _echo(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _fail(exc: CVTailorError) -> NoReturn:
    typer.echo(json.dumps({"ok": False, "error": exc.message}, indent=2), err=True)
    raise typer.Exit(code=1)


def _validated_row(schema: type[BaseModel], row: Any, where: str) -> dict[str, Any]:
    if not isinstance(row, dict):
        raise ValidationFailure(f"{where}: expected an object")
    unknown = sorted(set(row) - set(schema.model_fields))
    if unknown:
        raise ValidationFailure(f"{where}: unknown field(s) {', '.join(unknown)}")
    try:
        return schema.model_validate(row).model_dump()
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        raise ValidationFailure(f"{where}: {problems}") from exc


def _read_profile_file(file: Path) -> tuple[dict[str, Any] | None, dict[str, list[dict[str, Any]]]]:
    try:
        payload = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValidationFailure(f"{file.name} is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise ValidationFailure(f"{file.name} must hold a JSON object")

    contact = None
    if payload.get("contact") is not None:
        contact = _validated_row(ProfileUpdateRequest, payload["contact"], "contact")

    sections: dict[str, list[dict[str, Any]]] = {}
    for key, (_, schema) in PROFILE_FILE_SECTIONS.items():
        rows = payload.get(key) or []
        if not isinstance(rows, list):
            raise ValidationFailure(f"{key} must be a list")
        sections[key] = [_validated_row(schema, row, f"{key}[{index}]") for index, row in enumerate(rows)]
    return contact, sections


@app.command("init")
def init_cmd(ctx: typer.Context) -> None:
    """Initialize database and data directories."""
    state: CLIState = ctx.obj
    result = init_database(state.database, state.settings)
    _echo({"ok": True, **result})


@user_app.command("create")
def user_create(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email"),
    full_name: str = typer.Option(..., "--full-name"),
    password: str = typer.Option("", "--password", help="Prompted for when omitted"),
    admin: bool = typer.Option(False, "--admin"),
) -> None:
    state: CLIState = ctx.obj
    secret = password or getpass.getpass("Password: ")
    with state.database.session() as db:
        repo = Repository(db)
        try:
            user = repo.create_user(
                email=email,
                password_hash=hash_password(secret, method=state.settings.password_hash_method),
                full_name=full_name,
            )
            if admin:
                user = repo.set_user_role(user.id, "admin")
        except CVTailorError as exc:
            _fail(exc)
        _echo({"id": user.id, "email": user.email, "role": user.role})


@profile_app.command("import")
def profile_import(
    ctx: typer.Context,
    user_id: int = typer.Option(..., "--user-id"),
    file: Path = typer.Option(..., "--file", exists=True, readable=True),
) -> None:
    """Load profile sections from a JSON file into an existing user.

    Every row is checked before anything is written, so a bad file
    leaves the profile untouched.
    """
    state: CLIState = ctx.obj
    try:
        contact, sections = _read_profile_file(file)
    except CVTailorError as exc:
        _fail(exc)

    with state.database.session() as db:
        repo = Repository(db)
        try:
            repo.require_user(user_id)
            if contact:
                repo.update_user(user_id, contact)
            for key, rows in sections.items():
                section = PROFILE_FILE_SECTIONS[key][0]
                for row in rows:
                    repo.add_profile_entry(user_id, section, row)
        except CVTailorError as exc:
            _fail(exc)
        _echo({"user_id": user_id, "imported": {key: len(rows) for key, rows in sections.items()}})


@profile_app.command("show")
def profile_show(ctx: typer.Context, user_id: int = typer.Option(..., "--user-id")) -> None:
    state: CLIState = ctx.obj
    with state.database.session() as db:
        try:
            profile = Repository(db).load_profile(user_id)
        except CVTailorError as exc:
            _fail(exc)
        _echo(profile.model_dump())


def _read_job_description(settings: Settings, jd_file: Path | None, url: str | None) -> str:
    if jd_file is not None:
        return jd_file.read_text(encoding="utf-8")
    if url:
        return fetch_job_text(url, timeout_sec=settings.job_fetch_timeout_sec)
    raise typer.BadParameter("provide --jd-file or --url")


@app.command("generate")
def generate_cmd(
    ctx: typer.Context,
    user_id: int = typer.Option(..., "--user-id"),
    jd_file: Path | None = typer.Option(None, "--jd-file", exists=True, readable=True),
    url: str | None = typer.Option(None, "--url", help="Fetch the job posting from this URL"),
    link: str = typer.Option("", "--link", help="Job posting link stored with the application"),
) -> None:
    """Generate tailored DOCX and PDF resumes for a job description."""
    state: CLIState = ctx.obj
    job_description = _read_job_description(state.settings, jd_file, url)
    with state.database.session() as db:
        orchestrator = GenerationOrchestrator(db, settings=state.settings)
        try:
            result = orchestrator.generate(
                user_id=user_id,
                job_description=job_description,
                job_link=link or url or "",
            )
        except CVTailorError as exc:
            _fail(exc)
        application = result.application
        _echo(
            {
                "application_id": application.id,
                "job_title": application.job_title,
                "company_name": application.company_name,
                "docx": str(state.settings.output_dir / application.cv_doc_path),
                "pdf": str(state.settings.output_dir / application.cv_pdf_path),
                "content": result.content.model_dump(by_alias=True),
            }
        )


@app.command("preview")
def preview_cmd(
    ctx: typer.Context,
    user_id: int = typer.Option(..., "--user-id"),
    jd_file: Path | None = typer.Option(None, "--jd-file", exists=True, readable=True),
    url: str | None = typer.Option(None, "--url"),
) -> None:
    """Show the tailored content without rendering or saving anything."""
    state: CLIState = ctx.obj
    job_description = _read_job_description(state.settings, jd_file, url)
    with state.database.session() as db:
        orchestrator = GenerationOrchestrator(db, settings=state.settings)
        try:
            result = orchestrator.preview(user_id=user_id, job_description=job_description)
        except CVTailorError as exc:
            _fail(exc)
        _echo(result.content.model_dump(by_alias=True))


@applications_app.command("list")
def applications_list(
    ctx: typer.Context,
    user_id: int = typer.Option(..., "--user-id"),
    status: str | None = typer.Option(None, "--status"),
    limit: int = typer.Option(20, "--limit"),
) -> None:
    state: CLIState = ctx.obj
    with state.database.session() as db:
        rows = Repository(db).list_applications(user_id, status=status, limit=limit)
        _echo(
            [
                {
                    "id": row.id,
                    "job_title": row.job_title,
                    "company_name": row.company_name,
                    "status": row.status,
                    "jd_link": row.jd_link,
                    "applied_at": row.applied_at.isoformat() if row.applied_at else None,
                    "docx": row.cv_doc_path,
                    "pdf": row.cv_pdf_path,
                }
                for row in rows
            ]
        )


@app.command("serve")
def serve(
    ctx: typer.Context,
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    state: CLIState = ctx.obj
    app_instance = create_app(state.settings, database=state.database)
    uvicorn.run(app_instance, host=host or state.settings.app_host, port=port or state.settings.app_port)
