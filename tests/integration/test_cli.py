from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cvtailor.cli import app as cli_app
from cvtailor.cli.app import CLIState

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_state(monkeypatch, settings, database) -> CLIState:
    monkeypatch.setattr(cli_app, "configure_logging", lambda: None)
    return CLIState(settings=settings, database=database)


@pytest.fixture
def invoke(cli_state):
    def _invoke(*args: str):
        return runner.invoke(cli_app.app, list(args), obj=cli_state)

    return _invoke


def _create_user(invoke) -> int:
    result = invoke(
        "user", "create", "--email", "dana@example.com", "--full-name", "Dana Reyes", "--password", "s3cret!"
    )
    assert result.exit_code == 0, result.output
    return json.loads(result.output)["id"]


def test_user_create_and_profile_import(invoke, tmp_path: Path) -> None:
    user_id = _create_user(invoke)
    profile_file = tmp_path / "profile.json"
    profile_file.write_text(
        json.dumps(
            {
                "contact": {"phone_number": "555-0100", "github_link": "github.com/dana"},
                "employment": [{"position": "Senior Engineer", "company": "Acme Corp", "start_date": "2020"}],
                "skills": [{"skill_name": "Python", "proficiency_level": "expert"}],
            }
        ),
        encoding="utf-8",
    )

    imported = invoke("profile", "import", "--user-id", str(user_id), "--file", str(profile_file))
    assert imported.exit_code == 0, imported.output
    assert json.loads(imported.output)["imported"]["employment"] == 1

    shown = invoke("profile", "show", "--user-id", str(user_id))
    profile = json.loads(shown.output)
    assert profile["contact"]["phone"] == "555-0100"
    assert profile["contact"]["full_name"] == "Dana Reyes"
    assert profile["employment"][0]["company"] == "Acme Corp"
    assert profile["skills"] == [{"name": "Python", "proficiency": "expert"}]


@pytest.mark.parametrize(
    "payload",
    [
        {
            "employment": [{"position": "Dev", "company": "Acme"}],
            "skills": [{"skill_name": "Python", "proficiency_level": "Expert"}],
        },
        {"employment": [{"title": "Dev", "company": "Acme"}]},
        {"education": [{"institution": "State University"}]},
        {"skills": {"skill_name": "Python"}},
    ],
)
def test_profile_import_rejects_bad_rows_without_writing(invoke, tmp_path: Path, payload) -> None:
    user_id = _create_user(invoke)
    profile_file = tmp_path / "profile.json"
    profile_file.write_text(json.dumps(payload), encoding="utf-8")

    result = invoke("profile", "import", "--user-id", str(user_id), "--file", str(profile_file))

    assert result.exit_code == 1
    shown = json.loads(invoke("profile", "show", "--user-id", str(user_id)).output)
    assert shown["employment"] == []
    assert shown["education"] == []
    assert shown["skills"] == []


def test_duplicate_user_exits_with_error(invoke) -> None:
    _create_user(invoke)

    result = invoke("user", "create", "--email", "dana@example.com", "--full-name", "Dana", "--password", "x")

    assert result.exit_code == 1


def test_profile_show_for_unknown_user_fails(invoke) -> None:
    result = invoke("profile", "show", "--user-id", "404")

    assert result.exit_code == 1


def test_generate_requires_a_job_source(invoke) -> None:
    user_id = _create_user(invoke)

    result = invoke("generate", "--user-id", str(user_id))

    assert result.exit_code != 0


def test_applications_list_starts_empty(invoke) -> None:
    user_id = _create_user(invoke)

    result = invoke("applications", "list", "--user-id", str(user_id))

    assert result.exit_code == 0
    assert json.loads(result.output) == []


def test_init_reuses_the_shared_database(invoke, cli_state, monkeypatch) -> None:
    def no_second_database(*args, **kwargs):
        raise AssertionError("a second Database was built")

    monkeypatch.setattr(cli_app, "Database", no_second_database)

    result = invoke("init")

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["ok"] is True


def test_callback_builds_state_from_settings(monkeypatch, settings) -> None:
    monkeypatch.setattr(cli_app, "get_settings", lambda: settings)

    result = runner.invoke(cli_app.app, ["init"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["database_url"] == settings.database_url
    assert settings.output_dir.is_dir()
