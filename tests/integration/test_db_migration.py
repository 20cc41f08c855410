from __future__ import annotations

import os
import sqlite3
import subprocess
import sys
from pathlib import Path


def _tables(cur: sqlite3.Cursor) -> set[str]:
    cur.execute("SELECT name FROM sqlite_master WHERE type='table'")
    return {row[0] for row in cur.fetchall()}


def test_alembic_upgrade_and_downgrade(tmp_path: Path) -> None:
    repo_root = Path(__file__).resolve().parents[2]
    db_path = tmp_path / "migration_test.db"
    env = os.environ.copy()
    env["DATABASE_URL"] = f"sqlite:///{db_path}"

    def alembic(*args: str) -> None:
        subprocess.run(
            [sys.executable, "-m", "alembic", "-c", "alembic.ini", *args],
            cwd=repo_root,
            env=env,
            check=True,
        )

    alembic("upgrade", "head")

    conn = sqlite3.connect(db_path)
    cur = conn.cursor()
    assert {"users", "employment_history", "skills", "applications", "auth_sessions"} <= _tables(cur)

    cur.execute("PRAGMA table_info(applications)")
    columns = {row[1] for row in cur.fetchall()}
    assert {"job_title", "company_name", "jd_link", "cv_doc_path", "cv_pdf_path", "status"} <= columns

    alembic("downgrade", "0001_profile_schema")
    tables = _tables(cur)
    assert "applications" not in tables
    assert "users" in tables

    alembic("downgrade", "base")
    assert _tables(cur) <= {"alembic_version"}

    conn.close()
