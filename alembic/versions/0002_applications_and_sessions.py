"""Generated applications and login sessions

Revision ID: 0002_applications_and_sessions
Revises: 0001_profile_schema
Create Date: 2026-10-14

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0002_applications_and_sessions"
down_revision = "0001_profile_schema"
branch_labels = None
depends_on = None


def _has_table(insp: sa.Inspector, table: str) -> bool:
    return table in insp.get_table_names()


def upgrade() -> None:
    insp = sa.inspect(op.get_bind())

    if not _has_table(insp, "applications"):
        op.create_table(
            "applications",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
            ),
            sa.Column("job_title", sa.String(length=255), nullable=True),
            sa.Column("company_name", sa.String(length=255), nullable=True),
            sa.Column("jd_link", sa.String(length=1000), nullable=False, server_default=""),
            sa.Column("jd_content", sa.Text(), nullable=False, server_default=""),
            sa.Column("cv_doc_path", sa.String(length=500), nullable=False, server_default=""),
            sa.Column("cv_pdf_path", sa.String(length=500), nullable=False, server_default=""),
            sa.Column("applied_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("status", sa.String(length=40), nullable=False, server_default="generated"),
            sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        )
        op.create_index("ix_applications_user_id", "applications", ["user_id"])
        op.create_index("ix_applications_status", "applications", ["status"])

    if not _has_table(insp, "auth_sessions"):
        op.create_table(
            "auth_sessions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
            ),
            sa.Column("token_hash", sa.String(length=64), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index("ix_auth_sessions_user_id", "auth_sessions", ["user_id"])
        op.create_index("ix_auth_sessions_token_hash", "auth_sessions", ["token_hash"], unique=True)


def downgrade() -> None:
    insp = sa.inspect(op.get_bind())

    if _has_table(insp, "auth_sessions"):
        op.drop_index("ix_auth_sessions_token_hash", table_name="auth_sessions")
        op.drop_index("ix_auth_sessions_user_id", table_name="auth_sessions")
        op.drop_table("auth_sessions")

    if _has_table(insp, "applications"):
        op.drop_index("ix_applications_status", table_name="applications")
        op.drop_index("ix_applications_user_id", table_name="applications")
        op.drop_table("applications")
