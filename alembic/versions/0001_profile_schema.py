"""Users and resume profile sections

Revision ID: 0001_profile_schema
Revises:
Create Date: 2026-10-12

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_profile_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _owner() -> sa.Column:
    return sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("phone_number", sa.String(length=60), nullable=False, server_default=""),
        sa.Column("linkedin_profile", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("github_link", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("experience_years", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="user"),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "employment_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("position", sa.String(length=255), nullable=False),
        sa.Column("company", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("start_date", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("end_date", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        *_timestamps(),
    )
    op.create_index("ix_employment_history_user_id", "employment_history", ["user_id"])

    op.create_table(
        "education",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("degree", sa.String(length=255), nullable=False),
        sa.Column("institution", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("graduation_date", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("gpa", sa.String(length=20), nullable=False, server_default=""),
        *_timestamps(),
    )
    op.create_index("ix_education_user_id", "education", ["user_id"])

    op.create_table(
        "certifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("issuer", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("date_obtained", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("expiry_date", sa.String(length=40), nullable=False, server_default=""),
        sa.Column("credential_id", sa.String(length=255), nullable=False, server_default=""),
        *_timestamps(),
    )
    op.create_index("ix_certifications_user_id", "certifications", ["user_id"])

    op.create_table(
        "skills",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("skill_name", sa.String(length=255), nullable=False),
        sa.Column("proficiency_level", sa.String(length=40), nullable=False, server_default="intermediate"),
        *_timestamps(),
    )
    op.create_index("ix_skills_user_id", "skills", ["user_id"])

    op.create_table(
        "additional_info",
        sa.Column("id", sa.Integer(), primary_key=True),
        _owner(),
        sa.Column("category", sa.String(length=120), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_additional_info_user_id", "additional_info", ["user_id"])


def downgrade() -> None:
    for table in ("additional_info", "skills", "certifications", "education", "employment_history"):
        op.drop_index(f"ix_{table}_user_id", table_name=table)
        op.drop_table(table)
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
