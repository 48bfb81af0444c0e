"""create skills, projects, certifications and education

Revision ID: 001_skill_graph
Revises:
Create Date: 2026-10-18

Creates the four tables of the skill graph:
  • skills: name_key (cleaned, lower-cased name) carries the unique
    constraint that stops case/punctuation duplicates; sources is a JSONB
    list of {"type", "reference_id"}
  • projects: technologies (names) plus the resolved skill-id mirror
  • certifications / education: embedded skill lists (JSONB)
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID


# revision identifiers
revision = "001_skill_graph"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # ── skills ────────────────────────────────────────────────────────────
    op.create_table(
        "skills",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("name_key", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False, server_default="Other"),
        sa.Column("proficiency", sa.String(length=20), nullable=False, server_default="Beginner"),
        sa.Column("level", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sources", JSONB(), nullable=False, server_default="[]"),
        *_timestamps(),
    )
    op.create_index("ix_skills_name_key", "skills", ["name_key"], unique=True)
    op.create_index("ix_skills_is_active", "skills", ["is_active"])

    # ── projects ──────────────────────────────────────────────────────────
    op.create_table(
        "projects",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=50), nullable=False, server_default="personal"),
        sa.Column("technologies", JSONB(), nullable=False, server_default="[]"),
        sa.Column("skills", JSONB(), nullable=False, server_default="[]"),
        sa.Column("github_url", sa.String(length=512), nullable=True),
        sa.Column("live_url", sa.String(length=512), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_projects_is_active", "projects", ["is_active"])

    # ── certifications ────────────────────────────────────────────────────
    op.create_table(
        "certifications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("issuer", sa.String(length=255), nullable=True),
        sa.Column("credential_id", sa.String(length=255), nullable=True),
        sa.Column("credential_url", sa.String(length=512), nullable=True),
        sa.Column("issue_date", sa.Date(), nullable=True),
        sa.Column("skills", JSONB(), nullable=False, server_default="[]"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_certifications_is_active", "certifications", ["is_active"])

    # ── education ─────────────────────────────────────────────────────────
    op.create_table(
        "education",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("degree", sa.String(length=255), nullable=False),
        sa.Column("field", sa.String(length=255), nullable=True),
        sa.Column("institution", sa.String(length=255), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("gpa", sa.Float(), nullable=True),
        sa.Column("skills", JSONB(), nullable=False, server_default="[]"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_education_is_active", "education", ["is_active"])


def downgrade() -> None:
    op.drop_table("education")
    op.drop_table("certifications")
    op.drop_table("projects")
    op.drop_index("ix_skills_is_active", table_name="skills")
    op.drop_index("ix_skills_name_key", table_name="skills")
    op.drop_table("skills")
