"""create users, courses, projects and user_reviews

Revision ID: 3b1f9c2d7e40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b1f9c2d7e40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _text_array(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.ARRAY(sa.String()),
        nullable=False,
        server_default="{}",
    )


def _timestamps_and_version() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.Integer(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=128), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=320), nullable=False, server_default=""),
        sa.Column("avatar_url", sa.Text(), nullable=False, server_default=""),
        _text_array("skills"),
        sa.Column("bio", sa.Text(), nullable=False, server_default=""),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("skill_coins", sa.Integer(), nullable=False, server_default="0"),
        _text_array("ongoing_courses"),
        _text_array("completed_courses"),
        _text_array("collaborations"),
        sa.Column("linkedin_url", sa.Text(), nullable=True),
        sa.Column("github_url", sa.Text(), nullable=True),
        sa.Column("portfolio_url", sa.Text(), nullable=True),
        _text_array("other_links"),
        sa.Column(
            "skills_verified", sa.Boolean(), nullable=False, server_default="false"
        ),
        sa.Column("verification_status", sa.String(length=32), nullable=True),
        sa.Column(
            "onboarding_completed",
            sa.Boolean(),
            nullable=False,
            server_default="false",
        ),
        *_timestamps_and_version(),
        sa.CheckConstraint("skill_coins >= 0", name="users_balance_nonneg"),
    )

    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column(
            "teacher_id",
            sa.String(length=128),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column(
            "skill_category", sa.String(length=255), nullable=False, server_default=""
        ),
        sa.Column("svc_value", sa.Integer(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="0"),
        _text_array("availability"),
        _text_array("learners"),
        sa.Column("image_url", sa.Text(), nullable=True),
        _text_array("video_urls"),
        _text_array("document_urls"),
        _text_array("media_files"),
        *_timestamps_and_version(),
        sa.CheckConstraint("svc_value >= 0", name="courses_price_nonneg"),
    )
    op.create_index("ix_courses_teacher_id", "courses", ["teacher_id"])

    op.create_table(
        "projects",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "creator_id",
            sa.String(length=128),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        _text_array("required_skills"),
        sa.Column("max_members", sa.Integer(), nullable=False),
        _text_array("current_members"),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="open"),
        sa.Column("category", sa.String(length=255), nullable=False, server_default=""),
        _text_array("tags"),
        sa.Column(
            "difficulty_level",
            sa.String(length=32),
            nullable=False,
            server_default="beginner",
        ),
        sa.Column(
            "estimated_duration",
            sa.String(length=255),
            nullable=False,
            server_default="",
        ),
        sa.Column("contact_info", sa.Text(), nullable=True),
        _text_array("project_links"),
        _text_array("gallery_images"),
        _text_array("media_files"),
        sa.Column("deadline", sa.String(length=64), nullable=True),
        sa.Column("requirements", sa.Text(), nullable=True),
        _text_array("project_goals"),
        *_timestamps_and_version(),
        sa.CheckConstraint("max_members >= 2", name="projects_capacity_min"),
        sa.CheckConstraint(
            "cardinality(current_members) <= max_members",
            name="projects_capacity_max",
        ),
    )
    op.create_index(
        "ix_projects_current_members",
        "projects",
        ["current_members"],
        postgresql_using="gin",
    )

    op.create_table(
        "user_reviews",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(length=128),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column(
            "reviewer_id",
            sa.String(length=128),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="user_reviews_rating_range"),
    )
    op.create_index("ix_user_reviews_user_id", "user_reviews", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_user_reviews_user_id", table_name="user_reviews")
    op.drop_table("user_reviews")
    op.drop_index("ix_projects_current_members", table_name="projects")
    op.drop_table("projects")
    op.drop_index("ix_courses_teacher_id", table_name="courses")
    op.drop_table("courses")
    op.drop_table("users")
