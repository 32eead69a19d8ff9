"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in skillhub/models/.
Repos convert between SQLAlchemy rows and domain dataclasses.

Column names follow the persisted layout the web client already reads
(users, courses, projects, user_reviews).  Every mutable record carries a
`version` column used for compare-and-swap updates.
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from skillhub.db.engine import Base


class AccountRow(Base):
    __tablename__ = "users"

    # Identity-provider subject, not generated here.
    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(320), nullable=False, default="")
    avatar_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    skills: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=[])
    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    skill_coins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ongoing_courses: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    completed_courses: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    collaborations: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    linkedin_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    github_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    portfolio_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    other_links: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    skills_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verification_status: Mapped[str | None] = mapped_column(
        String(32), nullable=True
    )  # verified|unverified
    onboarding_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (CheckConstraint("skill_coins >= 0", name="users_balance_nonneg"),)


class CourseRow(Base):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    teacher_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.id"), nullable=False, index=True
    )
    skill_category: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    svc_value: Mapped[int] = mapped_column(Integer, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    availability: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    learners: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=[])
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_urls: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    document_urls: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    media_files: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (CheckConstraint("svc_value >= 0", name="courses_price_nonneg"),)


class ProjectRow(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    creator_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.id"), nullable=False
    )
    required_skills: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    max_members: Mapped[int] = mapped_column(Integer, nullable=False)
    current_members: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="open"
    )  # open|in-progress|completed|paused
    category: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    tags: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=[])
    difficulty_level: Mapped[str] = mapped_column(
        String(32), nullable=False, default="beginner"
    )  # beginner|intermediate|advanced
    estimated_duration: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    contact_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    project_links: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    gallery_images: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    media_files: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    deadline: Mapped[str | None] = mapped_column(String(64), nullable=True)
    requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    project_goals: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("max_members >= 2", name="projects_capacity_min"),
        CheckConstraint(
            "cardinality(current_members) <= max_members",
            name="projects_capacity_max",
        ),
        Index(
            "ix_projects_current_members",
            "current_members",
            postgresql_using="gin",
        ),
    )


class ReviewRow(Base):
    __tablename__ = "user_reviews"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.id"), nullable=False, index=True
    )
    reviewer_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.id"), nullable=False
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="user_reviews_rating_range"),
    )
