from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

from skillhub.models.account import now_ts


@dataclass(frozen=True, slots=True)
class Course:
    id: str
    title: str
    teacher_id: str
    svc_value: int  # price in SVC, paid by the learner at enrollment
    description: str = ""
    skill_category: str = ""
    duration: int = 0  # hours
    availability: tuple[str, ...] = ()
    learners: tuple[str, ...] = ()  # informational; balances live on Account
    image_url: str | None = None
    video_urls: tuple[str, ...] = ()
    document_urls: tuple[str, ...] = ()
    media_files: tuple[str, ...] = ()
    created_at: int = 0
    updated_at: int = 0
    version: int = 1

    @staticmethod
    def new(
        *,
        title: str,
        teacher_id: str,
        svc_value: int,
        description: str = "",
        skill_category: str = "",
        duration: int = 0,
        availability: tuple[str, ...] = (),
        image_url: str | None = None,
    ) -> Course:
        ts = now_ts()
        return Course(
            id=str(uuid4()),
            title=title,
            teacher_id=teacher_id,
            svc_value=svc_value,
            description=description,
            skill_category=skill_category,
            duration=duration,
            availability=availability,
            image_url=image_url,
            created_at=ts,
            updated_at=ts,
        )
