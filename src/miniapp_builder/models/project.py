from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProjectStatus(str, Enum):
    draft = "draft"
    published = "published"


class ProjectRecord(BaseModel):
    id: str
    owner_wallet: str
    name: str
    project_slug: str
    # Kept as a plain string: rows may carry a plan id this build does not know.
    plan_id: str
    status: ProjectStatus = ProjectStatus.draft
    config_json: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_draft(self) -> bool:
        return self.status is ProjectStatus.draft


__all__ = ["ProjectRecord", "ProjectStatus"]
