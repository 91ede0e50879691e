from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Protocol

from .models.project import ProjectRecord, ProjectStatus


class ProjectStoreError(Exception):
    """Base class for storage failures that map onto client errors."""


class ProjectNotFoundError(ProjectStoreError):
    pass


class ProjectConflictError(ProjectStoreError):
    pass


class ProjectNotEditableError(ProjectStoreError):
    pass


class ProjectStore(Protocol):
    def ensure_user(self, wallet: str) -> None:
        ...

    def create_project(
        self, *, owner_wallet: str, name: str, project_slug: str, plan_id: str
    ) -> ProjectRecord:
        ...

    def get_project(self, project_id: str) -> ProjectRecord | None:
        ...

    def find_by_slug(self, *, owner_wallet: str, project_slug: str) -> ProjectRecord | None:
        ...

    def list_projects(self, *, owner_wallet: str) -> list[ProjectRecord]:
        ...

    def update_draft(
        self, project_id: str, *, owner_wallet: str, name: str, config_json: dict[str, Any]
    ) -> ProjectRecord:
        ...

    def publish(self, project_id: str, *, owner_wallet: str) -> ProjectRecord:
        ...


class InMemoryProjectStore:
    def __init__(self) -> None:
        self._projects: Dict[str, ProjectRecord] = {}
        self._users: set[str] = set()
        self._lock = threading.Lock()

    def ensure_user(self, wallet: str) -> None:
        with self._lock:
            self._users.add(wallet)

    def create_project(
        self, *, owner_wallet: str, name: str, project_slug: str, plan_id: str
    ) -> ProjectRecord:
        with self._lock:
            if self._find(owner_wallet, project_slug) is not None:
                raise ProjectConflictError(f"Slug already in use: {project_slug}")
            project = ProjectRecord(
                id=uuid.uuid4().hex,
                owner_wallet=owner_wallet,
                name=name,
                project_slug=project_slug,
                plan_id=plan_id,
                status=ProjectStatus.draft,
                config_json={},
            )
            self._projects[project.id] = project
            return project.model_copy(deep=True)

    def get_project(self, project_id: str) -> ProjectRecord | None:
        with self._lock:
            project = self._projects.get(project_id)
            return project.model_copy(deep=True) if project else None

    def find_by_slug(self, *, owner_wallet: str, project_slug: str) -> ProjectRecord | None:
        with self._lock:
            project = self._find(owner_wallet, project_slug)
            return project.model_copy(deep=True) if project else None

    def list_projects(self, *, owner_wallet: str) -> list[ProjectRecord]:
        with self._lock:
            owned = [p for p in self._projects.values() if p.owner_wallet == owner_wallet]
            owned.sort(key=lambda p: p.created_at, reverse=True)
            return [p.model_copy(deep=True) for p in owned]

    def update_draft(
        self, project_id: str, *, owner_wallet: str, name: str, config_json: dict[str, Any]
    ) -> ProjectRecord:
        with self._lock:
            project = self._editable(project_id, owner_wallet)
            project.name = name
            project.config_json = dict(config_json)
            project.updated_at = datetime.now(timezone.utc)
            return project.model_copy(deep=True)

    def publish(self, project_id: str, *, owner_wallet: str) -> ProjectRecord:
        with self._lock:
            project = self._editable(project_id, owner_wallet)
            project.status = ProjectStatus.published
            project.updated_at = datetime.now(timezone.utc)
            return project.model_copy(deep=True)

    def _find(self, owner_wallet: str, project_slug: str) -> ProjectRecord | None:
        for project in self._projects.values():
            if project.owner_wallet == owner_wallet and project.project_slug == project_slug:
                return project
        return None

    def _editable(self, project_id: str, owner_wallet: str) -> ProjectRecord:
        project = self._projects.get(project_id)
        if project is None or project.owner_wallet != owner_wallet:
            raise ProjectNotFoundError(f"Project not found: {project_id}")
        if not project.is_draft:
            raise ProjectNotEditableError("Only draft projects can be edited")
        return project


__all__ = [
    "InMemoryProjectStore",
    "ProjectConflictError",
    "ProjectNotEditableError",
    "ProjectNotFoundError",
    "ProjectStore",
    "ProjectStoreError",
]
