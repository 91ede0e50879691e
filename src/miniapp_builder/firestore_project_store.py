from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from google.api_core.exceptions import AlreadyExists
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .models.project import ProjectRecord, ProjectStatus
from .project_store import ProjectConflictError, ProjectNotEditableError, ProjectNotFoundError

logger = logging.getLogger(__name__)


class FirestoreProjectStore:
    """Firestore-backed project store for production use."""

    PROJECTS_COLLECTION = "projects"
    SLUGS_COLLECTION = "project_slugs"
    USERS_COLLECTION = "users"

    def __init__(self, project_id: str | None = None) -> None:
        self._db = firestore.Client(project=project_id)
        self._projects = self._db.collection(self.PROJECTS_COLLECTION)
        self._slugs = self._db.collection(self.SLUGS_COLLECTION)
        self._users = self._db.collection(self.USERS_COLLECTION)

    def ensure_user(self, wallet: str) -> None:
        """Upsert the owner document keyed by wallet address."""
        self._users.document(wallet).set(
            {"wallet_address": wallet, "updated_at": datetime.now(timezone.utc)},
            merge=True,
        )

    def create_project(
        self, *, owner_wallet: str, name: str, project_slug: str, plan_id: str
    ) -> ProjectRecord:
        """Create a draft project, claiming its slug for the owner first."""
        project = ProjectRecord(
            id=uuid.uuid4().hex,
            owner_wallet=owner_wallet,
            name=name,
            project_slug=project_slug,
            plan_id=plan_id,
            status=ProjectStatus.draft,
            config_json={},
        )

        # Slug claim and project land in one commit; create() fails the whole
        # batch when the slug document already exists.
        batch = self._db.batch()
        batch.create(self._slugs.document(self._slug_key(owner_wallet, project_slug)), {"project_id": project.id})
        batch.set(self._projects.document(project.id), self._to_firestore_dict(project))
        try:
            batch.commit()
        except AlreadyExists as exc:
            raise ProjectConflictError(f"Slug already in use: {project_slug}") from exc

        logger.info(
            "Created project",
            extra={
                "project_id": project.id,
                "owner_wallet": owner_wallet,
                "project_slug": project_slug,
                "plan_id": plan_id,
            },
        )
        return project

    def get_project(self, project_id: str) -> ProjectRecord | None:
        doc = self._projects.document(project_id).get()
        if not doc.exists:
            return None
        return self._from_firestore_dict(doc.id, doc.to_dict())

    def find_by_slug(self, *, owner_wallet: str, project_slug: str) -> ProjectRecord | None:
        query = (
            self._projects.where(filter=FieldFilter("owner_wallet", "==", owner_wallet))
            .where(filter=FieldFilter("project_slug", "==", project_slug))
            .limit(1)
        )
        for doc in query.stream():
            return self._from_firestore_dict(doc.id, doc.to_dict())
        return None

    def list_projects(self, *, owner_wallet: str, limit: int = 100) -> list[ProjectRecord]:
        """List an owner's projects, newest first."""
        query = (
            self._projects.where(filter=FieldFilter("owner_wallet", "==", owner_wallet))
            .order_by("created_at", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        return [self._from_firestore_dict(doc.id, doc.to_dict()) for doc in query.stream()]

    def update_draft(
        self, project_id: str, *, owner_wallet: str, name: str, config_json: dict[str, Any]
    ) -> ProjectRecord:
        """Update name and configuration, only while the project is a draft."""
        record = self._update_if_draft(
            project_id,
            owner_wallet,
            {"name": name, "config_json": config_json},
        )
        logger.info("Updated draft project", extra={"project_id": project_id, "owner_wallet": owner_wallet})
        return record

    def publish(self, project_id: str, *, owner_wallet: str) -> ProjectRecord:
        record = self._update_if_draft(
            project_id,
            owner_wallet,
            {"status": ProjectStatus.published.value},
        )
        logger.info("Published project", extra={"project_id": project_id, "owner_wallet": owner_wallet})
        return record

    def _update_if_draft(self, project_id: str, owner_wallet: str, changes: dict[str, Any]) -> ProjectRecord:
        doc_ref = self._projects.document(project_id)
        transaction = self._db.transaction()

        @firestore.transactional
        def apply(txn: firestore.Transaction) -> ProjectRecord:
            snapshot = doc_ref.get(transaction=txn)
            if not snapshot.exists:
                raise ProjectNotFoundError(f"Project not found: {project_id}")
            current = self._from_firestore_dict(snapshot.id, snapshot.to_dict())
            if current.owner_wallet != owner_wallet:
                raise ProjectNotFoundError(f"Project not found: {project_id}")
            if not current.is_draft:
                raise ProjectNotEditableError("Only draft projects can be edited")

            update_data = {**changes, "updated_at": datetime.now(timezone.utc)}
            txn.update(doc_ref, update_data)
            return self._from_firestore_dict(snapshot.id, {**snapshot.to_dict(), **update_data})

        return apply(transaction)

    @staticmethod
    def _slug_key(owner_wallet: str, project_slug: str) -> str:
        return f"{owner_wallet}:{project_slug}"

    def _to_firestore_dict(self, project: ProjectRecord) -> dict:
        """Convert ProjectRecord to Firestore document dict."""
        return {
            "owner_wallet": project.owner_wallet,
            "name": project.name,
            "project_slug": project.project_slug,
            "plan_id": project.plan_id,
            "status": project.status.value,
            "config_json": project.config_json,
            "created_at": project.created_at,
            "updated_at": project.updated_at,
        }

    def _from_firestore_dict(self, project_id: str, data: dict) -> ProjectRecord:
        """Convert Firestore document dict to ProjectRecord."""
        config_json = data.get("config_json")
        return ProjectRecord(
            id=project_id,
            owner_wallet=data["owner_wallet"],
            name=data.get("name", ""),
            project_slug=data["project_slug"],
            plan_id=str(data.get("plan_id", "")),
            status=ProjectStatus(data.get("status", ProjectStatus.draft.value)),
            config_json=config_json if isinstance(config_json, dict) else {},
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )


__all__ = ["FirestoreProjectStore"]
