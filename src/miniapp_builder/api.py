from __future__ import annotations

import logging
import uuid
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .components import build_config_json, components_from_config, sanitize_with_report
from .identifiers import is_valid_slug, is_valid_wallet, normalize_wallet
from .logging_config import cloud_trace, set_trace_id
from .models.components import RuntimeComponent
from .models.plan import DEFAULT_PLAN, parse_plan_id
from .models.project import ProjectRecord, ProjectStatus
from .project_store import (
    ProjectConflictError,
    ProjectNotEditableError,
    ProjectNotFoundError,
    ProjectStore,
)
from .quick_auth import AuthContext, TokenVerifier, UnauthorizedError, bearer_token
from .renderer import RenderBlock, render_components

logger = logging.getLogger(__name__)


class CreateProjectRequest(BaseModel):
    name: str | None = None
    project_slug: str | None = None
    plan_id: str | None = None


class UpdateProjectRequest(BaseModel):
    name: str | None = None
    config_json: Any = None
    status: str | None = None
    project_slug: str | None = None


class PublicProjectResponse(BaseModel):
    id: str
    owner_wallet: str
    name: str
    project_slug: str
    plan_id: str
    status: ProjectStatus
    config_json: dict[str, Any]
    components: list[RuntimeComponent]
    blocks: list[RenderBlock]

    @staticmethod
    def from_record(record: ProjectRecord) -> "PublicProjectResponse":
        plan = parse_plan_id(record.plan_id)
        if plan is None:
            logger.warning(
                "Project has unknown plan id, using basic entitlements",
                extra={"project_id": record.id, "plan_id": record.plan_id},
            )
            plan = DEFAULT_PLAN
        components = components_from_config(record.config_json, plan)
        return PublicProjectResponse(
            id=record.id,
            owner_wallet=record.owner_wallet,
            name=record.name,
            project_slug=record.project_slug,
            plan_id=record.plan_id,
            status=record.status,
            config_json=build_config_json(components),
            components=components,
            blocks=render_components(components, plan),
        )


def _trace_id_from(request: Request, gcp_project_id: str | None) -> str:
    header = request.headers.get("x-cloud-trace-context")
    trace_id = header.split("/", 1)[0] if header else uuid.uuid4().hex
    return cloud_trace(trace_id, gcp_project_id)


def create_app(*, store: ProjectStore, verifier: TokenVerifier, gcp_project_id: str | None = None) -> FastAPI:
    app = FastAPI(title="Mini-App Builder API", version="0.1.0")

    def current_identity(authorization: Annotated[str | None, Header()] = None) -> AuthContext:
        return verifier.verify(bearer_token(authorization))

    def owned_draft(project_id: str, identity: AuthContext) -> ProjectRecord:
        project = store.get_project(project_id)
        if project is None:
            raise HTTPException(status_code=404, detail="Project not found")
        if project.owner_wallet != identity.wallet:
            raise HTTPException(status_code=401, detail="Forbidden")
        if not project.is_draft:
            raise HTTPException(status_code=400, detail="Only draft projects can be edited")
        return project

    @app.middleware("http")
    async def bind_trace_id(request: Request, call_next):
        set_trace_id(_trace_id_from(request, gcp_project_id))
        try:
            return await call_next(request)
        finally:
            set_trace_id(None)

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(_request: Request, exc: UnauthorizedError) -> JSONResponse:
        return JSONResponse({"detail": exc.message}, status_code=401)

    @app.exception_handler(ProjectNotFoundError)
    async def not_found_handler(_request: Request, exc: ProjectNotFoundError) -> JSONResponse:
        return JSONResponse({"detail": "Project not found"}, status_code=404)

    @app.exception_handler(ProjectNotEditableError)
    async def not_editable_handler(_request: Request, exc: ProjectNotEditableError) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status_code=400)

    @app.exception_handler(ProjectConflictError)
    async def conflict_handler(_request: Request, exc: ProjectConflictError) -> JSONResponse:
        return JSONResponse({"detail": "Slug already in use"}, status_code=409)

    @app.post("/api/projects", response_model=ProjectRecord)
    def create_project(
        body: CreateProjectRequest,
        identity: AuthContext = Depends(current_identity),
    ) -> ProjectRecord:
        name = (body.name or "").strip()
        slug = (body.project_slug or "").strip()
        if not name or not slug or not body.plan_id:
            raise HTTPException(status_code=400, detail="Missing required fields")
        if not is_valid_slug(slug):
            raise HTTPException(status_code=400, detail="Invalid slug")
        plan_id = parse_plan_id(body.plan_id)
        if plan_id is None:
            raise HTTPException(status_code=400, detail="Invalid plan_id")

        store.ensure_user(identity.wallet)
        project = store.create_project(
            owner_wallet=identity.wallet,
            name=name,
            project_slug=slug,
            plan_id=plan_id.value,
        )
        logger.info("Project created", extra={"project_id": project.id, "fid": identity.fid})
        return project

    @app.get("/api/projects", response_model=list[ProjectRecord])
    def list_projects(
        wallet: str = "",
        identity: AuthContext = Depends(current_identity),
    ) -> list[ProjectRecord]:
        wallet = normalize_wallet(wallet)
        if not is_valid_wallet(wallet):
            raise HTTPException(status_code=400, detail="Invalid wallet")
        if wallet != identity.wallet:
            raise HTTPException(status_code=401, detail="Wallet mismatch")
        return store.list_projects(owner_wallet=wallet)

    @app.patch("/api/projects/{project_id}", response_model=ProjectRecord)
    def update_project(
        project_id: str,
        body: UpdateProjectRequest,
        identity: AuthContext = Depends(current_identity),
    ) -> ProjectRecord:
        project = owned_draft(project_id, identity)

        if body.status and body.status != ProjectStatus.draft.value:
            raise HTTPException(status_code=400, detail="Status must remain draft")
        if body.project_slug and body.project_slug != project.project_slug:
            raise HTTPException(status_code=400, detail="Slug is immutable")

        name = (body.name or "").strip()
        if not name:
            raise HTTPException(status_code=400, detail="Name is required")
        if not isinstance(body.config_json, dict):
            raise HTTPException(status_code=400, detail="config_json must be an object")

        report = sanitize_with_report(body.config_json.get("components"), project.plan_id)
        if report.discarded or report.truncated:
            logger.info(
                "Sanitized submitted configuration",
                extra={
                    "project_id": project_id,
                    "discarded": report.discarded,
                    "truncated": report.truncated,
                },
            )

        return store.update_draft(
            project_id,
            owner_wallet=identity.wallet,
            name=name,
            config_json=build_config_json(report.components),
        )

    @app.post("/api/projects/{project_id}/publish", response_model=ProjectRecord)
    def publish_project(
        project_id: str,
        identity: AuthContext = Depends(current_identity),
    ) -> ProjectRecord:
        owned_draft(project_id, identity)
        project = store.publish(project_id, owner_wallet=identity.wallet)
        logger.info("Project published", extra={"project_id": project_id})
        return project

    @app.get("/api/public/projects/{wallet}/{project_slug}", response_model=PublicProjectResponse)
    def get_public_project(wallet: str, project_slug: str) -> PublicProjectResponse:
        wallet = normalize_wallet(wallet)
        project_slug = project_slug.lower()
        if not is_valid_wallet(wallet) or not is_valid_slug(project_slug):
            raise HTTPException(status_code=404, detail="Project not found")

        project = store.find_by_slug(owner_wallet=wallet, project_slug=project_slug)
        if project is None:
            raise HTTPException(status_code=404, detail="Project not found")
        if project.status is not ProjectStatus.published:
            raise HTTPException(status_code=403, detail="Not published yet")
        return PublicProjectResponse.from_record(project)

    @app.get("/health")
    async def healthcheck() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return app


__all__ = ["CreateProjectRequest", "PublicProjectResponse", "UpdateProjectRequest", "create_app"]
