"""Projects API router."""

from fastapi import APIRouter, Depends, Query, Response
from pydantic import Field

from dochub.api.dependencies import get_project_service
from dochub.api.models import CamelModel, ProjectResponse
from dochub.api.models.pagination import MAX_PER_PAGE, PaginationMeta, create_pagination_meta
from dochub.core.projects import ProjectService
from dochub.lib.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/projects", tags=["projects"])


class ProjectCreateRequest(CamelModel):
    """Request model for registering a project."""

    name: str = Field(..., min_length=1, max_length=255)
    repo_url: str | None = Field(None, max_length=1024)
    branch: str = Field(default="main", min_length=1, max_length=255)
    docs_path: str = Field(default="docs", min_length=1, max_length=512)
    id: str | None = Field(None, min_length=1, max_length=64, description="Explicit project id")


class ProjectListResponse(CamelModel):
    """Response model for project list."""

    items: list[ProjectResponse]
    pagination: PaginationMeta


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    request: ProjectCreateRequest,
    projects: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Register a documentation project."""
    project = await projects.create_project(
        name=request.name,
        repo_url=request.repo_url,
        branch=request.branch,
        docs_path=request.docs_path,
        project_id=request.id,
    )
    return ProjectResponse.model_validate(project)


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(20, ge=1, le=MAX_PER_PAGE, alias="perPage", description="Items per page"),
    projects: ProjectService = Depends(get_project_service),
) -> ProjectListResponse:
    """List projects, most recently updated first."""
    items, total = await projects.list_projects(page, per_page)
    return ProjectListResponse(
        items=[ProjectResponse.model_validate(p) for p in items],
        pagination=create_pagination_meta(page, per_page, total),
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    projects: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    """Get a single project."""
    return ProjectResponse.model_validate(await projects.get_project(project_id))


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: str,
    projects: ProjectService = Depends(get_project_service),
) -> Response:
    """Delete a project with its documents and lock."""
    await projects.delete_project(project_id)
    return Response(status_code=204)
