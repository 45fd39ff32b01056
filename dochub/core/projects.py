"""Project service: the minimal project registry locks and documents hang off."""

from sqlalchemy.ext.asyncio import AsyncSession

from dochub.api.middleware.error import NotFoundError
from dochub.db.models import Project
from dochub.db.repository import DocumentRepository, ProjectLockRepository, ProjectRepository
from dochub.lib.logging import get_logger

logger = get_logger(__name__)


class ProjectService:
    """Service for managing projects."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repository = ProjectRepository(session)

    async def create_project(
        self,
        name: str,
        repo_url: str | None = None,
        branch: str = "main",
        docs_path: str = "docs",
        project_id: str | None = None,
    ) -> Project:
        """Register a new project."""
        fields = {"name": name, "repo_url": repo_url, "branch": branch, "docs_path": docs_path}
        if project_id:
            fields["id"] = project_id
        project = await self.repository.create(**fields)

        logger.info("project_created", project_id=project.id, name=name)
        return project

    async def get_project(self, project_id: str) -> Project:
        """Get a project or raise NotFoundError."""
        project = await self.repository.get(project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def project_exists(self, project_id: str) -> bool:
        return await self.repository.exists(project_id)

    async def list_projects(self, page: int = 1, per_page: int = 20) -> tuple[list[Project], int]:
        """List projects, most recently updated first."""
        return await self.repository.list_page((page - 1) * per_page, per_page)

    async def delete_project(self, project_id: str) -> None:
        """Delete a project together with its documents and lock."""
        project = await self.get_project(project_id)

        documents = await DocumentRepository(self.session).delete_by_project(project_id)
        await ProjectLockRepository(self.session).delete_by_project(project_id)
        await self.session.delete(project)
        await self.session.flush()

        logger.info("project_deleted", project_id=project_id, documents_deleted=documents)


__all__ = ["ProjectService"]
