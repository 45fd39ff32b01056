"""Repository pattern for database operations."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import CursorResult, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from dochub.db.base import Base
from dochub.db.models import Document, Project, ProjectLock

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository with common CRUD operations."""

    def __init__(self, session: AsyncSession, model: type[T]):
        self.session = session
        self.model = model

    async def create(self, **kwargs: Any) -> T:
        """Create a new entity."""
        entity = self.model(**kwargs)
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def get(self, id: Any) -> T | None:
        """Get entity by primary key."""
        return await self.session.get(self.model, id)

    async def delete(self, id: Any) -> bool:
        """Delete entity by primary key."""
        entity = await self.get(id)
        if entity:
            await self.session.delete(entity)
            await self.session.flush()
            return True
        return False


class ProjectRepository(BaseRepository[Project]):
    """Repository for Project operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Project)

    async def exists(self, project_id: str) -> bool:
        """Check whether a project with the given id exists."""
        result = await self.session.execute(select(Project.id).where(Project.id == project_id))
        return result.scalar_one_or_none() is not None

    async def list_page(self, offset: int, limit: int) -> tuple[list[Project], int]:
        """Get one page of projects, most recently updated first, plus the total count."""
        total = await self.session.scalar(select(func.count()).select_from(Project))
        result = await self.session.execute(
            select(Project).order_by(Project.updated_at.desc()).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total or 0


class DocumentRepository(BaseRepository[Document]):
    """Repository for Document operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Document)

    async def get_by_project(self, project_id: str) -> list[Document]:
        """Get documents of a project ordered by file name."""
        result = await self.session.execute(
            select(Document).where(Document.project_id == project_id).order_by(Document.file_name)
        )
        return list(result.scalars().all())

    async def get_by_file_name(self, project_id: str, file_name: str) -> Document | None:
        """Get a single document by project and file name."""
        result = await self.session.execute(
            select(Document).where(
                Document.project_id == project_id,
                Document.file_name == file_name,
            )
        )
        return result.scalar_one_or_none()

    async def get_hashes(self, project_id: str) -> list[str]:
        """Get the content hashes of all documents of a project."""
        result = await self.session.execute(
            select(Document.hash).where(Document.project_id == project_id)
        )
        return list(result.scalars().all())

    async def delete_by_project(self, project_id: str) -> int:
        """Delete all documents of a project and return count."""
        result: CursorResult[Any] = await self.session.execute(
            delete(Document).where(Document.project_id == project_id)
        )
        return result.rowcount or 0


class ProjectLockRepository(BaseRepository[ProjectLock]):
    """Repository for ProjectLock operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ProjectLock)

    async def get_by_project(self, project_id: str) -> ProjectLock | None:
        """Get lock by project id."""
        result = await self.session.execute(
            select(ProjectLock).where(ProjectLock.project_id == project_id)
        )
        return result.scalar_one_or_none()

    async def update_live(self, project_id: str, now: datetime, **kwargs: Any) -> ProjectLock | None:
        """Update the lock of a project only while it has not expired by ``now``."""
        result = await self.session.execute(
            select(ProjectLock).where(
                ProjectLock.project_id == project_id,
                or_(ProjectLock.expires_at.is_(None), ProjectLock.expires_at >= now),
            )
        )
        lock = result.scalar_one_or_none()
        if lock:
            for key, value in kwargs.items():
                setattr(lock, key, value)
            await self.session.flush()
        return lock

    async def delete_by_project(self, project_id: str) -> bool:
        """Delete the lock of a project; True if a row was removed."""
        result: CursorResult[Any] = await self.session.execute(
            delete(ProjectLock).where(ProjectLock.project_id == project_id)
        )
        return (result.rowcount or 0) > 0

    async def cleanup_expired(self, now: datetime, project_id: str | None = None) -> int:
        """Delete expired locks, optionally of a single project, and return count."""
        stmt = delete(ProjectLock).where(ProjectLock.expires_at < now)
        if project_id is not None:
            stmt = stmt.where(ProjectLock.project_id == project_id)
        result: CursorResult[Any] = await self.session.execute(
            stmt.execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
