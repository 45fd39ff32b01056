"""Document service: storage, content hashing and full sync.

Remote repository access is a collaborator behind ``ContentSource``; this
service only persists what the source returns and derives the fingerprint.
"""

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from dochub.api.middleware.error import NotFoundError
from dochub.core.fingerprint import Fingerprint, compute_hash, fingerprint_documents
from dochub.core.notifications import NotificationSink
from dochub.db.models import Document, Project
from dochub.db.repository import DocumentRepository, ProjectRepository
from dochub.lib.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RemoteDocument:
    """A documentation file as returned by a content source."""

    file_name: str
    content: str


class ContentSource(Protocol):
    """Provider of a project's current documentation files."""

    async def fetch_documents(self, project: Project) -> list[RemoteDocument]: ...


class NullContentSource:
    """Content source for deployments without a remote; sync keeps stored documents."""

    async def fetch_documents(self, project: Project) -> list[RemoteDocument]:
        return []


class DocumentService:
    """Service for managing project documents."""

    def __init__(
        self,
        session: AsyncSession,
        content_source: ContentSource | None = None,
        notifier: NotificationSink | None = None,
    ):
        self.session = session
        self.repository = DocumentRepository(session)
        self.projects = ProjectRepository(session)
        self.content_source = content_source or NullContentSource()
        self.notifier = notifier

    async def _require_project(self, project_id: str) -> Project:
        project = await self.projects.get(project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def list_documents(self, project_id: str) -> list[Document]:
        """Get all documents of a project ordered by file name."""
        await self._require_project(project_id)
        return await self.repository.get_by_project(project_id)

    async def get_document(self, project_id: str, file_name: str) -> Document:
        """Get a single document or raise NotFoundError."""
        doc = await self.repository.get_by_file_name(project_id, file_name)
        if doc is None:
            raise NotFoundError("Document", file_name, context={"projectId": project_id})
        return doc

    async def update_document(self, project_id: str, file_name: str, content: str) -> Document:
        """Create or replace a document; replacing bumps its version."""
        await self._require_project(project_id)
        hash = compute_hash(content)

        doc = await self.repository.get_by_file_name(project_id, file_name)
        if doc is None:
            doc = await self.repository.create(
                project_id=project_id,
                file_name=file_name,
                content=content,
                hash=hash,
                version=1,
            )
        else:
            doc.content = content
            doc.hash = hash
            doc.version += 1
            await self.session.flush()

        # Subscribers refetch on doc:updated, so the row must be visible first
        await self.session.commit()

        logger.info(
            "document_updated",
            project_id=project_id,
            file_name=file_name,
            version=doc.version,
            hash=hash,
        )
        self._notify_updated(project_id, file_name, hash)
        return doc

    def _notify_updated(self, project_id: str, file_name: str, hash: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.on_document_updated(project_id, file_name, hash)
        except Exception as e:
            logger.warning("document_notification_failed", project_id=project_id, error=str(e))

    async def sync_from_source(self, project_id: str) -> list[Document]:
        """Upsert every document the content source returns for the project."""
        project = await self._require_project(project_id)
        remote_docs = await self.content_source.fetch_documents(project)

        results = []
        for remote in remote_docs:
            hash = compute_hash(remote.content)
            doc = await self.repository.get_by_file_name(project_id, remote.file_name)
            if doc is None:
                doc = await self.repository.create(
                    project_id=project_id,
                    file_name=remote.file_name,
                    content=remote.content,
                    hash=hash,
                )
            elif doc.hash != hash:
                doc.content = remote.content
                doc.hash = hash
            results.append(doc)
        await self.session.flush()

        logger.info("documents_synced", project_id=project_id, count=len(results))
        return results

    async def get_fingerprint(self, project_id: str) -> Fingerprint:
        """Fingerprint of the project's current document set."""
        await self._require_project(project_id)
        fingerprint = fingerprint_documents(await self.repository.get_hashes(project_id))

        logger.debug(
            "fingerprint_computed",
            project_id=project_id,
            fingerprint=fingerprint.fingerprint,
            document_count=fingerprint.document_count,
        )
        return fingerprint

    async def full_sync(self, project_id: str) -> tuple[list[Document], Fingerprint]:
        """Refresh from the content source, then return all documents and their fingerprint."""
        await self.sync_from_source(project_id)
        docs = await self.repository.get_by_project(project_id)
        return docs, fingerprint_documents(docs)


__all__ = [
    "RemoteDocument",
    "ContentSource",
    "NullContentSource",
    "DocumentService",
]
