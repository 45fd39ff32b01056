"""Endpoints polled by session-start checks of local clients.

``status`` says whether content may change soon (someone holds the lock),
``docs`` says whether it has changed (fingerprint), ``sync`` pulls it.
"""

from fastapi import APIRouter, Depends

from dochub.api.dependencies import get_document_service, get_lock_manager, get_project_service
from dochub.api.models import FingerprintResponse, LockStatusResponse, SyncedDocument, SyncResponse
from dochub.core.documents import DocumentService
from dochub.core.locking import LockManager
from dochub.core.projects import ProjectService
from dochub.lib.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/hook", tags=["hook"])


@router.get("/status/{project_id}", response_model=LockStatusResponse, response_model_exclude_none=True)
async def get_status(
    project_id: str,
    projects: ProjectService = Depends(get_project_service),
    locks: LockManager = Depends(get_lock_manager),
) -> LockStatusResponse:
    """Lock status of a project."""
    await projects.get_project(project_id)

    lock = await locks.query(project_id)
    if lock is None:
        return LockStatusResponse(locked=False)

    return LockStatusResponse(
        locked=True,
        locked_by=lock.locked_by,
        locked_at=lock.locked_at,
        expires_at=lock.expires_at,
    )


@router.get("/docs/{project_id}", response_model=FingerprintResponse)
async def get_fingerprint(
    project_id: str,
    documents: DocumentService = Depends(get_document_service),
) -> FingerprintResponse:
    """Fingerprint of the project's documents for cheap staleness checks."""
    fingerprint = await documents.get_fingerprint(project_id)
    return FingerprintResponse(
        fingerprint=fingerprint.fingerprint,
        document_count=fingerprint.document_count,
    )


@router.post("/sync/{project_id}", response_model=SyncResponse)
async def sync_docs(
    project_id: str,
    documents: DocumentService = Depends(get_document_service),
) -> SyncResponse:
    """Refresh from the content source and return every document with the fingerprint."""
    docs, fingerprint = await documents.full_sync(project_id)

    logger.info("full_sync_served", project_id=project_id, documents=len(docs))

    return SyncResponse(
        documents=[SyncedDocument.model_validate(doc) for doc in docs],
        fingerprint=fingerprint.fingerprint,
    )
