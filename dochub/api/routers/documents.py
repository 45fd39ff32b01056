"""Documents API router."""

from fastapi import APIRouter, Depends
from pydantic import Field

from dochub.api.dependencies import get_document_service
from dochub.api.models import CamelModel, DocumentResponse, DocumentSummary
from dochub.core.documents import DocumentService

router = APIRouter(prefix="/api/projects/{project_id}/docs", tags=["documents"])


class UpdateDocumentRequest(CamelModel):
    """Request model for replacing a document's content."""

    content: str = Field(..., min_length=1, description="New document content")


@router.get("", response_model=list[DocumentSummary])
async def list_documents(
    project_id: str,
    documents: DocumentService = Depends(get_document_service),
) -> list[DocumentSummary]:
    """List the documents of a project ordered by file name."""
    docs = await documents.list_documents(project_id)
    return [DocumentSummary.model_validate(doc) for doc in docs]


@router.get("/{file_name:path}", response_model=DocumentResponse)
async def get_document(
    project_id: str,
    file_name: str,
    documents: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """Get a single document including its content."""
    doc = await documents.get_document(project_id, file_name)
    return DocumentResponse.model_validate(doc)


@router.put("/{file_name:path}", response_model=DocumentResponse)
async def update_document(
    project_id: str,
    file_name: str,
    request: UpdateDocumentRequest,
    documents: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """Create or replace a document; replacing increments its version."""
    doc = await documents.update_document(project_id, file_name, request.content)
    return DocumentResponse.model_validate(doc)
