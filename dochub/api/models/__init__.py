"""Pydantic schemas for API request/response models.

JSON payloads use camelCase keys (``lockedBy``, ``expiresAt``, ...).
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from dochub.lib.clock import as_utc


class CamelModel(BaseModel):
    """Base schema with camelCase aliases and UTC-normalized datetimes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    @field_validator("*", mode="after")
    @classmethod
    def _utc_datetimes(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return as_utc(value)
        return value


class LockResponse(CamelModel):
    """Schema for an active project lock."""

    id: uuid.UUID
    project_id: str
    locked_by: str
    reason: str | None = None
    locked_at: datetime
    expires_at: datetime | None = None


class ReleaseResponse(CamelModel):
    """Schema for a lock release; releasing an unlocked project is not an error."""

    released: bool
    message: str | None = None


class LockStatusResponse(CamelModel):
    """Schema for the lock status polled by session-start checks."""

    locked: bool
    locked_by: str | None = None
    locked_at: datetime | None = None
    expires_at: datetime | None = None


class FingerprintResponse(CamelModel):
    """Schema for the combined fingerprint of a project's documents."""

    fingerprint: str = Field(..., description="SHA-256 hex of the sorted, concatenated document hashes")
    document_count: int


class DocumentSummary(CamelModel):
    """Schema for a document without its content."""

    id: uuid.UUID
    project_id: str
    file_name: str
    hash: str
    version: int
    updated_at: datetime


class DocumentResponse(DocumentSummary):
    """Schema for a document including content."""

    content: str


class SyncedDocument(CamelModel):
    file_name: str
    content: str
    hash: str


class SyncResponse(CamelModel):
    """Schema for a full content pull."""

    documents: list[SyncedDocument]
    fingerprint: str


class ProjectResponse(CamelModel):
    """Schema for a project."""

    id: str
    name: str
    repo_url: str | None = None
    branch: str
    docs_path: str
    created_at: datetime
    updated_at: datetime


__all__ = [
    "CamelModel",
    "LockResponse",
    "ReleaseResponse",
    "LockStatusResponse",
    "FingerprintResponse",
    "DocumentSummary",
    "DocumentResponse",
    "SyncedDocument",
    "SyncResponse",
    "ProjectResponse",
]
