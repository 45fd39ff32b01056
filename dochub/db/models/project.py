"""
Project model for documentation projects synced from Git repositories.

A project owns its documents and, at most, one editing lock.
"""

import secrets
import string
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dochub.db.base import Base
from dochub.lib.clock import utcnow

if TYPE_CHECKING:
    from dochub.db.models.document import Document
    from dochub.db.models.project_lock import ProjectLock

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_project_id() -> str:
    """Generate a collision-resistant id of the form ``c`` + 24 lowercase alphanumerics."""
    return "c" + "".join(secrets.choice(_ID_ALPHABET) for _ in range(24))


class Project(Base):
    """
    Represents a documentation project.

    Attributes:
        id: Project identifier (cuid-like unless supplied)
        name: Human-readable project name
        repo_url: URL of the source repository
        branch: Branch documentation is synced from
        docs_path: Directory of the documentation inside the repository
        created_at: Timestamp when the project was added
        updated_at: Timestamp of last update
    """

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_project_id)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    repo_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    branch: Mapped[str] = mapped_column(String(255), nullable=False, default="main")

    docs_path: Mapped[str] = mapped_column(String(512), nullable=False, default="docs")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # Relationships
    documents: Mapped[list["Document"]] = relationship(
        "Document", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )

    lock: Mapped["ProjectLock | None"] = relationship(
        "ProjectLock", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}')>"

    def to_dict(self) -> dict[str, Any]:
        """Convert project to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "repo_url": self.repo_url,
            "branch": self.branch,
            "docs_path": self.docs_path,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
