"""Document model for synced documentation files."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dochub.db.base import Base
from dochub.lib.clock import utcnow

if TYPE_CHECKING:
    from dochub.db.models.project import Project


class Document(Base):
    """A documentation file of a project, content-addressed by ``hash``."""

    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file_name: Mapped[str] = mapped_column(String(512), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # SHA-256 hex digest of the UTF-8 content
    hash: Mapped[str] = mapped_column(String(64), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="documents")

    __table_args__ = (
        UniqueConstraint("project_id", "file_name", name="uq_documents_project_file"),
    )

    def __repr__(self) -> str:
        return f"<Document(project_id={self.project_id}, file_name='{self.file_name}', version={self.version})>"
