"""ProjectLock model for exclusive project editing."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dochub.db.base import Base
from dochub.lib.clock import as_utc, utcnow

if TYPE_CHECKING:
    from dochub.db.models.project import Project


class ProjectLock(Base):
    """ProjectLock model granting one identity editing rights over a project."""

    __tablename__ = "project_locks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Unique: the store never holds two rows for one project
    project_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    locked_by: Mapped[str] = mapped_column(String(100), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    locked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="lock")

    __table_args__ = (Index("ix_project_locks_expires_at", "expires_at"),)

    def is_expired(self, now: datetime) -> bool:
        """True once ``expires_at`` has passed; a lock without expiry never expires."""
        return self.expires_at is not None and as_utc(self.expires_at) < now

    def __repr__(self) -> str:
        return f"<ProjectLock(project_id={self.project_id}, locked_by='{self.locked_by}')>"
