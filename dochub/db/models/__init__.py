"""Database models package."""

from dochub.db.models.document import Document
from dochub.db.models.project import Project, generate_project_id
from dochub.db.models.project_lock import ProjectLock

__all__ = [
    "Project",
    "Document",
    "ProjectLock",
    "generate_project_id",
]
