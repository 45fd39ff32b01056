"""Project lock API router."""

from fastapi import APIRouter, Depends
from pydantic import Field

from dochub.api.dependencies import get_lock_manager
from dochub.api.models import CamelModel, LockResponse, ReleaseResponse
from dochub.core.locking import LockManager
from dochub.lib.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/projects/{project_id}/lock", tags=["locks"])


# Request Models


class AcquireLockRequest(CamelModel):
    """Request model for acquiring a lock. Length bounds are checked after trimming."""

    locked_by: str = Field(..., description="Identity of the editor taking the lock")
    reason: str | None = Field(None, description="Why the project is being checked out")


class ExtendLockRequest(CamelModel):
    """Request model for extending a lock."""

    minutes: int | None = Field(None, description="Extension in minutes (1-120, default 30)")


# Endpoints


@router.get("", response_model=LockResponse | None)
async def get_lock(
    project_id: str,
    locks: LockManager = Depends(get_lock_manager),
) -> LockResponse | None:
    """Get the active lock of a project, or null when unlocked."""
    lock = await locks.query(project_id)
    return LockResponse.model_validate(lock) if lock else None


@router.post("", response_model=LockResponse, status_code=201)
async def acquire_lock(
    project_id: str,
    request: AcquireLockRequest,
    locks: LockManager = Depends(get_lock_manager),
) -> LockResponse:
    """
    Acquire the lock of a project.

    Returns 409 with the current holder (``lockedBy``, ``lockedAt``) when the
    project is already locked, 404 when the project does not exist.
    """
    lock = await locks.acquire(project_id, request.locked_by, request.reason)
    return LockResponse.model_validate(lock)


@router.delete("", response_model=ReleaseResponse, response_model_exclude_none=True)
async def release_lock(
    project_id: str,
    locks: LockManager = Depends(get_lock_manager),
) -> ReleaseResponse:
    """Release the lock of a project; ``released`` is false when nothing was locked."""
    result = await locks.release(project_id)
    return ReleaseResponse(**result)


@router.post("/extend", response_model=LockResponse)
async def extend_lock(
    project_id: str,
    request: ExtendLockRequest | None = None,
    locks: LockManager = Depends(get_lock_manager),
) -> LockResponse:
    """Extend an active lock by ``minutes`` from now."""
    minutes = request.minutes if request else None
    lock = await locks.extend(project_id, minutes)
    return LockResponse.model_validate(lock)
