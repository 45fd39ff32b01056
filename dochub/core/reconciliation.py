"""Client-side reconciliation of a local documentation copy.

A polling client keeps the fingerprint it last pulled. On each check it asks
for the lock status and the current fingerprint; a different fingerprint
means a full pull. The lock is advisory context for the human ("may change
soon"), never a precondition for reading.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from dochub.lib.clock import isoformat_z, utcnow
from dochub.lib.logging import get_logger

logger = get_logger(__name__)

CACHE_FILE_NAME = ".dochub-sync.json"


@dataclass(frozen=True)
class LockStatus:
    """Lock state as reported by the status endpoint."""

    locked: bool
    locked_by: str | None = None
    locked_at: str | None = None
    expires_at: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "LockStatus":
        return cls(
            locked=bool(payload.get("locked")),
            locked_by=payload.get("lockedBy"),
            locked_at=payload.get("lockedAt"),
            expires_at=payload.get("expiresAt"),
        )


@dataclass(frozen=True)
class ReconciliationDecision:
    """Outcome of comparing a cached fingerprint with the platform's."""

    needs_pull: bool
    cached_fingerprint: str | None
    remote_fingerprint: str
    document_count: int
    lock: LockStatus

    @property
    def safe_to_edit(self) -> bool:
        return not self.lock.locked


@dataclass
class ReconciliationResult:
    decision: ReconciliationDecision
    pulled: bool = False
    files_written: list[str] = field(default_factory=list)


def decide(
    cached_fingerprint: str | None,
    status: LockStatus,
    remote_fingerprint: str,
    document_count: int = 0,
) -> ReconciliationDecision:
    """Pull exactly when the fingerprints differ; the lock does not influence it."""
    return ReconciliationDecision(
        needs_pull=cached_fingerprint != remote_fingerprint,
        cached_fingerprint=cached_fingerprint,
        remote_fingerprint=remote_fingerprint,
        document_count=document_count,
        lock=status,
    )


class FingerprintCache:
    """JSON file remembering the last pulled fingerprint per project."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"projects": {}}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("fingerprint_cache_corrupt", path=str(self.path))
            return {"projects": {}}
        data.setdefault("projects", {})
        return data

    def get(self, project_id: str) -> str | None:
        entry = self._load()["projects"].get(project_id)
        return entry.get("fingerprint") if entry else None

    def set(self, project_id: str, fingerprint: str, synced_at: datetime | None = None) -> None:
        data = self._load()
        data["projects"][project_id] = {
            "fingerprint": fingerprint,
            "syncedAt": isoformat_z(synced_at or utcnow()),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)


class PlatformAPI(Protocol):
    """Subset of the platform API a reconciler needs."""

    async def get_status(self, project_id: str) -> dict[str, Any]: ...

    async def get_fingerprint(self, project_id: str) -> dict[str, Any]: ...

    async def full_sync(self, project_id: str) -> dict[str, Any]: ...


class Reconciler:
    """Keeps a local documentation directory in step with the platform."""

    def __init__(self, api: PlatformAPI, docs_dir: Path, cache: FingerprintCache | None = None):
        self.api = api
        self.docs_dir = Path(docs_dir)
        self.cache = cache or FingerprintCache(self.docs_dir / CACHE_FILE_NAME)

    def _target(self, file_name: str) -> Path:
        root = self.docs_dir.resolve()
        target = (root / file_name).resolve()
        if root != target and root not in target.parents:
            raise ValueError(f"Path traversal not allowed: {file_name}")
        return target

    def _write_documents(self, documents: list[dict[str, Any]]) -> list[str]:
        written = []
        for doc in documents:
            target = self._target(doc["fileName"])
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(doc["content"], encoding="utf-8")
            written.append(doc["fileName"])
        return written

    async def check(self, project_id: str) -> ReconciliationResult:
        """
        Run one reconciliation round for a project.

        Returns:
            The decision plus which files were written when a pull happened
        """
        status = LockStatus.from_payload(await self.api.get_status(project_id))
        remote = await self.api.get_fingerprint(project_id)

        decision = decide(
            self.cache.get(project_id),
            status,
            remote["fingerprint"],
            remote.get("documentCount", 0),
        )
        result = ReconciliationResult(decision=decision)

        if decision.lock.locked:
            logger.info(
                "project_locked",
                project_id=project_id,
                locked_by=status.locked_by,
                expires_at=status.expires_at,
            )

        if not decision.needs_pull:
            logger.info("docs_up_to_date", project_id=project_id, fingerprint=decision.remote_fingerprint)
            return result

        payload = await self.api.full_sync(project_id)
        result.files_written = self._write_documents(payload.get("documents", []))
        # Content first, then the fingerprint that describes it
        self.cache.set(project_id, payload["fingerprint"])
        result.pulled = True

        logger.info(
            "docs_pulled",
            project_id=project_id,
            files=len(result.files_written),
            fingerprint=payload["fingerprint"],
        )
        return result


__all__ = [
    "LockStatus",
    "ReconciliationDecision",
    "ReconciliationResult",
    "FingerprintCache",
    "PlatformAPI",
    "Reconciler",
    "decide",
]
