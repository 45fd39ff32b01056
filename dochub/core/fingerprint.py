"""Content fingerprint over a project's document hashes.

``fingerprint(P) = sha256("".join(sorted(hashes(docs(P)))))``

Clients compare fingerprints byte-for-byte to skip transfers, so the digest
must not depend on the order documents were stored or fetched in.
"""

import hashlib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

EMPTY_FINGERPRINT = hashlib.sha256(b"").hexdigest()


@dataclass(frozen=True)
class Fingerprint:
    """Combined digest of a document set together with its size."""

    fingerprint: str
    document_count: int


def compute_hash(content: str) -> str:
    """SHA-256 hex digest of a document's UTF-8 content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def _hash_of(doc: Any) -> str:
    if isinstance(doc, str):
        return doc
    if isinstance(doc, Mapping):
        return str(doc["hash"])
    return str(doc.hash)


def compute_fingerprint(docs: Iterable[Any]) -> str:
    """
    Compute the combined fingerprint of a document set.

    Args:
        docs: Hash strings, mappings with a ``hash`` key, or objects with a
            ``hash`` attribute (e.g. ``Document`` rows)

    Returns:
        Hex SHA-256 of the lexicographically sorted, concatenated hashes.
        An empty set yields the digest of the empty string.
    """
    combined = "".join(sorted(_hash_of(doc) for doc in docs))
    return hashlib.sha256(combined.encode("utf-8")).hexdigest()


def fingerprint_documents(docs: Iterable[Any]) -> Fingerprint:
    """Compute the fingerprint and count of a document set in one pass."""
    hashes = [_hash_of(doc) for doc in docs]
    return Fingerprint(fingerprint=compute_fingerprint(hashes), document_count=len(hashes))


__all__ = [
    "EMPTY_FINGERPRINT",
    "Fingerprint",
    "compute_hash",
    "compute_fingerprint",
    "fingerprint_documents",
]
