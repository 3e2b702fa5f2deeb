"""Store port — abstract interface for the document store.

Core modules depend on this protocol, never on a specific database.
Documents are plain JSON-compatible dicts grouped into named collections.
"""

from __future__ import annotations

from typing import Any, Protocol


class StoreError(Exception):
    """Raised when the document store is unavailable or a call fails."""


class _ServerTimestamp:
    """Placeholder replaced with the store's own clock when a document is written."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP: Any = _ServerTimestamp()


class DocumentStore(Protocol):
    """Abstract document store used by core modules."""

    def get(self, collection: str, doc_id: str) -> dict | None: ...

    def set(self, collection: str, doc_id: str, data: dict) -> None: ...

    def create(self, collection: str, doc_id: str, data: dict) -> bool:
        """Write only if absent. Returns False when the document already exists."""
        ...

    def list(self, collection: str) -> list[tuple[str, dict]]: ...

    def query(
        self, collection: str, field: str, value: Any
    ) -> list[tuple[str, dict]]: ...
