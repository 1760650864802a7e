"""Port for the external index service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from indexsync.domain.types import IndexRecord


@runtime_checkable
class IndexService(Protocol):
    """One network round trip per call; no retries.

    Failures surface as ``TransientServiceError``.
    """

    def search_by_url(self, url: str) -> list[IndexRecord]: ...

    def fetch_record(self, did: str) -> IndexRecord: ...

    def fetch_rev(self, did: str) -> str:
        """Return the current rev, or ``""`` when the record already has size and hashes."""
        ...

    def create_blank(self, *, uploader: str, file_name: str) -> IndexRecord: ...

    def update(
        self,
        did: str,
        rev: str,
        *,
        size: int,
        urls: Sequence[str],
        hashes: Mapping[str, str],
    ) -> int:
        """Conditionally update ``did`` and return the HTTP status code."""
        ...


__all__ = ["IndexService"]
