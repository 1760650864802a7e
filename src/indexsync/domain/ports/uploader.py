"""Port for resolving the uploader of an extramural object."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class UploaderLookup(Protocol):
    def lookup(self, key: str) -> str:
        """Return the uploader recorded for ``key``, or ``""`` when unknown."""
        ...


__all__ = ["UploaderLookup"]
