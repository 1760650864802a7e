"""Port for reading objects from the blob store."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ReadableStream(Protocol):
    def read(self, size: int = -1, /) -> bytes: ...

    def close(self) -> None: ...


@runtime_checkable
class BlobStore(Protocol):
    """Read-only access to objects and bucket metadata.

    Implementations raise ``BlobStoreError`` for transport failures, including
    failures while the returned stream is being read.
    """

    def get_object(self, bucket: str, key: str) -> ReadableStream: ...

    def get_bucket_owner(self, bucket: str) -> str: ...


__all__ = ["BlobStore", "ReadableStream"]
