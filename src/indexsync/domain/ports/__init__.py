"""Domain port definitions for adapters."""

from __future__ import annotations

from .blob_store import BlobStore, ReadableStream
from .index import IndexService
from .uploader import UploaderLookup

__all__ = [
    "BlobStore",
    "IndexService",
    "ReadableStream",
    "UploaderLookup",
]
