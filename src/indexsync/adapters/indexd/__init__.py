"""Public interface for the index service adapter."""

from __future__ import annotations

from .client import IndexdClient
from .schema import BlankRecordRequest, IndexdRecordPayload, SearchResponse, UpdateRecordRequest
from .translator import to_index_record

__all__ = [
    "BlankRecordRequest",
    "IndexdClient",
    "IndexdRecordPayload",
    "SearchResponse",
    "UpdateRecordRequest",
    "to_index_record",
]
