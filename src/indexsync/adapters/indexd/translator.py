"""Translate index service payloads into domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from indexsync.domain.types import IndexRecord

if TYPE_CHECKING:
    from .schema import IndexdRecordPayload


def to_index_record(payload: IndexdRecordPayload) -> IndexRecord:
    return IndexRecord(
        did=payload.did,
        rev=payload.rev or "",
        baseid=payload.baseid,
        size=payload.size,
        hashes={name: value for name, value in payload.hashes.items() if value},
        urls=tuple(payload.urls),
    )
