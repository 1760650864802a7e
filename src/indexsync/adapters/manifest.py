"""Uploader manifest: a two-column CSV mapping object keys to uploaders."""

from __future__ import annotations

import csv
import io
from contextlib import closing
from logging import getLogger
from typing import TYPE_CHECKING

from indexsync.domain.errors import BlobStoreError

if TYPE_CHECKING:
    from indexsync.domain.ports import BlobStore

log = getLogger(__name__)


def parse_uploader_manifest(text: str) -> dict[str, str]:
    uploaders: dict[str, str] = {}
    for line_number, row in enumerate(csv.reader(io.StringIO(text)), start=1):
        if not row:
            continue
        if len(row) < 2:  # noqa: PLR2004
            log.warning("Skipping uploader manifest line %d: expected two columns", line_number)
            continue
        uploaders[row[0].strip().lstrip("/")] = row[1].strip()
    return uploaders


class ManifestUploaderLookup:
    """Uploader lookup backed by a manifest object, loaded on first use."""

    def __init__(self, *, blob_store: BlobStore, bucket: str, manifest_key: str) -> None:
        self._blob_store = blob_store
        self._bucket = bucket
        self._manifest_key = manifest_key.lstrip("/")
        self._uploaders: dict[str, str] | None = None

    def lookup(self, key: str) -> str:
        uploaders = self._load()
        uploader = uploaders.get(key)
        if uploader is None:
            log.info("Object %s not found in uploader manifest file", key)
            return ""
        return uploader

    def _load(self) -> dict[str, str]:
        if self._uploaders is not None:
            return self._uploaders
        try:
            with closing(self._blob_store.get_object(self._bucket, self._manifest_key)) as stream:
                text = stream.read().decode("utf-8-sig")
            self._uploaders = parse_uploader_manifest(text)
        except (BlobStoreError, UnicodeDecodeError, csv.Error) as exc:
            log.warning(
                "Can not read uploader manifest s3://%s/%s: %s",
                self._bucket,
                self._manifest_key,
                exc,
            )
            self._uploaders = {}
        return self._uploaders
