"""Identity resolution for objects awaiting reconciliation.

Two bucket kinds are supported:

- keyed buckets, whose object keys embed the record DID
  (``<did>/<file>`` or ``<guid>/<did>/<file>``);
- extramural buckets, whose records must be found by URL or created blank.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .errors import BlobStoreError, KeyLayoutError, TransientServiceError
from .types import IdentityResolution

if TYPE_CHECKING:
    from indexsync.config.index_service import IndexServiceConfig

    from .ports import BlobStore, IndexService, UploaderLookup
    from .types import ObjectReference

log = getLogger(__name__)

ALREADY_HASHED = "The file already has size and hashes"
ALREADY_INDEXED = "Object already exists during initial index"


def did_from_key(key: str) -> str:
    """Return the DID embedded in ``key``.

    >>> did_from_key("abc/file.txt")
    'abc'
    >>> did_from_key("dg.1234/abc/file.txt")
    'dg.1234/abc'
    """

    segments = key.split("/")
    if len(segments) == 2:  # noqa: PLR2004
        return segments[0]
    if len(segments) == 3:  # noqa: PLR2004
        return "/".join(segments[:2])
    raise KeyLayoutError(
        f"No DID found in object key {key!r}. Is this bucket not managed by the index? "
        "Try setting 'extramural_bucket: true' in the config."
    )


class IdentityResolver:
    """Find or create the index record that describes an object."""

    def __init__(
        self,
        *,
        index: IndexService,
        blob_store: BlobStore,
        config: IndexServiceConfig,
        uploader_lookup: UploaderLookup | None = None,
    ) -> None:
        self._index = index
        self._blob_store = blob_store
        self._config = config
        self._uploader_lookup = uploader_lookup

    def resolve(self, obj: ObjectReference) -> IdentityResolution:
        if self._config.extramural_bucket:
            return self._resolve_extramural(obj)
        return self._resolve_keyed(obj)

    def refresh_rev(self, obj: ObjectReference, did: str) -> IdentityResolution:
        """Re-read the rev of ``did`` after a rejected update."""

        if not self._config.extramural_bucket:
            return self._keyed_rev(did)
        record = self._index.fetch_record(did)
        if not record.rev:
            raise TransientServiceError(f"Index record {did} for {obj.url} has no rev")
        return IdentityResolution.resolved(did, record.rev)

    def _resolve_keyed(self, obj: ObjectReference) -> IdentityResolution:
        return self._keyed_rev(did_from_key(obj.key))

    def _keyed_rev(self, did: str) -> IdentityResolution:
        rev = self._index.fetch_rev(did)
        if not rev:
            log.info("%s: %s", ALREADY_HASHED, did)
            return IdentityResolution.skip(ALREADY_HASHED)
        return IdentityResolution.resolved(did, rev)

    def _resolve_extramural(self, obj: ObjectReference) -> IdentityResolution:
        existing = None if self._config.extramural_fast_mode else self._lookup_existing(obj)
        if existing is None:
            return self._create_blank(obj)

        if self._config.extramural_initial_mode:
            log.info("%s, skipping: %s", ALREADY_INDEXED, obj.url)
            return IdentityResolution.skip(ALREADY_INDEXED)

        record = self._index.fetch_record(existing)
        if not record.rev:
            raise TransientServiceError(f"Index record {existing} for {obj.url} has no rev")
        return IdentityResolution.resolved(existing, record.rev)

    def _lookup_existing(self, obj: ObjectReference) -> str | None:
        records = self._index.search_by_url(obj.url)
        if not records:
            return None
        if len(records) > 1:
            log.warning(
                "Found %d index records for %s, using %s",
                len(records),
                obj.url,
                records[0].did,
            )
        return records[0].did

    def _create_blank(self, obj: ObjectReference) -> IdentityResolution:
        uploader = self._resolve_uploader(obj)
        record = self._index.create_blank(uploader=uploader, file_name=obj.filename)
        log.info("Created blank index record %s for %s", record.did, obj.url)
        return IdentityResolution.resolved(record.did, record.rev)

    def _resolve_uploader(self, obj: ObjectReference) -> str:
        """Pick the uploader by priority: literal, bucket owner, manifest, empty."""

        if self._config.extramural_uploader is not None:
            return self._config.extramural_uploader

        if self._config.extramural_uploader_s3owner:
            try:
                return self._blob_store.get_bucket_owner(obj.bucket)
            except BlobStoreError as exc:
                log.warning("Can not fetch owner of bucket %s: %s", obj.bucket, exc)
                return ""

        if self._uploader_lookup is not None:
            return self._uploader_lookup.lookup(obj.key)

        return ""
