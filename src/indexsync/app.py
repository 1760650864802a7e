"""Application orchestration entry points."""

from __future__ import annotations

import time
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from indexsync.adapters.indexd import IndexdClient
from indexsync.adapters.manifest import ManifestUploaderLookup
from indexsync.adapters.s3 import build_s3_blob_store
from indexsync.config import get_blob_store_config, get_index_service_config
from indexsync.domain.identity import IdentityResolver
from indexsync.domain.reconcile import MAX_ATTEMPTS, RETRY_DELAY_SECONDS, Reconciler
from indexsync.domain.types import ObjectReference

if TYPE_CHECKING:
    from indexsync.config import IndexServiceConfig
    from indexsync.domain.ports import BlobStore, IndexService, UploaderLookup
    from indexsync.domain.types import ReconciliationResult

log = getLogger(__name__)

Sleep = Callable[[float], None]


def build_uploader_lookup(
    obj: ObjectReference,
    *,
    config: IndexServiceConfig,
    blob_store: BlobStore,
) -> UploaderLookup | None:
    if config.extramural_uploader_manifest is None:
        return None
    return ManifestUploaderLookup(
        blob_store=blob_store,
        bucket=obj.bucket,
        manifest_key=config.extramural_uploader_manifest,
    )


def index_object(
    url: str,
    *,
    config: IndexServiceConfig | None = None,
    blob_store: BlobStore | None = None,
    index: IndexService | None = None,
    max_attempts: int = MAX_ATTEMPTS,
    retry_delay: float = RETRY_DELAY_SECONDS,
    sleep: Sleep = time.sleep,
) -> ReconciliationResult:
    """Reconcile the object at ``url`` with its index record.

    Adapters default to the ones described by the environment. Configuration
    problems raise ``ConfigurationError``; an exhausted retry budget is
    reported through the returned result.
    """

    obj = ObjectReference.parse(url)
    effective_config = config or get_index_service_config()
    effective_blob_store = blob_store or build_s3_blob_store(get_blob_store_config())
    effective_index = index or IndexdClient(config=effective_config)

    resolver = IdentityResolver(
        index=effective_index,
        blob_store=effective_blob_store,
        config=effective_config,
        uploader_lookup=build_uploader_lookup(
            obj, config=effective_config, blob_store=effective_blob_store
        ),
    )
    reconciler = Reconciler(
        resolver=resolver,
        index=effective_index,
        blob_store=effective_blob_store,
        max_attempts=max_attempts,
        retry_delay=retry_delay,
        sleep=sleep,
    )

    log.info(
        "Starting reconciliation of %s: extramural=%s, fast=%s, initial=%s",
        obj.url,
        effective_config.extramural_bucket,
        effective_config.extramural_fast_mode,
        effective_config.extramural_initial_mode,
    )
    result = reconciler.reconcile(obj)
    log.info("Finished reconciliation of %s: status=%s, did=%s", obj.url, result.status, result.did)
    return result
