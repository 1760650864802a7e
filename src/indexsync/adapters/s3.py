"""boto3-backed blob store."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from indexsync.domain.errors import BlobStoreError

if TYPE_CHECKING:
    from indexsync.config.blob_store import BlobStoreConfig
    from indexsync.domain.ports import ReadableStream

log = getLogger(__name__)

_BOTO_ERRORS = (BotoCoreError, ClientError)


class _GuardedStream:
    """Streaming body whose transport errors surface as ``BlobStoreError``."""

    def __init__(self, body: Any, location: str) -> None:
        self._body = body
        self._location = location

    def read(self, size: int = -1, /) -> bytes:
        try:
            return self._body.read(None if size < 0 else size)
        except _BOTO_ERRORS as exc:
            raise BlobStoreError(f"Can not read {self._location}: {exc}") from exc

    def close(self) -> None:
        self._body.close()


class S3BlobStore:
    def __init__(self, client: Any) -> None:
        self._client = client

    def get_object(self, bucket: str, key: str) -> ReadableStream:
        location = f"s3://{bucket}/{key}"
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
        except _BOTO_ERRORS as exc:
            raise BlobStoreError(f"Can not get {location}: {exc}") from exc
        return _GuardedStream(response["Body"], location)

    def get_bucket_owner(self, bucket: str) -> str:
        try:
            acl = self._client.get_bucket_acl(Bucket=bucket)
        except _BOTO_ERRORS as exc:
            raise BlobStoreError(f"Can not get ACL of bucket {bucket}: {exc}") from exc
        owner = acl.get("Owner") or {}
        name = owner.get("DisplayName") or owner.get("ID")
        if not name:
            raise BlobStoreError(f"Bucket {bucket} reports no owner")
        return name


def build_s3_blob_store(config: BlobStoreConfig) -> S3BlobStore:
    session = boto3.session.Session(
        aws_access_key_id=config.access_key_id,
        aws_secret_access_key=config.secret_access_key,
        region_name=config.region,
    )
    client = session.client(
        "s3",
        endpoint_url=config.endpoint_url,
        verify=config.verify_tls,
    )
    log.debug("Created S3 client (region=%s, endpoint=%s)", config.region, config.endpoint_url)
    return S3BlobStore(client)
