from __future__ import annotations

import io

import pytest
from botocore.exceptions import ClientError, ReadTimeoutError

from indexsync.adapters.s3 import S3BlobStore, build_s3_blob_store
from indexsync.config.blob_store import BlobStoreConfig
from indexsync.domain.errors import BlobStoreError


class _StubS3:
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], object] = {}
        self.acls: dict[str, dict[str, object]] = {}

    def get_object(self, *, Bucket: str, Key: str) -> dict[str, object]:  # noqa: N803
        try:
            return {"Body": self.objects[(Bucket, Key)], "ContentLength": 0}
        except KeyError:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"
            ) from None

    def get_bucket_acl(self, *, Bucket: str) -> dict[str, object]:  # noqa: N803
        try:
            return self.acls[Bucket]
        except KeyError:
            raise ClientError(
                {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "GetBucketAcl"
            ) from None


class _TimeoutBody(io.BytesIO):
    def read(self, size: int | None = -1, /) -> bytes:
        raise ReadTimeoutError(endpoint_url="https://s3.example.org")


def test_get_object_streams_body() -> None:
    stub = _StubS3()
    stub.objects[("bucket", "a/b.txt")] = io.BytesIO(b"payload")
    stream = S3BlobStore(stub).get_object("bucket", "a/b.txt")

    assert stream.read(3) == b"pay"
    assert stream.read(-1) == b"load"
    stream.close()


def test_missing_object_is_a_blob_store_error() -> None:
    with pytest.raises(BlobStoreError, match="NoSuchKey"):
        S3BlobStore(_StubS3()).get_object("bucket", "missing")


def test_read_timeout_is_a_blob_store_error() -> None:
    stub = _StubS3()
    stub.objects[("bucket", "key")] = _TimeoutBody(b"payload")
    stream = S3BlobStore(stub).get_object("bucket", "key")

    with pytest.raises(BlobStoreError, match="Read timeout"):
        stream.read(1024)


@pytest.mark.parametrize(
    ("owner", "expected"),
    [
        ({"DisplayName": "alice", "ID": "abc123"}, "alice"),
        ({"ID": "abc123"}, "abc123"),
    ],
)
def test_bucket_owner(owner: dict[str, str], expected: str) -> None:
    stub = _StubS3()
    stub.acls["bucket"] = {"Owner": owner, "Grants": []}

    assert S3BlobStore(stub).get_bucket_owner("bucket") == expected


def test_bucket_owner_failures_are_blob_store_errors() -> None:
    stub = _StubS3()
    stub.acls["anonymous"] = {"Grants": []}
    store = S3BlobStore(stub)

    with pytest.raises(BlobStoreError, match="AccessDenied"):
        store.get_bucket_owner("unknown")
    with pytest.raises(BlobStoreError, match="no owner"):
        store.get_bucket_owner("anonymous")


def test_build_s3_blob_store_uses_configured_endpoint() -> None:
    store = build_s3_blob_store(
        BlobStoreConfig(
            region="us-east-1",
            endpoint_url="https://s3.example.org",
            access_key_id="AKIAEXAMPLE",
            secret_access_key="secret",
        )
    )

    client = store._client  # noqa: SLF001
    assert client.meta.endpoint_url == "https://s3.example.org"
    assert client.meta.region_name == "us-east-1"
