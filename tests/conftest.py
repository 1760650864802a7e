from __future__ import annotations

from dataclasses import replace

import pytest

from indexsync.config.index_service import IndexServiceConfig
from tests.helpers.index import (
    BUCKET,
    INDEX_URL,
    FakeBlobStore,
    FakeIndexService,
    RecordingSleep,
)


@pytest.fixture
def keyed_config() -> IndexServiceConfig:
    return IndexServiceConfig(url=INDEX_URL, username="indexer", password="secret")


@pytest.fixture
def extramural_config(keyed_config: IndexServiceConfig) -> IndexServiceConfig:
    return replace(keyed_config, extramural_bucket=True)


@pytest.fixture
def index_service() -> FakeIndexService:
    return FakeIndexService()


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore(owners={BUCKET: "bucket-owner"})


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()
