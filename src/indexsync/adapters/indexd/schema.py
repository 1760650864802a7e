"""Index service request and response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class IndexdBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class IndexdRecordPayload(IndexdBaseModel):
    did: str
    baseid: str | None = None
    rev: str | None = None
    size: int | None = None
    hashes: dict[str, str | None] = Field(default_factory=dict)
    urls: list[str] = Field(default_factory=list)
    file_name: str | None = None
    uploader: str | None = None


class SearchResponse(IndexdBaseModel):
    """indexd-style envelope; bare JSON lists are accepted as well."""

    records: list[IndexdRecordPayload] = Field(default_factory=list)


class BlankRecordRequest(BaseModel):
    uploader: str
    file_name: str


class HashesPayload(BaseModel):
    md5: str
    sha1: str
    sha256: str
    sha512: str
    crc: str


class UpdateRecordRequest(BaseModel):
    size: int
    urls: list[str]
    hashes: HashesPayload
