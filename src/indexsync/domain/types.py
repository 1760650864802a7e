"""Value types shared by the reconciliation core."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING
from urllib.parse import unquote_plus, urlsplit

from .errors import ObjectURLError

if TYPE_CHECKING:
    from .errors import RetryExhausted


@dataclass(frozen=True, slots=True)
class ObjectReference:
    """Location of one object in the blob store."""

    bucket: str
    key: str
    url: str

    @classmethod
    def parse(cls, url: str) -> ObjectReference:
        """Parse ``s3://bucket/key`` style locations.

        The location may arrive query-escaped (for example from a bucket
        notification, where spaces become ``+``), so it is decoded before being
        split. ``#`` and ``?`` in the decoded location belong to the key.
        """

        decoded = unquote_plus(url.strip())
        try:
            parts = urlsplit(decoded, allow_fragments=False)
        except ValueError as exc:
            raise ObjectURLError(f"Wrong url format {url}") from exc
        if not parts.scheme or not parts.netloc:
            raise ObjectURLError(f"Wrong url format {url}")
        key = parts.path.lstrip("/")
        if not key:
            raise ObjectURLError(f"No object key in {url}")
        if "?" in decoded:
            key = f"{key}?{parts.query}"
        return cls(bucket=parts.netloc, key=key, url=decoded)

    @property
    def filename(self) -> str:
        return self.key.rsplit("/", 1)[-1]


@dataclass(frozen=True, slots=True, kw_only=True)
class IndexRecord:
    """Index service view of one logical object."""

    did: str
    rev: str = ""
    baseid: str | None = None
    size: int | None = None
    hashes: dict[str, str] = field(default_factory=dict)
    urls: tuple[str, ...] = ()

    @property
    def has_size_and_hashes(self) -> bool:
        return self.size is not None and bool(self.hashes)


@dataclass(frozen=True, slots=True)
class DigestSet:
    """Byte count and content digests of one complete read of an object."""

    size: int
    crc: str
    md5: str
    sha1: str
    sha256: str
    sha512: str

    def hashes(self) -> dict[str, str]:
        return {
            "md5": self.md5,
            "sha1": self.sha1,
            "sha256": self.sha256,
            "sha512": self.sha512,
            "crc": self.crc,
        }


@dataclass(frozen=True, slots=True)
class ResolvedIdentity:
    did: str
    rev: str


@dataclass(frozen=True, slots=True)
class IdentityResolution:
    """Outcome of identity resolution: either an identity or a reason to skip."""

    identity: ResolvedIdentity | None = None
    skip_reason: str | None = None

    @property
    def skipped(self) -> bool:
        return self.identity is None

    @classmethod
    def resolved(cls, did: str, rev: str) -> IdentityResolution:
        return cls(identity=ResolvedIdentity(did=did, rev=rev))

    @classmethod
    def skip(cls, reason: str) -> IdentityResolution:
        return cls(skip_reason=reason)


class ReconciliationStatus(StrEnum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationResult:
    """Terminal value of one reconciliation."""

    status: ReconciliationStatus
    object: ObjectReference
    did: str | None = None
    rev: str | None = None
    digests: DigestSet | None = None
    reason: str | None = None
    error: RetryExhausted | None = None

    @property
    def ok(self) -> bool:
        return self.status is not ReconciliationStatus.EXHAUSTED
