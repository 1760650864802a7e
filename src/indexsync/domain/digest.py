"""Single-pass content digests."""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, Final, Protocol

import google_crc32c

from .types import DigestSet

if TYPE_CHECKING:
    from .ports.blob_store import ReadableStream

DEFAULT_CHUNK_SIZE: Final[int] = 1024 * 1024
HASH_ALGORITHMS: Final[tuple[str, ...]] = ("crc", "md5", "sha1", "sha256", "sha512")


class _Hasher(Protocol):
    def update(self, data: bytes, /) -> None: ...

    def digest(self) -> bytes: ...


def _new_hashers() -> dict[str, _Hasher]:
    return {
        "crc": google_crc32c.Checksum(),
        "md5": hashlib.md5(usedforsecurity=False),
        "sha1": hashlib.sha1(usedforsecurity=False),
        "sha256": hashlib.sha256(),
        "sha512": hashlib.sha512(),
    }


def compute_digests(stream: ReadableStream, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> DigestSet:
    """Read ``stream`` forward once and digest every chunk with all algorithms.

    Exceptions from the stream propagate; no partial result is returned.
    """

    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    hashers = _new_hashers()
    size = 0
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        size += len(chunk)
        for hasher in hashers.values():
            hasher.update(chunk)

    hexdigests = {name: hasher.digest().hex() for name, hasher in hashers.items()}
    return DigestSet(size=size, **hexdigests)
