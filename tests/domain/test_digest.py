from __future__ import annotations

import hashlib
import io

import pytest

from indexsync.domain.digest import HASH_ALGORITHMS, compute_digests
from indexsync.domain.errors import BlobStoreError

CHECK_INPUT = b"123456789"


class _CountingStream(io.BytesIO):
    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self.read_sizes: list[int | None] = []

    def read(self, size: int | None = -1, /) -> bytes:
        self.read_sizes.append(size)
        return super().read(size)

    def seek(self, *_: object) -> int:
        raise AssertionError("digest engine must not seek")


def test_empty_stream_has_reference_digests() -> None:
    digests = compute_digests(io.BytesIO(b""))

    assert digests.size == 0
    assert digests.crc == "00000000"
    assert digests.md5 == "d41d8cd98f00b204e9800998ecf8427e"
    assert digests.sha1 == "da39a3ee5e6b4b0d3255bfef95601890afd80709"
    assert digests.sha256 == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    assert digests.sha512 == (
        "cf83e1357eefb8bdf1542850d66d8007d620e4050b5715dc83f4a921d36ce9ce"
        "47d0d13c5d85f2b0ff8318d2877eec2f63b931bd47417a81a538327af927da3e"
    )


def test_check_input_has_reference_digests() -> None:
    digests = compute_digests(io.BytesIO(CHECK_INPUT))

    assert digests.size == len(CHECK_INPUT)
    assert digests.crc == "e3069283"
    assert digests.md5 == "25f9e794323b453885f5181f1b624d0b"
    assert digests.sha1 == "f7c3bc1d808e04732adf679965ccc34ca7ae3441"
    assert digests.sha256 == "15e2b0d3c33891ebb0f1ef609ec419420c20e320ce94c65fbc8c3312448eb225"
    assert digests.sha512 == hashlib.sha512(CHECK_INPUT).hexdigest()


def test_stream_is_read_once_forward_in_chunks() -> None:
    data = bytes(range(256)) * 40
    stream = _CountingStream(data)

    digests = compute_digests(stream, chunk_size=1000)

    assert digests.size == len(data)
    # 11 data chunks followed by the terminating empty read
    assert stream.read_sizes == [1000] * 12
    assert digests == compute_digests(io.BytesIO(data))


def test_wire_hashes_cover_every_algorithm() -> None:
    digests = compute_digests(io.BytesIO(CHECK_INPUT))

    assert set(digests.hashes()) == set(HASH_ALGORITHMS)
    assert digests.hashes()["crc"] == digests.crc


def test_read_failure_produces_no_digest_set() -> None:
    class _BrokenStream(io.BytesIO):
        def read(self, size: int | None = -1, /) -> bytes:
            if self.tell():
                raise BlobStoreError("connection reset")
            return super().read(4)

    with pytest.raises(BlobStoreError):
        compute_digests(_BrokenStream(CHECK_INPUT), chunk_size=4)


def test_chunk_size_must_be_positive() -> None:
    with pytest.raises(ValueError, match="chunk_size"):
        compute_digests(io.BytesIO(CHECK_INPUT), chunk_size=0)
