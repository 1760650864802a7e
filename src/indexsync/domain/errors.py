"""Error taxonomy for object reconciliation."""

from __future__ import annotations

from indexsync.config.errors import ConfigurationError


class ObjectURLError(ConfigurationError):
    """Raised when an object location cannot be parsed into bucket and key."""


class KeyLayoutError(ConfigurationError):
    """Raised when an object key does not embed a record identity."""


class TransientServiceError(RuntimeError):
    """A failed network interaction that may succeed on a later attempt."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class IndexServiceError(TransientServiceError):
    """Raised when the index service answers with an unusable payload."""


class BlobStoreError(TransientServiceError):
    """Raised when the blob store cannot serve an object or bucket lookup."""


class ConcurrencyConflict(TransientServiceError):
    """The index service rejected an update because the supplied rev is stale."""

    def __init__(self, did: str, rev: str, *, status_code: int | None = None) -> None:
        super().__init__(f"Rev {rev} of {did} is stale", status_code=status_code)
        self.did = did
        self.rev = rev


class RetryExhausted(RuntimeError):
    """Terminal failure once the retry budget of a reconciliation is spent."""

    def __init__(
        self,
        message: str,
        *,
        attempts: int,
        did: str | None = None,
        rev: str | None = None,
        status_code: int | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.did = did
        self.rev = rev
        self.status_code = status_code
        self.detail = detail

    def __str__(self) -> str:
        parts = [super().__str__(), f"attempts={self.attempts}"]
        if self.did is not None:
            parts.append(f"did={self.did}")
        if self.rev is not None:
            parts.append(f"rev={self.rev}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.detail:
            parts.append(f"detail={self.detail}")
        return " ".join(parts)
