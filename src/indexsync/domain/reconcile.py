"""Reconciliation of one blob store object with its index record.

The flow is a small state machine::

    RESOLVE_IDENTITY -> COMPUTE_DIGESTS -> UPDATE -> DONE
    RESOLVE_IDENTITY -> SKIP -> DONE
    UPDATE -> REFRESH_REV -> UPDATE            (rev was stale)
    REFRESH_REV -> SKIP -> DONE                (someone else finished the record)

Transient failures re-run the current step after a fixed delay. All steps
draw from one retry budget per reconciliation.
"""

from __future__ import annotations

import time
from contextlib import closing
from dataclasses import dataclass, field
from enum import StrEnum
from http import HTTPStatus
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .digest import compute_digests
from .errors import ConcurrencyConflict, RetryExhausted, TransientServiceError
from .types import ReconciliationResult, ReconciliationStatus

if TYPE_CHECKING:
    from collections.abc import Callable

    from .identity import IdentityResolver
    from .ports import BlobStore, IndexService
    from .types import DigestSet, IdentityResolution, ObjectReference, ResolvedIdentity

log = getLogger(__name__)

MAX_ATTEMPTS: Final[int] = 10
RETRY_DELAY_SECONDS: Final[float] = 5.0


class ReconcileState(StrEnum):
    RESOLVE_IDENTITY = "resolve_identity"
    COMPUTE_DIGESTS = "compute_digests"
    UPDATE = "update"
    REFRESH_REV = "refresh_rev"
    SKIP = "skip"
    DONE = "done"


@dataclass(slots=True)
class RetryBudget:
    """Failure counter shared by every network interaction of one reconciliation."""

    max_attempts: int
    failures: int = 0

    def consume(self) -> None:
        self.failures += 1

    @property
    def exhausted(self) -> bool:
        return self.failures >= self.max_attempts


@dataclass(slots=True)
class _Progress:
    state: ReconcileState = ReconcileState.RESOLVE_IDENTITY
    identity: ResolvedIdentity | None = None
    digests: DigestSet | None = None
    skip_reason: str | None = None
    last_error: TransientServiceError | None = None
    history: list[ReconcileState] = field(default_factory=list)


class Reconciler:
    """Drive identity resolution, hashing and the conditional update for one object."""

    def __init__(
        self,
        *,
        resolver: IdentityResolver,
        index: IndexService,
        blob_store: BlobStore,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = RETRY_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._resolver = resolver
        self._index = index
        self._blob_store = blob_store
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._sleep = sleep
        self._steps: dict[
            ReconcileState, Callable[[ObjectReference, _Progress], ReconcileState]
        ] = {
            ReconcileState.RESOLVE_IDENTITY: self._resolve_identity,
            ReconcileState.COMPUTE_DIGESTS: self._compute_digests,
            ReconcileState.UPDATE: self._update,
            ReconcileState.REFRESH_REV: self._refresh_rev,
            ReconcileState.SKIP: self._skip,
        }

    def reconcile(self, obj: ObjectReference) -> ReconciliationResult:
        """Reconcile ``obj``.

        Configuration errors are raised. Exhausting the retry budget is
        returned as a result with ``status=exhausted``.
        """

        progress = _Progress()
        budget = RetryBudget(self._max_attempts)

        while progress.state is not ReconcileState.DONE:
            current = progress.state
            progress.history.append(current)
            try:
                progress.state = self._steps[current](obj, progress)
            except ConcurrencyConflict as exc:
                progress.last_error = exc
                progress.state = ReconcileState.REFRESH_REV
            except TransientServiceError as exc:
                progress.last_error = exc
            else:
                continue

            budget.consume()
            if budget.exhausted:
                return self._exhausted(obj, progress, budget)
            log.warning(
                "Step %s failed for %s: %s. Retry: %d",
                current,
                obj.url,
                progress.last_error,
                budget.failures,
            )
            self._sleep(self._retry_delay)

        return self._finished(obj, progress)

    def _resolve_identity(self, obj: ObjectReference, progress: _Progress) -> ReconcileState:
        return self._apply_resolution(self._resolver.resolve(obj), progress)

    def _refresh_rev(self, obj: ObjectReference, progress: _Progress) -> ReconcileState:
        if progress.identity is None:
            raise RuntimeError("Rev refresh reached without a resolved identity")
        did = progress.identity.did
        resolution = self._resolver.refresh_rev(obj, did)
        log.info("Refreshed rev of %s: %s", did, resolution.identity)
        return self._apply_resolution(resolution, progress)

    def _apply_resolution(
        self,
        resolution: IdentityResolution,
        progress: _Progress,
    ) -> ReconcileState:
        if resolution.skipped:
            progress.skip_reason = resolution.skip_reason
            return ReconcileState.SKIP
        progress.identity = resolution.identity
        if progress.digests is None:
            return ReconcileState.COMPUTE_DIGESTS
        return ReconcileState.UPDATE

    def _compute_digests(self, obj: ObjectReference, progress: _Progress) -> ReconcileState:
        log.info("Start to compute hashes for %s", obj.key)
        with closing(self._blob_store.get_object(obj.bucket, obj.key)) as stream:
            progress.digests = compute_digests(stream)
        log.info("Finish to compute hashes for %s", obj.key)
        return ReconcileState.UPDATE

    def _update(self, obj: ObjectReference, progress: _Progress) -> ReconcileState:
        identity, digests = progress.identity, progress.digests
        if identity is None or digests is None:
            raise RuntimeError("Update reached without identity and digests")
        status = self._index.update(
            identity.did,
            identity.rev,
            size=digests.size,
            urls=[obj.url],
            hashes=digests.hashes(),
        )
        if status == HTTPStatus.CONFLICT:
            raise ConcurrencyConflict(identity.did, identity.rev, status_code=status)
        if status != HTTPStatus.OK:
            raise TransientServiceError(f"StatusCode: {status}", status_code=status)
        log.info("Finish updating the record %s. Response Status: %d", identity.did, status)
        return ReconcileState.DONE

    def _skip(self, obj: ObjectReference, progress: _Progress) -> ReconcileState:
        log.info("Skipping %s: %s", obj.url, progress.skip_reason)
        return ReconcileState.DONE

    def _finished(self, obj: ObjectReference, progress: _Progress) -> ReconciliationResult:
        identity = progress.identity
        status = (
            ReconciliationStatus.SKIPPED
            if ReconcileState.SKIP in progress.history
            else ReconciliationStatus.COMPLETED
        )
        return ReconciliationResult(
            status=status,
            object=obj,
            did=identity.did if identity else None,
            rev=identity.rev if identity else None,
            digests=progress.digests,
            reason=progress.skip_reason,
        )

    def _exhausted(
        self,
        obj: ObjectReference,
        progress: _Progress,
        budget: RetryBudget,
    ) -> ReconciliationResult:
        identity = progress.identity
        last_error = progress.last_error
        error = RetryExhausted(
            f"Can not reconcile {obj.url} with the index",
            attempts=budget.failures,
            did=identity.did if identity else None,
            rev=identity.rev if identity else None,
            status_code=last_error.status_code if last_error else None,
            detail=str(last_error) if last_error else None,
        )
        log.error("%s", error)
        return ReconciliationResult(
            status=ReconciliationStatus.EXHAUSTED,
            object=obj,
            did=error.did,
            rev=error.rev,
            digests=progress.digests,
            error=error,
        )
