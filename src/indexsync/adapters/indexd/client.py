"""HTTP client for the index service."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from indexsync.adapters.http_resilience import ResilientClient
from indexsync.domain.errors import IndexServiceError, TransientServiceError

from .schema import (
    BlankRecordRequest,
    HashesPayload,
    IndexdRecordPayload,
    SearchResponse,
    UpdateRecordRequest,
)
from .translator import to_index_record

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from indexsync.config.http_resilience import ResilienceConfig
    from indexsync.config.index_service import IndexServiceConfig
    from indexsync.domain.types import IndexRecord

log = getLogger(__name__)

SEARCH_PATH = "search"

_record_list = TypeAdapter(list[IndexdRecordPayload])


def _record_path(did: str) -> str:
    return quote(did, safe="/")


class IndexdClient:
    """Low-level client for the index service.

    Every public method is one round trip. Transport failures and unexpected
    status codes surface as ``TransientServiceError``; retrying is left to the
    caller.
    """

    def __init__(
        self,
        *,
        config: IndexServiceConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._resilience = config.resilience()
        self._client_factory = client_factory or ResilientClient

    def search_by_url(self, url: str) -> list[IndexRecord]:
        return asyncio.run(self._search_by_url_async(url))

    def fetch_record(self, did: str) -> IndexRecord:
        return asyncio.run(self._fetch_record_async(did))

    def fetch_rev(self, did: str) -> str:
        record = self.fetch_record(did)
        if record.has_size_and_hashes:
            return ""
        return record.rev

    def create_blank(self, *, uploader: str, file_name: str) -> IndexRecord:
        body = BlankRecordRequest(uploader=uploader, file_name=file_name)
        return asyncio.run(self._create_blank_async(body))

    def update(
        self,
        did: str,
        rev: str,
        *,
        size: int,
        urls: Sequence[str],
        hashes: Mapping[str, str],
    ) -> int:
        try:
            body = UpdateRecordRequest(
                size=size,
                urls=list(urls),
                hashes=HashesPayload.model_validate(dict(hashes)),
            )
        except ValidationError as exc:
            raise ValueError(f"Incomplete hashes for {did}: {exc}") from exc
        return asyncio.run(self._update_async(did, rev, body))

    async def _search_by_url_async(self, url: str) -> list[IndexRecord]:
        async with self._client_factory(self._resilience) as client:
            response = await self._perform_request(
                client=client,
                method="GET",
                path=SEARCH_PATH,
                params={"url": url},
            )
        payload = _decode(response)
        if isinstance(payload, dict):
            records = _validate(SearchResponse, payload).records
        else:
            try:
                records = _record_list.validate_python(payload)
            except ValidationError as exc:
                raise IndexServiceError(f"Unexpected search payload: {exc}") from exc
        return [to_index_record(record) for record in records]

    async def _fetch_record_async(self, did: str) -> IndexRecord:
        async with self._client_factory(self._resilience) as client:
            response = await self._perform_request(
                client=client,
                method="GET",
                path=_record_path(did),
            )
        return to_index_record(_validate(IndexdRecordPayload, _decode(response)))

    async def _create_blank_async(self, body: BlankRecordRequest) -> IndexRecord:
        async with self._client_factory(self._resilience) as client:
            response = await self._perform_request(
                client=client,
                method="POST",
                path="",
                json=body.model_dump(),
            )
        return to_index_record(_validate(IndexdRecordPayload, _decode(response)))

    async def _update_async(self, did: str, rev: str, body: UpdateRecordRequest) -> int:
        async with self._client_factory(self._resilience) as client:
            response = await self._perform_request(
                client=client,
                method="PUT",
                path=_record_path(did),
                params={"rev": rev},
                json=body.model_dump(),
                check_status=False,
            )
        if response.status_code != httpx.codes.OK:
            log.debug("Update of %s answered %d: %s", did, response.status_code, response.text)
        return response.status_code

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        json: object = None,
        check_status: bool = True,
    ) -> httpx.Response:
        try:
            response = await client.request(method, path, params=params, json=json)
            if check_status:
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise TransientServiceError(
                f"{method} {exc.request.url} answered {status}",
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransientServiceError(f"{method} {path or '/'} failed: {exc}") from exc
        return response


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise IndexServiceError(f"Index service returned invalid JSON: {exc}") from exc


M = TypeVar("M", bound=BaseModel)


def _validate(model: type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise IndexServiceError(f"Unexpected index service payload: {exc}") from exc
