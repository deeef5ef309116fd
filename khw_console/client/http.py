"""
KHW Backend HTTP Client

httpx 기반으로 KHW 백엔드 REST API를 호출하고 공통 응답 규격(envelope)을 해석한다.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from khw_console.core.config import settings
from khw_console.core.exceptions import ApiResponseError, ApiTransportError
from khw_console.core.logging import get_logger, measure_latency
from khw_console.schemas.compare import ManualVersionDetail, ManualVersionInfo
from khw_console.schemas.response import ResponseEnvelope
from khw_console.schemas.search import ManualSearchHit, SearchQuery

logger = get_logger(__name__)


class KHWApiClient:
    """KHW 백엔드 API 클라이언트."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.api_url).rstrip("/")
        token = access_token or settings.api_access_token
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.api_timeout_seconds,
            headers=headers,
            transport=transport,
        )
        logger.info("khw_api_client_initialized", base_url=self.base_url)

    async def _get(self, path: str, params: dict[str, str] | None = None) -> Any:
        """GET 요청 후 envelope의 data를 반환."""

        try:
            resp = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise ApiTransportError(f"요청 실패: {exc}") from exc

        try:
            envelope = ResponseEnvelope.model_validate(resp.json())
        except (ValueError, PydanticValidationError) as exc:
            raise ApiTransportError(
                f"응답 해석 실패: {resp.status_code} {path}"
            ) from exc

        if not envelope.success:
            error = envelope.error
            raise ApiResponseError(
                error.message if error else "알 수 없는 오류가 발생했습니다.",
                code=error.code if error else None,
            )

        if resp.status_code >= 400:
            raise ApiTransportError(f"응답 오류: {resp.status_code} {path}")

        return envelope.data

    @measure_latency("manual_search")
    async def search(self, query: SearchQuery) -> list[ManualSearchHit]:
        data = await self._get("/manuals/search", params=query.to_params())
        try:
            return [ManualSearchHit.model_validate(item) for item in data or []]
        except PydanticValidationError as exc:
            raise ApiTransportError("검색 결과 형식이 올바르지 않습니다.") from exc

    @measure_latency("manual_version_list")
    async def list_versions(self, manual_id: str) -> list[ManualVersionInfo]:
        data = await self._get(f"/manuals/{manual_id}/versions")
        try:
            return [ManualVersionInfo.model_validate(item) for item in data or []]
        except PydanticValidationError as exc:
            raise ApiTransportError("버전 목록 형식이 올바르지 않습니다.") from exc

    @measure_latency("manual_version_detail")
    async def get_version(self, manual_id: str, version: str) -> ManualVersionDetail | None:
        data = await self._get(f"/manuals/{manual_id}/versions/{version}")
        if not data:
            return None
        try:
            return ManualVersionDetail.model_validate(data)
        except PydanticValidationError as exc:
            raise ApiTransportError("버전 상세 형식이 올바르지 않습니다.") from exc

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "KHWApiClient":
        await self._client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self._client.__aexit__(exc_type, exc, tb)
