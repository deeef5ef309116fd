"""
Mock KHW API Client
In-memory implementation for development/testing without a running backend.

검색 유사도는 단순 토큰 겹침(Jaccard) 점수로 흉내낸다.
"""

import asyncio
import re

from khw_console.core.config import settings
from khw_console.core.exceptions import ApiResponseError
from khw_console.core.logging import get_logger
from khw_console.schemas.compare import ManualVersionDetail, ManualVersionInfo
from khw_console.schemas.search import ManualSearchHit, ManualSearchManual, SearchQuery

logger = get_logger(__name__)

_TOKEN_PATTERN = re.compile(r"\w+")


def _tokens(text: str) -> set[str]:
    return {token.lower() for token in _TOKEN_PATTERN.findall(text or "")}


class MockKHWApiClient:
    """
    Mock client using in-memory dictionaries.

    - manuals: 검색 대상 메뉴얼
    - versions: manual_id별 버전 상세 (최신순)
    """

    def __init__(self, *, latency: float | None = None):
        self.latency = settings.mock_latency_seconds if latency is None else latency
        self._manuals: dict[str, ManualSearchManual] = {}
        self._versions: dict[str, list[tuple[ManualVersionInfo, ManualVersionDetail]]] = {}
        self.search_calls: list[SearchQuery] = []
        logger.info("mock_api_client_initialized", latency=self.latency)

    def add_manual(self, manual: ManualSearchManual) -> None:
        if not manual.id:
            raise ValueError("manual.id is required")
        self._manuals[manual.id] = manual

    def add_version(
        self,
        manual_id: str,
        detail: ManualVersionDetail,
        *,
        date: str = "",
    ) -> None:
        """새 버전을 목록 맨 앞(최신)에 추가한다."""

        entries = self._versions.setdefault(manual_id, [])
        label = f"{detail.version} (현재 버전)"
        if entries:
            previous_info, previous_detail = entries[0]
            entries[0] = (
                previous_info.model_copy(update={"label": previous_info.value}),
                previous_detail,
            )
        info = ManualVersionInfo(
            value=detail.version,
            label=label,
            date=date,
            status=detail.status,
            manual_id=manual_id,
        )
        entries.insert(0, (info, detail))

    async def search(self, query: SearchQuery) -> list[ManualSearchHit]:
        await asyncio.sleep(self.latency)
        self.search_calls.append(query)

        query_tokens = _tokens(query.text)
        hits: list[ManualSearchHit] = []
        for manual in self._manuals.values():
            if query.business_type and query.business_type != manual.business_type:
                continue
            if query.error_code and query.error_code != manual.error_code:
                continue
            if query.status and manual.status and query.status != manual.status:
                continue

            doc_tokens = _tokens(
                " ".join([manual.topic or "", manual.background or "", *(manual.keywords or [])])
            )
            union = query_tokens | doc_tokens
            score = len(query_tokens & doc_tokens) / len(union) if union else 0.0
            if score > 0:
                hits.append(ManualSearchHit(similarity_score=score, manual=manual))

        hits.sort(key=lambda h: h.similarity_score or 0.0, reverse=True)
        logger.debug(
            "mock_search_completed",
            query_length=len(query.text),
            results_found=len(hits),
            top_k=query.top_k,
        )
        return hits[: query.top_k]

    async def list_versions(self, manual_id: str) -> list[ManualVersionInfo]:
        await asyncio.sleep(self.latency)
        if manual_id not in self._versions:
            raise ApiResponseError(
                f"ManualEntry(id={manual_id}) not found",
                code="RESOURCE.NOT_FOUND",
            )
        return [info for info, _ in self._versions[manual_id]]

    async def get_version(self, manual_id: str, version: str) -> ManualVersionDetail | None:
        await asyncio.sleep(self.latency)
        for info, detail in self._versions.get(manual_id, []):
            if info.value == version:
                return detail
        return None

    async def aclose(self) -> None:
        return None
