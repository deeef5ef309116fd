"""
Similar Manual Search Controller

상담 문의내용 입력을 관련 메뉴얼 조회 요청으로 변환하는 디바운스 상태머신.

- 입력이 min_length 이상일 때만 조회 (미만이면 insufficient, 오류 아님)
- debounce_ms 동안 입력이 멈춰야 요청 발행 (연속 입력은 1회로 병합)
- 요청 id 세대 비교로 마지막 요청의 응답만 반영 (이전 응답은 조용히 폐기)
- enabled=False / close() 시 대기 중 타이머 취소. 진행 중인 전송은 취소하지 않는다.

단일 이벤트 루프에서만 사용한다. 인스턴스마다 타이머와 요청 카운터를 따로 가진다.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable

from khw_console.client.factory import get_api_client_instance
from khw_console.client.protocol import SimilarManualSearchAPIProtocol
from khw_console.core.config import settings
from khw_console.core.logging import get_logger, metrics_counter
from khw_console.schemas.search import (
    SearchQuery,
    SimilarConsultationResult,
    SimilarSearchStatus,
)
from khw_console.services.generation import RequestGeneration
from khw_console.services.result_projector import project

logger = get_logger(__name__)

SEARCH_FAILED_MESSAGE = "관련 메뉴얼 조회에 실패했습니다. 잠시 후 다시 시도해주세요."


@dataclass(frozen=True)
class SearchInput:
    """입력 변경 이벤트 (직전 입력과 같으면 무시)"""

    inquiry_text: str = ""
    business_type: str | None = None
    error_code: str | None = None
    enabled: bool = True


@dataclass
class SearchSession:
    """컨트롤러 인스턴스 전용 타이머/요청 세대 상태"""

    pending_timer: asyncio.TimerHandle | None = None
    generation: RequestGeneration = field(default_factory=RequestGeneration)
    status: SimilarSearchStatus = SimilarSearchStatus.IDLE

    @property
    def active_request_id(self) -> int:
        return self.generation.current


class SimilarManualSearchController:
    """관련 메뉴얼 자동 조회 컨트롤러 (검색 입력창 1개당 1개)."""

    def __init__(
        self,
        search_api: SimilarManualSearchAPIProtocol | None = None,
        *,
        debounce_ms: int | None = None,
        min_length: int | None = None,
        top_k: int | None = None,
        on_change: Callable[["SimilarManualSearchController"], None] | None = None,
    ) -> None:
        self.search_api = search_api if search_api is not None else get_api_client_instance()
        self.debounce_ms = (
            settings.similar_search_debounce_ms if debounce_ms is None else debounce_ms
        )
        self.min_length = (
            settings.similar_search_min_length if min_length is None else min_length
        )
        self.top_k = top_k or settings.similar_search_top_k
        self.on_change = on_change
        self.session = SearchSession()
        self._input: SearchInput | None = None
        self._results: list[SimilarConsultationResult] = []
        self._error: str | None = None
        self._in_flight: set[asyncio.Task] = set()
        self._closed = False

    # --- presentation state ---

    @property
    def status(self) -> SimilarSearchStatus:
        return self.session.status

    @property
    def results(self) -> list[SimilarConsultationResult]:
        return list(self._results)

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def is_loading(self) -> bool:
        return self.session.status == SimilarSearchStatus.LOADING

    @property
    def has_pending_timer(self) -> bool:
        return self.session.pending_timer is not None

    # --- input events ---

    def update(
        self,
        inquiry_text: str | None,
        *,
        business_type: str | None = None,
        error_code: str | None = None,
        enabled: bool = True,
    ) -> None:
        """
        입력 변경 처리. 실행 중인 이벤트 루프 안에서 호출해야 한다.

        Args:
            inquiry_text: 문의내용 원문
            business_type: 업무구분 (빈 문자열은 필터 없음)
            error_code: 에러코드 (공백은 필터 없음)
            enabled: 자동 조회 활성화 여부
        """
        if self._closed:
            logger.warning("similar_search_update_after_close")
            return

        new_input = SearchInput(
            inquiry_text=inquiry_text or "",
            business_type=business_type,
            error_code=error_code,
            enabled=enabled,
        )
        if new_input == self._input:
            return
        self._input = new_input

        if not enabled:
            self._cancel_timer()
            self.session.generation.invalidate()
            self._commit(SimilarSearchStatus.IDLE, results=[], error=None)
            return

        query = self._build_query(new_input)
        if query is None:
            self._cancel_timer()
            self.session.generation.invalidate()
            self._commit(SimilarSearchStatus.INSUFFICIENT, results=[], error=None)
            return

        # 연속 입력 병합: 이전 타이머를 버리고 새로 예약
        self._cancel_timer()
        self.session.generation.invalidate()
        loop = asyncio.get_running_loop()
        self.session.pending_timer = loop.call_later(
            self.debounce_ms / 1000,
            self._on_timer,
            query,
        )
        logger.debug(
            "similar_search_armed",
            debounce_ms=self.debounce_ms,
            query_length=len(query.text),
        )

    async def refetch(self) -> None:
        """
        수동 조회: 디바운스 없이 현재 입력으로 즉시 조회.

        자동 조회 비활성화 여부와 무관하게 동작하며 min_length 검사와
        요청 id 비교는 그대로 적용된다.
        """
        if self._closed:
            return

        self._cancel_timer()
        query = self._build_query(self._input or SearchInput())
        if query is None:
            self.session.generation.invalidate()
            self._commit(SimilarSearchStatus.INSUFFICIENT, results=[], error=None)
            return

        await self._issue(query)

    def close(self) -> None:
        """언마운트: 대기 중 타이머 취소, 진행 중 응답은 반영하지 않는다."""

        self._cancel_timer()
        self.session.generation.invalidate()
        self._closed = True

    async def drain(self) -> None:
        """진행 중인 요청이 모두 끝날 때까지 대기 (종료/테스트용)."""

        while self._in_flight:
            await asyncio.gather(*list(self._in_flight))

    # --- internals ---

    def _build_query(self, search_input: SearchInput) -> SearchQuery | None:
        trimmed = search_input.inquiry_text.strip()
        if len(trimmed) < self.min_length:
            return None
        return SearchQuery(
            text=trimmed,
            business_type=search_input.business_type or None,
            error_code=(search_input.error_code or "").strip() or None,
            top_k=self.top_k,
        )

    def _cancel_timer(self) -> None:
        if self.session.pending_timer is not None:
            self.session.pending_timer.cancel()
            self.session.pending_timer = None

    def _on_timer(self, query: SearchQuery) -> None:
        self.session.pending_timer = None
        self._issue(query)

    def _issue(self, query: SearchQuery) -> asyncio.Task:
        request_id = self.session.generation.advance()
        self._commit(SimilarSearchStatus.LOADING, results=self._results, error=None)
        logger.info(
            "similar_search_issued",
            request_id=request_id,
            query_length=len(query.text),
            business_type=query.business_type,
            error_code=query.error_code,
        )
        task = asyncio.get_running_loop().create_task(self._run(query, request_id))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _run(self, query: SearchQuery, request_id: int) -> None:
        try:
            hits = await self.search_api.search(query)
        except Exception as exc:  # noqa: BLE001
            if not self.session.generation.is_current(request_id):
                self._discard(request_id)
                return
            logger.error(
                "similar_search_failed",
                request_id=request_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            metrics_counter("similar_search", outcome="error")
            self._commit(SimilarSearchStatus.ERROR, results=[], error=SEARCH_FAILED_MESSAGE)
            return

        if not self.session.generation.is_current(request_id):
            self._discard(request_id)
            return

        results = project(hits)
        metrics_counter("similar_search", outcome="success")
        logger.info("similar_search_succeeded", request_id=request_id, count=len(results))
        self._commit(SimilarSearchStatus.SUCCESS, results=results, error=None)

    def _discard(self, request_id: int) -> None:
        metrics_counter("similar_search", outcome="stale")
        logger.debug(
            "stale_response_discarded",
            request_id=request_id,
            active_request_id=self.session.active_request_id,
        )

    def _commit(
        self,
        status: SimilarSearchStatus,
        *,
        results: list[SimilarConsultationResult],
        error: str | None,
    ) -> None:
        self.session.status = status
        self._results = list(results)
        self._error = error
        if self.on_change is not None:
            self.on_change(self)
