"""
Manual Version Compare Coordinator (FR-14)

두 버전(old/new)을 동시에 조회한 뒤 키워드 집합 비교와 가이드라인 라인 비교 결과를 만든다.

- selector 미지정 시 최신 버전(new)과 그 직전 버전(old)을 기본값으로 사용
- 두 조회 중 하나라도 실패하면 부분 결과 없이 단일 오류 상태로 전환
- selector 변경이 겹치면 마지막 변경의 결과만 반영
"""

from __future__ import annotations

import asyncio

from khw_console.client.factory import get_api_client_instance
from khw_console.client.protocol import ManualVersionAPIProtocol
from khw_console.core.exceptions import VersionFetchFailedError
from khw_console.core.logging import get_logger, metrics_counter
from khw_console.schemas.compare import (
    ChangeFlag,
    CompareSide,
    DiffLine,
    KeywordStatus,
    ManualGuidelineItem,
    ManualVersionDetail,
    ManualVersionInfo,
    VersionComparison,
)
from khw_console.services.diff_engine import (
    compare_lines,
    compare_sets,
    guideline_flag,
    keyword_flag,
)
from khw_console.services.generation import RequestGeneration
from khw_console.services.guideline import guideline_items
from khw_console.services.tokenizer import tokenize

logger = get_logger(__name__)

VERSION_LIST_FAILED_MESSAGE = "버전 목록을 불러올 수 없습니다"
VERSION_DATA_FAILED_MESSAGE = "버전 데이터를 불러올 수 없습니다"


def build_version_comparison(
    old_data: ManualVersionDetail,
    new_data: ManualVersionDetail,
) -> VersionComparison:
    """두 버전 상세로 VersionComparison 생성."""

    old_keywords = {keyword.strip() for keyword in old_data.keywords}
    new_keywords = {keyword.strip() for keyword in new_data.keywords}
    keyword_statuses = {
        keyword: KeywordStatus(
            keyword=keyword,
            in_old=keyword in old_keywords,
            in_new=keyword in new_keywords,
            status=status,
        )
        for keyword, status in compare_sets(old_data.keywords, new_data.keywords).items()
    }

    old_lines = tokenize(old_data.guideline_text)
    new_lines = tokenize(new_data.guideline_text)

    return VersionComparison(
        old_version_id=old_data.version,
        new_version_id=new_data.version,
        keyword_statuses=keyword_statuses,
        guideline_statuses=compare_lines(new_lines, old_lines),
        old_guideline_statuses=compare_lines(old_lines, new_lines),
    )


def default_selectors(
    versions: list[ManualVersionInfo],
    *,
    old_version: str | None = None,
    new_version: str | None = None,
) -> tuple[str, str]:
    """
    비어있는 selector를 최신순 버전 목록으로 채운다.

    new: 최신 버전, old: 그 다음 버전 (버전이 하나뿐이면 같은 버전)
    """
    if not new_version and versions:
        new_version = versions[0].value
    if not old_version:
        if len(versions) > 1:
            old_version = versions[1].value
        elif len(versions) == 1:
            old_version = versions[0].value
    return old_version or "", new_version or ""


class ManualVersionCompareCoordinator:
    """메뉴얼 버전 비교 화면 상태 (화면 1개당 1개)."""

    def __init__(
        self,
        api: ManualVersionAPIProtocol | None,
        manual_id: str,
        *,
        initial_old: str | None = None,
        initial_new: str | None = None,
    ) -> None:
        self.api = api if api is not None else get_api_client_instance()
        self.manual_id = manual_id
        self.versions: list[ManualVersionInfo] = []
        self.old_version = initial_old or ""
        self.new_version = initial_new or ""
        self.old_data: ManualVersionDetail | None = None
        self.new_data: ManualVersionDetail | None = None
        self.comparison: VersionComparison | None = None
        self.is_loading = False
        self.error: VersionFetchFailedError | None = None
        self._list_generation = RequestGeneration()
        self._fetch_generation = RequestGeneration()

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def keyword_statuses(self) -> dict[str, KeywordStatus]:
        return dict(self.comparison.keyword_statuses) if self.comparison else {}

    @property
    def guideline_statuses(self) -> list[DiffLine]:
        return list(self.comparison.guideline_statuses) if self.comparison else []

    @property
    def old_guideline_statuses(self) -> list[DiffLine]:
        return list(self.comparison.old_guideline_statuses) if self.comparison else []

    async def load(self) -> VersionComparison | None:
        """버전 목록 로드 후 기본 selector로 비교."""

        await self.load_versions()
        if self.is_error:
            return None
        return await self.refresh()

    async def load_versions(self) -> list[ManualVersionInfo]:
        request_id = self._list_generation.advance()
        self.is_loading = True
        self.error = None

        try:
            versions = await self.api.list_versions(self.manual_id)
        except Exception as exc:  # noqa: BLE001
            if self._list_generation.is_current(request_id):
                self.is_loading = False
                self._fail(VERSION_LIST_FAILED_MESSAGE, exc)
            return []

        if not self._list_generation.is_current(request_id):
            return []

        self.is_loading = False
        self.versions = list(versions)
        self.old_version, self.new_version = default_selectors(
            self.versions,
            old_version=self.old_version,
            new_version=self.new_version,
        )
        logger.info(
            "manual_versions_loaded",
            manual_id=self.manual_id,
            count=len(self.versions),
            old_version=self.old_version,
            new_version=self.new_version,
        )
        return self.versions

    async def set_old_version(self, version: str) -> VersionComparison | None:
        self.old_version = version
        return await self.refresh()

    async def set_new_version(self, version: str) -> VersionComparison | None:
        self.new_version = version
        return await self.refresh()

    async def refresh(self) -> VersionComparison | None:
        """
        현재 selector로 두 버전을 동시에 조회해 비교 결과를 새로 만든다.

        Returns:
            비교 결과. selector가 비었거나, 실패했거나, 더 최신 요청에 밀린 경우 None
        """
        old_version, new_version = self.old_version, self.new_version
        self.comparison = None
        if not old_version or not new_version:
            # selector를 비우면 진행 중인 조회 결과도 반영하지 않는다
            self._fetch_generation.invalidate()
            self.is_loading = False
            return None

        request_id = self._fetch_generation.advance()
        self.is_loading = True
        self.error = None

        old_result, new_result = await asyncio.gather(
            self.api.get_version(self.manual_id, old_version),
            self.api.get_version(self.manual_id, new_version),
            return_exceptions=True,
        )

        if not self._fetch_generation.is_current(request_id):
            logger.debug(
                "stale_version_compare_discarded",
                manual_id=self.manual_id,
                request_id=request_id,
            )
            return None

        self.is_loading = False
        failure = next(
            (result for result in (old_result, new_result) if isinstance(result, BaseException)),
            None,
        )
        if failure is not None or old_result is None or new_result is None:
            self.old_data = None
            self.new_data = None
            self._fail(VERSION_DATA_FAILED_MESSAGE, failure)
            return None

        self.old_data = old_result
        self.new_data = new_result
        self.comparison = build_version_comparison(old_result, new_result)
        metrics_counter("version_compare", outcome="success")
        return self.comparison

    def get_keyword_status(self, keyword: str, side: CompareSide) -> ChangeFlag:
        if self.old_data is None or self.new_data is None:
            return ChangeFlag.NONE
        return keyword_flag(keyword, side, self.old_data.keywords, self.new_data.keywords)

    def get_guideline_status(self, guideline: ManualGuidelineItem, side: CompareSide) -> ChangeFlag:
        if self.old_data is None or self.new_data is None:
            return ChangeFlag.NONE
        return guideline_flag(
            guideline,
            side,
            guideline_items(self.old_data),
            guideline_items(self.new_data),
        )

    def close(self) -> None:
        """화면 이탈: 진행 중인 조회 결과는 반영하지 않는다."""

        self._list_generation.invalidate()
        self._fetch_generation.invalidate()
        self.comparison = None

    def _fail(self, message: str, cause: BaseException | None) -> None:
        error = VersionFetchFailedError(message)
        error.__cause__ = cause
        self.error = error
        self.comparison = None
        metrics_counter("version_compare", outcome="error")
        logger.error(
            "version_fetch_failed",
            manual_id=self.manual_id,
            old_version=self.old_version,
            new_version=self.new_version,
            error=str(cause) if cause else "empty version data",
        )
