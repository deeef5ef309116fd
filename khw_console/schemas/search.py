"""
Similar Manual Search Schemas
상담 입력 기반 관련 메뉴얼 조회용 Pydantic 모델
"""

from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, Field

from khw_console.core.config import settings
from khw_console.schemas.base import BaseSchema, FrozenSchema


class SimilarSearchStatus(str, Enum):
    """
    관련 메뉴얼 조회 상태

    - IDLE: 자동 조회 비활성화 (대기 중)
    - LOADING: 조회 중
    - SUCCESS: Top-K 발견
    - ERROR: 조회 실패 (재시도 가능)
    - INSUFFICIENT: 입력 부족 (오류 아님)
    """

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"
    INSUFFICIENT = "insufficient"


class SearchQuery(FrozenSchema):
    """
    Immutable search input

    RFP Reference: GET /api/v1/manuals/search
    """

    text: str
    business_type: str | None = None
    error_code: str | None = None
    status: str | None = Field(default_factory=lambda: settings.similar_search_status)
    top_k: int = Field(default_factory=lambda: settings.similar_search_top_k, ge=1, le=50)

    def to_params(self) -> dict[str, str]:
        """Query string 변환 (None 값은 제외)"""

        params: dict[str, str] = {"query": self.text}
        if self.business_type:
            params["business_type"] = self.business_type
        if self.error_code:
            params["error_code"] = self.error_code
        if self.status:
            params["status"] = self.status
        params["top_k"] = str(self.top_k)
        return params


class ManualSearchManual(BaseSchema):
    """검색 결과에 포함된 메뉴얼 필드 (모든 필드 선택)."""

    id: str | None = None
    topic: str | None = None
    background: str | None = None
    guideline: str | None = None
    keywords: list[str] | None = None
    business_type: str | None = None
    business_type_name: str | None = None
    error_code: str | None = None
    source_consultation_id: str | None = None
    version_id: str | None = None
    status: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class ManualSearchHit(BaseSchema):
    """
    Raw backend search hit

    similarity_score: 0.0 ~ 1.0 (opaque, higher is more similar)
    """

    similarity_score: float | None = Field(
        default=None,
        validation_alias=AliasChoices("similarity_score", "similarity"),
    )
    manual: ManualSearchManual = Field(default_factory=ManualSearchManual)


class SimilarConsultationResult(BaseSchema):
    """
    비교 화면용 관련 메뉴얼 결과

    rank는 백엔드 정렬 순서(1부터), score는 0~100 정수 백분율
    """

    rank: int = Field(ge=1)
    score: int = Field(ge=0, le=100)
    consultation_id: str | None = None
    inquiry_text: str = ""
    action_taken: str = ""
    business_type: str | None = None
    error_code: str | None = None
    created_at: str | None = None
    manual_id: str | None = None
    subject: str = ""
    keywords: list[str] = Field(default_factory=list)
    original_consultation_id: str | None = None
    metadata_fields: dict[str, str] = Field(default_factory=dict)
