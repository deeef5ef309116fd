"""
Compare Schemas
텍스트 비교 / 메뉴얼 버전 비교용 Pydantic 모델
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import AliasChoices, Field

from khw_console.schemas.base import BaseSchema


CompareSide = Literal["old", "new"]


class LineStatus(str, Enum):
    """라인 단위 비교 상태"""

    SAME = "same"
    DIFFERENT = "different"
    ADDED = "added"
    REMOVED = "removed"


class ItemStatus(str, Enum):
    """키워드/가이드라인 집합 비교 상태"""

    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


class ChangeFlag(str, Enum):
    """
    버전 비교 화면의 항목 단위 변경 표시

    NONE은 변경 없음 (빈 문자열)
    """

    NONE = ""
    ADDED = "ADDED"
    REMOVED = "REMOVED"
    MODIFIED = "MODIFIED"


class DiffLine(BaseSchema):
    """비교 결과 라인 (화면 표시용, 저장하지 않음)"""

    text: str
    status: LineStatus


class TextComparison(BaseSchema):
    """좌/우 2열 텍스트 비교 결과"""

    left: list[DiffLine] = Field(default_factory=list)
    right: list[DiffLine] = Field(default_factory=list)

    @property
    def has_differences(self) -> bool:
        return any(line.status != LineStatus.SAME for line in [*self.left, *self.right])


class KeywordStatus(BaseSchema):
    """키워드의 이전/신규 버전 포함 여부"""

    keyword: str
    in_old: bool
    in_new: bool
    status: ItemStatus


class ManualGuidelineItem(BaseSchema):
    """메뉴얼 가이드라인 항목."""

    title: str = Field(description="조치사항 제목")
    description: str = Field(default="", description="조치사항 설명")


class ManualVersionInfo(BaseSchema):
    """
    버전 목록 항목 (최신순)

    RFP Reference: GET /api/v1/manuals/{manual_id}/versions
    """

    value: str = Field(validation_alias=AliasChoices("value", "version"))
    label: str = ""
    date: str = ""
    status: str | None = None
    manual_id: str | None = None


class ManualVersionDetail(BaseSchema):
    """
    특정 버전 상세 (비교 입력)

    RFP Reference: GET /api/v1/manuals/{manual_id}/versions/{version}
    """

    manual_id: str | None = None
    version: str
    topic: str = ""
    keywords: list[str] = Field(default_factory=list)
    background: str = ""
    guidelines: list[ManualGuidelineItem] = Field(default_factory=list)
    guideline: str | None = Field(
        default=None,
        description="가이드라인 원문 (guidelines가 비어있을 때 사용)",
    )
    status: str | None = None
    updated_at: datetime | None = None

    @property
    def guideline_text(self) -> str:
        """가이드라인을 '제목\\n설명' 라인으로 직렬화 (parse_guideline_string의 역)"""

        if not self.guidelines:
            return self.guideline or ""
        lines: list[str] = []
        for item in self.guidelines:
            lines.append(item.title)
            if item.description:
                lines.append(item.description)
        return "\n".join(lines)


class VersionComparison(BaseSchema):
    """
    두 버전의 비교 결과

    selector가 바뀔 때마다 새로 생성되며 캐싱하지 않는다.
    """

    old_version_id: str
    new_version_id: str
    keyword_statuses: dict[str, KeywordStatus] = Field(default_factory=dict)
    guideline_statuses: list[DiffLine] = Field(default_factory=list)
    old_guideline_statuses: list[DiffLine] = Field(default_factory=list)
