"""
Guideline parsing helpers
"""

from __future__ import annotations

from khw_console.schemas.compare import ManualGuidelineItem, ManualVersionDetail
from khw_console.services.tokenizer import tokenize


def parse_guideline_string(guideline_text: str | None) -> list[ManualGuidelineItem]:
    """
    guideline 문자열을 파싱하여 제목/설명 배열로 변환.

    포맷: "제목1\\n설명1\\n제목2\\n설명2" 또는 각 라인이 제목/설명 쌍으로 구성
    """
    lines = tokenize(guideline_text)

    guidelines: list[ManualGuidelineItem] = []
    i = 0
    while i < len(lines):
        if i + 1 < len(lines):
            guidelines.append(ManualGuidelineItem(title=lines[i], description=lines[i + 1]))
            i += 2
        else:
            # 남은 것이 제목만 있으면 설명은 공백
            guidelines.append(ManualGuidelineItem(title=lines[i], description=""))
            i += 1

    return guidelines


def guideline_items(detail: ManualVersionDetail | None) -> list[ManualGuidelineItem]:
    """버전 상세의 가이드라인 항목 (구조화 항목이 없으면 원문 파싱)."""

    if detail is None:
        return []
    if detail.guidelines:
        return list(detail.guidelines)
    return parse_guideline_string(detail.guideline)
