"""
Diff Engine

메뉴얼 초안 ↔ 기존 메뉴얼, 메뉴얼 버전 ↔ 버전 비교에 쓰는 위치 기반 라인 비교와
집합 비교 함수 모음.

라인 비교는 인덱스 정렬(positional) 방식이다. 중간에 한 줄이 삽입되면 그 이후
라인은 내용이 같아도 모두 different로 표시된다 (LCS 정렬을 하지 않는다).
모든 함수는 None/빈 입력에 대해 빈 결과를 반환하며 예외를 던지지 않는다.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from khw_console.schemas.compare import (
    ChangeFlag,
    CompareSide,
    DiffLine,
    ItemStatus,
    LineStatus,
    ManualGuidelineItem,
    TextComparison,
)
from khw_console.services.tokenizer import tokenize


def compare_lines(
    left: Sequence[str] | None,
    right: Sequence[str] | None,
) -> list[DiffLine]:
    """
    left 쪽 라인 각각에 대해 같은 인덱스의 right 라인과 비교한 결과.

    반대편 표시는 인자를 바꿔서 호출한다.

    Args:
        left: 표시할 쪽 라인 목록
        right: 비교 대상 라인 목록

    Returns:
        left와 같은 길이의 DiffLine 목록 (same / different)
    """
    left = left or []
    right = right or []

    annotated: list[DiffLine] = []
    for idx, line in enumerate(left):
        is_different = idx >= len(right) or line.strip() != right[idx].strip()
        annotated.append(
            DiffLine(
                text=line,
                status=LineStatus.DIFFERENT if is_different else LineStatus.SAME,
            )
        )
    return annotated


def _normalized(items: Iterable[str] | None) -> list[str]:
    """trim 후 빈 값 제거, 최초 등장 순서로 중복 제거"""

    seen: dict[str, None] = {}
    for item in items or []:
        if item is None:
            continue
        value = item.strip()
        if value:
            seen.setdefault(value, None)
    return list(seen)


def compare_sets(
    old_items: Iterable[str] | None,
    new_items: Iterable[str] | None,
) -> dict[str, ItemStatus]:
    """
    키워드/가이드라인 항목 집합 비교.

    순회 순서: 신규 버전의 입력 순서, 이어서 이전 버전에만 있는 항목(이전 버전 순서).
    """
    old_values = _normalized(old_items)
    new_values = _normalized(new_items)
    old_set = set(old_values)
    new_set = set(new_values)

    statuses: dict[str, ItemStatus] = {}
    for value in new_values:
        statuses[value] = ItemStatus.UNCHANGED if value in old_set else ItemStatus.ADDED
    for value in old_values:
        if value not in new_set:
            statuses[value] = ItemStatus.REMOVED
    return statuses


def compare_texts(left_text: str | None, right_text: str | None) -> TextComparison:
    """
    좌(관련 메뉴얼) / 우(현재 입력) 텍스트 비교.

    두 텍스트를 라인으로 분리한 뒤 각 쪽을 상대편 기준으로 표시한다.
    """
    left_lines = tokenize(left_text)
    right_lines = tokenize(right_text)
    return TextComparison(
        left=compare_lines(left_lines, right_lines),
        right=compare_lines(right_lines, left_lines),
    )


def keyword_flag(
    keyword: str,
    side: CompareSide,
    old_keywords: Iterable[str] | None,
    new_keywords: Iterable[str] | None,
) -> ChangeFlag:
    """
    키워드 변경 표시.

    old 쪽: 신규 버전에 없으면 REMOVED
    new 쪽: 이전 버전에 없으면 ADDED
    """
    value = (keyword or "").strip()
    if side == "old":
        return ChangeFlag.NONE if value in set(_normalized(new_keywords)) else ChangeFlag.REMOVED
    return ChangeFlag.NONE if value in set(_normalized(old_keywords)) else ChangeFlag.ADDED


def guideline_flag(
    guideline: ManualGuidelineItem,
    side: CompareSide,
    old_guidelines: Sequence[ManualGuidelineItem] | None,
    new_guidelines: Sequence[ManualGuidelineItem] | None,
) -> ChangeFlag:
    """
    가이드라인 변경 표시 (제목 기준 매칭).

    상대편에 같은 제목이 없으면 REMOVED(old) / ADDED(new),
    제목은 같지만 설명이 다르면 MODIFIED.
    """
    others = (new_guidelines if side == "old" else old_guidelines) or []
    counterpart = next((g for g in others if g.title == guideline.title), None)
    if counterpart is None:
        return ChangeFlag.REMOVED if side == "old" else ChangeFlag.ADDED
    if counterpart.description != guideline.description:
        return ChangeFlag.MODIFIED
    return ChangeFlag.NONE
