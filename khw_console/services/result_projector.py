"""
Result Projector

백엔드 메뉴얼 검색 결과(ManualSearchHit)를 비교 화면용 SimilarConsultationResult로 변환한다.
백엔드 정렬 순서를 그대로 rank로 사용하며 재정렬하지 않는다.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

from pydantic import ValidationError as PydanticValidationError

from khw_console.core.logging import get_logger
from khw_console.schemas.search import (
    ManualSearchHit,
    ManualSearchManual,
    SimilarConsultationResult,
)

logger = get_logger(__name__)


def score_percent(similarity: float | None) -> int:
    """
    0.0~1.0 유사도를 0~100 정수 백분율로 변환 (반올림, half-up).

    None/NaN은 0으로 취급한다.
    """
    if similarity is None or not math.isfinite(similarity):
        return 0
    value = math.floor(similarity * 100 + 0.5)
    return max(0, min(100, value))


_SCORE_KEYS = ("similarity_score", "similarity")


def _salvage_manual(data: Any) -> ManualSearchManual:
    """형식이 잘못된 필드만 버리고 나머지 메뉴얼 필드는 살린다."""

    if isinstance(data, ManualSearchManual):
        return data
    if not isinstance(data, Mapping):
        return ManualSearchManual()
    try:
        return ManualSearchManual.model_validate(data)
    except PydanticValidationError as exc:
        invalid = {err["loc"][0] for err in exc.errors() if err["loc"]}
        kept = {key: value for key, value in data.items() if key not in invalid}
        try:
            return ManualSearchManual.model_validate(kept)
        except PydanticValidationError:
            return ManualSearchManual()


def _salvage_score(raw: Mapping[str, Any]) -> float | None:
    for key in _SCORE_KEYS:
        if key in raw:
            try:
                return ManualSearchHit.model_validate({key: raw[key]}).similarity_score
            except PydanticValidationError:
                return None
    return None


def _as_hit(raw: ManualSearchHit | Mapping[str, Any] | None) -> ManualSearchHit:
    if isinstance(raw, ManualSearchHit):
        return raw
    if not isinstance(raw, Mapping):
        return ManualSearchHit()
    try:
        return ManualSearchHit.model_validate(raw)
    except PydanticValidationError as exc:
        logger.warning(
            "search_hit_malformed",
            fields=[".".join(str(part) for part in err["loc"]) for err in exc.errors()],
        )
        return ManualSearchHit(
            similarity_score=_salvage_score(raw),
            manual=_salvage_manual(raw.get("manual")),
        )


def project(
    hits: Iterable[ManualSearchHit | Mapping[str, Any] | None] | None,
) -> list[SimilarConsultationResult]:
    """
    검색 결과 목록 → 순위가 매겨진 비교용 결과 목록.

    Args:
        hits: 백엔드 검색 결과 (유사도 내림차순으로 정렬되어 있다고 가정)

    Returns:
        rank 1부터 시작하는 결과 목록. 누락 필드는 빈 문자열/None으로 채운다.
    """
    results: list[SimilarConsultationResult] = []
    for index, raw in enumerate(hits or []):
        hit = _as_hit(raw)
        manual = hit.manual
        topic = manual.topic or ""
        results.append(
            SimilarConsultationResult(
                rank=index + 1,
                score=score_percent(hit.similarity_score),
                consultation_id=manual.id,
                inquiry_text=manual.background or topic,
                action_taken=manual.guideline or "",
                business_type=manual.business_type_name or manual.business_type or None,
                error_code=manual.error_code,
                created_at=manual.updated_at or manual.created_at,
                manual_id=manual.id,
                subject=topic,
                keywords=list(manual.keywords or []),
                original_consultation_id=manual.source_consultation_id,
                metadata_fields={
                    "manual_id": manual.id or "",
                    "manual_topic": topic,
                    "source_consultation_id": manual.source_consultation_id or "",
                },
            )
        )
    return results
