"""
Line Tokenizer

비교 가능한 라인 시퀀스로 텍스트를 분리한다 (줄바꿈 기준, 공백 라인 제거).
"""

from __future__ import annotations


def tokenize(text: str | None) -> list[str]:
    """
    텍스트를 trim된 비어있지 않은 라인 목록으로 변환.

    Args:
        text: 원문 (None 허용)

    Returns:
        순서를 유지한 라인 목록. 공백뿐인 입력은 빈 목록.
    """
    if not text:
        return []
    return [line.strip() for line in text.split("\n") if line.strip()]
