"""
Request generation guard

비동기 재조회에서 "마지막 요청만 반영"을 보장하는 단조 증가 카운터.
요청을 발행할 때 advance()로 id를 받고, 응답 반영 직전에 is_current(id)를 확인한다.
전송 자체는 취소하지 않으며, 오래된 응답은 반영되지 않을 뿐이다.
"""


class RequestGeneration:
    """인스턴스별 요청 세대 카운터 (공유 금지)."""

    def __init__(self) -> None:
        self._current = 0

    @property
    def current(self) -> int:
        return self._current

    def advance(self) -> int:
        """새 요청 id 발급. 이전 id는 모두 stale 처리된다."""

        self._current += 1
        return self._current

    def invalidate(self) -> None:
        """새 요청 없이 진행 중인 요청만 무효화."""

        self._current += 1

    def is_current(self, request_id: int) -> bool:
        return request_id == self._current
