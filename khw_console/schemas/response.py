"""Common response envelope schemas (KHW backend API 공통 규격)."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class ResponseMeta(BaseModel):
    request_id: str | None = Field(default=None, alias="requestId")
    timestamp: datetime | None = None

    model_config = {
        "populate_by_name": True,
    }


class ResponseFeedback(BaseModel):
    code: str
    level: str
    message: str


class ResponseError(BaseModel):
    code: str
    message: str
    details: Optional[dict] = None
    hint: Optional[str] = None


class ResponseEnvelope(BaseModel):
    """
    성공: {success: true, data, error: null, meta, feedback}
    실패: {success: false, data: null, error: {...}, meta, feedback}

    data는 호출부에서 구체 스키마로 검증한다.
    """

    success: bool
    data: Any = None
    error: Optional[ResponseError] = None
    meta: Optional[ResponseMeta] = None
    feedback: list[ResponseFeedback] = Field(default_factory=list)

    model_config = {
        "populate_by_name": True,
    }
