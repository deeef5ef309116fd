"""
Structured Logging & Monitoring Stubs
검색/비교 파이프라인의 지연시간·실패 모니터링을 위한 공통 헬퍼를 제공한다.
"""

import logging
import sys
import time
from functools import wraps
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from khw_console.core.config import settings


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """콘솔 식별 정보(app/version/environment)를 모든 로그에 추가."""

    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment
    return event_dict


def configure_logging() -> None:
    """
    structlog 설정

    log_json=True면 수집기용 JSON 한 줄, 아니면 개발용 콘솔 출력.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
    ]
    if settings.log_json:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    level = logging.getLevelName(settings.log_level)
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.info("similar_search_issued", request_id=3, query_length=12)
    """
    return structlog.get_logger(name)


# --- Monitoring Stubs (Prometheus/OTEL 대체용) ---
_METRICS_COUNTER: dict[str, int] = {}
_LATENCY_MS: dict[str, list[float]] = {}


def _metric_key(name: str, labels: dict[str, Any]) -> str:
    return name + str(sorted(labels.items()))


def metrics_counter(name: str, **labels: Any) -> None:
    """카운터 증가 Stub. 실제 메트릭 시스템 연동 시 교체."""

    key = _metric_key(name, labels)
    _METRICS_COUNTER[key] = _METRICS_COUNTER.get(key, 0) + 1


def get_metric(name: str, **labels: Any) -> int:
    """테스트/진단용 카운터 조회."""

    return _METRICS_COUNTER.get(_metric_key(name, labels), 0)


def get_latencies(operation: str) -> list[float]:
    """measure_latency로 기록된 operation별 지연시간(ms)."""

    return list(_LATENCY_MS.get(operation, []))


def measure_latency(operation: str):
    """
    백엔드 호출(코루틴) 지연시간 측정 데코레이터.

    성공/실패와 무관하게 기록하고, 실패는 backend_call_failed 카운터로도 남긴다.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start = time.perf_counter()
            outcome = "success"
            try:
                return await func(*args, **kwargs)
            except Exception:
                outcome = "error"
                metrics_counter("backend_call_failed", operation=operation)
                raise
            finally:
                elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
                _LATENCY_MS.setdefault(operation, []).append(elapsed_ms)
                get_logger(func.__module__).debug(
                    "backend_call_latency",
                    operation=operation,
                    outcome=outcome,
                    latency_ms=elapsed_ms,
                )

        return wrapper

    return decorator
