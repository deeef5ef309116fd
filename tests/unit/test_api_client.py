"""
Unit tests for the KHW backend HTTP client and the in-memory mock client
"""

import json

import httpx
import pytest

from khw_console.client import factory
from khw_console.client.factory import get_api_client
from khw_console.client.http import KHWApiClient
from khw_console.client.mock import MockKHWApiClient
from khw_console.core.config import settings
from khw_console.core.exceptions import ApiResponseError, ApiTransportError
from khw_console.core.logging import get_latencies
from khw_console.schemas.compare import ManualGuidelineItem, ManualVersionDetail
from khw_console.schemas.search import ManualSearchManual, SearchQuery


META = {"requestId": "req-1", "timestamp": "2024-01-01T00:00:00Z"}


def _success(data):
    return {"success": True, "data": data, "error": None, "meta": META, "feedback": []}


def _failure(code, message):
    return {
        "success": False,
        "data": None,
        "error": {"code": code, "message": message},
        "meta": META,
        "feedback": [],
    }


def _client(handler) -> KHWApiClient:
    return KHWApiClient(
        base_url="http://khw.test/api/v1",
        access_token="token-123",
        transport=httpx.MockTransport(handler),
    )


# ============================================================================
# Test: KHWApiClient
# ============================================================================


@pytest.mark.asyncio
async def test_search_sends_filters_and_parses_hits():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["params"] = dict(request.url.params)
        captured["auth"] = request.headers.get("Authorization")
        return httpx.Response(
            200,
            json=_success(
                [
                    {
                        "similarity_score": 0.91,
                        "manual": {
                            "id": "m-1",
                            "topic": "로그인 오류",
                            "keywords": ["로그인"],
                            "business_type": "INTERNET",
                            "error_code": "E001",
                        },
                    }
                ]
            ),
        )

    async with _client(handler) as client:
        hits = await client.search(
            SearchQuery(text="로그인 오류", business_type="INTERNET", error_code=None, top_k=3)
        )

    assert captured["path"] == "/api/v1/manuals/search"
    assert captured["params"] == {
        "query": "로그인 오류",
        "business_type": "INTERNET",
        "status": "APPROVED",
        "top_k": "3",
    }
    assert captured["auth"] == "Bearer token-123"
    assert len(hits) == 1
    assert hits[0].similarity_score == pytest.approx(0.91)
    assert hits[0].manual.id == "m-1"


@pytest.mark.asyncio
async def test_error_envelope_raises_api_response_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json=_failure("RESOURCE.NOT_FOUND", "메뉴얼을 찾을 수 없습니다"))

    async with _client(handler) as client:
        with pytest.raises(ApiResponseError) as exc_info:
            await client.list_versions("missing")

    assert exc_info.value.code == "RESOURCE.NOT_FOUND"
    assert exc_info.value.message == "메뉴얼을 찾을 수 없습니다"


@pytest.mark.asyncio
async def test_non_envelope_response_raises_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad Gateway")

    async with _client(handler) as client:
        with pytest.raises(ApiTransportError):
            await client.search(SearchQuery(text="로그인 오류"))


@pytest.mark.asyncio
async def test_network_error_raises_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(ApiTransportError):
            await client.get_version("m-1", "v1")


@pytest.mark.asyncio
async def test_list_versions_maps_version_to_value():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/manuals/m-1/versions"
        return httpx.Response(
            200,
            json=_success(
                [
                    {"version": "3", "label": "3 (현재 버전)", "date": "2024-03-01"},
                    {"version": "2", "label": "2", "date": "2024-02-01"},
                ]
            ),
        )

    recorded_before = len(get_latencies("manual_version_list"))

    async with _client(handler) as client:
        versions = await client.list_versions("m-1")

    assert [v.value for v in versions] == ["3", "2"]
    assert versions[0].label == "3 (현재 버전)"
    assert len(get_latencies("manual_version_list")) == recorded_before + 1


@pytest.mark.asyncio
async def test_get_version_parses_detail_and_empty_data():
    detail = {
        "manual_id": "m-1",
        "version": "2",
        "topic": "로그인 실패",
        "keywords": ["로그인"],
        "background": "배경",
        "guidelines": [{"title": "본인 확인", "description": "신분증 확인"}],
        "status": "APPROVED",
        "updated_at": "2024-02-01T00:00:00Z",
    }

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/versions/2"):
            return httpx.Response(200, content=json.dumps(_success(detail)))
        return httpx.Response(200, json=_success(None))

    async with _client(handler) as client:
        found = await client.get_version("m-1", "2")
        missing = await client.get_version("m-1", "9")

    assert found.guidelines[0].title == "본인 확인"
    assert found.guideline_text == "본인 확인\n신분증 확인"
    assert missing is None


# ============================================================================
# Test: MockKHWApiClient
# ============================================================================


@pytest.fixture
def mock_client():
    client = MockKHWApiClient(latency=0)
    client.add_manual(
        ManualSearchManual(
            id="m-login",
            topic="로그인 오류 대처",
            background="비밀번호 오류로 로그인 실패",
            keywords=["로그인", "비밀번호"],
            business_type="INTERNET",
            status="APPROVED",
        )
    )
    client.add_manual(
        ManualSearchManual(
            id="m-card",
            topic="카드 결제 실패",
            background="해외 결제 승인 거절",
            keywords=["카드"],
            business_type="CARD",
            status="APPROVED",
        )
    )
    return client


@pytest.mark.asyncio
async def test_mock_search_ranks_by_overlap_and_filters(mock_client):
    hits = await mock_client.search(SearchQuery(text="로그인 실패 비밀번호"))

    assert hits[0].manual.id == "m-login"
    assert all(0 < (h.similarity_score or 0) <= 1 for h in hits)

    filtered = await mock_client.search(SearchQuery(text="로그인 실패", business_type="CARD"))
    assert [h.manual.id for h in filtered] == ["m-card"]
    assert len(mock_client.search_calls) == 2


@pytest.mark.asyncio
async def test_mock_versions_are_newest_first(mock_client):
    mock_client.add_version(
        "m-login",
        ManualVersionDetail(version="1", guidelines=[ManualGuidelineItem(title="안내")]),
    )
    mock_client.add_version("m-login", ManualVersionDetail(version="2"))

    versions = await mock_client.list_versions("m-login")

    assert [v.value for v in versions] == ["2", "1"]
    assert versions[0].label == "2 (현재 버전)"
    assert versions[1].label == "1"
    assert (await mock_client.get_version("m-login", "1")).version == "1"
    assert await mock_client.get_version("m-login", "7") is None

    with pytest.raises(ApiResponseError):
        await mock_client.list_versions("unknown")


# ============================================================================
# Test: factory
# ============================================================================


def test_factory_selects_client(monkeypatch):
    monkeypatch.setattr(settings, "api_client", "mock")
    assert isinstance(get_api_client(), MockKHWApiClient)

    monkeypatch.setattr(settings, "api_client", "http")
    assert isinstance(get_api_client(), KHWApiClient)

    monkeypatch.setattr(settings, "api_client", "grpc")
    with pytest.raises(ValueError):
        get_api_client()


def test_factory_instance_is_singleton(monkeypatch):
    monkeypatch.setattr(settings, "api_client", "mock")
    monkeypatch.setattr(factory, "_api_client", None)

    first = factory.get_api_client_instance()

    assert first is factory.get_api_client_instance()
    assert isinstance(first, MockKHWApiClient)
