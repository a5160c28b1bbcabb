# tests/test_api.py
"""API ルートのテスト（外部 HTTP / LLM は依存性の差し替えでフェイクにする）。"""
import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api import deps
from app.config import Settings
from app.errors import LLMTransportError
from app.main import create_app
from conftest import FakeLLM, html_page, make_handler
from services.analysis_store import InMemoryAnalysisStore


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def pages():
    return {}


@pytest.fixture
def app(llm, pages, test_settings):
    application = create_app()

    async def _http_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(make_handler(pages))) as client:
            yield client

    application.dependency_overrides[deps.get_app_settings] = lambda: test_settings
    application.dependency_overrides[deps.get_llm] = lambda: llm
    application.dependency_overrides[deps.get_http_client] = _http_client
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "content-strategy-advisor"}


def test_analyze_single_good_url(client, pages):
    pages["https://good.example"] = html_page()

    response = client.post("/api/analyze", json={"urls": ["https://good.example"]})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["analysisId"]
    result = data["results"][0]
    assert result["status"] == "success"
    assert result["content"] == {"title": "T", "wordCount": 2}
    assert result["analysis"]["seoAnalysis"]["score"] == "72"
    assert "error" not in result
    assert "analyzedAt" in result
    assert data["overallStrategy"]["recommendations"]["contentCalendar"][0]["contentType"] == "How-to Guide"


def test_analyze_all_failed_returns_500_with_breakdown(client, pages, llm):
    pages["https://bad.example"] = 404

    response = client.post("/api/analyze", json={"urls": ["https://bad.example"]})

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "All analyses failed"
    assert len(data["failedUrls"]) == 1
    assert data["failedUrls"][0]["url"] == "https://bad.example"
    assert "404" in data["failedUrls"][0]["error"]
    assert llm.calls_for("analyze_overall_strategy") == []


def test_analyze_every_url_failing_lists_each_url(client):
    urls = ["not-a-url", "https://missing.example", "ftp://x.example"]

    response = client.post("/api/analyze", json={"urls": urls})

    assert response.status_code == 500
    assert [f["url"] for f in response.json()["failedUrls"]] == urls


def test_analyze_partial_success(client, pages, llm):
    pages["https://a.example"] = html_page("A", "Alpha body text")
    pages["https://b.example"] = httpx.ConnectError("refused")

    response = client.post("/api/analyze", json={"urls": ["https://a.example", "https://b.example"]})

    assert response.status_code == 200
    results = response.json()["results"]
    assert [r["url"] for r in results] == ["https://a.example", "https://b.example"]
    assert [r["status"] for r in results] == ["success", "error"]
    assert "analysis" not in results[1]
    assert response.json()["overallStrategy"] is not None
    assert "https://b.example" not in llm.calls_for("analyze_overall_strategy")[0]["user_prompt"]


def test_analyze_strategy_failure_keeps_results(client, pages, llm):
    pages["https://good.example"] = html_page()
    llm.responses["analyze_overall_strategy"] = LLMTransportError("provider down")

    response = client.post("/api/analyze", json={"urls": ["https://good.example"]})

    assert response.status_code == 200
    data = response.json()
    assert data["overallStrategy"] is None
    assert "provider down" in data["strategyError"]
    assert data["results"][0]["status"] == "success"


@pytest.mark.parametrize(
    "body",
    [{}, {"urls": "https://a.example"}, {"urls": None}, {"urls": []}],
)
def test_analyze_rejects_missing_or_non_array_urls(client, body):
    response = client.post("/api/analyze", json=body)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request: urls must be an array"


def test_analyze_without_api_key_returns_500(test_settings):
    application = create_app()
    application.dependency_overrides[deps.get_app_settings] = lambda: Settings(openai_api_key=None)

    response = TestClient(application).post("/api/analyze", json={"urls": ["https://a.example"]})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "OpenAI API key is not configured"}


def test_saved_analyses_are_listed_per_user(client, pages):
    pages["https://good.example"] = html_page()
    headers = {"X-User-Id": "user-42"}

    created = client.post("/api/analyze", json={"urls": ["https://good.example"]}, headers=headers).json()

    listed = client.get("/api/analyses", headers=headers).json()["analyses"]
    assert [a["id"] for a in listed] == [created["analysisId"]]
    assert listed[0]["userId"] == "user-42"
    assert listed[0]["urls"] == ["https://good.example"]

    assert client.get("/api/analyses", headers={"X-User-Id": "other"}).json()["analyses"] == []
    assert client.get(f"/api/analyses/{created['analysisId']}", headers=headers).status_code == 200
    assert client.get(f"/api/analyses/{created['analysisId']}", headers={"X-User-Id": "other"}).status_code == 404


def test_calendar_for_saved_analysis(client, pages):
    pages["https://good.example"] = html_page()
    analysis_id = client.post("/api/analyze", json={"urls": ["https://good.example"]}).json()["analysisId"]

    first = client.get(f"/api/analyses/{analysis_id}/calendar", params={"weeks": 2, "seed": 7})
    second = client.get(f"/api/analyses/{analysis_id}/calendar", params={"weeks": 2, "seed": 7})

    assert first.status_code == 200
    data = first.json()
    assert data["weeks"] == 2
    assert len(data["items"]) == 4
    assert {"id", "title", "description", "contentType", "date", "audience", "focus"} <= set(data["items"][0])
    assert data == second.json()


def test_calendar_without_strategy_is_a_conflict(client, pages, llm):
    pages["https://good.example"] = html_page()
    llm.responses["analyze_overall_strategy"] = LLMTransportError("provider down")
    analysis_id = client.post("/api/analyze", json={"urls": ["https://good.example"]}).json()["analysisId"]

    response = client.get(f"/api/analyses/{analysis_id}/calendar")

    assert response.status_code == 409


def test_calendar_for_unknown_analysis_is_not_found(client):
    assert client.get("/api/analyses/does-not-exist/calendar").status_code == 404


def test_analyze_empty_strategy_payload_is_reported_as_strategy_error(client, pages, llm):
    pages["https://good.example"] = html_page()
    llm.responses["analyze_overall_strategy"] = {}

    response = client.post("/api/analyze", json={"urls": ["https://good.example"]})

    assert response.status_code == 200
    data = response.json()
    assert data["overallStrategy"] is None
    assert "missing required keys" in data["strategyError"]
    assert "contentAudit" in data["strategyError"]


def test_analyze_empty_analysis_payload_fails_that_url(client, pages, llm):
    pages["https://good.example"] = html_page()
    llm.responses["analyze_content"] = {"content": {}, "analysis": {}}

    response = client.post("/api/analyze", json={"urls": ["https://good.example"]})

    assert response.status_code == 500
    failed = response.json()["failedUrls"]
    assert "missing required sections" in failed[0]["error"]


class _BrokenStore(InMemoryAnalysisStore):
    async def save(self, user_id, urls, batch):
        raise RuntimeError("document store unavailable")


def test_unhandled_error_is_returned_as_json(app, pages):
    pages["https://good.example"] = html_page()
    app.dependency_overrides[deps.get_analysis_store] = lambda: _BrokenStore()

    response = TestClient(app, raise_server_exceptions=False).post(
        "/api/analyze", json={"urls": ["https://good.example"]}
    )

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"success": False, "error": "document store unavailable"}


def test_create_app_saves_into_the_given_store(llm, pages, test_settings):
    pages["https://good.example"] = html_page()
    store = InMemoryAnalysisStore()
    application = create_app(store=store)

    async def _http_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(make_handler(pages))) as client:
            yield client

    application.dependency_overrides[deps.get_app_settings] = lambda: test_settings
    application.dependency_overrides[deps.get_llm] = lambda: llm
    application.dependency_overrides[deps.get_http_client] = _http_client

    created = TestClient(application).post("/api/analyze", json={"urls": ["https://good.example"]}).json()

    latest = asyncio.run(store.latest("anonymous"))
    assert latest is not None
    assert latest.id == created["analysisId"]
