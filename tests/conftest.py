# tests/conftest.py
from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from app.config import Settings


def make_analysis_args(overview: str = "Solid page", seo_score: Any = "72") -> Dict[str, Any]:
    """analyze_content の function call 引数として LLM が返しそうな dict。"""
    return {
        "content": {"title": "ignored", "wordCount": 0},
        "analysis": {
            "summary": {
                "overview": overview,
                "strengths": ["Clear headings", "Good depth"],
                "weaknesses": ["No internal links"],
            },
            "seoAnalysis": {"score": seo_score, "recommendations": ["Add meta description"]},
            "contentQuality": {"score": "80", "suggestions": ["Add examples"]},
            "strategy": {
                "targetAudience": "Developers",
                "contentGaps": ["Pricing comparison"],
                "actionItems": ["Publish a tutorial"],
            },
        },
    }


def make_strategy_args() -> Dict[str, Any]:
    return {
        "contentAudit": {
            "contentTypes": [{"type": "Blog", "frequency": "Weekly", "effectiveness": "High"}],
            "writingStyles": [{"style": "Technical", "usage": "Most posts", "impact": "Trust"}],
        },
        "audienceAnalysis": {
            "primaryAudiences": ["Developers", "CTOs"],
            "audienceNeeds": ["faster onboarding"],
            "engagementPatterns": "Long reads on weekdays",
        },
        "contentGaps": [{"topic": "Pricing", "opportunity": "Comparison page", "priority": "High"}],
        "recommendations": {
            "contentMix": "60% tutorials, 40% opinion",
            "topicClusters": ["APIs", "Observability"],
            "contentCalendar": [
                {"contentType": "How-to Guide", "frequency": "Weekly", "focus": "tutorial"},
                {"contentType": "Case Study", "frequency": "Monthly", "focus": "customer story"},
            ],
        },
        "brandVoice": {
            "currentTone": "Friendly",
            "consistencyScore": "7/10",
            "improvements": ["Use fewer buzzwords"],
        },
        "actionPlan": [{"action": "Write pricing page", "timeline": "2 weeks", "expectedImpact": "More leads"}],
    }


class FakeLLM:
    """
    StructuredLLMClient のフェイク。
    function 名ごとに返す dict（または送出する例外 / user_prompt を受け取る関数）を登録する。
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None, delays: Optional[Dict[str, float]] = None):
        self.responses: Dict[str, Any] = {
            "analyze_content": make_analysis_args(),
            "analyze_overall_strategy": make_strategy_args(),
        }
        self.responses.update(responses or {})
        # user_prompt に含まれる文字列 → 待ち時間（完了順を入れ替えるため）
        self.delays = delays or {}
        self.calls: List[Dict[str, Any]] = []
        # 待ち時間を消化し終えた順の user_prompt
        self.completed: List[str] = []

    def calls_for(self, name: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["function"] == name]

    async def call_function(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        function: Dict[str, Any],
        caller: str = "llm",
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        name = function["name"]
        self.calls.append({"function": name, "user_prompt": user_prompt, "caller": caller})

        for marker, delay in self.delays.items():
            if marker in user_prompt:
                await asyncio.sleep(delay)
        self.completed.append(user_prompt)

        response = self.responses[name]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(user_prompt)
        return response


def html_page(title: str = "T", body: str = "Hello world") -> str:
    return f"<html><head><title>{title}</title></head><body><script>x</script>{body}</body></html>"


def make_handler(pages: Dict[str, Any]) -> Callable[[httpx.Request], httpx.Response]:
    """
    URL → HTML 文字列 / ステータスコード / 例外 のマップから MockTransport 用ハンドラを作る。
    """

    normalized = {url.rstrip("/"): value for url, value in pages.items()}

    def handler(request: httpx.Request) -> httpx.Response:
        value = normalized.get(str(request.url).rstrip("/"))
        if value is None:
            return httpx.Response(404, text="not found")
        if isinstance(value, Exception):
            raise value
        if isinstance(value, int):
            return httpx.Response(value, text="error body")
        return httpx.Response(200, text=value, headers={"content-type": "text/html"})

    return handler


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        openai_api_key="test-key",
        max_concurrent_branches=5,
        fetch_timeout=5.0,
        max_prompt_chars=4000,
    )
