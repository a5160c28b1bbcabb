# agents/analyzer_agent.py

from __future__ import annotations

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from app.errors import JSONParseError
from models.analysis_models import StructuredAnalysis
from models.site_models import ExtractedContent
from services.llm_client import StructuredLLMClient

logger = logging.getLogger(__name__)

# ============================================================
# 軽量化パラメータ
# ============================================================

# LLM に渡す本文の最大文字数（トークンコストの上限）
MAX_CONTENT_CHARS = 4000

ANALYZER_TEMPERATURE = 0.4


# ============================================================
# function schema
# ============================================================

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

# analysis に必ず含まれるべきセクション
REQUIRED_ANALYSIS_SECTIONS: List[str] = ["summary", "seoAnalysis", "contentQuality", "strategy"]

ANALYZE_CONTENT_FUNCTION: Dict[str, Any] = {
    "name": "analyze_content",
    "description": "Analyze content and provide structured feedback",
    "parameters": {
        "type": "object",
        "properties": {
            "content": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "wordCount": {"type": "number"},
                },
            },
            "analysis": {
                "type": "object",
                "properties": {
                    "summary": {
                        "type": "object",
                        "properties": {
                            "overview": {"type": "string"},
                            "strengths": _STRING_LIST,
                            "weaknesses": _STRING_LIST,
                        },
                    },
                    "seoAnalysis": {
                        "type": "object",
                        "properties": {
                            "score": {"type": "string"},
                            "recommendations": _STRING_LIST,
                        },
                    },
                    "contentQuality": {
                        "type": "object",
                        "properties": {
                            "score": {"type": "string"},
                            "suggestions": _STRING_LIST,
                        },
                    },
                    "strategy": {
                        "type": "object",
                        "properties": {
                            "targetAudience": {"type": "string"},
                            "contentGaps": _STRING_LIST,
                            "actionItems": _STRING_LIST,
                        },
                    },
                },
                "required": REQUIRED_ANALYSIS_SECTIONS,
            },
        },
        "required": ["content", "analysis"],
    },
}

SYSTEM_PROMPT = (
    "You are a senior SEO specialist and content strategist with expertise in "
    "technical content analysis. Analyze the provided page content and give "
    "concrete, actionable insights. Scores should be expressed out of 100."
)


# ============================================================
# プロンプト組み立て
# ============================================================


def build_user_prompt(url: str, content: ExtractedContent, max_chars: int = MAX_CONTENT_CHARS) -> str:
    """タイトルと本文の先頭 max_chars 文字だけを埋め込む。"""
    body = content.plain_text[:max_chars] if max_chars > 0 else content.plain_text
    return f"Analyze this content from {url}. Title: {content.title}. Content: {body}"


def parse_analysis(data: Dict[str, Any]) -> StructuredAnalysis:
    """
    function call の引数 dict から StructuredAnalysis を取り出す。
    analysis が無い / 形が違う場合は JSONParseError（この URL だけ失敗扱い）。
    """
    raw = data.get("analysis")
    if not isinstance(raw, dict):
        raise JSONParseError("LLM response is missing the 'analysis' object")

    missing = [key for key in REQUIRED_ANALYSIS_SECTIONS if key not in raw]
    if missing:
        raise JSONParseError(f"LLM analysis is missing required sections: {', '.join(missing)}")

    try:
        return StructuredAnalysis.model_validate(raw)
    except ValidationError as e:
        raise JSONParseError(f"LLM analysis has an unexpected shape: {e.error_count()} error(s)") from e


# ============================================================
# 公開関数
# ============================================================


async def analyze_content(
    url: str,
    content: ExtractedContent,
    llm: StructuredLLMClient,
    *,
    max_chars: int = MAX_CONTENT_CHARS,
) -> StructuredAnalysis:
    """
    Per-URL Analyzer のメイン関数。
    1 URL につき LLM 呼び出しは 1 回だけ（コストを一定に保つためリトライなし）。
    """
    logger.info(
        "[analyzer] start url=%s title=%r words=%s",
        url,
        content.title,
        content.word_count,
    )

    data = await llm.call_function(
        system_prompt=SYSTEM_PROMPT,
        user_prompt=build_user_prompt(url, content, max_chars=max_chars),
        function=ANALYZE_CONTENT_FUNCTION,
        caller="analyzer",
        temperature=ANALYZER_TEMPERATURE,
    )
    analysis = parse_analysis(data)

    logger.info(
        "[analyzer] done url=%s seo_score=%s quality_score=%s",
        url,
        analysis.seo_analysis.score,
        analysis.content_quality.score,
    )
    return analysis
