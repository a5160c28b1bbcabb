# agents/strategist_agent.py

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from app.errors import JSONParseError
from models.analysis_models import UrlAnalysisSuccess
from models.strategy_models import OverallStrategy
from services.llm_client import StructuredLLMClient

logger = logging.getLogger(__name__)

STRATEGIST_TEMPERATURE = 0.3


def _object_list(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "array", "items": {"type": "object", "properties": properties}}


_STRING = {"type": "string"}
_STRING_LIST = {"type": "array", "items": {"type": "string"}}

ANALYZE_OVERALL_STRATEGY_FUNCTION: Dict[str, Any] = {
    "name": "analyze_overall_strategy",
    "description": "Analyze multiple content pieces and provide a comprehensive strategy",
    "parameters": {
        "type": "object",
        "properties": {
            "contentAudit": {
                "type": "object",
                "properties": {
                    "contentTypes": _object_list(
                        {"type": _STRING, "frequency": _STRING, "effectiveness": _STRING}
                    ),
                    "writingStyles": _object_list(
                        {"style": _STRING, "usage": _STRING, "impact": _STRING}
                    ),
                },
            },
            "audienceAnalysis": {
                "type": "object",
                "properties": {
                    "primaryAudiences": _STRING_LIST,
                    "audienceNeeds": _STRING_LIST,
                    "engagementPatterns": _STRING,
                },
            },
            "contentGaps": _object_list(
                {"topic": _STRING, "opportunity": _STRING, "priority": _STRING}
            ),
            "recommendations": {
                "type": "object",
                "properties": {
                    "contentMix": _STRING,
                    "topicClusters": _STRING_LIST,
                    "contentCalendar": _object_list(
                        {"contentType": _STRING, "frequency": _STRING, "focus": _STRING}
                    ),
                },
            },
            "brandVoice": {
                "type": "object",
                "properties": {
                    "currentTone": _STRING,
                    "consistencyScore": _STRING,
                    "improvements": _STRING_LIST,
                },
            },
            "actionPlan": _object_list(
                {"action": _STRING, "timeline": _STRING, "expectedImpact": _STRING}
            ),
        },
        "required": [
            "contentAudit",
            "audienceAnalysis",
            "contentGaps",
            "recommendations",
            "brandVoice",
            "actionPlan",
        ],
    },
}

SYSTEM_PROMPT = (
    "You are an expert content strategist and SEO specialist with 10+ years of "
    "experience in digital marketing analytics. Analyze multiple pieces of content "
    "to derive an overall content strategy, including a recurring content calendar."
)


def _to_compact_results(successes: List[UrlAnalysisSuccess]) -> List[Dict[str, Any]]:
    """
    LLM に渡すために成功結果を dict に変換する。
    チャンク分割やサンプリングはしない（件数に比例してプロンプトが伸びる）。
    """
    return [
        s.model_dump(by_alias=True, mode="json", include={"url", "content", "analysis"})
        for s in successes
    ]


def build_user_prompt(successes: List[UrlAnalysisSuccess]) -> str:
    payload = json.dumps(_to_compact_results(successes), ensure_ascii=False)
    return (
        "Analyze these content pieces and provide a comprehensive content strategy. "
        f"Here are the individual analyses: {payload}"
    )


REQUIRED_STRATEGY_KEYS: List[str] = ANALYZE_OVERALL_STRATEGY_FUNCTION["parameters"]["required"]


def parse_strategy(data: Dict[str, Any]) -> OverallStrategy:
    """
    function call の引数 dict を OverallStrategy にする。
    トップレベル 6 キーのどれかが欠けていれば JSONParseError。
    """
    missing = [key for key in REQUIRED_STRATEGY_KEYS if key not in data]
    if missing:
        raise JSONParseError(f"LLM strategy is missing required keys: {', '.join(missing)}")

    try:
        return OverallStrategy.model_validate(data)
    except ValidationError as e:
        raise JSONParseError(f"LLM strategy has an unexpected shape: {e.error_count()} error(s)") from e


async def build_overall_strategy(
    successes: List[UrlAnalysisSuccess],
    llm: StructuredLLMClient,
) -> OverallStrategy:
    """
    成功した URL の分析結果をまとめて 1 回だけ LLM に投げ、全体戦略を生成する。
    失敗時は LLMTransportError / LLMResponseError / JSONParseError をそのまま送出する
    （握りつぶすかどうかはオーケストレータ側で決める）。
    """
    logger.info("[strategist] LLM call start items=%s", len(successes))

    data = await llm.call_function(
        system_prompt=SYSTEM_PROMPT,
        user_prompt=build_user_prompt(successes),
        function=ANALYZE_OVERALL_STRATEGY_FUNCTION,
        caller="strategist",
        temperature=STRATEGIST_TEMPERATURE,
    )
    strategy = parse_strategy(data)

    logger.info(
        "[strategist] done gaps=%s calendar_slots=%s actions=%s",
        len(strategy.content_gaps),
        len(strategy.recommendations.content_calendar),
        len(strategy.action_plan),
    )
    return strategy
