# app/graph/nodes.py
from __future__ import annotations

import logging
from typing import List, Optional, Tuple, Union

from agents.analyzer_agent import analyze_content
from agents.parser_agent import fetch_and_extract
from agents.strategist_agent import build_overall_strategy
from app.errors import AdvisorError, UnexpectedOrchestratorError
from app.graph.state import PipelineContext
from models.analysis_models import (
    ContentOverview,
    UrlAnalysisFailure,
    UrlAnalysisSuccess,
)
from models.strategy_models import OverallStrategy

logger = logging.getLogger(__name__)


# ---------- URL ブランチ（Fetch → Extract → Analyze） ----------


async def analyze_url_node(
    url: str,
    ctx: PipelineContext,
) -> Union[UrlAnalysisSuccess, UrlAnalysisFailure]:
    """
    1 URL 分のブランチ。
    どの段階で失敗しても例外は外に出さず、UrlAnalysisFailure に変換して返す。
    （1 つの悪い URL でバッチ全体を落とさない）
    """
    settings = ctx.settings
    try:
        content = await fetch_and_extract(
            url,
            ctx.http_client,
            timeout=settings.fetch_timeout,
            user_agent=settings.fetch_user_agent,
        )
        analysis = await analyze_content(
            url,
            content,
            ctx.llm,
            max_chars=settings.max_prompt_chars,
        )
    except AdvisorError as e:
        logger.warning("[branch] failed url=%s error_type=%s error=%s", url, type(e).__name__, e)
        return UrlAnalysisFailure(url=url, error=str(e))
    except Exception as e:  # noqa: BLE001
        logger.exception("[branch] unexpected error url=%s", url)
        return UrlAnalysisFailure(url=url, error=str(e) or type(e).__name__)

    return UrlAnalysisSuccess(
        url=url,
        content=ContentOverview(title=content.title, word_count=content.word_count),
        analysis=analysis,
    )


# ---------- Strategist ノード ----------


async def strategist_node(
    successes: List[UrlAnalysisSuccess],
    ctx: PipelineContext,
) -> Tuple[Optional[OverallStrategy], Optional[str]]:
    """
    成功結果から全体戦略を生成する。

    LLM 側の失敗（通信 / 応答形式 / JSON）は (None, エラーメッセージ) にして返し、
    URL 単位の結果は捨てない。それ以外の例外はバッチ全体のエラーとして送出する。
    """
    try:
        strategy = await build_overall_strategy(successes, ctx.llm)
    except AdvisorError as e:
        logger.warning("[strategist_node] strategy generation failed: %s", e)
        return None, str(e)
    except Exception as e:  # noqa: BLE001
        logger.exception("[strategist_node] unexpected error")
        raise UnexpectedOrchestratorError(f"Strategy generation failed: {e}") from e

    return strategy, None
