# app/graph/workflow.py
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Union

from app.errors import AllAnalysesFailedError
from app.graph import nodes
from app.graph.state import PipelineContext
from models.analysis_models import UrlAnalysisFailure, UrlAnalysisSuccess, split_results
from models.batch_models import BatchResult
from models.strategy_models import OverallStrategy

logger = logging.getLogger(__name__)


def assemble_batch_result(
    results: List[Union[UrlAnalysisSuccess, UrlAnalysisFailure]],
    overall_strategy: Optional[OverallStrategy],
    strategy_error: Optional[str] = None,
) -> BatchResult:
    """URL 単位の結果と全体戦略をまとめるだけの純粋関数。"""
    return BatchResult(
        results=list(results),
        overall_strategy=overall_strategy,
        strategy_error=strategy_error,
    )


async def run_branches(
    urls: List[str],
    ctx: PipelineContext,
) -> List[Union[UrlAnalysisSuccess, UrlAnalysisFailure]]:
    """
    全 URL のブランチを並行に走らせ、全部が終わるまで待つ（fail-fast しない）。
    戻り値は完了順ではなく入力 URL の順番。
    """
    limit = ctx.branch_limit
    semaphore = asyncio.Semaphore(limit) if limit > 0 else None

    async def _run(url: str) -> Union[UrlAnalysisSuccess, UrlAnalysisFailure]:
        if semaphore is None:
            return await nodes.analyze_url_node(url, ctx)
        async with semaphore:
            return await nodes.analyze_url_node(url, ctx)

    # gather は引数の順番で結果を返すので、ここで入力順が確定する
    return list(await asyncio.gather(*(_run(url) for url in urls)))


async def run_batch(urls: List[str], ctx: PipelineContext) -> BatchResult:
    """
    /api/analyze 用のメインワークフロー。

    1) URL ごとに Fetch → Extract → Analyze（並行）
    2) 成功 / 失敗に分割。全滅なら AllAnalysesFailedError（Strategist は呼ばない）
    3) 成功分だけで Strategist（LLM）
    4) 結果をまとめて BatchResult にする
    """
    logger.info(
        "[workflow] run_batch start urls=%s branch_limit=%s",
        len(urls),
        ctx.branch_limit or "unbounded",
    )

    results = await run_branches(urls, ctx)
    successes, failures = split_results(results)

    logger.info("[workflow] branches settled success=%s failed=%s", len(successes), len(failures))

    if not successes:
        raise AllAnalysesFailedError(failures)

    overall_strategy, strategy_error = await nodes.strategist_node(successes, ctx)

    batch = assemble_batch_result(results, overall_strategy, strategy_error)
    logger.info(
        "[workflow] run_batch done results=%s strategy=%s",
        len(batch.results),
        "YES" if batch.overall_strategy else "NO",
    )
    return batch
