# app/api/routes.py
from __future__ import annotations

import logging
import random
from typing import List, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import Field

from app.api.deps import (
    get_analysis_store,
    get_app_settings,
    get_http_client,
    get_llm,
    get_user_id,
)
from app.config import Settings
from app.graph.state import PipelineContext
from app.graph.workflow import run_batch
from models.analysis_models import PerUrlResult
from models.base_models import CamelModel
from models.batch_models import AnalysisRecord
from models.calendar_models import ContentCalendarItem
from models.strategy_models import OverallStrategy
from services.analysis_store import AnalysisStore
from services.calendar_planner import DEFAULT_WEEKS, build_content_calendar
from services.llm_client import StructuredLLMClient

logger = logging.getLogger(__name__)

router = APIRouter()


# --------- Request / Response モデル ---------


class AnalyzeRequest(CamelModel):
    # 空配列は受け付けない（400）
    urls: List[str] = Field(..., min_length=1)


class AnalyzeResponse(CamelModel):
    success: bool = True
    analysis_id: Optional[str] = None
    results: List[PerUrlResult]
    overall_strategy: Optional[OverallStrategy] = None
    strategy_error: Optional[str] = None


class AnalysisListResponse(CamelModel):
    analyses: List[AnalysisRecord]


class CalendarResponse(CamelModel):
    analysis_id: str
    weeks: int
    items: List[ContentCalendarItem]


# --------- エンドポイント ---------


@router.post("/analyze", response_model=AnalyzeResponse)
async def api_analyze(
    payload: AnalyzeRequest,
    user_id: str = Depends(get_user_id),
    app_settings: Settings = Depends(get_app_settings),
    llm: StructuredLLMClient = Depends(get_llm),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    store: AnalysisStore = Depends(get_analysis_store),
) -> AnalyzeResponse:
    """
    URL 群をまとめて分析するメインAPI。

    1) URL ごとに HTML 取得 → 本文抽出 → LLM 分析（並行）
    2) 成功分だけで全体戦略を LLM 生成
    3) 結果を保存してレスポンス

    全 URL が失敗した場合は AllAnalysesFailedError → 500（app.main のハンドラ）。
    """
    logger.info("[api.analyze] start user_id=%s urls=%s", user_id, len(payload.urls))

    ctx = PipelineContext(http_client=http_client, llm=llm, settings=app_settings)
    batch = await run_batch(payload.urls, ctx)

    record = await store.save(user_id, payload.urls, batch)

    logger.info(
        "[api.analyze] done analysis_id=%s results=%s strategy=%s",
        record.id,
        len(batch.results),
        "YES" if batch.overall_strategy else "NO",
    )

    return AnalyzeResponse(
        analysis_id=record.id,
        results=batch.results,
        overall_strategy=batch.overall_strategy,
        strategy_error=batch.strategy_error,
    )


@router.get("/analyses", response_model=AnalysisListResponse)
async def api_list_analyses(
    limit: int = Query(20, ge=1, le=100),
    user_id: str = Depends(get_user_id),
    store: AnalysisStore = Depends(get_analysis_store),
) -> AnalysisListResponse:
    """呼び出しユーザーの分析履歴（新しい順）。"""
    records = await store.list_for_user(user_id, limit=limit)
    return AnalysisListResponse(analyses=records)


async def _get_record_or_404(
    analysis_id: str,
    user_id: str,
    store: AnalysisStore,
) -> AnalysisRecord:
    record = await store.get(user_id, analysis_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return record


@router.get("/analyses/{analysis_id}", response_model=AnalysisRecord)
async def api_get_analysis(
    analysis_id: str,
    user_id: str = Depends(get_user_id),
    store: AnalysisStore = Depends(get_analysis_store),
) -> AnalysisRecord:
    return await _get_record_or_404(analysis_id, user_id, store)


@router.get("/analyses/{analysis_id}/calendar", response_model=CalendarResponse)
async def api_analysis_calendar(
    analysis_id: str,
    weeks: int = Query(DEFAULT_WEEKS, ge=1, le=12),
    seed: Optional[int] = Query(None),
    user_id: str = Depends(get_user_id),
    store: AnalysisStore = Depends(get_analysis_store),
) -> CalendarResponse:
    """
    保存済みの全体戦略からコンテンツカレンダーを生成する。
    seed を指定すると同じ結果が返る。
    """
    record = await _get_record_or_404(analysis_id, user_id, store)
    if record.overall_strategy is None:
        raise HTTPException(status_code=409, detail="Analysis has no overall strategy")

    rng = random.Random(seed) if seed is not None else None
    items = build_content_calendar(record.overall_strategy, weeks=weeks, rng=rng)

    logger.info("[api.calendar] analysis_id=%s weeks=%s items=%s", analysis_id, weeks, len(items))
    return CalendarResponse(analysis_id=analysis_id, weeks=weeks, items=items)
