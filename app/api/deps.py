# app/api/deps.py
from __future__ import annotations

from typing import AsyncIterator, Optional

import httpx
from fastapi import Depends, Header, Request

from app.config import Settings, settings
from services.analysis_store import AnalysisStore
from services.llm_client import StructuredLLMClient, build_llm_client

ANONYMOUS_USER = "anonymous"


def get_app_settings() -> Settings:
    return settings


def get_llm(app_settings: Settings = Depends(get_app_settings)) -> StructuredLLMClient:
    """リクエスト毎に LLM クライアントを組み立てる（API キー未設定ならここで失敗）。"""
    return build_llm_client(app_settings)


async def get_http_client(
    app_settings: Settings = Depends(get_app_settings),
) -> AsyncIterator[httpx.AsyncClient]:
    """1 リクエスト内の全ブランチで共有し、レスポンス後に閉じる。"""
    async with httpx.AsyncClient(timeout=app_settings.fetch_timeout) as client:
        yield client


def get_analysis_store(request: Request) -> AnalysisStore:
    return request.app.state.analysis_store


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """
    呼び出し元ユーザー ID。
    認証は前段（IdP / ゲートウェイ）の責務で、ここでは X-User-Id をそのまま使う。
    """
    return (x_user_id or "").strip() or ANONYMOUS_USER
