# app/graph/state.py

from __future__ import annotations

from dataclasses import dataclass

import httpx

from app.config import Settings
from services.llm_client import StructuredLLMClient


@dataclass
class PipelineContext:
    """
    1 リクエスト分のパイプラインが使う依存オブジェクト一式。
    グローバルなクライアントは持たず、ルート側で組み立てて渡す。

    - http_client: 全ブランチで共有する httpx.AsyncClient
    - llm: Analyzer / Strategist が使う LLM クライアント
    - settings: タイムアウトや同時実行数などのパラメータ
    """

    http_client: httpx.AsyncClient
    llm: StructuredLLMClient
    settings: Settings

    @property
    def branch_limit(self) -> int:
        """同時実行ブランチ数の上限（0 以下なら無制限）。"""
        return max(0, int(self.settings.max_concurrent_branches or 0))
