# models/batch_models.py

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from models.analysis_models import PerUrlResult
from models.base_models import CamelModel
from models.strategy_models import OverallStrategy


class BatchResult(CamelModel):
    """
    1 リクエスト分の最終結果。
    - results は入力 URL の順番どおり（完了順ではない）
    - overall_strategy は全滅時 / Strategist 失敗時に None
    """

    results: List[PerUrlResult] = Field(default_factory=list)
    overall_strategy: Optional[OverallStrategy] = None
    strategy_error: Optional[str] = None


class AnalysisRecord(CamelModel):
    """
    保存用の 1 件分。
    ストア側が持つのは「誰の」「どの URL の」「どの結果か」だけ。
    """

    id: str
    user_id: str
    urls: List[str] = Field(default_factory=list)
    results: List[PerUrlResult] = Field(default_factory=list)
    overall_strategy: Optional[OverallStrategy] = None
    created_at: datetime
