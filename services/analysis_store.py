# services/analysis_store.py

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from models.batch_models import AnalysisRecord, BatchResult

logger = logging.getLogger(__name__)


class AnalysisStore(Protocol):
    """
    分析結果の保存先インターフェース。
    ルートはこの 4 メソッドだけに依存する（ドキュメント DB 実装に差し替え可能）。
    """

    async def save(self, user_id: str, urls: List[str], batch: BatchResult) -> AnalysisRecord: ...

    async def list_for_user(self, user_id: str, limit: int = 20) -> List[AnalysisRecord]: ...

    async def get(self, user_id: str, analysis_id: str) -> Optional[AnalysisRecord]: ...

    async def latest(self, user_id: str) -> Optional[AnalysisRecord]: ...


class InMemoryAnalysisStore:
    """
    AnalysisStore のプロセス内メモリ実装。

    ユーザー ID は認証レイヤから渡される不透明な文字列として扱う。
    """

    def __init__(self) -> None:
        self._records: Dict[str, AnalysisRecord] = {}
        self._by_user: Dict[str, List[str]] = {}

    async def save(self, user_id: str, urls: List[str], batch: BatchResult) -> AnalysisRecord:
        record = AnalysisRecord(
            id=uuid.uuid4().hex,
            user_id=user_id,
            urls=list(urls),
            results=list(batch.results),
            overall_strategy=batch.overall_strategy,
            created_at=datetime.now(timezone.utc),
        )
        self._records[record.id] = record
        self._by_user.setdefault(user_id, []).append(record.id)

        logger.info("[analysis_store] saved id=%s user_id=%s urls=%s", record.id, user_id, len(urls))
        return record

    async def list_for_user(self, user_id: str, limit: int = 20) -> List[AnalysisRecord]:
        """新しい順に返す。"""
        ids = self._by_user.get(user_id, [])
        newest_first = [self._records[i] for i in reversed(ids)]
        return newest_first[:limit] if limit > 0 else newest_first

    async def get(self, user_id: str, analysis_id: str) -> Optional[AnalysisRecord]:
        record = self._records.get(analysis_id)
        # 他ユーザーのレコードは存在しないものとして扱う
        if record is None or record.user_id != user_id:
            return None
        return record

    async def latest(self, user_id: str) -> Optional[AnalysisRecord]:
        records = await self.list_for_user(user_id, limit=1)
        return records[0] if records else None
