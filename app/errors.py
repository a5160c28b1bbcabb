# app/errors.py

from __future__ import annotations

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from models.analysis_models import UrlAnalysisFailure


class AdvisorError(Exception):
    """パイプライン内で発生する想定内エラーの基底クラス。"""


# ---------- クロール ----------


class InvalidUrlError(AdvisorError):
    def __init__(self, url: str):
        super().__init__(f"Invalid URL format: {url}")
        self.url = url


class NetworkError(AdvisorError):
    def __init__(self, url: str, reason: str):
        super().__init__(f"Network error while fetching {url}: {reason}")
        self.url = url


class FetchError(AdvisorError):
    """2xx 以外のステータスが返ってきた場合。"""

    def __init__(self, url: str, status_code: int, reason_phrase: str = ""):
        message = f"Failed to fetch {url}: {status_code} {reason_phrase}".rstrip()
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.reason_phrase = reason_phrase


class EmptyContentError(AdvisorError):
    def __init__(self, url: str):
        super().__init__(f"Empty response from {url}")
        self.url = url


# ---------- LLM ----------


class LLMTransportError(AdvisorError):
    """OpenAI への接続・タイムアウト・API エラー。"""


class LLMResponseError(AdvisorError):
    """レスポンスに function call の結果が含まれていない。"""


class JSONParseError(AdvisorError):
    """function call の引数が JSON として、または期待する形として読めない。"""


# ---------- バッチ全体 ----------


class AllAnalysesFailedError(AdvisorError):
    """全 URL の分析に失敗した（Strategy Aggregator は呼ばない）。"""

    def __init__(self, failures: Optional[List["UrlAnalysisFailure"]] = None):
        super().__init__("All analyses failed")
        self.failures = list(failures or [])


class UnexpectedOrchestratorError(AdvisorError):
    """API キー未設定など、個別 URL に帰属しないエラー。"""
