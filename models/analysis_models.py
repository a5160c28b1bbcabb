# models/analysis_models.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, List, Literal, Union

from pydantic import Field

from models.base_models import CamelModel, LooseText, LooseTextList


# -----------------------------------------
# LLM が返す構造化分析（1 URL 分）
# -----------------------------------------


class AnalysisSummary(CamelModel):
    overview: LooseText = ""
    strengths: LooseTextList = Field(default_factory=list)
    weaknesses: LooseTextList = Field(default_factory=list)


class SeoAnalysis(CamelModel):
    score: LooseText = ""
    recommendations: LooseTextList = Field(default_factory=list)


class ContentQuality(CamelModel):
    score: LooseText = ""
    suggestions: LooseTextList = Field(default_factory=list)


class PageStrategy(CamelModel):
    target_audience: LooseText = ""
    content_gaps: LooseTextList = Field(default_factory=list)
    action_items: LooseTextList = Field(default_factory=list)


class StructuredAnalysis(CamelModel):
    """
    Per-URL Analyzer の出力。
    各リストの並び順は LLM の出力順そのまま（表示順以上の意味は持たない）。
    """

    summary: AnalysisSummary = Field(default_factory=AnalysisSummary)
    seo_analysis: SeoAnalysis = Field(default_factory=SeoAnalysis)
    content_quality: ContentQuality = Field(default_factory=ContentQuality)
    strategy: PageStrategy = Field(default_factory=PageStrategy)


# -----------------------------------------
# URL 単位の結果（success / error のタグ付きユニオン）
# -----------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentOverview(CamelModel):
    title: str
    word_count: int = Field(0, ge=0)


class UrlAnalysisSuccess(CamelModel):
    url: str
    status: Literal["success"] = "success"
    content: ContentOverview
    analysis: StructuredAnalysis
    analyzed_at: datetime = Field(default_factory=_utcnow)


class UrlAnalysisFailure(CamelModel):
    url: str
    status: Literal["error"] = "error"
    error: str
    analyzed_at: datetime = Field(default_factory=_utcnow)


PerUrlResult = Annotated[
    Union[UrlAnalysisSuccess, UrlAnalysisFailure],
    Field(discriminator="status"),
]


class FailedUrl(CamelModel):
    """All analyses failed の時にレスポンスへ載せる URL 単位の内訳。"""

    url: str
    error: str

    @classmethod
    def from_failure(cls, failure: UrlAnalysisFailure) -> "FailedUrl":
        return cls(url=failure.url, error=failure.error)


def split_results(
    results: List[Union[UrlAnalysisSuccess, UrlAnalysisFailure]],
) -> tuple[List[UrlAnalysisSuccess], List[UrlAnalysisFailure]]:
    """結果リストを成功 / 失敗に分割する（それぞれ入力順を維持）。"""
    successes: List[UrlAnalysisSuccess] = []
    failures: List[UrlAnalysisFailure] = []
    for r in results:
        if isinstance(r, UrlAnalysisSuccess):
            successes.append(r)
        else:
            failures.append(r)
    return successes, failures
