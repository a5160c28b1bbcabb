# models/strategy_models.py

from __future__ import annotations

from typing import List

from pydantic import Field

from models.base_models import CamelModel, LooseText, LooseTextList


# ---------- contentAudit ----------


class ContentTypeUsage(CamelModel):
    type: LooseText = ""
    frequency: LooseText = ""
    effectiveness: LooseText = ""


class WritingStyle(CamelModel):
    style: LooseText = ""
    usage: LooseText = ""
    impact: LooseText = ""


class ContentAudit(CamelModel):
    content_types: List[ContentTypeUsage] = Field(default_factory=list)
    writing_styles: List[WritingStyle] = Field(default_factory=list)


# ---------- audienceAnalysis ----------


class AudienceAnalysis(CamelModel):
    primary_audiences: LooseTextList = Field(default_factory=list)
    audience_needs: LooseTextList = Field(default_factory=list)
    engagement_patterns: LooseText = ""


# ---------- contentGaps ----------


class ContentGap(CamelModel):
    topic: LooseText = ""
    opportunity: LooseText = ""
    priority: LooseText = ""


# ---------- recommendations ----------


class CalendarSlot(CamelModel):
    """
    コンテンツカレンダーの 1 枠。
    例: contentType="How-to Guide", frequency="Weekly", focus="tutorial"
    """
    content_type: LooseText = ""
    frequency: LooseText = ""
    focus: LooseText = ""


class StrategyRecommendations(CamelModel):
    content_mix: LooseText = ""
    topic_clusters: LooseTextList = Field(default_factory=list)
    content_calendar: List[CalendarSlot] = Field(default_factory=list)


# ---------- brandVoice / actionPlan ----------


class BrandVoice(CamelModel):
    current_tone: LooseText = ""
    consistency_score: LooseText = ""
    improvements: LooseTextList = Field(default_factory=list)


class ActionPlanItem(CamelModel):
    action: LooseText = ""
    timeline: LooseText = ""
    expected_impact: LooseText = ""


class OverallStrategy(CamelModel):
    """
    成功した URL 群をまとめて LLM に渡して得る、バッチ全体のコンテンツ戦略。
    1 バッチにつき 1 回だけ生成する。
    """

    content_audit: ContentAudit = Field(default_factory=ContentAudit)
    audience_analysis: AudienceAnalysis = Field(default_factory=AudienceAnalysis)
    content_gaps: List[ContentGap] = Field(default_factory=list)
    recommendations: StrategyRecommendations = Field(default_factory=StrategyRecommendations)
    brand_voice: BrandVoice = Field(default_factory=BrandVoice)
    action_plan: List[ActionPlanItem] = Field(default_factory=list)
