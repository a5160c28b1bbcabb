# services/calendar_planner.py

from __future__ import annotations

import logging
import random
import re
from datetime import date, timedelta
from typing import List, Optional, Sequence

from models.calendar_models import ContentCalendarItem
from models.strategy_models import OverallStrategy

logger = logging.getLogger(__name__)

DEFAULT_WEEKS = 4

# リストが空の場合の埋め草
FALLBACK_TOPIC = "your core topics"
FALLBACK_AUDIENCE = "your audience"
FALLBACK_NEED = "their most common questions"

TITLE_TEMPLATES = (
    "The Ultimate Guide to {topic} for {audience}",
    "How {audience} Can Master {topic}",
    "{topic}: A Complete {content_type} Guide",
    "{topic} Strategies That Work for {audience}",
    "Why {audience} Should Care About {topic}",
)


def _pick(rng: random.Random, values: Sequence[str], fallback: str) -> str:
    candidates = [v for v in values if v and v.strip()]
    return rng.choice(candidates) if candidates else fallback


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "content"


def build_title(rng: random.Random, topic: str, content_type: str, audience: str) -> str:
    template = rng.choice(TITLE_TEMPLATES)
    return template.format(topic=topic, content_type=content_type, audience=audience)


def build_description(topic: str, need: str, focus: str) -> str:
    return (
        f"A comprehensive {focus or 'piece'} that addresses {need} by exploring {topic}. "
        "This content piece will provide valuable insights and actionable strategies for our audience."
    )


def build_content_calendar(
    strategy: OverallStrategy,
    *,
    weeks: int = DEFAULT_WEEKS,
    start: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> List[ContentCalendarItem]:
    """
    OverallStrategy の recommendations.contentCalendar から、
    weeks 週分のカレンダー項目を生成する。

    - 各週 × 各枠ごとに 1 件、その週のどこか（0〜6 日目）に配置する
    - トピック / 読者 / ニーズは topicClusters, primaryAudiences, audienceNeeds から選ぶ
    - rng を渡せば結果は決定的になる（テスト用）
    """
    rng = rng or random.Random()
    start = start or date.today()

    slots = strategy.recommendations.content_calendar
    if not slots or weeks <= 0:
        logger.info("[calendar] nothing to plan slots=%s weeks=%s", len(slots), weeks)
        return []

    topics = strategy.recommendations.topic_clusters
    audiences = strategy.audience_analysis.primary_audiences
    needs = strategy.audience_analysis.audience_needs

    items: List[ContentCalendarItem] = []
    for week in range(weeks):
        for index, slot in enumerate(slots):
            content_type = slot.content_type or "Article"
            topic = _pick(rng, topics, FALLBACK_TOPIC)
            audience = _pick(rng, audiences, FALLBACK_AUDIENCE)
            need = _pick(rng, needs, FALLBACK_NEED)

            items.append(
                ContentCalendarItem(
                    id=f"w{week + 1}-{index + 1}-{_slug(content_type)}",
                    title=build_title(rng, topic, content_type, audience),
                    description=build_description(topic, need, slot.focus),
                    content_type=content_type,
                    date=start + timedelta(days=week * 7 + rng.randint(0, 6)),
                    audience=audience,
                    focus=slot.focus,
                )
            )

    items.sort(key=lambda item: item.date)
    logger.info("[calendar] planned items=%s weeks=%s slots=%s", len(items), weeks, len(slots))
    return items
