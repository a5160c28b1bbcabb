# models/calendar_models.py

from __future__ import annotations

import datetime as dt

from models.base_models import CamelModel


class ContentCalendarItem(CamelModel):
    """OverallStrategy から生成するカレンダーの 1 件（描画はフロント側の責務）。"""

    id: str
    title: str
    description: str
    content_type: str
    date: dt.date
    audience: str
    focus: str
