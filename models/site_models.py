# models/site_models.py

from __future__ import annotations

from pydantic import Field

from models.base_models import CamelModel


class ExtractedContent(CamelModel):
    """
    1ページ分の抽出結果。
    HTML から決定的に生成される中間モデルで、永続化はしない。
    """

    title: str
    # script/style を除去し、空白を正規化した本文テキスト
    plain_text: str = ""
    word_count: int = Field(0, ge=0)
