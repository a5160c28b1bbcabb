# agents/parser_agent.py

from __future__ import annotations

import logging

import httpx

from models.site_models import ExtractedContent
from services.crawler import DEFAULT_USER_AGENT, fetch_html
from services.html_parser import parse_html

logger = logging.getLogger(__name__)


async def fetch_and_extract(
    url: str,
    client: httpx.AsyncClient,
    *,
    timeout: float = 10.0,
    user_agent: str = DEFAULT_USER_AGENT,
) -> ExtractedContent:
    """
    URL の HTML を取得し、ExtractedContent に変換する。

    以前の同期版と違い、失敗時のフォールバック構造は作らない。
    例外はそのまま上げて、呼び出し側（ブランチ）で error 結果に変換する。
    """
    logger.info("[parser_agent] Fetching HTML: %s", url)

    # ----- 1) HTML を取得 -----
    html = await fetch_html(url, client, timeout=timeout, user_agent=user_agent)

    # ----- 2) BeautifulSoup で本文抽出 -----
    content = parse_html(url, html)

    logger.info(
        "[parser_agent] Parsed successfully: %s (title=%s, words=%s)",
        url,
        content.title,
        content.word_count,
    )
    return content
