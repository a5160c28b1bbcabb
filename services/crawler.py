# services/crawler.py

from __future__ import annotations

import logging
from urllib.parse import urlparse

import httpx

from app.errors import EmptyContentError, FetchError, InvalidUrlError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; content-strategy-advisor/0.1; +dev)"

ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
ACCEPT_LANGUAGE = "en-US,en;q=0.5"


def build_headers(user_agent: str = DEFAULT_USER_AGENT) -> dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": ACCEPT,
        "Accept-Language": ACCEPT_LANGUAGE,
    }


def validate_url(url: str) -> str:
    """
    ネットワークに出る前に URL の形式だけ検証する。
    http/https 以外、ホスト無し、httpx が解釈できない URL は InvalidUrlError。
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidUrlError(str(url))

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError as e:
        # "http://[::1" のような壊れた IPv6 ホスト
        raise InvalidUrlError(url) from e

    if parsed.scheme not in ("http", "https") or not parsed.netloc or not hostname:
        raise InvalidUrlError(url)

    try:
        httpx.URL(url)
    except httpx.InvalidURL as e:
        raise InvalidUrlError(url) from e

    return url


async def fetch_html(
    url: str,
    client: httpx.AsyncClient,
    *,
    timeout: float = 10.0,
    user_agent: str = DEFAULT_USER_AGENT,
) -> str:
    """
    単純な GET だけのクロール。リトライはしない。
    （1 URL の失敗はその URL のブランチだけを失敗させる）

    - URL 形式が不正     → InvalidUrlError（通信しない）
    - 接続 / DNS / タイムアウト → NetworkError
    - 2xx 以外           → FetchError(status)
    - 本文が空           → EmptyContentError
    """
    validate_url(url)

    logger.info("[crawler] GET %s", url)
    try:
        resp = await client.get(
            url,
            headers=build_headers(user_agent),
            timeout=timeout,
            follow_redirects=True,
        )
    except httpx.TransportError as e:
        logger.warning("[crawler] transport error url=%s error=%r", url, e)
        raise NetworkError(url, str(e) or e.__class__.__name__) from e

    if not resp.is_success:
        logger.warning(
            "[crawler] non-2xx url=%s status=%s body_snippet=%r",
            url,
            resp.status_code,
            resp.text[:200],
        )
        raise FetchError(url, resp.status_code, resp.reason_phrase)

    html = resp.text
    logger.info(
        "[crawler] fetched url=%s status=%s content_type=%s length=%s",
        url,
        resp.status_code,
        resp.headers.get("content-type"),
        len(html),
    )

    if not html.strip():
        raise EmptyContentError(url)

    return html
