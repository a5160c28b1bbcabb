# services/html_parser.py

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup

from models.site_models import ExtractedContent

logger = logging.getLogger(__name__)

# 本文から落とすタグ
STRIP_TAGS = ["script", "style", "noscript"]

_WHITESPACE_RE = re.compile(r"\s+")


def _normalize_whitespace(text: str) -> str:
    """改行・タブを含む連続空白を 1 つのスペースにまとめて前後を trim する。"""
    return _WHITESPACE_RE.sub(" ", text).strip()


def _resolve_title(soup: BeautifulSoup, url: str) -> str:
    """
    タイトルの決定順:
      <title> → 最初の <h1> → URL
    どれも空ならURLを返すので、空文字になることはない。
    """
    if soup.title:
        title = _normalize_whitespace(soup.title.get_text())
        if title:
            return title

    h1 = soup.find("h1")
    if h1:
        h1_text = _normalize_whitespace(h1.get_text(separator=" "))
        if h1_text:
            return h1_text

    return url


def _extract_main_text(soup: BeautifulSoup) -> str:
    """script/style 等を除去して <body> の本文テキストを抽出する。"""
    for tag in soup(STRIP_TAGS):
        tag.decompose()

    # html.parser は断片 HTML に <body> を補わないので、その場合は <head> を除いた文書全体を使う
    root = soup.body
    if root is None:
        for tag in soup(["head", "title"]):
            tag.decompose()
        root = soup
    text = root.get_text(separator=" ", strip=True)
    return _normalize_whitespace(text)


def count_words(text: str) -> int:
    """空白区切りのトークン数。空文字は 0 語として扱う。"""
    return len(text.split())


def parse_html(url: str, html: str) -> ExtractedContent:
    """
    HTML文字列を解析して ExtractedContent を生成する。
    ※ ここではネットワークアクセスは行わない（fetch_html で取得済み前提）
    """
    soup = BeautifulSoup(html, "html.parser")

    title = _resolve_title(soup, url)
    plain_text = _extract_main_text(soup)

    content = ExtractedContent(
        title=title,
        plain_text=plain_text,
        word_count=count_words(plain_text),
    )
    logger.debug(
        "[html_parser] url=%s title=%r words=%s",
        url,
        content.title,
        content.word_count,
    )
    return content
