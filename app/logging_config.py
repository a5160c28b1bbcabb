# app/logging_config.py

from __future__ import annotations

import logging

from app.config import settings

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# 通信ライブラリのログはリクエスト毎に大量に出るので絞る
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "openai._base_client")


def setup_logging(level: str | None = None) -> None:
    """
    ルートロガーにコンソールハンドラを 1 つだけ付ける。
    uvicorn のリロード等で複数回呼ばれても重複しないようにしている。
    """
    level_name = (level or settings.log_level or "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    if not any(getattr(h, "_advisor_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        handler._advisor_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    root.setLevel(log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
