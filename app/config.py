# app/config.py

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    コンテンツ戦略アドバイザーの設定。
    環境変数（大文字）または .env で上書きできる。
    """

    # ---------- OpenAI ----------
    # 未設定のまま /api/analyze を呼ぶと 500
    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1-mini"

    # 互換 API（Azure / プロキシ等）を使う場合のみ指定
    openai_base_url: str | None = None
    openai_timeout: float = 60.0

    # ---------- クロール ----------
    fetch_timeout: float = 10.0
    fetch_user_agent: str = "Mozilla/5.0 (compatible; content-strategy-advisor/0.1; +dev)"

    # ---------- 分析パイプライン ----------
    # LLM に渡す本文の最大文字数
    max_prompt_chars: int = 4000

    # 同時に走らせる URL ブランチ数の上限（0 で無制限）
    max_concurrent_branches: int = 5

    # ---------- App ----------
    # カンマ区切り
    cors_origins: str = "*"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
