# services/llm_client.py

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional

import openai
from openai import AsyncOpenAI

from app.config import Settings
from app.errors import (
    JSONParseError,
    LLMResponseError,
    LLMTransportError,
    UnexpectedOrchestratorError,
)

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1-mini"


class StructuredLLMClient:
    """
    function calling（tools + tool_choice 固定）で JSON を返させる薄いラッパ。

    モジュールレベルのシングルトンにはせず、リクエスト毎に組み立てて
    オーケストレータへ渡す（テストではフェイクに差し替える）。
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.3,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature

    async def call_function(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        function: Dict[str, Any],
        caller: str = "llm",
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        指定した function schema で 1 回だけ呼び出し、引数 JSON を dict で返す。
        リトライはしない（呼び出し側で必要ならラップする）。
        """
        name = function["name"]
        t0 = time.monotonic()

        logger.info("[llm] call start caller=%s model=%s function=%s", caller, self.model, name)
        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                tools=[{"type": "function", "function": function}],
                tool_choice={"type": "function", "function": {"name": name}},
                temperature=self.temperature if temperature is None else temperature,
            )
        except openai.APIError as e:
            logger.warning("[llm] transport error caller=%s error=%r", caller, e)
            raise LLMTransportError(f"LLM request failed ({caller}): {e}") from e

        elapsed_ms = int((time.monotonic() - t0) * 1000)
        usage = getattr(resp, "usage", None)
        logger.info(
            "[llm] call done caller=%s duration_ms=%s total_tokens=%s",
            caller,
            elapsed_ms,
            getattr(usage, "total_tokens", None) if usage else None,
        )

        arguments = _extract_arguments(resp, name)

        try:
            data = json.loads(arguments)
        except json.JSONDecodeError as e:
            logger.error(
                "[llm] JSON parse error caller=%s error=%s content=%r",
                caller,
                e,
                arguments[:2000],
            )
            raise JSONParseError(f"LLM returned invalid JSON ({caller}): {e}") from e

        if not isinstance(data, dict):
            raise JSONParseError(f"LLM returned non-object JSON ({caller})")

        return data


def _extract_arguments(resp: Any, function_name: str) -> str:
    """レスポンスから function call の arguments 文字列を取り出す。"""
    choices = getattr(resp, "choices", None) or []
    if not choices:
        raise LLMResponseError("LLM response contained no choices")

    message = choices[0].message
    for call in getattr(message, "tool_calls", None) or []:
        fn = getattr(call, "function", None)
        if fn is not None and fn.name == function_name and fn.arguments:
            return fn.arguments

    raise LLMResponseError(f"LLM response did not include a '{function_name}' function call")


def build_llm_client(settings: Settings) -> StructuredLLMClient:
    """
    Settings から StructuredLLMClient を組み立てる。
    OPENAI_API_KEY 未設定はバッチ全体のエラー（URL 単位ではない）。
    """
    if not settings.openai_api_key:
        logger.error("[llm] OPENAI_API_KEY is not configured")
        raise UnexpectedOrchestratorError("OpenAI API key is not configured")

    client = AsyncOpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url or None,
        timeout=settings.openai_timeout,
    )
    return StructuredLLMClient(client, model=settings.openai_model or DEFAULT_MODEL)
