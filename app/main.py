# app/main.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import router as api_router
from app.config import settings
from app.errors import AllAnalysesFailedError, UnexpectedOrchestratorError
from app.logging_config import setup_logging
from models.analysis_models import FailedUrl
from services.analysis_store import AnalysisStore, InMemoryAnalysisStore

logger = logging.getLogger(__name__)

SERVICE_NAME = "content-strategy-advisor"


# --------- 例外ハンドラ ---------


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    # body 自体が無い / urls が無い・配列でない・空 → urls のエラーとして返す
    about_urls = any(
        "urls" in err.get("loc", ()) or tuple(err.get("loc", ())) == ("body",)
        for err in errors
    )
    message = "Invalid request: urls must be an array" if about_urls else "Invalid request"
    logger.warning("[api] invalid request path=%s errors=%s", request.url.path, len(errors))
    return JSONResponse(
        status_code=400,
        content={"error": message, "detail": jsonable_encoder(errors)},
    )


async def all_failed_handler(request: Request, exc: AllAnalysesFailedError) -> JSONResponse:
    failed = [FailedUrl.from_failure(f).model_dump() for f in exc.failures]
    logger.error("[api] all analyses failed urls=%s", len(failed))
    return JSONResponse(
        status_code=500,
        content={"error": "All analyses failed", "failedUrls": failed},
    )


async def orchestrator_error_handler(request: Request, exc: UnexpectedOrchestratorError) -> JSONResponse:
    logger.error("[api] orchestrator error: %s", exc)
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # ハンドラの無い例外も text/plain ではなく JSON で返す
    logger.exception("[api] unhandled error path=%s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": str(exc) or "Internal server error"},
    )


# --------- アプリ生成 ---------


def create_app(store: Optional[AnalysisStore] = None) -> FastAPI:
    setup_logging()

    app = FastAPI(title="Content Strategy Advisor")

    # 分析履歴の保存先（未指定ならプロセス内メモリ）
    app.state.analysis_store = store if store is not None else InMemoryAnalysisStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(AllAnalysesFailedError, all_failed_handler)
    app.add_exception_handler(UnexpectedOrchestratorError, orchestrator_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router, prefix="/api")

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "service": SERVICE_NAME}

    return app


app = create_app()
