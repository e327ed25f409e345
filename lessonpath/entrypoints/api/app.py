"""FastAPI アプリケーション

LessonPath バックエンド API。詳細画面のプレビュー、レビュー時のギャップ確認、
ラーニングパス表示、カレンダー書き出しから呼ばれる。

エンドポイント一覧:
  GET    /api/items/{id}/occurrences
  GET    /api/items/{id}/series
  GET    /api/items/{id}/chain
  GET    /api/items/{id}/gaps
  GET    /api/items/{id}/calendar-event
  GET    /api/items/{id}/reminders
  POST   /api/items/{id}/export
  GET    /api/calendar.ics
  GET    /api/links/resolve
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.responses import Response

from lessonpath.domain.errors import SourceLoadError
from lessonpath.entrypoints.api.routes import calendar, items
from lessonpath.logging_config import setup_logging

# ── ロギング初期化 ───────────────────────────────────────────────────────────
setup_logging()
logger = logging.getLogger(__name__)

# ── FastAPI アプリ ───────────────────────────────────────────────────────────
app = FastAPI(
    title="LessonPath API",
    description="レッスン・サービスの予定展開とカレンダー書き出し API",
    version="1.0.0",
)

# ── グローバル例外ミドルウェア ──────────────────────────────────────────────────
# CORSMiddleware より先に登録して内側に配置し、500/503 にも CORS ヘッダーを付ける


@app.middleware("http")
async def _catch_unhandled_exceptions(
    request: Request, call_next: Callable[[Request], Response]
) -> Response:
    try:
        return await call_next(request)
    except SourceLoadError as exc:
        logger.error("Source unavailable: %s %s - %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"detail": "Transaction source unavailable"},
        )
    except Exception as exc:
        logger.error(
            "Unhandled exception: %s %s - %s",
            request.method,
            request.url.path,
            exc,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


# ── CORS ────────────────────────────────────────────────────────────────────
# CORS_ORIGINS 環境変数でカンマ区切りの追加オリジンを指定可能
_extra_origins = [
    o.strip() for o in os.environ.get("CORS_ORIGINS", "").split(",") if o.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_extra_origins if _extra_origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# ── ルーター登録 ─────────────────────────────────────────────────────────────
_PREFIX = "/api"

app.include_router(items.router, prefix=_PREFIX)
app.include_router(calendar.router, prefix=_PREFIX)


@app.get("/health")
async def health() -> dict:
    """ヘルスチェックエンドポイント（Cloud Run の起動確認用）"""
    return {"status": "ok"}


logger.info("LessonPath API started")
