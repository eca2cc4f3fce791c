# app/main.py

import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.db import init_db
from app.logging_config import setup_logging
from app.api import matches, players, stats, system

from app.middleware import RequestContextMiddleware
from app.exceptions import (
    APIException,
    api_exception_handler,
    unhandled_exception_handler,
)

# 匯入模型，確保 init_db 時所有資料表都已註冊到 Base.metadata
from app import models  # noqa: F401

logger = logging.getLogger(__name__)


# --- FastAPI 應用程式設定 ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("應用程式啟動中...")
    init_db()
    yield
    logger.info("應用程式正在關閉...")


app = FastAPI(title="Softball Stats", lifespan=lifespan)

# --- 掛載所有 Middleware ---
# RequestContextMiddleware 放在最前面，讓後續所有日誌都帶有 request_id
app.add_middleware(RequestContextMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- 掛載全域例外處理器 ---
app.add_exception_handler(APIException, api_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


# --- 掛載所有 API 路由 ---
app.include_router(players.router)
app.include_router(matches.router)
app.include_router(stats.router)
app.include_router(system.router)
