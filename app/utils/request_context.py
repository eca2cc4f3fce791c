# app/utils/request_context.py

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

# 當前 HTTP 請求的 request_id，由 RequestContextMiddleware 設定
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# 目前正在記錄成績的比賽 ID，供 JSON 日誌自動帶入
match_id_var: ContextVar[Optional[str]] = ContextVar("match_id", default=None)


def generate_request_id() -> str:
    """產生一個新的 UUID 作為 request_id。"""
    return str(uuid.uuid4())


@contextmanager
def bind_match(match_id: str) -> Iterator[None]:
    """在 with 區塊內將 match_id 綁定到日誌上下文，離開時還原。"""
    token = match_id_var.set(match_id)
    try:
        yield
    finally:
        match_id_var.reset(token)
