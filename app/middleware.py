# app/middleware.py

from typing import Callable, Awaitable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.utils.request_context import request_id_var, generate_request_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    為每個請求綁定 request_id，讓同一次記錄操作產生的日誌可以串在一起。
    前端若已帶 X-Request-ID 則沿用，否則產生新的。
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response
