# app/exceptions.py

import logging
from enum import Enum
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class APIErrorCode(str, Enum):
    """
    集中管理的 API 錯誤碼。
    前端依此決定要顯示提醒、重新同步或僅記錄。
    """

    # --- Client-side Errors (4xx) ---
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_STATE = "INVALID_STATE"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    MATCH_NOT_FOUND = "MATCH_NOT_FOUND"

    # --- Server-side Errors (5xx) ---
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"


class APIException(Exception):
    """
    自訂 API 例外的基底類別。
    提供預設的 status_code, code, 和 message，並允許在實例化時覆寫。
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: APIErrorCode = APIErrorCode.INTERNAL_SERVER_ERROR
    message: str = "An internal server error occurred."

    def __init__(self, message: str | None = None, code: APIErrorCode | None = None):
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def extra_content(self) -> dict:
        """附加到錯誤回應 JSON 的額外欄位，子類別可覆寫。"""
        return {}


class InvalidInputException(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    code = APIErrorCode.INVALID_INPUT
    message = "The provided input is invalid."


class InvalidStateError(APIException):
    """
    違反記錄前置條件 (例如在已三出局的局數新增打席、刪除唯一的打席)。

    原本這類操作會直接破壞狀態，這裡改為明確拋出並由呼叫端處理。
    """

    status_code = status.HTTP_409_CONFLICT
    code = APIErrorCode.INVALID_STATE
    message = "The requested change is not allowed in the current match state."


class PlayerNotFoundException(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    code = APIErrorCode.PLAYER_NOT_FOUND
    message = "The requested player could not be found."


class MatchNotFoundException(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    code = APIErrorCode.MATCH_NOT_FOUND
    message = "The requested match could not be found."


class ServiceUnavailableException(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = APIErrorCode.SERVICE_UNAVAILABLE
    message = "The service is temporarily unavailable."


class StorageError(APIException):
    """
    寫入儲存層失敗。屬於可恢復的錯誤：記憶體中的計算結果不會回滾，
    透過 `match` 屬性交給呼叫端，由呼叫端重新讀取儲存層以同步。
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = APIErrorCode.STORAGE_UNAVAILABLE
    message = "Failed to persist changes. Reload the match and try again."

    def __init__(self, message: str | None = None, match=None):
        super().__init__(message)
        self.match = match

    def extra_content(self) -> dict:
        # 回傳記憶體中已計算完成、但未寫入的比賽，讓前端可先顯示再重新同步
        if self.match is None:
            return {}
        return {"match": jsonable_encoder(self.match)}


# --- 全域例外處理器 ---


async def api_exception_handler(request: Request, exc: APIException):
    """
    攔截所有可預期的 APIException，記錄警告日誌，並回傳標準化的 JSON 錯誤回應。
    """
    logger.warning(
        f"API Exception Handled: "
        f"Status={exc.status_code}, "
        f"Code='{exc.code.value}', "
        f"Path='{request.url.path}', "
        f"Detail='{exc.message}'"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "code": exc.code.value,
            "message": exc.message,
            **exc.extra_content(),
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    攔截所有未預期的錯誤，記錄包含 Traceback 的錯誤日誌，並回傳通用的 500 錯誤。
    """
    logger.error(
        f"Unhandled Exception: {exc}",
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": APIErrorCode.INTERNAL_SERVER_ERROR.value,
            "message": "An unexpected error occurred on the server.",
        },
    )
