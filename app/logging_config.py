# app/logging_config.py

import logging.config
from pathlib import Path
from pythonjsonlogger.json import JsonFormatter

from app.config import settings
from app.utils.request_context import match_id_var, request_id_var


class ScoringJsonFormatter(JsonFormatter):
    """在每一筆 JSON 日誌中加入目前綁定的 request_id 與 match_id。"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        request_id = request_id_var.get()
        if request_id:
            log_record["request_id"] = request_id
        match_id = match_id_var.get()
        if match_id:
            log_record["match_id"] = match_id


BASE_DIR = Path(__file__).parent.parent
LOG_DIR = BASE_DIR / "logs"


def build_logging_config(level: str = "INFO", log_to_file: bool = True) -> dict:
    """產生 dictConfig 用的設定字典。"""
    handlers = {
        "console": {
            "level": level,
            "class": "logging.StreamHandler",
            "formatter": "json",
        },
    }
    if log_to_file:
        handlers["file"] = {
            "level": level,
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "standard",
            "filename": LOG_DIR / "app.log",
            "maxBytes": 1024 * 1024 * 5,  # 5 MB
            "backupCount": 3,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - [%(levelname)s] - %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "app.logging_config.ScoringJsonFormatter",
                "rename_fields": {
                    "asctime": "timestamp",
                    "levelname": "level",
                    "name": "logger_name",
                },
                "datefmt": "%Y-%m-%dT%H:%M:%S%z",
            },
        },
        "handlers": handlers,
        "root": {
            "handlers": list(handlers),
            "level": level,
        },
    }


def setup_logging():
    """
    套用全域日誌設定。
    啟用檔案輸出時，會先確保日誌目錄存在。
    """
    if settings.LOG_TO_FILE:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(
        build_logging_config(settings.LOG_LEVEL, settings.LOG_TO_FILE)
    )
