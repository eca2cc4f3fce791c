# app/api/system.py

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db import get_db
from app.exceptions import ServiceUnavailableException
from app.services.match_feed import redis_client

router = APIRouter(
    prefix="/api/system",
    tags=["System"],
    responses={404: {"description": "Not found"}},
)


@router.get("/health", status_code=status.HTTP_200_OK)
def health_check(db: Session = Depends(get_db)):
    """
    執行健康檢查，包含對資料庫與 Redis (若有設定) 的連線測試。
    """
    results = {}
    try:
        db.execute(text("SELECT 1"))
        results["database"] = "ok"
    except SQLAlchemyError as e:
        logging.error(f"Health check failed: Database connection error - {e}")
        raise ServiceUnavailableException(message=f"Database connection error: {e}")

    if redis_client:
        try:
            redis_client.ping()
            results["redis"] = "ok"
        except Exception as e:
            logging.error(f"Health check failed: Redis connection error - {e}")
            raise ServiceUnavailableException(message=f"Redis connection error: {e}")
    else:
        results["redis"] = "not configured"

    results["status"] = "ok"
    return results
