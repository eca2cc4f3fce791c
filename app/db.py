# app/db.py

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from .config import settings

logger = logging.getLogger(__name__)

# SQLite 需要關閉同執行緒檢查，才能在 FastAPI 的執行緒池中共用連線
_connect_args = (
    {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
)

engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """依照已註冊到 Base.metadata 的模型建立所有資料表。"""
    logger.info("正在建立資料表...")
    Base.metadata.create_all(bind=engine)
    logger.info("資料表建立完成。")
