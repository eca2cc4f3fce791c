# tests/conftest.py

import os

# 必須在匯入任何 app 模組之前設定，讓全域 settings 指向測試環境
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["LOG_TO_FILE"] = "false"
os.environ.pop("REDIS_URL", None)

import logging.config  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402


@pytest.fixture(scope="session")
def engine():
    """建立並提供一個 session-scope 的 SQLAlchemy engine，指向記憶體中的 SQLite。"""
    return create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture(scope="session")
def TestingSessionLocal(engine):
    """根據測試 engine 建立 sessionmaker。"""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def test_settings():
    """提供一份與預設值相同、可在測試中自由修改的設定。"""
    from app.config import Settings

    return Settings(DATABASE_URL="sqlite:///:memory:", LOG_TO_FILE=False)


@pytest.fixture
def factories(db_session):
    """
    提供一個已設定好資料庫 session 的工廠模組。
    測試函式應明確請求此 fixture 來使用 factory-boy。
    """
    from tests import factories as factories_module

    for factory_class in factories_module.MODEL_FACTORIES:
        factory_class._meta.sqlalchemy_session = db_session
    yield factories_module
    for factory_class in factories_module.MODEL_FACTORIES:
        factory_class._meta.sqlalchemy_session = None


# --- 資料庫 Fixture ---


@pytest.fixture(scope="function")
def setup_database(engine):
    """
    在每個測試函式執行前後，自動建立和銷毀所有資料庫資料表。
    """
    from app.db import Base
    from app import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(TestingSessionLocal, setup_database):
    """
    提供一個資料庫 session 給需要直接操作資料庫的測試。
    """
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# --- 即時同步 Fixture ---


@pytest.fixture
def feed_snapshots():
    """
    訂閱比賽與名單的變更通知，回傳收到的快照；測試結束後自動取消訂閱。
    """
    from app.services.match_feed import match_feed, player_feed

    received = {"matches": [], "players": []}
    unsubscribe_matches = match_feed.subscribe(received["matches"].append)
    unsubscribe_players = player_feed.subscribe(received["players"].append)
    yield received
    unsubscribe_matches()
    unsubscribe_players()


# --- FastAPI 應用程式 Fixture ---


@pytest.fixture(scope="function")
def client(monkeypatch, TestingSessionLocal, setup_database):
    """
    提供一個 FastAPI TestClient。
    """
    from app.main import app
    from app.db import get_db

    monkeypatch.setattr(logging.config, "dictConfig", lambda *args, **kwargs: None)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
