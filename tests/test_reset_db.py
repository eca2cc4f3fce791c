# tests/test_reset_db.py

import pytest
from sqlalchemy import inspect

import reset_db
from app import db as app_db


@pytest.fixture
def patched_engine(engine, monkeypatch):
    """讓維護腳本操作測試用的 engine，並略過日誌初始化。"""
    monkeypatch.setattr(reset_db, "engine", engine)
    monkeypatch.setattr(app_db, "engine", engine)
    monkeypatch.setattr(reset_db, "setup_logging", lambda: None)
    yield engine
    app_db.Base.metadata.drop_all(bind=engine)


def test_init_creates_tables(patched_engine):
    app_db.Base.metadata.drop_all(bind=patched_engine)

    assert reset_db.main(["init"]) == 0
    assert {"players", "matches"} <= set(inspect(patched_engine).get_table_names())


def test_reset_requires_confirmation(patched_engine):
    """未加 --yes 時不執行重設，並回傳非零結束碼。"""
    assert reset_db.main(["reset"]) == 1


def test_reset_clears_data(patched_engine, TestingSessionLocal):
    from app.models import PlayerDB

    app_db.Base.metadata.create_all(bind=patched_engine)
    session = TestingSessionLocal()
    session.add(PlayerDB(id="p1", name="王小明"))
    session.commit()
    session.close()

    assert reset_db.main(["reset", "--yes"]) == 0

    session = TestingSessionLocal()
    assert session.query(PlayerDB).count() == 0
    session.close()
