# tests/crud/test_crud_players.py

from app import models
from app.crud import players
from app.schemas import Player


def test_save_player_creates_and_updates(db_session):
    """save_player 在球員不存在時新增，存在時更新姓名與打順。"""
    db = db_session

    players.save_player(db, Player(id="p1", name="測試員A", batting_order=3))
    db.commit()
    assert db.query(models.PlayerDB).count() == 1

    players.save_player(db, Player(id="p1", name="測試員A2", batting_order=None))
    db.commit()

    player = players.load_player(db, "p1")
    assert player.name == "測試員A2"
    assert player.batting_order is None
    assert db.query(models.PlayerDB).count() == 1


def test_load_player_not_found(db_session):
    assert players.load_player(db_session, "missing") is None


def test_load_all_players_sorted_by_batting_order(factories, db_session):
    factories.PlayerFactory(id="bench", name="板凳", batting_order=None)
    factories.PlayerFactory(id="cleanup", name="四棒", batting_order=4)
    factories.PlayerFactory(id="leadoff", name="首棒", batting_order=1)

    result = players.load_all_players(db_session)

    assert [p.id for p in result] == ["leadoff", "cleanup", "bench"]


def test_delete_player(factories, db_session):
    factories.PlayerFactory(id="p1")

    assert players.delete_player(db_session, "p1") is True
    assert players.load_player(db_session, "p1") is None
    assert players.delete_player(db_session, "p1") is False


def test_factories_write_through_test_session(factories, db_session):
    """每個具體工廠都綁定到同一個測試 session，建立的資料可直接查詢。"""
    factories.PlayerFactory(id="f1")
    factories.MatchFactory(id="fm1")

    assert db_session.get(models.PlayerDB, "f1") is not None
    assert db_session.get(models.MatchDB, "fm1") is not None
