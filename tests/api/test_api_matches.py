# tests/api/test_api_matches.py

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.crud import matches
from app.exceptions import APIErrorCode

MEMBERS = [
    {"id": "A", "name": "甲", "batting_order": 1},
    {"id": "B", "name": "乙", "batting_order": 2},
    {"id": "C", "name": "丙", "batting_order": 3},
    {"id": "S", "name": "板凳", "batting_order": None},
]


@pytest.fixture
def match_id(client: TestClient):
    response = client.post(
        "/api/matches",
        json={
            "id": "m1",
            "match_date": "2025-05-10",
            "opponent": "對手",
            "members": MEMBERS,
        },
    )
    assert response.status_code == 201
    return response.json()["id"]


def _record(client, match_id, player_id, outcome, inning=1, index=0, rbi=0):
    return client.put(
        f"/api/matches/{match_id}/at-bats",
        json={
            "player_id": player_id,
            "inning_number": inning,
            "at_bat_index": index,
            "outcome": outcome,
            "rbi": rbi,
        },
    )


def test_list_and_get_match(client: TestClient, match_id):
    response = client.get("/api/matches")
    assert response.status_code == 200
    assert [m["id"] for m in response.json()] == [match_id]

    match = client.get(f"/api/matches/{match_id}").json()
    assert match["opponent"] == "對手"
    assert match["stats"] == {}
    assert len(match["members"]) == 4


def test_get_match_not_found(client: TestClient):
    response = client.get("/api/matches/missing")
    assert response.status_code == 404
    assert response.json()["code"] == APIErrorCode.MATCH_NOT_FOUND.value


def test_record_outcome_scores_runner(client: TestClient, match_id):
    """A 一壘安打、B 全壘打：回應中列出得分跑者，比賽成績同步更新。"""
    assert _record(client, match_id, "A", "single").status_code == 200

    response = _record(client, match_id, "B", "homerun", rbi=2)

    assert response.status_code == 200
    body = response.json()
    assert body["scored_runners"] == ["A"]
    assert body["dropped_runs"] == []
    assert body["record"]["home_runs"] == 1
    assert body["match"]["stats"]["A"]["innings"][0]["runs"] == 1
    assert body["match"]["runners"]["1"] == {"1": [], "2": [], "3": []}


def test_clear_outcome(client: TestClient, match_id):
    _record(client, match_id, "A", "walk")

    response = _record(client, match_id, "A", None)

    assert response.status_code == 200
    assert response.json()["record"] is None
    assert "A" not in response.json()["match"]["stats"]


def test_invalid_outcome_value(client: TestClient, match_id):
    response = _record(client, match_id, "A", "grand-slam")
    assert response.status_code == 422


def test_storage_failure_returns_optimistic_match(client: TestClient, match_id):
    """寫入失敗回傳 503，並在回應中附上尚未寫入的比賽狀態。"""
    with patch.object(
        matches, "save_match", side_effect=OperationalError("UPDATE", {}, Exception())
    ):
        response = _record(client, match_id, "A", "double")

    assert response.status_code == 503
    body = response.json()
    assert body["code"] == APIErrorCode.STORAGE_UNAVAILABLE.value
    assert body["match"]["id"] == match_id
    assert body["match"]["stats"]["A"]["innings"][0]["doubles"] == 1
    assert body["match"]["runners"]["1"]["1"] == ["A"]

    # 儲存層維持原狀
    assert client.get(f"/api/matches/{match_id}").json()["stats"] == {}


def test_at_bat_precondition_returns_conflict(client: TestClient, match_id):
    """三出局後再新增打席，回傳 409 INVALID_STATE。"""
    for player_id in ("A", "B", "C"):
        _record(client, match_id, player_id, "out")

    response = client.post(
        f"/api/matches/{match_id}/at-bats",
        json={"player_id": "A", "inning_number": 1},
    )

    assert response.status_code == 409
    assert response.json()["code"] == APIErrorCode.INVALID_STATE.value


def test_add_and_remove_at_bat(client: TestClient, match_id):
    _record(client, match_id, "A", "single")

    response = client.post(
        f"/api/matches/{match_id}/at-bats",
        json={"player_id": "A", "inning_number": 1},
    )
    assert response.status_code == 201
    assert len(response.json()["stats"]["A"]["innings"]) == 2

    response = client.delete(f"/api/matches/{match_id}/at-bats/A/1/1")
    assert response.status_code == 200
    assert len(response.json()["stats"]["A"]["innings"]) == 1

    response = client.delete(f"/api/matches/{match_id}/at-bats/A/1/0")
    assert response.status_code == 409


def test_update_stolen_bases(client: TestClient, match_id):
    _record(client, match_id, "A", "single")

    response = client.patch(
        f"/api/matches/{match_id}/stolen-bases",
        json={"player_id": "A", "inning_number": 1, "delta": 2},
    )

    assert response.status_code == 200
    assert response.json()["stats"]["A"]["innings"][0]["stolen_bases"] == 2


def test_substitutes(client: TestClient, match_id):
    response = client.post(
        f"/api/matches/{match_id}/substitutes", json={"player_id": "S"}
    )
    assert response.status_code == 200
    assert response.json()["stats"]["S"]["is_substitute"] is True

    response = client.post(
        f"/api/matches/{match_id}/substitutes", json={"player_id": "A"}
    )
    assert response.status_code == 409

    _record(client, match_id, "S", "double", inning=2)
    response = client.delete(f"/api/matches/{match_id}/substitutes/S")
    assert response.status_code == 200
    assert "S" not in response.json()["stats"]


def test_update_members(client: TestClient, match_id):
    _record(client, match_id, "C", "single")

    response = client.put(
        f"/api/matches/{match_id}/members", json={"members": MEMBERS[:2]}
    )

    assert response.status_code == 200
    assert "C" not in response.json()["stats"]


def test_player_totals_and_inning_status(client: TestClient, match_id):
    _record(client, match_id, "A", "double")
    _record(client, match_id, "B", "sacrifice-fly")

    totals = client.get(f"/api/matches/{match_id}/players/A/totals").json()
    assert totals["doubles"] == 1
    assert totals["slugging_percentage"] == 2.0

    status = client.get(f"/api/matches/{match_id}/innings/1").json()
    assert status["outs"] == 1
    assert status["runners"]["1"] == ["A"]
    assert status["can_add_at_bat"]["C"] is True


def test_delete_match(client: TestClient, match_id):
    assert client.delete(f"/api/matches/{match_id}").status_code == 204
    assert client.get(f"/api/matches/{match_id}").status_code == 404
