# tests/api/test_api_stats.py

import datetime

from fastapi.testclient import TestClient

from tests.factories import at_bat, history, member


def _seed(factories):
    factories.MatchFactory(
        id="m1",
        match_date=datetime.date(2025, 5, 4),
        members=[member("a", "甲", 1), member("b", "乙", 2)],
        stats={
            "a": history("a", at_bat(1, "single", at_bats=1, hits=1, rbis=1)),
            "b": history("b", at_bat(1, "walk", walks=1)),
        },
    )
    factories.MatchFactory(
        id="m2",
        match_date=datetime.date(2025, 6, 1),
        members=[member("a", "甲", 1)],
        stats={"a": history("a", at_bat(1, "double", at_bats=1, hits=1, doubles=1))},
    )


def test_get_player_stats_by_month(client: TestClient, factories, db_session):
    _seed(factories)
    db_session.commit()

    response = client.get(
        "/api/stats/players", params={"period": "month", "year": 2025, "month": 5}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["window"]["label"] == "2025年5月"
    assert body["window"]["match_count"] == 1
    assert {p["player_id"] for p in body["players"]} == {"a", "b"}


def test_get_player_stats_fiscal_year(client: TestClient, factories, db_session):
    _seed(factories)
    db_session.commit()

    response = client.get(
        "/api/stats/players", params={"period": "fiscal_year", "year": 2025}
    )

    body = response.json()
    assert body["window"]["start_date"] == "2025-04-01"
    assert body["window"]["end_date"] == "2026-03-31"
    player_a = next(p for p in body["players"] if p["player_id"] == "a")
    assert player_a["games"] == 2
    assert player_a["total_bases"] == 3


def test_get_rankings(client: TestClient, factories, db_session):
    _seed(factories)
    db_session.commit()

    response = client.get(
        "/api/stats/rankings",
        params={"period": "all", "category": ["hits", "rbis"]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["required_plate_appearances"] == 2
    assert [r["category"] for r in body["rankings"]] == ["hits", "rbis"]
    assert body["rankings"][0]["entries"] == [
        {"rank": 1, "player_id": "a", "name": "甲", "value": 2, "display": "2"}
    ]


def test_month_without_year_returns_400(client: TestClient):
    response = client.get("/api/stats/rankings", params={"period": "month", "month": 4})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


def test_invalid_period_returns_422(client: TestClient):
    response = client.get("/api/stats/rankings", params={"period": "week"})
    assert response.status_code == 422
