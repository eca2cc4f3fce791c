# tests/services/test_rankings.py

import datetime

import pytest
from freezegun import freeze_time

from app.core.constants import RankingCategory, StatsPeriod
from app.exceptions import InvalidInputException
from app.schemas import AggregatedPlayerStat, AtBatRecord, Match, PlayerInningHistory
from app.services import rankings


def _stat(player_id, **fields):
    return AggregatedPlayerStat(player_id=player_id, name=player_id, **fields)


def _match(match_id, day, stats=None):
    return Match(
        id=match_id,
        match_date=day,
        opponent="對手",
        stats=stats or {},
    )


# --- 統計區間 ---


@pytest.mark.parametrize(
    "day, expected",
    [
        (datetime.date(2025, 3, 31), 2024),
        (datetime.date(2025, 4, 1), 2025),
        (datetime.date(2025, 12, 31), 2025),
        (datetime.date(2026, 1, 15), 2025),
    ],
)
def test_fiscal_year_of(day, expected):
    assert rankings.fiscal_year_of(day) == expected


def test_resolve_window_month():
    start, end, label = rankings.resolve_window(StatsPeriod.MONTH, year=2024, month=2)
    assert start == datetime.date(2024, 2, 1)
    assert end == datetime.date(2024, 2, 29)
    assert label == "2024年2月"


@freeze_time("2026-02-10")
def test_resolve_window_defaults_to_today():
    """未指定年月時，以今天所在的月份或年度為準。"""
    assert rankings.resolve_window(StatsPeriod.MONTH)[2] == "2026年2月"

    start, end, label = rankings.resolve_window(StatsPeriod.FISCAL_YEAR)
    assert start == datetime.date(2025, 4, 1)
    assert end == datetime.date(2026, 3, 31)
    assert label == "2025年度"


def test_resolve_window_all():
    assert rankings.resolve_window(StatsPeriod.ALL) == (None, None, "全部")


@pytest.mark.parametrize(
    "year, month",
    [(None, 5), (2025, 13), (2025, 0)],
    ids=["month-without-year", "month-too-large", "month-zero"],
)
def test_resolve_window_invalid_month(year, month):
    with pytest.raises(InvalidInputException):
        rankings.resolve_window(StatsPeriod.MONTH, year=year, month=month)


def test_build_window_filters_matches():
    matches = [
        _match("m1", datetime.date(2025, 3, 30)),
        _match("m2", datetime.date(2025, 4, 1)),
        _match("m3", datetime.date(2026, 3, 31)),
        _match("m4", datetime.date(2026, 4, 1)),
    ]
    window, selected = rankings.build_window(
        matches, StatsPeriod.FISCAL_YEAR, year=2025
    )
    assert [m.id for m in selected] == ["m2", "m3"]
    assert window.match_count == 2
    assert window.label == "2025年度"


# --- 規定打席 ---


def test_required_plate_appearances_uses_smaller_bound():
    stats = [
        _stat("a", plate_appearances=10),
        _stat("b", plate_appearances=20),
        _stat("c", plate_appearances=0),
    ]
    # 平均 15 x 0.7 = 10.5 -> 11；4 場 x 2.5 x 0.7 = 7
    assert rankings.required_plate_appearances(stats, match_count=4) == 7
    # 10 場 x 2.5 x 0.7 = 17.5 -> 18，平均打席的門檻較小
    assert rankings.required_plate_appearances(stats, match_count=10) == 11


def test_required_plate_appearances_is_at_least_one():
    assert rankings.required_plate_appearances([], match_count=0) == 1


def test_required_plate_appearances_avoids_float_error():
    """0.7 x 10 不應因浮點誤差被進位成 8。"""
    stats = [_stat("a", plate_appearances=10)]
    assert rankings.required_plate_appearances(stats, match_count=100) == 7


# --- 排行榜 ---


def test_rank_players_includes_ties_at_cutoff():
    """數值 [10, 10, 9, 8, 8, 7]：前五名含同分，名次為 1, 1, 3, 4, 4。"""
    stats = [
        _stat(pid, hits=value)
        for pid, value in zip("abcdef", [10, 10, 9, 8, 8, 7])
    ]
    entries = rankings.rank_players(stats, RankingCategory.HITS)

    assert [e.rank for e in entries] == [1, 1, 3, 4, 4]
    assert [e.value for e in entries] == [10, 10, 9, 8, 8]
    assert "f" not in {e.player_id for e in entries}


def test_rank_players_extends_past_size_on_tie():
    stats = [
        _stat(pid, rbis=value)
        for pid, value in zip("abcdefg", [9, 8, 7, 6, 5, 5, 4])
    ]
    entries = rankings.rank_players(stats, RankingCategory.RBIS)
    assert [e.rank for e in entries] == [1, 2, 3, 4, 5, 5]


def test_rank_players_excludes_zero_values():
    stats = [_stat("a", stolen_bases=2), _stat("b", stolen_bases=0)]
    entries = rankings.rank_players(stats, RankingCategory.STOLEN_BASES)
    assert [e.player_id for e in entries] == ["a"]


def test_rate_ranking_requires_plate_appearances():
    stats = [
        _stat("a", batting_average=0.6, plate_appearances=3),
        _stat("b", batting_average=0.4, plate_appearances=12),
        _stat("c", batting_average=0.35, plate_appearances=10),
    ]
    entries = rankings.rank_players(
        stats, RankingCategory.BATTING_AVERAGE, required_pa=10
    )
    assert [e.player_id for e in entries] == ["b", "c"]


def test_rate_ranking_ties_on_displayed_value():
    """比率以顯示到小數第 3 位的數值判定同分。"""
    stats = [
        _stat("a", ops=0.833, plate_appearances=10),
        _stat("b", ops=0.833, plate_appearances=10),
    ]
    entries = rankings.rank_players(stats, RankingCategory.OPS, required_pa=1)
    assert [e.rank for e in entries] == [1, 1]


def test_build_rankings_end_to_end(test_settings):
    def history(pid, hits, at_bats):
        return PlayerInningHistory(
            player_id=pid,
            innings=[
                AtBatRecord(inning_number=1, at_bats=at_bats, hits=hits, rbis=hits)
            ],
        )

    matches = [
        _match(
            "m1",
            datetime.date(2025, 5, 1),
            stats={"a": history("a", 2, 3), "b": history("b", 1, 3)},
        ),
        _match("m2", datetime.date(2025, 5, 8), stats={"a": history("a", 1, 3)}),
    ]

    required_pa, result = rankings.build_rankings(
        matches,
        categories=[RankingCategory.BATTING_AVERAGE, RankingCategory.HITS],
        settings=test_settings,
    )

    # 平均打席 (6 + 3) / 2 = 4.5 x 0.7 = 3.15 -> 4；2 場 x 2.5 x 0.7 = 3.5 -> 4
    assert required_pa == 4
    average, hits = result
    assert average.required_plate_appearances == 4
    assert [e.player_id for e in average.entries] == ["a"]
    assert average.entries[0].value == 0.5
    assert average.entries[0].display == ".500"
    assert hits.required_plate_appearances is None
    assert [(e.player_id, e.value) for e in hits.entries] == [("a", 3), ("b", 1)]
