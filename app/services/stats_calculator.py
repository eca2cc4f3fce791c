# app/services/stats_calculator.py

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from app.core.constants import COUNTER_FIELDS
from app.schemas import AggregatedPlayerStat, Match, Player, PlayerInningHistory
from app.services.at_bat_records import get_totals

logger = logging.getLogger(__name__)

DISPLAY_PRECISION = 3


def _safe_divide(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def plate_appearances(totals: Dict[str, int]) -> int:
    """打席 = 打數 + 四死球 + 犧牲飛球 + 犧牲短打"""
    return (
        totals.get("at_bats", 0)
        + totals.get("walks", 0)
        + totals.get("sacrifice_flies", 0)
        + totals.get("sacrifice_bunts", 0)
    )


def total_bases(totals: Dict[str, int]) -> int:
    """壘打數 = 安打 + 二壘打 + 2 x 三壘打 + 3 x 全壘打"""
    return (
        totals.get("hits", 0)
        + totals.get("doubles", 0)
        + 2 * totals.get("triples", 0)
        + 3 * totals.get("home_runs", 0)
    )


def calculate_rates(totals: Dict[str, int]) -> Dict[str, float]:
    """
    由累計數據計算比率型數據 (保留完整精度，顯示前再四捨五入)。

    - 打擊率 = 安打 / 打數
    - 長打率 = 壘打數 / 打數
    - 上壘率 = (安打 + 四死球) / (打數 + 四死球 + 犧牲飛球)
    - OPS = 長打率 + 上壘率
    分母為 0 時一律回傳 0。
    """
    at_bats = totals.get("at_bats", 0)
    hits = totals.get("hits", 0)
    walks = totals.get("walks", 0)

    batting_average = _safe_divide(hits, at_bats)
    slugging = _safe_divide(total_bases(totals), at_bats)
    on_base = _safe_divide(
        hits + walks, at_bats + walks + totals.get("sacrifice_flies", 0)
    )
    return {
        "batting_average": batting_average,
        "slugging_percentage": slugging,
        "on_base_percentage": on_base,
        "ops": slugging + on_base,
    }


def format_rate(value: float) -> str:
    """以棒球慣用格式顯示比率，例如 0.333 -> '.333'、1.25 -> '1.250'。"""
    text = f"{value:.{DISPLAY_PRECISION}f}"
    return text[1:] if text.startswith("0.") else text


def _is_valid_history(history) -> bool:
    return isinstance(history, PlayerInningHistory) and history.innings is not None


def sum_counters(histories: Iterable[PlayerInningHistory]) -> Dict[str, int]:
    totals = {field: 0 for field in COUNTER_FIELDS}
    for history in histories:
        for field, value in get_totals(history).items():
            totals[field] += value
    return totals


def aggregate(
    histories: Iterable[Optional[PlayerInningHistory]],
    player_id: Optional[str] = None,
    name: Optional[str] = None,
) -> AggregatedPlayerStat:
    """
    加總同一名球員在一場或多場比賽中的所有打席紀錄，並計算比率型數據。

    格式不正確的紀錄 (None 或缺少 innings) 會被略過並記錄警告。
    """
    valid: List[PlayerInningHistory] = []
    for history in histories:
        if not _is_valid_history(history):
            logger.warning(f"略過格式不正確的成績資料: {history!r}")
            continue
        valid.append(history)

    if player_id is None:
        player_id = valid[0].player_id if valid else ""

    totals = sum_counters(valid)
    rates = calculate_rates(totals)

    return AggregatedPlayerStat(
        player_id=player_id,
        name=name,
        games=sum(1 for h in valid if h.innings),
        **totals,
        plate_appearances=plate_appearances(totals),
        total_bases=total_bases(totals),
        **{key: round(value, DISPLAY_PRECISION) for key, value in rates.items()},
    )


def aggregate_matches(
    matches: Iterable[Match], roster: Optional[Iterable[Player]] = None
) -> List[AggregatedPlayerStat]:
    """
    將多場比賽的成績依球員合併計算。

    球員姓名優先取自比賽出場名單，其次取自全隊名單。
    回傳結果依出賽數由多到少排序。
    """
    histories_by_player: Dict[str, List[PlayerInningHistory]] = defaultdict(list)
    names: Dict[str, str] = {p.id: p.name for p in roster or []}

    for match in matches:
        member_names = {m.id: m.name for m in match.members}
        for player_id, history in match.stats.items():
            if not _is_valid_history(history):
                logger.warning(
                    f"比賽 [{match.id}] 中球員 [{player_id}] 的成績格式不正確，已略過。"
                )
                continue
            histories_by_player[player_id].append(history)
            if player_id in member_names:
                names[player_id] = member_names[player_id]

    results = [
        aggregate(histories, player_id=player_id, name=names.get(player_id))
        for player_id, histories in histories_by_player.items()
    ]
    results.sort(key=lambda s: (-s.games, s.name or "", s.player_id))
    return results
