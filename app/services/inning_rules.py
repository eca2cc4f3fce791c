# app/services/inning_rules.py

"""
同一局多打席與出局數的判定規則。

這些函式只讀取比賽的逐局成績，不做任何修改；由 MatchScorer 在
記錄之前呼叫，以決定操作是否合法。
"""

from typing import Dict, Iterable, List, Optional

from app.config import settings
from app.schemas import AtBatRecord, Player, PlayerInningHistory
from app.services.at_bat_records import records_in_inning

StatsMap = Dict[str, PlayerInningHistory]


def _records_of_inning(stats: StatsMap, inning_number: int) -> Iterable[AtBatRecord]:
    for history in stats.values():
        if history is None:
            continue
        for record in history.innings:
            if record.inning_number == inning_number:
                yield record


def outs_from_record(record: AtBatRecord) -> int:
    """打數中沒有安打的部分記為出局，犧牲短打與犧牲飛球也各算一個出局。"""
    outs = 0
    if record.at_bats > 0 and record.hits == 0:
        outs += record.at_bats
    outs += record.sacrifice_bunts
    outs += record.sacrifice_flies
    return outs


def outs_in_inning(stats: StatsMap, inning_number: int) -> int:
    return sum(outs_from_record(r) for r in _records_of_inning(stats, inning_number))


def is_starter(player: Optional[Player], lineup_size: Optional[int] = None) -> bool:
    lineup_size = lineup_size or settings.LINEUP_SIZE
    return bool(
        player
        and player.batting_order
        and 1 <= player.batting_order <= lineup_size
    )


def starting_lineup(
    members: List[Player], lineup_size: Optional[int] = None
) -> List[Player]:
    """打順 1~9 的先發球員，依打順排序。"""
    starters = [m for m in members if is_starter(m, lineup_size)]
    return sorted(starters, key=lambda m: m.batting_order)


def can_add_at_bat(
    stats: StatsMap,
    inning_number: int,
    player_id: str,
    max_at_bats: Optional[int] = None,
    outs_per_inning: Optional[int] = None,
) -> bool:
    """
    判斷該球員在該局是否還能新增一個打席：
    1. 該局打席數未達上限 (預設 3)
    2. 最後一個打席已選擇結果
    3. 該局尚未三出局
    """
    max_at_bats = max_at_bats or settings.MAX_AT_BATS_PER_INNING
    outs_per_inning = outs_per_inning or settings.OUTS_PER_INNING

    records = records_in_inning(stats.get(player_id), inning_number)
    if len(records) >= max_at_bats:
        return False
    if records and records[-1].outcome is None:
        return False
    return outs_in_inning(stats, inning_number) < outs_per_inning


def is_batting_slot_closed(
    stats: StatsMap,
    inning_number: int,
    batting_order: Optional[int],
    outs_per_inning: Optional[int] = None,
    lineup_size: Optional[int] = None,
) -> bool:
    """
    三出局後，該局還沒輪到的打順就關閉 (畫面上反灰)。
    代打與板凳球員 (打順未設定或 10 以上) 不受此限制。
    """
    outs_per_inning = outs_per_inning or settings.OUTS_PER_INNING
    lineup_size = lineup_size or settings.LINEUP_SIZE

    if not batting_order or not 1 <= batting_order <= lineup_size:
        return False
    if outs_in_inning(stats, inning_number) < outs_per_inning:
        return False

    batted_orders = {
        r.batting_order for r in _records_of_inning(stats, inning_number)
    }
    return batting_order not in batted_orders


def closed_batting_orders(
    stats: StatsMap, inning_number: int, lineup_size: Optional[int] = None
) -> List[int]:
    lineup_size = lineup_size or settings.LINEUP_SIZE
    return [
        order
        for order in range(1, lineup_size + 1)
        if is_batting_slot_closed(
            stats, inning_number, order, lineup_size=lineup_size
        )
    ]
