# app/services/at_bat_records.py

"""
打席紀錄模型的操作：建立、覆寫、清除單一打席，以及加總球員的計數。

所有函式都直接修改傳入的 PlayerInningHistory，並維持 innings 依
(inning_number, at_bat_sequence) 排序。
"""

import logging
from typing import Dict, List, Optional

from app.core.constants import COUNTER_FIELDS, Outcome
from app.schemas import AtBatRecord, PlayerInningHistory

logger = logging.getLogger(__name__)

# 各結果在歸零後要設定的計數 (三壘打打者的得分在事件處理時才寫入)
OUTCOME_COUNTERS: Dict[Outcome, Dict[str, int]] = {
    Outcome.OUT: {"at_bats": 1},
    Outcome.OUT_RBI: {"at_bats": 1},
    Outcome.SINGLE: {"at_bats": 1, "hits": 1},
    Outcome.DOUBLE: {"at_bats": 1, "hits": 1, "doubles": 1},
    Outcome.TRIPLE: {"at_bats": 1, "hits": 1, "triples": 1},
    Outcome.HOMERUN: {"at_bats": 1, "hits": 1, "home_runs": 1, "runs": 1},
    Outcome.WALK: {"walks": 1},
    Outcome.DEAD_BALL: {"walks": 1, "dead_balls": 1},
    Outcome.STOLEN_BASE: {"stolen_bases": 1},
    Outcome.SACRIFICE_BUNT: {"sacrifice_bunts": 1},
    Outcome.SACRIFICE_FLY: {"sacrifice_flies": 1},
    Outcome.ERROR: {"errors_reached": 1},
}


def sequence_for_index(at_bat_index: int) -> int:
    return at_bat_index + 1


def sort_records(history: PlayerInningHistory):
    history.innings.sort(key=lambda r: (r.inning_number, r.at_bat_sequence))


def records_in_inning(
    history: Optional[PlayerInningHistory], inning_number: int
) -> List[AtBatRecord]:
    """回傳該球員在指定局數的所有打席，依打席序號排序。"""
    if history is None:
        return []
    return sorted(
        (r for r in history.innings if r.inning_number == inning_number),
        key=lambda r: r.at_bat_sequence,
    )


def find_record(
    history: Optional[PlayerInningHistory], inning_number: int, at_bat_sequence: int
) -> Optional[AtBatRecord]:
    for record in records_in_inning(history, inning_number):
        if record.at_bat_sequence == at_bat_sequence:
            return record
    return None


def next_sequence(history: Optional[PlayerInningHistory], inning_number: int) -> int:
    records = records_in_inning(history, inning_number)
    return max((r.at_bat_sequence for r in records), default=0) + 1


def reset_counters(record: AtBatRecord):
    for field in COUNTER_FIELDS:
        setattr(record, field, 0)
    record.outcome = None


def apply_outcome(record: AtBatRecord, outcome: Outcome, rbi: int = 0) -> AtBatRecord:
    """將紀錄歸零，再套用單一結果的計數，最後寫入打點。"""
    reset_counters(record)
    record.outcome = outcome
    for field, value in OUTCOME_COUNTERS[outcome].items():
        setattr(record, field, value)
    return set_rbis(record, rbi)


def set_rbis(record: AtBatRecord, rbi: int = 0) -> AtBatRecord:
    """只更新打點；打點出局至少記 1 分。"""
    if record.outcome == Outcome.OUT_RBI:
        record.rbis = max(rbi, 1)
    else:
        record.rbis = rbi
    return record


def add_empty_record(
    history: PlayerInningHistory,
    inning_number: int,
    batting_order: Optional[int] = None,
) -> AtBatRecord:
    """在該局新增一個尚未選擇結果的打席。"""
    record = AtBatRecord(
        inning_number=inning_number,
        at_bat_sequence=next_sequence(history, inning_number),
        batting_order=batting_order,
    )
    history.innings.append(record)
    sort_records(history)
    return record


def set_outcome(
    history: PlayerInningHistory,
    inning_number: int,
    at_bat_index: int,
    outcome: Outcome,
    rbi: int = 0,
    batting_order: Optional[int] = None,
) -> AtBatRecord:
    """
    覆寫 (或建立) 指定局數、指定打席索引的紀錄。

    索引對應的打席序號為 at_bat_index + 1；刪除打席不會重新編號，
    因此一律以序號尋找紀錄。
    """
    sequence = sequence_for_index(at_bat_index)
    record = find_record(history, inning_number, sequence)
    if record is None:
        record = AtBatRecord(
            inning_number=inning_number,
            at_bat_sequence=sequence,
            batting_order=batting_order,
        )
        history.innings.append(record)
        sort_records(history)
    return apply_outcome(record, outcome, rbi)


def remove_record(
    history: PlayerInningHistory, inning_number: int, at_bat_sequence: int
) -> bool:
    before = len(history.innings)
    history.innings = [
        r
        for r in history.innings
        if not (
            r.inning_number == inning_number and r.at_bat_sequence == at_bat_sequence
        )
    ]
    return len(history.innings) < before


def clear_outcome(
    history: PlayerInningHistory, inning_number: int, at_bat_index: int
) -> Optional[AtBatRecord]:
    """
    清除打席結果。

    該局第一個打席在後面還有打席時，保留打席位置並將計數歸零，回傳該空打席；
    其他情況 (唯一的打席或之後的打席) 整筆紀錄移除並回傳 None。
    """
    sequence = sequence_for_index(at_bat_index)
    record = find_record(history, inning_number, sequence)
    if record is None:
        return None

    records = records_in_inning(history, inning_number)
    if len(records) <= 1 or sequence > records[0].at_bat_sequence:
        remove_record(history, inning_number, sequence)
        return None

    reset_counters(record)
    return record


def get_totals(history: Optional[PlayerInningHistory]) -> Dict[str, int]:
    """加總球員所有打席的各項計數。"""
    totals = {field: 0 for field in COUNTER_FIELDS}
    if history is None:
        return totals
    for record in history.innings:
        for field in COUNTER_FIELDS:
            totals[field] += getattr(record, field, 0) or 0
    return totals
