# app/utils/state_machine.py

from typing import Dict, List, Optional, Tuple

from app.core.constants import BASES, BATTER_TO_FIRST, Outcome

BaseOccupancy = Dict[int, List[str]]


def empty_bases() -> BaseOccupancy:
    """壘上無人。"""
    return {base: [] for base in BASES}


def _copy_bases(bases: Optional[BaseOccupancy]) -> BaseOccupancy:
    copied = empty_bases()
    for base, runners in (bases or {}).items():
        copied[int(base)] = list(runners)
    return copied


def _add(runners: List[str], player_id: str):
    if player_id not in runners:
        runners.append(player_id)


def place_on_base(
    bases: Optional[BaseOccupancy], player_id: str, outcome: Outcome
) -> BaseOccupancy:
    """
    根據打者的結果，把打者放上壘包並回傳新的壘包狀態。

    - 一/二/三壘安打、四壞、觸身：打者上一壘
    - 失誤：二壘跑者上三壘、一壘跑者上二壘，打者獨佔一壘；
      三壘跑者已由呼叫端記為得分，因此離開壘包
    - 全壘打、出局、盜壘、犧牲打：壘包不變
    """
    runners = _copy_bases(bases)

    if outcome == Outcome.ERROR:
        return {
            1: [player_id],
            2: list(runners[1]),
            3: list(runners[2]),
        }
    if outcome in BATTER_TO_FIRST:
        _add(runners[1], player_id)
    return runners


def advance_runners(
    bases: Optional[BaseOccupancy], bases_gained: int
) -> Tuple[BaseOccupancy, List[str]]:
    """
    安打時推進壘上跑者，回傳 (新的壘包狀態, 依序得分的跑者)。

    由三壘往一壘處理，避免同一名跑者在一次推進中被移動兩次：
    - 三壘：推進 1 壘以上即得分
    - 二壘：推進 1~3 壘時上三壘，全壘打 (4) 得分
    - 一壘：推進 1 上二壘，推進 2 上三壘，推進 3 以上得分
    """
    runners = _copy_bases(bases)
    scored: List[str] = []
    if bases_gained < 1:
        return runners, scored

    scored.extend(runners[3])
    runners[3] = []

    for player_id in runners[2]:
        if bases_gained >= 4:
            scored.append(player_id)
        else:
            _add(runners[3], player_id)
    runners[2] = []

    for player_id in runners[1]:
        if bases_gained >= 3:
            scored.append(player_id)
        elif bases_gained == 2:
            _add(runners[3], player_id)
        else:
            _add(runners[2], player_id)
    runners[1] = []

    return runners, scored


def remove_runner(bases: Optional[BaseOccupancy], player_id: str) -> BaseOccupancy:
    """把球員從所有壘包上移除。"""
    runners = _copy_bases(bases)
    for base in BASES:
        runners[base] = [p for p in runners[base] if p != player_id]
    return runners


def describe_bases(bases: Optional[BaseOccupancy]) -> str:
    """輸出日誌用的壘包描述，例如 '一壘、三壘有人'。"""
    runners = _copy_bases(bases)
    occupied = [
        label
        for base, label in zip(BASES, ["一壘", "二壘", "三壘"])
        if runners[base]
    ]
    return "、".join(occupied) + "有人" if occupied else "壘上無人"
