# app/crud/matches.py

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app import models
from app.schemas import BaseOccupancy, Match, Player, PlayerInningHistory

logger = logging.getLogger(__name__)


# --- 記憶體中的 map 與儲存用 JSON 物件之間的轉換 ---


def serialize_stats(stats: Dict[str, PlayerInningHistory]) -> Dict[str, Any]:
    """將 {player_id: PlayerInningHistory} 轉為可存入 JSON 欄位的純物件。"""
    return {
        player_id: history.model_dump(mode="json")
        for player_id, history in stats.items()
        if history is not None
    }


def deserialize_stats(raw: Optional[Dict[str, Any]]) -> Dict[str, PlayerInningHistory]:
    """
    由 JSON 物件還原逐局成績 map。
    缺少 innings 清單或欄位不合法的項目會被略過並記錄警告，不會中斷讀取。
    """
    stats: Dict[str, PlayerInningHistory] = {}
    for player_id, value in (raw or {}).items():
        if not isinstance(value, dict) or not isinstance(value.get("innings"), list):
            logger.warning(f"球員 [{player_id}] 的成績缺少 innings 清單，已略過。")
            continue
        try:
            history = PlayerInningHistory.model_validate(
                {**value, "player_id": value.get("player_id") or player_id}
            )
        except ValidationError as e:
            logger.warning(f"球員 [{player_id}] 的成績格式不正確，已略過: {e}")
            continue
        history.innings.sort(key=lambda r: (r.inning_number, r.at_bat_sequence))
        stats[player_id] = history
    return stats


def serialize_runners(runners: Dict[int, BaseOccupancy]) -> Dict[str, Any]:
    return {
        str(inning): {str(base): list(ids) for base, ids in bases.items()}
        for inning, bases in runners.items()
    }


def deserialize_runners(raw: Optional[Dict[str, Any]]) -> Dict[int, BaseOccupancy]:
    runners: Dict[int, BaseOccupancy] = {}
    for inning, bases in (raw or {}).items():
        try:
            runners[int(inning)] = {
                int(base): [str(pid) for pid in ids] for base, ids in bases.items()
            }
        except (TypeError, ValueError, AttributeError):
            logger.warning(f"第 {inning} 局的壘包資料格式不正確，已略過。")
    return runners


def _deserialize_members(raw: Optional[List[Any]]) -> List[Player]:
    members = []
    for item in raw or []:
        try:
            members.append(Player.model_validate(item))
        except ValidationError as e:
            logger.warning(f"出場名單中有格式不正確的球員資料，已略過: {e}")
    return members


def to_schema(row: models.MatchDB) -> Match:
    return Match(
        id=row.id,
        match_date=row.match_date,
        opponent=row.opponent,
        members=_deserialize_members(row.members),
        stats=deserialize_stats(row.stats),
        runners=deserialize_runners(row.runners),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# --- 查詢與寫入 ---


def load_match(db: Session, match_id: str) -> Optional[Match]:
    row = db.get(models.MatchDB, match_id)
    return to_schema(row) if row else None


def load_all_matches(db: Session) -> List[Match]:
    rows = (
        db.query(models.MatchDB)
        .order_by(models.MatchDB.match_date, models.MatchDB.id)
        .all()
    )
    return [to_schema(row) for row in rows]


def save_match(db: Session, match: Match) -> models.MatchDB:
    """
    新增或整筆覆寫一場比賽 (最後寫入者為準，不做欄位層級的合併)。

    注意：commit 操作由 service 層管理。
    """
    row = db.get(models.MatchDB, match.id)
    if row is None:
        row = models.MatchDB(id=match.id)
        db.add(row)

    row.match_date = match.match_date
    row.opponent = match.opponent
    row.members = [m.model_dump(mode="json") for m in match.members]
    row.stats = serialize_stats(match.stats)
    row.runners = serialize_runners(match.runners)
    db.flush()
    return row


def delete_match(db: Session, match_id: str) -> bool:
    row = db.get(models.MatchDB, match_id)
    if row is None:
        return False
    db.delete(row)
    db.flush()
    return True
