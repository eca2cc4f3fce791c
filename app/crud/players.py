# app/crud/players.py

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app import models
from app.schemas import Player


def load_player(db: Session, player_id: str) -> Optional[Player]:
    row = db.get(models.PlayerDB, player_id)
    return Player.model_validate(row) if row else None


def load_all_players(db: Session) -> List[Player]:
    """
    取得全隊名單：先依打順 (未設定者排最後)，再依姓名排序。
    """
    rows = db.query(models.PlayerDB).all()
    players = [Player.model_validate(row) for row in rows]
    return sorted(
        players,
        key=lambda p: (p.batting_order is None, p.batting_order or 0, p.name),
    )


def save_player(db: Session, player: Player) -> models.PlayerDB:
    """
    新增或更新單一球員。注意：commit 操作由 service 層管理。
    """
    row = db.get(models.PlayerDB, player.id)
    if row is None:
        logging.info(f"為球員 [{player.name}] 建立新的名單紀錄...")
        row = models.PlayerDB(id=player.id)
        db.add(row)
    row.name = player.name
    row.batting_order = player.batting_order
    db.flush()
    return row


def delete_player(db: Session, player_id: str) -> bool:
    row = db.get(models.PlayerDB, player_id)
    if row is None:
        return False
    db.delete(row)
    db.flush()
    return True
