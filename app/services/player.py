# app/services/player.py

import logging
import uuid
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import schemas
from app.crud import players
from app.exceptions import PlayerNotFoundException, StorageError
from app.services.match_feed import ChangeFeed, player_feed

logger = logging.getLogger(__name__)


class RosterService:
    """全隊名單的管理；寫入成功後把最新名單廣播給訂閱者。"""

    def __init__(self, db: Session, feed: ChangeFeed = player_feed):
        self.db = db
        self.feed = feed

    def list_players(self) -> List[schemas.Player]:
        return players.load_all_players(self.db)

    def get_player(self, player_id: str) -> schemas.Player:
        player = players.load_player(self.db, player_id)
        if player is None:
            raise PlayerNotFoundException(message=f"Player '{player_id}' not found.")
        return player

    def _commit(self, action: str):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{action}時發生資料庫錯誤: {e}", exc_info=True)
            raise StorageError() from e
        self.feed.publish(players.load_all_players(self.db))

    def create_player(self, player_in: schemas.PlayerCreate) -> schemas.Player:
        player = schemas.Player(
            id=player_in.id or uuid.uuid4().hex,
            name=player_in.name,
            batting_order=player_in.batting_order,
        )
        players.save_player(self.db, player)
        self._commit(f"新增球員 [{player.name}] ")
        return player

    def update_player(
        self, player_id: str, player_in: schemas.PlayerUpdate
    ) -> schemas.Player:
        self.get_player(player_id)
        player = schemas.Player(id=player_id, **player_in.model_dump())
        players.save_player(self.db, player)
        self._commit(f"更新球員 [{player_id}] ")
        return player

    def delete_player(self, player_id: str):
        """
        從名單中刪除球員。已記錄在比賽中的出場名單與成績不受影響。
        """
        if not players.delete_player(self.db, player_id):
            raise PlayerNotFoundException(message=f"Player '{player_id}' not found.")
        self._commit(f"刪除球員 [{player_id}] ")
        logger.info(f"已從名單刪除球員 [{player_id}]。")
