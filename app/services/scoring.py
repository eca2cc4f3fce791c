# app/services/scoring.py

import logging
import uuid
from typing import Callable, List, Tuple, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import schemas
from app.config import Settings
from app.crud import matches
from app.exceptions import MatchNotFoundException, StorageError
from app.services.game_state_machine import MatchScorer
from app.services.match_feed import ChangeFeed, match_feed
from app.utils.request_context import bind_match
from app.utils.state_machine import remove_runner

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScoringService:
    """
    比賽記錄的應用層服務。

    每個操作都遵循相同流程：讀取比賽 -> 交給 MatchScorer 計算 -> 整筆寫回 ->
    廣播最新快照。寫入失敗時不回滾記憶體中的計算結果，而是拋出帶有該結果的
    StorageError，由呼叫端決定是否重新讀取。
    """

    def __init__(self, db: Session, settings: Settings, feed: ChangeFeed = match_feed):
        self.db = db
        self.settings = settings
        self.feed = feed

    # --- 讀取 / 寫入 ---

    def get_match(self, match_id: str) -> schemas.Match:
        match = matches.load_match(self.db, match_id)
        if match is None:
            raise MatchNotFoundException(message=f"Match '{match_id}' not found.")
        return match

    def list_matches(self) -> List[schemas.Match]:
        return matches.load_all_matches(self.db)

    def _persist(self, match: schemas.Match) -> schemas.Match:
        try:
            row = matches.save_match(self.db, match)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"儲存比賽 [{match.id}] 時發生錯誤: {e}", exc_info=True)
            raise StorageError(match=match) from e

        self._publish()
        return matches.to_schema(row)

    def _publish(self):
        if self.feed.subscriber_count == 0 and self.feed.redis_client is None:
            return
        self.feed.publish(matches.load_all_matches(self.db))

    def _apply(
        self, match_id: str, operation: Callable[[MatchScorer], T]
    ) -> Tuple[schemas.Match, T]:
        """在綁定 match_id 的日誌上下文中執行一次記錄操作並寫回。"""
        with bind_match(match_id):
            match = self.get_match(match_id)
            result = operation(MatchScorer(match, self.settings))
            return self._persist(match), result

    # --- 比賽管理 ---

    def create_match(self, match_in: schemas.MatchCreate) -> schemas.Match:
        match = schemas.Match(
            id=match_in.id or uuid.uuid4().hex,
            match_date=match_in.match_date,
            opponent=match_in.opponent,
            members=match_in.members,
        )
        with bind_match(match.id):
            logger.info(
                f"建立新比賽: {match.match_date} vs {match.opponent}，"
                f"出場 {len(match.members)} 人。"
            )
            return self._persist(match)

    def update_members(
        self, match_id: str, members: List[schemas.Player]
    ) -> schemas.Match:
        """
        更新出場名單。被移出名單的球員，其本場成績與壘包位置一併刪除。
        """
        with bind_match(match_id):
            match = self.get_match(match_id)
            kept = {m.id for m in members}
            removed = [pid for pid in match.stats if pid not in kept]
            for player_id in removed:
                del match.stats[player_id]
                for inning_number, bases in list(match.runners.items()):
                    match.runners[inning_number] = remove_runner(bases, player_id)
            match.members = members
            if removed:
                logger.info(f"出場名單移除 {removed}，已刪除其本場成績。")
            return self._persist(match)

    def delete_match(self, match_id: str):
        with bind_match(match_id):
            try:
                deleted = matches.delete_match(self.db, match_id)
                if not deleted:
                    raise MatchNotFoundException(
                        message=f"Match '{match_id}' not found."
                    )
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"刪除比賽 [{match_id}] 時發生錯誤: {e}", exc_info=True)
                raise StorageError() from e
            logger.info("比賽已刪除。")
            self._publish()

    # --- 記錄操作 ---

    def record_outcome(
        self, match_id: str, request: schemas.RecordOutcomeRequest
    ) -> schemas.OutcomeResolution:
        saved, resolution = self._apply(
            match_id,
            lambda scorer: scorer.record_outcome(
                request.player_id,
                request.inning_number,
                at_bat_index=request.at_bat_index,
                outcome=request.outcome,
                rbi=request.rbi,
            ),
        )
        resolution.match = saved
        return resolution

    def add_at_bat(
        self, match_id: str, request: schemas.AddAtBatRequest
    ) -> schemas.Match:
        saved, _ = self._apply(
            match_id,
            lambda scorer: scorer.add_at_bat(request.player_id, request.inning_number),
        )
        return saved

    def remove_at_bat(
        self, match_id: str, player_id: str, inning_number: int, at_bat_index: int
    ) -> schemas.Match:
        saved, _ = self._apply(
            match_id,
            lambda scorer: scorer.remove_at_bat(player_id, inning_number, at_bat_index),
        )
        return saved

    def update_stolen_bases(
        self, match_id: str, request: schemas.StolenBasesRequest
    ) -> schemas.Match:
        saved, _ = self._apply(
            match_id,
            lambda scorer: scorer.update_stolen_bases(
                request.player_id, request.inning_number, request.delta
            ),
        )
        return saved

    def add_substitute(self, match_id: str, player_id: str) -> schemas.Match:
        saved, _ = self._apply(
            match_id, lambda scorer: scorer.add_substitute(player_id)
        )
        return saved

    def remove_substitute(self, match_id: str, player_id: str) -> schemas.Match:
        saved, _ = self._apply(
            match_id, lambda scorer: scorer.remove_substitute(player_id)
        )
        return saved

    # --- 查詢 ---

    def get_player_totals(
        self, match_id: str, player_id: str
    ) -> schemas.AggregatedPlayerStat:
        return MatchScorer(self.get_match(match_id), self.settings).player_totals(
            player_id
        )

    def get_inning_status(
        self, match_id: str, inning_number: int
    ) -> schemas.InningStatus:
        return MatchScorer(self.get_match(match_id), self.settings).inning_status(
            inning_number
        )
