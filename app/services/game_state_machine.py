# app/services/game_state_machine.py

import logging
from typing import List, Optional

from app.config import Settings, settings as default_settings
from app.core.constants import BASES_FOR_HIT, Outcome
from app.exceptions import InvalidStateError
from app.schemas import (
    AggregatedPlayerStat,
    AtBatRecord,
    InningStatus,
    Match,
    OutcomeResolution,
    Player,
    PlayerInningHistory,
)
from app.services import at_bat_records, inning_rules
from app.services.stats_calculator import aggregate
from app.utils.state_machine import (
    BaseOccupancy,
    advance_runners,
    describe_bases,
    empty_bases,
    place_on_base,
    remove_runner,
)

logger = logging.getLogger(__name__)


class MatchScorer:
    """
    單場比賽的記錄引擎。

    負責根據使用者選擇的打席結果，依序更新打席紀錄、各局壘包狀態，
    並把得分記到回到本壘的跑者身上。壘包狀態存放在 Match.runners
    (以局數為鍵)，與比賽一起保存，不使用任何全域狀態。
    """

    def __init__(self, match: Match, settings: Settings = default_settings):
        """
        Args:
            match (Match): 要記錄的比賽；所有操作都直接修改這個物件。
            settings (Settings): 比賽規則設定 (每局打席上限、出局數等)。
        """
        self.match = match
        self.settings = settings

    # --- 內部工具 ---

    def _member(self, player_id: str) -> Optional[Player]:
        return next((m for m in self.match.members if m.id == player_id), None)

    def _require_player(self, player_id: str) -> Optional[Player]:
        member = self._member(player_id)
        if member is None and player_id not in self.match.stats:
            raise InvalidStateError(
                message=f"Player '{player_id}' is not part of match '{self.match.id}'."
            )
        return member

    def _history(self, player_id: str) -> PlayerInningHistory:
        history = self.match.stats.get(player_id)
        if history is None:
            history = PlayerInningHistory(player_id=player_id)
            self.match.stats[player_id] = history
        return history

    def _drop_history_if_empty(self, player_id: str):
        history = self.match.stats.get(player_id)
        if history is not None and not history.innings and not history.is_substitute:
            del self.match.stats[player_id]

    def _bases(self, inning_number: int) -> BaseOccupancy:
        bases = self.match.runners.get(inning_number)
        return bases if bases is not None else empty_bases()

    def _set_bases(self, inning_number: int, bases: BaseOccupancy):
        self.match.runners[inning_number] = bases

    def _remove_from_all_bases(self, player_id: str):
        for inning_number in list(self.match.runners):
            self._set_bases(
                inning_number, remove_runner(self._bases(inning_number), player_id)
            )

    def _credit_run(self, runner_id: str, inning_number: int) -> bool:
        """
        把得分記到跑者在該局最後一個打席上。
        跑者在該局沒有任何打席紀錄時不新增紀錄，回傳 False。
        """
        records = at_bat_records.records_in_inning(
            self.match.stats.get(runner_id), inning_number
        )
        if not records:
            logger.warning(
                f"跑者 [{runner_id}] 在第 {inning_number} 局沒有打席紀錄，此分未記錄。"
            )
            return False
        records[-1].runs += 1
        return True

    def _check_slot(self, player_id: str, inning_number: int, at_bat_index: int):
        history = self.match.stats.get(player_id)
        sequence = at_bat_records.sequence_for_index(at_bat_index)
        if at_bat_records.find_record(history, inning_number, sequence):
            return

        expected = at_bat_records.next_sequence(history, inning_number)
        if sequence != expected:
            raise InvalidStateError(
                message=(
                    f"At-bat #{sequence} does not exist for player '{player_id}' "
                    f"in inning {inning_number}; the next available is #{expected}."
                )
            )
        if not inning_rules.can_add_at_bat(
            self.match.stats,
            inning_number,
            player_id,
            max_at_bats=self.settings.MAX_AT_BATS_PER_INNING,
            outs_per_inning=self.settings.OUTS_PER_INNING,
        ):
            raise InvalidStateError(
                message=(
                    f"Player '{player_id}' cannot take another at-bat in inning "
                    f"{inning_number}."
                )
            )

    # --- 打席結果 ---

    def record_outcome(
        self,
        player_id: str,
        inning_number: int,
        at_bat_index: int = 0,
        outcome: Optional[Outcome] = None,
        rbi: int = 0,
    ) -> OutcomeResolution:
        """
        記錄 (或清除) 一個打席結果，並處理壘包推進與跑者得分。

        流程：
        1. outcome 為空：清除紀錄，並把球員從該局壘包移除。
        2. 與該打席既有結果相同：只更新打點，壘包不再推進。
        3. 套用結果到打者紀錄，並移除打者在該局原本的壘包位置。
        4. 安打：先推進壘上跑者、記錄得分，再讓打者上壘；三壘打打者自己記 1 分。
        5. 失誤：三壘跑者得分，其餘跑者推進一個壘，打者上一壘。
        6. 其他結果：只更新打者的壘包位置。
        """
        member = self._require_player(player_id)

        if not outcome:
            return self._clear(player_id, inning_number, at_bat_index)

        self._check_slot(player_id, inning_number, at_bat_index)

        existing = at_bat_records.find_record(
            self.match.stats.get(player_id),
            inning_number,
            at_bat_records.sequence_for_index(at_bat_index),
        )
        if existing is not None and existing.outcome == outcome:
            # 重複選擇相同結果：壘包與跑者得分都已處理過，只更新打點
            at_bat_records.set_rbis(existing, rbi)
            logger.info(
                f"第 {inning_number} 局 [{player_id}] 第 {existing.at_bat_sequence} "
                f"打席結果未變 ({outcome.value})，僅更新打點為 {existing.rbis}。"
            )
            return OutcomeResolution(match=self.match, record=existing)

        history = self._history(player_id)
        record = at_bat_records.set_outcome(
            history,
            inning_number,
            at_bat_index,
            outcome,
            rbi,
            batting_order=member.batting_order if member else None,
        )

        bases = remove_runner(self._bases(inning_number), player_id)
        scorers: List[str] = []

        if outcome in BASES_FOR_HIT:
            bases, scorers = advance_runners(bases, BASES_FOR_HIT[outcome])
            bases = place_on_base(bases, player_id, outcome)
            if outcome == Outcome.TRIPLE:
                record.runs = 1
            if rbi > 0:
                record.rbis = rbi
        elif outcome == Outcome.ERROR:
            scorers = list(bases[3])
            bases = place_on_base(bases, player_id, outcome)
        else:
            bases = place_on_base(bases, player_id, outcome)

        dropped = [
            runner for runner in scorers if not self._credit_run(runner, inning_number)
        ]
        self._set_bases(inning_number, bases)

        logger.info(
            f"第 {inning_number} 局 [{player_id}] 第 {record.at_bat_sequence} 打席: "
            f"{outcome.value}，得分跑者 {scorers}，壘包狀態: {describe_bases(bases)}"
        )
        return OutcomeResolution(
            match=self.match,
            record=record,
            scored_runners=scorers,
            dropped_runs=dropped,
        )

    def _clear(
        self, player_id: str, inning_number: int, at_bat_index: int
    ) -> OutcomeResolution:
        history = self.match.stats.get(player_id)
        record = None
        if history is not None:
            record = at_bat_records.clear_outcome(history, inning_number, at_bat_index)
            self._drop_history_if_empty(player_id)

        self._set_bases(
            inning_number, remove_runner(self._bases(inning_number), player_id)
        )
        logger.info(
            f"已清除第 {inning_number} 局 [{player_id}] "
            f"第 {at_bat_records.sequence_for_index(at_bat_index)} 打席的結果。"
        )
        return OutcomeResolution(match=self.match, record=record)

    # --- 多打席管理 ---

    def add_at_bat(self, player_id: str, inning_number: int) -> AtBatRecord:
        """在該局為球員新增一個空打席。"""
        member = self._require_player(player_id)
        if not inning_rules.can_add_at_bat(
            self.match.stats,
            inning_number,
            player_id,
            max_at_bats=self.settings.MAX_AT_BATS_PER_INNING,
            outs_per_inning=self.settings.OUTS_PER_INNING,
        ):
            raise InvalidStateError(
                message=(
                    f"Player '{player_id}' cannot take another at-bat in inning "
                    f"{inning_number}."
                )
            )
        record = at_bat_records.add_empty_record(
            self._history(player_id),
            inning_number,
            batting_order=member.batting_order if member else None,
        )
        logger.info(
            f"第 {inning_number} 局 [{player_id}] 新增第 {record.at_bat_sequence} 打席。"
        )
        return record

    def remove_at_bat(self, player_id: str, inning_number: int, at_bat_index: int):
        """刪除指定打席；不可刪除該局唯一的打席，其餘打席不重新編號。"""
        self._require_player(player_id)
        history = self.match.stats.get(player_id)
        records = at_bat_records.records_in_inning(history, inning_number)
        if len(records) <= 1:
            raise InvalidStateError(
                message=(
                    "The only at-bat of an inning cannot be removed; "
                    "clear it instead."
                )
            )

        sequence = at_bat_records.sequence_for_index(at_bat_index)
        if not at_bat_records.remove_record(history, inning_number, sequence):
            raise InvalidStateError(
                message=f"At-bat #{sequence} does not exist in inning {inning_number}."
            )
        self._set_bases(
            inning_number, remove_runner(self._bases(inning_number), player_id)
        )
        logger.info(f"已刪除第 {inning_number} 局 [{player_id}] 第 {sequence} 打席。")

    def update_stolen_bases(
        self, player_id: str, inning_number: int, delta: int
    ) -> AtBatRecord:
        """調整球員在該局第一個打席的盜壘數，範圍限制在 0 ~ 上限之間。"""
        self._require_player(player_id)
        records = at_bat_records.records_in_inning(
            self.match.stats.get(player_id), inning_number
        )
        if not records:
            raise InvalidStateError(
                message=f"Player '{player_id}' has no at-bat in inning {inning_number}."
            )
        target = records[0]
        target.stolen_bases = max(
            0, min(self.settings.MAX_STOLEN_BASES, target.stolen_bases + delta)
        )
        return target

    # --- 代打管理 ---

    def substitutes(self) -> List[str]:
        return [pid for pid, h in self.match.stats.items() if h and h.is_substitute]

    def add_substitute(self, player_id: str) -> PlayerInningHistory:
        """把板凳球員登錄為代打；只設定旗標，不建立任何打席。"""
        member = self._member(player_id)
        if member is None:
            raise InvalidStateError(
                message=f"Player '{player_id}' is not part of match '{self.match.id}'."
            )
        if inning_rules.is_starter(member, self.settings.LINEUP_SIZE):
            raise InvalidStateError(
                message=f"Player '{player_id}' already holds a starting lineup slot."
            )
        history = self._history(player_id)
        history.is_substitute = True
        logger.info(f"已登錄代打 [{player_id}]。")
        return history

    def remove_substitute(self, player_id: str) -> int:
        """
        取消代打登錄，並刪除該球員在本場比賽的所有打席紀錄。
        回傳被刪除的打席數。
        """
        history = self.match.stats.get(player_id)
        if history is None or not history.is_substitute:
            raise InvalidStateError(
                message=f"Player '{player_id}' is not registered as a substitute."
            )
        removed = len(history.innings)
        del self.match.stats[player_id]
        self._remove_from_all_bases(player_id)
        logger.info(f"已取消代打 [{player_id}]，刪除 {removed} 個打席紀錄。")
        return removed

    # --- 查詢 ---

    def player_totals(self, player_id: str) -> AggregatedPlayerStat:
        member = self._require_player(player_id)
        history = self.match.stats.get(player_id) or PlayerInningHistory(
            player_id=player_id
        )
        return aggregate([history], name=member.name if member else None)

    def inning_status(self, inning_number: int) -> InningStatus:
        stats = self.match.stats
        lineup = inning_rules.starting_lineup(
            self.match.members, self.settings.LINEUP_SIZE
        )
        players = [m.id for m in lineup] + [
            pid for pid in self.substitutes() if pid not in {m.id for m in lineup}
        ]
        return InningStatus(
            inning_number=inning_number,
            outs=inning_rules.outs_in_inning(stats, inning_number),
            closed_batting_orders=inning_rules.closed_batting_orders(
                stats, inning_number, self.settings.LINEUP_SIZE
            ),
            can_add_at_bat={
                pid: inning_rules.can_add_at_bat(
                    stats,
                    inning_number,
                    pid,
                    max_at_bats=self.settings.MAX_AT_BATS_PER_INNING,
                    outs_per_inning=self.settings.OUTS_PER_INNING,
                )
                for pid in players
            },
            runners=self._bases(inning_number),
        )
